"""Generation-backed theme naming and entry tagging."""

import logging
import re
from typing import Any

from ..backends.base import GenerationBackend
from .parsing import extract_generated_text, parse_json_response, parse_label, sanitize_tags
from .prompts import LABEL_PROMPT, TAG_PROMPT, format_evidence

logger = logging.getLogger(__name__)

LABEL_OPTIONS = {"max_new_tokens": 12, "temperature": 0.0}
TAG_OPTIONS = {"max_new_tokens": 96, "temperature": 0.0}
STRICT_OPTIONS = {
    "min_new_tokens": 12,
    "num_beams": 4,
    "do_sample": False,
    "repetition_penalty": 1.15,
    "length_penalty": 0.9,
}

_STOPWORDS = {
    "the", "a", "an", "and", "or", "but", "to", "of", "in", "on", "for", "with", "my", "our",
    "your", "their", "is", "are", "was", "were", "be", "been", "am", "i", "it", "this", "that",
    "these", "those", "at", "from", "as", "by", "about", "into", "over", "after", "before",
    "up", "down",
}


def normalize_evidence(evidence: Any) -> list[str]:
    """Accept a list of sentences, a blank-line separated string, or an entry dict."""
    if isinstance(evidence, (list, tuple)):
        return [str(e) for e in evidence if e]
    if isinstance(evidence, str):
        return [s.strip() for s in re.split(r"\n{2,}", evidence) if s.strip()]
    if isinstance(evidence, dict):
        text = evidence.get("response") or evidence.get("text") or evidence.get("content") or ""
        return [str(text)] if text else []
    return []


def infer_label_from_sentences(sentences: list[str]) -> str:
    """Up to three most frequent non-stopword words of the first two sentences."""
    text = " ".join(sentences[:2]).lower()
    freq: dict[str, int] = {}
    for w in re.findall(r"[a-z][a-z'-]{1,}", text):
        if w not in _STOPWORDS:
            freq[w] = freq.get(w, 0) + 1
    top = sorted(freq.items(), key=lambda kv: kv[1], reverse=True)[:3]
    return " ".join(w for w, _ in top) or "theme"


class ThemeNamer:
    """Names themes and tags entries using a generation backend.

    Generation errors propagate from ``generate_text``; callers that treat
    naming as optional catch them.
    """

    def __init__(self, generator: GenerationBackend, fallback: GenerationBackend | None = None):
        self.generator = generator
        self.fallback = fallback

    def generate_text(self, prompt: str, generator: GenerationBackend | None = None, **options: Any) -> str:
        output = (generator or self.generator).generate(prompt, **options)
        return extract_generated_text(output).strip()

    def generate_json_text(self, prompt: str) -> str:
        """Generate text meant to hold JSON, retrying when the model returns nothing."""
        text = self.generate_text(prompt, **TAG_OPTIONS)
        if not text:
            text = self.generate_text(prompt, **TAG_OPTIONS, **STRICT_OPTIONS)
        if not text and self.fallback is not None:
            logger.info("Empty generation; retrying with fallback model")
            text = self.generate_text(prompt, generator=self.fallback, **TAG_OPTIONS, **STRICT_OPTIONS)
        return text

    def label_theme(self, evidence: Any) -> dict[str, str | None]:
        """Short label for a theme seeded by the evidence sentences.

        Returns ``{"label", "alias", "description"}``; label is None when
        the output was empty or generic.
        """
        sentences = normalize_evidence(evidence)[:3]
        prompt = LABEL_PROMPT.format(evidence=format_evidence(sentences))
        text = self.generate_text(prompt, **LABEL_OPTIONS)
        name = parse_label(text)
        if not name["label"]:
            logger.warning(f"Empty or generic theme label from model: {text[:40]!r}")
        return name

    def tag_entry(self, evidence: Any) -> tuple[list[str], dict[str, str]]:
        """Short topic tags for an entry, with optional per-tag rationales."""
        sentences = normalize_evidence(evidence)[:4]
        prompt = TAG_PROMPT.format(evidence=format_evidence(sentences))
        parsed = parse_json_response(self.generate_json_text(prompt))
        tags = sanitize_tags(parsed)
        rationales = {}
        if isinstance(parsed, dict) and isinstance(parsed.get("rationales"), dict):
            rationales = {str(k): str(v) for k, v in parsed["rationales"].items()}
        return tags, rationales
