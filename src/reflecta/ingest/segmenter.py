"""Sentence segmentation for journal entries."""

import re

# Sentence-ending punctuation, whitespace, then a capital or an opening quote/paren
_BOUNDARY = re.compile(r"(?<=[.?!])\s+(?=[A-Z(“\"'])")
_WHITESPACE = re.compile(r"\s+")


def normalize_whitespace(text: str) -> str:
    """Collapse runs of whitespace to single spaces and trim."""
    return _WHITESPACE.sub(" ", text or "").strip()


def split_sentences(text: str) -> list[str]:
    """Split text into trimmed sentences.

    Falls back to the whole (normalized) text as one sentence when no
    boundary is found, so the result is never empty.
    """
    cleaned = normalize_whitespace(text)
    sentences = [s.strip() for s in _BOUNDARY.split(cleaned)]
    sentences = [s for s in sentences if s]
    return sentences or [cleaned]


def word_tokens(text: str) -> list[str]:
    return re.findall(r"\w+", text or "")
