"""Extractive summaries: one central sentence, plus an optional diverse second one."""

from typing import Any

from ..embeddings.vectors import argmax, cosine
from ..models import EntryVectors

CLAUSE_PUNCTUATION = ",;:"
SOFT_CUT_RATIO = 0.6


def clamp_to_chars(text: str, max_chars: int) -> str:
    """Fit ``text`` into ``max_chars``.

    Prefers cutting at the last clause separator in the final 40% of the
    budget; otherwise hard-truncates.
    """
    if len(text) <= max_chars:
        return text
    window = text[:max_chars]
    cut = max(window.rfind(p) for p in CLAUSE_PUNCTUATION)
    if cut >= max_chars * SOFT_CUT_RATIO:
        soft = window[:cut].strip()
        if soft:
            return soft
    return window.strip()


def relevance_scores(entry: EntryVectors, position_bonus: float) -> list[float]:
    """Cosine to the entry centroid plus a bonus fading to 0 at the last sentence."""
    n = len(entry)
    scores = []
    for i, sent in enumerate(entry.sentences):
        decay = 1.0 - i / (n - 1) if n > 1 else 1.0
        scores.append(cosine(sent.vector, entry.centroid) + position_bonus * decay)
    return scores


def pick_sentences(
    entry: EntryVectors,
    allow_two_sentences: bool = True,
    mmr_lambda: float = 0.75,
    position_bonus: float = 0.03,
) -> tuple[int, list[int]]:
    """The first pick, and all chosen indices in chronological order."""
    relevance = relevance_scores(entry, position_bonus)
    first = argmax(relevance)
    chosen = [first]

    if allow_two_sentences and len(entry) > 1:
        first_vec = entry.sentences[first].vector
        best_idx, best = -1, float("-inf")
        for i, sent in enumerate(entry.sentences):
            if i == first:
                continue
            mmr = mmr_lambda * relevance[i] - (1 - mmr_lambda) * cosine(sent.vector, first_vec)
            if mmr > best:
                best, best_idx = mmr, i
        if best_idx != -1:
            chosen.append(best_idx)
            chosen.sort()

    return first, chosen


def summarize_vectors(entry: EntryVectors, options: dict[str, Any] | None = None) -> tuple[str, str]:
    """Build the summary text for an embedded entry.

    Returns ``(text, method)`` where method is ``"extractive"`` or
    ``"extractive+mmr"`` depending on how many sentences fit.
    """
    opts = options or {}
    max_chars = int(opts.get("max_chars", 220))

    if not len(entry):
        return "", "empty"

    first, chosen = pick_sentences(
        entry,
        allow_two_sentences=opts.get("allow_two_sentences", True),
        mmr_lambda=opts.get("mmr_lambda", 0.75),
        position_bonus=opts.get("position_bonus", 0.03),
    )

    out, used = "", 0
    for idx in chosen:
        sentence = entry.sentences[idx].text.strip()
        if not sentence:
            continue
        candidate = f"{out} {sentence}" if out else sentence
        if len(candidate) > max_chars:
            break
        out, used = candidate, used + 1

    if not out:
        out, used = clamp_to_chars(entry.sentences[first].text, max_chars), 1

    return out, "extractive+mmr" if used == 2 else "extractive"
