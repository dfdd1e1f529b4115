"""Relevance between journal entries from their whole-entry embeddings."""

import logging
from typing import Any

from ..embeddings.vectors import cosine
from ..models import Relationship

logger = logging.getLogger(__name__)


def _embedding_of(entry: Any) -> list[float] | None:
    if isinstance(entry, dict):
        value = entry.get("embedding")
    else:
        value = getattr(entry, "embedding", entry)
    if value is None or not len(value):
        return None
    return value


def score_relevance(entry_a: Any, entry_b: Any) -> float:
    """Plain cosine of two precomputed entry embeddings.

    Entries may be raw vectors, dicts with an ``embedding`` key, or
    objects with an ``embedding`` attribute. Missing embeddings score 0.
    """
    a, b = _embedding_of(entry_a), _embedding_of(entry_b)
    if a is None or b is None:
        logger.warning("Missing or invalid embeddings; relevance is 0")
        return 0.0
    return cosine(a, b)


def rank_related(new_entry: dict[str, Any], past_entries: list[dict[str, Any]], top_n: int = 3) -> list[Relationship]:
    """Past entries most relevant to ``new_entry``, best first."""
    relationships = [
        Relationship(
            entry_a=new_entry.get("id", ""),
            entry_b=past.get("id", ""),
            score=score_relevance(new_entry, past),
        )
        for past in past_entries
        if past.get("id") != new_entry.get("id")
    ]
    relationships.sort(key=lambda r: r.score, reverse=True)
    return relationships[:top_n]
