"""Theme clustering and entry relevance."""

from .relationships import rank_related, score_relevance
from .themes import ThemeEngine

__all__ = ["ThemeEngine", "rank_related", "score_relevance"]
