"""Extractive summaries and facet scoring."""

from .facets import FacetScorer
from .summarizer import clamp_to_chars, summarize_vectors

__all__ = ["FacetScorer", "clamp_to_chars", "summarize_vectors"]
