"""Embedding adapter and vector math."""

from .adapter import EmbeddingAdapter, build_entry_vectors, pool_embedding
from .vectors import cosine, normalize

__all__ = ["EmbeddingAdapter", "build_entry_vectors", "cosine", "normalize", "pool_embedding"]
