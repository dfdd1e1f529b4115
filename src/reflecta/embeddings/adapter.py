"""Embedding adapter: pooling of backend output and the anchor-vector cache."""

import logging
from typing import Any, Sequence

import numpy as np

from ..backends.base import EmbeddingBackend
from ..errors import BackendUnavailableError
from ..ingest.segmenter import split_sentences
from ..models import EntryVectors, SentenceVector
from .vectors import cosine, mean_vector, normalize, normalize01

logger = logging.getLogger(__name__)


def pool_embedding(output: Any) -> np.ndarray:
    """Reduce raw embedding output to one vector.

    Accepts a pooled vector, a (tokens x dims) matrix, a (1 x tokens x
    dims) batch, a ragged nested list of token vectors, or an object
    exposing flat ``data`` plus ``dims``. Anything else yields an empty
    vector, which compares as zero similarity to everything.
    """
    if output is None:
        logger.warning("Embedding backend returned nothing")
        return np.zeros(0)

    # Flat buffer + shape, e.g. a tensor proxy
    data, dims = getattr(output, "data", None), getattr(output, "dims", None)
    if data is not None and dims is not None and len(dims) >= 3:
        n_tokens, dim = int(dims[-2]), int(dims[-1])
        flat = np.asarray(data, dtype=float).reshape(-1)[: n_tokens * dim]
        return flat.reshape(n_tokens, dim).mean(axis=0)

    # Torch tensors
    if hasattr(output, "detach"):
        output = output.detach().cpu().numpy()

    try:
        arr = np.asarray(output, dtype=float)
    except (TypeError, ValueError):
        return _mean_pool_ragged(output)

    if arr.ndim == 1:
        return arr
    if arr.ndim == 2:
        if arr.shape[0] == 0:
            return np.zeros(0)
        return arr.mean(axis=0)
    if arr.ndim == 3 and arr.shape[0] == 1:
        return arr[0].mean(axis=0)

    logger.warning(f"Unrecognized embedding output shape: {arr.shape}")
    return np.zeros(0)


def _mean_pool_ragged(rows: Any) -> np.ndarray:
    """Mean over token rows, skipping rows whose width differs from the first."""
    if not isinstance(rows, (list, tuple)) or not rows or not isinstance(rows[0], (list, tuple)):
        logger.warning(f"Unrecognized embedding output type: {type(rows).__name__}")
        return np.zeros(0)
    dims = len(rows[0])
    kept = [r for r in rows if isinstance(r, (list, tuple)) and len(r) == dims]
    return np.asarray(kept, dtype=float).mean(axis=0)


class EmbeddingAdapter:
    """Wraps an embedding backend with pooling and an anchor cache.

    Anchor vectors are computed once per key and kept until ``reset()``.
    """

    def __init__(self, backend: EmbeddingBackend | None):
        self.backend = backend
        self._anchor_cache: dict[str, list[np.ndarray]] = {}
        self._centroid_cache: dict[str, np.ndarray] = {}

    @property
    def available(self) -> bool:
        return self.backend is not None

    def reset(self) -> None:
        """Drop cached anchor vectors."""
        self._anchor_cache.clear()
        self._centroid_cache.clear()

    def embed_mean(self, text: str) -> np.ndarray:
        """Embed ``text`` and pool it to a single vector."""
        if self.backend is None:
            raise BackendUnavailableError("embedding", "no embedding backend configured")
        try:
            output = self.backend.embed(text)
        except (ImportError, OSError) as e:
            raise BackendUnavailableError("embedding", str(e)) from e
        return pool_embedding(output)

    def anchor_vectors(self, key: str, phrases: Sequence[str]) -> list[np.ndarray]:
        """Embedded anchor phrases for ``key``, cached."""
        if key not in self._anchor_cache:
            self._anchor_cache[key] = [self.embed_mean(p) for p in phrases]
        return self._anchor_cache[key]

    def anchor_centroid(self, key: str, phrases: Sequence[str]) -> np.ndarray:
        """Normalized mean of the anchor vectors for ``key``, cached."""
        if key not in self._centroid_cache:
            self._centroid_cache[key] = normalize(mean_vector(self.anchor_vectors(key, phrases)))
        return self._centroid_cache[key]

    def embed_entry(self, text: str) -> EntryVectors:
        """Segment, embed every sentence, and compute centroid and salience."""
        sentences = split_sentences(text)
        vectors = [self.embed_mean(s) for s in sentences]
        return build_entry_vectors(sentences, vectors)


def build_entry_vectors(sentences: Sequence[str], vectors: Sequence) -> EntryVectors:
    """Assemble sentence vectors with salience = min-max scaled cosine to the centroid."""
    centroid = mean_vector(vectors)
    saliences = normalize01([cosine(v, centroid) for v in vectors])
    return EntryVectors(
        sentences=[
            SentenceVector(index=i, text=s, vector=np.asarray(v, dtype=float), salience=sal)
            for i, (s, v, sal) in enumerate(zip(sentences, vectors, saliences))
        ],
        centroid=centroid,
    )
