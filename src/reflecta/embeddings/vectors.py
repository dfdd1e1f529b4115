"""Small vector helpers shared by the summarizer, facet scorer, themes and sentiment."""

from typing import Sequence

import numpy as np


def as_vector(v) -> np.ndarray:
    """Coerce a list/array to a flat float vector (empty stays empty)."""
    if v is None:
        return np.zeros(0)
    return np.asarray(v, dtype=float).reshape(-1)


def cosine(a, b) -> float:
    """Cosine similarity; 0 for empty or zero-norm vectors.

    Vectors of different length are compared over their common prefix.
    """
    a, b = as_vector(a), as_vector(b)
    n = min(len(a), len(b))
    if n == 0:
        return 0.0
    a, b = a[:n], b[:n]
    na, nb = float(np.dot(a, a)), float(np.dot(b, b))
    if na == 0.0 or nb == 0.0:
        return 0.0
    return float(np.dot(a, b) / (np.sqrt(na) * np.sqrt(nb)))


def normalize(v) -> np.ndarray:
    """L2-normalize; a zero vector is returned unchanged."""
    v = as_vector(v)
    norm = float(np.linalg.norm(v))
    if norm == 0.0:
        return v
    return v / norm


def mean_vector(vectors: Sequence) -> np.ndarray:
    """Mean of the vectors sharing the first non-empty vector's dimension."""
    arrays = [as_vector(v) for v in vectors]
    arrays = [a for a in arrays if len(a)]
    if not arrays:
        return np.zeros(0)
    dims = len(arrays[0])
    same = [a for a in arrays if len(a) == dims]
    return np.mean(np.stack(same), axis=0)


def weighted_sum(vectors: Sequence, weights: Sequence[float]) -> np.ndarray:
    arrays = [as_vector(v) for v in vectors]
    dims = min((len(a) for a in arrays), default=0)
    acc = np.zeros(dims)
    for a, w in zip(arrays, weights):
        acc += a[:dims] * w
    return acc


def softmax(scores: Sequence[float], beta: float = 1.0) -> list[float]:
    """Softmax of ``beta * scores`` (numerically stable)."""
    if not len(scores):
        return []
    x = np.asarray(scores, dtype=float) * beta
    e = np.exp(x - x.max())
    return (e / e.sum()).tolist()


def clamp01(x: float) -> float:
    return max(0.0, min(1.0, float(x)))


def normalize01(values: Sequence[float]) -> list[float]:
    """Min-max scale to [0, 1]; all-equal values map to 0.5."""
    if not len(values):
        return []
    lo, hi = min(values), max(values)
    if hi - lo < 1e-9:
        return [0.5] * len(values)
    return [(v - lo) / (hi - lo) for v in values]


def argmax(values: Sequence[float]) -> int:
    """Index of the largest value; ties go to the first occurrence."""
    best_i, best = 0, float("-inf")
    for i, v in enumerate(values):
        if v > best:
            best, best_i = v, i
    return best_i
