"""Model backends consumed by the analysis core."""

from .base import (
    ClassifierBackend,
    EmbeddingBackend,
    GenerationBackend,
    get_classifier_backend,
    get_embedding_backend,
    get_generation_backend,
)

__all__ = [
    "ClassifierBackend",
    "EmbeddingBackend",
    "GenerationBackend",
    "get_classifier_backend",
    "get_embedding_backend",
    "get_generation_backend",
]
