"""Abstract model backends and factory functions."""

from abc import ABC, abstractmethod
from typing import Any


class EmbeddingBackend(ABC):
    """Text -> embedding. May return a pooled vector or a token matrix."""

    @abstractmethod
    def embed(self, text: str) -> Any:
        """Embed one text. Must be deterministic for identical input."""


class ClassifierBackend(ABC):
    """Text -> label distribution."""

    @property
    @abstractmethod
    def model_id(self) -> str:
        """Model identity, used to pick a label mapping table."""

    @abstractmethod
    def classify(self, text: str, top_k: int = 3) -> list[dict[str, Any]]:
        """Return ``[{"label": str, "score": float}, ...]``."""


class GenerationBackend(ABC):
    """Prompt -> generated text."""

    @abstractmethod
    def generate(self, prompt: str, **options: Any) -> Any:
        """Generate text. Options: max_new_tokens, temperature, ..."""


def get_embedding_backend(config: dict[str, Any]) -> EmbeddingBackend:
    """Factory: return the embedding backend for config."""
    from .embedding import SentenceTransformerEmbedding
    return SentenceTransformerEmbedding(
        config.get("embedding_model", "sentence-transformers/all-MiniLM-L6-v2"),
        token_embeddings=config.get("embedding_token_pooling", False),
    )


def get_classifier_backend(config: dict[str, Any]) -> ClassifierBackend | None:
    """Factory: return the sentiment classifier, or None when disabled."""
    model = config.get("sentiment_model")
    if not model:
        return None
    from .classifier import TransformersSentimentClassifier
    return TransformersSentimentClassifier(model)


def get_generation_backend(config: dict[str, Any]) -> GenerationBackend | None:
    """Factory: return the generation backend, or None when disabled."""
    gen_cfg = config.get("generation", {})
    backend = gen_cfg.get("backend", "claude")

    if backend == "none":
        return None
    elif backend == "claude":
        from .generation import ClaudeGenerator
        return ClaudeGenerator(
            api_key=config.get("claude_api_key"),
            model=gen_cfg.get("claude_model", "claude-sonnet-4-20250514"),
        )
    elif backend == "transformers":
        from .generation import TransformersGenerator
        return TransformersGenerator(gen_cfg.get("local_model", "MBZUAI/LaMini-Flan-T5-77M"))
    else:
        raise ValueError(f"Unknown generation backend: {backend}")
