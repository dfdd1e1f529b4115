"""Sentence embedding using sentence-transformers."""

from typing import Any

from .base import EmbeddingBackend


class SentenceTransformerEmbedding(EmbeddingBackend):
    """Embeds text with a sentence-transformers model.

    With ``token_embeddings=True`` the raw token matrix is returned and
    pooling is left to the adapter.
    """

    def __init__(self, model_name: str = "sentence-transformers/all-MiniLM-L6-v2", token_embeddings: bool = False):
        self.model_name = model_name
        self.token_embeddings = token_embeddings
        self._model = None

    @property
    def model(self):
        """Lazy-load the embedding model."""
        if self._model is None:
            from sentence_transformers import SentenceTransformer
            self._model = SentenceTransformer(self.model_name)
        return self._model

    def embed(self, text: str) -> Any:
        if self.token_embeddings:
            return self.model.encode(text, output_value="token_embeddings").cpu().numpy()
        return self.model.encode(text)
