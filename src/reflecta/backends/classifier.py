"""Sentiment classification using a transformers text-classification pipeline."""

from typing import Any

from .base import ClassifierBackend


class TransformersSentimentClassifier(ClassifierBackend):
    """Wraps ``transformers.pipeline("text-classification")``."""

    def __init__(self, model_name: str = "distilbert-base-uncased-finetuned-sst-2-english"):
        self.model_name = model_name
        self._pipeline = None

    @property
    def model_id(self) -> str:
        return self.model_name

    @property
    def pipeline(self):
        """Lazy-load the classification pipeline."""
        if self._pipeline is None:
            from transformers import pipeline
            self._pipeline = pipeline("text-classification", model=self.model_name)
        return self._pipeline

    def classify(self, text: str, top_k: int = 3) -> list[dict[str, Any]]:
        result = self.pipeline(text, top_k=top_k, truncation=True)
        # Single inputs sometimes come back wrapped in an outer list
        if result and isinstance(result[0], list):
            result = result[0]
        return [{"label": str(r["label"]), "score": float(r["score"])} for r in result]
