"""Shared fakes: deterministic model backends that need no downloads."""

import copy
import re

import numpy as np
import pytest

from reflecta.backends.base import ClassifierBackend, EmbeddingBackend, GenerationBackend
from reflecta.config import DEFAULT_CONFIG
from reflecta.engine import JournalEngine


class FakeEmbedder(EmbeddingBackend):
    """Bag-of-words counts over a vocabulary grown on first sight of each word."""

    def __init__(self, dims: int = 1024):
        self.dims = dims
        self.vocab: dict[str, int] = {}
        self.calls: list[str] = []

    def embed(self, text):
        self.calls.append(text)
        vec = np.zeros(self.dims)
        for token in re.findall(r"[a-z0-9'’]+", text.lower()):
            idx = self.vocab.setdefault(token, len(self.vocab))
            vec[idx % self.dims] += 1.0
        return vec


class FakeClassifier(ClassifierBackend):
    """Returns a fixed label distribution, or raises ``error``."""

    def __init__(self, rows, model_id="distilbert-base-uncased-finetuned-sst-2-english", error=None):
        self.rows = rows
        self._model_id = model_id
        self.error = error
        self.calls: list[str] = []

    @property
    def model_id(self):
        return self._model_id

    def classify(self, text, top_k=3):
        self.calls.append(text)
        if self.error is not None:
            raise self.error
        return [list(self.rows)]


class FakeGenerator(GenerationBackend):
    """Replies with ``label`` to naming prompts and ``tags`` to tagging prompts.

    ``outputs`` overrides both with a fixed sequence.
    """

    def __init__(self, label="{Theme: Morning Run}", tags='{"tags": []}', outputs=None, error=None):
        self.label = label
        self.tags = tags
        self.outputs = list(outputs) if outputs is not None else None
        self.error = error
        self.calls: list[tuple[str, dict]] = []

    def generate(self, prompt, **options):
        self.calls.append((prompt, options))
        if self.error is not None:
            raise self.error
        if self.outputs is not None:
            return self.outputs.pop(0) if self.outputs else ""
        if "SCHEMA" in prompt:
            return [{"generated_text": self.tags}]
        return [{"generated_text": self.label}]


@pytest.fixture
def config():
    return copy.deepcopy(DEFAULT_CONFIG)


@pytest.fixture
def embedder():
    return FakeEmbedder()


@pytest.fixture
def engine(config, embedder):
    return JournalEngine(config, embedder=embedder)
