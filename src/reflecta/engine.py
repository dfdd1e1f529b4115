"""Entry-processing engine: segment and embed once, then summarize, score, cluster and classify."""

import copy
import logging
from typing import Any

import numpy as np

from .backends.base import (
    ClassifierBackend,
    EmbeddingBackend,
    GenerationBackend,
    get_classifier_backend,
    get_embedding_backend,
    get_generation_backend,
)
from .clustering.relationships import score_relevance
from .clustering.themes import ThemeEngine
from .config import DEFAULT_CONFIG
from .embeddings.adapter import EmbeddingAdapter
from .enrichment.enricher import ThemeNamer
from .ingest.segmenter import normalize_whitespace
from .models import EntryRecord, EntryVectors, FacetReport, SentimentResult, Summary, Theme, ThemeAssignment, ThemeSnapshot
from .sentiment.anchors import AnchorSentimentScorer
from .sentiment.ensemble import SentimentEnsemble
from .summary.facets import FacetScorer
from .summary.summarizer import summarize_vectors

logger = logging.getLogger(__name__)


def as_snapshot(themes: ThemeSnapshot | list | dict | None) -> ThemeSnapshot:
    """Accept a snapshot, its dict form, or a bare list of themes."""
    if themes is None:
        return ThemeSnapshot()
    if isinstance(themes, ThemeSnapshot):
        return themes
    if isinstance(themes, list) and all(isinstance(t, Theme) for t in themes):
        return ThemeSnapshot(version=0, themes=list(themes))
    return ThemeSnapshot.from_dict(themes)


class JournalEngine:
    """Owns the model backends, the anchor cache and the analysis components.

    Backends passed in are used as-is; ``initialize()`` builds the missing
    ones from config. ``reset()`` drops cached anchor vectors.
    """

    def __init__(
        self,
        config: dict[str, Any] | None = None,
        embedder: EmbeddingBackend | None = None,
        classifier: ClassifierBackend | None = None,
        generator: GenerationBackend | None = None,
        fallback_generator: GenerationBackend | None = None,
    ):
        self.config = config if config is not None else copy.deepcopy(DEFAULT_CONFIG)
        self.adapter = EmbeddingAdapter(embedder)
        self.classifier = classifier
        self.generator = generator
        self.fallback_generator = fallback_generator
        self._build()

    def _build(self) -> None:
        namer = ThemeNamer(self.generator, self.fallback_generator) if self.generator is not None else None
        self.facet_scorer = FacetScorer(self.adapter)
        self.theme_engine = ThemeEngine(self.adapter, namer, self.config)
        self.anchor_sentiment = AnchorSentimentScorer(self.adapter, self.config)
        self.sentiment = SentimentEnsemble(self.classifier, self.anchor_sentiment, self.config)

    def initialize(self) -> "JournalEngine":
        """Create any backend that was not injected."""
        if self.adapter.backend is None:
            self.adapter.backend = get_embedding_backend(self.config)
        if self.classifier is None:
            self.classifier = get_classifier_backend(self.config)
        if self.generator is None:
            try:
                self.generator = get_generation_backend(self.config)
            except ValueError as e:
                logger.warning(f"Generation disabled: {e}")
        if self.fallback_generator is None and self.config.get("generation", {}).get("backend") == "transformers":
            fallback = self.config["generation"].get("fallback_model")
            if fallback:
                from .backends.generation import TransformersGenerator
                self.fallback_generator = TransformersGenerator(fallback)
        self._build()
        return self

    def reset(self) -> None:
        """Forget cached anchor vectors."""
        self.adapter.reset()

    def entry_vectors(self, text: str) -> EntryVectors:
        cleaned = normalize_whitespace(text)
        if not cleaned:
            return EntryVectors(sentences=[], centroid=np.zeros(0))
        return self.adapter.embed_entry(cleaned)

    def summarize(self, text: str, entry: EntryVectors | None = None, **options: Any) -> Summary:
        """Extractive summary with facet report.

        Options override ``config["summary"]``: ``max_chars``,
        ``allow_two_sentences``, ``mmr_lambda``, ``position_bonus``.
        """
        entry = entry if entry is not None else self.entry_vectors(text)
        if not len(entry):
            return Summary(text="", method="empty", facets=FacetReport.empty())
        facets = self.facet_scorer.score(entry)
        summary_text, method = summarize_vectors(entry, {**self.config.get("summary", {}), **options})
        return Summary(text=summary_text, method=method, facets=facets)

    def score_facets(self, text: str) -> FacetReport:
        entry = self.entry_vectors(text)
        if not len(entry):
            return FacetReport.empty()
        return self.facet_scorer.score(entry)

    def assign_themes(self, text: str, themes: ThemeSnapshot | list | dict | None = None,
                      entry: EntryVectors | None = None) -> ThemeAssignment:
        snapshot = as_snapshot(themes)
        entry = entry if entry is not None else self.entry_vectors(text)
        return self.theme_engine.assign(entry, snapshot)

    def infer_sentiment(self, text: str, entry: EntryVectors | None = None, **options: Any) -> SentimentResult:
        return self.sentiment.infer(text, entry=entry, **options)

    def infer_sentiment_from_anchors(self, text: str, entry: EntryVectors | None = None) -> SentimentResult:
        entry = entry if entry is not None else self.entry_vectors(text)
        return self.anchor_sentiment.score(entry)

    def embed_entry(self, text: str) -> list[float]:
        """Whole-entry embedding used for relevance ranking."""
        cleaned = normalize_whitespace(text)
        if not cleaned:
            return []
        return self.adapter.embed_mean(cleaned).tolist()

    @staticmethod
    def score_relevance(entry_a: Any, entry_b: Any) -> float:
        return score_relevance(entry_a, entry_b)

    def process_entry(self, text: str, themes: ThemeSnapshot | list | dict | None = None) -> EntryRecord:
        """Run every analysis on one entry off a single set of sentence vectors."""
        snapshot = as_snapshot(themes)
        entry = self.entry_vectors(text)

        summary = self.summarize(text, entry=entry)
        assignment = self.theme_engine.assign(entry, snapshot)
        sentiment = self.sentiment.infer(text, entry=entry) if len(entry) else SentimentResult.neutral()

        return EntryRecord(
            text=text,
            summary=summary,
            sentiment=sentiment,
            entry_tags=assignment.entry_tags,
            snapshot=assignment.snapshot,
            llm_tags=assignment.llm_tags,
            rationales=assignment.rationales,
            embedding=self.embed_entry(text),
        )
