"""Entry sentiment: calibrated classifier, optionally blended with the anchor path."""

import logging
from typing import Any

from ..backends.base import ClassifierBackend
from ..errors import BackendUnavailableError
from ..ingest.segmenter import split_sentences, word_tokens
from ..models import EntryVectors, SentimentResult
from .anchors import AnchorSentimentScorer
from .calibration import decide_label, ensemble_weight, soften_binary
from .classifier import Triplet, normalize_classifier_output

logger = logging.getLogger(__name__)


class SentimentEnsemble:
    """Classifier-first sentiment with the anchor scorer as blend partner and fallback."""

    def __init__(
        self,
        classifier: ClassifierBackend | None,
        anchors: AnchorSentimentScorer | None,
        config: dict[str, Any] | None = None,
    ):
        self.classifier = classifier
        self.anchors = anchors
        self.options = dict((config or {}).get("sentiment", {}))

    def _classify(self, text: str) -> Triplet:
        try:
            result = self.classifier.classify(text, top_k=3)
        except (ImportError, OSError) as e:
            raise BackendUnavailableError("classification", str(e)) from e
        return normalize_classifier_output(result, self.classifier.model_id)

    def _calibrated(self, text: str, opts: dict[str, Any]) -> tuple[float, float, float, float]:
        """``(pos, neg, neutral, classifier margin)`` for one piece of text."""
        trip = self._classify(text)
        if trip.binary:
            p_pos = trip.positive / max(1e-9, trip.positive + trip.negative)
            pos, neg, neu, _ = soften_binary(
                p_pos,
                temperature=opts.get("temperature", 3.0),
                gamma=opts.get("gamma", 1.15),
                neutral_min=opts.get("neutral_min", 0.05),
            )
            return pos, neg, neu, trip.margin
        return trip.positive, trip.negative, trip.neutral, trip.margin

    def _per_sentence(self, text: str, opts: dict[str, Any]) -> tuple[float, float, float, float] | None:
        min_tokens = opts.get("min_tokens", 3)
        s_pos = s_neg = s_neu = s_margin = weight = 0.0
        for sentence in split_sentences(text):
            tokens = len(word_tokens(sentence))
            if tokens < min_tokens:
                continue
            pos, neg, neu, margin = self._calibrated(sentence, opts)
            w = max(1, tokens)
            s_pos += w * pos
            s_neg += w * neg
            s_neu += w * neu
            s_margin += w * margin
            weight += w
        if weight == 0:
            return None
        return s_pos / weight, s_neg / weight, s_neu / weight, s_margin / weight

    def infer(self, text: str, entry: EntryVectors | None = None, **options: Any) -> SentimentResult:
        """Sentiment for an entry's raw text.

        Options (defaults from config): ``mode`` ("full" | "per_sentence"),
        ``temperature``, ``gamma``, ``neutral_min``, ``min_tokens``,
        ``blend_anchors``. ``entry`` supplies precomputed sentence vectors
        for the anchor path.
        """
        opts = {**self.options, **options}
        t = (text or "").strip()
        if not t:
            return SentimentResult.neutral()

        if self.classifier is None:
            return self._anchor_fallback(t, entry, "no classifier configured")

        try:
            if opts.get("mode", "full") == "per_sentence":
                calibrated = self._per_sentence(t, opts)
                if calibrated is None:
                    return SentimentResult.neutral()
            else:
                calibrated = self._calibrated(t, opts)
        except BackendUnavailableError as e:
            return self._anchor_fallback(t, entry, str(e))

        pos, neg, neu, margin = calibrated
        if opts.get("blend_anchors") and self.anchors is not None and self.anchors.adapter.available:
            entry = entry if entry is not None else self.anchors.adapter.embed_entry(t)
            a_pos, a_neg, a_neu, _ = self.anchors.triplet(entry)
            w = ensemble_weight(margin)
            pos, neg, neu = (w * pos + (1 - w) * a_pos, w * neg + (1 - w) * a_neg, w * neu + (1 - w) * a_neu)

        return decide_label(pos, neg, neu)

    def _anchor_fallback(self, text: str, entry: EntryVectors | None, reason: str) -> SentimentResult:
        if self.anchors is None or not self.anchors.adapter.available:
            raise BackendUnavailableError("sentiment", f"{reason}; no embedding backend for anchor scoring")
        logger.warning(f"Classifier unavailable ({reason}); using anchor sentiment")
        return self.anchors.score(entry if entry is not None else self.anchors.adapter.embed_entry(text))
