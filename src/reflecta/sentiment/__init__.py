"""Three-way sentiment for journal entries."""

from .anchors import AnchorSentimentScorer
from .calibration import decide_label, ensemble_weight, soften_binary
from .classifier import Triplet, normalize_classifier_output
from .ensemble import SentimentEnsemble

__all__ = [
    "AnchorSentimentScorer",
    "SentimentEnsemble",
    "Triplet",
    "decide_label",
    "ensemble_weight",
    "normalize_classifier_output",
    "soften_binary",
]
