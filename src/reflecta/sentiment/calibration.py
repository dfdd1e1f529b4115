"""Calibration helpers shared by the classifier and anchor sentiment paths."""

import math

from ..embeddings.vectors import clamp01
from ..models import SentimentResult

_EPS = 1e-12

# (minimum classifier margin, trust in classifier)
BLEND_STEPS = [(0.40, 0.80), (0.25, 0.70), (0.15, 0.60), (0.08, 0.50)]
BLEND_FLOOR = 0.40


def _logit(p: float) -> float:
    p = min(1 - _EPS, max(_EPS, p))
    return math.log(p) - math.log(1 - p)


def _sigmoid(x: float) -> float:
    return 1.0 / (1.0 + math.exp(-x))


def soften_binary(p_pos: float, temperature: float = 3.0, gamma: float = 1.15, neutral_min: float = 0.05):
    """Temperature-soften a binary probability and carve out a neutral band.

    Returns ``(pos, neg, neutral, margin)``; neutral mass grows as the
    softened margin from 0.5 shrinks.
    """
    pos_t = _sigmoid(_logit(p_pos) / temperature)
    neg_t = 1.0 - pos_t
    margin = abs(pos_t - 0.5) * 2
    neutral = max(neutral_min, (1 - margin) ** gamma)
    rest = max(0.0, 1.0 - neutral)
    pos, neg = rest * pos_t, rest * neg_t
    total = pos + neg + neutral or 1.0
    return pos / total, neg / total, neutral / total, margin


def ensemble_weight(margin: float) -> float:
    """Trust placed in the classifier given its own decision margin."""
    for threshold, weight in BLEND_STEPS:
        if margin >= threshold:
            return weight
    return BLEND_FLOOR


def decide_label(pos: float, neg: float, neu: float, low_margin: float | None = None) -> SentimentResult:
    """Pick the top class; confidence is the margin over the runner-up.

    With ``low_margin`` set, margins below it are labelled neutral.
    """
    total = pos + neg + neu
    if total <= 0:
        return SentimentResult.neutral()
    p_pos, p_neg, p_neu = pos / total, neg / total, neu / total

    ranked = sorted(
        [("positive", p_pos), ("negative", p_neg), ("neutral", p_neu)],
        key=lambda kv: kv[1],
        reverse=True,
    )
    label = ranked[0][0]
    margin = ranked[0][1] - ranked[1][1]
    if low_margin is not None and margin < low_margin:
        label = "neutral"

    return SentimentResult(
        label=label,
        confidence=clamp01(margin),
        breakdown={"pos": p_pos, "neg": p_neg, "neutral": p_neu},
    )
