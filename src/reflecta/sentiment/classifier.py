"""Normalization of classifier output into a positive/negative/neutral triplet.

Each model family gets one normalizer; the rest of the package only sees
``Triplet``.
"""

import re
from dataclasses import dataclass
from typing import Any, Callable

BINARY_NEUTRAL_SHARE = 0.03

TERNARY_LABELS = {"LABEL_0": "negative", "LABEL_1": "neutral", "LABEL_2": "positive"}


@dataclass
class Triplet:
    positive: float
    negative: float
    neutral: float
    scheme: str = "generic"

    @property
    def margin(self) -> float:
        ranked = sorted((self.positive, self.negative, self.neutral), reverse=True)
        return ranked[0] - ranked[1]

    @property
    def binary(self) -> bool:
        return self.scheme == "binary"


def scheme_for_model(model_id: str) -> str:
    """Label scheme of a classifier, from its model id."""
    m = (model_id or "").lower()
    if "twitter-roberta" in m or "cardiffnlp" in m:
        return "ternary"
    if "sst-2" in m or "sst2" in m:
        return "binary"
    if "multilingual-uncased-sentiment" in m or "star" in m:
        return "stars"
    return "generic"


def _flatten(result: Any) -> list[dict[str, Any]]:
    if result and isinstance(result[0], list):
        return result[0]
    return list(result or [])


def _scaled(pos: float, neg: float, neu: float, scheme: str) -> Triplet:
    total = max(1e-9, pos + neg + neu)
    return Triplet(pos / total, neg / total, neu / total, scheme=scheme)


def _ternary(rows: list[dict[str, Any]]) -> Triplet:
    out = {"positive": 0.0, "negative": 0.0, "neutral": 0.0}
    for r in rows:
        key = TERNARY_LABELS.get(r["label"], str(r["label"]).lower())
        if key in out:
            out[key] = float(r["score"])
    return _scaled(out["positive"], out["negative"], out["neutral"], "ternary")


def _binary(rows: list[dict[str, Any]]) -> Triplet:
    pos = next((float(r["score"]) for r in rows if "POS" in str(r["label"]).upper()), 0.0)
    neg = next((float(r["score"]) for r in rows if "NEG" in str(r["label"]).upper()), 0.0)
    total = max(1e-9, pos + neg)
    positive = pos / total * (1 - BINARY_NEUTRAL_SHARE)
    negative = neg / total * (1 - BINARY_NEUTRAL_SHARE)
    return Triplet(positive, negative, 1 - positive - negative, scheme="binary")


def _stars(rows: list[dict[str, Any]]) -> Triplet:
    stars = {1: 0.0, 2: 0.0, 3: 0.0, 4: 0.0, 5: 0.0}
    for r in rows:
        match = re.search(r"\d", str(r["label"]))
        if match and int(match.group(0)) in stars:
            stars[int(match.group(0))] = float(r["score"])
    return _scaled(stars[4] + stars[5], stars[1] + stars[2], stars[3], "stars")


def _generic(rows: list[dict[str, Any]]) -> Triplet:
    out = {"positive": 0.0, "negative": 0.0, "neutral": 0.0}
    for r in rows:
        label = str(r["label"]).lower()
        for key in out:
            if label == key or label.startswith(key[:3]):
                out[key] = float(r["score"])
    return _scaled(out["positive"], out["negative"], out["neutral"], "generic")


NORMALIZERS: dict[str, Callable[[list[dict[str, Any]]], Triplet]] = {
    "ternary": _ternary,
    "binary": _binary,
    "stars": _stars,
    "generic": _generic,
}


def normalize_classifier_output(result: Any, model_id: str) -> Triplet:
    """Map raw ``[{label, score}]`` output to a normalized triplet."""
    return NORMALIZERS[scheme_for_model(model_id)](_flatten(result))
