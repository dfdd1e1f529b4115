"""Embedding-only sentiment: cosine to positive/negative/neutral anchor centroids.

Negative similarity is the best match over several negative sub-type
centroids, so one strong emotion is not averaged away by unrelated ones.
Small lexical priors and an intensity bump then nudge the scores before a
sharpened three-way softmax.
"""

import re
from typing import Any

from ..embeddings.adapter import EmbeddingAdapter
from ..embeddings.vectors import cosine, softmax
from ..models import EntryVectors, SentimentResult
from .calibration import decide_label

SENTIMENT_ANCHORS = {
    "positive": [
        "I feel grateful", "I'm proud of myself", "I felt calm", "I feel hopeful",
        "I'm confident today", "I feel content", "I'm excited inside", "I felt energized",
    ],
    "negative": [
        "I feel anxious", "I'm overwhelmed", "I felt tired", "I feel angry",
        "I'm disappointed", "I feel worried", "I'm frustrated", "I felt discouraged",
    ],
    "neutral": [
        "I noted my schedule", "I updated tasks", "I reviewed the list", "I wrote some notes",
        "I logged the entry", "I recorded details", "I organized the files", "I tracked the steps",
    ],
}

NEGATIVE_SUBTYPES = {
    "anxiety": ["I feel anxious", "I feel worried", "I'm nervous"],
    "overwhelm": ["I'm overwhelmed", "I feel stressed", "Too much at once"],
    "fatigue": ["I felt tired", "I'm exhausted", "I feel drained"],
    "anger": ["I feel angry", "I'm frustrated", "I'm irritated"],
    "sadness": ["I'm disappointed", "I felt discouraged", "I feel sad"],
    "shame": ["I feel ashamed", "I feel guilty", "I regret this"],
}

NEGATIVE_CUES = [
    "anxious", "worried", "overwhelmed", "tired", "angry", "upset", "frustrated", "discouraged",
    "sad", "lonely", "stressed", "disappointed", "afraid", "ashamed", "guilty", "regret",
]
POSITIVE_CUES = [
    "grateful", "calm", "hopeful", "confident", "content", "excited", "energized", "relieved",
    "proud", "peaceful", "happy", "joyful",
]

_INTENSIFIERS = re.compile(r"\b(so|really|very)\b", re.I)

ANCHOR_TEMPERATURE = 0.55
LOW_MARGIN = 0.03


def count_cues(text: str, cues: list[str]) -> int:
    lowered = (text or "").lower()
    return sum(1 for w in cues if w in lowered)


def is_intense(text: str) -> bool:
    return bool(_INTENSIFIERS.search(text)) or "!" in text


class AnchorSentimentScorer:
    """Scores sentiment from sentence embeddings alone."""

    def __init__(self, adapter: EmbeddingAdapter, config: dict[str, Any] | None = None):
        self.adapter = adapter
        cfg = (config or {}).get("sentiment", {})
        self.temperature = cfg.get("anchor_temperature", ANCHOR_TEMPERATURE)
        self.low_margin = cfg.get("low_margin", LOW_MARGIN)

    def _centroids(self):
        pos = self.adapter.anchor_centroid("sentiment:positive", SENTIMENT_ANCHORS["positive"])
        neu = self.adapter.anchor_centroid("sentiment:neutral", SENTIMENT_ANCHORS["neutral"])
        groups = {
            name: self.adapter.anchor_centroid(f"sentiment:negative:{name}", phrases)
            for name, phrases in NEGATIVE_SUBTYPES.items()
        }
        return pos, neu, groups

    def score_sentence(self, text: str, vector) -> dict[str, Any]:
        """Per-sentence ``{pos, neg, neu, subtype}`` probabilities."""
        pos_c, neu_c, groups = self._centroids()
        sp = cosine(vector, pos_c)
        su = cosine(vector, neu_c)

        subtype, sn = None, -1.0
        for name, centroid in groups.items():
            s = cosine(vector, centroid)
            if s > sn:
                subtype, sn = name, s

        pos_hits = count_cues(text, POSITIVE_CUES)
        neg_hits = count_cues(text, NEGATIVE_CUES)
        sp += min(0.06, 0.02 * pos_hits)
        sn += min(0.08, 0.025 * neg_hits)
        if pos_hits + neg_hits > 0:
            su -= 0.015

        if is_intense(text):
            if neg_hits > 0 and pos_hits == 0:
                sn += 0.03
            else:
                lead = max(sp, sn, su)
                if lead == sp:
                    sp += 0.02
                elif lead == sn:
                    sn += 0.02
                else:
                    su += 0.02

        # Counter the neutral anchors' pull
        sp += 0.02
        sn += 0.02

        pos, neg, neu = softmax([sp, sn, su], beta=1.0 / max(1e-8, self.temperature))
        return {"pos": pos, "neg": neg, "neu": neu, "subtype": subtype}

    def triplet(self, entry: EntryVectors) -> tuple[float, float, float, str | None]:
        """Salience-weighted entry triplet and the dominant negative sub-type."""
        s_pos = s_neg = s_neu = 0.0
        subtype_mass: dict[str, float] = {}
        for sent in entry.sentences:
            w = sent.salience
            trip = self.score_sentence(sent.text, sent.vector)
            s_pos += w * trip["pos"]
            s_neg += w * trip["neg"]
            s_neu += w * trip["neu"]
            if trip["subtype"]:
                subtype_mass[trip["subtype"]] = subtype_mass.get(trip["subtype"], 0.0) + w * trip["neg"]

        total = s_pos + s_neg + s_neu
        if total <= 0:
            return 0.0, 0.0, 1.0, None
        subtype = max(subtype_mass, key=subtype_mass.get) if subtype_mass else None
        return s_pos / total, s_neg / total, s_neu / total, subtype

    def score(self, entry: EntryVectors) -> SentimentResult:
        if not len(entry):
            return SentimentResult.neutral()
        pos, neg, neu, subtype = self.triplet(entry)
        result = decide_label(pos, neg, neu, low_margin=self.low_margin)
        if result.label == "negative":
            result.negative_subtype = subtype
        return result
