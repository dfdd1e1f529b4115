"""Facet scoring: how much an entry is about a feeling, an event, or an intent.

Each sentence gets a strength per facet from three signals::

    strength = clamp01(ALPHA * max anchor cosine + BETA * lexical + GAMMA * context)

Entry scores are the salience-weighted sum over sentences, divided by the
largest of the three so the dominant facet is 1.0. Anchor phrases, cue
lists and weights below are fixed data; changing them changes results.
"""

import re

from ..embeddings.adapter import EmbeddingAdapter
from ..embeddings.vectors import clamp01, cosine
from ..models import FACETS, EntryVectors, Evidence, FacetReport, FacetScore

ALPHA, BETA, GAMMA = 0.35, 0.15, 0.5
EVIDENCE_PER_FACET = 2

FACET_ANCHORS = {
    "feeling": [
        "I feel", "I'm feeling", "the emotion I'm noticing",
        "I am anxious", "I am hopeful", "I am grateful", "I feel calm", "I feel overwhelmed",
    ],
    "event": [
        "Today I", "I started", "I finished", "I met", "I called", "I decided",
        "It happened", "The meeting ended", "I ran", "I wrote",
    ],
    "intent": [
        "I will", "I plan to", "I'm going to", "next step", "first step",
        "today I'll", "my goal is", "I intend to",
    ],
}

FEELING_WORDS = [
    "anxious", "anxiety", "hopeful", "grateful", "tired", "energized", "angry", "sad", "calm",
    "excited", "overwhelmed", "nervous", "confident", "peaceful", "lonely", "stressed",
    "worried", "relieved", "proud",
]
EVENT_VERBS = [
    "met", "called", "finished", "started", "planned", "decided", "wrote", "emailed", "talked",
    "visited", "learned", "presented", "cooked", "ran", "walked", "published", "shipped",
    "fixed", "broke", "launched",
]
INTENT_PATTERNS = [
    re.compile(r"\b(i (will|plan to|intend to|am going to))\b", re.I),
    re.compile(r"\b(next|first) step\b", re.I),
    re.compile(r"\bgoal\b", re.I),
    re.compile(r"\btomorrow\b", re.I),
    re.compile(r"\btoday i('|’)ll\b", re.I),
]

_PAST_TENSE = re.compile(r"\b\w+ed\b")

# (facet, gate, bonus)
CONTEXT_BONUSES = [
    ("intent", re.compile(r"\b(next week|tomorrow|later today|soon)\b", re.I), 0.4),
    ("event", re.compile(r"\b(today|yesterday|this morning|this afternoon)\b", re.I), 0.3),
    ("feeling", re.compile(r"(?:but|however|still)\b", re.I), 0.2),
]


def lexical_score(facet: str, sentence: str) -> float:
    """Soft-capped cue hit ratio in [0, 1]."""
    lowered = sentence.lower()
    if facet == "feeling":
        hits = sum(1 for w in FEELING_WORDS if w in lowered)
        return min(1.0, hits / 3)
    if facet == "event":
        hits = sum(1 for v in EVENT_VERBS if v in lowered)
        extra = 0.2 if "!" in sentence or _PAST_TENSE.search(lowered) else 0.0
        return min(1.0, hits / 3 + extra)
    if facet == "intent":
        hits = sum(1 for p in INTENT_PATTERNS if p.search(sentence))
        return min(1.0, hits / 2)
    raise ValueError(f"Unknown facet: {facet}")


def context_bonus(facet: str, sentence: str) -> float:
    return sum(bonus for f, gate, bonus in CONTEXT_BONUSES if f == facet and gate.search(sentence))


class FacetScorer:
    """Scores facets for an embedded entry."""

    def __init__(self, adapter: EmbeddingAdapter):
        self.adapter = adapter

    def _anchors(self) -> dict:
        return {f: self.adapter.anchor_vectors(f"facet:{f}", FACET_ANCHORS[f]) for f in FACETS}

    def sentence_strengths(self, text: str, vector, anchors: dict) -> dict[str, float]:
        strengths = {}
        for facet in FACETS:
            max_cos = max([0.0] + [cosine(vector, a) for a in anchors[facet]])
            strengths[facet] = clamp01(
                ALPHA * max_cos + BETA * lexical_score(facet, text) + GAMMA * context_bonus(facet, text)
            )
        return strengths

    def score(self, entry: EntryVectors) -> FacetReport:
        if not len(entry):
            return FacetReport.empty()

        anchors = self._anchors()
        totals = {f: 0.0 for f in FACETS}
        contributions: dict[str, list[Evidence]] = {f: [] for f in FACETS}

        for sent in entry.sentences:
            strengths = self.sentence_strengths(sent.text, sent.vector, anchors)
            for facet in FACETS:
                weight = sent.salience * strengths[facet]
                totals[facet] += weight
                if weight > 0:
                    contributions[facet].append(Evidence(index=sent.index, text=sent.text, weight=weight))

        # Relative strengths: the dominant facet becomes 1.0
        peak = max(max(totals.values()), 1e-6)
        scores = {f: totals[f] / peak for f in FACETS}

        facets = []
        for facet in FACETS:
            evidence = sorted(contributions[facet], key=lambda e: e.weight, reverse=True)
            facets.append(FacetScore(
                facet=facet,
                score=round(scores[facet], 2),
                evidence=evidence[:EVIDENCE_PER_FACET],
            ))

        top = max(facets, key=lambda f: f.score).facet
        return FacetReport(facets=facets, top=top, scores=scores)
