"""Data models used throughout reflecta."""

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any

import numpy as np


FACETS = ("feeling", "event", "intent")


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class SentenceVector:
    """One sentence of an entry with its embedding and salience."""
    index: int
    text: str
    vector: np.ndarray
    salience: float = 0.5


@dataclass
class EntryVectors:
    """Segmented and embedded entry, shared by every analysis step."""
    sentences: list[SentenceVector]
    centroid: np.ndarray

    @property
    def saliences(self) -> list[float]:
        return [s.salience for s in self.sentences]

    def __len__(self) -> int:
        return len(self.sentences)


@dataclass
class Evidence:
    """A sentence supporting a facet score."""
    index: int
    text: str
    weight: float


@dataclass
class FacetScore:
    facet: str
    score: float
    evidence: list[Evidence] = field(default_factory=list)


@dataclass
class FacetReport:
    """Comparative feeling/event/intent strengths for one entry."""
    facets: list[FacetScore]
    top: str | None
    scores: dict[str, float]

    @classmethod
    def empty(cls) -> "FacetReport":
        return cls(
            facets=[FacetScore(facet=f, score=0.0) for f in FACETS],
            top=None,
            scores={f: 0.0 for f in FACETS},
        )

    def get(self, facet: str) -> FacetScore | None:
        for f in self.facets:
            if f.facet == facet:
                return f
        return None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class Summary:
    """Extractive summary plus the facet report computed alongside it."""
    text: str
    method: str  # "empty" | "extractive" | "extractive+mmr"
    facets: FacetReport

    def to_dict(self) -> dict[str, Any]:
        return {"text": self.text, "method": self.method, "facets": self.facets.to_dict()}


@dataclass
class Theme:
    """A persistent cluster of related sentences across entries.

    ``centroid`` is always L2-normalized.
    """
    id: str
    label: str
    centroid: list[float]
    alias: str | None = None
    description: str | None = None
    coherence: float = 1.0
    count: int = 1
    created_at: str = field(default_factory=utc_now)
    updated_at: str = field(default_factory=utc_now)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "label": self.label,
            "alias": self.alias,
            "description": self.description,
            "centroid": [float(x) for x in self.centroid],
            "coherence": self.coherence,
            "count": self.count,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Theme":
        return cls(
            id=data["id"],
            label=data.get("label") or "",
            centroid=[float(x) for x in data.get("centroid") or []],
            alias=data.get("alias"),
            description=data.get("description"),
            coherence=float(data.get("coherence", 1.0)),
            count=int(data.get("count") or 1),
            created_at=data.get("created_at") or utc_now(),
            updated_at=data.get("updated_at") or utc_now(),
        )


@dataclass
class ThemeSnapshot:
    """Versioned, caller-owned list of themes."""
    version: int = 0
    themes: list[Theme] = field(default_factory=list)

    def get(self, theme_id: str) -> Theme | None:
        for t in self.themes:
            if t.id == theme_id:
                return t
        return None

    def to_dict(self) -> dict[str, Any]:
        return {"version": self.version, "themes": [t.to_dict() for t in self.themes]}

    @classmethod
    def from_dict(cls, data: dict[str, Any] | list) -> "ThemeSnapshot":
        # A bare list is an unversioned theme list
        if isinstance(data, list):
            return cls(version=0, themes=[Theme.from_dict(t) for t in data])
        return cls(
            version=int(data.get("version", 0)),
            themes=[Theme.from_dict(t) for t in data.get("themes", [])],
        )


@dataclass
class EntryTag:
    """Partial membership of one entry in one theme."""
    id: str
    label: str
    weight: float


@dataclass
class ThemeAssignment:
    entry_tags: list[EntryTag]
    snapshot: ThemeSnapshot
    llm_tags: list[str] = field(default_factory=list)
    rationales: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "entry_tags": [asdict(t) for t in self.entry_tags],
            "themes": self.snapshot.to_dict(),
            "llm_tags": list(self.llm_tags),
            "rationales": dict(self.rationales),
        }


@dataclass
class Relationship:
    """A scored relevance link between two entries."""
    entry_a: str
    entry_b: str
    score: float


@dataclass
class SentimentResult:
    label: str  # positive | negative | neutral
    confidence: float
    breakdown: dict[str, float]
    negative_subtype: str | None = None

    @classmethod
    def neutral(cls) -> "SentimentResult":
        return cls(label="neutral", confidence=0.0, breakdown={"pos": 0.0, "neg": 0.0, "neutral": 1.0})

    def to_dict(self) -> dict[str, Any]:
        out = {"label": self.label, "confidence": self.confidence, "breakdown": dict(self.breakdown)}
        if self.negative_subtype:
            out["negative_subtype"] = self.negative_subtype
        return out


@dataclass
class EntryRecord:
    """Everything derived from one journal entry."""
    text: str
    summary: Summary
    sentiment: SentimentResult
    entry_tags: list[EntryTag]
    snapshot: ThemeSnapshot
    llm_tags: list[str] = field(default_factory=list)
    rationales: dict[str, str] = field(default_factory=dict)
    embedding: list[float] = field(default_factory=list)
    created_at: str = field(default_factory=utc_now)

    def to_dict(self) -> dict[str, Any]:
        return {
            "text": self.text,
            "summary": self.summary.text,
            "summary_method": self.summary.method,
            "summary_facets": self.summary.facets.to_dict(),
            "sentiment": self.sentiment.to_dict(),
            "entry_tags": [asdict(t) for t in self.entry_tags],
            "llm_tags": list(self.llm_tags),
            "rationales": dict(self.rationales),
            "embedding": [float(x) for x in self.embedding],
            "created_at": self.created_at,
        }
