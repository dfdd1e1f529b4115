"""Incremental theme clustering of entry sentences.

Themes are long-lived clusters of sentence embeddings. For each entry:

1. every sentence joins up to K existing themes whose centroid is within
   the join threshold (softmax-split weights), or seeds a new theme;
2. touched centroids move toward the entry's weighted mean (EMA);
3. themes whose centroids converged are merged in one index-ordered sweep;
4. entry tags are the salience-weighted theme memberships;
5. optionally, generated tags nudge or extend the entry tags.

The engine never mutates the snapshot it is given; it returns a new
snapshot with the version bumped.
"""

import copy
import logging
import uuid
from dataclasses import dataclass, replace
from typing import Any

import numpy as np

from ..embeddings.adapter import EmbeddingAdapter
from ..embeddings.vectors import as_vector, cosine, normalize, softmax, weighted_sum
from ..enrichment.enricher import ThemeNamer
from ..enrichment.parsing import clean_label
from ..models import EntryTag, EntryVectors, Theme, ThemeAssignment, ThemeSnapshot, utc_now

logger = logging.getLogger(__name__)

JOIN_THRESHOLD = 0.78
MERGE_THRESHOLD = 0.87
EMA_ALPHA = 0.2
MAX_MATCHES = 3
SOFTMAX_BETA = 10.0
TAG_LIMIT = 4
TAG_FLOOR = 0.25
TAG_JOIN_THRESHOLD = 0.86
TAG_BONUS = 0.25
NEW_TAG_WEIGHT = 0.3
EVIDENCE_SENTENCES = 3
DEFAULT_LABEL = "Theme"
LABEL_COMPARE_CHARS = 32


@dataclass
class SentenceAssignment:
    index: int
    theme_id: str
    weight: float


def prefer_label(a: str | None, b: str | None) -> str:
    """The more specific of two labels: longer wins, compared up to 32 chars."""
    ca, cb = (a or "").strip(), (b or "").strip()
    if not ca:
        return cb
    if not cb:
        return ca
    return cb if min(len(cb), LABEL_COMPARE_CHARS) > min(len(ca), LABEL_COMPARE_CHARS) else ca


def top_evidence(entry: EntryVectors, limit: int = EVIDENCE_SENTENCES) -> list[str]:
    """Most salient sentences first, between 2 and 4 when the entry has them."""
    limit = max(2, min(4, limit))
    ranked = sorted(entry.sentences, key=lambda s: s.salience, reverse=True)
    return [s.text for s in ranked[:limit]]


def finalize_tags(tags: list[EntryTag], limit: int = TAG_LIMIT) -> list[EntryTag]:
    """Sort descending, keep ``limit``, and rescale weights to sum to 1."""
    kept = sorted(tags, key=lambda t: t.weight, reverse=True)[:limit]
    total = sum(t.weight for t in kept)
    if total <= 0:
        return []
    return [replace(t, weight=t.weight / total) for t in kept]


class ThemeEngine:
    """Assigns entries to an evolving set of themes."""

    def __init__(
        self,
        adapter: EmbeddingAdapter,
        namer: ThemeNamer | None = None,
        config: dict[str, Any] | None = None,
    ):
        self.adapter = adapter
        self.namer = namer
        cfg = (config or {}).get("themes", {})
        self.join_threshold = cfg.get("join_threshold", JOIN_THRESHOLD)
        self.merge_threshold = cfg.get("merge_threshold", MERGE_THRESHOLD)
        self.ema_alpha = cfg.get("ema_alpha", EMA_ALPHA)
        self.max_matches = cfg.get("max_matches", MAX_MATCHES)
        self.softmax_beta = cfg.get("softmax_beta", SOFTMAX_BETA)
        self.tag_limit = cfg.get("tag_limit", TAG_LIMIT)
        self.tag_floor = cfg.get("tag_floor", TAG_FLOOR)
        self.tag_join_threshold = cfg.get("tag_join_threshold", TAG_JOIN_THRESHOLD)
        self.tag_bonus = cfg.get("tag_bonus", TAG_BONUS)
        self.new_tag_weight = cfg.get("new_tag_weight", NEW_TAG_WEIGHT)
        self.evidence_sentences = cfg.get("evidence_sentences", EVIDENCE_SENTENCES)
        self.default_label = cfg.get("default_label", DEFAULT_LABEL)
        self.augment = cfg.get("augment", True)

    def assign(self, entry: EntryVectors, snapshot: ThemeSnapshot) -> ThemeAssignment:
        """Assign one embedded entry to themes and return the updated snapshot."""
        if not len(entry):
            return ThemeAssignment(entry_tags=[], snapshot=snapshot)

        now = utc_now()
        themes = [copy.deepcopy(t) for t in snapshot.themes]
        centroids = {t.id: as_vector(t.centroid) for t in themes}

        assignments = self._match_sentences(entry, themes, centroids, now)
        self._update_centroids(entry, themes, centroids, assignments, now)
        themes, merged_away = self._merge(themes, centroids, now)
        tags = self._entry_tags(entry, themes, assignments, merged_away)

        llm_tags: list[str] = []
        rationales: dict[str, str] = {}
        if self.namer is not None and self.augment:
            try:
                tags, themes, llm_tags, rationales = self._augment(entry, tags, themes, centroids, now)
            except Exception as e:
                logger.warning(f"Generated tagging skipped: {e}")

        for t in themes:
            t.centroid = centroids[t.id].tolist()

        return ThemeAssignment(
            entry_tags=finalize_tags(tags, self.tag_limit),
            snapshot=ThemeSnapshot(version=snapshot.version + 1, themes=themes),
            llm_tags=llm_tags,
            rationales=rationales,
        )

    def _match_sentences(self, entry, themes, centroids, now) -> list[SentenceAssignment]:
        assignments = []
        for sent in entry.sentences:
            ranked = sorted(
                ((cosine(sent.vector, centroids[t.id]), t) for t in themes),
                key=lambda pair: pair[0],
                reverse=True,
            )
            matches = [(c, t) for c, t in ranked if c >= self.join_threshold][: self.max_matches]

            if not matches:
                theme = self._create_theme(sent.text, normalize(sent.vector), now)
                themes.append(theme)
                centroids[theme.id] = normalize(sent.vector)
                assignments.append(SentenceAssignment(sent.index, theme.id, 1.0))
                logger.debug(f"Sentence {sent.index} seeded theme {theme.label!r}")
                continue

            weights = softmax([c for c, _ in matches], beta=self.softmax_beta)
            for (_, theme), w in zip(matches, weights):
                assignments.append(SentenceAssignment(sent.index, theme.id, w))
        return assignments

    def _create_theme(self, text: str, centroid: np.ndarray, now: str) -> Theme:
        name: dict[str, Any] = {"label": None, "alias": None, "description": None}
        if self.namer is not None:
            try:
                name = self.namer.label_theme([text])
            except Exception as e:
                logger.warning(f"Theme naming failed, using default label: {e}")
        return Theme(
            id=str(uuid.uuid4()),
            label=name.get("label") or self.default_label,
            alias=name.get("alias"),
            description=name.get("description"),
            centroid=centroid.tolist(),
            coherence=1.0,
            count=1,
            created_at=now,
            updated_at=now,
        )

    def _update_centroids(self, entry, themes, centroids, assignments, now) -> None:
        grouped: dict[str, list[SentenceAssignment]] = {}
        for a in assignments:
            grouped.setdefault(a.theme_id, []).append(a)

        for theme in themes:
            rows = grouped.get(theme.id)
            if not rows:
                continue
            masses = [entry.sentences[a.index].salience * a.weight for a in rows]
            total = sum(masses)
            if total <= 0:
                continue
            observed = weighted_sum([entry.sentences[a.index].vector for a in rows], masses) / total
            old = centroids[theme.id]
            if len(old) != len(observed):
                centroids[theme.id] = normalize(observed)
            else:
                centroids[theme.id] = normalize((1 - self.ema_alpha) * old + self.ema_alpha * observed)
            theme.count = (theme.count or 0) + 1
            theme.updated_at = now

    def _merge(self, themes, centroids, now) -> tuple[list[Theme], set[str]]:
        """Single index-ordered sweep; merged-away themes are not revisited."""
        removed: set[str] = set()
        for i, keep in enumerate(themes):
            if keep.id in removed:
                continue
            for other in themes[i + 1:]:
                if other.id in removed:
                    continue
                if cosine(centroids[keep.id], centroids[other.id]) < self.merge_threshold:
                    continue
                w1, w2 = keep.count or 1, other.count or 1
                centroids[keep.id] = normalize(weighted_sum([centroids[keep.id], centroids[other.id]], [w1, w2]))
                keep.label = prefer_label(keep.label, other.label) or self.default_label
                keep.alias = keep.alias or other.alias
                keep.description = keep.description or other.description
                keep.count = w1 + w2
                keep.updated_at = now
                removed.add(other.id)
                logger.debug(f"Merged theme {other.id} into {keep.id} ({keep.label!r})")
        return [t for t in themes if t.id not in removed], removed

    def _entry_tags(self, entry, themes, assignments, merged_away) -> list[EntryTag]:
        weights: dict[str, float] = {}
        for a in assignments:
            if a.theme_id in merged_away:
                continue
            weights[a.theme_id] = weights.get(a.theme_id, 0.0) + entry.sentences[a.index].salience * a.weight

        total = sum(weights.values()) or 1.0
        labels = {t.id: t.label for t in themes}
        tags = [
            EntryTag(id=theme_id, label=labels.get(theme_id, ""), weight=w / total)
            for theme_id, w in weights.items()
            if w / total >= self.tag_floor
        ]
        tags.sort(key=lambda t: t.weight, reverse=True)
        return tags[: self.tag_limit]

    def _augment(self, entry, tags, themes, centroids, now):
        """Map generated tags onto themes: bump close ones, seed new ones."""
        evidence = top_evidence(entry, self.evidence_sentences)
        llm_tags, rationales = self.namer.tag_entry(evidence)
        tags = [replace(t) for t in tags]
        themes = list(themes)
        added: dict[str, np.ndarray] = {}

        for tag in llm_tags:
            tag_vec = self.adapter.embed_mean(tag)
            if not len(tag_vec):
                continue

            best, best_cos = None, -1.0
            for theme in themes:
                c = cosine(tag_vec, added.get(theme.id, centroids.get(theme.id)))
                if c > best_cos:
                    best, best_cos = theme, c

            if best is not None and best_cos >= self.tag_join_threshold:
                found = next((t for t in tags if t.id == best.id), None)
                if found:
                    found.weight = min(1.0, found.weight + self.tag_bonus)
                else:
                    tags.append(EntryTag(id=best.id, label=best.label, weight=self.tag_bonus))
            else:
                theme = self._tag_theme(tag, evidence, normalize(tag_vec), now)
                themes.append(theme)
                added[theme.id] = normalize(tag_vec)
                tags.append(EntryTag(id=theme.id, label=theme.label, weight=self.new_tag_weight))

        centroids.update(added)
        return tags, themes, llm_tags, rationales

    def _tag_theme(self, tag: str, evidence: list[str], centroid: np.ndarray, now: str) -> Theme:
        """A theme seeded by a generated tag, named from the entry when possible."""
        name: dict[str, Any] = {"label": None, "alias": None, "description": None}
        try:
            name = self.namer.label_theme(evidence)
        except Exception as e:
            logger.warning(f"Theme naming failed, using tag {tag!r}: {e}")
        if not name.get("label"):
            name = {"label": clean_label(tag) or tag, "alias": None, "description": None}
        return Theme(
            id=str(uuid.uuid4()),
            label=name["label"],
            alias=name.get("alias"),
            description=name.get("description"),
            centroid=centroid.tolist(),
            coherence=1.0,
            count=1,
            created_at=now,
            updated_at=now,
        )
