"""Tests for extractive summaries and facet scores."""

import numpy as np

from reflecta.embeddings.adapter import EmbeddingAdapter, build_entry_vectors
from reflecta.ingest.segmenter import split_sentences
from reflecta.models import FACETS, EntryVectors
from reflecta.summary.facets import FacetScorer, context_bonus, lexical_score
from reflecta.summary.summarizer import clamp_to_chars, pick_sentences, summarize_vectors

from conftest import FakeEmbedder

ENTRY = (
    "I went running this morning before work. "
    "The meeting with my manager ran long and I felt drained. "
    "Tomorrow I will block an hour for the report."
)


def _entry(text):
    return EmbeddingAdapter(FakeEmbedder()).embed_entry(text)


def test_clamp_soft_cut():
    text = "I walked along the river for an hour, thinking about nothing much at all"
    out = clamp_to_chars(text, 50)
    assert out == "I walked along the river for an hour"


def test_clamp_hard_cut():
    text = "a" * 80
    assert clamp_to_chars(text, 30) == "a" * 30
    assert clamp_to_chars("short", 30) == "short"


def test_summary_empty():
    assert summarize_vectors(EntryVectors(sentences=[], centroid=np.zeros(0))) == ("", "empty")


def test_summary_single_sentence():
    text, method = summarize_vectors(_entry("Just one quiet day."))
    assert text == "Just one quiet day."
    assert method == "extractive"


def test_summary_two_sentences_in_order():
    text, method = summarize_vectors(_entry(ENTRY), {"max_chars": 400})
    assert method == "extractive+mmr"
    originals = split_sentences(ENTRY)
    positions = [originals.index(s) for s in split_sentences(text)]
    assert len(positions) == 2
    assert positions == sorted(positions)


def test_second_pick_avoids_near_duplicate():
    a = np.array([1.0, 0.0, 0.0])
    a_dup = np.array([0.999, 0.0447, 0.0])
    b = np.array([0.0, 1.0, 0.0])
    c1 = np.array([0.5, 0.5, 0.7071])
    c2 = np.array([0.5, 0.5, -0.7071])
    entry = build_entry_vectors(["a", "a again", "b", "c1", "c2"], [a, a_dup, b, c1, c2])

    first, chosen = pick_sentences(entry, position_bonus=0)
    assert first == 1
    assert chosen == [1, 2]


def test_summary_respects_budget():
    for budget in (20, 45, 80, 220):
        text, method = summarize_vectors(_entry(ENTRY), {"max_chars": budget})
        assert 0 < len(text) <= budget
        if budget < 100:
            assert method == "extractive"


def test_summary_one_sentence_option():
    text, method = summarize_vectors(_entry(ENTRY), {"allow_two_sentences": False})
    assert method == "extractive"
    assert len(split_sentences(text)) == 1


def test_lexical_and_context():
    assert lexical_score("feeling", "I feel anxious and hopeful") == 2 / 3
    assert lexical_score("intent", "I will call tomorrow") == 1.0
    assert context_bonus("intent", "See you next week") == 0.4
    assert context_bonus("event", "Nothing to report") == 0.0


def test_facets_relative_scores():
    report = FacetScorer(EmbeddingAdapter(FakeEmbedder())).score(_entry(ENTRY))
    assert [f.facet for f in report.facets] == list(FACETS)
    assert max(report.scores.values()) == 1.0
    assert all(0.0 <= s <= 1.0 for s in report.scores.values())
    assert report.get(report.top).score == 1.0
    for f in report.facets:
        assert len(f.evidence) <= 2
        assert all(e.weight > 0 for e in f.evidence)


def test_facets_feeling_dominates_mixed_feeling_sentence():
    report = FacetScorer(EmbeddingAdapter(FakeEmbedder())).score(
        _entry("I feel anxious but hopeful about tomorrow's meeting.")
    )
    assert report.top == "feeling"
    assert report.get("intent").score < 1.0
