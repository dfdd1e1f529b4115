"""End-to-end tests for JournalEngine with fake backends."""

import pytest

from reflecta.engine import JournalEngine
from reflecta.errors import BackendUnavailableError
from reflecta.models import ThemeSnapshot

from conftest import FakeClassifier, FakeEmbedder, FakeGenerator


def test_mixed_feeling_entry(engine):
    text = "I feel anxious but hopeful about tomorrow's meeting."
    summary = engine.summarize(text)
    assert summary.text == text
    assert summary.method == "extractive"
    assert summary.facets.top == "feeling"

    sentiment = engine.infer_sentiment(text)
    assert sentiment.label != "positive"
    assert sentiment.breakdown["pos"] < 0.5


def test_empty_entry(engine):
    record = engine.process_entry("", ThemeSnapshot(version=2))

    assert record.summary.text == ""
    assert record.summary.method == "empty"
    assert record.summary.facets.top is None
    assert all(score == 0.0 for score in record.summary.facets.scores.values())
    assert record.sentiment.label == "neutral"
    assert record.sentiment.confidence == 0.0
    assert record.entry_tags == []
    assert record.snapshot.version == 2
    assert record.snapshot.themes == []
    assert record.embedding == []


def test_repeated_entry_reuses_theme(engine):
    first = engine.process_entry("Finished a 5k run this morning.")
    second = engine.process_entry("Finished a 5k run this morning!", first.snapshot)

    assert len(second.snapshot.themes) == 1
    assert second.entry_tags[0].id == first.entry_tags[0].id
    assert second.snapshot.version == first.snapshot.version + 1


def test_process_entry_embeds_sentences_once(config):
    embedder = FakeEmbedder()
    engine = JournalEngine(config, embedder=embedder)
    text = "Slept well. Wrote three pages of the essay."

    engine.process_entry(text)
    sentence_calls = [c for c in embedder.calls if c in ("Slept well.", "Wrote three pages of the essay.")]
    assert len(sentence_calls) == 2
    assert embedder.calls.count(text) == 1


def test_accepts_theme_lists(engine):
    first = engine.assign_themes("Baked bread for the neighbours.")
    again = engine.assign_themes("Baked bread for the neighbours.", first.snapshot.to_dict()["themes"])
    assert again.snapshot.themes[0].id == first.snapshot.themes[0].id
    assert again.snapshot.version == 1


def test_relevance(engine):
    a = engine.embed_entry("Walked the dog in the park.")
    b = engine.embed_entry("Walked the dog in the park again.")
    c = engine.embed_entry("Filed taxes.")
    assert engine.score_relevance(a, b) > engine.score_relevance(a, c)
    assert engine.score_relevance({"embedding": a}, {"embedding": a}) == pytest.approx(1.0)
    assert engine.score_relevance(a, {"embedding": []}) == 0.0


def test_classifier_and_generator_are_used(config):
    classifier = FakeClassifier([{"label": "POSITIVE", "score": 0.98}, {"label": "NEGATIVE", "score": 0.02}])
    generator = FakeGenerator(label="{Theme: Garden}", tags='{"tags": ["garden"], "rationales": {"garden": "planting"}}')
    engine = JournalEngine(config, embedder=FakeEmbedder(), classifier=classifier, generator=generator)

    record = engine.process_entry("Planted tomatoes in the garden.")
    assert record.sentiment.label == "positive"
    assert classifier.calls == ["Planted tomatoes in the garden."]
    assert record.llm_tags == ["garden"]
    assert record.to_dict()["rationales"] == {"garden": "planting"}
    assert record.snapshot.themes[0].label == "Garden"
    assert record.to_dict()["summary"] == "Planted tomatoes in the garden."


def test_reset_clears_anchor_cache(engine, embedder):
    engine.summarize("Went to the market.")
    calls = len(embedder.calls)
    engine.summarize("Went to the market.")
    assert len(embedder.calls) == calls + 1

    engine.reset()
    engine.summarize("Went to the market.")
    assert len(embedder.calls) > calls + 2


def test_initialize_without_api_key(config):
    config["generation"]["backend"] = "claude"
    config.pop("claude_api_key", None)
    engine = JournalEngine(config, embedder=FakeEmbedder(), classifier=FakeClassifier([]))
    engine.initialize()
    assert engine.generator is None
    assert engine.theme_engine.namer is None


def test_no_embedder_raises(config):
    engine = JournalEngine(config)
    with pytest.raises(BackendUnavailableError):
        engine.summarize("Something happened today.")


def test_rank_related(engine):
    from reflecta.clustering.relationships import rank_related

    new = {"id": "new", "embedding": engine.embed_entry("Long walk with the dog by the river.")}
    past = [
        {"id": "new", "embedding": new["embedding"]},
        {"id": "taxes", "embedding": engine.embed_entry("Filed taxes.")},
        {"id": "walk", "embedding": engine.embed_entry("Walk with the dog.")},
        {"id": "broken"},
    ]
    ranked = rank_related(new, past, top_n=2)
    assert [r.entry_b for r in ranked] == ["walk", "taxes"]
    assert ranked[0].entry_a == "new"
