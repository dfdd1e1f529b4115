"""Tests for JSON repair, label parsing and the theme namer."""

from reflecta.enrichment.enricher import ThemeNamer, infer_label_from_sentences, normalize_evidence
from reflecta.enrichment.parsing import (
    clean_label,
    extract_generated_text,
    parse_json_response,
    parse_label,
    repair_json,
    sanitize_tags,
)

from conftest import FakeGenerator


def test_parse_strict_and_fenced():
    assert parse_json_response('{"tags": ["sleep"]}') == {"tags": ["sleep"]}
    assert parse_json_response('Sure!\n```json\n{"tags": ["sleep"]}\n```') == {"tags": ["sleep"]}


def test_parse_embedded_object_with_braces_in_strings():
    text = 'Here you go: {"tags": ["work"], "rationales": {"work": "the {boss} again"}} hope it helps'
    assert parse_json_response(text) == {"tags": ["work"], "rationales": {"work": "the {boss} again"}}


def test_repair_single_quotes_and_bare_keys():
    assert parse_json_response("{'tags': ['sleep', 'work']}") == {"tags": ["sleep", "work"]}
    assert parse_json_response('{tags: ["sleep", "work"]}') == {"tags": ["sleep", "work"]}


def test_repair_truncated_output():
    assert parse_json_response('{"tags": ["sleep", "work"') == {"tags": ["sleep", "work"]}
    assert repair_json('{"tags": ["a",]}') == '{"tags": ["a"]}'


def test_unparseable_is_none():
    assert parse_json_response("no json here") is None
    assert parse_json_response("") is None
    assert parse_json_response(None) is None


def test_extract_generated_text():
    assert extract_generated_text([{"generated_text": "hi"}]) == "hi"
    assert extract_generated_text({"summary_text": "yo"}) == "yo"
    assert extract_generated_text("plain") == "plain"
    assert extract_generated_text([]) == ""


def test_clean_label():
    assert clean_label("morning plans") == "Morning Plans"
    assert clean_label('"work stress."') == "Work Stress"
    assert clean_label("Theme") is None
    assert clean_label("ok") is None
    assert len(clean_label("a very long label that keeps going and going forever")) <= 32


def test_parse_label_formats():
    assert parse_label("{Theme: Morning Plans}")["label"] == "Morning Plans"
    name = parse_label('{"label": "work stress", "alias": "grind", "description": "Deadlines"}')
    assert name == {"label": "Work Stress", "alias": "grind", "description": "Deadlines"}
    assert parse_label("family dinner")["label"] == "Family Dinner"
    assert parse_label("")["label"] is None


def test_sanitize_tags():
    tags = sanitize_tags({"tags": [
        "sleep", "me@example.com", "see https://x.y", "room 1204", "far too many words here",
        "work stress", "family", "running", "cooking",
    ]})
    assert tags == ["sleep", "work stress", "family", "running"]
    assert sanitize_tags("nope") == []
    assert sanitize_tags(["one", 2, "  "]) == ["one"]


def test_normalize_evidence():
    assert normalize_evidence(["a", "", "b"]) == ["a", "b"]
    assert normalize_evidence("first\n\nsecond") == ["first", "second"]
    assert normalize_evidence({"text": "entry"}) == ["entry"]


def test_infer_label_from_sentences():
    label = infer_label_from_sentences(["The garden needs water.", "Garden beds and water barrels."])
    assert label.split() == ["garden", "water", "needs"]
    assert infer_label_from_sentences([]) == "theme"


def test_label_theme():
    namer = ThemeNamer(FakeGenerator(label="{Theme: Garden Work}"))
    assert namer.label_theme(["Weeded the garden."])["label"] == "Garden Work"
    prompt, options = namer.generator.calls[0]
    assert '- "Weeded the garden."' in prompt
    assert options["max_new_tokens"] == 12


def test_tag_entry_retries_then_falls_back():
    primary = FakeGenerator(outputs=["", ""])
    fallback = FakeGenerator(outputs=['{"tags": ["garden"], "rationales": {"garden": "weeding"}}'])
    tags, rationales = ThemeNamer(primary, fallback).tag_entry(["Weeded the garden."])

    assert tags == ["garden"]
    assert rationales == {"garden": "weeding"}
    assert len(primary.calls) == 2
    assert primary.calls[1][1]["num_beams"] == 4
    assert len(fallback.calls) == 1


def test_tag_entry_without_usable_output():
    tags, rationales = ThemeNamer(FakeGenerator(outputs=["I cannot help with that."])).tag_entry(["x"])
    assert tags == []
    assert rationales == {}
