"""Tests for the CLI using fake backends."""

import json
import tempfile
from pathlib import Path

import pytest
from click.testing import CliRunner

from reflecta import cli as cli_module
from reflecta.cli import cli
from reflecta.engine import JournalEngine

from conftest import FakeClassifier, FakeEmbedder

POSITIVE = [{"label": "POSITIVE", "score": 0.98}, {"label": "NEGATIVE", "score": 0.02}]


def _engine(config):
    return JournalEngine(config, embedder=FakeEmbedder(), classifier=FakeClassifier(POSITIVE))


@pytest.fixture
def workdir(monkeypatch):
    monkeypatch.setattr(cli_module, "build_engine", _engine)
    with tempfile.TemporaryDirectory() as tmpdir:
        cfg_file = Path(tmpdir) / "config.yaml"
        cfg_file.write_text(f"snapshot_path: {tmpdir}/themes.json\ngeneration:\n  backend: none\n")
        yield Path(tmpdir), str(cfg_file)


def test_summarize(workdir):
    _, cfg = workdir
    result = CliRunner().invoke(cli, ["-c", cfg, "summarize", "I feel anxious but hopeful about tomorrow's meeting."])
    assert result.exit_code == 0
    assert "extractive" in result.output
    assert "feeling" in result.output


def test_summarize_from_stdin(workdir):
    _, cfg = workdir
    result = CliRunner().invoke(cli, ["-c", cfg, "summarize", "-"], input="Walked to work in the rain.\n")
    assert result.exit_code == 0
    assert "Walked to work in the rain." in result.output


def test_sentiment_anchors(workdir):
    _, cfg = workdir
    result = CliRunner().invoke(cli, ["-c", cfg, "sentiment", "--anchors", "I feel grateful and calm and hopeful."])
    assert result.exit_code == 0
    assert "positive" in result.output


def test_themes_persist(workdir):
    tmpdir, cfg = workdir
    runner = CliRunner()
    first = runner.invoke(cli, ["-c", cfg, "themes", "Finished a 5k run today."])
    assert first.exit_code == 0
    assert "keywords: finished run today" in first.output
    assert runner.invoke(cli, ["-c", cfg, "themes", "Finished a 5k run today!"]).exit_code == 0

    stored = json.loads((tmpdir / "themes.json").read_text())
    assert stored["version"] == 2
    assert len(stored["themes"]) == 1

    result = runner.invoke(cli, ["-c", cfg, "list-themes"])
    assert result.exit_code == 0
    assert "Theme" in result.output


def test_process_outputs_json(workdir):
    _, cfg = workdir
    result = CliRunner().invoke(cli, ["-c", cfg, "process", "Slept late. Cooked a big breakfast."])
    assert result.exit_code == 0
    record = json.loads(result.stdout)
    assert record["sentiment"]["label"] == "positive"
    assert record["summary_method"].startswith("extractive")
    assert abs(sum(t["weight"] for t in record["entry_tags"]) - 1.0) < 1e-9


def test_relevance(workdir):
    _, cfg = workdir
    result = CliRunner().invoke(cli, ["-c", cfg, "relevance", "Walked the dog.", "Walked the dog."])
    assert result.exit_code == 0
    assert "1.000" in result.output


def test_selftest(workdir):
    _, cfg = workdir
    result = CliRunner().invoke(cli, ["-c", cfg, "selftest"])
    assert result.exit_code == 0
    assert "self-test complete" in result.output


def test_init_writes_config():
    with tempfile.TemporaryDirectory() as tmpdir:
        result = CliRunner().invoke(cli, ["init", "--path", tmpdir])
        assert result.exit_code == 0
        assert (Path(tmpdir) / "config.yaml").exists()
