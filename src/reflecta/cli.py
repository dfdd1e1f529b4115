"""CLI entry point for reflecta."""

import json
import logging
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .config import load_config, DEFAULT_CONFIG
from .errors import ReflectaError

console = Console()

SAMPLE_ENTRIES = [
    "I feel scattered but hopeful about fall routines. I sketched a schedule that fits. "
    "Evenings are the sticking point when my energy is low.",
    "Calls went better than expected once I started. My heart still races beforehand. "
    "Tomorrow I'll draft the outline before I can overthink.",
    "Got the promotion! I'm proud and a little nervous. "
    "Next step: meet the team and map the first 30 days.",
]


@click.group()
@click.option("--config", "-c", "config_path", default=None, help="Path to config file")
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging")
@click.pass_context
def cli(ctx, config_path, verbose):
    """reflecta - Summaries, themes, and sentiment for journal entries."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _get_config(ctx) -> dict:
    return load_config(ctx.obj.get("config_path"))


def build_engine(config: dict):
    """Create an engine with backends built from config."""
    from .engine import JournalEngine

    return JournalEngine(config).initialize()


def _read_text(text: str) -> str:
    if text == "-":
        return click.get_text_stream("stdin").read()
    return text


def _facet_table(report) -> Table:
    table = Table(title="Facets")
    table.add_column("Facet", style="cyan")
    table.add_column("Score", justify="right", style="green")
    table.add_column("Evidence", max_width=60)
    for f in report.facets:
        evidence = " | ".join(e.text for e in f.evidence)
        marker = " *" if f.facet == report.top else ""
        table.add_row(f.facet + marker, f"{f.score:.2f}", evidence)
    return table


@cli.command()
@click.option("--path", default=None, help="Custom config directory")
def init(path):
    """Write a starter config.yaml."""
    import yaml

    base = Path(path).expanduser().resolve() if path else Path("~/.reflecta").expanduser()
    base.mkdir(parents=True, exist_ok=True)

    config_file = base / "config.yaml"
    if config_file.exists():
        console.print(f"[yellow]Config already exists: {config_file}[/]")
        return

    cfg = dict(DEFAULT_CONFIG)
    cfg["snapshot_path"] = str(base / "themes.json")
    header = (
        "# Claude API key for theme labels (or set ANTHROPIC_API_KEY env var)\n"
        "# claude_api_key: sk-ant-your-key-here\n\n"
        "# generation.backend: claude | transformers | none\n\n"
    )
    config_file.write_text(header + yaml.dump(cfg, default_flow_style=False, sort_keys=False))
    console.print(f"[bold green]✓ Created config: {config_file}[/]")


@cli.command()
@click.argument("text")
@click.option("--max-chars", default=None, type=int, help="Summary character budget")
@click.option("--one-sentence", is_flag=True, help="Never pick a second sentence")
@click.pass_context
def summarize(ctx, text, max_chars, one_sentence):
    """Extractive summary of TEXT with facet scores."""
    engine = build_engine(_get_config(ctx))
    options = {}
    if max_chars:
        options["max_chars"] = max_chars
    if one_sentence:
        options["allow_two_sentences"] = False

    try:
        summary = engine.summarize(_read_text(text), **options)
    except ReflectaError as e:
        console.print(f"[red]{e}[/]")
        raise SystemExit(1)

    if not summary.text:
        console.print("[yellow]Nothing to summarize.[/]")
        return
    console.print(f"[bold]{summary.text}[/]  [dim]({summary.method})[/]\n")
    console.print(_facet_table(summary.facets))


@cli.command()
@click.argument("text")
@click.option("--anchors", is_flag=True, help="Use embedding anchors only")
@click.option("--per-sentence", is_flag=True, help="Classify sentence by sentence")
@click.option("--blend", is_flag=True, help="Blend classifier with anchor scores")
@click.pass_context
def sentiment(ctx, text, anchors, per_sentence, blend):
    """Sentiment label and breakdown for TEXT."""
    engine = build_engine(_get_config(ctx))
    text = _read_text(text)

    try:
        if anchors:
            result = engine.infer_sentiment_from_anchors(text)
        else:
            options = {}
            if per_sentence:
                options["mode"] = "per_sentence"
            if blend:
                options["blend_anchors"] = True
            result = engine.infer_sentiment(text, **options)
    except ReflectaError as e:
        console.print(f"[red]{e}[/]")
        raise SystemExit(1)

    colour = {"positive": "green", "negative": "red"}.get(result.label, "yellow")
    console.print(f"[bold {colour}]{result.label}[/] (confidence {result.confidence:.3f})")
    for key, value in result.breakdown.items():
        console.print(f"  {key}: {value:.3f}")
    if result.negative_subtype:
        console.print(f"  [dim]sub-type: {result.negative_subtype}[/]")


@cli.command()
@click.argument("text")
@click.option("--dry-run", is_flag=True, help="Do not persist the updated themes")
@click.pass_context
def themes(ctx, text, dry_run):
    """Assign TEXT to themes and save the updated snapshot."""
    from .storage.snapshots import ThemeSnapshotStore

    config = _get_config(ctx)
    engine = build_engine(config)
    store = ThemeSnapshotStore(config["snapshot_path"])

    snapshot = store.load()
    text = _read_text(text)
    try:
        assignment = engine.assign_themes(text, snapshot)
    except ReflectaError as e:
        console.print(f"[red]{e}[/]")
        raise SystemExit(1)

    if not assignment.entry_tags:
        console.print("[yellow]No themes assigned.[/]")
    for tag in assignment.entry_tags:
        console.print(f"  [cyan]{tag.label}[/] {tag.weight:.2f}  [dim]{tag.id}[/]")
    if assignment.llm_tags:
        console.print(f"  [dim]tags: {', '.join(assignment.llm_tags)}[/]")
    if any(tag.label == config["themes"]["default_label"] for tag in assignment.entry_tags):
        from .enrichment.enricher import infer_label_from_sentences
        from .ingest.segmenter import split_sentences

        hint = infer_label_from_sentences(split_sentences(text))
        console.print(f"  [dim]unnamed theme; keywords: {hint}[/]")

    if dry_run or assignment.snapshot is snapshot:
        return
    try:
        store.save(assignment.snapshot, expected_version=snapshot.version)
    except ReflectaError as e:
        console.print(f"[red]{e}[/]")
        raise SystemExit(1)
    console.print(f"[green]✓ Saved {len(assignment.snapshot.themes)} theme(s), version {assignment.snapshot.version}[/]")


@cli.command("list-themes")
@click.pass_context
def list_themes(ctx):
    """Show stored themes."""
    from .storage.snapshots import ThemeSnapshotStore

    config = _get_config(ctx)
    snapshot = ThemeSnapshotStore(config["snapshot_path"]).load()
    if not snapshot.themes:
        console.print("[yellow]No themes yet. Run 'reflecta themes' on an entry.[/]")
        return

    table = Table(title=f"Themes (version {snapshot.version})")
    table.add_column("Label", style="cyan")
    table.add_column("Count", justify="right", style="green")
    table.add_column("Id", style="dim")
    table.add_column("Updated", style="dim")
    for t in sorted(snapshot.themes, key=lambda t: t.count, reverse=True):
        table.add_row(t.label, str(t.count), t.id, t.updated_at)
    console.print(table)


@cli.command()
@click.argument("text")
@click.option("--save", is_flag=True, help="Persist the updated themes")
@click.pass_context
def process(ctx, text, save):
    """Run every analysis on TEXT and print the record as JSON."""
    from .storage.snapshots import ThemeSnapshotStore

    config = _get_config(ctx)
    engine = build_engine(config)
    store = ThemeSnapshotStore(config["snapshot_path"])
    snapshot = store.load()

    try:
        record = engine.process_entry(_read_text(text), snapshot)
        if save and record.snapshot is not snapshot:
            store.save(record.snapshot, expected_version=snapshot.version)
    except ReflectaError as e:
        console.print(f"[red]{e}[/]")
        raise SystemExit(1)

    click.echo(json.dumps(record.to_dict(), indent=2))


@cli.command()
@click.argument("entry_a")
@click.argument("entry_b")
@click.pass_context
def relevance(ctx, entry_a, entry_b):
    """Cosine relevance between two entries."""
    engine = build_engine(_get_config(ctx))
    try:
        score = engine.score_relevance(engine.embed_entry(entry_a), engine.embed_entry(entry_b))
    except ReflectaError as e:
        console.print(f"[red]{e}[/]")
        raise SystemExit(1)
    console.print(f"{score:.3f}")


@cli.command()
@click.pass_context
def selftest(ctx):
    """Summarize sample entries and show their facet signals."""
    engine = build_engine(_get_config(ctx))
    for sample in SAMPLE_ENTRIES:
        try:
            summary = engine.summarize(sample, allow_two_sentences=True)
        except ReflectaError as e:
            console.print(f"[red]{e}[/]")
            raise SystemExit(1)
        console.print(f"\n[dim]{sample}[/]")
        console.print(f"[bold]{summary.text}[/]  [dim]({summary.method}, top: {summary.facets.top})[/]")
        console.print(_facet_table(summary.facets))
    console.print("\n[bold green]✓ Facet self-test complete[/]")


if __name__ == "__main__":
    cli()
