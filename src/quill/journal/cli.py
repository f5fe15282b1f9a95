import asyncio
import json
import logging
from pathlib import Path

import typer
import yaml
from rich.console import Console
from rich.table import Table
from rich.text import Text

from quill.journal.audit import LoggingAuditSink
from quill.journal.config import (
    AppConfig,
    find_config_file,
    generate_default_config,
    load_yaml_config,
)
from quill.journal.content import ContentProcessor, Redactor
from quill.journal.exceptions import QuillJournalError
from quill.journal.logging import configure_cli_logging
from quill.journal.store import InMemoryEntryStore
from quill.journal.summary import (
    CombinedSummaryRequest,
    CombinedSummaryResult,
    CombinedSummaryService,
    HierarchicalAggregator,
    SummaryClient,
    SummaryValidator,
)

logger = logging.getLogger(__name__)

console = Console()

cli = typer.Typer(
    name="quill-journal",
    help="PHI-safe journal content processing and hierarchical summaries.",
    no_args_is_help=True,
)


def load_app_config(config_path: Path | None) -> AppConfig:
    """Load config from file or use defaults."""
    try:
        found_path = find_config_file(config_path)
    except FileNotFoundError as e:
        raise typer.BadParameter(str(e)) from e
    if found_path is None:
        return AppConfig()
    logger.debug("Loading config from %s", found_path)
    return AppConfig.model_validate(load_yaml_config(found_path))


def _read_content(path: Path) -> object:
    """Read entry content: JSON files are parsed, anything else is plain text."""
    text = path.read_text()
    if path.suffix.lower() == ".json":
        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise typer.BadParameter(f"Invalid JSON in {path}: {e}") from e
    return text


def _configure_instrumentation() -> None:
    import logfire

    logfire.configure(send_to_logfire="if-token-present", console=False)
    logfire.instrument_pydantic_ai()


def _print_result(result: CombinedSummaryResult) -> None:
    table = Table(title="Summary tree", show_lines=True)
    table.add_column("Level", style="cyan")
    table.add_column("Entries")
    table.add_column("Words", justify="right")
    table.add_column("Summary")
    for node in result.tree.nodes:
        table.add_row(
            node.level.value,
            ", ".join(node.source_entry_ids),
            str(node.word_count),
            Text(node.summary_text),
        )
    console.print(table)
    console.print(
        f"{result.total_entries} entries, "
        f"{result.date_range.start:%Y-%m-%d} to {result.date_range.end:%Y-%m-%d}",
        style="dim",
    )
    console.print("[bold]Final summary[/bold]")
    console.print(result.final_summary, markup=False, highlight=False)


@cli.callback()
def main_callback(
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug logging."
    ),
) -> None:
    configure_cli_logging(logging.DEBUG if verbose else logging.INFO)


@cli.command("redact", help="Redact PHI from a piece of text")
def redact(
    text: str = typer.Argument(..., help="Text to redact."),
    config: Path | None = typer.Option(
        None, "--config", help="Path to YAML config file."
    ),
) -> None:
    app_config = load_app_config(config)
    redactor = Redactor.from_config(app_config.redaction)
    console.print(redactor.redact(text), markup=False, highlight=False)


@cli.command("prepare", help="Show the AI-bound text and fingerprint for an entry")
def prepare(
    file: Path = typer.Argument(
        ..., exists=True, dir_okay=False, help="Editor JSON or plain text file."
    ),
    max_length: int | None = typer.Option(
        None, "--max-length", help="Truncate the prepared text to this length."
    ),
    config: Path | None = typer.Option(
        None, "--config", help="Path to YAML config file."
    ),
) -> None:
    app_config = load_app_config(config)
    processor = ContentProcessor(app_config)
    prepared = processor.prepare_for_ai(_read_content(file), max_length=max_length)
    console.print(prepared.text, markup=False, highlight=False)
    console.print(f"hash: {prepared.content_hash}", style="dim")


@cli.command("summarize", help="Build a combined summary tree from an entry file")
def summarize(
    file: Path = typer.Argument(
        ..., exists=True, dir_okay=False, help="JSON file with entries and shares."
    ),
    requester: str = typer.Option(
        ..., "--requester", help="User id the summary is built for."
    ),
    entry: list[str] | None = typer.Option(
        None, "--entry", help="Entry id to include. Repeatable; defaults to all."
    ),
    group_size: int = typer.Option(
        3, "--group-size", min=2, max=10, help="Entries per group summary."
    ),
    save: bool = typer.Option(
        True, "--save/--no-save", help="Persist newly generated entry summaries."
    ),
    config: Path | None = typer.Option(
        None, "--config", help="Path to YAML config file."
    ),
) -> None:
    app_config = load_app_config(config)
    _configure_instrumentation()

    store = InMemoryEntryStore.from_json(file)
    entry_ids = entry or store.entry_ids
    if len(entry_ids) < 2:
        console.print("[red]At least 2 entries required for combination[/red]")
        raise typer.Exit(1)

    processor = ContentProcessor(app_config)
    aggregator = HierarchicalAggregator(
        SummaryClient(app_config),
        processor,
        SummaryValidator(processor.redactor, app_config),
        app_config,
    )
    service = CombinedSummaryService(store, aggregator, LoggingAuditSink())
    request = CombinedSummaryRequest(
        entry_ids=entry_ids,
        group_size=group_size,
        save_individual_summaries=save,
    )

    try:
        result = asyncio.run(service.summarize(requester, request))
    except QuillJournalError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1) from e

    _print_result(result)


@cli.command("init-config", help="Write a default YAML config file")
def init_config(
    path: Path = typer.Argument(
        Path("quill.journal.yaml"), help="Where to write the config file."
    ),
    force: bool = typer.Option(
        False, "--force", help="Overwrite an existing file."
    ),
) -> None:
    if path.exists() and not force:
        console.print(f"[red]{path} already exists (use --force to overwrite)[/red]")
        raise typer.Exit(1)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        yaml.safe_dump(generate_default_config(), f, sort_keys=False)
    console.print(f"Wrote default config to {path}")


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
