"""
Main CLI entry point for logpipe.

This module provides the command-line interface for running stage pipelines
over JSON Lines records and for inspecting how a message is parsed.
"""

import json
import logging
from pathlib import Path
from typing import Annotated, Any

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table
from rich.text import Text

from logpipe.core import merge_fields
from logpipe.parsers import EventLogParser
from logpipe.parsers.eventlog_parser import LINE_SEPARATOR
from logpipe.schemas import Entry
from logpipe.stages import STAGE_TYPE_EVENTLOGMESSAGE, Pipeline, PipelineConfig, StageConfigError
from logpipe.stages.eventlogmessage import DEFAULT_SOURCE
from logpipe.utils.logger import get_logger, set_level

app = typer.Typer(
    name="logpipe",
    help="Extract structured fields from event log messages",
    add_completion=False,
)

# Records go to stdout, so human-readable output goes to stderr
console = Console(stderr=True)
logger = get_logger(__name__)


@app.command()
def run(
    input_file: Annotated[
        Path,
        typer.Argument(
            help="JSON Lines file of records (objects or bare message strings)",
            exists=True,
            file_okay=True,
            dir_okay=False,
            readable=True,
        ),
    ],
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Pipeline configuration JSON (default: a single eventlogmessage stage)",
        ),
    ] = None,
    output: Annotated[
        Path | None,
        typer.Option(
            "--output",
            "-o",
            help="Output JSON Lines file (default: stdout)",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose output",
        ),
    ] = False,
) -> None:
    """
    Run records through a stage pipeline.

    Each input line is either a JSON object with "line", "labels" and
    "extracted" keys, or a JSON string, which is used as both the line and
    the extracted "message" value.

    Examples:

        # Default pipeline
        logpipe run events.jsonl

        # Custom pipeline, written to a file
        logpipe run events.jsonl --config pipeline.json -o enriched.jsonl
    """
    if verbose:
        set_level(logging.DEBUG)

    try:
        if config is not None:
            pipeline_config = PipelineConfig.from_file(config)
        else:
            pipeline_config = PipelineConfig(pipeline_stages=[{STAGE_TYPE_EVENTLOGMESSAGE: {}}])
        pipeline = Pipeline.from_config(pipeline_config)
    except (FileNotFoundError, json.JSONDecodeError, ValidationError, StageConfigError) as e:
        console.print(f"[bold red]Config error:[/bold red] {e}")
        raise typer.Exit(1) from None

    try:
        entries = _read_entries(input_file)
        results = pipeline.process_entries(entries)

        if output is None:
            for line in _dump_entries(results):
                typer.echo(line)
        else:
            output.parent.mkdir(parents=True, exist_ok=True)
            with output.open("w", encoding="utf-8") as f:
                for line in _dump_entries(results):
                    f.write(line + "\n")

    except Exception as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        if verbose:
            console.print_exception()
        logger.error(f"CLI error: {e}", exc_info=True)
        raise typer.Exit(1) from None

    console.print(
        f"[bold green]Processed {len(results)} record(s)[/bold green] "
        f"through {pipeline.size} stage(s)"
    )


@app.command()
def fields(
    message_file: Annotated[
        Path,
        typer.Argument(
            help="File containing a single event log message",
            exists=True,
            file_okay=True,
            dir_okay=False,
            readable=True,
        ),
    ],
    strict: Annotated[
        bool,
        typer.Option(
            "--strict",
            "-s",
            help="Report whether strict mode (drop_invalid_labels) would keep the fields",
        ),
    ] = False,
) -> None:
    """
    Show the fields parsed from an event log message.

    Line endings are normalized to CRLF before parsing.
    """
    text = message_file.read_text(encoding="utf-8")
    text = text.replace("\r\n", "\n").replace("\n", LINE_SEPARATOR)

    parsed = list(EventLogParser().parse(text))

    table = Table(title=str(message_file))
    table.add_column("Indent", justify="right")
    table.add_column("Name", style="cyan")
    table.add_column("Value")
    table.add_column("Valid")

    for field in parsed:
        table.add_row(
            str(field.indent),
            Text(field.name),
            Text(repr(field.value)),
            "[green]yes[/green]" if field.valid else "[red]no[/red]",
        )

    console.print(table)
    console.print(f"{len(parsed)} field(s)")

    if strict:
        merged = merge_fields(parsed, {}, drop_invalid=True)
        if merged is None:
            console.print("[yellow]Strict mode would drop every field of this message[/yellow]")
        else:
            console.print("[green]Strict mode would keep every field[/green]")


def _read_entries(input_file: Path) -> list[Entry]:
    """
    Read JSON Lines records into entries.

    Blank lines are skipped. Malformed lines are skipped with a warning.

    Args:
        input_file: JSON Lines file

    Returns:
        Entries in file order
    """
    entries: list[Entry] = []

    with input_file.open("r", encoding="utf-8") as f:
        for line_number, raw in enumerate(f, start=1):
            if not raw.strip():
                continue
            try:
                entries.append(_to_entry(json.loads(raw)))
            except (json.JSONDecodeError, ValidationError, TypeError) as e:
                logger.warning(
                    f"Skipping malformed record at line {line_number}",
                    extra={"context": {"file": str(input_file), "line": line_number, "error": str(e)}},
                )

    return entries


def _to_entry(data: Any) -> Entry:
    if isinstance(data, str):
        return Entry(line=data, extracted={DEFAULT_SOURCE: data})
    if isinstance(data, dict):
        return Entry.model_validate(data)
    raise TypeError(f"expected a JSON object or string, got {type(data).__name__}")


def _dump_entries(entries: list[Entry]) -> list[str]:
    return [json.dumps(entry.model_dump(mode="json"), ensure_ascii=False) for entry in entries]


if __name__ == "__main__":
    app()
