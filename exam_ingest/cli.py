"""
CLI Interface
=============
Command-line interface for the exam ingest engine.

Usage:
    python -m exam_ingest parse <pdf_path> [options]
    python -m exam_ingest text <txt_path> [options]
    python -m exam_ingest info <pdf_path>
    python -m exam_ingest serve [options]
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from . import __version__
from .engine import ParserConfig, ParserEngine
from .models import ParsedExamPayload
from .validator import ValidationEngine

console = Console()


def _common_options(func):
    """Options shared by the parse and text commands."""
    options = [
        click.option(
            "--output", "-o",
            default="output",
            help="Output directory for parsed data",
        ),
        click.option(
            "--save/--no-save",
            default=True,
            help="Write <exam-id>_parsed.json into the output directory",
        ),
        click.option(
            "--exam-family",
            default="ACT",
            type=click.Choice(["ACT", "SAT"]),
            help="Exam family recorded in the blueprint metadata",
        ),
        click.option(
            "--log-level",
            default="INFO",
            type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"]),
            help="Logging level",
        ),
        click.option(
            "--log-file",
            default=None,
            help="Path to log file",
        ),
        click.option(
            "--json-output",
            is_flag=True,
            default=False,
            help="Output only JSON result to stdout (for programmatic use)",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


@click.group()
@click.version_option(version=__version__, prog_name="exam-ingest")
def cli():
    """Exam Ingest: standardized-test booklet to exam blueprint parser."""
    pass


@cli.command()
@click.argument("pdf_path", type=click.Path(exists=True))
@_common_options
@click.option(
    "--page-start",
    default=None,
    type=int,
    help="Start page (1-indexed)",
)
@click.option(
    "--page-end",
    default=None,
    type=int,
    help="End page (1-indexed, inclusive)",
)
def parse(
    pdf_path: str,
    output: str,
    save: bool,
    exam_family: str,
    log_level: str,
    log_file: str,
    json_output: bool,
    page_start: int,
    page_end: int,
):
    """Parse a PDF booklet into a structured exam blueprint."""
    page_range = None
    if page_start is not None or page_end is not None:
        page_range = (page_start or 1, page_end or 99999)

    engine = _build_engine(
        output, save, exam_family, log_level, log_file, json_output, page_range
    )
    _run(lambda: engine.parse(pdf_path), pdf_path, engine, save, json_output, log_level)


@cli.command()
@click.argument("txt_path", type=click.Path(exists=True))
@_common_options
def text(
    txt_path: str,
    output: str,
    save: bool,
    exam_family: str,
    log_level: str,
    log_file: str,
    json_output: bool,
):
    """Parse an already-extracted text dump of a booklet."""
    engine = _build_engine(output, save, exam_family, log_level, log_file, json_output)

    def run():
        raw = Path(txt_path).read_text(encoding="utf-8")
        payload = engine.parse_text(raw, os.path.basename(txt_path))
        if save:
            engine.save(payload)
        return payload

    _run(run, txt_path, engine, save, json_output, log_level)


@cli.command()
@click.argument("pdf_path", type=click.Path(exists=True))
def info(pdf_path: str):
    """Display PDF file information."""

    import fitz

    with fitz.open(pdf_path) as doc:
        console.print()
        table = Table(title="PDF Information", border_style="cyan")
        table.add_column("Property", style="bold")
        table.add_column("Value")

        table.add_row("File", os.path.basename(pdf_path))
        table.add_row("Pages", str(doc.page_count))
        table.add_row(
            "File Size",
            f"{os.path.getsize(pdf_path) / 1024 / 1024:.2f} MB",
        )

        metadata = doc.metadata or {}
        for key in ["title", "author", "subject", "creator", "producer"]:
            val = metadata.get(key, "")
            if val:
                table.add_row(key.title(), val)

        chars = sum(len(page.get_text("text")) for page in doc)
        table.add_row("Text Characters", str(chars))

    console.print(table)
    if chars == 0:
        console.print("[yellow]No extractable text. This looks like an image-only scan.[/]")
    console.print()


@cli.command()
@click.option("--host", default="0.0.0.0", help="Server host")
@click.option("--port", default=5000, type=int, help="Server port")
@click.option("--debug", is_flag=True, default=False, help="Debug mode")
def serve(host: str, port: int, debug: bool):
    """Start the HTTP ingest service."""
    from .server import run_server

    console.print()
    console.print(
        Panel.fit(
            f"[bold cyan]Exam Ingest Service[/]\n"
            f"[dim]Starting on {host}:{port}[/]",
            border_style="cyan",
        )
    )
    console.print()

    run_server(host=host, port=port, debug=debug)


# ─── Runners ──────────────────────────────────────────────────────────────────


def _build_engine(
    output, save, exam_family, log_level, log_file, json_output, page_range=None
):
    if json_output:
        # Suppress console output for JSON mode
        log_level = "ERROR"

    config = ParserConfig(
        exam_family=exam_family,
        page_range=page_range,
        output_dir=output,
        save_output=save,
        log_level=log_level,
        log_file=log_file,
    )
    return ParserEngine(config)


def _run(job, source_path, engine, save, json_output, log_level):
    if not json_output:
        console.print()
        console.print(
            Panel.fit(
                f"[bold cyan]Exam Ingest v{__version__}[/]\n"
                f"[dim]Parsing: {os.path.basename(source_path)}[/]",
                border_style="cyan",
            )
        )
        console.print()

    try:
        if json_output:
            payload = job()
            print(json.dumps(payload.to_json_dict(), indent=2, ensure_ascii=False))
            return

        with console.status("Parsing booklet..."):
            payload = job()

        try:
            _display_results(payload)
        except UnicodeEncodeError:
            # Windows console may not support special chars
            print(f"Parse complete: {payload.exam.question_count} questions")
        if save:
            console.print(
                f"[dim]Output saved to: "
                f"{Path(engine.config.output_dir) / (payload.exam.id + '_parsed.json')}[/]"
            )

    except FileNotFoundError as e:
        console.print(f"[red]Error:[/] {e}")
        sys.exit(1)
    except RuntimeError as e:
        console.print(f"[red]Error:[/] {e}")
        sys.exit(1)
    except Exception as e:
        console.print(f"[red]Unexpected error:[/] {e}")
        if log_level == "DEBUG":
            console.print_exception()
        sys.exit(1)


# ─── Display Helpers ──────────────────────────────────────────────────────────


def _display_results(payload: ParsedExamPayload):
    """Display parse results in formatted tables."""
    console.print()

    exam = payload.exam
    meta = exam.metadata
    table = Table(title="Exam Blueprint", border_style="cyan")
    table.add_column("Property", style="bold")
    table.add_column("Value")
    table.add_row("ID", exam.id)
    table.add_row("Title", exam.title)
    table.add_row("Family", meta.exam_family.value)
    table.add_row("Version", meta.version or "(not set)")
    table.add_row("Author", meta.author or "(not set)")
    table.add_row("Confidence", f"{meta.ingestion_confidence:.2f}")
    console.print(table)
    console.print()

    if exam.sections:
        section_table = Table(title="Sections", border_style="green")
        section_table.add_column("#", justify="right")
        section_table.add_column("Section", style="bold")
        section_table.add_column("Questions", justify="right")
        section_table.add_column("Grid-in", justify="right")
        section_table.add_column("Answer Keys", justify="right")
        section_table.add_column("Minutes", justify="right")

        for section in exam.sections:
            grid_in = sum(1 for q in section.questions if q.kind.value == "grid-in")
            keyed = sum(1 for q in section.questions if q.answer_key)
            section_table.add_row(
                str(section.order),
                section.name,
                str(len(section.questions)),
                str(grid_in),
                str(keyed),
                str(section.time_limit_minutes),
            )

        console.print(section_table)
        console.print()

    _display_validation_table(
        ValidationEngine().validate(exam, payload.warnings).model_dump()
    )
    _display_warnings(payload)


def _display_validation_table(validation: dict):
    """Display validation report as a rich table."""
    table = Table(title="Validation Report", border_style="green")
    table.add_column("Metric", style="bold")
    table.add_column("Value", justify="right")
    table.add_column("Status", justify="center")

    def status_icon(count, threshold=0):
        if count <= threshold:
            return "[green]✓[/]"
        return "[red]✗[/]"

    total = validation.get("total_questions", 0)
    table.add_row(
        "Questions Detected",
        str(total),
        "[green]✓[/]" if total > 0 else "[red]✗[/]",
    )

    coverage = validation.get("answer_key_coverage", 0)
    table.add_row(
        "Answer Key Coverage",
        f"{validation.get('questions_with_answer_key', 0)} ({coverage}%)",
        "[green]✓[/]" if coverage >= 90 else "[yellow]⚠[/]",
    )

    no_choices = validation.get("questions_without_choices", [])
    table.add_row(
        "Questions Without Choices",
        str(len(no_choices)),
        "[green]✓[/]" if not no_choices else "[yellow]⚠[/]",
    )

    placeholders = validation.get("placeholder_stems", [])
    table.add_row(
        "Placeholder Stems",
        str(len(placeholders)),
        status_icon(len(placeholders)),
    )

    console.print(table)
    console.print()


def _display_warnings(payload: ParsedExamPayload):
    if not payload.warnings:
        return

    colors = {"info": "cyan", "warning": "yellow", "error": "red"}
    table = Table(title="Warnings", border_style="yellow")
    table.add_column("Severity", style="bold")
    table.add_column("Context")
    table.add_column("Message")

    for warning in payload.warnings:
        severity = warning.severity.value
        table.add_row(
            f"[{colors[severity]}]{severity}[/]",
            warning.context or "-",
            warning.message,
        )

    console.print(table)
    console.print()


# ─── Entry point (for python -m exam_ingest.cli) ─────────────────────────────


if __name__ == "__main__":
    cli()
