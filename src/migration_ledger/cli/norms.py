"""Norms CLI command -- directory migration status from checkpoint history."""

import json
from pathlib import Path
from typing import Optional

import click
import typer
from rich.markup import escape
from rich.table import Table

from ..norms import (
    NORMS_DIRNAME,
    STATUS_FILTERS,
    DirectorySummarizer,
    DirectorySummary,
    norm_summary_path,
    skip_reason,
    write_summary,
)
from . import app
from ._common import console, get_config, get_store, handle_errors, short_timestamp

_STATUS_STYLE = {
    "migrated": "green",
    "in-progress": "yellow",
    "not-started": "dim",
}


@app.command()
def norms(
    ctx: typer.Context,
    directory: Optional[str] = typer.Argument(
        None,
        help="Directory prefix to analyze, e.g. src/services (default: every directory at --depth)",
    ),
    lookback: Optional[int] = typer.Option(
        None,
        "--lookback",
        "-k",
        help="Consecutive clean checkpoints required to establish a norm",
        min=1,
    ),
    limit: Optional[int] = typer.Option(
        None,
        "--limit",
        "-n",
        help="Maximum number of recent checkpoints to load",
        min=1,
    ),
    depth: int = typer.Option(
        1,
        "--depth",
        help="Directory depth when no directory is given",
        min=1,
    ),
    status: str = typer.Option(
        "all",
        "--status",
        help="Only directories with this status: migrated | in-progress | all",
        click_type=click.Choice(list(STATUS_FILTERS), case_sensitive=False),
    ),
    min_files: int = typer.Option(
        1,
        "--min-files",
        help="Skip directories with fewer files than this",
        min=0,
    ),
    prepare_only: bool = typer.Option(
        True,
        "--prepare-only/--no-prepare-only",
        help="Only print summaries; --no-prepare-only also writes them to <output-dir>/norms/",
    ),
    overwrite: bool = typer.Option(
        False,
        "--overwrite",
        help="Replace norm summaries that were already written",
    ),
    json_output: bool = typer.Option(False, "--json", help="Output in machine-readable JSON format"),
):
    """
    Detect established norms and migration status per directory.

    A norm is a rule whose violations dropped to zero and stayed at zero for
    the last --lookback checkpoints.

    [bold cyan]Examples:[/bold cyan]

      migration-ledger norms src/services

      migration-ledger norms --depth 2 --json

      migration-ledger norms --status migrated --no-prepare-only
    """
    config = get_config(ctx)
    lookback_window = lookback or config.lookback_window
    checkpoint_limit = limit or config.checkpoint_limit
    summarizer = DirectorySummarizer(get_store(ctx))
    status = status.lower()

    with handle_errors("Norm detection"):
        if directory is not None:
            summaries = [summarizer.summarize(directory, lookback_window, checkpoint_limit)]
        else:
            summaries = summarizer.summarize_all(depth, lookback_window, checkpoint_limit)

        selected = []
        for summary in summaries:
            reason = skip_reason(summary, status, min_files)
            if reason is None:
                selected.append(summary)
            else:
                _note(
                    json_output,
                    f"[dim]Skipping {escape(summary.directory)}: {escape(reason)}[/dim]",
                )

    if json_output:
        print(json.dumps([s.to_dict() for s in selected], indent=2))
    else:
        for summary in selected:
            _print_summary(summary)
        if not selected:
            console.print("No directories match the filters.")

    if prepare_only:
        if selected and not json_output:
            console.print(
                "Run with --no-prepare-only to write these summaries to "
                f"{escape(str(Path(config.output_dir) / NORMS_DIRNAME))}/",
                highlight=False,
            )
        return

    with handle_errors("Norm capture"):
        for summary in selected:
            path = write_summary(config.output_dir, summary, overwrite=overwrite)
            if path is None:
                existing = norm_summary_path(config.output_dir, summary.directory)
                _note(
                    json_output,
                    f"Skipping {escape(summary.directory)}: {escape(str(existing))} exists "
                    "(use --overwrite to replace)",
                )
            else:
                _note(json_output, f"[green]Wrote norm summary:[/green] {escape(str(path))}")


def _print_summary(summary: DirectorySummary) -> None:
    style = _STATUS_STYLE.get(summary.status, "white")
    files = summary.files
    console.print(f"[bold]{escape(summary.directory)}[/bold]  [{style}]{summary.status}[/{style}]")
    console.print(
        f"  Files: {files.total} ({files.clean} clean, {files.with_violations} with violations)"
    )
    if summary.clean_since is not None:
        console.print(f"  Clean since: {short_timestamp(summary.clean_since)}")
    console.print(f"  Latest checkpoint: {summary.latest_checkpoint.id}")

    if not summary.norms:
        console.print("  Norms: none")
        console.print()
        return

    table = Table(show_lines=False, pad_edge=True, box=None)
    table.add_column("Rule", style="bold")
    table.add_column("Severity")
    table.add_column("Established", style="green")
    table.add_column("Fixed", justify="right")
    for norm in summary.norms:
        table.add_row(
            norm.rule_id,
            norm.severity,
            short_timestamp(norm.established_at),
            str(norm.violations_fixed),
        )
    console.print(table)
    console.print()


def _note(json_output: bool, text: str) -> None:
    """Progress line for text output; JSON output keeps stdout to the document."""
    if not json_output:
        console.print(text, highlight=False)
