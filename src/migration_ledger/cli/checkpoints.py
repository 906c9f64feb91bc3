"""Checkpoints CLI commands -- list, inspect and compare stored checkpoints."""

import json
from typing import Optional

import typer
from rich.table import Table

from ._common import console, get_config, get_store, handle_errors, short_timestamp, signed

checkpoints_app = typer.Typer(
    help="Inspect recorded checkpoints",
    no_args_is_help=True,
)


@checkpoints_app.command("list")
def list_command(
    ctx: typer.Context,
    limit: Optional[int] = typer.Option(
        None,
        "--limit",
        "-n",
        help="Maximum number of checkpoints to list",
        min=1,
        max=1000,
    ),
    json_output: bool = typer.Option(False, "--json", help="Output in machine-readable JSON format"),
):
    """List checkpoints, newest first."""
    store = get_store(ctx)
    with handle_errors("Reading checkpoints"):
        summaries = store.list_checkpoints(limit or get_config(ctx).list_limit)

    if json_output:
        print(json.dumps([s.to_dict() for s in summaries], indent=2))
        return

    if not summaries:
        console.print("[yellow]No checkpoints found.[/yellow]")
        return

    table = Table(title="Checkpoints", show_lines=False, pad_edge=True)
    table.add_column("ID", style="bold", no_wrap=True)
    table.add_column("Timestamp", style="green")
    table.add_column("Thread", style="cyan")
    table.add_column("Errors", justify="right", style="red")
    table.add_column("Warnings", justify="right", style="yellow")
    table.add_column("Info", justify="right")
    table.add_column("Total", justify="right")
    table.add_column("Delta", justify="right", style="dim")

    for s in summaries:
        table.add_row(
            s.id,
            short_timestamp(s.timestamp),
            s.thread or "-",
            str(s.summary.errors),
            str(s.summary.warnings),
            str(s.summary.info),
            str(s.summary.total_findings),
            signed(s.delta.total_findings if s.delta else None),
        )

    console.print()
    console.print(table)
    console.print()


@checkpoints_app.command()
def latest(ctx: typer.Context):
    """Show the most recent checkpoint."""
    store = get_store(ctx)
    with handle_errors("Reading checkpoints"):
        summary = store.latest_checkpoint()

    if summary is None:
        console.print("[yellow]No checkpoints found.[/yellow]")
        raise typer.Exit(1)

    console.print(f"Latest checkpoint: [bold]{summary.id}[/bold]")
    console.print(f"Timestamp: {short_timestamp(summary.timestamp)}")
    console.print(
        f"Errors: {summary.summary.errors}, Warnings: {summary.summary.warnings}, "
        f"Info: {summary.summary.info}"
    )
    console.print(f"Total findings: {summary.summary.total_findings}")
    if summary.delta is not None:
        console.print(f"Delta: {signed(summary.delta.total_findings)}")


@checkpoints_app.command()
def show(
    ctx: typer.Context,
    checkpoint_id: str = typer.Argument(..., help="Checkpoint id"),
    json_output: bool = typer.Option(False, "--json", help="Output in machine-readable JSON format"),
):
    """Show one checkpoint."""
    store = get_store(ctx)
    with handle_errors(f"Reading checkpoint {checkpoint_id}"):
        checkpoint = store.read_checkpoint(checkpoint_id)

    if json_output:
        print(json.dumps(checkpoint.to_dict(), indent=2))
        return

    summary = checkpoint.findings.summary
    console.print(f"Checkpoint: [bold]{checkpoint.checkpoint_id}[/bold]")
    console.print(f"Revision: {checkpoint.revision}")
    console.print(f"Timestamp: {short_timestamp(checkpoint.timestamp)}")
    if checkpoint.thread:
        console.print(f"Thread: {checkpoint.thread}")
    console.print(f"Errors: {summary.errors}")
    console.print(f"Warnings: {summary.warnings}")
    console.print(f"Info: {summary.info}")
    console.print(f"Total findings: {summary.total_findings}")


@checkpoints_app.command()
def diff(
    ctx: typer.Context,
    before_id: str = typer.Argument(..., help="Older checkpoint id"),
    after_id: str = typer.Argument(..., help="Newer checkpoint id"),
):
    """Compare two checkpoints by counts and by individual findings."""
    store = get_store(ctx)
    with handle_errors("Comparing checkpoints"):
        comparison = store.compare_checkpoints(before_id, after_id)

    delta = comparison.delta
    console.print(f"Comparing {before_id} -> {after_id}")
    console.print(f"Errors: {signed(delta.errors)}")
    console.print(f"Warnings: {signed(delta.warnings)}")
    console.print(f"Info: {signed(delta.info)}")
    console.print(f"Total: {signed(delta.total_findings)}")
    console.print(f"Added findings: {comparison.added}")
    console.print(f"Removed findings: {comparison.removed}")
