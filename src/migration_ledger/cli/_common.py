"""Shared CLI helpers."""

from contextlib import contextmanager
from datetime import datetime
from typing import Iterator, Optional

import typer
from rich.console import Console
from rich.markup import escape

from ..checkpoints import CheckpointStore, format_timestamp, open_store
from ..config import MigrationConfig
from ..exceptions import MigrationLedgerError

console = Console()
err_console = Console(stderr=True)


def get_config(ctx: typer.Context) -> MigrationConfig:
    return ctx.obj["config"]


def get_store(ctx: typer.Context) -> CheckpointStore:
    config = get_config(ctx)
    return open_store(config.output_dir, project_root=config.project_root)


@contextmanager
def handle_errors(action: str) -> Iterator[None]:
    """Print library errors in red and exit 1."""
    try:
        yield
    except MigrationLedgerError as e:
        err_console.print(f"[red]{action} failed:[/red] {escape(str(e))}", highlight=False)
        if e.hint:
            err_console.print(f"[dim]{escape(e.hint)}[/dim]", highlight=False)
        raise typer.Exit(1)


def signed(value: Optional[int]) -> str:
    if value is None:
        return "-"
    return f"{value:+d}"


def short_timestamp(ts: datetime) -> str:
    """``2025-11-08 15:30:45`` for tables."""
    text = format_timestamp(ts)
    return text[:19].replace("T", " ")
