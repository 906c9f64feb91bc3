"""Global options shared by every subcommand."""

from pathlib import Path
from typing import Optional

import typer

from .. import __version__
from ..config import load_config
from ..logging_config import setup_logging
from . import app
from ._common import console, handle_errors


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"migration-ledger {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    output_dir: Optional[Path] = typer.Option(
        None,
        "-o",
        "--output-dir",
        help="Directory holding checkpoints/ (default: .migration-ledger)",
        file_okay=False,
        dir_okay=True,
    ),
    config: Optional[Path] = typer.Option(
        None,
        "-c",
        "--config",
        help="Configuration file (TOML)",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Only log errors and skipped checkpoints"
    ),
    log_file: Optional[Path] = typer.Option(
        None, "--log-file", help="Also append log records to this file", dir_okay=False
    ),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
):
    """
    Track migration progress with checkpoints of analysis findings.

    [bold cyan]Examples:[/bold cyan]

      migration-ledger record findings.json --revision 3

      migration-ledger checkpoints list

      migration-ledger norms src/services --lookback 5
    """
    setup_logging(
        verbose=verbose, quiet=quiet, log_file=str(log_file) if log_file is not None else None
    )

    with handle_errors("Loading configuration"):
        settings = load_config(
            config_file=config,
            output_dir=str(output_dir) if output_dir is not None else None,
        )

    ctx.obj = {"config": settings}
