"""Record command -- normalize a findings file and store it as a checkpoint."""

import json
from pathlib import Path
from typing import Optional

import typer

from ..exceptions import FindingsFileError
from ..snapshot import Finding, normalize_findings
from . import app
from ._common import console, get_config, get_store, handle_errors, signed


def load_findings_file(path: Path) -> list[Finding]:
    """Read rule-engine output: a JSON list, or an object with ``findings``/``results``."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise FindingsFileError(path, str(e)) from e

    if isinstance(data, dict):
        data = data.get("findings", data.get("results"))
    if not isinstance(data, list):
        raise FindingsFileError(path, "expected a list of findings")

    try:
        return [Finding.from_dict(item) for item in data]
    except ValueError as e:
        raise FindingsFileError(path, str(e)) from e


@app.command()
def record(
    ctx: typer.Context,
    findings_file: Path = typer.Argument(
        ...,
        help="JSON file with raw findings from the rule engine",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
    revision: Optional[int] = typer.Option(
        None,
        "--revision",
        "-r",
        help="Revision number (default: number of existing checkpoints + 1)",
        min=1,
    ),
    thread: Optional[str] = typer.Option(
        None,
        "--thread",
        help="Reference to the work session that produced these findings",
    ),
):
    """
    Record a checkpoint from a findings file.

    [bold cyan]Examples:[/bold cyan]

      migration-ledger record findings.json

      migration-ledger record findings.json --revision 12 --thread T-42
    """
    config = get_config(ctx)
    store = get_store(ctx)

    with handle_errors("Recording checkpoint"):
        findings = load_findings_file(findings_file)
        snapshot = normalize_findings(findings)
        if revision is None:
            revision = len(store.read_manifest().checkpoints) + 1
        entry = store.create_checkpoint(snapshot, config, revision, thread)

    summary = entry.summary
    console.print(f"[green]Recorded checkpoint[/green] [bold]{entry.id}[/bold] (revision {revision})")
    console.print(
        f"  {summary.total_findings} findings in {summary.total_files} files: "
        f"{summary.errors} errors, {summary.warnings} warnings ({summary.info} info)"
    )
    if entry.delta is not None:
        console.print(f"  Delta vs previous: {signed(entry.delta.total_findings)}")
