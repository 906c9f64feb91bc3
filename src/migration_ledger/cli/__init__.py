"""CLI entry point -- registers all subcommands."""

import typer

app = typer.Typer(
    name="migration-ledger",
    help="Migration Ledger - checkpoint history and norm detection for code migrations",
    add_completion=False,
    rich_markup_mode="rich",
    no_args_is_help=True,
)


# Import subcommands to register them
from .main import main as _main_callback  # noqa: F401, E402
from .record import record as _record  # noqa: F401, E402
from .checkpoints import checkpoints_app  # noqa: E402
from .norms import norms as _norms  # noqa: F401, E402

app.add_typer(checkpoints_app, name="checkpoints")


def main() -> None:
    app()
