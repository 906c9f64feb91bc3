"""
Logging configuration for Migration Ledger.

Two channels share one rich handler on stderr:

- ``migration_ledger.*`` module loggers follow ``--verbose`` / ``--quiet``.
- ``migration_ledger.history`` carries the checkpoints dropped while loading
  history (missing, malformed, unreadable manifest). A skipped checkpoint
  changes norm results, so this channel stays at WARNING under ``--quiet``.
"""

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

ROOT_LOGGER = "migration_ledger"
HISTORY_LOGGER = f"{ROOT_LOGGER}.history"

FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _level(verbose: bool, quiet: bool) -> int:
    if quiet:
        return logging.ERROR
    if verbose:
        return logging.DEBUG
    return logging.WARNING


def setup_logging(
    verbose: bool = False, quiet: bool = False, log_file: Optional[str] = None
) -> logging.Logger:
    """
    Install the rich stderr handler and, optionally, a plain file handler.

    Args:
        verbose: Debug output from every module
        quiet: Only errors, except history skips which stay at WARNING
        log_file: Append records to this file as well

    Returns:
        The root ``migration_ledger`` logger
    """
    level = _level(verbose, quiet)

    handlers: list[logging.Handler] = [
        RichHandler(
            console=Console(stderr=True),
            rich_tracebacks=True,
            tracebacks_show_locals=verbose,
            markup=False,
            show_time=True,
            show_path=verbose,
        )
    ]

    if log_file:
        file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        handlers.append(file_handler)

    logging.basicConfig(level=level, format="%(message)s", datefmt="[%X]", handlers=handlers)

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level)
    # Propagated records skip ancestor levels, so this one setting lets
    # history warnings through a quiet root.
    logging.getLogger(HISTORY_LOGGER).setLevel(min(level, logging.WARNING))

    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Logger namespaced under ``migration_ledger``.

    Args:
        name: Module name such as ``__name__``, or a short channel name such
              as ``"history"``. None returns the root package logger.
    """
    if name is None:
        return logging.getLogger(ROOT_LOGGER)

    if not name.startswith(ROOT_LOGGER):
        name = f"{ROOT_LOGGER}.{name}"

    return logging.getLogger(name)


def get_history_logger() -> logging.Logger:
    """Logger for checkpoints skipped while loading history."""
    return logging.getLogger(HISTORY_LOGGER)
