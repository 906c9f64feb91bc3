"""Norm capture: choose directory summaries and persist them as JSON.

Captured summaries live next to the checkpoints::

    <output_dir>/norms/src_services.json   # {"summary": {...}}

The file name is the directory with ``/`` replaced by ``_``; the whole
project is stored as ``_root.json``.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Iterable, Optional

from ..checkpoints.backend import atomic_write_text
from ..exceptions import InvalidConfigError, NormCaptureError
from ..logging_config import get_logger
from .models import DirectorySummary

logger = get_logger(__name__)

NORMS_DIRNAME = "norms"
ROOT_SUMMARY_NAME = "_root"
STATUS_FILTERS = ("migrated", "in-progress", "all")


def norm_summary_path(output_dir: str | os.PathLike, directory: str) -> Path:
    """Where the captured summary for ``directory`` is written."""
    name = directory.strip("/")
    if name in ("", "."):
        name = ROOT_SUMMARY_NAME
    return Path(output_dir) / NORMS_DIRNAME / f"{name.replace('/', '_')}.json"


def skip_reason(
    summary: DirectorySummary, status: str = "all", min_files: int = 1
) -> Optional[str]:
    """Why ``summary`` is left out of a capture, or ``None`` to keep it.

    Raises
    ------
    InvalidConfigError
        For an unknown ``status`` filter or a negative ``min_files``.
    """
    if status not in STATUS_FILTERS:
        raise InvalidConfigError("status", status, f"must be one of {', '.join(STATUS_FILTERS)}")
    if isinstance(min_files, bool) or not isinstance(min_files, int) or min_files < 0:
        raise InvalidConfigError("min_files", min_files, "must be an integer >= 0")

    if status != "all" and summary.status != status:
        return f'status is "{summary.status}", filter is "{status}"'
    if summary.files.total < min_files:
        return f"only {summary.files.total} files (min: {min_files})"
    return None


def filter_summaries(
    summaries: Iterable[DirectorySummary], status: str = "all", min_files: int = 1
) -> list[DirectorySummary]:
    return [s for s in summaries if skip_reason(s, status, min_files) is None]


def write_summary(
    output_dir: str | os.PathLike, summary: DirectorySummary, overwrite: bool = False
) -> Optional[Path]:
    """Write ``summary`` under ``<output_dir>/norms/``.

    Returns the path written, or ``None`` when a summary for the directory
    already exists and ``overwrite`` is false.

    Raises
    ------
    NormCaptureError
        When the file cannot be written.
    """
    path = norm_summary_path(output_dir, summary.directory)
    if path.exists() and not overwrite:
        logger.info("Norm summary %s exists; not overwriting", path)
        return None

    content = json.dumps({"summary": summary.to_dict()}, indent=2) + "\n"
    try:
        atomic_write_text(path, content)
    except OSError as e:
        raise NormCaptureError(str(path), str(e)) from e
    logger.info("Captured norms for %r in %s", summary.directory, path)
    return path
