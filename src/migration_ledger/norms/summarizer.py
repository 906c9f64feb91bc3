"""Directory summaries: load checkpoint history and run norm detection."""

from __future__ import annotations

import os
from typing import Optional

from ..checkpoints.models import Checkpoint, CheckpointSummary, Manifest
from ..checkpoints.outcome import Valid
from ..checkpoints.store import CheckpointStore, open_store
from ..exceptions import InvalidConfigError, NoCheckpointsError
from ..logging_config import get_logger
from .detection import (
    compute_directory_stats,
    detect_extinct_norms,
    determine_status,
    find_clean_timestamp,
    list_directories,
    normalize_directory,
)
from .models import DirectorySummary

logger = get_logger(__name__)

DEFAULT_LOOKBACK_WINDOW = 5
DEFAULT_CHECKPOINT_LIMIT = 50


class DirectorySummarizer:
    """Build ``DirectorySummary`` objects from a store's history.

    History is read tolerantly: a corrupt manifest counts as no history and
    corrupt checkpoints are skipped.  Asking for a summary with no usable
    history raises ``NoCheckpointsError`` rather than returning an empty
    summary.
    """

    def __init__(self, store: CheckpointStore) -> None:
        self.store = store

    def summarize(
        self,
        directory: str,
        lookback_window: int = DEFAULT_LOOKBACK_WINDOW,
        checkpoint_limit: int = DEFAULT_CHECKPOINT_LIMIT,
    ) -> DirectorySummary:
        """Summarize migration status for one directory prefix.

        Parameters
        ----------
        directory:
            Prefix relative to the project root, e.g. ``"src/services"``.
        lookback_window:
            Consecutive zero-violation checkpoints required for a norm.
        checkpoint_limit:
            Most recent checkpoints to load.

        Raises
        ------
        NoCheckpointsError
            When no checkpoint could be loaded.
        InvalidDirectoryError
            When ``directory`` is absolute or escapes the project.
        InvalidConfigError
            When ``lookback_window`` or ``checkpoint_limit`` is below 1.
        """
        _check_positive("lookback_window", lookback_window)
        _check_positive("checkpoint_limit", checkpoint_limit)
        prefix = normalize_directory(directory)
        manifest, history = self._load(checkpoint_limit)
        return self._summarize_history(history, manifest, prefix, lookback_window)

    def summarize_all(
        self,
        depth: int = 1,
        lookback_window: int = DEFAULT_LOOKBACK_WINDOW,
        checkpoint_limit: int = DEFAULT_CHECKPOINT_LIMIT,
    ) -> list[DirectorySummary]:
        """Summaries for every directory at ``depth`` seen in the history.

        The manifest and history are loaded once and shared by every summary.
        """
        _check_positive("depth", depth)
        _check_positive("lookback_window", lookback_window)
        _check_positive("checkpoint_limit", checkpoint_limit)
        manifest, history = self._load(checkpoint_limit)
        return [
            self._summarize_history(history, manifest, normalize_directory(d), lookback_window)
            for d in list_directories(history, depth)
        ]

    def _load(self, checkpoint_limit: int) -> tuple[Manifest, list[Checkpoint]]:
        manifest = self._manifest_or_empty()
        history = self.store.load_history(checkpoint_limit)
        if not history:
            reason = (
                "No checkpoints found in manifest"
                if not manifest.checkpoints
                else "No readable checkpoints in history"
            )
            raise NoCheckpointsError(self.store.backend.describe(), reason)
        return manifest, history

    def _summarize_history(
        self,
        history: list[Checkpoint],
        manifest: Manifest,
        prefix: str,
        lookback_window: int,
    ) -> DirectorySummary:
        logger.debug(
            "Summarizing %r over %d checkpoints (window %d)",
            prefix or ".",
            len(history),
            lookback_window,
        )

        norms = detect_extinct_norms(history, prefix, lookback_window)
        stats = compute_directory_stats(history, prefix)

        latest = history[-1]
        entry = next((e for e in manifest.checkpoints if e.id == latest.checkpoint_id), None)
        if entry is not None:
            latest_summary = entry.to_summary()
        else:
            latest_summary = CheckpointSummary(
                id=latest.checkpoint_id,
                timestamp=latest.timestamp,
                summary=latest.findings.summary,
                thread=latest.thread,
            )

        return DirectorySummary(
            directory=prefix or ".",
            status=determine_status(stats, norms),
            files=stats,
            norms=norms,
            clean_since=find_clean_timestamp(history, prefix),
            latest_checkpoint=latest_summary,
        )

    def _manifest_or_empty(self) -> Manifest:
        outcome = self.store.read_manifest_outcome()
        return outcome.value if isinstance(outcome, Valid) else Manifest()


def _check_positive(name: str, value: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise InvalidConfigError(name, value, "must be an integer >= 1")


def summarize(
    output_dir: str | os.PathLike,
    directory: str,
    lookback_window: int = DEFAULT_LOOKBACK_WINDOW,
    checkpoint_limit: int = DEFAULT_CHECKPOINT_LIMIT,
    store: Optional[CheckpointStore] = None,
) -> DirectorySummary:
    """Summarize ``directory`` from the checkpoints under ``output_dir``."""
    summarizer = DirectorySummarizer(store or open_store(output_dir))
    return summarizer.summarize(directory, lookback_window, checkpoint_limit)
