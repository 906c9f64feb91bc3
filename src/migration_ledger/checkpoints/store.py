"""Checkpoint store: persist normalized snapshots and maintain the manifest.

Layout (``FileBackend``)::

    <output_dir>/checkpoints/manifest.json
    <output_dir>/checkpoints/<checkpoint id>.json

Reads come in two tiers.  Explicit lookups (``read_checkpoint``) raise when
the named checkpoint is missing or invalid.  Bulk reads (``load_history``)
are tolerant: a missing or corrupt checkpoint is logged and skipped, so a
partially written history still yields a usable summary.

``create_checkpoint`` does a read-modify-write of the manifest with no
locking.  Concurrent writers against the same directory can lose a manifest
update; callers that need strict ordering must serialize.
"""

from __future__ import annotations

import json
import os
import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional, Union

from ..config import MigrationConfig
from ..exceptions import (
    CheckpointNotFoundError,
    CheckpointValidationError,
    InvalidConfigError,
)
from ..logging_config import get_history_logger, get_logger
from ..snapshot.identity import KeyDiff, diff_result_keys
from ..snapshot.models import NormalizedSnapshot
from .backend import CheckpointBackend, FileBackend
from .models import (
    SCHEMA_VERSION,
    Checkpoint,
    CheckpointSummary,
    ConfigSnapshot,
    DeltaStats,
    Manifest,
    ManifestEntry,
    format_checkpoint_id,
)
from .outcome import Malformed, Missing, ParseOutcome, Valid, parse_document

logger = get_logger(__name__)
history_logger = get_history_logger()

MANIFEST_NAME = "manifest.json"

_CHECKPOINT_ID_RE = re.compile(r"^[0-9A-Za-z][0-9A-Za-z._-]*$")


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class CheckpointComparison:
    """Difference between two checkpoints, by counts and by finding keys."""

    before_id: str
    after_id: str
    delta: DeltaStats
    keys: KeyDiff

    @property
    def added(self) -> int:
        return len(self.keys.added)

    @property
    def removed(self) -> int:
        return len(self.keys.removed)


class CheckpointStore:
    """Ordered history of checkpoints on top of a ``CheckpointBackend``.

    Usage::

        store = CheckpointStore(FileBackend(".migration-ledger"))
        entry = store.create_checkpoint(snapshot, config, revision=1)
        history = store.load_history(limit=50)
    """

    def __init__(
        self,
        backend: CheckpointBackend,
        clock: Callable[[], datetime] = _utc_now,
        tool_version: Optional[str] = None,
        project_root: str = ".",
    ) -> None:
        if tool_version is None:
            from .. import __version__

            tool_version = __version__
        self.backend = backend
        self.clock = clock
        self.tool_version = tool_version
        self.project_root = project_root

    # ── Manifest ─────────────────────────────────────────────────────

    def read_manifest_outcome(self) -> ParseOutcome:
        """Tolerant manifest read."""
        return parse_document(MANIFEST_NAME, self.backend.read_text(MANIFEST_NAME), Manifest.from_dict)

    def read_manifest(self) -> Manifest:
        """Return the manifest, or an empty one if none has been written.

        Raises
        ------
        CheckpointValidationError
            If a manifest exists but cannot be parsed.
        """
        outcome = self.read_manifest_outcome()
        if isinstance(outcome, Missing):
            return Manifest(project_root=self.project_root)
        if isinstance(outcome, Malformed):
            raise CheckpointValidationError(MANIFEST_NAME, outcome.reason)
        return outcome.value

    def _write_manifest(self, manifest: Manifest) -> None:
        self.backend.write_text(MANIFEST_NAME, json.dumps(manifest.to_dict(), indent=2))

    # ── Writes ───────────────────────────────────────────────────────

    def create_checkpoint(
        self,
        findings: NormalizedSnapshot,
        config: Union[MigrationConfig, ConfigSnapshot],
        revision: int,
        thread: Optional[str] = None,
    ) -> ManifestEntry:
        """Persist ``findings`` as a new checkpoint and index it.

        Parameters
        ----------
        findings:
            The normalized snapshot to store.
        config:
            Run configuration; ``rules_enabled`` and ``fail_on`` are recorded.
        revision:
            Caller-maintained revision counter (>= 1).
        thread:
            Optional reference to the work session that produced the run.

        Returns
        -------
        ManifestEntry
            The entry prepended to the manifest.  ``delta`` is relative to
            the most recent existing checkpoint, or ``None`` for the first.
        """
        if isinstance(revision, bool) or not isinstance(revision, int) or revision < 1:
            raise InvalidConfigError("revision", revision, "must be an integer >= 1")

        manifest = self.read_manifest()
        existing_ids = {e.id for e in manifest.checkpoints}

        timestamp = self.clock()
        checkpoint_id = format_checkpoint_id(timestamp)
        while checkpoint_id in existing_ids or self.backend.read_text(f"{checkpoint_id}.json") is not None:
            # ids have millisecond resolution
            timestamp += timedelta(milliseconds=1)
            checkpoint_id = format_checkpoint_id(timestamp)

        checkpoint = Checkpoint(
            checkpoint_id=checkpoint_id,
            timestamp=timestamp,
            revision=revision,
            findings=findings,
            config=_config_snapshot(config),
            tool_version=self.tool_version,
            project_root=self.project_root,
            thread=thread,
        )
        name = f"{checkpoint_id}.json"
        self.backend.write_text(name, json.dumps(checkpoint.to_dict(), indent=2))

        previous = manifest.checkpoints[0] if manifest.checkpoints else None
        delta = DeltaStats.between(previous.summary, findings.summary) if previous else None

        entry = ManifestEntry(
            id=checkpoint_id,
            timestamp=timestamp,
            path=self.backend.location(name),
            summary=findings.summary,
            delta=delta,
            thread=thread,
            schema_version=SCHEMA_VERSION,
            tool_version=self.tool_version,
        )
        manifest.checkpoints.insert(0, entry)
        manifest.sort()
        self._write_manifest(manifest)

        logger.info(
            "Created checkpoint %s (revision %d, %d findings, delta %s)",
            checkpoint_id,
            revision,
            findings.summary.total_findings,
            f"{delta.total_findings:+d}" if delta else "n/a",
        )
        return entry

    # ── Reads ────────────────────────────────────────────────────────

    def list_checkpoints(self, limit: int = 10) -> list[CheckpointSummary]:
        """Newest ``limit`` checkpoints as summaries."""
        if limit < 1:
            raise InvalidConfigError("limit", limit, "must be at least 1")
        manifest = self.read_manifest()
        return [e.to_summary() for e in manifest.checkpoints[:limit]]

    def latest_checkpoint(self) -> Optional[CheckpointSummary]:
        manifest = self.read_manifest()
        return manifest.checkpoints[0].to_summary() if manifest.checkpoints else None

    def read_checkpoint_outcome(self, checkpoint_id: str) -> ParseOutcome:
        """Tolerant read of one checkpoint."""
        name = f"{checkpoint_id}.json"
        if not _CHECKPOINT_ID_RE.match(checkpoint_id):
            return Malformed(name, f"invalid checkpoint id {checkpoint_id!r}")
        outcome = parse_document(name, self.backend.read_text(name), Checkpoint.from_dict)
        if isinstance(outcome, Valid) and outcome.value.checkpoint_id != checkpoint_id:
            return Malformed(name, f"file holds checkpoint {outcome.value.checkpoint_id!r}")
        return outcome

    def read_checkpoint(self, checkpoint_id: str) -> Checkpoint:
        """Load and validate one checkpoint by id.

        Raises
        ------
        CheckpointNotFoundError
            If no such checkpoint was written.
        CheckpointValidationError
            If the stored document is not a valid checkpoint.
        """
        outcome = self.read_checkpoint_outcome(checkpoint_id)
        if isinstance(outcome, Missing):
            raise CheckpointNotFoundError(checkpoint_id, self.backend.location(outcome.name))
        if isinstance(outcome, Malformed):
            raise CheckpointValidationError(checkpoint_id, outcome.reason)
        return outcome.value

    def load_history(self, limit: int = 50) -> list[Checkpoint]:
        """Load the most recent ``limit`` checkpoints, oldest first.

        Never raises for storage problems: an unreadable manifest means no
        history, and missing or malformed checkpoints are skipped.
        """
        manifest_outcome = self.read_manifest_outcome()
        if isinstance(manifest_outcome, Missing):
            logger.debug("No manifest yet; history is empty")
            return []
        if isinstance(manifest_outcome, Malformed):
            history_logger.warning("Ignoring unreadable manifest: %s", manifest_outcome.reason)
            return []

        entries = manifest_outcome.value.checkpoints[:limit]
        history: list[Checkpoint] = []
        for entry in reversed(entries):
            outcome = self.read_checkpoint_outcome(entry.id)
            if isinstance(outcome, Valid):
                history.append(outcome.value)
            elif isinstance(outcome, Missing):
                history_logger.warning(
                    "Checkpoint %s listed in manifest but missing; skipped", entry.id
                )
            else:
                history_logger.warning(
                    "Checkpoint %s is malformed (%s); skipped", entry.id, outcome.reason
                )

        history.sort(key=lambda c: c.timestamp)
        return history

    def compare_checkpoints(self, before_id: str, after_id: str) -> CheckpointComparison:
        """Compare two checkpoints by summary counts and stable finding keys."""
        before = self.read_checkpoint(before_id)
        after = self.read_checkpoint(after_id)
        return CheckpointComparison(
            before_id=before_id,
            after_id=after_id,
            delta=DeltaStats.between(before.findings.summary, after.findings.summary),
            keys=diff_result_keys(before.findings, after.findings),
        )


def _config_snapshot(config: Union[MigrationConfig, ConfigSnapshot]) -> ConfigSnapshot:
    if isinstance(config, ConfigSnapshot):
        return config
    return ConfigSnapshot(rules_enabled=tuple(config.rules_enabled), fail_on=tuple(config.fail_on))


# ── Directory-addressed entry points ─────────────────────────────────


def open_store(output_dir: str | os.PathLike, **kwargs) -> CheckpointStore:
    """File-backed store rooted at ``output_dir``."""
    return CheckpointStore(FileBackend(output_dir), **kwargs)


def create_checkpoint(
    output_dir: str | os.PathLike,
    findings: NormalizedSnapshot,
    config: Union[MigrationConfig, ConfigSnapshot],
    revision: int,
    thread: Optional[str] = None,
) -> ManifestEntry:
    return open_store(output_dir).create_checkpoint(findings, config, revision, thread)


def read_manifest(output_dir: str | os.PathLike) -> Manifest:
    return open_store(output_dir).read_manifest()


def list_checkpoints(output_dir: str | os.PathLike, limit: int = 10) -> list[CheckpointSummary]:
    return open_store(output_dir).list_checkpoints(limit)


def read_checkpoint(output_dir: str | os.PathLike, checkpoint_id: str) -> Checkpoint:
    return open_store(output_dir).read_checkpoint(checkpoint_id)
