"""Data models for checkpoints and the checkpoint manifest.

A ``Checkpoint`` is written once and never modified.  The ``Manifest`` is an
index over all checkpoints, newest first, carrying only summary counts and
the delta against the checkpoint before it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

from ..snapshot.models import FindingsSummary, NormalizedSnapshot

SCHEMA_VERSION = "0.2.0"


# ── Timestamps ───────────────────────────────────────────────────────


def format_timestamp(ts: datetime) -> str:
    """ISO-8601 UTC with millisecond precision and a ``Z`` suffix."""
    ts = ts.astimezone(timezone.utc)
    return ts.strftime("%Y-%m-%dT%H:%M:%S.") + f"{ts.microsecond // 1000:03d}Z"


def parse_timestamp(value: str) -> datetime:
    """Parse a stored timestamp into an aware UTC datetime.

    Raises ``ValueError`` on anything that is not ISO-8601.
    """
    if not isinstance(value, str):
        raise ValueError(f"timestamp must be a string, got {type(value).__name__}")
    text = value[:-1] + "+00:00" if value.endswith("Z") else value
    ts = datetime.fromisoformat(text)
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


def format_checkpoint_id(ts: datetime) -> str:
    """Derive a sortable, filename-safe checkpoint id from a timestamp.

    >>> format_checkpoint_id(datetime(2025, 11, 8, 15, 30, 45, 123000, tzinfo=timezone.utc))
    '2025-11-08T15-30-45.123Z'
    """
    return format_timestamp(ts).replace(":", "-")


# ── Models ───────────────────────────────────────────────────────────


@dataclass(frozen=True)
class ConfigSnapshot:
    """The parts of the run configuration recorded with a checkpoint."""

    rules_enabled: tuple[str, ...] = ()
    fail_on: tuple[str, ...] = ("error",)

    def to_dict(self) -> dict[str, Any]:
        return {"rulesEnabled": list(self.rules_enabled), "failOn": list(self.fail_on)}

    @classmethod
    def from_dict(cls, data: Any) -> "ConfigSnapshot":
        if not isinstance(data, dict):
            raise ValueError("config must be an object")
        rules_enabled = data.get("rulesEnabled", [])
        fail_on = data.get("failOn", ["error"])
        for name, value in (("rulesEnabled", rules_enabled), ("failOn", fail_on)):
            if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
                raise ValueError(f"config.{name} must be a list of strings")
        return cls(rules_enabled=tuple(rules_enabled), fail_on=tuple(fail_on))


@dataclass(frozen=True)
class DeltaStats:
    """Field-wise difference of two summaries (current minus previous)."""

    errors: int
    warnings: int
    info: int
    total_findings: int

    @classmethod
    def between(cls, previous: FindingsSummary, current: FindingsSummary) -> "DeltaStats":
        return cls(
            errors=current.errors - previous.errors,
            warnings=current.warnings - previous.warnings,
            info=current.info - previous.info,
            total_findings=current.total_findings - previous.total_findings,
        )

    def to_dict(self) -> dict[str, int]:
        return {
            "errors": self.errors,
            "warnings": self.warnings,
            "info": self.info,
            "totalFindings": self.total_findings,
        }

    @classmethod
    def from_dict(cls, data: Any) -> "DeltaStats":
        if not isinstance(data, dict):
            raise ValueError("delta must be an object")
        values = [data.get(k, 0) for k in ("errors", "warnings", "info", "totalFindings")]
        if not all(isinstance(v, int) and not isinstance(v, bool) for v in values):
            raise ValueError("delta fields must be integers")
        return cls(*values)


@dataclass(frozen=True)
class Checkpoint:
    """One immutable, timestamped snapshot of normalized findings."""

    checkpoint_id: str
    timestamp: datetime
    revision: int
    findings: NormalizedSnapshot
    config: ConfigSnapshot = field(default_factory=ConfigSnapshot)
    tool_version: str = ""
    project_root: str = "."
    thread: Optional[str] = None
    schema_version: str = SCHEMA_VERSION

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "schemaVersion": self.schema_version,
            "revision": self.revision,
            "checkpointId": self.checkpoint_id,
            "toolVersion": self.tool_version,
            "projectRoot": self.project_root,
            "timestamp": format_timestamp(self.timestamp),
        }
        if self.thread:
            out["thread"] = self.thread
        out["findings"] = self.findings.to_dict()
        out["config"] = self.config.to_dict()
        return out

    @classmethod
    def from_dict(cls, data: Any) -> "Checkpoint":
        if not isinstance(data, dict):
            raise ValueError("checkpoint must be an object")
        for key in ("checkpointId", "timestamp", "findings"):
            if key not in data:
                raise ValueError(f"checkpoint is missing {key!r}")
        if not isinstance(data["checkpointId"], str):
            raise ValueError("checkpointId must be a string")
        revision = data.get("revision")
        if not isinstance(revision, int) or isinstance(revision, bool) or revision < 1:
            raise ValueError(f"revision must be a positive integer, got {revision!r}")
        return cls(
            checkpoint_id=data["checkpointId"],
            timestamp=parse_timestamp(data["timestamp"]),
            revision=revision,
            findings=NormalizedSnapshot.from_dict(data["findings"]),
            config=ConfigSnapshot.from_dict(data.get("config", {})),
            tool_version=str(data.get("toolVersion", "")),
            project_root=str(data.get("projectRoot", ".")),
            thread=data.get("thread"),
            schema_version=str(data.get("schemaVersion", SCHEMA_VERSION)),
        )


@dataclass(frozen=True)
class CheckpointSummary:
    """Lightweight view of a manifest entry for listing."""

    id: str
    timestamp: datetime
    summary: FindingsSummary
    delta: Optional[DeltaStats] = None
    thread: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "id": self.id,
            "timestamp": format_timestamp(self.timestamp),
            "summary": self.summary.to_dict(),
        }
        if self.delta is not None:
            out["delta"] = self.delta.to_dict()
        if self.thread:
            out["thread"] = self.thread
        return out


@dataclass(frozen=True)
class ManifestEntry:
    """Per-checkpoint record in the manifest."""

    id: str
    timestamp: datetime
    path: str
    summary: FindingsSummary
    delta: Optional[DeltaStats] = None
    thread: Optional[str] = None
    schema_version: str = SCHEMA_VERSION
    tool_version: str = ""

    def to_summary(self) -> CheckpointSummary:
        return CheckpointSummary(
            id=self.id,
            timestamp=self.timestamp,
            summary=self.summary,
            delta=self.delta,
            thread=self.thread,
        )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "id": self.id,
            "timestamp": format_timestamp(self.timestamp),
            "path": self.path,
            "schemaVersion": self.schema_version,
            "toolVersion": self.tool_version,
            "summary": self.summary.to_dict(),
        }
        if self.delta is not None:
            out["delta"] = self.delta.to_dict()
        if self.thread:
            out["thread"] = self.thread
        return out

    @classmethod
    def from_dict(cls, data: Any) -> "ManifestEntry":
        if not isinstance(data, dict):
            raise ValueError("manifest entry must be an object")
        if not isinstance(data.get("id"), str):
            raise ValueError("manifest entry is missing 'id'")
        delta = data.get("delta")
        return cls(
            id=data["id"],
            timestamp=parse_timestamp(data.get("timestamp")),
            path=str(data.get("path", "")),
            summary=FindingsSummary.from_dict(data.get("summary", {})),
            delta=DeltaStats.from_dict(delta) if delta is not None else None,
            thread=data.get("thread"),
            schema_version=str(data.get("schemaVersion", SCHEMA_VERSION)),
            tool_version=str(data.get("toolVersion", "")),
        )


@dataclass
class Manifest:
    """Ordered index of all checkpoints, newest first."""

    checkpoints: list[ManifestEntry] = field(default_factory=list)
    project_root: str = "."
    schema_version: str = SCHEMA_VERSION

    def sort(self) -> None:
        self.checkpoints.sort(key=lambda e: e.timestamp, reverse=True)

    def to_dict(self) -> dict[str, Any]:
        return {
            "schemaVersion": self.schema_version,
            "projectRoot": self.project_root,
            "checkpoints": [e.to_dict() for e in self.checkpoints],
        }

    @classmethod
    def from_dict(cls, data: Any) -> "Manifest":
        if not isinstance(data, dict):
            raise ValueError("manifest must be an object")
        entries = data.get("checkpoints")
        if not isinstance(entries, list):
            raise ValueError("manifest.checkpoints must be a list")
        manifest = cls(
            checkpoints=[ManifestEntry.from_dict(e) for e in entries],
            project_root=str(data.get("projectRoot", ".")),
            schema_version=str(data.get("schemaVersion", SCHEMA_VERSION)),
        )
        manifest.sort()
        return manifest
