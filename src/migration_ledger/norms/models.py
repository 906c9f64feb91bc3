"""Data models for norm detection results."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Literal, Optional

from ..checkpoints.models import CheckpointSummary, format_timestamp

DirectoryStatus = Literal["not-started", "in-progress", "migrated"]


@dataclass(frozen=True)
class Norm:
    """A rule whose violations went to zero and stayed there, for one directory.

    Derived from checkpoint history on every call; never stored as fact.
    """

    rule_id: str
    rule_kind: str
    severity: str
    established_at: datetime
    violations_fixed: int
    docs_url: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "ruleId": self.rule_id,
            "ruleKind": self.rule_kind,
            "severity": self.severity,
            "establishedAt": format_timestamp(self.established_at),
            "violationsFixed": self.violations_fixed,
        }
        if self.docs_url:
            out["docsUrl"] = self.docs_url
        return out


@dataclass(frozen=True)
class DirectoryStats:
    """File counts for a directory prefix."""

    total: int = 0
    clean: int = 0
    with_violations: int = 0

    def to_dict(self) -> dict[str, int]:
        return {"total": self.total, "clean": self.clean, "withViolations": self.with_violations}


@dataclass
class DirectorySummary:
    """Migration status of one directory, as of the latest checkpoint."""

    directory: str
    status: DirectoryStatus
    files: DirectoryStats
    latest_checkpoint: CheckpointSummary
    norms: list[Norm] = field(default_factory=list)
    clean_since: Optional[datetime] = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "directory": self.directory,
            "status": self.status,
            "files": self.files.to_dict(),
            "norms": [n.to_dict() for n in self.norms],
            "latestCheckpoint": self.latest_checkpoint.to_dict(),
        }
        if self.clean_since is not None:
            out["cleanSince"] = format_timestamp(self.clean_since)
        return out
