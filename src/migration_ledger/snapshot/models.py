"""Data models for findings and normalized snapshots.

Raw ``Finding`` values come from the rule engine. ``NormalizedSnapshot`` is
the compact form stored inside a checkpoint: rule metadata and file paths
are kept once in sorted dictionaries and results reference them by index.

On disk every model uses camelCase keys; ``to_dict`` / ``from_dict`` do the
conversion.  ``from_dict`` raises ``ValueError`` on structurally invalid
data so the store can report exactly what was wrong.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal, Optional

Severity = Literal["error", "warning", "info"]
SEVERITIES = ("error", "warning", "info")

# (start_line, start_col, end_line, end_col)
CompactRange = tuple[int, int, int, int]


@dataclass(frozen=True)
class SourceRange:
    """A span within a source file (1-based lines, 0-based columns)."""

    start_line: int
    start_col: int
    end_line: int
    end_col: int

    def as_tuple(self) -> CompactRange:
        return (self.start_line, self.start_col, self.end_line, self.end_col)

    @classmethod
    def from_tuple(cls, values: CompactRange) -> "SourceRange":
        return cls(*values)


@dataclass(frozen=True)
class Finding:
    """One rule violation as reported by the rule engine."""

    rule_id: str
    rule_kind: str  # "pattern" | "boundary" | ...
    severity: Severity
    message: str
    file: Optional[str] = None
    range: Optional[SourceRange] = None
    docs_url: Optional[str] = None
    tags: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Finding":
        """Build a finding from rule-engine JSON.

        Accepts ``ruleId`` or ``id`` for the rule id, and a range either as
        ``{"start": {"line", "column"}, "end": {...}}`` or as a
        ``[startLine, startCol, endLine, endCol]`` list.
        """
        if not isinstance(data, dict):
            raise ValueError(f"finding must be an object, got {type(data).__name__}")

        rule_id = data.get("ruleId", data.get("id"))
        if not isinstance(rule_id, str) or not rule_id:
            raise ValueError("finding is missing 'ruleId'")

        severity = data.get("severity")
        if severity not in SEVERITIES:
            raise ValueError(f"finding {rule_id!r} has invalid severity {severity!r}")

        rng = data.get("range")
        source_range = None
        if rng is not None:
            if isinstance(rng, dict):
                try:
                    source_range = SourceRange(
                        int(rng["start"]["line"]),
                        int(rng["start"]["column"]),
                        int(rng["end"]["line"]),
                        int(rng["end"]["column"]),
                    )
                except (KeyError, TypeError) as e:
                    raise ValueError(f"finding {rule_id!r} has malformed range: {e}") from e
            else:
                source_range = SourceRange.from_tuple(_parse_range(rng))

        return cls(
            rule_id=rule_id,
            rule_kind=(
                _optional_str(data, "ruleKind", rule_id)
                or _optional_str(data, "kind", rule_id)
                or "pattern"
            ),
            severity=severity,
            message=_optional_str(data, "message", rule_id) or "",
            file=_optional_str(data, "file", rule_id),
            range=source_range,
            docs_url=_optional_str(data, "docsUrl", rule_id),
            tags=_parse_tags(data.get("tags"), rule_id),
        )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "ruleId": self.rule_id,
            "ruleKind": self.rule_kind,
            "severity": self.severity,
            "message": self.message,
        }
        if self.file is not None:
            out["file"] = self.file
        if self.range is not None:
            out["range"] = {
                "start": {"line": self.range.start_line, "column": self.range.start_col},
                "end": {"line": self.range.end_line, "column": self.range.end_col},
            }
        if self.docs_url:
            out["docsUrl"] = self.docs_url
        if self.tags:
            out["tags"] = list(self.tags)
        return out


@dataclass(frozen=True)
class RuleDefinition:
    """Rule metadata stored once per snapshot."""

    id: str
    kind: str
    severity: Severity
    message: str  # template message
    docs_url: Optional[str] = None
    tags: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: Any) -> "RuleDefinition":
        if not isinstance(data, dict):
            raise ValueError("rule definition must be an object")
        for key in ("id", "kind", "message"):
            if not isinstance(data.get(key), str):
                raise ValueError(f"rule definition is missing string field {key!r}")
        if data.get("severity") not in SEVERITIES:
            raise ValueError(f"rule {data['id']!r} has invalid severity {data.get('severity')!r}")
        return cls(
            id=data["id"],
            kind=data["kind"],
            severity=data["severity"],
            message=data["message"],
            docs_url=_optional_str(data, "docsUrl", data["id"]),
            tags=_parse_tags(data.get("tags"), data["id"]),
        )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "id": self.id,
            "kind": self.kind,
            "severity": self.severity,
            "message": self.message,
        }
        if self.docs_url:
            out["docsUrl"] = self.docs_url
        if self.tags:
            out["tags"] = list(self.tags)
        return out


@dataclass(frozen=True)
class CompactResult:
    """A finding expressed as indices into the snapshot dictionaries."""

    rule: int
    file: Optional[int] = None
    range: Optional[CompactRange] = None
    message: Optional[str] = None  # only when it differs from the rule template

    @classmethod
    def from_dict(cls, data: Any) -> "CompactResult":
        if not isinstance(data, dict):
            raise ValueError("result must be an object")
        rule = data.get("rule")
        if not _is_index(rule):
            raise ValueError(f"result has invalid rule index {rule!r}")
        file_index = data.get("file")
        if file_index is not None and not _is_index(file_index):
            raise ValueError(f"result has invalid file index {file_index!r}")
        message = data.get("message")
        if message is not None and not isinstance(message, str):
            raise ValueError("result message must be a string")
        rng = data.get("range")
        return cls(
            rule=rule,
            file=file_index,
            range=_parse_range(rng) if rng is not None else None,
            message=message,
        )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"rule": self.rule}
        if self.file is not None:
            out["file"] = self.file
        if self.range is not None:
            out["range"] = list(self.range)
        if self.message is not None:
            out["message"] = self.message
        return out


@dataclass
class FindingGroups:
    """Result positions bucketed by stringified rule / file index."""

    by_file: dict[str, list[int]] = field(default_factory=dict)
    by_rule: dict[str, list[int]] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "byFile": {k: list(v) for k, v in self.by_file.items()},
            "byRule": {k: list(v) for k, v in self.by_rule.items()},
        }

    @classmethod
    def from_dict(cls, data: Any) -> "FindingGroups":
        if not isinstance(data, dict):
            raise ValueError("groups must be an object")
        return cls(
            by_file=_parse_buckets(data.get("byFile", {}), "byFile"),
            by_rule=_parse_buckets(data.get("byRule", {}), "byRule"),
        )


@dataclass(frozen=True)
class FindingsSummary:
    """Aggregate counts for one snapshot.

    ``warnings`` includes ``info`` findings; ``info`` is also kept on its own.
    """

    errors: int = 0
    warnings: int = 0
    info: int = 0
    total_files: int = 0
    total_findings: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "errors": self.errors,
            "warnings": self.warnings,
            "info": self.info,
            "totalFiles": self.total_files,
            "totalFindings": self.total_findings,
        }

    @classmethod
    def from_dict(cls, data: Any) -> "FindingsSummary":
        if not isinstance(data, dict):
            raise ValueError("summary must be an object")
        values = {}
        for attr, key in (
            ("errors", "errors"),
            ("warnings", "warnings"),
            ("info", "info"),
            ("total_files", "totalFiles"),
            ("total_findings", "totalFindings"),
        ):
            value = data.get(key, 0)
            if not isinstance(value, int) or isinstance(value, bool):
                raise ValueError(f"summary field {key!r} must be an integer")
            values[attr] = value
        return cls(**values)


@dataclass
class NormalizedSnapshot:
    """Deduplicated, deterministic representation of one set of findings."""

    rules: list[RuleDefinition] = field(default_factory=list)
    files: list[str] = field(default_factory=list)
    results: list[CompactResult] = field(default_factory=list)
    groups: FindingGroups = field(default_factory=FindingGroups)
    summary: FindingsSummary = field(default_factory=FindingsSummary)

    def rule_index(self, rule_id: str) -> Optional[int]:
        for i, rule in enumerate(self.rules):
            if rule.id == rule_id:
                return i
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "rules": [r.to_dict() for r in self.rules],
            "files": list(self.files),
            "results": [r.to_dict() for r in self.results],
            "groups": self.groups.to_dict(),
            "summary": self.summary.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Any) -> "NormalizedSnapshot":
        """Parse and validate a stored snapshot.

        Groups are optional on disk; when absent they are rebuilt from the
        results.
        """
        if not isinstance(data, dict):
            raise ValueError("findings must be an object")

        raw_rules = data.get("rules")
        raw_files = data.get("files")
        raw_results = data.get("results")
        if not isinstance(raw_rules, list):
            raise ValueError("findings.rules must be a list")
        if not isinstance(raw_files, list) or not all(isinstance(f, str) for f in raw_files):
            raise ValueError("findings.files must be a list of strings")
        if not isinstance(raw_results, list):
            raise ValueError("findings.results must be a list")

        rules = [RuleDefinition.from_dict(r) for r in raw_rules]
        results = [CompactResult.from_dict(r) for r in raw_results]

        for pos, result in enumerate(results):
            if result.rule >= len(rules):
                raise ValueError(f"result {pos} references missing rule {result.rule}")
            if result.file is not None and result.file >= len(raw_files):
                raise ValueError(f"result {pos} references missing file {result.file}")

        snapshot = cls(
            rules=rules,
            files=list(raw_files),
            results=results,
            summary=FindingsSummary.from_dict(data.get("summary", {})),
        )
        if "groups" in data:
            groups = FindingGroups.from_dict(data["groups"])
            _check_buckets(groups.by_rule, "byRule", len(rules), results, "rule")
            _check_buckets(groups.by_file, "byFile", len(raw_files), results, "file")
            snapshot.groups = groups
        else:
            from .normalizer import rebuild_groups

            snapshot.groups = rebuild_groups(snapshot)
        return snapshot


# ── Private helpers ──────────────────────────────────────────────────


def _is_index(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


def _parse_range(value: Any) -> CompactRange:
    if (
        not isinstance(value, (list, tuple))
        or len(value) != 4
        or not all(isinstance(v, int) and not isinstance(v, bool) for v in value)
    ):
        raise ValueError(f"range must be four integers, got {value!r}")
    return (value[0], value[1], value[2], value[3])


def _parse_buckets(value: Any, name: str) -> dict[str, list[int]]:
    if not isinstance(value, dict):
        raise ValueError(f"groups.{name} must be an object")
    buckets: dict[str, list[int]] = {}
    for key, positions in value.items():
        if not isinstance(positions, list) or not all(_is_index(p) for p in positions):
            raise ValueError(f"groups.{name}[{key!r}] must be a list of indices")
        buckets[str(key)] = list(positions)
    return buckets


def _check_buckets(
    buckets: dict[str, list[int]],
    name: str,
    size: int,
    results: list[CompactResult],
    attr: str,
) -> None:
    """Stored buckets must partition exactly the results that carry ``attr``."""
    seen: set[int] = set()
    for key, positions in buckets.items():
        if not key.isdigit() or str(int(key)) != key or int(key) >= size:
            raise ValueError(f"groups.{name} has out-of-range key {key!r}")
        index = int(key)
        for pos in positions:
            if pos >= len(results):
                raise ValueError(f"groups.{name}[{key!r}] references missing result {pos}")
            if getattr(results[pos], attr) != index or pos in seen:
                raise ValueError(f"groups.{name}[{key!r}] disagrees with result {pos}")
            seen.add(pos)
    expected = sum(1 for r in results if getattr(r, attr) is not None)
    if len(seen) != expected:
        raise ValueError(f"groups.{name} covers {len(seen)} of {expected} results")


def _optional_str(data: dict[str, Any], key: str, rule_id: str) -> Optional[str]:
    value = data.get(key)
    if value is not None and not isinstance(value, str):
        raise ValueError(f"finding {rule_id!r} has non-string {key!r}: {value!r}")
    return value


def _parse_tags(value: Any, rule_id: str) -> tuple[str, ...]:
    if value is None:
        return ()
    if not isinstance(value, list) or not all(isinstance(t, str) for t in value):
        raise ValueError(f"finding {rule_id!r} has tags that are not a list of strings")
    return tuple(value)
