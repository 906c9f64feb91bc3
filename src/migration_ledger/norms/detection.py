"""Pure norm detection over checkpoint history.

Every function here takes checkpoints ordered oldest -> newest and a
directory prefix, does no I/O, and recomputes from its inputs each call.

Norm rule, per rule id seen anywhere in the history:

  * the newest ``lookback_window`` checkpoints all have zero violations
    under the directory, and
  * some older checkpoint had at least one.

The norm is dated at the first zero that follows the last non-zero
checkpoint, and credits the count at that last non-zero checkpoint.  A
violation inside the window means no norm for that rule on this call.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..checkpoints.models import Checkpoint
from ..exceptions import InvalidDirectoryError
from ..logging_config import get_logger
from ..snapshot.models import RuleDefinition
from .models import DirectoryStats, DirectoryStatus, Norm

logger = get_logger(__name__)

# (checkpoint timestamp, violation count)
SeriesPoint = tuple[datetime, int]


# ── Directory prefixes ───────────────────────────────────────────────


def normalize_directory(directory: str) -> str:
    """Canonical form of a directory prefix: no leading ``./``, no trailing ``/``.

    ``""`` and ``"."`` both mean the whole project and normalize to ``""``.

    Raises
    ------
    InvalidDirectoryError
        For absolute paths or paths that climb out of the project.
    """
    prefix = directory.replace("\\", "/").strip()
    if prefix.startswith("/"):
        raise InvalidDirectoryError(directory, "must be relative to the project root")
    while prefix.startswith("./"):
        prefix = prefix[2:]
    prefix = prefix.rstrip("/")
    if prefix == ".":
        prefix = ""
    if ".." in prefix.split("/"):
        raise InvalidDirectoryError(directory, "must not contain '..'")
    return prefix


def in_directory(path: str, prefix: str) -> bool:
    """True if ``path`` lies under the normalized ``prefix``."""
    while path.startswith("./"):
        path = path[2:]
    if not prefix:
        return True
    return path.startswith(prefix + "/")


def dir_key_from_path(path: str, depth: int) -> str:
    """First ``depth`` components of a file's directory.

    >>> dir_key_from_path("packages/core/src/index.ts", 2)
    'packages/core'
    """
    parts = path.split("/")[:-1]
    return "/".join(parts[:depth])


def list_directories(checkpoints: Sequence[Checkpoint], depth: int = 1) -> list[str]:
    """Distinct directory keys at ``depth`` across the files of all checkpoints."""
    keys = set()
    for checkpoint in checkpoints:
        for path in checkpoint.findings.files:
            key = dir_key_from_path(path, depth)
            if key:
                keys.add(key)
    return sorted(keys)


# ── Counting ─────────────────────────────────────────────────────────


def count_rule_violations(checkpoint: Checkpoint, rule_id: str, directory: str) -> int:
    """Results for ``rule_id`` whose file lies under ``directory``."""
    findings = checkpoint.findings
    prefix = normalize_directory(directory)
    rule_index = findings.rule_index(rule_id)
    if rule_index is None:
        return 0

    count = 0
    for pos in findings.groups.by_rule.get(str(rule_index), []):
        if pos >= len(findings.results):
            continue
        file_index = findings.results[pos].file
        if file_index is not None and in_directory(findings.files[file_index], prefix):
            count += 1
    return count


def count_directory_violations(checkpoint: Checkpoint, directory: str) -> int:
    """All results whose file lies under ``directory``."""
    findings = checkpoint.findings
    prefix = normalize_directory(directory)
    return sum(
        1
        for r in findings.results
        if r.file is not None and in_directory(findings.files[r.file], prefix)
    )


def build_rule_series(
    checkpoints: Sequence[Checkpoint], rule_id: str, directory: str
) -> list[SeriesPoint]:
    return [(c.timestamp, count_rule_violations(c, rule_id, directory)) for c in checkpoints]


# ── Detection ────────────────────────────────────────────────────────


def detect_norm_transition(
    series: Sequence[SeriesPoint], lookback_window: int
) -> Optional[SeriesPoint]:
    """Find where a rule went to zero for good.

    Returns ``(established_at, violations_fixed)`` or ``None``.
    """
    if lookback_window < 1 or len(series) < lookback_window + 1:
        return None

    if any(count != 0 for _, count in series[-lookback_window:]):
        return None

    earlier = series[:-lookback_window]
    last_dirty = None
    for i in range(len(earlier) - 1, -1, -1):
        if earlier[i][1] > 0:
            last_dirty = i
            break
    if last_dirty is None:
        return None

    established_at = series[last_dirty + 1][0]
    violations_fixed = series[last_dirty][1]
    return established_at, violations_fixed


def detect_extinct_norms(
    checkpoints: Sequence[Checkpoint],
    directory: str,
    lookback_window: int = 5,
) -> list[Norm]:
    """All norms for ``directory``, sorted by rule id."""
    if not checkpoints:
        return []

    rules: dict[str, RuleDefinition] = {}
    for checkpoint in checkpoints:
        for rule in checkpoint.findings.rules:
            rules.setdefault(rule.id, rule)

    norms: list[Norm] = []
    for rule_id in sorted(rules):
        rule = rules[rule_id]
        series = build_rule_series(checkpoints, rule_id, directory)
        transition = detect_norm_transition(series, lookback_window)
        if transition is None:
            continue
        established_at, violations_fixed = transition
        logger.debug(
            "Norm %s in %r established at %s (%d fixed)",
            rule_id,
            directory,
            established_at.isoformat(),
            violations_fixed,
        )
        norms.append(
            Norm(
                rule_id=rule.id,
                rule_kind=rule.kind,
                severity=rule.severity,
                established_at=established_at,
                violations_fixed=violations_fixed,
                docs_url=rule.docs_url,
            )
        )
    return norms


def compute_directory_stats(checkpoints: Sequence[Checkpoint], directory: str) -> DirectoryStats:
    """File counts for ``directory``.

    ``with_violations`` comes from the newest checkpoint.  ``total`` is every
    file under the prefix seen in the given history, since a snapshot only
    lists files that have findings.
    """
    if not checkpoints:
        return DirectoryStats()
    prefix = normalize_directory(directory)

    seen = {path for c in checkpoints for path in c.findings.files if in_directory(path, prefix)}
    if not seen:
        return DirectoryStats()

    latest = checkpoints[-1].findings
    dirty = {
        latest.files[int(idx)]
        for idx, positions in latest.groups.by_file.items()
        if positions and in_directory(latest.files[int(idx)], prefix)
    }
    return DirectoryStats(total=len(seen), clean=len(seen) - len(dirty), with_violations=len(dirty))


def determine_status(stats: DirectoryStats, norms: Sequence[Norm]) -> DirectoryStatus:
    if stats.with_violations == 0 and norms:
        return "migrated"
    if stats.total == 0 and not norms:
        return "not-started"
    if norms or stats.clean > 0 or stats.with_violations > 0:
        return "in-progress"
    return "not-started"


def find_clean_timestamp(checkpoints: Sequence[Checkpoint], directory: str) -> Optional[datetime]:
    """Start of the zero-violation run that reaches the newest checkpoint.

    ``None`` if the newest checkpoint still has violations under
    ``directory``.
    """
    clean_since = None
    for checkpoint in reversed(checkpoints):
        if count_directory_violations(checkpoint, directory) != 0:
            break
        clean_since = checkpoint.timestamp
    return clean_since
