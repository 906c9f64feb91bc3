"""Finding normalization and stable identity keys."""

from .identity import KeyDiff, derive_result_key, derive_result_keys, diff_result_keys
from .models import (
    CompactResult,
    Finding,
    FindingGroups,
    FindingsSummary,
    NormalizedSnapshot,
    RuleDefinition,
    SourceRange,
)
from .normalizer import expand_result, expand_snapshot, normalize_findings, rebuild_groups

__all__ = [
    "Finding",
    "SourceRange",
    "RuleDefinition",
    "CompactResult",
    "FindingGroups",
    "FindingsSummary",
    "NormalizedSnapshot",
    "normalize_findings",
    "expand_result",
    "expand_snapshot",
    "rebuild_groups",
    "derive_result_key",
    "derive_result_keys",
    "diff_result_keys",
    "KeyDiff",
]
