"""Compact raw findings into a deterministic NormalizedSnapshot, and back.

Normalization deduplicates rule metadata and file paths so that a snapshot
of a large project stores each rule and path once:

  1. unique rule ids -> ``RuleDefinition`` list, sorted by id
  2. unique file paths -> sorted list
  3. one ``CompactResult`` per input finding, in input order, referencing
     the *sorted* positions
  4. ``groups.by_rule`` / ``groups.by_file`` bucket result positions by
     stringified index (file-less results have no file bucket)
  5. summary counts

The output depends only on the multiset of findings: shuffling the input
changes nothing but the order of ``results`` (and the positions inside the
groups that point at them).

Do not compare snapshots by index.  Dictionaries are rebuilt per snapshot
and indices shift whenever a rule or file appears or disappears; use
``identity.derive_result_key`` instead.
"""

from __future__ import annotations

from collections import Counter, defaultdict
from typing import Iterable, Sequence

from .models import (
    CompactResult,
    Finding,
    FindingGroups,
    FindingsSummary,
    NormalizedSnapshot,
    RuleDefinition,
    SourceRange,
)


def normalize_findings(findings: Iterable[Finding]) -> NormalizedSnapshot:
    """Normalize findings into a compact, deduplicated snapshot.

    Parameters
    ----------
    findings:
        Findings in any order. Duplicate rule ids and file paths are
        expected; that is where the savings come from.

    Returns
    -------
    NormalizedSnapshot
        Empty input yields an empty snapshot with a zeroed summary.
    """
    findings = list(findings)

    rules = _build_rule_dictionary(findings)
    files = sorted({f.file for f in findings if f.file is not None})

    rule_index = {rule.id: i for i, rule in enumerate(rules)}
    file_index = {path: i for i, path in enumerate(files)}

    results: list[CompactResult] = []
    errors = warnings = info = 0

    for finding in findings:
        ri = rule_index[finding.rule_id]
        template = rules[ri].message
        results.append(
            CompactResult(
                rule=ri,
                file=file_index[finding.file] if finding.file is not None else None,
                range=finding.range.as_tuple() if finding.range is not None else None,
                message=finding.message if finding.message != template else None,
            )
        )

        if finding.severity == "error":
            errors += 1
        else:
            # info is folded into the warning bucket and also counted alone
            warnings += 1
            if finding.severity == "info":
                info += 1

    snapshot = NormalizedSnapshot(
        rules=rules,
        files=files,
        results=results,
        summary=FindingsSummary(
            errors=errors,
            warnings=warnings,
            info=info,
            total_files=len(files),
            total_findings=len(results),
        ),
    )
    snapshot.groups = rebuild_groups(snapshot)
    return snapshot


def rebuild_groups(snapshot: NormalizedSnapshot) -> FindingGroups:
    """Recompute ``by_file`` / ``by_rule`` buckets from ``snapshot.results``.

    Bucket keys are emitted in ascending index order so that two snapshots
    with the same dictionaries serialize their groups identically.
    """
    by_rule: dict[int, list[int]] = defaultdict(list)
    by_file: dict[int, list[int]] = defaultdict(list)

    for pos, result in enumerate(snapshot.results):
        by_rule[result.rule].append(pos)
        if result.file is not None:
            by_file[result.file].append(pos)

    return FindingGroups(
        by_file={str(k): by_file[k] for k in sorted(by_file)},
        by_rule={str(k): by_rule[k] for k in sorted(by_rule)},
    )


def expand_result(
    result: CompactResult,
    rules: Sequence[RuleDefinition],
    files: Sequence[str],
) -> Finding:
    """Rehydrate one compact result into a full ``Finding``.

    ``docs_url`` and ``tags`` come from the rule dictionary, so a finding
    whose own metadata differed from its rule's comes back with the rule's.
    """
    rule = rules[result.rule]
    return Finding(
        rule_id=rule.id,
        rule_kind=rule.kind,
        severity=rule.severity,
        message=result.message if result.message is not None else rule.message,
        file=files[result.file] if result.file is not None else None,
        range=SourceRange.from_tuple(result.range) if result.range is not None else None,
        docs_url=rule.docs_url,
        tags=rule.tags,
    )


def expand_snapshot(snapshot: NormalizedSnapshot) -> list[Finding]:
    """Expand every result of a snapshot, preserving result order."""
    return [expand_result(r, snapshot.rules, snapshot.files) for r in snapshot.results]


# ── Private helpers ──────────────────────────────────────────────────


def _build_rule_dictionary(findings: list[Finding]) -> list[RuleDefinition]:
    """One definition per rule id, sorted by id.

    The template message is the rule's most frequent message (ties broken
    by the smallest string), which keeps the choice independent of input
    order and minimises the number of stored message overrides.
    """
    by_rule: dict[str, list[Finding]] = defaultdict(list)
    for finding in findings:
        by_rule[finding.rule_id].append(finding)

    rules: list[RuleDefinition] = []
    for rule_id in sorted(by_rule):
        group = by_rule[rule_id]
        counts = Counter(f.message for f in group)
        template = min(counts, key=lambda m: (-counts[m], m))
        source = min(
            (f for f in group if f.message == template),
            key=lambda f: (f.rule_kind, f.severity, f.docs_url or "", f.tags),
        )
        rules.append(
            RuleDefinition(
                id=rule_id,
                kind=source.rule_kind,
                severity=source.severity,
                message=template,
                docs_url=source.docs_url or None,
                tags=tuple(source.tags),
            )
        )
    return rules
