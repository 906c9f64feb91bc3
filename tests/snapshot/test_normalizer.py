"""Tests for snapshot/normalizer.py - compact, deterministic snapshots."""

import json
import random

from migration_ledger.snapshot import (
    CompactResult,
    NormalizedSnapshot,
    expand_snapshot,
    normalize_findings,
    rebuild_groups,
)
from migration_ledger.snapshot.identity import derive_result_keys


class TestNormalizeFindings:
    """Test normalize_findings dictionaries and results."""

    def test_empty_input(self):
        snapshot = normalize_findings([])
        assert snapshot.rules == []
        assert snapshot.files == []
        assert snapshot.results == []
        assert snapshot.groups.by_file == {}
        assert snapshot.groups.by_rule == {}
        assert snapshot.summary.total_findings == 0
        assert snapshot.summary.total_files == 0

    def test_rules_and_files_sorted_and_unique(self, finding_factory):
        findings = [
            finding_factory(rule_id="zeta", file="src/b.ts"),
            finding_factory(rule_id="alpha", file="src/c.ts"),
            finding_factory(rule_id="zeta", file="src/a.ts", line=5),
            finding_factory(rule_id="alpha", file="src/b.ts", line=9),
        ]
        snapshot = normalize_findings(findings)

        assert [r.id for r in snapshot.rules] == ["alpha", "zeta"]
        assert snapshot.files == ["src/a.ts", "src/b.ts", "src/c.ts"]

    def test_results_preserve_input_order(self, finding_factory):
        findings = [
            finding_factory(rule_id="zeta", file="src/b.ts"),
            finding_factory(rule_id="alpha", file="src/a.ts"),
        ]
        snapshot = normalize_findings(findings)

        assert snapshot.results[0].rule == 1
        assert snapshot.results[0].file == 1
        assert snapshot.results[1].rule == 0
        assert snapshot.results[1].file == 0

    def test_message_override_only_when_different(self, finding_factory):
        findings = [
            finding_factory(rule_id="r", message="Use X", line=1),
            finding_factory(rule_id="r", message="Use X", line=2),
            finding_factory(rule_id="r", message="Use X here instead", line=3),
        ]
        snapshot = normalize_findings(findings)

        assert snapshot.rules[0].message == "Use X"
        assert snapshot.results[0].message is None
        assert snapshot.results[1].message is None
        assert snapshot.results[2].message == "Use X here instead"

    def test_template_independent_of_order(self, finding_factory):
        findings = [
            finding_factory(rule_id="r", message="b", line=1),
            finding_factory(rule_id="r", message="a", line=2),
        ]
        forward = normalize_findings(findings)
        backward = normalize_findings(list(reversed(findings)))

        assert forward.rules[0].message == "a"
        assert backward.rules == forward.rules

    def test_range_and_file_optional(self, finding_factory):
        findings = [finding_factory(file=None, line=None)]
        snapshot = normalize_findings(findings)

        result = snapshot.results[0]
        assert result.file is None
        assert result.range is None
        assert snapshot.files == []
        assert snapshot.groups.by_file == {}
        assert snapshot.groups.by_rule == {"0": [0]}

    def test_range_stored_as_tuple(self, finding_factory):
        snapshot = normalize_findings([finding_factory(line=7)])
        assert snapshot.results[0].range == (7, 0, 7, 10)

    def test_groups_partition_results(self, finding_factory):
        findings = [
            finding_factory(rule_id="a", file="x.ts", line=1),
            finding_factory(rule_id="b", file="y.ts", line=2),
            finding_factory(rule_id="a", file="y.ts", line=3),
        ]
        snapshot = normalize_findings(findings)

        assert snapshot.groups.by_rule == {"0": [0, 2], "1": [1]}
        assert snapshot.groups.by_file == {"0": [0], "1": [1, 2]}
        assert sum(len(v) for v in snapshot.groups.by_rule.values()) == len(snapshot.results)

    def test_summary_folds_info_into_warnings(self, finding_factory):
        findings = [
            finding_factory(rule_id="e", severity="error", file="a.ts"),
            finding_factory(rule_id="w", severity="warning", file="a.ts", line=2),
            finding_factory(rule_id="i", severity="info", file="b.ts"),
        ]
        summary = normalize_findings(findings).summary

        assert summary.errors == 1
        assert summary.warnings == 2
        assert summary.info == 1
        assert summary.total_files == 2
        assert summary.total_findings == 3

    def test_rule_metadata_carried(self, finding_factory):
        finding = finding_factory(
            rule_id="no-default-export",
            rule_kind="boundary",
            severity="warning",
            docs_url="https://example.com/rules/no-default-export",
            tags=("style",),
        )
        rule = normalize_findings([finding]).rules[0]

        assert rule.kind == "boundary"
        assert rule.severity == "warning"
        assert rule.docs_url == "https://example.com/rules/no-default-export"
        assert rule.tags == ("style",)


class TestDeterminism:
    """Shuffled input must produce the same dictionaries."""

    def _findings(self, finding_factory):
        return [
            finding_factory(rule_id=f"rule-{i % 4}", file=f"src/mod{i % 7}/f.ts", line=i)
            for i in range(60)
        ]

    def test_shuffled_input_same_dictionaries(self, finding_factory):
        findings = self._findings(finding_factory)
        shuffled = list(findings)
        random.Random(1234).shuffle(shuffled)

        a = normalize_findings(findings)
        b = normalize_findings(shuffled)

        assert a.rules == b.rules
        assert a.files == b.files
        assert a.summary == b.summary
        assert a.groups.by_rule.keys() == b.groups.by_rule.keys()
        assert a.groups.by_file.keys() == b.groups.by_file.keys()
        assert {k: len(v) for k, v in a.groups.by_rule.items()} == {
            k: len(v) for k, v in b.groups.by_rule.items()
        }
        assert sorted(derive_result_keys(a).values()) == sorted(derive_result_keys(b).values())

    def test_idempotent(self, finding_factory):
        findings = self._findings(finding_factory)
        first = normalize_findings(findings)
        second = normalize_findings(expand_snapshot(first))
        assert first.to_dict() == second.to_dict()


class TestExpand:
    """Expanding a snapshot restores the original findings."""

    def test_round_trip(self, finding_factory):
        findings = [
            finding_factory(rule_id="a", file="x.ts", line=1, message="first"),
            finding_factory(rule_id="a", file="x.ts", line=2, message="first"),
            finding_factory(rule_id="a", file=None, line=None, message="other"),
            finding_factory(rule_id="b", file="y.ts", line=4, severity="info"),
        ]
        assert expand_snapshot(normalize_findings(findings)) == findings

    def test_serialized_round_trip(self, finding_factory):
        findings = [finding_factory(rule_id=f"r{i}", file=f"f{i}.ts") for i in range(3)]
        snapshot = normalize_findings(findings)
        restored = NormalizedSnapshot.from_dict(json.loads(json.dumps(snapshot.to_dict())))
        assert restored == snapshot


class TestCompression:
    """Normalized output is much smaller than the raw findings."""

    def test_size_reduction_over_forty_percent(self, finding_factory):
        findings = [
            finding_factory(
                rule_id=f"migration/rule-number-{i % 10}",
                file=f"packages/service-{i % 50}/src/components/module.ts",
                line=i + 1,
                docs_url=f"https://docs.example.com/rules/migration/rule-number-{i % 10}",
            )
            for i in range(1000)
        ]
        raw_size = len(json.dumps([f.to_dict() for f in findings]))
        compact_size = len(json.dumps(normalize_findings(findings).to_dict()))

        assert compact_size < raw_size * 0.6


class TestRebuildGroups:
    """Test rebuild_groups on hand-built snapshots."""

    def test_keys_in_index_order(self):
        snapshot = NormalizedSnapshot(
            results=[
                CompactResult(rule=1, file=2),
                CompactResult(rule=0, file=0),
                CompactResult(rule=1),
            ]
        )
        groups = rebuild_groups(snapshot)

        assert list(groups.by_rule) == ["0", "1"]
        assert groups.by_rule["1"] == [0, 2]
        assert groups.by_file == {"0": [1], "2": [0]}
