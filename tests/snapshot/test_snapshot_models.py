"""Tests for snapshot/models.py - parsing and validation."""

import pytest

from migration_ledger.snapshot import Finding, NormalizedSnapshot, SourceRange, normalize_findings


class TestFindingFromDict:
    """Test Finding.from_dict on rule-engine output."""

    def test_nested_range(self):
        finding = Finding.from_dict(
            {
                "ruleId": "no-any",
                "ruleKind": "pattern",
                "severity": "warning",
                "message": "Avoid any",
                "file": "src/a.ts",
                "range": {"start": {"line": 2, "column": 4}, "end": {"line": 2, "column": 7}},
                "docsUrl": "https://example.com/no-any",
                "tags": ["types"],
            }
        )
        assert finding.range == SourceRange(2, 4, 2, 7)
        assert finding.docs_url == "https://example.com/no-any"
        assert finding.tags == ("types",)

    def test_list_range_and_aliases(self):
        finding = Finding.from_dict(
            {"id": "r", "kind": "boundary", "severity": "info", "message": "m", "range": [1, 0, 3, 2]}
        )
        assert finding.rule_id == "r"
        assert finding.rule_kind == "boundary"
        assert finding.range == SourceRange(1, 0, 3, 2)
        assert finding.file is None

    def test_defaults_kind_to_pattern(self):
        finding = Finding.from_dict({"ruleId": "r", "severity": "error", "message": "m"})
        assert finding.rule_kind == "pattern"

    def test_to_dict_round_trip(self, finding_factory):
        finding = finding_factory(docs_url="https://example.com", tags=("a", "b"))
        assert Finding.from_dict(finding.to_dict()) == finding

    @pytest.mark.parametrize(
        "data",
        [
            {"severity": "error", "message": "m"},
            {"ruleId": "r", "severity": "fatal", "message": "m"},
            {"ruleId": "r", "severity": "error", "message": "m", "range": [1, 2, 3]},
            {"ruleId": "r", "severity": "error", "message": "m", "range": {"start": {}}},
            {"ruleId": "r", "severity": "error", "message": "m", "file": 5},
            {"ruleId": "r", "severity": "error", "message": 3},
            {"ruleId": "r", "severity": "error", "message": "m", "docsUrl": ["x"]},
            {"ruleId": "r", "severity": "error", "message": "m", "tags": "style"},
            {"ruleId": "r", "severity": "error", "message": "m", "tags": [1]},
            {"ruleId": "r", "kind": 7, "severity": "error", "message": "m"},
        ],
    )
    def test_invalid_raises_value_error(self, data):
        with pytest.raises(ValueError):
            Finding.from_dict(data)


class TestNormalizedSnapshotFromDict:
    """Test NormalizedSnapshot.from_dict validation."""

    def test_rebuilds_missing_groups(self, finding_factory):
        snapshot = normalize_findings(
            [finding_factory(rule_id="a", file="x.ts"), finding_factory(rule_id="b", file="y.ts")]
        )
        data = snapshot.to_dict()
        del data["groups"]

        restored = NormalizedSnapshot.from_dict(data)
        assert restored.groups == snapshot.groups

    def test_rule_index_out_of_range(self, finding_factory):
        data = normalize_findings([finding_factory()]).to_dict()
        data["results"][0]["rule"] = 5
        with pytest.raises(ValueError, match="missing rule"):
            NormalizedSnapshot.from_dict(data)

    def test_file_index_out_of_range(self, finding_factory):
        data = normalize_findings([finding_factory()]).to_dict()
        data["results"][0]["file"] = 3
        with pytest.raises(ValueError, match="missing file"):
            NormalizedSnapshot.from_dict(data)

    @pytest.mark.parametrize(
        "section, buckets",
        [
            ("byFile", {"7": [0]}),
            ("byFile", {"x": [0]}),
            ("byFile", {"00": [0, 1]}),
            ("byRule", {"0": [4]}),
            ("byRule", {"1": [0]}),
            ("byRule", {}),
            ("byFile", {"0": [0, 0]}),
        ],
    )
    def test_rejects_inconsistent_groups(self, finding_factory, section, buckets):
        data = normalize_findings(
            [finding_factory(rule_id="a", file="x.ts"), finding_factory(rule_id="b", file="x.ts", line=2)]
        ).to_dict()
        data["groups"][section] = buckets

        with pytest.raises(ValueError, match="groups"):
            NormalizedSnapshot.from_dict(data)

    def test_accepts_stored_groups(self, finding_factory):
        snapshot = normalize_findings([finding_factory(file="x.ts"), finding_factory(file=None)])
        assert NormalizedSnapshot.from_dict(snapshot.to_dict()).groups == snapshot.groups

    def test_rejects_non_list_results(self):
        with pytest.raises(ValueError):
            NormalizedSnapshot.from_dict({"rules": [], "files": [], "results": {}})

    def test_rule_index_lookup(self, finding_factory):
        snapshot = normalize_findings([finding_factory(rule_id="b"), finding_factory(rule_id="a")])
        assert snapshot.rule_index("b") == 1
        assert snapshot.rule_index("missing") is None
