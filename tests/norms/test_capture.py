"""Tests for norms/capture.py - selecting and writing directory summaries."""

import json
from datetime import datetime, timezone
from pathlib import Path

import pytest

from migration_ledger.checkpoints.models import CheckpointSummary
from migration_ledger.exceptions import InvalidConfigError, NormCaptureError
from migration_ledger.norms import (
    DirectoryStats,
    DirectorySummary,
    filter_summaries,
    norm_summary_path,
    skip_reason,
    write_summary,
)
from migration_ledger.snapshot.models import FindingsSummary


LATEST = datetime(2025, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


def make_summary(directory="src/app", status="migrated", total=3):
    return DirectorySummary(
        directory=directory,
        status=status,
        files=DirectoryStats(total=total, clean=total, with_violations=0),
        latest_checkpoint=CheckpointSummary(
            id="2025-01-01T12-00-00.000Z", timestamp=LATEST, summary=FindingsSummary()
        ),
    )


class TestNormSummaryPath:
    """Test file naming under <output_dir>/norms/."""

    @pytest.mark.parametrize(
        "directory, name",
        [
            ("src/services", "src_services.json"),
            ("lib", "lib.json"),
            ("a/b/c/", "a_b_c.json"),
            (".", "_root.json"),
            ("", "_root.json"),
        ],
    )
    def test_names(self, tmp_path, directory, name):
        assert norm_summary_path(tmp_path, directory) == tmp_path / "norms" / name


class TestSkipReason:
    """Test the status and size filters."""

    def test_keeps_matching_summary(self):
        assert skip_reason(make_summary(), "migrated", 1) is None
        assert skip_reason(make_summary(status="in-progress"), "all", 3) is None

    def test_status_mismatch(self):
        reason = skip_reason(make_summary(status="in-progress"), "migrated")
        assert reason == 'status is "in-progress", filter is "migrated"'

    def test_not_started_only_passes_all(self):
        summary = make_summary(status="not-started", total=0)
        assert skip_reason(summary, "in-progress", 0) is not None
        assert skip_reason(summary, "all", 0) is None

    def test_too_few_files(self):
        assert skip_reason(make_summary(total=1), "all", 2) == "only 1 files (min: 2)"

    @pytest.mark.parametrize("kwargs", [{"status": "done"}, {"min_files": -1}, {"min_files": True}])
    def test_invalid_filters(self, kwargs):
        with pytest.raises(InvalidConfigError):
            skip_reason(make_summary(), **kwargs)

    def test_filter_summaries(self):
        summaries = [
            make_summary("a", "migrated", 5),
            make_summary("b", "in-progress", 5),
            make_summary("c", "migrated", 0),
        ]
        assert [s.directory for s in filter_summaries(summaries, "migrated", 1)] == ["a"]


class TestWriteSummary:
    """Test persisting summaries."""

    def test_writes_wrapped_summary(self, tmp_path):
        path = write_summary(tmp_path, make_summary())

        assert path == tmp_path / "norms" / "src_app.json"
        data = json.loads(path.read_text(encoding="utf-8"))
        assert data == {"summary": make_summary().to_dict()}
        assert [p.name for p in path.parent.iterdir()] == ["src_app.json"]

    def test_existing_file_is_kept(self, tmp_path):
        path = norm_summary_path(tmp_path, "src/app")
        path.parent.mkdir(parents=True)
        path.write_text("keep", encoding="utf-8")

        assert write_summary(tmp_path, make_summary()) is None
        assert path.read_text(encoding="utf-8") == "keep"

    def test_overwrite(self, tmp_path):
        write_summary(tmp_path, make_summary(status="in-progress"))
        path = write_summary(tmp_path, make_summary(status="migrated"), overwrite=True)

        assert json.loads(path.read_text(encoding="utf-8"))["summary"]["status"] == "migrated"

    def test_unwritable_output_dir(self, tmp_path):
        blocker = tmp_path / "ledger"
        blocker.write_text("not a directory", encoding="utf-8")

        with pytest.raises(NormCaptureError) as exc_info:
            write_summary(blocker, make_summary())
        assert exc_info.value.path == str(Path(blocker) / "norms" / "src_app.json")
