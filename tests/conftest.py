"""Shared test fixtures for Migration Ledger tests."""

from datetime import datetime, timedelta, timezone

import pytest

from migration_ledger.checkpoints import Checkpoint, CheckpointStore, MemoryBackend
from migration_ledger.snapshot import Finding, SourceRange, normalize_findings

BASE_TIME = datetime(2025, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


def make_finding(
    rule_id="no-async-await",
    file="src/app/index.ts",
    line=1,
    severity="error",
    message=None,
    rule_kind="pattern",
    **kwargs,
):
    return Finding(
        rule_id=rule_id,
        rule_kind=rule_kind,
        severity=severity,
        message=message if message is not None else f"Avoid {rule_id}",
        file=file,
        range=SourceRange(line, 0, line, 10) if line is not None else None,
        **kwargs,
    )


def make_history(counts_by_rule, directory="src/app", start=BASE_TIME, step=timedelta(days=1)):
    """Checkpoints (oldest first) with ``counts_by_rule[rule][i]`` violations at checkpoint i.

    Violations are spread over three files under ``directory``.
    """
    length = len(next(iter(counts_by_rule.values())))
    history = []
    for i in range(length):
        findings = []
        for rule_id, counts in counts_by_rule.items():
            for n in range(counts[i]):
                findings.append(
                    make_finding(rule_id=rule_id, file=f"{directory}/file{n % 3}.ts", line=n + 1)
                )
        ts = start + step * i
        history.append(
            Checkpoint(
                checkpoint_id=f"cp-{i:03d}",
                timestamp=ts,
                revision=i + 1,
                findings=normalize_findings(findings),
            )
        )
    return history


class FakeClock:
    """Returns BASE_TIME, then advances one minute per call."""

    def __init__(self, start=BASE_TIME, step=timedelta(minutes=1)):
        self.now = start
        self.step = step

    def __call__(self):
        current = self.now
        self.now = self.now + self.step
        return current


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def backend():
    return MemoryBackend()


@pytest.fixture
def store(backend, clock):
    return CheckpointStore(backend, clock=clock, tool_version="0.1.0-test")


@pytest.fixture
def finding_factory():
    return make_finding


@pytest.fixture
def history_factory():
    return make_history
