"""Findings input exceptions: rule-engine output that cannot be recorded."""

from pathlib import Path

from .base import MigrationLedgerError


class FindingsError(MigrationLedgerError):
    """Base class for problems with raw findings."""

    pass


class FindingsFileError(FindingsError):
    """Raised when a findings file is unreadable or not a list of findings."""

    hint = 'Expected a JSON list of findings, or an object with a "findings" or "results" list'

    def __init__(self, path: Path, reason: str):
        super().__init__(f"Invalid findings file: {path}", details={"reason": reason})
        self.path = path
        self.reason = reason
