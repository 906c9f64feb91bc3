"""Base exception for Migration Ledger."""

from typing import Any, Dict, Optional


class MigrationLedgerError(Exception):
    """Base exception for all Migration Ledger errors.

    ``details`` values are rendered with ``str()``; ``hint`` is an optional
    next step the CLI prints under the error line.
    """

    hint: Optional[str] = None

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        hint: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = {k: str(v) for k, v in (details or {}).items()}
        if hint is not None:
            self.hint = hint

    def __str__(self) -> str:
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({details_str})"
        return self.message
