"""Exception hierarchy for Migration Ledger."""

from .base import MigrationLedgerError
from .checkpoint import (
    CheckpointError,
    CheckpointNotFoundError,
    CheckpointValidationError,
    InvalidDirectoryError,
    NoCheckpointsError,
    NormCaptureError,
    NormError,
)
from .config import ConfigFileError, ConfigurationError, InvalidConfigError
from .findings import FindingsError, FindingsFileError

__all__ = [
    "MigrationLedgerError",
    "ConfigurationError",
    "ConfigFileError",
    "InvalidConfigError",
    "CheckpointError",
    "CheckpointNotFoundError",
    "CheckpointValidationError",
    "NormError",
    "NoCheckpointsError",
    "InvalidDirectoryError",
    "NormCaptureError",
    "FindingsError",
    "FindingsFileError",
]
