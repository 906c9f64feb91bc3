"""Checkpoint and norm exceptions: explicit lookups, empty history, bad prefixes."""

from typing import Optional

from .base import MigrationLedgerError


class CheckpointError(MigrationLedgerError):
    """Base class for checkpoint store errors."""

    pass


class CheckpointNotFoundError(CheckpointError):
    """Raised when a checkpoint addressed by id does not exist."""

    def __init__(self, checkpoint_id: str, path: Optional[str] = None):
        details = {"checkpoint_id": checkpoint_id}
        if path:
            details["path"] = path
        super().__init__(f"Checkpoint not found: {checkpoint_id}", details=details)
        self.checkpoint_id = checkpoint_id
        self.path = path


class CheckpointValidationError(CheckpointError):
    """Raised when a stored checkpoint or manifest fails structural validation."""

    def __init__(self, checkpoint_id: str, reason: str):
        super().__init__(
            f"Invalid checkpoint data: {checkpoint_id}",
            details={"checkpoint_id": checkpoint_id, "reason": reason},
        )
        self.checkpoint_id = checkpoint_id
        self.reason = reason


class NormError(MigrationLedgerError):
    """Base class for norm detection errors."""

    pass


class NoCheckpointsError(NormError):
    """Raised when a directory summary is requested with no usable history."""

    hint = "Record a checkpoint first: migration-ledger record <findings.json>"

    def __init__(self, output_dir: str, reason: str = "No checkpoints found in manifest"):
        super().__init__(
            f"No checkpoints available in {output_dir}",
            details={"output_dir": output_dir, "reason": reason},
        )
        self.output_dir = output_dir
        self.reason = reason


class InvalidDirectoryError(NormError):
    """Raised when a directory prefix cannot be matched against project paths."""

    def __init__(self, directory: str, reason: str):
        super().__init__(
            f"Invalid directory: {directory}",
            details={"directory": directory, "reason": reason},
        )
        self.directory = directory
        self.reason = reason


class NormCaptureError(NormError):
    """Raised when a captured norm summary cannot be written."""

    def __init__(self, path: str, reason: str):
        super().__init__(
            f"Cannot write norm summary: {path}",
            details={"path": path, "reason": reason},
        )
        self.path = path
        self.reason = reason
