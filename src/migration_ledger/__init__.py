"""
Migration Ledger - checkpoint history and norm detection for code migrations

Records successive snapshots of static-analysis findings in a compact,
order-independent form and detects when a directory has durably satisfied
a rule: its violations dropped to zero and stayed there across a consensus
window of checkpoints.
"""

__version__ = "0.1.0"
__author__ = "Naman Agarwal"

from .checkpoints import (
    Checkpoint,
    CheckpointStore,
    create_checkpoint,
    list_checkpoints,
    read_checkpoint,
)
from .config import MigrationConfig, load_config
from .norms import DirectorySummary, Norm, summarize
from .snapshot import Finding, NormalizedSnapshot, derive_result_key, normalize_findings

__all__ = [
    "Finding",
    "NormalizedSnapshot",
    "normalize_findings",
    "derive_result_key",
    "Checkpoint",
    "CheckpointStore",
    "create_checkpoint",
    "list_checkpoints",
    "read_checkpoint",
    "summarize",  # Directory-scoped norm summary
    "DirectorySummary",
    "Norm",
    "MigrationConfig",
    "load_config",
]
