"""Checkpoint persistence: immutable snapshots plus a newest-first manifest."""

from .backend import CheckpointBackend, FileBackend, MemoryBackend, atomic_write_text
from .models import (
    SCHEMA_VERSION,
    Checkpoint,
    CheckpointSummary,
    ConfigSnapshot,
    DeltaStats,
    Manifest,
    ManifestEntry,
    format_checkpoint_id,
    format_timestamp,
    parse_timestamp,
)
from .outcome import Malformed, Missing, ParseOutcome, Valid
from .store import (
    CheckpointComparison,
    CheckpointStore,
    create_checkpoint,
    list_checkpoints,
    open_store,
    read_checkpoint,
    read_manifest,
)

__all__ = [
    "SCHEMA_VERSION",
    "Checkpoint",
    "CheckpointSummary",
    "ConfigSnapshot",
    "DeltaStats",
    "Manifest",
    "ManifestEntry",
    "format_checkpoint_id",
    "format_timestamp",
    "parse_timestamp",
    "CheckpointBackend",
    "FileBackend",
    "MemoryBackend",
    "atomic_write_text",
    "ParseOutcome",
    "Valid",
    "Missing",
    "Malformed",
    "CheckpointStore",
    "CheckpointComparison",
    "open_store",
    "create_checkpoint",
    "read_manifest",
    "list_checkpoints",
    "read_checkpoint",
]
