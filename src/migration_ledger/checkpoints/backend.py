"""Storage backends for the checkpoint store.

The store only ever reads and writes whole named JSON documents
(``manifest.json`` and ``<checkpoint id>.json``).  ``FileBackend`` keeps them
under ``<output_dir>/checkpoints/``; ``MemoryBackend`` keeps them in a dict
and is what the tests use.
"""

from __future__ import annotations

import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from ..logging_config import get_logger

logger = get_logger(__name__)

CHECKPOINTS_DIRNAME = "checkpoints"


def atomic_write_text(path: Path, content: str) -> None:
    """Write ``content`` to ``path`` through a temporary file in the same directory.

    Readers see either the old file or the complete new one.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
        os.replace(tmp_name, path)
    except BaseException:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise
    logger.debug("Wrote %s (%d bytes)", path, len(content))


class CheckpointBackend(ABC):
    """Named-document storage used by ``CheckpointStore``."""

    @abstractmethod
    def read_text(self, name: str) -> Optional[str]:
        """Return the document's text, or ``None`` if it does not exist."""

    @abstractmethod
    def write_text(self, name: str, content: str) -> None:
        """Create or replace a document."""

    @abstractmethod
    def location(self, name: str) -> str:
        """Human-readable location of a document, for manifests and errors."""

    def describe(self) -> str:
        """Where this backend keeps its documents."""
        return type(self).__name__


class FileBackend(CheckpointBackend):
    """Documents stored as files in ``<output_dir>/checkpoints/``.

    Writes go to a temporary file in the same directory and are moved into
    place, so readers never observe a half-written document.  Two writers
    can still interleave a manifest read-modify-write; serialize externally.
    """

    def __init__(self, output_dir: str | os.PathLike) -> None:
        self.output_dir = Path(output_dir)
        self.checkpoints_dir = self.output_dir / CHECKPOINTS_DIRNAME

    def describe(self) -> str:
        return str(self.output_dir)

    def read_text(self, name: str) -> Optional[str]:
        path = self.checkpoints_dir / name
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None

    def write_text(self, name: str, content: str) -> None:
        atomic_write_text(self.checkpoints_dir / name, content)

    def location(self, name: str) -> str:
        return str(Path(".") / CHECKPOINTS_DIRNAME / name)


class MemoryBackend(CheckpointBackend):
    """In-memory documents keyed by name."""

    def __init__(self) -> None:
        self.documents: dict[str, str] = {}

    def read_text(self, name: str) -> Optional[str]:
        return self.documents.get(name)

    def write_text(self, name: str, content: str) -> None:
        self.documents[name] = content

    def location(self, name: str) -> str:
        return str(Path(".") / CHECKPOINTS_DIRNAME / name)
