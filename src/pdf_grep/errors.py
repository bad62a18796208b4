"""Exception types raised by the search pipeline."""

from __future__ import annotations

from pathlib import Path


class PdfGrepError(Exception):
    """Base class for pdf-grep errors."""


class DirectoryAccessError(PdfGrepError):
    """Raised when the search root cannot be traversed."""

    def __init__(self, root: Path, reason: str) -> None:
        super().__init__(f"Cannot search {root}: {reason}")
        self.root = root
        self.reason = reason


class RecordStateError(PdfGrepError):
    """Raised when a result record is mutated out of its allowed lifecycle."""


class ConfigError(PdfGrepError):
    """Raised when a configuration file cannot be loaded or validated."""
