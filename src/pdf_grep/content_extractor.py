"""Per-page text extraction for the search workers."""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Any, Protocol

logger = logging.getLogger(__name__)

# MuPDF keeps global state that is not safe to use from several threads at
# once, even across independent documents.
_MUPDF_LOCK = threading.Lock()


class DocumentTextExtractor(Protocol):
    """Turns a document path into per-page text.

    Implementations must be callable from several threads on independent
    handles. A document that cannot be opened is reported as ``None``.
    """

    def open(self, path: Path) -> Any | None: ...

    def page_count(self, handle: Any) -> int: ...

    def page_text(self, handle: Any, index: int) -> str: ...

    def close(self, handle: Any) -> None: ...


class PyMuPDFExtractor:
    """DocumentTextExtractor backed by PyMuPDF."""

    def __init__(self) -> None:
        import pymupdf

        self._pymupdf = pymupdf
        # Damaged files make MuPDF print errors straight to stderr, which
        # would tear the live view.
        pymupdf.TOOLS.mupdf_display_errors(False)

    def open(self, path: Path) -> Any | None:
        try:
            with _MUPDF_LOCK:
                doc = self._pymupdf.open(str(path))
        except Exception as exc:
            logger.debug("Failed to open PDF %s: %s", path, exc)
            return None

        if not doc.is_pdf:
            logger.debug("Skipping %s: not a PDF document", path)
            self.close(doc)
            return None
        return doc

    def page_count(self, handle: Any) -> int:
        with _MUPDF_LOCK:
            return handle.page_count

    def page_text(self, handle: Any, index: int) -> str:
        try:
            with _MUPDF_LOCK:
                return handle.load_page(index).get_text()
        except Exception as exc:
            logger.warning(
                "Error extracting page %d in %s: %s", index + 1, handle.name, exc
            )
            return ""

    def close(self, handle: Any) -> None:
        try:
            with _MUPDF_LOCK:
                handle.close()
        except Exception as exc:
            logger.debug("Ignoring error while closing %s: %s", handle, exc)
