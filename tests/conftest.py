from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

import pytest


@dataclass
class FakeHandle:
    path: Path
    pages: list[str]
    closed: bool = False


class FakeExtractor:
    """In-memory DocumentTextExtractor; a ``None`` entry fails to open."""

    def __init__(
        self,
        documents: dict[Path, list[str] | None],
        *,
        page_delay: float = 0.0,
        on_open: Callable[[Path], None] | None = None,
        on_page: Callable[[Path, int], None] | None = None,
    ) -> None:
        self.documents = documents
        self.page_delay = page_delay
        self.on_open = on_open
        self.on_page = on_page
        self.opened: list[Path] = []
        self.closed: list[Path] = []
        self._lock = threading.Lock()

    def open(self, path: Path) -> FakeHandle | None:
        with self._lock:
            self.opened.append(path)
        if self.on_open is not None:
            self.on_open(path)
        pages = self.documents.get(path)
        if pages is None:
            return None
        return FakeHandle(path, list(pages))

    def page_count(self, handle: FakeHandle) -> int:
        return len(handle.pages)

    def page_text(self, handle: FakeHandle, index: int) -> str:
        if self.on_page is not None:
            self.on_page(handle.path, index)
        if self.page_delay:
            time.sleep(self.page_delay)
        return handle.pages[index]

    def close(self, handle: FakeHandle) -> None:
        handle.closed = True
        with self._lock:
            self.closed.append(handle.path)


@pytest.fixture
def fake_extractor():
    """Return the FakeExtractor class for building per-test document sets."""
    return FakeExtractor


@pytest.fixture
def make_pdf():
    """Create real single-column PDFs, one string per page."""
    pymupdf = pytest.importorskip("pymupdf")

    def _make(path: Path, pages: list[str]) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        doc = pymupdf.open()
        for text in pages:
            page = doc.new_page()
            if text:
                page.insert_text((72, 72), text)
        doc.save(str(path))
        doc.close()
        return path

    return _make
