"""Worker pool that scans documents and feeds the result store."""

from __future__ import annotations

import logging
import os
import threading
from pathlib import Path
from typing import Sequence

from pdf_grep.cancellation import CancellationToken
from pdf_grep.content_extractor import DocumentTextExtractor
from pdf_grep.result_store import ResultStore
from pdf_grep.schema import Occurrence, SearchQuery

logger = logging.getLogger(__name__)

MINIMUM_WORKERS = 1


def resolve_worker_count(requested: int | None = None) -> int:
    """Return the pool size: ``requested`` if positive, else cpu_count - 1."""
    if requested and requested > 0:
        return requested
    return max(MINIMUM_WORKERS, (os.cpu_count() or 1) - 1)


class AtomicCounter:
    """Integer counter with an atomic fetch-and-increment."""

    def __init__(self, start: int = 0) -> None:
        self._value = start
        self._lock = threading.Lock()

    def fetch_add(self, amount: int = 1) -> int:
        """Add ``amount`` and return the value held before the addition."""
        with self._lock:
            previous = self._value
            self._value += amount
            return previous

    @property
    def value(self) -> int:
        with self._lock:
            return self._value


class WorkerPool:
    """Fixed set of threads that claim files by index and search them.

    Each file is claimed through a single fetch-and-increment on the dispatch
    counter, so every index goes to exactly one worker. Matches are appended
    to the store as soon as they are found and ``wake`` is set so the reporter
    can redraw.
    """

    def __init__(
        self,
        paths: Sequence[Path],
        query: SearchQuery,
        extractor: DocumentTextExtractor,
        store: ResultStore,
        token: CancellationToken,
        wake: threading.Event,
        *,
        size: int | None = None,
    ) -> None:
        self.paths = list(paths)
        self.query = query
        self.extractor = extractor
        self.store = store
        self.token = token
        self.wake = wake
        self.size = resolve_worker_count(size)
        self.dispatch_index = AtomicCounter()
        self.completed = AtomicCounter()
        self._threads: list[threading.Thread] = []

    @property
    def total(self) -> int:
        return len(self.paths)

    def start(self) -> None:
        for worker_id in range(self.size):
            thread = threading.Thread(
                target=self._worker, args=(worker_id,), name=f"SearchWorker-{worker_id}"
            )
            thread.start()
            self._threads.append(thread)
        logger.info("Started %d search workers for %d files", self.size, self.total)

    def join(self) -> None:
        for thread in self._threads:
            thread.join()
        logger.debug("All search workers stopped")

    def _claim(self) -> int | None:
        if self.token.is_set():
            return None
        index = self.dispatch_index.fetch_add()
        if index >= self.total or self.token.is_set():
            return None
        return index

    def _worker(self, worker_id: int) -> None:
        worker_logger = logger.getChild(f"worker-{worker_id}")
        worker_logger.debug("Search worker %d started", worker_id)

        while True:
            index = self._claim()
            if index is None:
                break
            path = self.paths[index]
            worker_logger.debug("Worker %d searching %s", worker_id, path)
            try:
                self._search_document(path, worker_logger)
            except Exception as exc:
                worker_logger.error(
                    "Worker %d could not search %s: %s", worker_id, path, exc
                )
                self._finish_file()

        worker_logger.debug("Search worker %d stopped", worker_id)

    def _finish_file(self) -> None:
        self.completed.fetch_add()
        self.wake.set()

    def _search_document(self, path: Path, worker_logger: logging.Logger) -> None:
        handle = self.extractor.open(path)
        if handle is None:
            worker_logger.debug("Skipping %s: could not open document", path)
            self._finish_file()
            return

        record = self.store.create_record(path)
        cancelled = False
        try:
            page_count = self.extractor.page_count(handle)
            for page_index in range(page_count):
                if self.token.is_set():
                    worker_logger.info(
                        "Search of %s cancelled after %d/%d pages",
                        path,
                        page_index,
                        page_count,
                    )
                    cancelled = True
                    break
                self._search_page(record, handle, page_index)
        except Exception as exc:
            worker_logger.error("Failed while searching %s: %s", path, exc)
        finally:
            self._close(handle, path, worker_logger)

        # A cancelled record stays incomplete; the reporter settles it on finish.
        if cancelled:
            return
        self.store.mark_complete(record)
        self._finish_file()

    def _close(self, handle: object, path: Path, worker_logger: logging.Logger) -> None:
        # The record must still be completed before the file is counted.
        try:
            self.extractor.close(handle)
        except Exception as exc:
            worker_logger.warning("Could not close %s: %s", path, exc)

    def _search_page(self, record: int, handle: object, page_index: int) -> None:
        text = self.extractor.page_text(handle, page_index)
        for line_number, line in enumerate(text.splitlines(), start=1):
            if self.query.matches(line):
                self.store.append_occurrence(
                    record,
                    Occurrence(page=page_index + 1, line_number=line_number, line=line),
                )
                self.wake.set()
