"""Shared, append-only store of per-document search results."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path

from pdf_grep.errors import RecordStateError
from pdf_grep.schema import Occurrence, RecordView

logger = logging.getLogger(__name__)


@dataclass
class DocumentRecord:
    """Mutable per-document accumulator. Only touched under the store lock."""

    path: Path
    owner: int
    occurrences: list[Occurrence] = field(default_factory=list)
    completed: bool = False
    finalized: bool = False
    line_count: int | None = None

    def view(self, handle: int) -> RecordView:
        return RecordView(
            handle=handle,
            path=self.path,
            occurrences=tuple(self.occurrences),
            completed=self.completed,
            finalized=self.finalized,
            line_count=self.line_count,
        )


class ResultStore:
    """Arena of document records addressed by stable integer handles.

    Records are appended by workers and never reordered or removed. Each
    record has a single writer, the thread that created it; the reporter only
    sets the finalized state. One coarse lock serializes every access because
    matches are sparse and contention is low.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._records: list[DocumentRecord] = []
        self._first_unfinalized = 0

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def _get(self, handle: int) -> DocumentRecord:
        if not 0 <= handle < len(self._records):
            raise RecordStateError(f"Unknown record handle {handle}")
        return self._records[handle]

    def _require_owner(self, record: DocumentRecord, action: str) -> None:
        if record.owner != threading.get_ident():
            raise RecordStateError(
                f"Only the worker that created {record.path} may {action}"
            )

    def create_record(self, path: Path) -> int:
        """Append a record for ``path`` owned by the calling thread."""
        with self._lock:
            self._records.append(DocumentRecord(path=path, owner=threading.get_ident()))
            handle = len(self._records) - 1
        logger.debug("Created record %d for %s", handle, path)
        return handle

    def append_occurrence(self, handle: int, occurrence: Occurrence) -> None:
        with self._lock:
            record = self._get(handle)
            self._require_owner(record, "append occurrences")
            if record.completed:
                raise RecordStateError(f"Record for {record.path} is already complete")
            record.occurrences.append(occurrence)

    def mark_complete(self, handle: int) -> None:
        with self._lock:
            record = self._get(handle)
            self._require_owner(record, "complete it")
            if record.completed:
                raise RecordStateError(f"Record for {record.path} is already complete")
            record.completed = True

    def mark_finalized(
        self, handle: int, line_count: int, *, allow_incomplete: bool = False
    ) -> None:
        """Freeze a record's rendered output.

        ``allow_incomplete`` is used once workers have stopped, to settle
        records whose scan was cut short by cancellation.
        """
        if line_count < 0:
            raise ValueError("line_count must not be negative")
        with self._lock:
            record = self._get(handle)
            if record.finalized:
                raise RecordStateError(f"Record for {record.path} is already finalized")
            if not record.completed and not allow_incomplete:
                raise RecordStateError(
                    f"Record for {record.path} cannot be finalized before it completes"
                )
            record.finalized = True
            record.line_count = line_count
            while (
                self._first_unfinalized < len(self._records)
                and self._records[self._first_unfinalized].finalized
            ):
                self._first_unfinalized += 1

    @property
    def first_unfinalized(self) -> int:
        """Smallest record index that is not finalized yet."""
        with self._lock:
            return self._first_unfinalized

    def snapshot(
        self, from_index: int = 0, *, unfinalized_only: bool = False
    ) -> list[RecordView]:
        """Return views of every record from ``from_index`` on, in creation order.

        With ``unfinalized_only`` finalized records are skipped without
        copying their occurrences.
        """
        with self._lock:
            return [
                record.view(handle)
                for handle, record in enumerate(
                    self._records[from_index:], start=from_index
                )
                if not (unfinalized_only and record.finalized)
            ]

    def all_finalized(self) -> bool:
        with self._lock:
            return self._first_unfinalized == len(self._records)

    def matched_records(self) -> list[RecordView]:
        """Views of records holding at least one occurrence."""
        return [view for view in self.snapshot() if view.has_matches]
