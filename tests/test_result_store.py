import threading
from pathlib import Path

import pytest

from pdf_grep.errors import RecordStateError
from pdf_grep.result_store import ResultStore
from pdf_grep.schema import Occurrence


def _occurrence(page: int, line_number: int = 1, line: str = "foo") -> Occurrence:
    return Occurrence(page=page, line_number=line_number, line=line)


def _run_in_thread(target) -> None:
    errors: list[BaseException] = []

    def wrapper():
        try:
            target()
        except BaseException as exc:  # re-raised in the test thread
            errors.append(exc)

    thread = threading.Thread(target=wrapper)
    thread.start()
    thread.join(timeout=5)
    if errors:
        raise errors[0]


def test_records_keep_creation_order_and_stable_handles():
    store = ResultStore()
    handles = [store.create_record(Path(f"/docs/{name}.pdf")) for name in "abc"]

    assert handles == [0, 1, 2]
    assert len(store) == 3
    assert [view.path.name for view in store.snapshot()] == ["a.pdf", "b.pdf", "c.pdf"]
    assert [view.handle for view in store.snapshot(1)] == [1, 2]


def test_view_pages_are_sorted_and_unique():
    store = ResultStore()
    handle = store.create_record(Path("/docs/b.pdf"))
    for page in (4, 2, 4, 4):
        store.append_occurrence(handle, _occurrence(page))

    view = store.snapshot()[0]
    assert view.pages == (2, 4)
    assert len(view.occurrences) == 4


def test_append_from_other_thread_is_rejected():
    store = ResultStore()
    handle = store.create_record(Path("/docs/a.pdf"))

    with pytest.raises(RecordStateError):
        _run_in_thread(lambda: store.append_occurrence(handle, _occurrence(1)))
    with pytest.raises(RecordStateError):
        _run_in_thread(lambda: store.mark_complete(handle))


def test_append_after_completion_is_rejected():
    store = ResultStore()
    handle = store.create_record(Path("/docs/a.pdf"))
    store.mark_complete(handle)

    with pytest.raises(RecordStateError):
        store.append_occurrence(handle, _occurrence(1))
    with pytest.raises(RecordStateError):
        store.mark_complete(handle)


def test_finalize_requires_completion_unless_forced():
    store = ResultStore()
    handle = store.create_record(Path("/docs/a.pdf"))

    with pytest.raises(RecordStateError):
        store.mark_finalized(handle, 2)

    store.mark_finalized(handle, 2, allow_incomplete=True)
    view = store.snapshot()[0]
    assert view.finalized is True
    assert view.line_count == 2


def test_finalize_happens_once():
    store = ResultStore()
    handle = store.create_record(Path("/docs/a.pdf"))
    store.mark_complete(handle)
    store.mark_finalized(handle, 2)

    with pytest.raises(RecordStateError):
        store.mark_finalized(handle, 3)
    assert store.snapshot()[0].line_count == 2


def test_boundary_only_moves_over_contiguous_finalized_prefix():
    store = ResultStore()
    first = store.create_record(Path("/docs/a.pdf"))
    second = store.create_record(Path("/docs/b.pdf"))
    store.mark_complete(first)
    store.mark_complete(second)

    store.mark_finalized(second, 2)
    assert store.first_unfinalized == 0
    assert store.all_finalized() is False

    store.mark_finalized(first, 0)
    assert store.first_unfinalized == 2
    assert store.all_finalized() is True


def test_unknown_handle_is_rejected():
    store = ResultStore()
    with pytest.raises(RecordStateError):
        store.append_occurrence(3, _occurrence(1))


def test_matched_records_skip_empty_documents():
    store = ResultStore()
    empty = store.create_record(Path("/docs/empty.pdf"))
    hit = store.create_record(Path("/docs/hit.pdf"))
    store.append_occurrence(hit, _occurrence(2))
    store.mark_complete(empty)
    store.mark_complete(hit)

    assert [view.path.name for view in store.matched_records()] == ["hit.pdf"]


def test_concurrent_writers_do_not_lose_occurrences():
    store = ResultStore()
    per_thread = 200

    def writer(index: int) -> None:
        handle = store.create_record(Path(f"/docs/{index}.pdf"))
        for page in range(1, per_thread + 1):
            store.append_occurrence(handle, _occurrence(page))
        store.mark_complete(handle)

    threads = [threading.Thread(target=writer, args=(i,)) for i in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    views = store.snapshot()
    assert len(views) == 8
    assert all(view.completed for view in views)
    assert all(len(view.occurrences) == per_thread for view in views)


def test_snapshot_can_skip_finalized_records():
    store = ResultStore()
    first = store.create_record(Path("/docs/a.pdf"))
    second = store.create_record(Path("/docs/b.pdf"))
    third = store.create_record(Path("/docs/c.pdf"))
    store.append_occurrence(second, _occurrence(1))
    store.mark_complete(second)
    store.mark_finalized(second, 2)

    assert [view.handle for view in store.snapshot()] == [first, second, third]
    assert [view.handle for view in store.snapshot(unfinalized_only=True)] == [
        first,
        third,
    ]
    assert [view.handle for view in store.snapshot(1, unfinalized_only=True)] == [third]
