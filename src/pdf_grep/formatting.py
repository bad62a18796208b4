"""Text shared by the live view and the final report."""

from __future__ import annotations

from pdf_grep.schema import Occurrence, RecordView


def format_pages(pages: tuple[int, ...]) -> str:
    return ", ".join(str(page) for page in pages)


def format_record_lines(view: RecordView, *, print_path: bool = False) -> list[str]:
    """Name line (optionally with the parent directory) and page list line."""
    name = view.path.name
    if print_path:
        name = f"{name} {view.path.parent}"
    return [name, f"  Pages: {format_pages(view.pages)}"]


def format_occurrence(occurrence: Occurrence) -> str:
    return f"    Page {occurrence.page}, Line {occurrence.line_number}: {occurrence.line}"


def format_progress(completed: int, total: int) -> str:
    percent = completed / total * 100 if total else 100.0
    return f"{percent:5.1f}% ({completed}/{total} files)"
