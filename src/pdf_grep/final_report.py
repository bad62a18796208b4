from __future__ import annotations

from pathlib import Path
from typing import Iterable

from pdf_grep.formatting import format_occurrence, format_record_lines
from pdf_grep.schema import RecordView, SearchQuery

REPORT_HEADER = "Final matching results:"


def no_matches_message(query: SearchQuery | str, root: Path) -> str:
    return f'No PDF files containing "{query}" found in {root}'


def build_final_report(
    records: Iterable[RecordView],
    query: SearchQuery | str,
    root: Path,
    *,
    print_path: bool = False,
    print_line: bool = False,
) -> list[str]:
    """Return the sorted, stable report lines for every record with matches.

    Records are ordered by path; with ``print_line`` every occurrence follows
    its record, ordered by page and line number.
    """
    matched = sorted(
        (record for record in records if record.has_matches),
        key=lambda record: record.path,
    )
    if not matched:
        return [no_matches_message(query, root)]

    lines = [REPORT_HEADER]
    for record in matched:
        lines.extend(format_record_lines(record, print_path=print_path))
        if print_line:
            occurrences = sorted(
                record.occurrences,
                key=lambda occurrence: (occurrence.page, occurrence.line_number),
            )
            lines.extend(format_occurrence(occurrence) for occurrence in occurrences)
    return lines
