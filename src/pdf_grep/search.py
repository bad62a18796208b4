"""Orchestrates one search run: discovery, workers, live view and report."""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import TextIO

from rich.console import Console

from pdf_grep.cancellation import AbortListener, CancellationToken
from pdf_grep.config_utils import SearchSettings
from pdf_grep.console import ConsoleGeometry
from pdf_grep.content_extractor import DocumentTextExtractor, PyMuPDFExtractor
from pdf_grep.discover_files import find_documents
from pdf_grep.final_report import build_final_report
from pdf_grep.live_reporter import LiveReporter
from pdf_grep.result_store import ResultStore
from pdf_grep.schema import RecordView, SearchQuery
from pdf_grep.workers import WorkerPool

logger = logging.getLogger(__name__)


@dataclass
class SearchOptions:
    """Everything a run needs besides its collaborators."""

    root: Path
    query: SearchQuery
    shuffle: bool = False
    sort: bool = False
    print_line: bool = False
    print_path: bool = False
    settings: SearchSettings = field(default_factory=SearchSettings)


@dataclass
class SearchOutcome:
    root: Path
    query: SearchQuery
    total_files: int
    completed_files: int = 0
    records: list[RecordView] = field(default_factory=list)
    aborted: bool = False
    report: list[str] = field(default_factory=list)

    @property
    def no_files(self) -> bool:
        return self.total_files == 0


def run_search(
    options: SearchOptions,
    *,
    extractor: DocumentTextExtractor | None = None,
    console: Console | None = None,
    wake: threading.Event | None = None,
    token: CancellationToken | None = None,
    listen_stream: TextIO | None = None,
) -> SearchOutcome:
    """Search every document under ``options.root`` and return the results.

    With ``options.sort`` the live view only shows progress, on stderr, and
    is cleared at the end so stdout carries just the final report. Pass
    ``listen_stream`` to let a line of input abort the run.

    Raises
    ------
    DirectoryAccessError
        If the root cannot be traversed.
    """
    settings = options.settings
    paths = find_documents(
        options.root,
        extensions=settings.extensions,
        shuffle=options.shuffle,
        seed=settings.shuffle_seed,
    )
    if not paths:
        logger.warning("No documents found in %s", options.root)
        return SearchOutcome(root=options.root, query=options.query, total_files=0)

    wake = wake or threading.Event()
    token = token or CancellationToken(wake)
    extractor = extractor or PyMuPDFExtractor()
    console = console or Console(stderr=options.sort)
    store = ResultStore()

    pool = WorkerPool(
        paths,
        options.query,
        extractor,
        store,
        token,
        wake,
        size=settings.workers,
    )
    reporter = LiveReporter(
        store,
        pool.completed,
        pool.total,
        token,
        wake,
        console,
        geometry=ConsoleGeometry(console, settings.default_width),
        policy=settings.finalization,
        refresh_interval=settings.refresh_interval,
        print_path=options.print_path,
        show_records=not options.sort,
        transient=options.sort,
    )

    if listen_stream is not None:
        AbortListener(token, listen_stream).start()

    start_time = time.time()
    pool.start()
    try:
        reporter.run()
    except KeyboardInterrupt:
        token.cancel("keyboard interrupt")
        raise
    finally:
        pool.join()

    aborted = token.is_set()
    reporter.finish(aborted=aborted)

    records = store.matched_records()
    outcome = SearchOutcome(
        root=options.root,
        query=options.query,
        total_files=pool.total,
        completed_files=pool.completed.value,
        records=records,
        aborted=aborted,
    )
    if options.sort:
        outcome.report = build_final_report(
            records,
            options.query,
            options.root,
            print_path=options.print_path,
            print_line=options.print_line,
        )

    logger.info(
        "Searched %d/%d files in %.2f seconds: %d with matches%s",
        outcome.completed_files,
        outcome.total_files,
        time.time() - start_time,
        len(records),
        " (aborted)" if aborted else "",
    )
    return outcome
