"""Incremental terminal view of the results while the search runs."""

from __future__ import annotations

import logging
import threading

from rich.console import Console

from pdf_grep.cancellation import CancellationToken
from pdf_grep.config_utils import DEFAULT_REFRESH_INTERVAL
from pdf_grep.console import ConsoleGeometry, erase_lines, physical_line_count
from pdf_grep.formatting import format_progress, format_record_lines
from pdf_grep.result_store import ResultStore
from pdf_grep.schema import FinalizationPolicy
from pdf_grep.workers import AtomicCounter

logger = logging.getLogger(__name__)

ABORTED_SUFFIX = " (aborted)"


class LiveReporter:
    """Redraws the unsettled tail of the result list on every wake-up.

    Records are drawn in discovery order starting at the store's first
    unfinalized index. Once a record is finalized its lines are never erased
    or rewritten, so each redraw only clears the rows of records that are
    still changing plus the progress line. Every cycle is emitted with a
    single write to avoid flicker.

    When the console is not a terminal the view degrades to plain output:
    finalized records are appended as they settle and nothing is redrawn.
    """

    def __init__(
        self,
        store: ResultStore,
        completed: AtomicCounter,
        total_files: int,
        token: CancellationToken,
        wake: threading.Event,
        console: Console,
        *,
        geometry: ConsoleGeometry | None = None,
        policy: FinalizationPolicy = FinalizationPolicy.ORDERED,
        refresh_interval: float = DEFAULT_REFRESH_INTERVAL,
        print_path: bool = False,
        show_records: bool = True,
        transient: bool = False,
        interactive: bool | None = None,
    ) -> None:
        self.store = store
        self.completed = completed
        self.total_files = total_files
        self.token = token
        self.wake = wake
        self.console = console
        self.geometry = geometry or ConsoleGeometry(console)
        self.policy = policy
        self.refresh_interval = refresh_interval
        self.print_path = print_path
        self.show_records = show_records
        self.transient = transient
        self.interactive = console.is_terminal if interactive is None else interactive
        # Rows written last cycle that the next cycle has to clear.
        self._erase_height = 0
        self.cycles = 0

    @property
    def erase_height(self) -> int:
        return self._erase_height

    def run(self) -> None:
        """Render until cancelled, or until every file and record has settled."""
        logger.debug("Live reporter started for %d files", self.total_files)
        while True:
            self.wake.clear()
            completed = self.completed.value
            self.render_cycle(completed=completed)
            if self.token.is_set():
                logger.debug("Live reporter stopping: cancellation requested")
                break
            if completed >= self.total_files and self.store.all_finalized():
                break
            self.wake.wait(self.refresh_interval)
        logger.debug("Live reporter finished after %d cycles", self.cycles)

    def finish(self, *, aborted: bool = False) -> None:
        """Settle every remaining record and close the view.

        Only call this once the workers have stopped.
        """
        self.render_cycle(settle_all=True, suffix=ABORTED_SUFFIX if aborted else "")
        if not self.interactive:
            return
        if self.transient:
            self._write(erase_lines(self._erase_height))
        else:
            self._write("\n")
        self._erase_height = 0

    def render_cycle(
        self,
        *,
        completed: int | None = None,
        settle_all: bool = False,
        suffix: str = "",
    ) -> str:
        """Erase the unsettled tail, redraw it, and return what was written.

        ``completed`` must be read before the store snapshot so that a file
        counted as done is already complete in the snapshot.
        """
        if completed is None:
            completed = self.completed.value
        width = self.geometry.width()
        committed, unstable, unstable_height = self._layout(width, settle_all)

        if self.interactive:
            progress = format_progress(completed, self.total_files) + suffix
            body = "".join(f"{line}\n" for line in committed + unstable)
            block = erase_lines(self._erase_height) + body + progress
            self._erase_height = unstable_height + physical_line_count(progress, width)
        else:
            block = "".join(f"{line}\n" for line in committed)

        self._write(block)
        self.cycles += 1
        return block

    def _layout(self, width: int, settle_all: bool) -> tuple[list[str], list[str], int]:
        committed: list[str] = []
        unstable: list[str] = []
        unstable_height = 0
        # True while every record before the current one is finalized.
        leading = True

        for view in self.store.snapshot(
            self.store.first_unfinalized, unfinalized_only=True
        ):
            settled = view.completed or settle_all
            may_finalize = settled and (
                leading or self.policy is FinalizationPolicy.EAGER
            )

            if not view.has_matches:
                if may_finalize:
                    self.store.mark_finalized(
                        view.handle, 0, allow_incomplete=settle_all
                    )
                else:
                    leading = False
                continue

            lines = (
                format_record_lines(view, print_path=self.print_path)
                if self.show_records
                else []
            )
            height = sum(physical_line_count(line, width) for line in lines)

            if may_finalize:
                self.store.mark_finalized(
                    view.handle, height, allow_incomplete=settle_all
                )
                committed.extend(lines)
            else:
                leading = False
                unstable.extend(lines)
                unstable_height += height

        return committed, unstable, unstable_height

    def _write(self, text: str) -> None:
        if not text:
            return
        self.console.file.write(text)
        self.console.file.flush()
