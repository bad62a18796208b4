"""Command-line entry point for pdf-grep."""

from __future__ import annotations

import logging
import os
import signal
import sys
import threading
from pathlib import Path
from typing import Optional

import typer
from typing_extensions import Annotated

from pdf_grep.cancellation import CancellationToken
from pdf_grep.config_utils import load_settings
from pdf_grep.errors import PdfGrepError
from pdf_grep.logging_utils import configure_logging, silence_logging
from pdf_grep.schema import FinalizationPolicy, SearchQuery
from pdf_grep.search import SearchOptions, run_search

app = typer.Typer(add_completion=False)
logger = logging.getLogger(__name__)

USAGE = (
    "Usage: pdf-grep [<directory>] <search-string> "
    "[--shuffle] [--sort] [--printline] [--printpath]"
)


def _setup_logging(debug: bool, log_file: Path | None) -> None:
    if debug or log_file or os.getenv("PDF_GREP_LOG_FILE"):
        configure_logging(
            level=logging.DEBUG if debug else None,
            log_file=log_file,
            console=debug,
            force=True,
        )
    else:
        silence_logging()


def _install_interrupt_handler(token: CancellationToken):
    """Make the first Ctrl-C cancel cooperatively; a second one interrupts."""
    if threading.current_thread() is not threading.main_thread():
        return None

    def handle_interrupt(signum, frame):
        if not token.cancel("interrupt signal"):
            raise KeyboardInterrupt

    previous = signal.signal(signal.SIGINT, handle_interrupt)
    return previous if previous is not None else signal.default_int_handler


def _interactive_stdin():
    stream = sys.stdin
    try:
        if stream is not None and stream.isatty():
            return stream
    except (AttributeError, ValueError):
        pass
    return None


@app.command()
def search(
    directory: Annotated[
        Optional[str],
        typer.Argument(
            help="Directory to search (default: current directory).",
            show_default=False,
        ),
    ] = None,
    search_string: Annotated[
        Optional[str],
        typer.Argument(help="Text to look for, case-insensitively.", show_default=False),
    ] = None,
    shuffle: Annotated[
        bool, typer.Option("--shuffle", help="Search files in random order.")
    ] = False,
    sort: Annotated[
        bool,
        typer.Option(
            "--sort", help="Print a sorted report once the search has finished."
        ),
    ] = False,
    printline: Annotated[
        bool,
        typer.Option(
            "--printline", help="Include every matching line in the sorted report."
        ),
    ] = False,
    printpath: Annotated[
        bool,
        typer.Option("--printpath", help="Show the containing directory of each file."),
    ] = False,
    workers: Annotated[
        int,
        typer.Option(
            help="Number of search threads (0 uses the configured or automatic value).",
            min=0,
            rich_help_panel="Processing",
        ),
    ] = 0,
    refresh_interval: Annotated[
        float,
        typer.Option(
            help="Maximum seconds between redraws (0 uses the configured value).",
            min=0.0,
            rich_help_panel="Processing",
        ),
    ] = 0.0,
    eager: Annotated[
        bool,
        typer.Option(
            "--eager",
            help="Freeze each file's output as soon as it finishes, in any order.",
            rich_help_panel="Processing",
        ),
    ] = False,
    seed: Annotated[
        Optional[int],
        typer.Option(help="Seed for --shuffle.", rich_help_panel="Processing"),
    ] = None,
    config: Annotated[
        Optional[Path],
        typer.Option(help="YAML settings file.", rich_help_panel="Configuration"),
    ] = None,
    log_file: Annotated[
        Optional[Path],
        typer.Option(help="Append log output to this file.", rich_help_panel="Logging"),
    ] = None,
    debug: Annotated[
        bool, typer.Option(help="Enable debug logging.", rich_help_panel="Logging")
    ] = False,
) -> None:
    """Search PDF files for a case-insensitive string, showing matches live.

    Press Enter while the search runs to stop early.
    """
    if not search_string:
        if directory:
            directory, search_string = None, directory
        else:
            typer.echo(USAGE, err=True)
            raise typer.Exit(code=1)

    _setup_logging(debug, log_file)

    try:
        settings = load_settings(config)
    except PdfGrepError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1) from exc

    overrides: dict[str, object] = {}
    if workers:
        overrides["workers"] = workers
    if refresh_interval:
        overrides["refresh_interval"] = refresh_interval
    if eager:
        overrides["finalization"] = FinalizationPolicy.EAGER
    if seed is not None:
        overrides["shuffle_seed"] = seed
    if overrides:
        settings = settings.model_copy(update=overrides)

    root = Path(directory) if directory else Path.cwd()
    options = SearchOptions(
        root=root,
        query=SearchQuery(text=search_string),
        shuffle=shuffle,
        sort=sort,
        print_line=printline,
        print_path=printpath,
        settings=settings,
    )
    logger.info("Searching %s for %r", root, search_string)

    wake = threading.Event()
    token = CancellationToken(wake)
    interrupt_handler = _install_interrupt_handler(token)
    try:
        outcome = run_search(
            options,
            token=token,
            wake=wake,
            listen_stream=_interactive_stdin(),
        )
    except PdfGrepError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1) from exc
    finally:
        if interrupt_handler is not None:
            signal.signal(signal.SIGINT, interrupt_handler)

    if outcome.no_files:
        typer.echo(f"No PDF files found in {root}")
        return

    for line in outcome.report:
        typer.echo(line)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
