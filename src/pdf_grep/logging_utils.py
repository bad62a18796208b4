"""Logging setup for pdf-grep.

The live view owns the terminal while a search runs, so log records are off
by default. ``--debug`` sends them to stderr and ``--log-file`` (or
PDF_GREP_LOG_FILE) appends them to a file instead.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

DEFAULT_FORMAT = "%(asctime)s | %(levelname)s | %(name)s:%(lineno)d | %(message)s"
PACKAGE_LOGGER = "pdf_grep"
_CONFIGURED = False


def _resolve_level(level: int | str | None) -> int:
    # Unknown names fall through to PDF_GREP_LOG_LEVEL, then WARNING.
    if isinstance(level, int):
        return level
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        if isinstance(resolved, int):
            return resolved
    env_level = os.getenv("PDF_GREP_LOG_LEVEL", "WARNING").upper()
    resolved = logging.getLevelName(env_level)
    if isinstance(resolved, int):
        return resolved
    return logging.WARNING


def configure_logging(
    level: int | str | None = None,
    *,
    log_file: str | os.PathLike[str] | None = None,
    console: bool = True,
    force: bool = False,
) -> None:
    """Install root handlers for a pdf-grep run.

    Parameters
    ----------
    level:
        Level for the root logger. ``None`` reads PDF_GREP_LOG_LEVEL, which
        defaults to WARNING so routine worker chatter stays quiet.
    log_file:
        File that log records are appended to. ``None`` reads
        PDF_GREP_LOG_FILE; an empty value means no file handler.
    console:
        Attach a stderr handler. Its output interleaves with the live view,
        so the CLI only enables it together with ``--debug``.
    force:
        Replace handlers installed by an earlier call, as the CLI does on
        every invocation so repeated runs in one process (tests) start clean.

    Raises
    ------
    ValueError
        If neither a console nor a file handler would be installed.
    """
    global _CONFIGURED

    resolved_level = _resolve_level(level)
    format_string = os.getenv("PDF_GREP_LOG_FORMAT", DEFAULT_FORMAT)

    handlers: list[logging.Handler] = []
    if console:
        handlers.append(logging.StreamHandler())

    if log_file is None:
        log_file = os.getenv("PDF_GREP_LOG_FILE", "")

    if log_file:
        log_path = Path(log_file)
        if log_path.parent and not log_path.parent.exists():
            log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path, mode="a", encoding="utf-8"))

    if not handlers:
        raise ValueError("configure_logging requires at least one handler")

    if force or not _CONFIGURED:
        logging.basicConfig(
            level=resolved_level,
            format=format_string,
            handlers=handlers,
            force=True,
        )
        _CONFIGURED = True
    else:
        root_logger = logging.getLogger()
        root_logger.setLevel(resolved_level)


def silence_logging() -> None:
    """Keep library log output off the terminal while the live view is drawn."""
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    if not any(isinstance(h, logging.NullHandler) for h in package_logger.handlers):
        package_logger.addHandler(logging.NullHandler())


__all__ = ["configure_logging", "silence_logging"]
