from __future__ import annotations

import logging
import os
import random
import time
from pathlib import Path
from typing import Iterable

from pdf_grep.config_utils import DEFAULT_EXTENSIONS
from pdf_grep.errors import DirectoryAccessError

logger = logging.getLogger(__name__)


def _raise_walk_error(exc: OSError) -> None:
    raise exc


def _iter_files(root_directory: Path) -> Iterable[Path]:
    # os.walk reports unreadable directories through onerror; rglob would
    # silently skip them.
    for dirpath, dirnames, filenames in os.walk(root_directory, onerror=_raise_walk_error):
        dirnames.sort()
        for filename in filenames:
            path = Path(dirpath) / filename
            if path.is_file():
                yield path


def _has_extension(path: Path, extensions: set[str]) -> bool:
    return path.suffix.lower() in extensions


def find_documents(
    root_directory: Path,
    *,
    extensions: Iterable[str] = DEFAULT_EXTENSIONS,
    shuffle: bool = False,
    seed: int | None = None,
) -> list[Path]:
    """Recursively collect documents under ``root_directory``.

    Paths are returned sorted unless ``shuffle`` is set, in which case they are
    randomized (deterministically when ``seed`` is given). An empty list is a
    valid result.

    Raises
    ------
    DirectoryAccessError
        If the root does not exist, is not a directory, or cannot be traversed.
    """
    wanted = {extension.lower() for extension in extensions}
    root_directory = root_directory.expanduser()

    if not root_directory.exists():
        raise DirectoryAccessError(root_directory, "directory does not exist")
    if not root_directory.is_dir():
        raise DirectoryAccessError(root_directory, "not a directory")

    logger.info("Collecting %s files in %s", ", ".join(sorted(wanted)), root_directory)
    start_time = time.time()

    try:
        documents = sorted(
            path for path in _iter_files(root_directory) if _has_extension(path, wanted)
        )
    except OSError as exc:
        raise DirectoryAccessError(root_directory, str(exc)) from exc

    if shuffle:
        random.Random(seed).shuffle(documents)
        logger.debug("Shuffled %d documents (seed=%s)", len(documents), seed)

    elapsed = time.time() - start_time
    logger.info("Found %d documents in %.2f seconds", len(documents), elapsed)
    return documents
