"""Cooperative cancellation shared by the workers and the live reporter."""

from __future__ import annotations

import logging
import sys
import threading
from typing import TextIO

logger = logging.getLogger(__name__)


class CancellationToken:
    """Advisory abort flag checked at well-defined points.

    Cancelling also sets ``wake`` so a reporter waiting for new results
    notices the abort without sitting out its refresh timeout.
    """

    def __init__(self, wake: threading.Event | None = None) -> None:
        self._event = threading.Event()
        self._wake = wake
        self._lock = threading.Lock()
        self.reason: str | None = None

    def cancel(self, reason: str) -> bool:
        """Request cancellation. Returns False if it was already requested."""
        with self._lock:
            if self._event.is_set():
                logger.debug("Additional cancellation request ignored (%s)", reason)
                return False
            self.reason = reason
            self._event.set()
        logger.info("Cancellation requested: %s", reason)
        if self._wake is not None:
            self._wake.set()
        return True

    def is_set(self) -> bool:
        return self._event.is_set()

    def wait(self, timeout: float | None = None) -> bool:
        return self._event.wait(timeout)


class AbortListener:
    """Cancels the run when a line (or end of input) arrives on ``stream``.

    The listener thread is a daemon and is never joined: a blocking read
    cannot be interrupted portably, so it is left behind at shutdown.
    """

    def __init__(self, token: CancellationToken, stream: TextIO | None = None) -> None:
        self._token = token
        self._stream = stream if stream is not None else sys.stdin
        self.thread: threading.Thread | None = None

    def start(self) -> threading.Thread:
        thread = threading.Thread(target=self._listen, name="AbortListener", daemon=True)
        thread.start()
        self.thread = thread
        logger.debug("Abort listener started")
        return thread

    def _listen(self) -> None:
        try:
            line = self._stream.readline()
        except (OSError, ValueError) as exc:
            logger.debug("Abort listener stopped reading input: %s", exc)
            return
        self._token.cancel("input received" if line else "end of input")
