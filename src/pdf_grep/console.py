"""Terminal geometry and cursor helpers for the live view."""

from __future__ import annotations

import logging
import math

from rich.cells import cell_len
from rich.console import Console
from rich.control import Control
from rich.segment import ControlType

from pdf_grep.config_utils import DEFAULT_CONSOLE_WIDTH

logger = logging.getLogger(__name__)


class ConsoleGeometry:
    """Reports the terminal width, falling back to a default."""

    def __init__(self, console: Console, default_width: int = DEFAULT_CONSOLE_WIDTH):
        self.console = console
        self.default_width = default_width

    def width(self) -> int:
        try:
            width = self.console.size.width
        except Exception as exc:
            logger.debug("Console width unavailable (%s); using %d", exc, self.default_width)
            return self.default_width
        if width <= 0:
            return self.default_width
        return width


def physical_line_count(text: str, width: int) -> int:
    """Number of terminal rows ``text`` occupies once wrapped at ``width``."""
    if width <= 0:
        raise ValueError("width must be positive")
    return max(1, math.ceil(cell_len(text) / width))


def erase_lines(count: int) -> str:
    """Escape sequence that clears ``count`` rows ending at the cursor row.

    The cursor is left at the start of the topmost cleared row.
    """
    if count <= 0:
        return ""
    return str(
        Control(
            ControlType.CARRIAGE_RETURN,
            (ControlType.ERASE_IN_LINE, 2),
            *(((ControlType.CURSOR_UP, 1), (ControlType.ERASE_IN_LINE, 2)) * (count - 1)),
        )
    )
