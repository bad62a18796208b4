import io
from unittest.mock import MagicMock, PropertyMock

import pytest
from rich.console import Console

from pdf_grep.console import ConsoleGeometry, erase_lines, physical_line_count


@pytest.mark.parametrize(
    "text, width, expected",
    [
        ("", 80, 1),
        ("abc", 80, 1),
        ("x" * 80, 80, 1),
        ("x" * 81, 80, 2),
        ("x" * 25, 10, 3),
        ("界" * 5, 10, 1),
        ("界" * 6, 10, 2),
    ],
)
def test_physical_line_count(text, width, expected):
    assert physical_line_count(text, width) == expected


def test_physical_line_count_rejects_zero_width():
    with pytest.raises(ValueError):
        physical_line_count("abc", 0)


def test_erase_lines():
    assert erase_lines(0) == ""
    assert erase_lines(1) == "\r\x1b[2K"
    assert erase_lines(3) == "\r\x1b[2K" + "\x1b[1A\x1b[2K" * 2


def test_geometry_reads_console_width():
    console = Console(file=io.StringIO(), width=123)
    assert ConsoleGeometry(console).width() == 123


def test_geometry_falls_back_when_width_unavailable():
    console = MagicMock()
    type(console).size = PropertyMock(side_effect=OSError("no tty"))

    assert ConsoleGeometry(console, default_width=72).width() == 72


def test_geometry_falls_back_on_non_positive_width():
    console = MagicMock()
    console.size.width = 0

    assert ConsoleGeometry(console).width() == 80
