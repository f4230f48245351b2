"""Raw terminal primitives for the status line.

ANSI colour and control sequences, width-aware truncation that never cuts
through an escape sequence, and a best-effort writer for the error stream.
"""

from __future__ import annotations

import logging
import os
import re
import sys
from typing import TextIO

from rich.cells import cell_len

logger = logging.getLogger(__name__)

ANSI_NORMAL = "\x1b[0m"
ANSI_RED = "\x1b[31;1m"
ANSI_GREEN = "\x1b[32;1m"
ANSI_BLUE = "\x1b[34;1m"

CLEAR_LINE = "\x1b[K"  # clear to end of line

_ANSI_PATTERN = re.compile(r"\x1b\[[0-9;]*[a-zA-Z]")


def strip_ansi(text: str) -> str:
    """Remove ANSI escape sequences."""
    return _ANSI_PATTERN.sub("", text)


def visible_width(text: str) -> int:
    """Terminal cells taken by ``text`` once escape sequences are removed."""
    return cell_len(strip_ansi(text))


def truncate_ansi(text: str, max_width: int) -> str:
    """Clip ``text`` to ``max_width`` terminal cells.

    Escape sequences are zero-width and always kept, even after the cut,
    so a colour opened before the cut is still reset.
    """
    if visible_width(text) <= max_width:
        return text

    result = []
    width = 0
    pos = 0
    clipped = False
    for match in _ANSI_PATTERN.finditer(text):
        if not clipped:
            clipped, width = _take_cells(
                text[pos : match.start()], max_width, width, result
            )
        result.append(match.group())
        pos = match.end()
    if not clipped:
        _take_cells(text[pos:], max_width, width, result)
    return "".join(result)


def _take_cells(
    chunk: str, max_width: int, width: int, out: list[str]
) -> tuple[bool, int]:
    for ch in chunk:
        ch_width = cell_len(ch)
        if width + ch_width > max_width:
            return True, width
        out.append(ch)
        width += ch_width
    return False, width


def query_terminal_width(stream: TextIO | None = None) -> int:
    """Column count of the terminal behind ``stream``, or 0 if unknown."""
    stream = stream or sys.stderr
    try:
        return os.get_terminal_size(stream.fileno()).columns
    except (AttributeError, OSError, ValueError):
        return 0


class TerminalWriter:
    """Best-effort writer for the status line.

    Write failures (closed stream, broken pipe) are logged and dropped:
    a dead terminal must never break the producers reporting progress.
    """

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream
        self.failed_writes = 0

    @property
    def stream(self) -> TextIO:
        # Resolved lazily so pytest's capture of sys.stderr is honoured
        return self._stream if self._stream is not None else sys.stderr

    def write(self, text: str) -> None:
        try:
            self.stream.write(text)
            self.stream.flush()
        except (OSError, ValueError) as exc:
            self.failed_writes += 1
            logger.debug("Dropped status line write: %s", exc)
