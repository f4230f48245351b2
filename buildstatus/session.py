"""Scoped installation of the progress bar.

The progress bar becomes the active logger only for the duration of a
``with`` block and only when the error stream is an interactive terminal.
On every exit path the bar is flushed and closed before the previous
logger is put back.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TextIO

from buildstatus import settings
from buildstatus.logger import Logger, LoggerSlot
from buildstatus.progress_bar import ProgressBar

logger = logging.getLogger(__name__)


def _resolve_progress(use_progress: bool | None, stream: TextIO | None) -> bool:
    """Determine whether to install the status line."""
    if use_progress is not None:
        return use_progress
    from buildstatus.cli.rich_output import should_use_progress_bar

    return should_use_progress_bar(stream)


@contextmanager
def progress_bar_session(
    slot: LoggerSlot,
    *,
    use_progress: bool | None = None,
    stream: TextIO | None = None,
    width: int | None = None,
) -> Iterator[Logger]:
    """Install a ``ProgressBar`` into ``slot`` for the duration of the block.

    Args:
        slot: Holder producers report through.
        use_progress: Force (True) or skip (False) the status line;
            None auto-detects from the environment and ``stream``.
        stream: Output stream, the error stream by default.
        width: Terminal width; settings override, then the terminal query.

    Yields:
        The logger producers should use inside the block.
    """
    if not _resolve_progress(use_progress, stream):
        logger.debug("Status line disabled; keeping %s", type(slot.current).__name__)
        yield slot.current
        return

    if width is None:
        width = settings.get_columns()
    bar = ProgressBar(stream=stream, width=width, verbosity=settings.get_verbosity())
    previous = slot.swap(bar)
    try:
        yield bar
    finally:
        bar.close()
        slot.swap(previous)
