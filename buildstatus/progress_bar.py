"""Live status line for concurrent build, copy and download activity.

``ProgressBar`` implements the ``Logger`` capability. Every public call
acquires one lock, mutates the shared ``ProgressState``, redraws the
status line and only then releases the lock, so a mutation and the redraw
it causes are a single step for every other thread and two redraws never
interleave their control sequences.

Usage::

    bar = ProgressBar()
    bar.start_activity(1, ActivityType.BUILDS)
    bar.progress(1, done=0, expected=1, running=1)
    bar.start_activity(2, ActivityType.BUILD, "building hello-2.12")
    bar.result(2, ResultType.BUILD_LOG_LINE, ["compiling hello.c"])
    bar.stop_activity(2)
    bar.progress(1, done=1, expected=1)
    bar.stop_activity(1)
    bar.close()  # leaves "[1 built]" behind
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Sequence
from typing import TextIO

from buildstatus.logger import Logger
from buildstatus.models import ActivityType, Field, ResultType, Verbosity
from buildstatus.render import render_final, render_log_line, render_status_line
from buildstatus.state import ProgressState
from buildstatus.terminal import TerminalWriter, query_terminal_width

logger = logging.getLogger(__name__)


class ProgressBar(Logger):
    """Thread-safe status line renderer on the error stream."""

    def __init__(
        self,
        stream: TextIO | None = None,
        width: int | None = None,
        verbosity: Verbosity = Verbosity.INFO,
    ) -> None:
        self._writer = TerminalWriter(stream)
        self.width = query_terminal_width(stream) if width is None else width
        self.verbosity = verbosity
        self._state = ProgressState()
        self._lock = threading.Lock()
        self._closed = False

    @property
    def state(self) -> ProgressState:
        """The live state; read it only while no producer is running."""
        return self._state

    @property
    def closed(self) -> bool:
        return self._closed

    # ------------------------------------------------------------------
    # Logger capability
    # ------------------------------------------------------------------

    def log(self, level: Verbosity | int, text: str) -> None:
        if level > self.verbosity:
            return
        with self._lock:
            if self._closed:
                # Status line already torn down; print the message as is
                self._writer.write(text + "\n")
            else:
                self._write(render_log_line(self._state, text, self.width))

    def start_activity(
        self, activity_id: int, activity_type: ActivityType, label: str = ""
    ) -> None:
        with self._lock:
            self._state.start(activity_id, ActivityType.from_code(activity_type), label)
            self._redraw()

    def stop_activity(self, activity_id: int) -> None:
        with self._lock:
            self._state.stop(activity_id)
            self._redraw()

    def progress(
        self,
        activity_id: int,
        done: int = 0,
        expected: int = 0,
        running: int = 0,
        failed: int = 0,
    ) -> None:
        with self._lock:
            self._state.progress(activity_id, done, expected, running, failed)
            self._redraw()

    def set_expected(
        self, activity_id: int, activity_type: ActivityType, expected: int
    ) -> None:
        with self._lock:
            self._state.set_expected(
                activity_id, ActivityType.from_code(activity_type), expected
            )
            self._redraw()

    def result(
        self,
        activity_id: int,
        result_type: ResultType | int,
        fields: Sequence[Field] = (),
    ) -> None:
        with self._lock:
            if self._state.apply_result(activity_id, result_type, fields):
                self._redraw()

    # ------------------------------------------------------------------
    # Redraw and teardown
    # ------------------------------------------------------------------

    def update(self) -> None:
        """Redraw the status line without changing anything."""
        with self._lock:
            self._redraw()

    def close(self) -> None:
        """Clear the status line, leaving the final summary if there is one.

        Safe to call more than once. Later events still update the state
        but are no longer drawn; later log messages are printed as plain
        lines.
        """
        with self._lock:
            if self._closed:
                return
            self._write(render_final(self._state))
            self._closed = True
            logger.debug(
                "Progress bar closed with %d live activities",
                len(self._state.activities),
            )

    def _redraw(self) -> None:
        self._write(render_status_line(self._state, self.width))

    def _write(self, text: str) -> None:
        if not self._closed:
            self._writer.write(text)

    def __enter__(self) -> ProgressBar:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
