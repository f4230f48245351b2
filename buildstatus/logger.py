"""The logging capability producers report through.

Producers receive a ``Logger`` (usually via a ``LoggerSlot``) and never
reach for a process global. ``StandardLogger`` forwards everything to
Python ``logging`` and is what runs when no interactive status line is
available.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence

from buildstatus.models import ActivityType, Field, ResultType, Verbosity

# Verbosity → stdlib logging level
_LEVELS: dict[Verbosity, int] = {
    Verbosity.ERROR: logging.ERROR,
    Verbosity.WARN: logging.WARNING,
    Verbosity.NOTICE: logging.INFO,
    Verbosity.INFO: logging.INFO,
    Verbosity.TALKATIVE: logging.DEBUG,
    Verbosity.CHATTY: logging.DEBUG,
    Verbosity.DEBUG: logging.DEBUG,
    Verbosity.VOMIT: logging.DEBUG,
}


def to_logging_level(level: Verbosity | int) -> int:
    return _LEVELS[Verbosity(min(max(int(level), 0), Verbosity.VOMIT))]


class Logger(ABC):
    """Sink for log lines and activity lifecycle events."""

    @abstractmethod
    def log(self, level: Verbosity | int, text: str) -> None: ...

    @abstractmethod
    def start_activity(
        self, activity_id: int, activity_type: ActivityType, label: str = ""
    ) -> None: ...

    @abstractmethod
    def stop_activity(self, activity_id: int) -> None: ...

    @abstractmethod
    def progress(
        self,
        activity_id: int,
        done: int = 0,
        expected: int = 0,
        running: int = 0,
        failed: int = 0,
    ) -> None: ...

    @abstractmethod
    def set_expected(
        self, activity_id: int, activity_type: ActivityType, expected: int
    ) -> None: ...

    @abstractmethod
    def result(
        self,
        activity_id: int,
        result_type: ResultType | int,
        fields: Sequence[Field] = (),
    ) -> None: ...

    def close(self) -> None:
        """Release resources; the default logger holds none."""


class StandardLogger(Logger):
    """Forward log lines to Python logging; activity events at DEBUG."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self.logger = logger or logging.getLogger("buildstatus.activity")

    def log(self, level: Verbosity | int, text: str) -> None:
        self.logger.log(to_logging_level(level), text)

    def start_activity(
        self, activity_id: int, activity_type: ActivityType, label: str = ""
    ) -> None:
        self.logger.debug(
            "start %s (%s): %s",
            activity_id,
            ActivityType.from_code(activity_type).name,
            label,
        )

    def stop_activity(self, activity_id: int) -> None:
        self.logger.debug("stop %s", activity_id)

    def progress(
        self,
        activity_id: int,
        done: int = 0,
        expected: int = 0,
        running: int = 0,
        failed: int = 0,
    ) -> None:
        self.logger.debug(
            "progress %s: done=%d expected=%d running=%d failed=%d",
            activity_id,
            done,
            expected,
            running,
            failed,
        )

    def set_expected(
        self, activity_id: int, activity_type: ActivityType, expected: int
    ) -> None:
        self.logger.debug(
            "expected %s: %s=%d",
            activity_id,
            ActivityType.from_code(activity_type).name,
            expected,
        )

    def result(
        self,
        activity_id: int,
        result_type: ResultType | int,
        fields: Sequence[Field] = (),
    ) -> None:
        if result_type == ResultType.BUILD_LOG_LINE and fields:
            self.logger.info("%s", fields[0])
        else:
            self.logger.debug(
                "result %s: %s %s", activity_id, result_type, list(fields)
            )


class LoggerSlot:
    """Holder for the logger producers should currently report to.

    Passed explicitly to producers; ``progress_bar_session`` swaps its
    content for the lifetime of a scope.
    """

    def __init__(self, logger: Logger | None = None) -> None:
        self.current: Logger = logger or StandardLogger()

    def swap(self, logger: Logger) -> Logger:
        """Install ``logger`` and return the one it replaced."""
        previous, self.current = self.current, logger
        return previous
