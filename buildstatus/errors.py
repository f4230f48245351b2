"""Exceptions raised by the progress bar and the event decoder.

Misuse by a producer (reusing an id, reporting against an activity that
is not live) is a bug on the producer side, so these errors propagate
instead of being absorbed by the status line.
"""

from __future__ import annotations


class ProgressBarError(Exception):
    """Base class for all build-status errors."""


class DuplicateActivity(ProgressBarError):
    """An activity was started with an id that is already live."""

    def __init__(self, activity_id: int) -> None:
        super().__init__(f"activity {activity_id} is already live")
        self.activity_id = activity_id


class UnknownActivity(ProgressBarError):
    """An event referenced an activity id that is not live."""

    def __init__(self, activity_id: int) -> None:
        super().__init__(f"activity {activity_id} is not live")
        self.activity_id = activity_id


class InvalidResultFields(ProgressBarError, ValueError):
    """A result event carried fields of the wrong shape."""


class EventDecodeError(ProgressBarError, ValueError):
    """A line of a structured event log could not be decoded."""

    def __init__(self, message: str, line_number: int | None = None) -> None:
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)
        self.line_number = line_number


class SettingsError(ProgressBarError, ValueError):
    """A configuration value could not be parsed."""
