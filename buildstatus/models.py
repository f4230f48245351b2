"""Data models for activity tracking.

Activity, result and verbosity codes are shared by producers, the event
decoder and the renderer. Their integer values are stable because they
appear in structured event logs.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum

Field = str | int


class ActivityType(IntEnum):
    UNKNOWN = 0
    COPY_PATH = 100
    DOWNLOAD = 101
    REALISE = 102
    COPY_PATHS = 103
    BUILDS = 104
    BUILD = 105
    OPTIMISE_STORE = 106
    VERIFY_PATHS = 107

    @classmethod
    def from_code(cls, code: int) -> ActivityType:
        """Map a raw code to a type; unrecognised codes are UNKNOWN."""
        try:
            return cls(code)
        except ValueError:
            return cls.UNKNOWN


class ResultType(IntEnum):
    FILE_LINKED = 100
    BUILD_LOG_LINE = 101
    UNTRUSTED_PATH = 102
    CORRUPTED_PATH = 103
    SET_PHASE = 104
    PROGRESS = 105
    SET_EXPECTED = 106


class Verbosity(IntEnum):
    ERROR = 0
    WARN = 1
    NOTICE = 2
    INFO = 3
    TALKATIVE = 4
    CHATTY = 5
    DEBUG = 6
    VOMIT = 7

    @classmethod
    def parse(cls, value: str | int) -> Verbosity:
        """Parse a verbosity from a name (``"info"``) or number (``3``)."""
        if isinstance(value, int):
            return cls(value)
        text = value.strip()
        if text.isdigit():
            return cls(int(text))
        try:
            return cls[text.upper()]
        except KeyError:
            raise ValueError(
                f"Unknown verbosity '{value}'. "
                f"Valid levels: {', '.join(v.name.lower() for v in cls)}"
            ) from None


# Types whose counters are byte counts rather than item counts.
BYTE_COUNTED_TYPES = frozenset({ActivityType.COPY_PATH, ActivityType.DOWNLOAD})


# =============================================================================
# Live state records
# =============================================================================


@dataclass
class Activity:
    """One live unit of concurrent work."""

    activity_id: int
    type: ActivityType
    label: str = ""
    secondary_label: str = ""  # most recent build-log line
    done: int = 0
    expected: int = 0
    running: int = 0
    failed: int = 0
    # Per-type expected counts this activity contributes to other rollups
    expected_by_type: dict[ActivityType, int] = field(default_factory=dict)

    @property
    def is_blank(self) -> bool:
        """True when there is nothing to show for this activity."""
        return not self.label and not self.secondary_label

    @property
    def display_text(self) -> str:
        if self.label and self.secondary_label:
            return f"{self.label}: {self.secondary_label}"
        return self.label or self.secondary_label


@dataclass
class TypeRollup:
    """Aggregate counters for one activity type.

    ``live`` holds the live activities of this type; the ``carried_*``
    totals survive the removal of stopped activities.
    """

    live: dict[int, Activity] = field(default_factory=dict)
    carried_done: int = 0
    carried_expected: int = 0  # sum of set_expected contributions
    carried_failed: int = 0
