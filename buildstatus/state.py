"""Shared state for the status line.

Single mutable record of every live activity, the per-type rollups and
the scalar counters reported through result events. ``ProgressState`` is
not thread-safe on its own: the progress bar serialises every call under
one lock and redraws before releasing it.

Live activities are kept in one insertion-ordered mapping, so the id index
and the "most recently touched last" ordering cannot drift apart. Moving
an activity to the end is ``OrderedDict.move_to_end``.
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field

from buildstatus.errors import DuplicateActivity, InvalidResultFields, UnknownActivity
from buildstatus.models import (
    Activity,
    ActivityType,
    Field,
    ResultType,
    TypeRollup,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Result field access
# =============================================================================


def get_string(fields: Sequence[Field], n: int) -> str:
    """Return ``fields[n]`` as a string, or raise ``InvalidResultFields``."""
    if n >= len(fields):
        raise InvalidResultFields(f"missing field {n} (got {len(fields)} fields)")
    value = fields[n]
    if not isinstance(value, str):
        raise InvalidResultFields(f"field {n} should be a string, got {value!r}")
    return value


def get_int(fields: Sequence[Field], n: int) -> int:
    """Return ``fields[n]`` as an integer, or raise ``InvalidResultFields``."""
    if n >= len(fields):
        raise InvalidResultFields(f"missing field {n} (got {len(fields)} fields)")
    value = fields[n]
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidResultFields(f"field {n} should be an integer, got {value!r}")
    return value


# =============================================================================
# State store
# =============================================================================


@dataclass
class ProgressState:
    """Live activities, per-type rollups and global counters."""

    activities: OrderedDict[int, Activity] = field(default_factory=OrderedDict)
    by_type: dict[ActivityType, TypeRollup] = field(default_factory=dict)

    files_linked: int = 0
    bytes_linked: int = 0
    corrupted_paths: int = 0
    untrusted_paths: int = 0

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def rollup(self, activity_type: ActivityType) -> TypeRollup:
        """Rollup for a type, created on first use."""
        rollup = self.by_type.get(activity_type)
        if rollup is None:
            rollup = self.by_type[activity_type] = TypeRollup()
        return rollup

    def get(self, activity_id: int) -> Activity:
        try:
            return self.activities[activity_id]
        except KeyError:
            raise UnknownActivity(activity_id) from None

    def is_live(self, activity_id: int) -> bool:
        return activity_id in self.activities

    def iter_recent(self) -> Iterator[Activity]:
        """Live activities, most recently touched first."""
        return reversed(self.activities.values())

    def current_activity(self) -> Activity | None:
        """The most recently touched activity that has something to show."""
        for activity in self.iter_recent():
            if not activity.is_blank:
                return activity
        return None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(
        self, activity_id: int, activity_type: ActivityType, label: str = ""
    ) -> Activity:
        if activity_id in self.activities:
            raise DuplicateActivity(activity_id)
        activity = Activity(activity_id=activity_id, type=activity_type, label=label)
        self.activities[activity_id] = activity
        self.rollup(activity_type).live[activity_id] = activity
        return activity

    def stop(self, activity_id: int) -> Activity | None:
        """Fold a live activity into its rollup and forget it.

        Stopping an id that is not live is a no-op and returns None.
        """
        activity = self.activities.get(activity_id)
        if activity is None:
            logger.debug("stop for activity %s which is not live", activity_id)
            return None

        rollup = self.rollup(activity.type)
        rollup.carried_done += activity.done
        rollup.carried_failed += activity.failed

        for contributed_type, expected in activity.expected_by_type.items():
            self.rollup(contributed_type).carried_expected -= expected
        activity.expected_by_type.clear()

        del rollup.live[activity_id]
        del self.activities[activity_id]
        return activity

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def progress(
        self,
        activity_id: int,
        done: int = 0,
        expected: int = 0,
        running: int = 0,
        failed: int = 0,
    ) -> None:
        activity = self.get(activity_id)
        activity.done = done
        activity.expected = expected
        activity.running = running
        activity.failed = failed

    def set_expected(
        self, activity_id: int, activity_type: ActivityType, expected: int
    ) -> None:
        """Replace this activity's expected contribution to a type's rollup."""
        activity = self.get(activity_id)
        rollup = self.rollup(activity_type)
        rollup.carried_expected -= activity.expected_by_type.get(activity_type, 0)
        activity.expected_by_type[activity_type] = expected
        rollup.carried_expected += expected

    def set_log_line(self, activity_id: int, line: str) -> bool:
        """Record the latest log line of an activity and bring it to the front.

        Blank lines are ignored and leave the state untouched. Returns True
        if the state changed.
        """
        text = line.strip(" \t\n\r")
        if not text:
            return False
        activity = self.get(activity_id)
        activity.secondary_label = text
        self.activities.move_to_end(activity_id)
        return True

    def apply_result(
        self, activity_id: int, result_type: ResultType | int, fields: Sequence[Field]
    ) -> bool:
        """Apply a result event. Returns True if the state changed.

        Unknown result kinds and ``SET_PHASE`` are ignored.
        """
        if result_type == ResultType.FILE_LINKED:
            self.bytes_linked += get_int(fields, 0)
            self.files_linked += 1
            return True

        if result_type == ResultType.BUILD_LOG_LINE:
            return self.set_log_line(activity_id, get_string(fields, 0))

        if result_type == ResultType.UNTRUSTED_PATH:
            self.untrusted_paths += 1
            return True

        if result_type == ResultType.CORRUPTED_PATH:
            self.corrupted_paths += 1
            return True

        if result_type == ResultType.PROGRESS:
            counters = [get_int(fields, n) for n in range(min(len(fields), 4))]
            self.progress(activity_id, *counters)
            return True

        if result_type == ResultType.SET_EXPECTED:
            activity_type = ActivityType.from_code(get_int(fields, 0))
            self.set_expected(activity_id, activity_type, get_int(fields, 1))
            return True

        return False
