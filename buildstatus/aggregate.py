"""Per-category summary of live and finished activity.

Reduces the counters of live activities plus the carried rollups into the
bracketed part of the status line, e.g.::

    1/4/10 built, 3 copied (12.5/40.0 MiB), 7.2 MiB DL, 2 untrusted

Categories always appear in the same order; empty ones are omitted.
"""

from __future__ import annotations

from dataclasses import dataclass

from buildstatus.models import BYTE_COUNTED_TYPES, ActivityType
from buildstatus.state import ProgressState
from buildstatus.terminal import ANSI_BLUE, ANSI_GREEN, ANSI_NORMAL, ANSI_RED

MIB = 1024.0 * 1024.0


@dataclass(frozen=True)
class TypeTotals:
    """Aggregated counters for one activity type."""

    done: int = 0
    expected: int = 0
    running: int = 0
    failed: int = 0

    @property
    def is_empty(self) -> bool:
        return not (self.done or self.expected or self.running or self.failed)


def compute_totals(state: ProgressState, activity_type: ActivityType) -> TypeTotals:
    """Carried rollup plus the sum over live activities of one type.

    Finished activities count toward ``expected`` with their done count;
    explicit ``set_expected`` contributions act as a floor.
    """
    rollup = state.by_type.get(activity_type)
    if rollup is None:
        return TypeTotals()
    done = expected = rollup.carried_done
    running = 0
    failed = rollup.carried_failed
    for activity in rollup.live.values():
        done += activity.done
        expected += activity.expected
        running += activity.running
        failed += activity.failed
    return TypeTotals(
        done=done,
        expected=max(expected, rollup.carried_expected),
        running=running,
        failed=failed,
    )


def format_number(value: int, activity_type: ActivityType) -> str:
    """Bytes in MiB with one decimal for byte counted types, else an integer."""
    if activity_type in BYTE_COUNTED_TYPES:
        return f"{value / MIB:.1f}"
    return str(value)


def render_totals(
    totals: TypeTotals, activity_type: ActivityType, item_format: str
) -> str:
    """Format one category fragment, or return "" when everything is zero."""
    if totals.is_empty:
        return ""

    def num(value: int) -> str:
        return format_number(value, activity_type)

    if totals.running:
        counts = (
            f"{ANSI_BLUE}{num(totals.running)}{ANSI_NORMAL}/"
            f"{ANSI_GREEN}{num(totals.done)}{ANSI_NORMAL}/"
            f"{num(totals.expected)}"
        )
    elif totals.expected != totals.done:
        counts = f"{ANSI_GREEN}{num(totals.done)}{ANSI_NORMAL}/{num(totals.expected)}"
    elif totals.done:
        counts = f"{ANSI_GREEN}{num(totals.done)}{ANSI_NORMAL}"
    else:
        counts = num(totals.done)

    fragment = item_format.format(counts)
    if totals.failed:
        fragment += f" ({ANSI_RED}{totals.failed} failed{ANSI_NORMAL})"
    return fragment


def render_activity(
    state: ProgressState, activity_type: ActivityType, item_format: str
) -> str:
    return render_totals(
        compute_totals(state, activity_type), activity_type, item_format
    )


def build_status(state: ProgressState) -> str:
    """The comma-joined summary of every non-empty category."""
    parts: list[str] = []

    def show(fragment: str) -> None:
        if fragment:
            parts.append(fragment)

    show(render_activity(state, ActivityType.BUILDS, "{} built"))

    copied = render_activity(state, ActivityType.COPY_PATHS, "{} copied")
    copied_bytes = render_activity(state, ActivityType.COPY_PATH, "{} MiB")
    if copied or copied_bytes:
        fragment = copied or "0 copied"
        if copied_bytes:
            fragment += f" ({copied_bytes})"
        parts.append(fragment)

    show(render_activity(state, ActivityType.DOWNLOAD, "{} MiB DL"))

    optimised = render_activity(
        state, ActivityType.OPTIMISE_STORE, "{} paths optimised"
    )
    if optimised:
        optimised += (
            f", {state.bytes_linked / MIB:.1f} MiB / "
            f"{state.files_linked} inodes freed"
        )
        parts.append(optimised)

    # TODO: render finished verified paths without the green highlight
    show(render_activity(state, ActivityType.VERIFY_PATHS, "{} paths verified"))

    if state.corrupted_paths:
        parts.append(f"{ANSI_RED}{state.corrupted_paths} corrupted{ANSI_NORMAL}")
    if state.untrusted_paths:
        parts.append(f"{ANSI_RED}{state.untrusted_paths} untrusted{ANSI_NORMAL}")

    return ", ".join(parts)
