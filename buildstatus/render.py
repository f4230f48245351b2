"""Status line composition.

Turns the aggregated summary and the current activity into the exact
byte sequence written to the terminal on each redraw.
"""

from __future__ import annotations

from buildstatus.aggregate import build_status
from buildstatus.state import ProgressState
from buildstatus.terminal import CLEAR_LINE, truncate_ansi


def compose_line(state: ProgressState, status: str | None = None) -> str:
    """``[summary] label: detail`` without control sequences or truncation."""
    if status is None:
        status = build_status(state)

    line = f"[{status}]" if status else ""

    if state.activities:
        if status:
            line += " "
        current = state.current_activity()
        if current is not None:
            line += current.display_text

    return line


def fit_to_width(line: str, width: int) -> str:
    """Clip to ``width - 1`` cells; a width of 0 or less means unknown."""
    if width <= 0:
        return line
    return truncate_ansi(line, width - 1)


def render_status_line(state: ProgressState, width: int) -> str:
    """The full redraw: return to column 0, write, clear the rest."""
    return "\r" + fit_to_width(compose_line(state), width) + CLEAR_LINE


def render_log_line(state: ProgressState, text: str, width: int) -> str:
    """Clear the status line, print ``text`` above it, then redraw."""
    return "\r" + CLEAR_LINE + text + "\n" + render_status_line(state, width)


def render_final(state: ProgressState) -> str:
    """Teardown output: clear the line and leave the last summary behind."""
    status = build_status(state)
    output = "\r" + CLEAR_LINE
    if status:
        output += f"[{status}]\n"
    return output
