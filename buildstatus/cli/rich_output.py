"""Automatic status line detection.

Centralizes the decision of whether to draw the interactive status line
or fall back to plain logging. Callers use ``should_use_progress_bar()``
instead of accepting a ``--no-progress`` flag.

Detection priority:
1. ``BUILD_STATUS_PROGRESS`` env var / ``[tool.build-status].progress``:
   explicit override
2. ``NO_COLOR`` env var: standard convention, disables the status line
3. ``CI`` env var: GitHub Actions / CI, disables the status line
4. Terminal check on the error stream: false in pipes, redirects, cron
"""

from __future__ import annotations

import os
import sys
from typing import TextIO

from rich.console import Console

from buildstatus.settings import get_progress_override


def should_use_progress_bar(stream: TextIO | None = None) -> bool:
    """Determine whether to draw the interactive status line on ``stream``."""
    # 1. Explicit override via env var or pyproject
    override = get_progress_override()
    if override is not None:
        return override

    # 2. NO_COLOR convention (https://no-color.org/)
    if os.environ.get("NO_COLOR") is not None:
        return False

    # 3. CI environment
    if os.environ.get("CI"):
        return False

    # 4. TTY check: fails in pipes and redirects
    try:
        console = Console(file=stream or sys.stderr)
        return console.is_terminal
    except Exception:
        return False
