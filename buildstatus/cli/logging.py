"""CLI logging configuration with file output.

Provides a shared ``configure_cli_logging`` function that sets up file
logging for CLI commands. Log files are split by command under
``~/.local/share/build-status/logs/`` (see ``settings.get_log_dir``).

The console is left alone: while the status line is active, anything
written straight to the terminal would tear it. Producers report through
the ``Logger`` they were handed instead.

Usage from any CLI command::

    from buildstatus.cli.logging import configure_cli_logging

    configure_cli_logging("replay")
"""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from buildstatus.settings import get_log_dir


def get_log_file(command: str) -> Path:
    """Return the log file path for a CLI command, creating its directory."""
    log_dir = get_log_dir()
    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir / f"{command}.log"


def configure_cli_logging(
    command: str,
    *,
    file_level: int = logging.DEBUG,
    max_bytes: int = 10 * 1024 * 1024,  # 10 MB
    backup_count: int = 3,
) -> Path:
    """Configure logging for a CLI command with file output.

    Args:
        command: CLI command name (e.g., "demo", "replay")
        file_level: File log level (default: DEBUG)
        max_bytes: Max size per log file before rotation
        backup_count: Number of rotated backups to keep

    Returns:
        Path to the log file
    """
    log_file = get_log_file(command)

    root_logger = logging.getLogger("buildstatus")

    # Remove existing file handlers to avoid duplicates on repeated calls
    for handler in root_logger.handlers[:]:
        if isinstance(handler, (RotatingFileHandler, logging.FileHandler)):
            root_logger.removeHandler(handler)
            handler.close()

    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
    )
    file_handler.setLevel(file_level)
    file_handler.setFormatter(
        logging.Formatter(
            "%(asctime)s %(levelname)-8s %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    root_logger.addHandler(file_handler)

    # NOTSET (0) means "inherit from parent" which defaults to WARNING,
    # so we must explicitly set the level when it's NOTSET or too high.
    if root_logger.level == logging.NOTSET or root_logger.level > file_level:
        root_logger.setLevel(file_level)

    return log_file
