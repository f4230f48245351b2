"""Live terminal status line for concurrent build and transfer activity."""

from buildstatus.errors import (
    DuplicateActivity,
    EventDecodeError,
    InvalidResultFields,
    ProgressBarError,
    SettingsError,
    UnknownActivity,
)
from buildstatus.logger import Logger, LoggerSlot, StandardLogger
from buildstatus.models import ActivityType, ResultType, Verbosity
from buildstatus.progress_bar import ProgressBar
from buildstatus.session import progress_bar_session

__version__ = "0.1.0"

__all__ = [
    "ActivityType",
    "DuplicateActivity",
    "EventDecodeError",
    "InvalidResultFields",
    "Logger",
    "LoggerSlot",
    "ProgressBar",
    "ProgressBarError",
    "ResultType",
    "SettingsError",
    "StandardLogger",
    "UnknownActivity",
    "Verbosity",
    "__version__",
    "progress_bar_session",
]
