"""Tests for logger.py - the fallback logger and the logger slot."""

import logging

from buildstatus.logger import LoggerSlot, StandardLogger, to_logging_level
from buildstatus.models import ActivityType, ResultType, Verbosity


class TestToLoggingLevel:
    """Tests for verbosity to logging level mapping."""

    def test_mapping(self):
        assert to_logging_level(Verbosity.ERROR) == logging.ERROR
        assert to_logging_level(Verbosity.WARN) == logging.WARNING
        assert to_logging_level(Verbosity.INFO) == logging.INFO
        assert to_logging_level(Verbosity.VOMIT) == logging.DEBUG

    def test_out_of_range_clamped(self):
        assert to_logging_level(42) == logging.DEBUG
        assert to_logging_level(-1) == logging.ERROR


class TestStandardLogger:
    """StandardLogger forwards to Python logging."""

    def test_log_levels(self, caplog):
        std = StandardLogger(logging.getLogger("test_std"))
        with caplog.at_level(logging.DEBUG, logger="test_std"):
            std.log(Verbosity.ERROR, "broken")
            std.log(Verbosity.INFO, "hello")
        assert [(r.levelno, r.message) for r in caplog.records] == [
            (logging.ERROR, "broken"),
            (logging.INFO, "hello"),
        ]

    def test_activity_events_at_debug(self, caplog):
        std = StandardLogger(logging.getLogger("test_std"))
        with caplog.at_level(logging.DEBUG, logger="test_std"):
            std.start_activity(1, ActivityType.BUILD, "pkgA")
            std.progress(1, done=1, expected=2)
            std.set_expected(1, ActivityType.DOWNLOAD, 10)
            std.result(1, ResultType.FILE_LINKED, [4096])
            std.stop_activity(1)
        assert all(r.levelno == logging.DEBUG for r in caplog.records)
        assert "start 1 (BUILD): pkgA" in caplog.text
        assert "DOWNLOAD=10" in caplog.text

    def test_build_log_line_at_info(self, caplog):
        std = StandardLogger(logging.getLogger("test_std"))
        with caplog.at_level(logging.INFO, logger="test_std"):
            std.result(1, ResultType.BUILD_LOG_LINE, ["compiling"])
        assert caplog.records[0].message == "compiling"

    def test_tolerates_unknown_activities(self):
        std = StandardLogger()
        std.progress(99, done=1)
        std.stop_activity(99)
        std.close()


class TestLoggerSlot:
    """Tests for the explicit active-logger holder."""

    def test_default_is_standard_logger(self):
        assert isinstance(LoggerSlot().current, StandardLogger)

    def test_swap_returns_previous(self):
        first = StandardLogger()
        second = StandardLogger()
        slot = LoggerSlot(first)
        assert slot.swap(second) is first
        assert slot.current is second
