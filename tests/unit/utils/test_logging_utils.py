# -*- coding: utf-8 -*-
"""
Unit tests for logging setup helpers.
"""

import logging

import pytest
import pytz

from utils.logging_utils import (
    DebugModeFilter,
    TimezoneFormatter,
    get_logger,
    get_module_logger,
    is_debug_mode_enabled,
    refresh_debug_status,
    setup_logger,
)

RECORD_TIME = 1_700_000_000  # 2023-11-14, outside daylight saving time


@pytest.fixture
def debug_env(monkeypatch):
    """Restore the cached debug flag after each test."""
    yield monkeypatch
    monkeypatch.delenv("SFE_DEBUG", raising=False)
    refresh_debug_status()


def _record(level=logging.INFO):
    record = logging.LogRecord("sfe.test", level, __file__, 1, "message", None, None)
    record.created = RECORD_TIME
    return record


class TestDebugMode:
    """Tests for the SFE_DEBUG switch."""

    def test_enabled_from_environment(self, debug_env):
        debug_env.setenv("SFE_DEBUG", "true")
        assert refresh_debug_status() is True
        assert is_debug_mode_enabled() is True

    def test_disabled_by_default(self, debug_env):
        debug_env.delenv("SFE_DEBUG", raising=False)
        assert refresh_debug_status() is False

    def test_filter_drops_debug_records_when_disabled(self, debug_env):
        debug_env.delenv("SFE_DEBUG", raising=False)
        refresh_debug_status()
        log_filter = DebugModeFilter()

        assert log_filter.filter(_record(logging.DEBUG)) is False
        assert log_filter.filter(_record(logging.INFO)) is True


class TestTimezoneFormatter:
    """Tests for timezone-aware timestamps."""

    def test_explicit_timezone(self):
        formatter = TimezoneFormatter(tz=pytz.timezone("Europe/Berlin"))
        assert formatter.formatTime(_record()) == "2023-11-14 23:13:20 CET"

    def test_environment_timezone(self, monkeypatch):
        monkeypatch.setenv("SFE_TIMEZONE", "UTC")
        assert TimezoneFormatter().formatTime(_record()) == "2023-11-14 22:13:20 UTC"

    def test_unknown_timezone_falls_back_to_utc(self, monkeypatch):
        monkeypatch.setenv("SFE_TIMEZONE", "Mars/Olympus")
        assert TimezoneFormatter().formatTime(_record(), "%H:%M").endswith("UTC")


class TestLoggerSetup:
    """Tests for logger factories."""

    def test_setup_logger_is_idempotent(self):
        logger = setup_logger("sfe.test.setup")
        setup_logger("sfe.test.setup")

        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0].filters[0], DebugModeFilter)
        assert isinstance(logger.handlers[0].formatter, TimezoneFormatter)

    def test_setup_logger_file_output(self, tmp_path, monkeypatch):
        monkeypatch.setenv("SFE_LOG_DIR", str(tmp_path))
        logger = setup_logger("sfe.test.file", log_to_console=False, log_to_file=True)
        logger.info("written")
        for handler in logger.handlers:
            handler.flush()

        assert "written" in (tmp_path / "sfe_test_file.log").read_text()
        for handler in list(logger.handlers):
            handler.close()
            logger.removeHandler(handler)

    def test_module_logger_prefix(self):
        assert get_module_logger("economy_service").name == "sfe.economy_service"

    def test_get_logger_level_override(self):
        assert get_logger("sfe.test.level", logging.ERROR).level == logging.ERROR
