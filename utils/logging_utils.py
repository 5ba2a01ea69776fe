# -*- coding: utf-8 -*-
import logging
import os
import sys
from datetime import datetime
from typing import Optional

import pytz

# Constants for logging
DEFAULT_LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DEBUG_LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s [%(filename)s:%(lineno)d]'
DEFAULT_TIMEZONE = 'UTC'

# Cached debug status (None = not loaded yet)
_debug_mode_enabled = None


def is_debug_mode_enabled() -> bool:
    """
    Checks if debug mode is enabled.
    Read from the SFE_DEBUG environment variable and cached until refresh_debug_status().

    Returns:
        bool: True if debug mode is enabled, otherwise False
    """
    global _debug_mode_enabled
    if _debug_mode_enabled is None:
        _debug_mode_enabled = os.environ.get('SFE_DEBUG', '').strip().lower() in ('1', 'true', 'yes', 'on')
    return _debug_mode_enabled


def refresh_debug_status() -> bool:
    """
    Refreshes the cached debug status.
    Should be called when the environment changes.
    """
    global _debug_mode_enabled
    _debug_mode_enabled = None
    debug_enabled = is_debug_mode_enabled()

    logger = logging.getLogger('sfe.config')
    if debug_enabled:
        logger.info("Debug mode has been ENABLED - DEBUG messages will be displayed")
    else:
        logger.info("Debug mode has been DISABLED - DEBUG messages will be suppressed")
    return debug_enabled


# A filter that only allows DEBUG logs when debug mode is enabled
class DebugModeFilter(logging.Filter):
    """
    Filter that only allows DEBUG messages when debug mode is enabled.
    INFO and higher levels are always allowed.
    """
    def filter(self, record):
        if record.levelno < logging.INFO:
            return is_debug_mode_enabled()
        return True


# A custom formatter class that uses the configured timezone
class TimezoneFormatter(logging.Formatter):
    """
    A custom formatter that uses the configured timezone for timestamps in logs.
    The timezone comes from the ``tz`` argument or the SFE_TIMEZONE environment variable.
    """
    def __init__(self, fmt=None, datefmt=None, tz=None):
        super().__init__(fmt, datefmt)
        self.tz = tz

    def _resolve_timezone(self):
        if self.tz is not None:
            return self.tz
        timezone_str = os.environ.get('SFE_TIMEZONE', DEFAULT_TIMEZONE)
        try:
            return pytz.timezone(timezone_str)
        except pytz.UnknownTimeZoneError:
            return pytz.utc

    def formatTime(self, record, datefmt=None):
        """
        Overrides the formatTime method to use the configured timezone.
        """
        if datefmt is None:
            datefmt = self.datefmt or '%Y-%m-%d %H:%M:%S'

        dt = datetime.fromtimestamp(record.created, self._resolve_timezone())
        return dt.strftime(datefmt) + f" {dt.tzname()}"


def setup_logger(name: str, level=logging.INFO, log_to_console=True, log_to_file=False, custom_formatter=None) -> logging.Logger:
    """
    Creates a logger with the specified name and logging level.

    Args:
        name: Logger name
        level: Logging level (default: INFO)
        log_to_console: Whether to output logs to console
        log_to_file: Whether to output logs to a file
        custom_formatter: Optional custom formatter for the logs

    Returns:
        Configured logger
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Avoid duplicate handlers in case of re-initialization
    if logger.handlers:
        return logger

    if custom_formatter is None:
        if level <= logging.DEBUG:
            formatter = TimezoneFormatter(DEBUG_LOG_FORMAT)
        else:
            formatter = TimezoneFormatter(DEFAULT_LOG_FORMAT)
    else:
        formatter = custom_formatter

    if log_to_console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        console_handler.addFilter(DebugModeFilter())
        logger.addHandler(console_handler)

    if log_to_file:
        try:
            logs_dir = os.environ.get('SFE_LOG_DIR') or os.path.join(
                os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "logs"
            )
            os.makedirs(logs_dir, exist_ok=True)
            log_file_path = os.path.join(logs_dir, f"{name.replace('.', '_')}.log")

            file_handler = logging.FileHandler(log_file_path, encoding='utf-8')
            file_handler.setLevel(level)
            file_handler.setFormatter(formatter)
            file_handler.addFilter(DebugModeFilter())
            logger.addHandler(file_handler)
        except OSError as e:
            logger.warning(f"Failed to set up file logging for {name}: {e}")

    return logger


def get_logger(name: str, level: Optional[int] = None) -> logging.Logger:
    """
    Central logger factory with consistent configuration.

    Loggers below the ``sfe`` root only get handlers when they are configured
    explicitly; otherwise records propagate to ``sfe``.

    Args:
        name: Logger name (e.g. 'sfe.module_name')
        level: Optional log level override

    Returns:
        Logger
    """
    logger = logging.getLogger(name)
    if level is not None:
        logger.setLevel(level)
    elif is_debug_mode_enabled():
        logger.setLevel(logging.DEBUG)
    return logger


def get_module_logger(module_name: str) -> logging.Logger:
    """Logger for modules with the sfe. prefix."""
    return get_logger(f'sfe.{module_name}')
