"""
Exception types and error handling helpers.

This module holds every exception the pipeline raises or catches, together
with the `handle_error` family that gives caught errors consistent,
severity-mapped logging across the application.
"""

import logging
import sys
from enum import Enum
from typing import Any, Optional, Union

_module_logger = logging.getLogger(__name__)


class ErrorSeverity(Enum):
    """Severity levels for error handling."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


_LOG_LEVELS = {
    ErrorSeverity.DEBUG: logging.DEBUG,
    ErrorSeverity.INFO: logging.INFO,
    ErrorSeverity.WARNING: logging.WARNING,
    ErrorSeverity.ERROR: logging.ERROR,
    ErrorSeverity.CRITICAL: logging.CRITICAL,
}


class ValidationError(Exception):
    """
    Exception raised when configuration validation fails.

    Malformed configuration is fatal at startup, so this is raised before
    any sampling loop begins.
    """

    def __init__(self, message: str, field_name: Optional[str] = None,
                 value: Any = None, severity: ErrorSeverity = ErrorSeverity.ERROR):
        super().__init__(message)
        self.field_name = field_name
        self.value = value
        self.severity = severity


class DataUnavailable(Exception):
    """
    The runtime could not supply usable stats for an entity this cycle.

    The orchestrator logs it and skips the entity (or one of its metrics);
    the next cycle retries naturally.
    """

    def __init__(self, message: str, entity_id: Optional[str] = None):
        super().__init__(message)
        self.entity_id = entity_id


class InsufficientData(Exception):
    """An average was requested from a rolling window holding no samples."""


class DeliveryFailure(Exception):
    """A notification channel failed to deliver an alert event."""

    def __init__(self, message: str, channel: Optional[str] = None):
        super().__init__(message)
        self.channel = channel


def handle_error(
    error: Exception,
    context: str,
    severity: Union[ErrorSeverity, str] = ErrorSeverity.ERROR,
    reraise: bool = True,
    include_traceback: bool = False,
    logger: Optional[logging.Logger] = None
) -> None:
    """
    Log `error` as "Error in {context}: ..." at `severity`, then re-raise it
    unless `reraise` is False.

    `severity` may also be given by name ("warning", "critical", ...).
    Records from `logger` (this module's logger if omitted) carry the
    traceback at DEBUG and CRITICAL, or whenever `include_traceback` is set.
    """
    if isinstance(severity, str):
        severity = ErrorSeverity(severity.lower())

    level = _LOG_LEVELS[severity]
    # Debug and critical records always carry the traceback.
    exc_info = include_traceback or severity in (ErrorSeverity.DEBUG, ErrorSeverity.CRITICAL)
    (logger or _module_logger).log(level, f"Error in {context}: {error}", exc_info=exc_info)

    if reraise:
        raise error


def handle_config_error(error: Exception, context: str, **kwargs) -> None:
    """Handle configuration-related errors."""
    handle_error(error, f"config {context}", **kwargs)


def handle_delivery_error(error: Exception, channel: str, **kwargs) -> None:
    """Handle notification delivery errors."""
    handle_error(error, f"delivery channel '{channel}'", **kwargs)


def handle_cli_error(error: Exception, context: str, **kwargs) -> None:
    """Handle CLI-related errors by logging and exiting."""
    exit_code = kwargs.pop('exit_code', 1)
    severity = kwargs.pop('severity', ErrorSeverity.ERROR)

    handle_error(error, f"CLI {context}", severity=severity, reraise=False, **kwargs)

    sys.exit(exit_code)
