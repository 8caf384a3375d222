"""
Validation and error handling for the containermon package.

This module provides configuration validation and the exception taxonomy
used by the sampling pipeline, with consistent error reporting across the
application.
"""

from .exceptions import (
    DataUnavailable,
    DeliveryFailure,
    ErrorSeverity,
    InsufficientData,
    ValidationError,
    handle_cli_error,
    handle_config_error,
    handle_delivery_error,
    handle_error,
)
from .validators import (
    validate_boolean,
    validate_enum_choice,
    validate_positive_float,
    validate_positive_integer,
    validate_regex_pattern,
    validate_string_list,
    validate_url,
)

__all__ = [
    # Exceptions
    "DataUnavailable",
    "DeliveryFailure",
    "ErrorSeverity",
    "InsufficientData",
    "ValidationError",
    # Handlers
    "handle_cli_error",
    "handle_config_error",
    "handle_delivery_error",
    "handle_error",
    # Validators
    "validate_boolean",
    "validate_enum_choice",
    "validate_positive_float",
    "validate_positive_integer",
    "validate_regex_pattern",
    "validate_string_list",
    "validate_url",
]
