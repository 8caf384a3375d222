"""
Value validators for configuration loading.

Each validator returns the normalized value or raises ValidationError
naming the offending field, so the CLI can report e.g.
`monitor.thresholds.cpu_percent must be <= 10000.0, got 20000.0`.
"""

import re
from typing import Any, Callable, List, Optional, Tuple, TypeVar

from .exceptions import ValidationError

N = TypeVar("N", int, float)


def _validate_number(
    value: Any,
    cast: Callable[[Any], N],
    kind: str,
    min_value: Optional[N],
    max_value: Optional[N],
    field_name: str,
) -> N:
    # bool is an int subclass; `verbose = true` must not pass as 1.
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be {kind}, got {value!r}", field_name=field_name, value=value)
    try:
        number = cast(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be {kind}, got {value!r}", field_name=field_name, value=value)

    if min_value is not None and number < min_value:
        raise ValidationError(f"{field_name} must be >= {min_value}, got {number}", field_name=field_name, value=value)
    if max_value is not None and number > max_value:
        raise ValidationError(f"{field_name} must be <= {max_value}, got {number}", field_name=field_name, value=value)
    return number


def validate_positive_integer(
    value: Any,
    min_value: int = 1,
    max_value: Optional[int] = None,
    field_name: str = "value"
) -> int:
    """Validate an integer in [min_value, max_value]."""
    return _validate_number(value, int, "a valid integer", min_value, max_value, field_name)


def validate_positive_float(
    value: Any,
    min_value: float = 0.0,
    max_value: Optional[float] = None,
    field_name: str = "value"
) -> float:
    """
    Validate a number in [min_value, max_value].

    Integers and numeric strings (from environment variables) are accepted
    and returned as float.
    """
    return _validate_number(value, float, "a valid number", min_value, max_value, field_name)


def validate_boolean(value: Any, field_name: str = "value") -> bool:
    if not isinstance(value, bool):
        raise ValidationError(f"{field_name} must be true or false, got {value!r}", field_name=field_name, value=value)
    return value


def validate_regex_pattern(pattern: str, field_name: str = "regex_pattern") -> str:
    """
    Check that `pattern` is a non-empty string that compiles.

    The pattern is returned as given; callers compile it where it is used.
    """
    if not isinstance(pattern, str) or not pattern:
        raise ValidationError(f"{field_name} must be a non-empty string", field_name=field_name, value=pattern)
    try:
        re.compile(pattern)
    except re.error as e:
        raise ValidationError(
            f"{field_name} is not a valid regex pattern: {e}", field_name=field_name, value=pattern
        ) from e
    return pattern


def validate_enum_choice(
    value: Any,
    choices: List[str],
    field_name: str = "value",
    case_sensitive: bool = True
) -> str:
    """
    Validate that `value` is one of `choices`.

    Returns:
        The matching entry from `choices`, so case-insensitive matches come
        back in canonical spelling.
    """
    text = str(value)
    for choice in choices:
        if text == choice or (not case_sensitive and text.lower() == choice.lower()):
            return choice
    raise ValidationError(f"{field_name} must be one of {choices}, got {value!r}", field_name=field_name, value=value)


def validate_string_list(value: Any, field_name: str = "value") -> List[str]:
    """Validate a list of non-empty strings, returning them stripped."""
    if not isinstance(value, list):
        raise ValidationError(f"{field_name} must be a list of strings", field_name=field_name, value=value)
    for i, item in enumerate(value):
        if not isinstance(item, str) or not item.strip():
            raise ValidationError(f"{field_name}[{i}] must be a non-empty string", field_name=field_name, value=value)
    return [item.strip() for item in value]


def validate_url(value: Any, field_name: str = "url", schemes: Tuple[str, ...] = ("http", "https")) -> str:
    """Validate an absolute URL with one of the allowed schemes."""
    if not isinstance(value, str) or "://" not in value:
        raise ValidationError(f"{field_name} must be an absolute URL, got {value!r}", field_name=field_name, value=value)
    scheme, _, rest = value.partition("://")
    if scheme.lower() not in schemes or not rest:
        raise ValidationError(
            f"{field_name} must use one of {list(schemes)}, got {value!r}", field_name=field_name, value=value
        )
    return value
