"""
Input validation and numeric guards shared by all calculators.

Every calculator funnels its boundary checks through this module so that
invalid input fails fast with a descriptive message and every ratio has an
explicit fallback instead of producing NaN or infinity.
"""

from enum import Enum
from typing import Any, Type, TypeVar
import math


E = TypeVar('E', bound=Enum)


class ValidationError(ValueError):
    """Raised when a calculator receives input it cannot interpret."""


def require_positive(name: str, value: Any) -> float:
    """
    Ensure a numeric input is strictly positive.

    Args:
        name: Field name used in the error message
        value: Value to check

    Returns:
        The value as float
    """
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{name} must be a number, got {value!r}")

    if math.isnan(number) or number <= 0:
        raise ValidationError(f"{name} must be positive, got {value!r}")
    return number


def require_non_negative(name: str, value: Any) -> float:
    """Ensure a numeric input is zero or greater."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{name} must be a number, got {value!r}")

    if math.isnan(number) or number < 0:
        raise ValidationError(f"{name} must not be negative, got {value!r}")
    return number


def coerce_enum(enum_cls: Type[E], value: Any, field_name: str) -> E:
    """
    Convert a raw value to a member of ``enum_cls``.

    Accepts an existing member, a member value ('very-active') or a member
    name ('VERY_ACTIVE'). Underscores and dashes are interchangeable.

    Raises:
        ValidationError: If the value matches no member
    """
    if isinstance(value, enum_cls):
        return value

    if isinstance(value, str):
        key = value.strip()
        for member in enum_cls:
            if key == member.value or key.upper() == member.name:
                return member
        normalized = key.lower().replace('_', '-')
        for member in enum_cls:
            if str(member.value).lower().replace('_', '-') == normalized:
                return member

    allowed = ', '.join(str(m.value) for m in enum_cls)
    raise ValidationError(
        f"{field_name} must be one of [{allowed}], got {value!r}"
    )


def safe_ratio(numerator: float, denominator: float, default: float = 0.0) -> float:
    """
    Divide, returning ``default`` when the denominator is zero.

    Args:
        numerator: Dividend
        denominator: Divisor
        default: Value returned for a zero divisor

    Returns:
        numerator / denominator, or default
    """
    if denominator == 0:
        return default
    return numerator / denominator


def round_half_up(value: float, digits: int = 0) -> float:
    """
    Round to ``digits`` places with halves going up (2.5 -> 3, -2.5 -> -2).

    Python's built-in round() uses banker's rounding (round(2.5) == 2),
    which disagrees with the figures users see elsewhere in the app.
    """
    if math.isinf(value) or math.isnan(value):
        return value
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def round_int(value: float) -> int:
    """Round half up to an integer."""
    return int(round_half_up(value))
