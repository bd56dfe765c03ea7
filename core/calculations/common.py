"""
Shared Numeric Helpers

Guarded division and rounding used by the metrics, projection and consistency
calculations. Dashboard numbers must never contain NaN or Infinity.
"""

import math
from typing import Union

Number = Union[int, float]

# Working hours covered by hourly records (9:00 through 17:00 inclusive)
FIRST_HOUR = 9
LAST_HOUR = 17
SHIFT_HOURS = tuple(range(FIRST_HOUR, LAST_HOUR + 1))

# Hourly target = daily target / HOURS_PER_TARGET
HOURS_PER_TARGET = 8


def safe_divide(numerator: Number, denominator: Number, default: float = 0.0) -> float:
    """
    Divide, returning `default` when the denominator is zero or the result is not finite.

    Example:
        >>> safe_divide(10, 0)
        0.0
    """
    if not denominator:
        return default
    result = numerator / denominator
    if math.isnan(result) or math.isinf(result):
        return default
    return result


def round_half_up(value: Number) -> int:
    """
    Round to the nearest integer with halves rounded up (12.5 -> 13).

    Python's round() uses banker's rounding, which would turn a 100-line daily
    target into a 12-line hourly target instead of 13.
    """
    return int(math.floor(value + 0.5))


def finite_or_zero(value) -> float:
    """Return value as float, or 0.0 when it is missing, NaN or infinite."""
    try:
        value = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(value) or math.isinf(value):
        return 0.0
    return value


def clamp(value: Number, lower: Number, upper: Number) -> Number:
    """Clamp value to the closed range [lower, upper]."""
    return max(lower, min(upper, value))


def hourly_target_for(daily_target: Number) -> int:
    """Hourly target derived from a daily target (daily / 8, rounded half up)."""
    if not daily_target or daily_target <= 0:
        return 0
    return round_half_up(daily_target / HOURS_PER_TARGET)
