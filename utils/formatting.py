"""
Formatting Utilities

Functions for formatting durations, hours and ratios for display, and for parsing
"HH:MM" shift boundary strings.
"""

import logging
import re
from typing import Tuple

logger = logging.getLogger(__name__)

_HHMM_PATTERN = re.compile(r'^(\d{1,2}):(\d{2})$')


def parse_hhmm(value: str) -> Tuple[int, int]:
    """
    Parse an "HH:MM" string into an (hour, minute) tuple.

    Args:
        value: Time string such as "09:00" or "17:30"

    Returns:
        Tuple of (hour, minute)

    Raises:
        ValueError: If the string is not a valid 24-hour "HH:MM" time
    """
    if not isinstance(value, str):
        raise ValueError(f"Expected 'HH:MM' string, got {type(value).__name__}")

    match = _HHMM_PATTERN.match(value.strip())
    if not match:
        raise ValueError(f"Invalid time '{value}'. Expected 'HH:MM'")

    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        raise ValueError(f"Time out of range: '{value}'")

    return hour, minute


def format_minutes(minutes) -> str:
    """
    Format a number of minutes as "Xh Ym".

    Args:
        minutes: Minutes (int or float). Negative values are shown as "0h 0m".

    Returns:
        Formatted duration string
    """
    try:
        total = max(0, int(minutes))
    except (ValueError, TypeError):
        logger.warning(f"Cannot format minutes value: {minutes}")
        return ""
    return f"{total // 60}h {total % 60}m"


def format_hour_label(hour: int) -> str:
    """Hour of day as a chart label, e.g. 9 -> "9:00"."""
    return f"{hour}:00"


def format_percent(value, decimals: int = 1) -> str:
    """Format a value that is already a percentage (0-100)."""
    try:
        return f"{float(value):.{decimals}f}%"
    except (ValueError, TypeError):
        return ""


def format_ratio_as_percent(ratio, decimals: int = 1) -> str:
    """
    Format a raw ratio (0-1) as a percentage string.

    Engine outputs keep efficiency as a ratio; multiplication by 100 happens
    here and nowhere else.
    """
    try:
        return format_percent(float(ratio) * 100, decimals)
    except (ValueError, TypeError):
        return ""
