"""
Shift Clock

Derives shift progress, remaining time and break status from a timestamp and a
ShiftSchedule. Every function takes the current time as an argument; only
`current_time()` reads the real clock, and only the dashboard calls it.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

import pytz

from core.calculations.common import clamp, round_half_up, safe_divide
from .models import DEFAULT_SCHEDULE, ShiftSchedule

logger = logging.getLogger(__name__)


@dataclass
class NextBreak:
    """Upcoming break and minutes until it starts"""
    type: str
    starts_in: int

    def to_dict(self) -> Dict[str, Any]:
        return {'type': self.type, 'startsIn': int(self.starts_in)}


@dataclass
class ShiftProgress:
    """
    Snapshot of where the shift stands.

    `next_break` is None once no break remains; `to_dict()` then leaves the key
    out instead of writing a null.
    """
    percentage_complete: float
    remaining_time: int  # minutes
    is_break_time: bool
    next_break: Optional[NextBreak] = None

    def to_dict(self) -> Dict[str, Any]:
        result = {
            'percentageComplete': float(self.percentage_complete),
            'remainingTime': int(self.remaining_time),
            'isBreakTime': bool(self.is_break_time)
        }
        if self.next_break is not None:
            result['nextBreak'] = self.next_break.to_dict()
        return result


def current_time(timezone: Optional[str] = None) -> datetime:
    """
    Read the wall clock in the configured timezone.

    Args:
        timezone: pytz timezone name; defaults to Config.TIMEZONE

    Returns:
        Timezone-aware datetime
    """
    if timezone is None:
        from config import Config
        timezone = Config.TIMEZONE
    return datetime.now(pytz.timezone(timezone))


def _minute_of_day(moment: datetime) -> int:
    return moment.hour * 60 + moment.minute


def shift_progress(now: datetime, schedule: ShiftSchedule = DEFAULT_SCHEDULE) -> ShiftProgress:
    """
    Calculate shift progress at `now`.

    - percentage_complete: elapsed share of the shift, clamped to 0-100
    - remaining_time: whole minutes until shift end, never negative
    - is_break_time: True only inside the lunch window
    - next_break: lunch before lunch start, short break before the short break
      start, otherwise None

    Args:
        now: Current time (naive local or timezone-aware)
        schedule: Shift schedule

    Returns:
        ShiftProgress

    Example:
        >>> shift_progress(datetime(2025, 3, 3, 11, 30)).next_break
        NextBreak(type='lunch', starts_in=30)
    """
    shift_start = schedule.start_on(now)
    shift_end = schedule.end_on(now)

    total_seconds = (shift_end - shift_start).total_seconds()
    elapsed_seconds = (now - shift_start).total_seconds()
    percentage = clamp(safe_divide(elapsed_seconds, total_seconds) * 100, 0.0, 100.0)

    remaining_minutes = max(0.0, (shift_end - now).total_seconds() / 60.0)

    minute_now = _minute_of_day(now)
    is_break_time = (
        schedule.lunch_start_minute_of_day <= minute_now < schedule.lunch_end_minute_of_day
    )

    next_break = None
    if minute_now < schedule.lunch_start_minute_of_day:
        next_break = NextBreak('lunch', schedule.lunch_start_minute_of_day - minute_now)
    elif minute_now < schedule.short_break_minute_of_day:
        next_break = NextBreak('short', schedule.short_break_minute_of_day - minute_now)

    progress = ShiftProgress(
        percentage_complete=percentage,
        remaining_time=round_half_up(remaining_minutes),
        is_break_time=is_break_time,
        next_break=next_break
    )
    logger.debug(f"Shift progress at {now:%H:%M}: {progress}")
    return progress


def elapsed_hours(now: datetime, schedule: ShiftSchedule = DEFAULT_SCHEDULE) -> float:
    """Hours elapsed since shift start at `now`, floored at 0.1."""
    return schedule.elapsed_hours(now)


def remaining_hours(now: datetime, schedule: ShiftSchedule = DEFAULT_SCHEDULE) -> int:
    return schedule.remaining_hours(now)
