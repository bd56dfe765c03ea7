"""
Shift Schedule Models

Describes the fixed daily shift used by the dashboard:
- Shift boundaries (09:00 - 17:00 by default)
- Lunch window (12:00 - 13:00) and the afternoon short break (15:00)

Times are "HH:MM" strings in local time. A schedule is applied to the date of
whatever timestamp is passed in, so the same schedule serves every day.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Tuple

from utils.formatting import parse_hhmm

# Fractional-hour floor for elapsed time
MIN_ELAPSED_HOURS = 0.1


def _minute_of_day(hhmm: Tuple[int, int]) -> int:
    return hhmm[0] * 60 + hhmm[1]


@dataclass(frozen=True)
class ShiftSchedule:
    """
    Daily shift configuration.

    Example:
        >>> schedule = ShiftSchedule()
        >>> schedule.total_hours
        8.0
    """
    start: str = "09:00"
    end: str = "17:00"
    lunch_start: str = "12:00"
    lunch_end: str = "13:00"
    short_break_start: str = "15:00"

    def __post_init__(self):
        """Validate ordering of shift boundaries and breaks"""
        start = _minute_of_day(parse_hhmm(self.start))
        end = _minute_of_day(parse_hhmm(self.end))
        lunch_start = _minute_of_day(parse_hhmm(self.lunch_start))
        lunch_end = _minute_of_day(parse_hhmm(self.lunch_end))
        short_break = _minute_of_day(parse_hhmm(self.short_break_start))

        if end <= start:
            raise ValueError(
                f"Shift end ({self.end}) must be after shift start ({self.start})"
            )
        if lunch_end <= lunch_start:
            raise ValueError(
                f"Lunch end ({self.lunch_end}) must be after lunch start ({self.lunch_start})"
            )
        if not start <= lunch_start < end:
            raise ValueError(f"Lunch start ({self.lunch_start}) must fall within the shift")
        if not start <= short_break < end:
            raise ValueError(f"Short break ({self.short_break_start}) must fall within the shift")

    @property
    def start_hour(self) -> int:
        return parse_hhmm(self.start)[0]

    @property
    def end_hour(self) -> int:
        return parse_hhmm(self.end)[0]

    @property
    def start_minute_of_day(self) -> int:
        return _minute_of_day(parse_hhmm(self.start))

    @property
    def end_minute_of_day(self) -> int:
        return _minute_of_day(parse_hhmm(self.end))

    @property
    def lunch_start_minute_of_day(self) -> int:
        return _minute_of_day(parse_hhmm(self.lunch_start))

    @property
    def lunch_end_minute_of_day(self) -> int:
        return _minute_of_day(parse_hhmm(self.lunch_end))

    @property
    def short_break_minute_of_day(self) -> int:
        return _minute_of_day(parse_hhmm(self.short_break_start))

    @property
    def total_minutes(self) -> int:
        """Shift length in minutes"""
        return self.end_minute_of_day - self.start_minute_of_day

    @property
    def total_hours(self) -> float:
        """Shift length in hours"""
        return self.total_minutes / 60.0

    def start_on(self, moment: datetime) -> datetime:
        """Shift start on the same date (and timezone) as `moment`."""
        hour, minute = parse_hhmm(self.start)
        return moment.replace(hour=hour, minute=minute, second=0, microsecond=0)

    def end_on(self, moment: datetime) -> datetime:
        """Shift end on the same date (and timezone) as `moment`."""
        hour, minute = parse_hhmm(self.end)
        return moment.replace(hour=hour, minute=minute, second=0, microsecond=0)

    def contains(self, moment: datetime) -> bool:
        """Check if `moment` falls within the shift"""
        return self.start_on(moment) <= moment <= self.end_on(moment)

    def elapsed_hours(self, moment: datetime) -> float:
        """
        Whole hours elapsed since shift start, clamped to [0.1, shift length].

        Uses the hour of `moment` only, matching the hourly granularity of the
        records. The floor keeps rates finite at shift start.
        """
        elapsed = moment.hour - self.start_hour
        return max(MIN_ELAPSED_HOURS, min(self.total_hours, elapsed))

    def remaining_hours(self, moment: datetime) -> int:
        """Whole hours left until shift end (0 once the end hour is reached)."""
        return max(0, self.end_hour - moment.hour)

    def __repr__(self) -> str:
        return (
            f"ShiftSchedule({self.start} → {self.end}, "
            f"lunch {self.lunch_start}-{self.lunch_end}, short break {self.short_break_start})"
        )

    @staticmethod
    def from_config() -> 'ShiftSchedule':
        """
        Build the schedule from application configuration.

        Returns:
            ShiftSchedule using SHIFT_START/SHIFT_END/LUNCH_*/SHORT_BREAK_START settings
        """
        from utils.config import get_app_config

        settings = get_app_config()
        return ShiftSchedule(
            start=settings["shift_start"],
            end=settings["shift_end"],
            lunch_start=settings["lunch_start"],
            lunch_end=settings["lunch_end"],
            short_break_start=settings["short_break_start"]
        )


DEFAULT_SCHEDULE = ShiftSchedule()


def shift_schedule_from_config() -> ShiftSchedule:
    """Shift schedule for the running application (environment overrides defaults)."""
    return ShiftSchedule.from_config()
