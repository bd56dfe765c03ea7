"""
End-of-Shift Projection Functions

Extrapolates each picker's current rate to the end of the shift:
- Per-picker projected total, shortfall and achievement
- Team projection and on-track flag
- Gap analysis (worst projected achievement first)
- Required hourly rate to still reach target

Once the shift's end hour is reached the actual totals are reported as final.
"""

import logging
import math
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Union

from core.pickers.models import Picker, ensure_pickers
from core.time_windows.models import DEFAULT_SCHEDULE, ShiftSchedule
from .common import round_half_up, safe_divide

logger = logging.getLogger(__name__)


@dataclass
class PickerProjection:
    """Projected end-of-shift result for one picker"""
    picker_id: str
    name: str
    projected_total: int
    target: int
    shortfall: int
    projected_achievement: int  # min(projected, target), for stacked charts
    achievement_percent: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            'pickerId': self.picker_id,
            'name': self.name,
            'projectedTotal': int(self.projected_total),
            'target': int(self.target),
            'shortfall': int(self.shortfall),
            'projectedAchievement': int(self.projected_achievement),
            'achievementPercent': int(self.achievement_percent)
        }


@dataclass
class TeamProjection:
    """Projected end-of-shift result for the whole team"""
    projected_total: int
    total_target: int
    completion_percentage: float
    on_track: bool
    remaining_hours: int
    is_final: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            'projectedTotal': int(self.projected_total),
            'totalTarget': int(self.total_target),
            'completionPercentage': float(self.completion_percentage),
            'onTrack': bool(self.on_track),
            'remainingHours': int(self.remaining_hours),
            'isFinal': bool(self.is_final)
        }


def _project_picker(picker: Picker, elapsed: float, total_hours: float, is_final: bool) -> PickerProjection:
    if is_final:
        projected = picker.performance
    else:
        rate = safe_divide(picker.performance, elapsed)
        projected = int(math.floor(rate * total_hours))

    if picker.target > 0:
        achievement_percent = round_half_up(projected / picker.target * 100)
    else:
        achievement_percent = 0

    return PickerProjection(
        picker_id=picker.id,
        name=picker.name,
        projected_total=projected,
        target=picker.target,
        shortfall=int(math.floor(max(0, picker.target - projected))),
        projected_achievement=min(projected, picker.target),
        achievement_percent=achievement_percent
    )


def project_end_of_shift(
    pickers: List[Picker],
    now: datetime,
    schedule: ShiftSchedule = DEFAULT_SCHEDULE
) -> List[PickerProjection]:
    """
    Project each picker's end-of-shift total from the current rate.

    rate = performance / elapsed hours (whole hours since shift start, floored
    at 0.1); projected = floor(rate * shift hours). When no hours remain the
    actual performance is the final total.

    Args:
        pickers: List of Picker
        now: Current time
        schedule: Shift schedule

    Returns:
        PickerProjection per picker, in input order

    Example:
        >>> picker = create_picker('Ann', 100)
        >>> picker = record_hourly_lines(picker, 9, 20)
        >>> project_end_of_shift([picker], datetime(2025, 3, 3, 11, 0))[0].projected_total
        80
    """
    pickers = ensure_pickers(pickers)

    elapsed = schedule.elapsed_hours(now)
    is_final = schedule.remaining_hours(now) <= 0
    total_hours = schedule.total_hours

    projections = [_project_picker(p, elapsed, total_hours, is_final) for p in pickers]
    logger.debug(
        f"Projected {len(projections)} pickers at {now:%H:%M} "
        f"(elapsed={elapsed}h, final={is_final})"
    )
    return projections


def project_team(
    pickers: List[Picker],
    now: datetime,
    schedule: ShiftSchedule = DEFAULT_SCHEDULE
) -> TeamProjection:
    """
    Project the team's end-of-shift total.

    Args:
        pickers: List of Picker
        now: Current time
        schedule: Shift schedule

    Returns:
        TeamProjection; completion_percentage is 0 when the team has no target
    """
    projections = project_end_of_shift(pickers, now, schedule)

    projected_total = sum(p.projected_total for p in projections)
    total_target = sum(p.target for p in projections)
    hours_left = schedule.remaining_hours(now)

    if total_target > 0:
        completion = safe_divide(projected_total, total_target) * 100
    else:
        completion = 0.0

    team = TeamProjection(
        projected_total=projected_total,
        total_target=total_target,
        completion_percentage=completion,
        on_track=projected_total >= total_target,
        remaining_hours=hours_left,
        is_final=hours_left <= 0
    )
    logger.info(
        f"Team projection: {team.projected_total}/{team.total_target} "
        f"({team.completion_percentage:.1f}%), on track={team.on_track}"
    )
    return team


def gap_analysis(
    pickers: List[Picker],
    now: datetime,
    schedule: ShiftSchedule = DEFAULT_SCHEDULE
) -> List[PickerProjection]:
    """Per-picker projections sorted by achievement percent, lowest first."""
    projections = project_end_of_shift(pickers, now, schedule)
    return sorted(projections, key=lambda p: p.achievement_percent)


def required_rate(
    picker: Union[Picker, Dict[str, Any]],
    now: datetime,
    schedule: ShiftSchedule = DEFAULT_SCHEDULE
) -> int:
    """
    Lines per hour a picker needs over the remaining hours to reach target.

    Returns:
        ceil((target - performance) / remaining hours); 0 when the shift is over
        or the target is already met
    """
    picker = ensure_pickers([picker])[0]
    hours_left = schedule.remaining_hours(now)
    lines_needed = picker.target - picker.performance

    if hours_left <= 0 or lines_needed <= 0:
        return 0
    return int(math.ceil(lines_needed / hours_left))
