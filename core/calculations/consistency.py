"""
Consistency and Labor Efficiency Scoring

- Team consistency: how evenly active pickers hit their hourly target
- Cumulative series: running actual vs. target lines across the shift
- Labor efficiency ratio: area under the actual curve over area under the
  target curve (trapezoidal rule, one unit per hour)
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import numpy as np

from core.pickers.models import Picker, ensure_pickers
from .common import (
    HOURS_PER_TARGET,
    SHIFT_HOURS,
    clamp,
    round_half_up,
    safe_divide,
)

logger = logging.getLogger(__name__)

# Score returned when no active picker has lines for the hour
DEFAULT_CONSISTENCY = 80

# Standard deviation (in percentage points) that maps to a score of 0
MAX_STD_DEV = 50

# Efficiency ratio bands (percent)
EXCELLENT_RATIO = 90
GOOD_RATIO = 70
MODERATE_RATIO = 50

INTERPRETATION_TEXT = {
    'excellent': 'Excellent efficiency with output closely matching or exceeding targets.',
    'good': 'Good efficiency with output meeting most targets.',
    'moderate': 'Moderate efficiency with output meeting about half of targets.',
    'low': 'Low efficiency signals systemic issues in the picking process.',
}


@dataclass
class CumulativePoint:
    """Running totals at the end of one working hour"""
    hour: int
    total: int
    target: int

    @property
    def label(self) -> str:
        return f"{self.hour}:00"

    def to_dict(self) -> Dict[str, Any]:
        return {
            'hour': self.label,
            'total': int(self.total),
            'target': int(self.target)
        }


@dataclass
class LaborEfficiency:
    """
    Area-under-curve comparison of actual and target cumulative output.

    `steepest_hour` / `flattest_hour` are hour-range labels such as
    "10:00 - 11:00"; they are None (and left out of `to_dict()`) when the
    series has no rising or no comparable segment.
    """
    area: int = 0
    target_area: int = 0
    ratio: int = 0
    interpretation: str = 'low'
    final_total: int = 0
    simple_average: int = 0
    steepest_hour: Optional[str] = None
    max_slope: int = 0
    flattest_hour: Optional[str] = None
    min_slope: int = 0

    @property
    def summary(self) -> str:
        return INTERPRETATION_TEXT[self.interpretation]

    def to_dict(self) -> Dict[str, Any]:
        result = {
            'area': int(self.area),
            'targetArea': int(self.target_area),
            'ratio': int(self.ratio),
            'interpretation': self.interpretation,
            'summary': self.summary,
            'finalTotal': int(self.final_total),
            'simpleAverage': int(self.simple_average)
        }
        if self.steepest_hour is not None:
            result['steepestHour'] = self.steepest_hour
            result['maxSlope'] = int(self.max_slope)
        if self.flattest_hour is not None:
            result['flattestHour'] = self.flattest_hour
            result['minSlope'] = int(self.min_slope)
        return result


def team_consistency(
    pickers: List[Picker],
    hour: int,
    hourly_target: Optional[int] = None
) -> int:
    """
    Score how uniformly active pickers performed in one hour.

    Each active picker with lines recorded for the hour contributes
    lines / hourly target * 100. The score is 100 minus the population standard
    deviation of those percentages scaled so that a spread of 50 points scores 0.

    Active pickers with no lines in the hour are left out of the spread
    rather than counted as 0%, so an idle picker never lowers the score.
    A team where one picker worked and another sat idle scores 100.

    Args:
        pickers: List of Picker
        hour: Working hour (9-17)
        hourly_target: Override for every picker's hourly target; by default
            each picker's daily target / 8 is used

    Returns:
        Integer score 0-100; DEFAULT_CONSISTENCY (80) when no active picker has data

    Example:
        >>> team_consistency([], 10)
        80
    """
    pickers = ensure_pickers(pickers)

    completion_rates = []
    for picker in pickers:
        if not picker.is_active:
            continue
        entry = picker.entry_for(hour)
        if entry is None or entry.lines <= 0:
            continue

        target = hourly_target if hourly_target is not None else picker.hourly_target
        if target > 0:
            completion_rates.append(safe_divide(entry.lines, target) * 100)
        else:
            completion_rates.append(0.0)

    if not completion_rates:
        logger.debug(f"No active picker data at {hour}:00; consistency defaults to {DEFAULT_CONSISTENCY}")
        return DEFAULT_CONSISTENCY

    std_dev = float(np.std(completion_rates))
    score = clamp(100 - std_dev / MAX_STD_DEV * 100, 0, 100)
    return round_half_up(score)


def cumulative_series(
    pickers: List[Picker],
    picker_id: Optional[str] = None,
    default_hourly_target: int = 100
) -> List[CumulativePoint]:
    """
    Running actual and target lines at the end of each working hour.

    Team view (picker_id None): actual lines across all pickers; the hourly
    target is the sum of active pickers' daily target / 8, falling back to
    default_hourly_target per picker when that sum is 0.

    Single picker view: that picker's lines against its own daily target / 8
    (default_hourly_target when the picker has no target). An unknown id gives
    an all-zero series.

    Returns:
        One CumulativePoint per working hour (9-17), values rounded half up
    """
    pickers = ensure_pickers(pickers)

    if picker_id is None:
        selected = pickers
        per_hour_target = sum(
            p.target / HOURS_PER_TARGET for p in pickers if p.is_active and p.target > 0
        )
        if per_hour_target == 0:
            per_hour_target = default_hourly_target * len(pickers)
    else:
        selected = [p for p in pickers if p.id == picker_id]
        if not selected:
            logger.warning(f"Picker {picker_id} not found; returning empty cumulative series")
            return [CumulativePoint(hour, 0, 0) for hour in SHIFT_HOURS]
        picker = selected[0]
        selected = [picker]
        per_hour_target = (
            picker.target / HOURS_PER_TARGET if picker.target > 0 else default_hourly_target
        )

    hourly_lines = np.array(
        [sum(p.lines_for(hour) for p in selected) for hour in SHIFT_HOURS],
        dtype=float
    )
    running_totals = np.cumsum(hourly_lines)
    running_targets = per_hour_target * np.arange(1, len(SHIFT_HOURS) + 1)

    return [
        CumulativePoint(
            hour=hour,
            total=round_half_up(float(total)),
            target=round_half_up(float(target))
        )
        for hour, total, target in zip(SHIFT_HOURS, running_totals, running_targets)
    ]


def _interpret(ratio: int) -> str:
    if ratio >= EXCELLENT_RATIO:
        return 'excellent'
    if ratio >= GOOD_RATIO:
        return 'good'
    if ratio >= MODERATE_RATIO:
        return 'moderate'
    return 'low'


def labor_efficiency_ratio(series: List[CumulativePoint]) -> LaborEfficiency:
    """
    Compare the area under the actual cumulative curve with the target curve.

    Areas use the trapezoidal rule with unit spacing between hours. The ratio is
    area / target area * 100, rounded; the steepest segment is the first with
    the largest positive rise, the flattest is the first with the smallest rise
    after the opening hour.

    Args:
        series: Output of cumulative_series()

    Returns:
        LaborEfficiency; all zeros with interpretation 'low' for fewer than 2 points
    """
    if not series or len(series) < 2:
        return LaborEfficiency()

    totals = np.array([point.total for point in series], dtype=float)
    targets = np.array([point.target for point in series], dtype=float)

    area = float(((totals[:-1] + totals[1:]) / 2).sum())
    target_area = float(((targets[:-1] + targets[1:]) / 2).sum())
    ratio = round_half_up(safe_divide(area, target_area) * 100) if target_area > 0 else 0

    slopes = np.diff(totals)

    steepest_hour = None
    max_slope = 0
    if slopes.max() > 0:
        i = int(np.argmax(slopes))
        steepest_hour = f"{series[i].label} - {series[i + 1].label}"
        max_slope = round_half_up(float(slopes[i]))

    flattest_hour = None
    min_slope = 0
    if len(slopes) > 1:
        i = int(np.argmin(slopes[1:])) + 1
        flattest_hour = f"{series[i].label} - {series[i + 1].label}"
        min_slope = round_half_up(float(slopes[i]))

    final_total = round_half_up(float(totals[-1]))

    result = LaborEfficiency(
        area=round_half_up(area),
        target_area=round_half_up(target_area),
        ratio=ratio,
        interpretation=_interpret(ratio),
        final_total=final_total,
        simple_average=round_half_up(final_total / HOURS_PER_TARGET),
        steepest_hour=steepest_hour,
        max_slope=max_slope,
        flattest_hour=flattest_hour,
        min_slope=min_slope
    )
    logger.debug(f"Labor efficiency: area={result.area}, target area={result.target_area}, ratio={result.ratio}%")
    return result
