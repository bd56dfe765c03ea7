"""
Performance Metrics Calculation Functions

Aggregate and per-hour performance metrics for a team of pickers:
- Team totals, averages and efficiency against target
- Best/worst performer
- Per-hour analysis with each hour's top performer
- Hour analysis card (completion rate, deficit, acceleration, rating)

All functions are pure: they read the picker list and return new objects.
Efficiencies are raw ratios (0-1); percentages are named as such.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List

import numpy as np
import pandas as pd

from core.pickers.models import Picker, ensure_pickers
from core.time_windows.models import DEFAULT_SCHEDULE, ShiftSchedule
from .common import (
    FIRST_HOUR,
    HOURS_PER_TARGET,
    SHIFT_HOURS,
    finite_or_zero,
    round_half_up,
    safe_divide,
)
from .consistency import team_consistency

logger = logging.getLogger(__name__)


@dataclass
class TopPerformer:
    """Picker highlighted in a metrics summary"""
    picker_id: str = ''
    name: str = ''
    lines: int = 0
    efficiency: float = 0.0  # ratio, not percentage

    def to_dict(self) -> Dict[str, Any]:
        return {
            'pickerId': self.picker_id,
            'name': self.name,
            'lines': int(self.lines),
            'efficiency': float(self.efficiency)
        }


@dataclass
class HourlyAnalysis:
    """Team totals for one working hour"""
    hour: int
    total_lines: int
    average_lines: float
    top_performer: TopPerformer

    def to_dict(self) -> Dict[str, Any]:
        return {
            'hour': int(self.hour),
            'totalLines': int(self.total_lines),
            'averageLines': float(self.average_lines),
            'topPerformer': self.top_performer.to_dict()
        }


@dataclass
class PerformanceMetrics:
    """Aggregate snapshot of team performance; derived, never stored"""
    total_lines: int = 0
    average_lines_per_picker: float = 0.0
    average_lines_per_hour: float = 0.0
    efficiency_score: float = 0.0  # percentage of total target achieved
    best_performer: TopPerformer = field(default_factory=TopPerformer)
    worst_performer: TopPerformer = field(default_factory=TopPerformer)
    hourly_analysis: List[HourlyAnalysis] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'totalLines': int(self.total_lines),
            'averageLinesPerPicker': float(self.average_lines_per_picker),
            'averageLinesPerHour': float(self.average_lines_per_hour),
            'efficiencyScore': float(self.efficiency_score),
            'bestPerformer': self.best_performer.to_dict(),
            'worstPerformer': self.worst_performer.to_dict(),
            'hourlyAnalysis': [h.to_dict() for h in self.hourly_analysis]
        }


@dataclass
class HourSummary:
    """Team view of a single hour, as shown on the hour analysis card"""
    hour: int
    lines: int
    target: int
    target_per_picker: int
    picker_count: int
    completion_rate: int
    consistency_score: int
    rating: str
    deficit: int
    cumulative_lines: int
    cumulative_target: int
    acceleration_needed: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            'hour': int(self.hour),
            'lines': int(self.lines),
            'target': int(self.target),
            'targetPerPicker': int(self.target_per_picker),
            'pickerCount': int(self.picker_count),
            'completionRate': int(self.completion_rate),
            'consistencyScore': int(self.consistency_score),
            'rating': self.rating,
            'deficit': int(self.deficit),
            'cumulativeLines': int(self.cumulative_lines),
            'cumulativeTarget': int(self.cumulative_target),
            'accelerationNeeded': float(self.acceleration_needed)
        }


def hourly_lines_frame(pickers: List[Picker]) -> pd.DataFrame:
    """
    Build an hour × picker matrix of lines.

    Rows are the working hours 9-17 (index name 'hour'), columns are picker ids
    in input order. Missing or out-of-range hourly entries count as 0 lines.

    Args:
        pickers: List of Picker (or picker dicts)

    Returns:
        DataFrame of integer line counts; zero columns for an empty list
    """
    pickers = ensure_pickers(pickers)

    values = np.zeros((len(SHIFT_HOURS), len(pickers)), dtype=np.int64)
    for col, picker in enumerate(pickers):
        for row, hour in enumerate(SHIFT_HOURS):
            values[row, col] = picker.lines_for(hour)

    return pd.DataFrame(
        values,
        index=pd.Index(SHIFT_HOURS, name='hour'),
        columns=[p.id for p in pickers]
    )


def _performer_summary(picker: Picker) -> TopPerformer:
    efficiency = safe_divide(picker.performance, picker.target) if picker.target > 0 else 0.0
    return TopPerformer(
        picker_id=picker.id,
        name=picker.name,
        lines=picker.performance,
        efficiency=efficiency
    )


def calculate_hourly_analysis(pickers: List[Picker]) -> List[HourlyAnalysis]:
    """
    Per-hour team totals with the top performer of each hour.

    The top performer is chosen by that hour's lines, not by shift totals;
    ties go to the picker listed first. An empty picker list yields no entries.

    Args:
        pickers: List of Picker

    Returns:
        One HourlyAnalysis per working hour (9-17), or [] for no pickers
    """
    pickers = ensure_pickers(pickers)
    if not pickers:
        return []

    lines = hourly_lines_frame(pickers).to_numpy()
    analysis = []

    for row, hour in enumerate(SHIFT_HOURS):
        hour_lines = lines[row]
        total = int(hour_lines.sum())
        top_index = int(np.argmax(hour_lines))
        top = pickers[top_index]
        top_entry = top.entry_for(hour)

        analysis.append(HourlyAnalysis(
            hour=hour,
            total_lines=total,
            average_lines=safe_divide(total, len(pickers)),
            top_performer=TopPerformer(
                picker_id=top.id,
                name=top.name,
                lines=int(hour_lines[top_index]),
                efficiency=finite_or_zero(top_entry.efficiency) if top_entry else 0.0
            )
        ))

    return analysis


def compute_metrics(pickers: List[Picker]) -> PerformanceMetrics:
    """
    Calculate the team performance snapshot.

    - total_lines: sum of picker performance
    - average_lines_per_picker: total / picker count
    - efficiency_score: total lines / total target * 100
    - average_lines_per_hour: lines over the hours where at least one picker
      recorded lines, divided by the number of such hours (idle hours do not
      dilute the rate)
    - best/worst performer: max/min performance, first occurrence wins ties

    Args:
        pickers: List of Picker (may be empty)

    Returns:
        PerformanceMetrics

    Raises:
        InvalidPickerDataError: If pickers is not a list of pickers

    Example:
        >>> metrics = compute_metrics(seed_default_pickers())
        >>> metrics.total_lines
        0
    """
    pickers = ensure_pickers(pickers)

    total_lines = sum(p.performance for p in pickers)
    total_target = sum(p.target for p in pickers)

    lines = hourly_lines_frame(pickers).to_numpy()
    positive = np.where(lines > 0, lines, 0)
    hours_with_data = (positive > 0).any(axis=1)
    hours_count = int(hours_with_data.sum())
    lines_in_active_hours = int(positive[hours_with_data].sum()) if hours_count else 0

    if total_target <= 0 and pickers:
        logger.warning(f"Total target for {len(pickers)} pickers is {total_target}; efficiency score set to 0")

    if pickers:
        best = _performer_summary(max(pickers, key=lambda p: p.performance))
        worst = _performer_summary(min(pickers, key=lambda p: p.performance))
    else:
        best = TopPerformer()
        worst = TopPerformer()

    metrics = PerformanceMetrics(
        total_lines=total_lines,
        average_lines_per_picker=safe_divide(total_lines, len(pickers)),
        average_lines_per_hour=safe_divide(lines_in_active_hours, hours_count),
        efficiency_score=safe_divide(total_lines, total_target) * 100 if total_target > 0 else 0.0,
        best_performer=best,
        worst_performer=worst,
        hourly_analysis=calculate_hourly_analysis(pickers)
    )

    logger.info(
        f"Metrics for {len(pickers)} pickers: total={metrics.total_lines}, "
        f"efficiency={metrics.efficiency_score:.1f}%, hours with data={hours_count}"
    )
    return metrics


def rating_for(completion_rate: float) -> str:
    """Qualitative rating of an hour's completion rate (percentage)."""
    if completion_rate >= 100:
        return 'Excellent'
    if completion_rate >= 85:
        return 'Good'
    if completion_rate >= 70:
        return 'Acceptable'
    if completion_rate >= 50:
        return 'Needs Improvement'
    return 'Critical'


def hour_summary(
    pickers: List[Picker],
    hour: int,
    default_hourly_target: int = 100,
    schedule: ShiftSchedule = DEFAULT_SCHEDULE
) -> HourSummary:
    """
    Summarize one hour for the active team.

    The hourly target per picker is the average active daily target / 8; when
    no active picker has a target, `default_hourly_target` is used. Deficit is
    measured against the full daily target, so it answers "how many lines are
    still needed today" rather than "how far behind this hour".

    Args:
        pickers: List of Picker
        hour: Working hour to summarize (9-17)
        default_hourly_target: Fallback lines per picker per hour
        schedule: Shift schedule (end hour bounds the remaining hours)

    Returns:
        HourSummary
    """
    pickers = ensure_pickers(pickers)
    active = [p for p in pickers if p.is_active]
    active_count = len(active)
    active_targets = sum(max(0, p.target) for p in active)

    if active_count > 0 and active_targets > 0:
        daily_target_per_picker = active_targets / active_count
    else:
        daily_target_per_picker = default_hourly_target * HOURS_PER_TARGET

    target_per_picker = round_half_up(daily_target_per_picker / HOURS_PER_TARGET)
    target_this_hour = target_per_picker * active_count
    daily_target = daily_target_per_picker * active_count

    lines = sum(p.lines_for(hour) for p in active)
    hours_so_far = [h for h in SHIFT_HOURS if h <= hour]
    cumulative_lines = sum(p.lines_for(h) for p in active for h in hours_so_far)
    cumulative_target = target_this_hour * max(0, hour - FIRST_HOUR + 1)

    deficit = max(0.0, daily_target - cumulative_lines)
    completion_rate = (
        min(100, round_half_up(safe_divide(lines, target_this_hour) * 100))
        if target_this_hour > 0 else 0
    )

    hours_left = max(0, schedule.end_hour - hour)
    if hours_left > 0 and deficit > 0 and target_this_hour > 0:
        acceleration = safe_divide(deficit / hours_left, target_this_hour) * 100 - 100
    else:
        acceleration = 0.0

    return HourSummary(
        hour=hour,
        lines=lines,
        target=target_this_hour,
        target_per_picker=target_per_picker,
        picker_count=active_count,
        completion_rate=completion_rate,
        consistency_score=team_consistency(pickers, hour),
        rating=rating_for(completion_rate),
        deficit=round_half_up(deficit),
        cumulative_lines=cumulative_lines,
        cumulative_target=cumulative_target,
        acceleration_needed=acceleration
    )


def progress_status(percentage: float) -> str:
    """Status label for a picker's progress percentage."""
    if percentage >= 100:
        return 'On Target'
    if percentage >= 80:
        return 'Slightly Behind'
    return 'Behind Schedule'


def star_rating(performance: int, target: int) -> int:
    """1-5 stars for performance against target."""
    if target <= 0:
        return 1
    percentage = performance / target * 100
    if percentage >= 100:
        return 5
    if percentage >= 90:
        return 4
    if percentage >= 80:
        return 3
    if percentage >= 70:
        return 2
    return 1
