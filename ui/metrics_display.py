"""
Metrics Display Functions

UI components for the shift dashboard: shift clock, team metrics, picker
table, hourly and cumulative charts, end-of-shift projection and the hour
analysis card. These functions only render engine results; all numbers are
computed in core.calculations.
"""

import streamlit as st
import pandas as pd
import plotly.graph_objects as go
import logging
from datetime import datetime
from typing import List

from core.calculations.consistency import CumulativePoint, LaborEfficiency
from core.calculations.metrics import (
    HourSummary,
    PerformanceMetrics,
    progress_status,
    star_rating,
)
from core.calculations.projection import PickerProjection, TeamProjection, required_rate
from core.pickers.models import Picker
from core.time_windows.models import ShiftSchedule
from core.time_windows.shift_clock import ShiftProgress
from utils.formatting import (
    format_hour_label,
    format_minutes,
    format_percent,
    format_ratio_as_percent,
)

logger = logging.getLogger(__name__)

COLOR_ACTUAL = '#1f77b4'
COLOR_TARGET = '#6c757d'
COLOR_ACHIEVED = '#28a745'
COLOR_SHORTFALL = '#dc3545'

RATING_COLORS = {
    'Excellent': '#28a745',
    'Good': '#20c997',
    'Acceptable': '#ffc107',
    'Needs Improvement': '#fd7e14',
    'Critical': '#dc3545',
}


def render_shift_header(progress: ShiftProgress, now: datetime):
    """
    Display the shift clock.

    Shows current time, completion bar, remaining time and the next break.
    """
    col1, col2, col3 = st.columns(3)

    with col1:
        st.metric("Current Time", now.strftime('%H:%M'))

    with col2:
        st.metric("Shift Remaining", format_minutes(progress.remaining_time))

    with col3:
        if progress.is_break_time:
            st.metric("Status", "Lunch Break")
        elif progress.next_break is not None:
            st.metric(
                f"Next Break ({progress.next_break.type})",
                format_minutes(progress.next_break.starts_in)
            )
        else:
            st.metric("Next Break", "None today")

    st.progress(
        min(1.0, progress.percentage_complete / 100),
        text=f"Shift {format_percent(progress.percentage_complete)} complete"
    )


def render_team_metrics(metrics: PerformanceMetrics, team: TeamProjection):
    """
    Display team-level metrics in four columns.

    Args:
        metrics: Output of compute_metrics
        team: Output of project_team
    """
    st.subheader("📈 Team Performance")

    col1, col2, col3, col4 = st.columns(4)

    with col1:
        st.metric("Total Lines", metrics.total_lines)
        st.caption(f"{metrics.average_lines_per_picker:.1f} per picker")

    with col2:
        st.metric("Lines/Hour", f"{metrics.average_lines_per_hour:.1f}")
        st.caption("Hours with recorded lines only")

    with col3:
        st.metric("Efficiency", format_percent(metrics.efficiency_score))

    with col4:
        label = "Final Total" if team.is_final else "Projected Total"
        st.metric(
            label,
            team.projected_total,
            delta=f"{format_percent(team.completion_percentage)} of {team.total_target}",
            delta_color="normal" if team.on_track else "inverse"
        )

    col1, col2 = st.columns(2)

    with col1:
        best = metrics.best_performer
        if best.picker_id:
            st.success(
                f"🏆 **Best:** {best.name} with {best.lines} lines "
                f"({format_ratio_as_percent(best.efficiency)} of target)"
            )

    with col2:
        worst = metrics.worst_performer
        if worst.picker_id and worst.picker_id != best.picker_id:
            st.warning(
                f"⚠️ **Needs support:** {worst.name} with {worst.lines} lines "
                f"({format_ratio_as_percent(worst.efficiency)} of target)"
            )


def render_picker_table(pickers: List[Picker], now: datetime, schedule: ShiftSchedule):
    """
    Display one row per picker with progress, rating and the rate still needed.
    """
    if not pickers:
        st.info("No pickers on this shift")
        return

    rows = []
    for picker in pickers:
        percentage = picker.performance / picker.target * 100 if picker.target > 0 else 0.0
        rows.append({
            'Picker': picker.name,
            'Status': picker.status.capitalize(),
            'Lines': picker.performance,
            'Target': picker.target,
            'Progress': format_percent(percentage),
            'Assessment': progress_status(percentage),
            'Rating': '⭐' * star_rating(picker.performance, picker.target),
            'Needed/Hour': required_rate(picker, now, schedule)
        })

    st.dataframe(pd.DataFrame(rows), use_container_width=True, hide_index=True)


def render_hourly_chart(lines_frame: pd.DataFrame, pickers: List[Picker]):
    """
    Stacked bar chart of lines per hour, one trace per picker.

    Args:
        lines_frame: Output of hourly_lines_frame (hours × picker ids)
        pickers: Pickers in the same order as the frame's columns
    """
    st.subheader("⏱️ Lines per Hour")

    if lines_frame.empty or lines_frame.to_numpy().sum() == 0:
        st.info("No lines recorded yet this shift")
        return

    x_values = [format_hour_label(hour) for hour in lines_frame.index]

    fig = go.Figure()
    for col, picker in enumerate(pickers):
        fig.add_trace(go.Bar(
            x=x_values,
            y=lines_frame.iloc[:, col],
            name=picker.name,
            hovertemplate=f'%{{x}}<br>%{{y}} lines<extra>{picker.name}</extra>'
        ))

    fig.update_layout(
        barmode='stack',
        xaxis_title='Hour',
        yaxis_title='Lines',
        height=350,
        hovermode='x unified',
        legend=dict(orientation="h", yanchor="bottom", y=1.02, xanchor="right", x=1)
    )
    st.plotly_chart(fig, use_container_width=True)


def _sample_series() -> List[CumulativePoint]:
    """Illustrative curve shown before any lines are recorded."""
    hourly = [30, 45, 50, 20, 48, 52, 40, 46, 35]
    points, total = [], 0
    for i, lines in enumerate(hourly):
        total += lines
        points.append(CumulativePoint(hour=9 + i, total=total, target=int(45 * (i + 1))))
    return points


def render_cumulative_chart(series: List[CumulativePoint], efficiency: LaborEfficiency):
    """
    Line chart of cumulative actual vs. target lines with the labor efficiency summary.

    A sample curve is shown, and labelled as such, when nothing has been recorded.
    """
    st.subheader("📊 Cumulative Output")

    is_sample = not series or series[-1].total == 0
    if is_sample:
        series = _sample_series()
        st.caption("Sample data shown until lines are recorded")

    x_values = [point.label for point in series]

    fig = go.Figure()
    fig.add_trace(go.Scatter(
        x=x_values,
        y=[point.total for point in series],
        name='Actual',
        mode='lines+markers',
        fill='tozeroy',
        line=dict(color=COLOR_ACTUAL),
        hovertemplate='%{x}<br>%{y} lines<extra>Actual</extra>'
    ))
    fig.add_trace(go.Scatter(
        x=x_values,
        y=[point.target for point in series],
        name='Target',
        mode='lines',
        line=dict(color=COLOR_TARGET, dash='dash'),
        hovertemplate='%{x}<br>%{y} lines<extra>Target</extra>'
    ))
    fig.update_layout(
        xaxis_title='Hour',
        yaxis_title='Cumulative Lines',
        height=350,
        hovermode='x unified',
        legend=dict(orientation="h", yanchor="bottom", y=1.02, xanchor="right", x=1)
    )
    st.plotly_chart(fig, use_container_width=True)

    if is_sample:
        return

    col1, col2, col3 = st.columns(3)
    with col1:
        st.metric("Labor Efficiency", f"{efficiency.ratio}%")
    with col2:
        st.metric("Avg Lines/Hour", efficiency.simple_average)
    with col3:
        st.metric("Final Total", efficiency.final_total)

    st.info(efficiency.summary)
    if efficiency.steepest_hour:
        st.caption(f"Steepest: {efficiency.steepest_hour} (+{efficiency.max_slope} lines)")
    if efficiency.flattest_hour:
        st.caption(f"Flattest: {efficiency.flattest_hour} (+{efficiency.min_slope} lines)")


def render_projection_chart(projections: List[PickerProjection], team: TeamProjection):
    """
    Stacked bars of projected achievement and shortfall per picker, worst first.
    """
    title = "🏁 End-of-Shift Result" if team.is_final else "🔮 End-of-Shift Projection"
    st.subheader(title)

    if not projections:
        st.info("No pickers to project")
        return

    names = [p.name for p in projections]

    fig = go.Figure()
    fig.add_trace(go.Bar(
        x=names,
        y=[p.projected_achievement for p in projections],
        name='Projected',
        marker_color=COLOR_ACHIEVED,
        hovertemplate='%{x}<br>%{y} lines<extra>Projected</extra>'
    ))
    fig.add_trace(go.Bar(
        x=names,
        y=[p.shortfall for p in projections],
        name='Shortfall',
        marker_color=COLOR_SHORTFALL,
        hovertemplate='%{x}<br>%{y} lines short<extra>Shortfall</extra>'
    ))
    fig.update_layout(
        barmode='stack',
        yaxis_title='Lines',
        height=350,
        legend=dict(orientation="h", yanchor="bottom", y=1.02, xanchor="right", x=1)
    )
    st.plotly_chart(fig, use_container_width=True)

    if team.on_track:
        st.success(f"✅ Team on track: {team.projected_total} of {team.total_target} lines")
    else:
        gap = team.total_target - team.projected_total
        st.warning(f"⚠️ Team projected {gap} lines short of {team.total_target}")


def render_hour_card(summary: HourSummary):
    """Display the analysis card for one hour."""
    color = RATING_COLORS.get(summary.rating, COLOR_TARGET)
    st.markdown(
        f"**{format_hour_label(summary.hour)}** "
        f"<span style='color:{color}'>● {summary.rating}</span>",
        unsafe_allow_html=True
    )

    col1, col2, col3, col4 = st.columns(4)

    with col1:
        st.metric("Lines", summary.lines, delta=f"target {summary.target}", delta_color="off")

    with col2:
        st.metric("Completion", f"{summary.completion_rate}%")

    with col3:
        st.metric("Consistency", f"{summary.consistency_score}/100")

    with col4:
        st.metric("Still Needed Today", summary.deficit)

    st.caption(
        f"Cumulative {summary.cumulative_lines} of {summary.cumulative_target} lines "
        f"across {summary.picker_count} active pickers ({summary.target_per_picker}/picker/hour)"
    )
    if summary.acceleration_needed > 0:
        st.caption(f"Pace must rise {summary.acceleration_needed:.0f}% above target for the rest of the shift")
