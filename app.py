"""
Picker Productivity Dashboard - Main Application

Live view of a warehouse picking shift:
- Shift clock and break countdown
- Team metrics, best/worst performer and per-picker progress
- Hourly, cumulative and end-of-shift projection charts
- Hour analysis card with team consistency

Pickers are loaded from the picker store when PICKERDB_* is configured;
otherwise the dashboard runs on a seeded roster kept in session state.
"""

import streamlit as st
import logging
from typing import List

from config import Config
from utils.config import load_config, validate_config, is_store_configured

# Load configuration
load_config()

# Configure logging
logging.basicConfig(
    level=getattr(logging, Config.LOG_LEVEL.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

from core.calculations.consistency import cumulative_series, labor_efficiency_ratio
from core.calculations.metrics import compute_metrics, hour_summary, hourly_lines_frame
from core.calculations.projection import gap_analysis, project_team
from core.db import store
from core.pickers.models import (
    Picker,
    create_picker,
    record_hourly_lines,
    seed_default_pickers,
    update_picker_details,
)
from core.time_windows.models import DEFAULT_SCHEDULE, shift_schedule_from_config
from core.time_windows.shift_clock import current_time, shift_progress
from ui.log_display import LogCollector, render_log_area
from ui.metrics_display import (
    render_cumulative_chart,
    render_hour_card,
    render_hourly_chart,
    render_picker_table,
    render_projection_chart,
    render_shift_header,
    render_team_metrics,
)
from ui.picker_form import render_edit_picker_form, render_lines_form, render_new_picker_form
from utils.formatting import format_hour_label

# Streamlit page config
st.set_page_config(
    page_title="Picker Productivity Dashboard",
    layout="wide",
    initial_sidebar_state="expanded"
)

st.title("📦 Picker Productivity Dashboard")

log_collector = LogCollector("dashboard_logs")

# Configuration problems are reported but only the shift schedule is fatal
for problem in validate_config():
    if problem.startswith("PICKERDB"):
        log_collector.add_info("Picker store not configured; using a local roster for this session")
    else:
        log_collector.add_warning(problem)

try:
    schedule = shift_schedule_from_config()
except ValueError as e:
    logger.error(f"Invalid shift configuration, using defaults: {e}")
    log_collector.add_error(f"Invalid shift configuration, using defaults: {e}")
    schedule = DEFAULT_SCHEDULE

use_store = is_store_configured()


@st.cache_data(ttl=Config.REFRESH_INTERVAL_SECONDS, show_spinner=False)
def load_store_pickers() -> List[Picker]:
    """Pickers from the store, refreshed at most every REFRESH_INTERVAL_SECONDS."""
    store.ensure_schema()
    store.seed_if_empty()
    return store.fetch_pickers()


def local_pickers() -> List[Picker]:
    if "local_pickers" not in st.session_state:
        st.session_state["local_pickers"] = seed_default_pickers()
    return st.session_state["local_pickers"]


def load_pickers() -> List[Picker]:
    if use_store:
        try:
            pickers = load_store_pickers()
            if pickers:
                return pickers
            log_collector.add_warning("Picker store returned no pickers; showing the local roster")
        except Exception as e:
            logger.error(f"Picker store unavailable: {e}", exc_info=True)
            log_collector.add_error(f"Picker store unavailable, showing the local roster: {e}")
    return local_pickers()


# The wall clock is read once per render; everything below is computed from `now`
now = current_time(Config.TIMEZONE)
pickers = load_pickers()

# Sidebar: data entry and roster management
refresh_needed = False
with st.sidebar:
    st.header("✏️ Data Entry")

    entry = render_lines_form(pickers, now)
    if entry is not None:
        try:
            if use_store:
                store.record_performance(entry.picker_id, entry.hour, entry.lines)
                load_store_pickers.clear()
            else:
                picker = next(p for p in pickers if p.id == entry.picker_id)
                record_hourly_lines(picker, entry.hour, entry.lines)
            log_collector.add_success(
                f"Recorded {entry.lines} lines at {format_hour_label(entry.hour)}"
            )
            refresh_needed = True
        except (ValueError, KeyError) as e:
            log_collector.add_error(f"Could not record lines: {e}")
        except Exception as e:
            logger.error(f"Failed to record lines: {e}", exc_info=True)
            log_collector.add_error(f"Could not save lines to the picker store: {e}")

    st.divider()

    new_picker = render_new_picker_form()
    if new_picker is not None:
        picker = create_picker(new_picker.name, new_picker.target)
        try:
            if use_store:
                store.save_picker(picker)
                load_store_pickers.clear()
            else:
                local_pickers().append(picker)
            log_collector.add_success(f"Added picker {picker.name}")
            refresh_needed = True
        except Exception as e:
            logger.error(f"Failed to add picker: {e}", exc_info=True)
            log_collector.add_error(f"Could not add picker {picker.name}: {e}")

    st.divider()

    edit = render_edit_picker_form(pickers)
    if edit is not None:
        try:
            if edit.delete:
                if use_store:
                    store.delete_picker(edit.picker_id)
                    load_store_pickers.clear()
                else:
                    roster = local_pickers()
                    roster[:] = [p for p in roster if p.id != edit.picker_id]
                log_collector.add_success(f"Removed picker {edit.name}")
            else:
                if use_store:
                    store.update_picker(edit.picker_id, name=edit.name, target=edit.target, status=edit.status)
                    load_store_pickers.clear()
                else:
                    picker = next(p for p in pickers if p.id == edit.picker_id)
                    update_picker_details(picker, name=edit.name, target=edit.target, status=edit.status)
                log_collector.add_success(f"Updated picker {edit.name} ({edit.status})")
            refresh_needed = True
        except (ValueError, KeyError) as e:
            log_collector.add_error(f"Could not update picker: {e}")
        except Exception as e:
            logger.error(f"Failed to update picker {edit.picker_id}: {e}", exc_info=True)
            log_collector.add_error(f"Could not update the picker store: {e}")

    st.divider()
    if st.button("🔄 Refresh", use_container_width=True):
        load_store_pickers.clear()
        st.rerun()
    st.caption(f"Store data refreshes every {Config.REFRESH_INTERVAL_SECONDS}s")

if refresh_needed:
    st.rerun()

# Shift clock
render_shift_header(shift_progress(now, schedule), now)
st.divider()

# Team metrics
metrics = compute_metrics(pickers)
team = project_team(pickers, now, schedule)
render_team_metrics(metrics, team)
render_picker_table(pickers, now, schedule)

st.divider()

tab_hourly, tab_cumulative, tab_projection, tab_hour = st.tabs(
    ["Hourly", "Cumulative", "Projection", "Hour Analysis"]
)

with tab_hourly:
    render_hourly_chart(hourly_lines_frame(pickers), pickers)

with tab_cumulative:
    view_options = [None] + [p.id for p in pickers]
    names = {p.id: p.name for p in pickers}
    selected_id = st.selectbox(
        "View",
        options=view_options,
        format_func=lambda pid: "All pickers" if pid is None else names[pid],
        key="cumulative_view"
    )
    series = cumulative_series(
        pickers,
        picker_id=selected_id,
        default_hourly_target=Config.DEFAULT_TARGET_LINES_PER_HOUR
    )
    render_cumulative_chart(series, labor_efficiency_ratio(series))

with tab_projection:
    render_projection_chart(gap_analysis(pickers, now, schedule), team)

with tab_hour:
    hours = list(range(schedule.start_hour, schedule.end_hour + 1))
    default_hour = min(max(now.hour, hours[0]), hours[-1])
    selected_hour = st.selectbox(
        "Hour",
        options=hours,
        index=hours.index(default_hour),
        format_func=format_hour_label,
        key="hour_card_hour"
    )
    render_hour_card(hour_summary(
        pickers,
        selected_hour,
        default_hourly_target=Config.DEFAULT_TARGET_LINES_PER_HOUR,
        schedule=schedule
    ))

st.divider()
render_log_area(log_collector)
