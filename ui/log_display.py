"""
Dashboard Log Component

Collects user-facing status messages (store fallbacks, recorded entries,
configuration problems) in session state and renders them in a collapsible
area. The dashboard reruns on every refresh, so the log keeps only the most
recent entries.
"""

import streamlit as st
from typing import List, Dict
from datetime import datetime

import pytz

from config import Config

MAX_ENTRIES = 50

LEVEL_MARKERS = {
    "success": "🟢",
    "warning": "🟡",
    "error": "🔴",
    "info": "🔵"
}


class LogCollector:
    """Session-scoped list of dashboard messages, newest last."""

    def __init__(self, session_key: str = "dashboard_logs", max_entries: int = MAX_ENTRIES):
        self.session_key = session_key
        self.max_entries = max_entries
        if session_key not in st.session_state:
            st.session_state[session_key] = []

    def add_info(self, message: str):
        self._add_log("info", message)

    def add_success(self, message: str):
        self._add_log("success", message)

    def add_warning(self, message: str):
        self._add_log("warning", message)

    def add_error(self, message: str):
        self._add_log("error", message)

    def _add_log(self, level: str, message: str):
        logs = st.session_state[self.session_key]
        # Same message on consecutive reruns is logged once
        if logs and logs[-1]["level"] == level and logs[-1]["message"] == message:
            return

        logs.append({
            "timestamp": datetime.now(pytz.timezone(Config.TIMEZONE)).strftime("%H:%M:%S"),
            "level": level,
            "message": message
        })
        del logs[:-self.max_entries]

    def clear(self):
        st.session_state[self.session_key] = []

    def get_logs(self) -> List[Dict]:
        return st.session_state.get(self.session_key, [])


def render_log_area(log_collector: LogCollector):
    """
    Render the collapsible dashboard log, newest message first.

    Args:
        log_collector: LogCollector instance with messages
    """
    logs = log_collector.get_logs()

    if not logs:
        return

    with st.expander(f"📋 Dashboard Log ({len(logs)} messages)", expanded=False):
        for log in reversed(logs):
            marker = LEVEL_MARKERS.get(log.get("level"), "⚪")
            st.markdown(f"{marker} `[{log.get('timestamp', '')}]` {log.get('message', '')}")

        if st.button("Clear Log", key="clear_dashboard_log"):
            log_collector.clear()
            st.rerun()
