"""
Picker Entry Forms

Sidebar forms for recording hourly lines and for adding, editing and
removing pickers. The forms only collect input; the caller applies it to the
picker list or the store.
"""

import streamlit as st
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from config import Config
from core.calculations.common import SHIFT_HOURS
from core.pickers.models import Picker
from utils.formatting import format_hour_label

logger = logging.getLogger(__name__)


@dataclass
class LinesEntry:
    """Submitted hourly lines for one picker"""
    picker_id: str
    hour: int
    lines: int


@dataclass
class NewPickerEntry:
    """Submitted details for a new picker"""
    name: str
    target: int

    def __post_init__(self):
        if self.target <= 0:
            raise ValueError(f"Daily target must be positive, got {self.target}")


@dataclass
class PickerEditEntry:
    """Submitted changes to an existing picker; `delete` removes it instead"""
    picker_id: str
    name: str
    target: int
    status: str
    delete: bool = False

    def __post_init__(self):
        if self.status not in Config.PICKER_STATUSES:
            raise ValueError(
                f"Invalid status: '{self.status}'. "
                f"Must be one of: {list(Config.PICKER_STATUSES)}"
            )
        if not self.delete and self.target <= 0:
            raise ValueError(f"Daily target must be positive, got {self.target}")


def _default_hour(now: datetime) -> int:
    """Current hour within the shift, clamped to the recordable range."""
    return min(max(now.hour, SHIFT_HOURS[0]), SHIFT_HOURS[-1])


def render_lines_form(
    pickers: List[Picker],
    now: datetime,
    key_prefix: str = "lines_form"
) -> Optional[LinesEntry]:
    """
    Render the "record lines" form.

    Args:
        pickers: Pickers that can be selected
        now: Current time, used to preselect the hour
        key_prefix: Unique key prefix for Streamlit widgets

    Returns:
        LinesEntry when the form was submitted, otherwise None
    """
    if not pickers:
        st.info("Add a picker before recording lines")
        return None

    with st.form(key=f"{key_prefix}_form", clear_on_submit=True):
        st.markdown("**Record Lines**")

        picker = st.selectbox(
            "Picker",
            options=pickers,
            format_func=lambda p: f"{p.name} ({p.status})",
            key=f"{key_prefix}_picker"
        )
        hour = st.selectbox(
            "Hour",
            options=list(SHIFT_HOURS),
            index=SHIFT_HOURS.index(_default_hour(now)),
            format_func=format_hour_label,
            key=f"{key_prefix}_hour"
        )
        lines = st.number_input(
            "Lines completed",
            min_value=0,
            step=1,
            value=0,
            key=f"{key_prefix}_lines",
            help="Replaces any count already recorded for this hour"
        )
        submitted = st.form_submit_button("Save")

    if not submitted:
        return None

    logger.debug(f"Lines form submitted: picker={picker.id}, hour={hour}, lines={lines}")
    return LinesEntry(picker_id=picker.id, hour=int(hour), lines=int(lines))


def render_new_picker_form(key_prefix: str = "new_picker") -> Optional[NewPickerEntry]:
    """
    Render the "add picker" form.

    Returns:
        NewPickerEntry when submitted with a name, otherwise None
    """
    with st.form(key=f"{key_prefix}_form", clear_on_submit=True):
        st.markdown("**Add Picker**")
        name = st.text_input("Name", key=f"{key_prefix}_name")
        target = st.number_input(
            "Daily target (lines)",
            min_value=1,
            step=10,
            value=Config.DEFAULT_TARGET_LINES_PER_HOUR * 8,
            key=f"{key_prefix}_target"
        )
        submitted = st.form_submit_button("Add")

    if not submitted:
        return None

    name = name.strip()
    if not name:
        st.warning("Enter a name for the new picker")
        return None

    return NewPickerEntry(name=name, target=int(target))


def render_edit_picker_form(
    pickers: List[Picker],
    key_prefix: str = "edit_picker"
) -> Optional[PickerEditEntry]:
    """
    Render the "edit picker" form with a delete option.

    The picker is chosen outside the form so the fields below it are
    prefilled with that picker's current values.

    Args:
        pickers: Pickers that can be edited
        key_prefix: Unique key prefix for Streamlit widgets

    Returns:
        PickerEditEntry when saved or deleted, otherwise None
    """
    if not pickers:
        return None

    st.markdown("**Edit Picker**")
    picker = st.selectbox(
        "Picker",
        options=pickers,
        format_func=lambda p: p.name,
        key=f"{key_prefix}_picker"
    )
    statuses = list(Config.PICKER_STATUSES)

    with st.form(key=f"{key_prefix}_form_{picker.id}"):
        name = st.text_input("Name", value=picker.name, key=f"{key_prefix}_name_{picker.id}")
        target = st.number_input(
            "Daily target (lines)",
            min_value=1,
            step=10,
            value=max(int(picker.target), 1),
            key=f"{key_prefix}_target_{picker.id}"
        )
        status = st.radio(
            "Status",
            options=statuses,
            index=statuses.index(picker.status) if picker.status in statuses else 0,
            horizontal=True,
            key=f"{key_prefix}_status_{picker.id}"
        )
        confirm_delete = st.checkbox(
            "Confirm removal",
            key=f"{key_prefix}_confirm_{picker.id}",
            help="Required before Remove takes effect"
        )
        col1, col2 = st.columns(2)
        with col1:
            save = st.form_submit_button("Save changes")
        with col2:
            remove = st.form_submit_button("Remove")

    if remove:
        if not confirm_delete:
            st.warning(f"Tick 'Confirm removal' to remove {picker.name}")
            return None
        logger.debug(f"Edit form: remove picker={picker.id}")
        return PickerEditEntry(
            picker_id=picker.id, name=picker.name, target=int(picker.target),
            status=picker.status, delete=True
        )

    if not save:
        return None

    name = name.strip()
    if not name:
        st.warning("Picker name must not be blank")
        return None

    logger.debug(f"Edit form: picker={picker.id}, name={name}, target={target}, status={status}")
    return PickerEditEntry(picker_id=picker.id, name=name, target=int(target), status=status)
