"""
Tests for the shift schedule and shift progress.
"""

from datetime import datetime

import pytest
import pytz

from core.time_windows.models import DEFAULT_SCHEDULE, ShiftSchedule, shift_schedule_from_config
from core.time_windows.shift_clock import (
    current_time,
    elapsed_hours,
    remaining_hours,
    shift_progress,
)


class TestShiftProgress:

    def test_at_shift_start(self, shift_time):
        progress = shift_progress(shift_time(9, 0))
        assert progress.percentage_complete == 0.0
        assert progress.remaining_time == 480
        assert progress.is_break_time is False

    def test_before_shift_clamped_to_zero(self, shift_time):
        progress = shift_progress(shift_time(7, 30))
        assert progress.percentage_complete == 0.0
        assert progress.remaining_time == 570

    def test_at_shift_end(self, shift_time):
        progress = shift_progress(shift_time(17, 0))
        assert progress.percentage_complete == 100.0
        assert progress.remaining_time == 0

    def test_after_shift_end(self, shift_time):
        progress = shift_progress(shift_time(19, 45))
        assert progress.percentage_complete == 100.0
        assert progress.remaining_time == 0
        assert progress.next_break is None

    def test_midway(self, shift_time):
        assert shift_progress(shift_time(13, 0)).percentage_complete == pytest.approx(50.0)

    def test_remaining_rounded_to_whole_minutes(self):
        progress = shift_progress(datetime(2025, 3, 3, 16, 58, 30))
        assert progress.remaining_time == 2

    def test_lunch_break_window(self, shift_time):
        assert shift_progress(shift_time(12, 0)).is_break_time is True
        assert shift_progress(shift_time(12, 59)).is_break_time is True
        assert shift_progress(shift_time(13, 0)).is_break_time is False
        assert shift_progress(shift_time(11, 59)).is_break_time is False

    def test_next_break_is_lunch_before_noon(self, shift_time):
        progress = shift_progress(shift_time(11, 30))
        assert progress.to_dict()['nextBreak'] == {'type': 'lunch', 'startsIn': 30}

    def test_next_break_is_short_after_lunch_starts(self, shift_time):
        progress = shift_progress(shift_time(12, 15))
        assert progress.next_break.type == 'short'
        assert progress.next_break.starts_in == 165

    def test_no_next_break_after_short_break(self, shift_time):
        data = shift_progress(shift_time(16, 0)).to_dict()
        assert 'nextBreak' not in data
        assert set(data) == {'percentageComplete', 'remainingTime', 'isBreakTime'}

    def test_timezone_aware_input(self):
        tz = pytz.timezone('Europe/Copenhagen')
        now = tz.localize(datetime(2025, 3, 3, 10, 0))
        progress = shift_progress(now)
        assert progress.percentage_complete == pytest.approx(12.5)
        assert progress.remaining_time == 420

    def test_custom_schedule(self, shift_time):
        schedule = ShiftSchedule(start='06:00', end='14:00', lunch_start='10:00',
                                 lunch_end='10:30', short_break_start='12:00')
        progress = shift_progress(shift_time(10, 15), schedule)
        assert progress.is_break_time is True
        assert progress.next_break.type == 'short'
        assert progress.next_break.starts_in == 105


class TestShiftHours:

    @pytest.mark.parametrize("hour,expected", [(8, 0.1), (9, 0.1), (10, 1), (13, 4), (17, 8), (20, 8)])
    def test_elapsed_hours(self, shift_time, hour, expected):
        assert elapsed_hours(shift_time(hour)) == pytest.approx(expected)

    @pytest.mark.parametrize("hour,expected", [(9, 8), (16, 1), (17, 0), (21, 0)])
    def test_remaining_hours(self, shift_time, hour, expected):
        assert remaining_hours(shift_time(hour, 45)) == expected


class TestShiftSchedule:

    def test_defaults(self):
        assert DEFAULT_SCHEDULE.start_hour == 9
        assert DEFAULT_SCHEDULE.end_hour == 17
        assert DEFAULT_SCHEDULE.total_hours == 8.0

    @pytest.mark.parametrize("kwargs", [
        {'start': '17:00', 'end': '09:00'},
        {'lunch_start': '13:00', 'lunch_end': '12:00'},
        {'lunch_start': '18:00', 'lunch_end': '18:30'},
        {'short_break_start': '08:00'},
        {'start': '9am'},
        {'end': '25:00'},
    ])
    def test_invalid_schedule_rejected(self, kwargs):
        with pytest.raises(ValueError):
            ShiftSchedule(**kwargs)

    def test_contains(self, shift_time):
        assert DEFAULT_SCHEDULE.contains(shift_time(12, 0))
        assert not DEFAULT_SCHEDULE.contains(shift_time(18, 0))

    def test_from_config(self, monkeypatch):
        monkeypatch.setenv('SHIFT_START', '07:00')
        monkeypatch.setenv('SHIFT_END', '15:00')
        monkeypatch.setenv('LUNCH_START', '11:00')
        monkeypatch.setenv('LUNCH_END', '11:30')
        monkeypatch.setenv('SHORT_BREAK_START', '13:30')
        schedule = shift_schedule_from_config()
        assert schedule.start_hour == 7
        assert schedule.lunch_end == '11:30'


class TestCurrentTime:

    def test_timezone_aware(self):
        now = current_time('Europe/Copenhagen')
        assert now.tzinfo is not None
        assert now.tzinfo.zone == 'Europe/Copenhagen'
