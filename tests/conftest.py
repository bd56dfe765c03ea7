"""
Shared fixtures for the picker dashboard tests.
"""
from datetime import datetime

import pytest

from core.pickers.models import create_picker, record_hourly_lines


SHIFT_DATE = (2025, 3, 3)


def at(hour: int, minute: int = 0) -> datetime:
    """Naive local time on the test shift date."""
    return datetime(*SHIFT_DATE, hour, minute)


@pytest.fixture
def shift_time():
    """Factory for times on a fixed shift date."""
    return at


@pytest.fixture
def make_picker():
    """Build a picker with lines recorded per hour, e.g. make_picker('Ann', 100, {9: 10})."""
    def _make(name, target, lines_by_hour=None, picker_id=None, status='active'):
        picker = create_picker(name, target, picker_id=picker_id or name.lower(), status=status)
        for hour, lines in (lines_by_hour or {}).items():
            record_hourly_lines(picker, hour, lines)
        return picker
    return _make


@pytest.fixture
def team(make_picker):
    """Targets 100/120/110 with performance 50/70/30, lines in hours 9 and 10 only."""
    return [
        make_picker('John Smith', 100, {9: 25, 10: 25}, picker_id='1'),
        make_picker('Sarah Johnson', 120, {9: 40, 10: 30}, picker_id='2'),
        make_picker('Mike Wilson', 110, {9: 30}, picker_id='3'),
    ]


@pytest.fixture
def team_dicts(team):
    """The same team in its camelCase document shape."""
    return [p.to_dict() for p in team]
