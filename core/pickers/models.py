"""
Picker Record Models

Data shapes for warehouse pickers tracked over one shift:
- HourlyData: lines completed in one working hour
- Break: a lunch or short break window
- Picker: identity, daily target, status and the hourly record

`Picker.performance` is always derived from the hourly record; it is never
stored or incremented on its own.
"""

import logging
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from core.calculations.common import SHIFT_HOURS, hourly_target_for, safe_divide
from utils.formatting import parse_hhmm

logger = logging.getLogger(__name__)

VALID_STATUSES = ['active', 'break', 'offline']
VALID_BREAK_TYPES = ['lunch', 'short']


class InvalidPickerDataError(ValueError):
    """Raised when picker input is structurally invalid (not a list, malformed record)."""


@dataclass
class HourlyData:
    """
    One hour's record for one picker.

    `target` is the hourly target (daily target / 8) and `efficiency` is
    lines / target as a raw ratio. Both are carried as received; the
    calculations never rescale them.
    """
    hour: int
    lines: int = 0
    target: int = 0
    efficiency: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'hour': int(self.hour),
            'lines': int(self.lines),
            'target': int(self.target),
            'efficiency': float(self.efficiency)
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'HourlyData':
        if not isinstance(data, dict) or 'hour' not in data:
            raise InvalidPickerDataError(f"Hourly entry must be a dict with an 'hour' key, got: {data!r}")
        try:
            return cls(
                hour=int(data['hour']),
                lines=int(data.get('lines') or 0),
                target=int(data.get('target') or 0),
                efficiency=float(data.get('efficiency') or 0.0)
            )
        except (TypeError, ValueError) as e:
            raise InvalidPickerDataError(f"Invalid hourly entry {data!r}: {e}") from e


@dataclass
class Break:
    """A break window within the shift."""
    start_time: str
    end_time: str
    type: str = 'short'

    def __post_init__(self):
        """Validate break type and time strings"""
        if self.type not in VALID_BREAK_TYPES:
            raise ValueError(
                f"Invalid break type: '{self.type}'. "
                f"Must be one of: {VALID_BREAK_TYPES}"
            )
        start = parse_hhmm(self.start_time)
        end = parse_hhmm(self.end_time)
        if end <= start:
            raise ValueError(
                f"Break end ({self.end_time}) must be after start ({self.start_time})"
            )

    def to_dict(self) -> Dict[str, str]:
        return {
            'startTime': self.start_time,
            'endTime': self.end_time,
            'type': self.type
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Break':
        try:
            return cls(
                start_time=data['startTime'],
                end_time=data['endTime'],
                type=data.get('type', 'short')
            )
        except (KeyError, TypeError, ValueError) as e:
            raise InvalidPickerDataError(f"Invalid break {data!r}: {e}") from e


@dataclass
class Picker:
    """
    A warehouse worker tracked for one shift.

    Attributes:
        id: Opaque identifier, stable for the shift
        name: Display name
        target: Lines expected for the full shift (daily target)
        status: 'active', 'break' or 'offline'
        hourly_data: One entry per working hour, unique per hour
        start_time: Shift start "HH:MM"
        end_time: Shift end "HH:MM"
        breaks: Break windows
    """
    id: str
    name: str
    target: int
    status: str = 'active'
    hourly_data: List[HourlyData] = field(default_factory=list)
    start_time: str = '09:00'
    end_time: str = '17:00'
    breaks: List[Break] = field(default_factory=list)

    def __post_init__(self):
        """Validate status and the hourly record"""
        if self.status not in VALID_STATUSES:
            raise ValueError(
                f"Invalid status: '{self.status}'. "
                f"Must be one of: {VALID_STATUSES}"
            )

        seen = set()
        for entry in self.hourly_data:
            if entry.hour not in SHIFT_HOURS:
                raise ValueError(
                    f"Hourly entry for hour {entry.hour} on picker {self.id} is outside "
                    f"the shift hours {SHIFT_HOURS[0]}-{SHIFT_HOURS[-1]}"
                )
            if entry.lines < 0:
                raise ValueError(
                    f"Hourly entry for hour {entry.hour} on picker {self.id} has negative lines: {entry.lines}"
                )
            if entry.hour in seen:
                raise ValueError(
                    f"Duplicate hourly entry for hour {entry.hour} on picker {self.id}"
                )
            seen.add(entry.hour)

    @property
    def performance(self) -> int:
        """Cumulative lines so far: the sum of all hourly lines."""
        return sum(int(entry.lines) for entry in self.hourly_data)

    @property
    def is_active(self) -> bool:
        return self.status == 'active'

    @property
    def hourly_target(self) -> int:
        """Per-hour share of the daily target."""
        return hourly_target_for(self.target)

    def entry_for(self, hour: int) -> Optional[HourlyData]:
        """Return the hourly entry for `hour`, or None if not recorded."""
        for entry in self.hourly_data:
            if entry.hour == hour:
                return entry
        return None

    def lines_for(self, hour: int) -> int:
        """Lines recorded for `hour`; missing hours count as zero."""
        entry = self.entry_for(hour)
        return int(entry.lines) if entry else 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the camelCase document shape used by the store and transport."""
        return {
            'id': self.id,
            'name': self.name,
            'target': int(self.target),
            'performance': self.performance,
            'status': self.status,
            'hourlyData': [entry.to_dict() for entry in self.hourly_data],
            'startTime': self.start_time,
            'endTime': self.end_time,
            'breaks': [b.to_dict() for b in self.breaks]
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Picker':
        """
        Build a Picker from its camelCase document shape.

        An incoming `performance` value is ignored: it is recomputed from
        `hourlyData`. A mismatch is logged.

        Raises:
            InvalidPickerDataError: If required keys are missing or malformed
        """
        if not isinstance(data, dict):
            raise InvalidPickerDataError(f"Picker must be a dict, got {type(data).__name__}")

        missing = [k for k in ('id', 'name', 'target') if k not in data]
        if missing:
            raise InvalidPickerDataError(f"Picker is missing required keys: {missing}")

        try:
            picker = cls(
                id=str(data['id']),
                name=str(data['name']),
                target=int(data['target'] or 0),
                status=data.get('status', 'active'),
                hourly_data=[HourlyData.from_dict(h) for h in data.get('hourlyData') or []],
                start_time=data.get('startTime', '09:00'),
                end_time=data.get('endTime', '17:00'),
                breaks=[Break.from_dict(b) for b in data.get('breaks') or []]
            )
        except InvalidPickerDataError:
            raise
        except (TypeError, ValueError) as e:
            raise InvalidPickerDataError(f"Invalid picker {data.get('id')!r}: {e}") from e

        stored = data.get('performance')
        if stored is not None and stored != picker.performance:
            logger.warning(
                f"Picker {picker.id}: stored performance {stored} does not match "
                f"hourly sum {picker.performance}; using hourly sum"
            )

        return picker


def record_hourly_lines(picker: Picker, hour: int, lines: int) -> Picker:
    """
    Set the lines completed by a picker in one hour.

    The value replaces any previous count for that hour. The entry's target and
    efficiency are refreshed from the picker's daily target, entries are kept
    sorted by hour, and `performance` follows from the hourly sum.

    Args:
        picker: Picker to update in place
        hour: Working hour (9-17)
        lines: Lines completed in that hour (>= 0)

    Returns:
        The same picker, updated

    Raises:
        ValueError: If hour is outside the shift or lines is negative
    """
    if hour not in SHIFT_HOURS:
        raise ValueError(f"Hour {hour} is outside the shift hours {SHIFT_HOURS[0]}-{SHIFT_HOURS[-1]}")
    if lines is None or int(lines) < 0:
        raise ValueError(f"Lines must be a non-negative integer, got {lines!r}")

    lines = int(lines)
    hourly_target = picker.hourly_target
    efficiency = safe_divide(lines, hourly_target)

    entry = picker.entry_for(hour)
    if entry is None:
        picker.hourly_data.append(HourlyData(hour, lines, hourly_target, efficiency))
    else:
        entry.lines = lines
        entry.target = hourly_target
        entry.efficiency = efficiency

    picker.hourly_data.sort(key=lambda h: h.hour)

    logger.info(
        f"Recorded {lines} lines for {picker.name} ({picker.id}) at {hour}:00; "
        f"shift total now {picker.performance}"
    )
    return picker


def update_picker_details(
    picker: Picker,
    name: Optional[str] = None,
    target: Optional[int] = None,
    status: Optional[str] = None
) -> Picker:
    """
    Change a picker's name, daily target or status in place.

    A new target refreshes every hourly entry's target and efficiency; the
    recorded lines are kept.

    Raises:
        ValueError: If the name is blank, the target is not positive or the
            status is unknown
    """
    if name is not None:
        name = name.strip()
        if not name:
            raise ValueError("Picker name must not be blank")
    if target is not None and int(target) <= 0:
        raise ValueError(f"Daily target must be positive, got {target!r}")
    if status is not None and status not in VALID_STATUSES:
        raise ValueError(
            f"Invalid status: '{status}'. "
            f"Must be one of: {VALID_STATUSES}"
        )

    if name is not None:
        picker.name = name
    if status is not None:
        picker.status = status
    if target is not None and int(target) != picker.target:
        picker.target = int(target)
        hourly_target = picker.hourly_target
        for entry in picker.hourly_data:
            entry.target = hourly_target
            entry.efficiency = safe_divide(entry.lines, hourly_target)

    logger.info(
        f"Updated picker {picker.id}: name={picker.name}, target={picker.target}, status={picker.status}"
    )
    return picker


def create_picker(
    name: str,
    target: int,
    picker_id: Optional[str] = None,
    status: str = 'active'
) -> Picker:
    """
    Create a picker with a zeroed entry for every working hour.

    Args:
        name: Display name
        target: Daily target in lines
        picker_id: Identifier; a random one is generated when omitted
        status: Initial status

    Returns:
        New Picker
    """
    hourly_target = hourly_target_for(target)
    return Picker(
        id=picker_id or uuid.uuid4().hex,
        name=name,
        target=int(target),
        status=status,
        hourly_data=[HourlyData(hour, 0, hourly_target, 0.0) for hour in SHIFT_HOURS]
    )


def seed_default_pickers() -> List[Picker]:
    """Default roster used when a shift starts with no stored pickers."""
    return [
        create_picker('John Smith', 100, picker_id='1'),
        create_picker('Sarah Johnson', 120, picker_id='2'),
        create_picker('Mike Wilson', 110, picker_id='3'),
    ]


def ensure_pickers(pickers: Iterable) -> List[Picker]:
    """
    Validate engine input, converting document dicts to Picker objects.

    Raises:
        InvalidPickerDataError: If `pickers` is not a list/tuple, or an item is
            neither a Picker nor a valid picker dict
    """
    if not isinstance(pickers, (list, tuple)):
        raise InvalidPickerDataError(
            f"Pickers must be a list, got {type(pickers).__name__}"
        )

    result = []
    for item in pickers:
        if isinstance(item, Picker):
            result.append(item)
        elif isinstance(item, dict):
            result.append(Picker.from_dict(item))
        else:
            raise InvalidPickerDataError(
                f"Unsupported picker record type: {type(item).__name__}"
            )
    return result
