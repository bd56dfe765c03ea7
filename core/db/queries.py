"""
Picker Store Query Builder

Parameterized SQL for the picker store. Identifiers and hours are validated
before they reach a query; values are always passed as parameters.
"""

import logging
import re
from typing import Any, List, Optional, Tuple

from psycopg2.extras import Json

from core.calculations.common import SHIFT_HOURS

logger = logging.getLogger(__name__)

PICKER_ID_PATTERN = re.compile(r'^[a-zA-Z0-9_-]{1,64}$')

SCHEMA_STATEMENTS = [
    """
    CREATE TABLE IF NOT EXISTS pickers (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        target INTEGER NOT NULL DEFAULT 0,
        status TEXT NOT NULL DEFAULT 'active',
        start_time TEXT NOT NULL DEFAULT '09:00',
        end_time TEXT NOT NULL DEFAULT '17:00',
        breaks JSONB NOT NULL DEFAULT '[]'::jsonb
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS picker_hourly (
        picker_id TEXT NOT NULL REFERENCES pickers(id) ON DELETE CASCADE,
        hour INTEGER NOT NULL,
        lines INTEGER NOT NULL DEFAULT 0,
        target INTEGER NOT NULL DEFAULT 0,
        efficiency DOUBLE PRECISION NOT NULL DEFAULT 0,
        PRIMARY KEY (picker_id, hour)
    );
    """,
]

PICKER_COLUMNS = ["id", "name", "target", "status", "start_time", "end_time", "breaks"]
HOURLY_COLUMNS = ["picker_id", "hour", "lines", "target", "efficiency"]


class PickerQueryBuilder:
    """Builds (query, parameters) pairs for the picker store."""

    @staticmethod
    def validate_picker_id(picker_id: str) -> bool:
        """
        Validate picker ID format.

        Args:
            picker_id: Picker ID to validate

        Returns:
            bool: True if the ID is 1-64 letters, digits, hyphens or underscores
        """
        if not isinstance(picker_id, str):
            return False
        return bool(PICKER_ID_PATTERN.match(picker_id))

    @staticmethod
    def validate_hour(hour: Any) -> bool:
        return isinstance(hour, int) and not isinstance(hour, bool) and hour in SHIFT_HOURS

    def _require_picker_id(self, picker_id: str) -> str:
        if not self.validate_picker_id(picker_id):
            raise ValueError(f"Invalid picker ID: {picker_id!r}")
        return picker_id

    def build_schema_statements(self) -> List[str]:
        return list(SCHEMA_STATEMENTS)

    def build_fetch_pickers_query(self, picker_ids: Optional[List[str]] = None) -> Tuple[str, List[Any]]:
        """
        Build query for picker rows.

        Args:
            picker_ids: Optional IDs to filter by; invalid IDs are dropped

        Returns:
            Tuple[str, List[Any]]: (query_string, parameters)
        """
        base_query = f"SELECT {', '.join(PICKER_COLUMNS)} FROM pickers"

        if picker_ids is None:
            return f"{base_query} ORDER BY id ASC;", []

        validated = [pid for pid in picker_ids if self.validate_picker_id(pid)]
        if len(validated) != len(picker_ids):
            logger.warning(f"Invalid picker IDs filtered out: {sorted(set(picker_ids) - set(validated))}")

        if not validated:
            return f"{base_query} WHERE 1=0;", []

        return f"{base_query} WHERE id = ANY(%s) ORDER BY id ASC;", [validated]

    def build_fetch_hourly_query(self, picker_ids: List[str]) -> Tuple[str, List[Any]]:
        """Build query for hourly rows of the given pickers, ordered by picker and hour."""
        validated = [pid for pid in picker_ids if self.validate_picker_id(pid)]
        query = f"""
            SELECT {', '.join(HOURLY_COLUMNS)}
            FROM picker_hourly
            WHERE picker_id = ANY(%s)
            ORDER BY picker_id ASC, hour ASC;
        """
        return query, [validated]

    def build_upsert_picker_query(self, picker) -> Tuple[str, List[Any]]:
        """Insert or update the picker row (hourly rows are written separately)."""
        self._require_picker_id(picker.id)
        query = """
            INSERT INTO pickers (id, name, target, status, start_time, end_time, breaks)
            VALUES (%s, %s, %s, %s, %s, %s, %s)
            ON CONFLICT (id) DO UPDATE SET
                name = EXCLUDED.name,
                target = EXCLUDED.target,
                status = EXCLUDED.status,
                start_time = EXCLUDED.start_time,
                end_time = EXCLUDED.end_time,
                breaks = EXCLUDED.breaks;
        """
        parameters = [
            picker.id,
            picker.name,
            int(picker.target),
            picker.status,
            picker.start_time,
            picker.end_time,
            Json([b.to_dict() for b in picker.breaks]),
        ]
        return query, parameters

    def build_replace_hourly_queries(self, picker) -> List[Tuple[str, List[Any]]]:
        """
        Build statements that replace a picker's hourly rows.

        Entries for hours outside the shift are skipped with a warning.
        """
        self._require_picker_id(picker.id)
        statements = [("DELETE FROM picker_hourly WHERE picker_id = %s;", [picker.id])]

        insert = """
            INSERT INTO picker_hourly (picker_id, hour, lines, target, efficiency)
            VALUES (%s, %s, %s, %s, %s);
        """
        for entry in picker.hourly_data:
            if not self.validate_hour(entry.hour):
                logger.warning(f"Skipping hour {entry.hour} for picker {picker.id}: outside shift hours")
                continue
            statements.append((
                insert,
                [picker.id, entry.hour, int(entry.lines), int(entry.target), float(entry.efficiency)]
            ))
        return statements

    def build_delete_picker_query(self, picker_id: str) -> Tuple[str, List[Any]]:
        self._require_picker_id(picker_id)
        return "DELETE FROM pickers WHERE id = %s;", [picker_id]

    def build_count_pickers_query(self) -> Tuple[str, List[Any]]:
        return "SELECT COUNT(*) FROM pickers;", []


# Global instance
picker_query_builder = PickerQueryBuilder()
