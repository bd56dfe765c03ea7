"""
Picker Store

Loads and saves pickers and their hourly records in PostgreSQL.

`fetch_pickers` logs failures and returns an empty list so the dashboard can
fall back to seeded pickers. Single-picker reads and all writes raise, so a
missing picker is never confused with an unreachable store.
`performance` is never stored; it is derived from the hourly rows on load.
"""

import json
import logging
from typing import List, Optional

import pandas as pd

from core.pickers.models import (
    Break,
    HourlyData,
    Picker,
    record_hourly_lines,
    seed_default_pickers,
    update_picker_details,
)
from .pool import get_picker_connection
from .queries import HOURLY_COLUMNS, PICKER_COLUMNS, picker_query_builder

logger = logging.getLogger(__name__)


class PickerNotFoundError(KeyError):
    """Raised when a write targets a picker that is not in the store."""


def _execute_writes(statements) -> int:
    """Run (query, parameters) pairs in one transaction; returns rows affected by the last."""
    with get_picker_connection() as conn:
        cursor = conn.cursor()
        try:
            rowcount = 0
            for query, parameters in statements:
                cursor.execute(query, parameters)
                rowcount = cursor.rowcount
            conn.commit()
            return rowcount
        except Exception:
            conn.rollback()
            raise
        finally:
            cursor.close()


def _parse_breaks(value) -> List[Break]:
    if value is None:
        return []
    if isinstance(value, str):
        value = json.loads(value)
    return [Break.from_dict(b) for b in value]


def _rows_to_pickers(picker_rows, hourly_rows) -> List[Picker]:
    """Assemble Picker objects from picker rows and their hourly rows."""
    pickers_df = pd.DataFrame(picker_rows, columns=PICKER_COLUMNS)
    hourly_df = pd.DataFrame(hourly_rows, columns=HOURLY_COLUMNS)

    hourly_by_picker = {
        picker_id: [
            HourlyData(
                hour=int(row.hour),
                lines=int(row.lines),
                target=int(row.target),
                efficiency=float(row.efficiency)
            )
            for row in group.sort_values("hour").itertuples(index=False)
        ]
        for picker_id, group in hourly_df.groupby("picker_id")
    }

    pickers = []
    for row in pickers_df.itertuples(index=False):
        pickers.append(Picker(
            id=str(row.id),
            name=row.name,
            target=int(row.target),
            status=row.status,
            hourly_data=hourly_by_picker.get(row.id, []),
            start_time=row.start_time,
            end_time=row.end_time,
            breaks=_parse_breaks(row.breaks)
        ))
    return pickers


def ensure_schema():
    """Create the picker tables if they do not exist."""
    statements = [(sql, []) for sql in picker_query_builder.build_schema_statements()]
    try:
        _execute_writes(statements)
        logger.info("Picker store schema ready")
    except Exception as e:
        logger.error(f"Failed to create picker store schema: {e}", exc_info=True)
        raise


def _load_pickers(picker_ids: Optional[List[str]] = None) -> List[Picker]:
    """Query pickers and their hourly rows; database errors propagate."""
    with get_picker_connection() as conn:
        cursor = conn.cursor()

        query, parameters = picker_query_builder.build_fetch_pickers_query(picker_ids)
        cursor.execute(query, parameters)
        picker_rows = cursor.fetchall()

        if not picker_rows:
            logger.info("No pickers found in store")
            return []

        query, parameters = picker_query_builder.build_fetch_hourly_query(
            [row[0] for row in picker_rows]
        )
        cursor.execute(query, parameters)
        hourly_rows = cursor.fetchall()

    pickers = _rows_to_pickers(picker_rows, hourly_rows)
    logger.info(f"Successfully fetched {len(pickers)} pickers with {len(hourly_rows)} hourly records")
    return pickers


def fetch_pickers(picker_ids: Optional[List[str]] = None) -> List[Picker]:
    """
    Load pickers with their hourly records.

    Args:
        picker_ids: Optional IDs to load; all pickers when omitted

    Returns:
        List of Picker ordered by id; empty list on any database error
    """
    logger.info(f"Fetching pickers: {picker_ids if picker_ids is not None else 'all'}")

    try:
        return _load_pickers(picker_ids)
    except Exception as e:
        logger.error(f"Error fetching pickers: {e}", exc_info=True)
        return []


def fetch_picker(picker_id: str) -> Optional[Picker]:
    """
    Load one picker, or None if it is not in the store.

    Raises:
        psycopg2.Error: If the store is unavailable
    """
    pickers = _load_pickers([picker_id])
    return pickers[0] if pickers else None


def _require_picker(picker_id: str) -> Picker:
    picker = fetch_picker(picker_id)
    if picker is None:
        logger.warning(f"Picker {picker_id} not found in store")
        raise PickerNotFoundError(picker_id)
    return picker


def save_picker(picker: Picker) -> Picker:
    """
    Upsert a picker and replace its hourly rows in one transaction.

    Raises:
        ValueError: If the picker ID is not storable
        psycopg2.Error: On database failure
    """
    try:
        statements = [picker_query_builder.build_upsert_picker_query(picker)]
        statements.extend(picker_query_builder.build_replace_hourly_queries(picker))
        _execute_writes(statements)
        logger.info(f"Saved picker {picker.id} ({picker.name}) with {len(picker.hourly_data)} hourly records")
        return picker
    except Exception as e:
        logger.error(f"Failed to save picker {picker.id}: {e}", exc_info=True)
        raise


def delete_picker(picker_id: str) -> bool:
    """
    Delete a picker (hourly rows cascade).

    Returns:
        bool: True if a row was deleted
    """
    try:
        deleted = _execute_writes([picker_query_builder.build_delete_picker_query(picker_id)]) > 0
        if deleted:
            logger.info(f"Deleted picker {picker_id}")
        else:
            logger.warning(f"Delete requested for unknown picker {picker_id}")
        return deleted
    except Exception as e:
        logger.error(f"Failed to delete picker {picker_id}: {e}", exc_info=True)
        raise


def record_performance(picker_id: str, hour: int, lines: int) -> Picker:
    """
    Record the lines a picker completed in one hour and persist the result.

    Args:
        picker_id: Picker to update
        hour: Working hour (9-17)
        lines: Lines completed in that hour

    Returns:
        The updated Picker

    Raises:
        PickerNotFoundError: If the picker is not in the store
        ValueError: If hour or lines is invalid
        psycopg2.Error: If the store is unavailable
    """
    picker = _require_picker(picker_id)
    record_hourly_lines(picker, hour, lines)
    return save_picker(picker)


def update_picker(
    picker_id: str,
    name: Optional[str] = None,
    target: Optional[int] = None,
    status: Optional[str] = None
) -> Picker:
    """
    Change a stored picker's name, daily target or status.

    Raises:
        PickerNotFoundError: If the picker is not in the store
        ValueError: If a new value is invalid
    """
    picker = _require_picker(picker_id)
    update_picker_details(picker, name=name, target=target, status=status)
    return save_picker(picker)


def seed_if_empty() -> List[Picker]:
    """
    Insert the default roster when the store has no pickers.

    Returns:
        The seeded pickers, or an empty list if the store already had data
    """
    try:
        with get_picker_connection() as conn:
            cursor = conn.cursor()
            query, parameters = picker_query_builder.build_count_pickers_query()
            cursor.execute(query, parameters)
            count = cursor.fetchone()[0]
    except Exception as e:
        logger.error(f"Failed to count pickers: {e}", exc_info=True)
        raise

    if count > 0:
        logger.debug(f"Picker store already holds {count} pickers; skipping seed")
        return []

    seeded = seed_default_pickers()
    for picker in seeded:
        save_picker(picker)
    logger.info(f"Seeded picker store with {len(seeded)} default pickers")
    return seeded
