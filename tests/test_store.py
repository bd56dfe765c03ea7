"""
Tests for the picker store and its query builder, using mock psycopg2
connections.
"""

from contextlib import contextmanager
from unittest.mock import MagicMock

import psycopg2
import pytest
from psycopg2.extras import Json

from core.db import store
from core.db.queries import picker_query_builder
from core.pickers.models import Picker, create_picker


@pytest.fixture
def db(monkeypatch):
    """Replace the pooled connection with a mock; returns (connection, cursor)."""
    conn = MagicMock()
    cursor = MagicMock()
    conn.cursor.return_value = cursor

    @contextmanager
    def fake_connection():
        yield conn

    monkeypatch.setattr(store, "get_picker_connection", fake_connection)
    return conn, cursor


PICKER_ROWS = [
    ('1', 'Ann', 100, 'active', '09:00', '17:00', []),
    ('2', 'Bo', 80, 'break', '09:00', '17:00',
     '[{"startTime": "12:00", "endTime": "13:00", "type": "lunch"}]'),
]

HOURLY_ROWS = [
    ('1', 10, 5, 13, 5 / 13),
    ('1', 9, 7, 13, 7 / 13),
    ('2', 9, 3, 10, 0.3),
]


class TestFetchPickers:

    def test_assembles_pickers_with_hourly_rows(self, db):
        _, cursor = db
        cursor.fetchall.side_effect = [PICKER_ROWS, HOURLY_ROWS]

        pickers = store.fetch_pickers()

        assert [p.id for p in pickers] == ['1', '2']
        assert pickers[0].performance == 12
        assert [h.hour for h in pickers[0].hourly_data] == [9, 10]
        assert pickers[1].status == 'break'
        assert pickers[1].breaks[0].type == 'lunch'

    def test_hourly_query_uses_fetched_ids(self, db):
        _, cursor = db
        cursor.fetchall.side_effect = [PICKER_ROWS, []]

        pickers = store.fetch_pickers()

        _, parameters = cursor.execute.call_args_list[1][0]
        assert parameters == [['1', '2']]
        assert all(p.hourly_data == [] for p in pickers)

    def test_empty_store(self, db):
        _, cursor = db
        cursor.fetchall.return_value = []
        assert store.fetch_pickers() == []
        assert cursor.execute.call_count == 1

    def test_database_error_returns_empty(self, db, caplog):
        _, cursor = db
        cursor.execute.side_effect = psycopg2.OperationalError("server closed the connection")
        assert store.fetch_pickers() == []
        assert "Error fetching pickers" in caplog.text

    def test_fetch_picker(self, db):
        _, cursor = db
        cursor.fetchall.side_effect = [PICKER_ROWS[:1], HOURLY_ROWS[:2]]
        picker = store.fetch_picker('1')
        assert picker.name == 'Ann'

    def test_fetch_missing_picker(self, db):
        _, cursor = db
        cursor.fetchall.return_value = []
        assert store.fetch_picker('nobody') is None

    def test_fetch_picker_raises_when_store_unavailable(self, db):
        _, cursor = db
        cursor.execute.side_effect = psycopg2.OperationalError("could not connect to server")
        with pytest.raises(psycopg2.OperationalError):
            store.fetch_picker('1')


class TestWrites:

    def test_save_picker_upserts_and_replaces_hours(self, db):
        conn, cursor = db
        picker = create_picker('Ann', 100, picker_id='a1')

        store.save_picker(picker)

        # upsert + delete hours + one insert per shift hour
        assert cursor.execute.call_count == 11
        upsert_sql, upsert_params = cursor.execute.call_args_list[0][0]
        assert "ON CONFLICT (id)" in upsert_sql
        assert isinstance(upsert_params[6], Json)
        assert upsert_params[6].adapted == []
        conn.commit.assert_called_once()

    def test_performance_not_written(self, db):
        _, cursor = db
        store.save_picker(create_picker('Ann', 100, picker_id='a1'))
        for call in cursor.execute.call_args_list:
            assert "performance" not in call[0][0]

    def test_save_failure_rolls_back_and_raises(self, db):
        conn, cursor = db
        cursor.execute.side_effect = psycopg2.IntegrityError("violates constraint")

        with pytest.raises(psycopg2.IntegrityError):
            store.save_picker(create_picker('Ann', 100, picker_id='a1'))

        conn.rollback.assert_called_once()
        conn.commit.assert_not_called()

    def test_invalid_id_rejected_before_database(self, db):
        _, cursor = db
        with pytest.raises(ValueError, match="Invalid picker ID"):
            store.save_picker(Picker(id='bad id!', name='Ann', target=100))
        cursor.execute.assert_not_called()

    def test_delete_picker(self, db):
        _, cursor = db
        cursor.rowcount = 1
        assert store.delete_picker('1') is True
        cursor.rowcount = 0
        assert store.delete_picker('1') is False

    def test_ensure_schema(self, db):
        conn, cursor = db
        store.ensure_schema()
        statements = [call[0][0] for call in cursor.execute.call_args_list]
        assert any("CREATE TABLE IF NOT EXISTS pickers" in s for s in statements)
        assert any("ON DELETE CASCADE" in s for s in statements)
        conn.commit.assert_called_once()


class TestRecordPerformance:

    def test_load_record_save(self, db, monkeypatch):
        _, cursor = db
        picker = create_picker('Ann', 100, picker_id='a1')
        monkeypatch.setattr(store, "fetch_picker", lambda picker_id: picker)

        updated = store.record_performance('a1', 11, 17)

        assert updated.lines_for(11) == 17
        assert updated.performance == 17
        inserted = [
            call[0][1] for call in cursor.execute.call_args_list
            if "INSERT INTO picker_hourly" in call[0][0]
        ]
        assert ['a1', 11, 17, 13, 17 / 13] in inserted

    def test_unknown_picker(self, db, monkeypatch):
        monkeypatch.setattr(store, "fetch_picker", lambda picker_id: None)
        with pytest.raises(store.PickerNotFoundError):
            store.record_performance('ghost', 10, 5)

    def test_unreachable_store_is_not_reported_as_missing_picker(self, db):
        conn, cursor = db
        cursor.execute.side_effect = psycopg2.OperationalError("could not connect to server")

        with pytest.raises(psycopg2.OperationalError):
            store.record_performance('a1', 10, 5)

        conn.commit.assert_not_called()

    def test_invalid_hour_not_saved(self, db, monkeypatch):
        _, cursor = db
        monkeypatch.setattr(store, "fetch_picker", lambda picker_id: create_picker('Ann', 100, picker_id='a1'))
        with pytest.raises(ValueError):
            store.record_performance('a1', 20, 5)
        cursor.execute.assert_not_called()


class TestUpdatePicker:

    def test_load_update_save(self, db, monkeypatch):
        _, cursor = db
        picker = create_picker('Ann', 100, picker_id='a1')
        monkeypatch.setattr(store, "fetch_picker", lambda picker_id: picker)

        updated = store.update_picker('a1', name='Anna', target=160, status='break')

        assert (updated.name, updated.target, updated.status) == ('Anna', 160, 'break')
        _, upsert_params = cursor.execute.call_args_list[0][0]
        assert upsert_params[:4] == ['a1', 'Anna', 160, 'break']

    def test_unknown_picker(self, db, monkeypatch):
        monkeypatch.setattr(store, "fetch_picker", lambda picker_id: None)
        with pytest.raises(store.PickerNotFoundError):
            store.update_picker('ghost', status='break')

    def test_invalid_target_not_saved(self, db, monkeypatch):
        _, cursor = db
        monkeypatch.setattr(store, "fetch_picker", lambda picker_id: create_picker('Ann', 100, picker_id='a1'))
        with pytest.raises(ValueError, match="positive"):
            store.update_picker('a1', target=0)
        cursor.execute.assert_not_called()


class TestSeedIfEmpty:

    def test_seeds_empty_store(self, db):
        conn, cursor = db
        cursor.fetchone.return_value = (0,)

        seeded = store.seed_if_empty()

        assert [p.name for p in seeded] == ['John Smith', 'Sarah Johnson', 'Mike Wilson']
        assert conn.commit.call_count == 3

    def test_leaves_populated_store(self, db):
        conn, cursor = db
        cursor.fetchone.return_value = (4,)
        assert store.seed_if_empty() == []
        conn.commit.assert_not_called()


class TestQueryBuilder:

    @pytest.mark.parametrize("picker_id,valid", [
        ('1', True), ('a1b2-c_3', True), ('', False), ('x' * 65, False),
        ("1; DROP TABLE pickers", False), (7, False),
    ])
    def test_validate_picker_id(self, picker_id, valid):
        assert picker_query_builder.validate_picker_id(picker_id) is valid

    def test_fetch_all(self):
        query, parameters = picker_query_builder.build_fetch_pickers_query()
        assert "FROM pickers" in query
        assert parameters == []

    def test_fetch_filters_invalid_ids(self):
        query, parameters = picker_query_builder.build_fetch_pickers_query(['1', 'bad id'])
        assert "ANY(%s)" in query
        assert parameters == [['1']]

    def test_fetch_with_no_valid_ids(self):
        query, parameters = picker_query_builder.build_fetch_pickers_query(['bad id'])
        assert "1=0" in query
        assert parameters == []

    def test_hourly_rows_outside_shift_skipped(self):
        picker = create_picker('Ann', 100, picker_id='a1')
        picker.hourly_data[0].hour = 8
        statements = picker_query_builder.build_replace_hourly_queries(picker)
        # delete + 8 valid hours
        assert len(statements) == 9
