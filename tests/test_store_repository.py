"""Tests for SQLite persistence of the store."""

import sqlite3

import pytest

from records.core.errors import PersistenceError
from records.db.database import create_schema, init_db
from records.db.store_repository import load_store, save_store


def _raw_insert(db_file, statements):
    """Write rows directly, bypassing foreign key checks."""
    init_db(db_file)
    conn = sqlite3.connect(db_file)
    try:
        for sql, params in statements:
            conn.execute(sql, params)
        conn.commit()
    finally:
        conn.close()


class TestRoundTrip:
    """Tests for save then load."""

    def test_save_and_load_same_content(self, sample_store, db_file):
        """A reload yields the same records and counters."""
        assert save_store(sample_store, db_file) is True
        loaded, existed = load_store(db_file)
        assert existed
        assert loaded.snapshot() == sample_store.snapshot()
        assert loaded.next_grade_id == sample_store.next_grade_id

    def test_missing_database_gives_empty_store(self, db_file):
        store, existed = load_store(db_file)
        assert not existed
        assert store.is_empty()
        assert db_file.exists()

    def test_save_replaces_previous_content(self, sample_store, db_file):
        save_store(sample_store, db_file)
        sample_store.delete_student(1)
        save_store(sample_store, db_file)
        loaded, _ = load_store(db_file)
        assert len(loaded.students) == 3
        assert len(loaded.grades) == 3

    def test_no_group_stored_as_null(self, sample_store, db_file):
        save_store(sample_store, db_file)
        conn = sqlite3.connect(db_file)
        try:
            row = conn.execute("SELECT group_id FROM students WHERE id = 4").fetchone()
        finally:
            conn.close()
        assert row[0] is None


class TestLoadRepairs:
    """Tests for orphan handling on load."""

    def test_orphan_grades_dropped(self, db_file):
        _raw_insert(
            db_file,
            [
                ("INSERT INTO students(id, name) VALUES (?, ?)", (1, "Ann")),
                ("INSERT INTO subjects(id, name) VALUES (?, ?)", (1, "Math")),
                ("INSERT INTO grades VALUES (?, ?, ?, ?, ?)", (1, 1, 1, 4, 1)),
                ("INSERT INTO grades VALUES (?, ?, ?, ?, ?)", (2, 9, 1, 4, 1)),
                ("INSERT INTO grades VALUES (?, ?, ?, ?, ?)", (5, 1, 9, 4, 1)),
            ],
        )
        store, _ = load_store(db_file)
        assert [g.id for g in store.grades] == [1]
        assert store.next_grade_id == 2

    def test_dangling_and_legacy_group_reset(self, db_file):
        _raw_insert(
            db_file,
            [
                ("INSERT INTO groups(id, name) VALUES (?, ?)", (1, "G")),
                ("INSERT INTO students VALUES (?, ?, ?)", (1, "Ann", 1)),
                ("INSERT INTO students VALUES (?, ?, ?)", (2, "Bob", 7)),
                ("INSERT INTO students VALUES (?, ?, ?)", (3, "Eve", 0)),
            ],
        )
        store, _ = load_store(db_file)
        assert [s.group_id for s in store.students] == [1, None, None]
        assert store.next_student_id == 4


class TestFailures:
    """Tests for unreadable or unwritable databases."""

    def test_unreadable_database_raises(self, tmp_path):
        bad = tmp_path / "not_a_db.db"
        bad.write_bytes(b"this is not sqlite" * 100)
        with pytest.raises(PersistenceError):
            load_store(bad)

    def test_save_failure_returns_false(self, sample_store, tmp_path):
        """An unwritable location is reported, not raised."""
        blocker = tmp_path / "blocker"
        blocker.write_text("file, not a directory")
        assert save_store(sample_store, blocker / "data_store.db") is False

    def test_failed_save_keeps_previous_state(self, sample_store, db_file, monkeypatch):
        """A failure inside the transaction rolls everything back."""
        save_store(sample_store, db_file)
        before, _ = load_store(db_file)

        sample_store.delete_student(1)
        real_schema = create_schema
        calls = []

        def failing_schema(conn):
            real_schema(conn)
            calls.append(conn)
            conn.execute(
                "CREATE TEMP TRIGGER boom BEFORE INSERT ON grades "
                "BEGIN SELECT RAISE(ABORT, 'boom'); END"
            )

        monkeypatch.setattr("records.db.database.create_schema", failing_schema)
        assert save_store(sample_store, db_file) is False
        assert calls

        after, _ = load_store(db_file)
        assert after.snapshot() == before.snapshot()
