"""Snapshot persistence for the DataStore.

- load_store: read all four tables, drop orphans, recompute id counters
- save_store: replace the whole durable content in one transaction
"""

from __future__ import annotations

import sqlite3
from pathlib import Path

import structlog

from records.core.entity_store import DataStore
from records.core.errors import PersistenceError
from records.core.models import Grade, Group, Student, Subject
from records.db.database import create_schema, get_db, transaction

logger = structlog.get_logger(__name__)


def load_store(db_path: Path) -> tuple[DataStore, bool]:
    """Load the store from SQLite.

    Students pointing at a missing group lose their group; grades pointing
    at a missing student or subject are dropped.

    Args:
        db_path: Path to database file (created if missing)

    Returns:
        Tuple of (store, existed) where existed tells whether the database
        file was present before this call

    Raises:
        PersistenceError: If the database cannot be opened or read
    """
    existed = db_path.exists()
    try:
        with get_db(db_path) as conn:
            create_schema(conn)
            group_rows = conn.execute("SELECT id, name FROM groups ORDER BY id").fetchall()
            student_rows = conn.execute(
                "SELECT id, name, group_id FROM students ORDER BY id"
            ).fetchall()
            subject_rows = conn.execute("SELECT id, name FROM subjects ORDER BY id").fetchall()
            grade_rows = conn.execute(
                "SELECT id, student_id, subject_id, value, attempt FROM grades ORDER BY id"
            ).fetchall()
    except (sqlite3.Error, OSError) as e:
        logger.warning("store.load_failed", path=str(db_path), error=str(e))
        raise PersistenceError(f"Не удалось загрузить данные из {db_path}: {e}") from e

    groups = [Group(id=row["id"], name=row["name"] or "") for row in group_rows]
    group_ids = {g.id for g in groups}

    students = []
    for row in student_rows:
        group_id = row["group_id"]
        # 0 is the legacy "no group" marker
        if group_id == 0 or (group_id is not None and group_id not in group_ids):
            group_id = None
        students.append(Student(id=row["id"], name=row["name"] or "", group_id=group_id))

    subjects = [Subject(id=row["id"], name=row["name"] or "") for row in subject_rows]

    student_ids = {s.id for s in students}
    subject_ids = {s.id for s in subjects}
    grades = [
        Grade(
            id=row["id"],
            student_id=row["student_id"],
            subject_id=row["subject_id"],
            value=row["value"],
            attempt=row["attempt"],
        )
        for row in grade_rows
        if row["student_id"] in student_ids and row["subject_id"] in subject_ids
    ]

    dropped = len(grade_rows) - len(grades)
    if dropped:
        logger.warning("store.orphan_grades_dropped", count=dropped)

    store = DataStore.from_records(groups, subjects, students, grades)
    logger.info(
        "store.loaded",
        path=str(db_path),
        existed=existed,
        groups=len(groups),
        students=len(students),
        subjects=len(subjects),
        grades=len(grades),
    )
    return store, existed


def save_store(store: DataStore, db_path: Path) -> bool:
    """Replace the durable content with the store's current snapshot.

    Clears all four tables and reinserts every record inside a single
    transaction. On any failure the transaction is rolled back and the
    previous durable state is kept.

    Returns:
        True if saved, False otherwise
    """
    try:
        with transaction(db_path) as conn:
            conn.execute("DELETE FROM grades")
            conn.execute("DELETE FROM students")
            conn.execute("DELETE FROM subjects")
            conn.execute("DELETE FROM groups")
            conn.executemany(
                "INSERT INTO groups(id, name) VALUES (?, ?)",
                [(g.id, g.name) for g in store.groups],
            )
            conn.executemany(
                "INSERT INTO students(id, name, group_id) VALUES (?, ?, ?)",
                [(s.id, s.name, s.group_id) for s in store.students],
            )
            conn.executemany(
                "INSERT INTO subjects(id, name) VALUES (?, ?)",
                [(s.id, s.name) for s in store.subjects],
            )
            conn.executemany(
                "INSERT INTO grades(id, student_id, subject_id, value, attempt) "
                "VALUES (?, ?, ?, ?, ?)",
                [(g.id, g.student_id, g.subject_id, g.value, g.attempt) for g in store.grades],
            )
    except (sqlite3.Error, OSError) as e:
        logger.warning("store.save_failed", path=str(db_path), error=str(e))
        return False

    logger.debug("store.saved", path=str(db_path))
    return True
