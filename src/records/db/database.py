"""SQLite connection and schema management.

Provides connection management and schema initialization for the
academic records store.
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Generator

import structlog

logger = structlog.get_logger(__name__)

# Default database location
DEFAULT_DB_PATH = Path("data/data_store.db")


def _connect(db_path: Path, isolation_level: str | None = "") -> sqlite3.Connection:
    # Ensure directory exists
    db_path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(db_path, isolation_level=isolation_level)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


@contextmanager
def get_db(db_path: Path | None = None) -> Generator[sqlite3.Connection, None, None]:
    """Get database connection as context manager.

    Commits on clean exit, rolls back if the block raises.

    Yields:
        SQLite connection with row factory set to sqlite3.Row

    Example:
        with get_db(path) as conn:
            rows = conn.execute("SELECT * FROM students").fetchall()
    """
    conn = _connect(db_path or DEFAULT_DB_PATH)
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


@contextmanager
def transaction(db_path: Path | None = None) -> Generator[sqlite3.Connection, None, None]:
    """Run a block inside one BEGIN IMMEDIATE ... COMMIT transaction.

    The write lock is taken up front; any exception rolls everything back
    and leaves the previous durable state untouched.
    """
    conn = _connect(db_path or DEFAULT_DB_PATH, isolation_level=None)
    try:
        create_schema(conn)
        conn.execute("BEGIN IMMEDIATE")
        try:
            yield conn
        except Exception:
            conn.execute("ROLLBACK")
            raise
        conn.execute("COMMIT")
    finally:
        conn.close()


def create_schema(conn: sqlite3.Connection) -> None:
    """Create database schema.

    Uses IF NOT EXISTS for idempotency.
    """
    conn.executescript(
        """
        CREATE TABLE IF NOT EXISTS groups (
            id INTEGER PRIMARY KEY,
            name TEXT NOT NULL
        );

        -- group_id NULL means "no group"
        CREATE TABLE IF NOT EXISTS students (
            id INTEGER PRIMARY KEY,
            name TEXT NOT NULL,
            group_id INTEGER,
            FOREIGN KEY(group_id) REFERENCES groups(id)
        );

        CREATE TABLE IF NOT EXISTS subjects (
            id INTEGER PRIMARY KEY,
            name TEXT NOT NULL
        );

        CREATE TABLE IF NOT EXISTS grades (
            id INTEGER PRIMARY KEY,
            student_id INTEGER NOT NULL,
            subject_id INTEGER NOT NULL,
            value INTEGER NOT NULL,
            attempt INTEGER NOT NULL,
            FOREIGN KEY(student_id) REFERENCES students(id),
            FOREIGN KEY(subject_id) REFERENCES subjects(id)
        );
        """
    )


def init_db(db_path: Path | None = None) -> None:
    """Initialize database with schema.

    Creates the database file and all required tables if they don't exist.
    """
    db_path = db_path or DEFAULT_DB_PATH
    with get_db(db_path) as conn:
        create_schema(conn)

    logger.info("database.initialized", path=str(db_path))
