"""
SQLite database integration and simple migration system.

This module provides functions for obtaining a database connection
(``get_connection``), applying migrations on application start
(``init_db``) and a couple of helpers for the values every table
shares: opaque text identifiers (``new_id``) and UTC timestamps
(``utcnow`` / ``to_utc_iso``).

The migration mechanism stores applied migration versions in the
``migrations`` table and executes new migrations in order.

Timestamps are stored as ISO‑8601 strings in UTC with microsecond
precision so that lexical ordering in SQL matches chronological
ordering.  Feed pagination relies on this.
"""

import os
import sqlite3
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator

from .config import settings


MIGRATIONS: list[tuple[int, str]] = [
    # Migration 1: users, events and the attendance relation
    (
        1,
        """
        CREATE TABLE IF NOT EXISTS users (
            id TEXT PRIMARY KEY,
            name TEXT NOT NULL UNIQUE,
            email TEXT NOT NULL UNIQUE,
            password TEXT NOT NULL,
            profile_picture TEXT NOT NULL,
            bio TEXT,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        );

        CREATE TABLE IF NOT EXISTS events (
            id TEXT PRIMARY KEY,
            name TEXT NOT NULL,
            description TEXT NOT NULL,
            location_name TEXT,
            date TEXT NOT NULL,
            type TEXT NOT NULL CHECK (type IN ('VIRTUAL', 'IN_PERSON')),
            images TEXT NOT NULL DEFAULT '[]',
            tags TEXT NOT NULL DEFAULT '[]',
            coordinator_id TEXT NOT NULL,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL,
            FOREIGN KEY(coordinator_id) REFERENCES users(id)
        );

        -- One row per (user, event); the composite key gives the relation
        -- set semantics.
        CREATE TABLE IF NOT EXISTS attendance (
            user_id TEXT NOT NULL,
            event_id TEXT NOT NULL,
            created_at TEXT NOT NULL,
            PRIMARY KEY (user_id, event_id),
            FOREIGN KEY(user_id) REFERENCES users(id),
            FOREIGN KEY(event_id) REFERENCES events(id)
        );
        """,
    ),
    # Migration 2: indices backing the two feed orders and attendee counts
    (
        2,
        """
        CREATE INDEX IF NOT EXISTS idx_events_created_at ON events(created_at, id);
        CREATE INDEX IF NOT EXISTS idx_events_date ON events(date, id);
        CREATE INDEX IF NOT EXISTS idx_events_coordinator_id ON events(coordinator_id);
        CREATE INDEX IF NOT EXISTS idx_attendance_event_id ON attendance(event_id);
        """,
    ),
]


def get_database_path() -> str:
    """Compute the path to the SQLite database file.

    If ``settings.database_url`` is an absolute path, use it directly.
    Otherwise resolve it relative to the project root.
    """
    db_url = settings.database_url
    if os.path.isabs(db_url):
        return db_url
    base_dir = Path(__file__).resolve().parent.parent.parent.parent
    return str((base_dir / db_url).resolve())


def get_connection() -> sqlite3.Connection:
    """Create and return a new SQLite connection.

    Rows are returned as ``sqlite3.Row`` so columns can be accessed by
    name.  Foreign key enforcement is switched on for the lifetime of
    the connection; SQLite leaves it off by default.
    """
    conn = sqlite3.connect(get_database_path(), timeout=10)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


@contextmanager
def get_cursor() -> Iterator[sqlite3.Cursor]:
    """Context manager that yields a cursor and closes the connection on exit."""
    conn = get_connection()
    try:
        yield conn.cursor()
        conn.commit()
    finally:
        conn.close()


def init_db() -> None:
    """Initialise the database and apply pending migrations.

    Creates the ``migrations`` table if it does not exist, checks the
    current schema version, and applies any migrations from
    ``MIGRATIONS`` with a higher version number.
    """
    with get_cursor() as cursor:
        cursor.execute(
            "CREATE TABLE IF NOT EXISTS migrations (version INTEGER PRIMARY KEY)"
        )
        cursor.execute("SELECT MAX(version) as version FROM migrations")
        row = cursor.fetchone()
        current_version = row["version"] if row and row["version"] is not None else 0

        for version, sql in MIGRATIONS:
            if version > current_version:
                cursor.executescript(sql)
                cursor.execute(
                    "INSERT INTO migrations (version) VALUES (?)", (version,)
                )
                current_version = version


def new_id() -> str:
    """Return a fresh opaque identifier for a row."""
    return uuid.uuid4().hex


def to_utc_iso(value: datetime) -> str:
    """Normalise a datetime to the stored UTC string form.

    Naive datetimes are taken to be UTC already.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="microseconds")


def utcnow() -> str:
    """Current time in the stored UTC string form."""
    return to_utc_iso(datetime.now(timezone.utc))
