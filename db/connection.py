"""Database connection management.

get_db() returns a connection with WAL mode, Row factory, and foreign keys.
Connections are cached per-thread for safety.
"""

from __future__ import annotations

import sqlite3
import threading
from pathlib import Path

import config

from .schema import (
    CURRENCY_CODES,
    HUNT_STATUSES,
    PERSON_INTERACTION_TYPES,
    ROLE_INTERACTION_TYPES,
    SCHEMA_SQL,
)

_local = threading.local()


def get_db(db_path: str | Path | None = None) -> sqlite3.Connection:
    """Return a SQLite connection (cached per-thread).

    Args:
        db_path: Override the configured database path. Useful for testing.
    """
    path = str(db_path or config.db_path())
    conn = getattr(_local, "conn", None)

    # Return cached connection if same path and still open
    if conn is not None and getattr(_local, "db_path", None) == path:
        try:
            conn.execute("SELECT 1")
            return conn
        except sqlite3.ProgrammingError:
            pass  # connection was closed, create a new one

    conn = sqlite3.connect(path)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute("PRAGMA foreign_keys=ON")

    _local.conn = conn
    _local.db_path = path
    return conn


def close_db() -> None:
    """Close the thread-local connection if it exists."""
    conn = getattr(_local, "conn", None)
    if conn is not None:
        conn.close()
        _local.conn = None
        _local.db_path = None


def seed_lookups(conn: sqlite3.Connection) -> None:
    """Insert the default hunt statuses, interaction types and currencies.

    Existing rows are left alone, so this is safe to run on every start.
    """
    conn.executemany(
        "INSERT OR IGNORE INTO hunt_status (name) VALUES (?)",
        [(name,) for name in HUNT_STATUSES],
    )
    conn.executemany(
        "INSERT OR IGNORE INTO interaction_type_role (name) VALUES (?)",
        [(name,) for name in ROLE_INTERACTION_TYPES],
    )
    conn.executemany(
        "INSERT OR IGNORE INTO interaction_type_person (name) VALUES (?)",
        [(name,) for name in PERSON_INTERACTION_TYPES],
    )
    conn.executemany(
        "INSERT OR IGNORE INTO currency (code) VALUES (?)",
        [(code,) for code in CURRENCY_CODES],
    )
    conn.commit()


def init_db(db_path: str | Path | None = None) -> sqlite3.Connection:
    """Initialize the database schema and lookups. Returns the connection.

    Idempotent: all DDL uses IF NOT EXISTS and seeding skips existing rows.
    """
    conn = get_db(db_path)
    conn.executescript(SCHEMA_SQL)
    seed_lookups(conn)
    return conn
