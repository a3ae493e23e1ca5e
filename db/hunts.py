"""CRUD operations for the hunt table."""

from __future__ import annotations

import sqlite3

from .connection import get_db
from .models import Hunt
from .roles import delete_roles

_SELECT_HUNTS = """
    SELECT h.*,
           s.name AS status
      FROM hunt h
      JOIN hunt_status s ON h.hunt_status_id = s.id
"""

_UPDATABLE = {"name", "hunt_status_id", "notes", "start_date", "end_date"}


def create_hunt(
    name: str,
    hunt_status_id: int,
    start_date: str,
    *,
    end_date: str | None = None,
    notes: str | None = None,
    db: sqlite3.Connection | None = None,
) -> Hunt:
    conn = db or get_db()
    cursor = conn.execute(
        """
        INSERT INTO hunt (name, hunt_status_id, start_date, end_date, notes)
        VALUES (?, ?, ?, ?, ?)
        RETURNING id
        """,
        (name, hunt_status_id, start_date, end_date, notes),
    )
    hunt_id = cursor.fetchone()["id"]
    conn.commit()
    return get_hunt(hunt_id, db=conn)


def get_hunt(hunt_id: int, *, db: sqlite3.Connection | None = None) -> Hunt | None:
    """Fetch a single hunt by ID (with status name)."""
    conn = db or get_db()
    row = conn.execute(_SELECT_HUNTS + " WHERE h.id = ?", (hunt_id,)).fetchone()
    return Hunt.from_row(row) if row else None


def list_hunts(*, db: sqlite3.Connection | None = None) -> list[Hunt]:
    """List hunts, most recently started first."""
    conn = db or get_db()
    rows = conn.execute(
        _SELECT_HUNTS + " ORDER BY h.start_date DESC, h.id DESC"
    ).fetchall()
    return [Hunt.from_row(r) for r in rows]


def list_hunt_summaries(*, db: sqlite3.Connection | None = None) -> list[Hunt]:
    """Like list_hunts(), with role_count filled in."""
    conn = db or get_db()
    rows = conn.execute(
        """
        SELECT h.*,
               s.name AS status,
               COUNT(r.id) AS role_count
          FROM hunt h
          JOIN hunt_status s ON h.hunt_status_id = s.id
          LEFT JOIN role r   ON r.hunt_id = h.id
         GROUP BY h.id
         ORDER BY h.start_date DESC, h.id DESC
        """
    ).fetchall()
    return [Hunt.from_row(r) for r in rows]


def latest_hunt_id(*, db: sqlite3.Connection | None = None) -> int | None:
    """ID of the hunt with the latest start date (ties: highest id)."""
    conn = db or get_db()
    row = conn.execute(
        "SELECT id FROM hunt ORDER BY start_date DESC, id DESC LIMIT 1"
    ).fetchone()
    return row["id"] if row else None


def update_hunt(
    hunt_id: int, updates: dict, *, db: sqlite3.Connection | None = None
) -> Hunt | None:
    """Apply column updates to a hunt. Returns the updated hunt or None."""
    unknown = set(updates) - _UPDATABLE
    if unknown:
        raise ValueError(f"Cannot update hunt columns: {sorted(unknown)}")
    conn = db or get_db()
    if updates:
        assignments = ", ".join(f"{column} = ?" for column in updates)
        cursor = conn.execute(
            f"UPDATE hunt SET {assignments} WHERE id = ?",
            (*updates.values(), hunt_id),
        )
        conn.commit()
        if cursor.rowcount == 0:
            return None
    return get_hunt(hunt_id, db=conn)


def delete_hunt(
    hunt_id: int, *, db: sqlite3.Connection | None = None
) -> list[str] | None:
    """Delete a hunt and all of its roles.

    Returns the description document names to unlink, or None if the hunt
    did not exist.
    """
    conn = db or get_db()
    if conn.execute("SELECT 1 FROM hunt WHERE id = ?", (hunt_id,)).fetchone() is None:
        return None
    role_ids = [
        r["id"]
        for r in conn.execute("SELECT id FROM role WHERE hunt_id = ?", (hunt_id,)).fetchall()
    ]
    documents = delete_roles(role_ids, conn)
    conn.execute("DELETE FROM hunt WHERE id = ?", (hunt_id,))
    conn.commit()
    return documents
