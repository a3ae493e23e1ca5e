"""CRUD operations for the person table and person tags."""

from __future__ import annotations

import sqlite3

from .connection import get_db
from .models import Person, Tag

_SELECT_PEOPLE = """
    SELECT p.*,
           c.name AS company_name
      FROM person p
      JOIN company c ON p.company_id = c.id
"""

_NAME_ORDER = "p.first_name, p.last_name, p.id"

_UPDATABLE = {
    "company_id",
    "first_name",
    "last_name",
    "title",
    "phone",
    "email",
    "linkedin",
    "notes",
}


def create_person(
    company_id: int,
    first_name: str,
    last_name: str,
    *,
    title: str | None = None,
    email: str | None = None,
    phone: str | None = None,
    linkedin: str | None = None,
    notes: str | None = None,
    db: sqlite3.Connection | None = None,
) -> Person:
    conn = db or get_db()
    cursor = conn.execute(
        """
        INSERT INTO person (company_id, first_name, last_name, title, email, phone, linkedin, notes)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?)
        RETURNING id
        """,
        (company_id, first_name, last_name, title, email, phone, linkedin, notes),
    )
    person_id = cursor.fetchone()["id"]
    conn.commit()
    return get_person(person_id, db=conn)


def get_person(person_id: int, *, db: sqlite3.Connection | None = None) -> Person | None:
    """Fetch a single person by ID (with company name)."""
    conn = db or get_db()
    row = conn.execute(_SELECT_PEOPLE + " WHERE p.id = ?", (person_id,)).fetchone()
    return Person.from_row(row) if row else None


def list_people(
    *,
    company_id: int | None = None,
    exclude_company_id: int | None = None,
    db: sqlite3.Connection | None = None,
) -> list[Person]:
    """List people ordered by first name, last name, id.

    Args:
        company_id: Only people at this company.
        exclude_company_id: Only people NOT at this company; these are ordered
            by company name first.
    """
    conn = db or get_db()
    if company_id is not None:
        sql = f"{_SELECT_PEOPLE} WHERE p.company_id = ? ORDER BY {_NAME_ORDER}"
        params: tuple = (company_id,)
    elif exclude_company_id is not None:
        sql = f"{_SELECT_PEOPLE} WHERE p.company_id != ? ORDER BY c.name, {_NAME_ORDER}"
        params = (exclude_company_id,)
    else:
        sql = f"{_SELECT_PEOPLE} ORDER BY {_NAME_ORDER}"
        params = ()
    rows = conn.execute(sql, params).fetchall()
    return [Person.from_row(r) for r in rows]


def list_role_people(role_id: int, *, db: sqlite3.Connection | None = None) -> list[Person]:
    """Distinct people named on a role's interactions."""
    conn = db or get_db()
    rows = conn.execute(
        _SELECT_PEOPLE
        + f"""
         WHERE p.id IN (SELECT person_id FROM interaction_role WHERE role_id = ?)
         ORDER BY {_NAME_ORDER}
        """,
        (role_id,),
    ).fetchall()
    return [Person.from_row(r) for r in rows]


def count_people_by_company(*, db: sqlite3.Connection | None = None) -> dict[int, int]:
    conn = db or get_db()
    rows = conn.execute(
        "SELECT company_id, COUNT(*) AS n FROM person GROUP BY company_id"
    ).fetchall()
    return {r["company_id"]: r["n"] for r in rows}


def update_person(
    person_id: int, updates: dict, *, db: sqlite3.Connection | None = None
) -> Person | None:
    """Apply column updates to a person. Returns the updated person or None."""
    unknown = set(updates) - _UPDATABLE
    if unknown:
        raise ValueError(f"Cannot update person columns: {sorted(unknown)}")
    conn = db or get_db()
    if updates:
        assignments = ", ".join(f"{column} = ?" for column in updates)
        cursor = conn.execute(
            f"UPDATE person SET {assignments} WHERE id = ?",
            (*updates.values(), person_id),
        )
        conn.commit()
        if cursor.rowcount == 0:
            return None
    return get_person(person_id, db=conn)


def delete_people(person_ids: list[int], conn: sqlite3.Connection) -> None:
    """Delete people with their interactions and tag links (no commit).

    Role interactions that named a deleted person are kept, with the person
    cleared.
    """
    if not person_ids:
        return
    marks = ", ".join("?" for _ in person_ids)
    conn.execute(
        f"UPDATE interaction_role SET person_id = NULL WHERE person_id IN ({marks})",
        person_ids,
    )
    conn.execute(
        f"DELETE FROM interaction_person WHERE person_id IN ({marks})", person_ids
    )
    conn.execute(f"DELETE FROM person_tag WHERE person_id IN ({marks})", person_ids)
    conn.execute(f"DELETE FROM person WHERE id IN ({marks})", person_ids)


def delete_person(person_id: int, *, db: sqlite3.Connection | None = None) -> bool:
    """Delete a person. Returns False if the person did not exist."""
    conn = db or get_db()
    if conn.execute("SELECT 1 FROM person WHERE id = ?", (person_id,)).fetchone() is None:
        return False
    delete_people([person_id], conn)
    conn.commit()
    return True


# --- person_tag ---

def add_person_tag(
    person_id: int, tag_id: int, *, db: sqlite3.Connection | None = None
) -> None:
    """Link a tag to a person (no-op if already linked)."""
    conn = db or get_db()
    conn.execute(
        "INSERT OR IGNORE INTO person_tag (person_id, tag_id) VALUES (?, ?)",
        (person_id, tag_id),
    )
    conn.commit()


def remove_person_tag(
    person_id: int, tag_id: int, *, db: sqlite3.Connection | None = None
) -> bool:
    conn = db or get_db()
    cursor = conn.execute(
        "DELETE FROM person_tag WHERE person_id = ? AND tag_id = ?",
        (person_id, tag_id),
    )
    conn.commit()
    return cursor.rowcount > 0


def list_person_tags(
    person_id: int, *, db: sqlite3.Connection | None = None
) -> list[Tag]:
    """Tags on a person ordered by name."""
    conn = db or get_db()
    rows = conn.execute(
        """
        SELECT t.* FROM person_tag pt JOIN tag t ON pt.tag_id = t.id
         WHERE pt.person_id = ?
         ORDER BY t.name
        """,
        (person_id,),
    ).fetchall()
    return [Tag.from_row(r) for r in rows]


def tag_ids_by_person(*, db: sqlite3.Connection | None = None) -> dict[int, list[int]]:
    """Map person id -> tag ids for everyone with at least one tag."""
    conn = db or get_db()
    rows = conn.execute("SELECT person_id, tag_id FROM person_tag").fetchall()
    result: dict[int, list[int]] = {}
    for row in rows:
        result.setdefault(row["person_id"], []).append(row["tag_id"])
    return result
