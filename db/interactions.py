"""CRUD operations for role interactions and person interactions.

All list functions return rows newest first: occurred_at DESC, then id DESC
so interactions logged at the same instant keep their insertion order.
"""

from __future__ import annotations

import sqlite3

from .connection import get_db
from .models import PersonInteraction, RoleInteraction

_NEWEST_FIRST = "i.occurred_at DESC, i.id DESC"

_SELECT_ROLE_INTERACTIONS = """
    SELECT i.*,
           t.name       AS interaction_type_name,
           r.title      AS role_title,
           c.name       AS company_name,
           p.first_name AS person_first_name,
           p.last_name  AS person_last_name
      FROM interaction_role i
      JOIN interaction_type_role t ON i.interaction_type_id = t.id
      JOIN role r                  ON i.role_id = r.id
      JOIN company c               ON r.company_id = c.id
      LEFT JOIN person p           ON i.person_id = p.id
"""

_SELECT_PERSON_INTERACTIONS = """
    SELECT i.*,
           t.name       AS interaction_type_name,
           p.first_name AS person_first_name,
           p.last_name  AS person_last_name
      FROM interaction_person i
      JOIN interaction_type_person t ON i.interaction_type_id = t.id
      JOIN person p                  ON i.person_id = p.id
"""


# ---------------------------------------------------------------------------
# Role interactions
# ---------------------------------------------------------------------------

def create_role_interaction(
    role_id: int,
    company_id: int,
    interaction_type_id: int,
    occurred_at: str,
    *,
    person_id: int | None = None,
    notes: str | None = None,
    db: sqlite3.Connection | None = None,
) -> RoleInteraction:
    conn = db or get_db()
    cursor = conn.execute(
        """
        INSERT INTO interaction_role (company_id, person_id, role_id, interaction_type_id, occurred_at, notes)
        VALUES (?, ?, ?, ?, ?, ?)
        RETURNING id
        """,
        (company_id, person_id, role_id, interaction_type_id, occurred_at, notes),
    )
    interaction_id = cursor.fetchone()["id"]
    conn.commit()
    return get_role_interaction(interaction_id, db=conn)


def get_role_interaction(
    interaction_id: int, *, db: sqlite3.Connection | None = None
) -> RoleInteraction | None:
    conn = db or get_db()
    row = conn.execute(
        _SELECT_ROLE_INTERACTIONS + " WHERE i.id = ?", (interaction_id,)
    ).fetchone()
    return RoleInteraction.from_row(row) if row else None


def list_role_interactions(
    *,
    role_id: int | None = None,
    role_ids: list[int] | None = None,
    hunt_id: int | None = None,
    person_id: int | None = None,
    db: sqlite3.Connection | None = None,
) -> list[RoleInteraction]:
    """List role interactions newest first, filtered by any given criteria."""
    conn = db or get_db()
    clauses: list[str] = []
    params: list = []
    if role_id is not None:
        clauses.append("i.role_id = ?")
        params.append(role_id)
    if role_ids is not None:
        if not role_ids:
            return []
        clauses.append(f"i.role_id IN ({', '.join('?' for _ in role_ids)})")
        params.extend(role_ids)
    if hunt_id is not None:
        clauses.append("r.hunt_id = ?")
        params.append(hunt_id)
    if person_id is not None:
        clauses.append("i.person_id = ?")
        params.append(person_id)
    where = (" WHERE " + " AND ".join(clauses)) if clauses else ""
    rows = conn.execute(
        f"{_SELECT_ROLE_INTERACTIONS}{where} ORDER BY {_NEWEST_FIRST}", params
    ).fetchall()
    return [RoleInteraction.from_row(r) for r in rows]


def update_role_interaction(
    interaction_id: int,
    interaction_type_id: int,
    occurred_at: str,
    *,
    person_id: int | None = None,
    notes: str | None = None,
    db: sqlite3.Connection | None = None,
) -> RoleInteraction | None:
    """Replace the editable fields of a role interaction."""
    conn = db or get_db()
    cursor = conn.execute(
        """
        UPDATE interaction_role
           SET interaction_type_id = ?, person_id = ?, occurred_at = ?, notes = ?
         WHERE id = ?
        """,
        (interaction_type_id, person_id, occurred_at, notes, interaction_id),
    )
    conn.commit()
    if cursor.rowcount == 0:
        return None
    return get_role_interaction(interaction_id, db=conn)


def delete_role_interaction(
    interaction_id: int, *, db: sqlite3.Connection | None = None
) -> bool:
    conn = db or get_db()
    cursor = conn.execute("DELETE FROM interaction_role WHERE id = ?", (interaction_id,))
    conn.commit()
    return cursor.rowcount > 0


def last_role_interaction_by_company(
    *, db: sqlite3.Connection | None = None
) -> dict[int, str]:
    """Map company id -> occurred_at of its latest role interaction."""
    conn = db or get_db()
    rows = conn.execute(
        """
        SELECT company_id, MAX(occurred_at) AS last_at
          FROM interaction_role
         GROUP BY company_id
        """
    ).fetchall()
    return {r["company_id"]: r["last_at"] for r in rows if r["last_at"] is not None}


def role_interaction_times_by_person(
    *, db: sqlite3.Connection | None = None
) -> list[tuple[int, str]]:
    """(person_id, occurred_at) for every role interaction naming a person."""
    conn = db or get_db()
    rows = conn.execute(
        "SELECT person_id, occurred_at FROM interaction_role WHERE person_id IS NOT NULL"
    ).fetchall()
    return [(r["person_id"], r["occurred_at"]) for r in rows]


# ---------------------------------------------------------------------------
# Person interactions
# ---------------------------------------------------------------------------

def create_person_interaction(
    person_id: int,
    interaction_type_id: int,
    occurred_at: str,
    *,
    notes: str | None = None,
    db: sqlite3.Connection | None = None,
) -> PersonInteraction:
    conn = db or get_db()
    cursor = conn.execute(
        """
        INSERT INTO interaction_person (person_id, interaction_type_id, occurred_at, notes)
        VALUES (?, ?, ?, ?)
        RETURNING id
        """,
        (person_id, interaction_type_id, occurred_at, notes),
    )
    interaction_id = cursor.fetchone()["id"]
    conn.commit()
    return get_person_interaction(interaction_id, db=conn)


def get_person_interaction(
    interaction_id: int, *, db: sqlite3.Connection | None = None
) -> PersonInteraction | None:
    conn = db or get_db()
    row = conn.execute(
        _SELECT_PERSON_INTERACTIONS + " WHERE i.id = ?", (interaction_id,)
    ).fetchone()
    return PersonInteraction.from_row(row) if row else None


def list_person_interactions(
    *,
    person_id: int | None = None,
    company_id: int | None = None,
    db: sqlite3.Connection | None = None,
) -> list[PersonInteraction]:
    """List person interactions newest first, for one person or one company."""
    conn = db or get_db()
    clauses: list[str] = []
    params: list = []
    if person_id is not None:
        clauses.append("i.person_id = ?")
        params.append(person_id)
    if company_id is not None:
        clauses.append("p.company_id = ?")
        params.append(company_id)
    where = (" WHERE " + " AND ".join(clauses)) if clauses else ""
    rows = conn.execute(
        f"{_SELECT_PERSON_INTERACTIONS}{where} ORDER BY {_NEWEST_FIRST}", params
    ).fetchall()
    return [PersonInteraction.from_row(r) for r in rows]


def update_person_interaction(
    interaction_id: int,
    interaction_type_id: int,
    occurred_at: str,
    *,
    notes: str | None = None,
    db: sqlite3.Connection | None = None,
) -> PersonInteraction | None:
    conn = db or get_db()
    cursor = conn.execute(
        """
        UPDATE interaction_person
           SET interaction_type_id = ?, occurred_at = ?, notes = ?
         WHERE id = ?
        """,
        (interaction_type_id, occurred_at, notes, interaction_id),
    )
    conn.commit()
    if cursor.rowcount == 0:
        return None
    return get_person_interaction(interaction_id, db=conn)


def delete_person_interaction(
    interaction_id: int, *, db: sqlite3.Connection | None = None
) -> bool:
    conn = db or get_db()
    cursor = conn.execute(
        "DELETE FROM interaction_person WHERE id = ?", (interaction_id,)
    )
    conn.commit()
    return cursor.rowcount > 0


def last_person_interaction_by_company(
    *, db: sqlite3.Connection | None = None
) -> dict[int, str]:
    """Map company id -> occurred_at of the latest interaction with its people."""
    conn = db or get_db()
    rows = conn.execute(
        """
        SELECT p.company_id, MAX(i.occurred_at) AS last_at
          FROM interaction_person i
          JOIN person p ON i.person_id = p.id
         GROUP BY p.company_id
        """
    ).fetchall()
    return {r["company_id"]: r["last_at"] for r in rows if r["last_at"] is not None}


def person_interaction_times(
    *, db: sqlite3.Connection | None = None
) -> list[tuple[int, str]]:
    """(person_id, occurred_at) for every person interaction."""
    conn = db or get_db()
    rows = conn.execute("SELECT person_id, occurred_at FROM interaction_person").fetchall()
    return [(r["person_id"], r["occurred_at"]) for r in rows]
