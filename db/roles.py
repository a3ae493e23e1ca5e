"""CRUD operations for the role table and role tags."""

from __future__ import annotations

import sqlite3

from .connection import get_db
from .models import Role, Tag

# Base SELECT that JOINs company, hunt and currency for display names
_SELECT_ROLES = """
    SELECT r.*,
           c.name AS company_name,
           c.url  AS company_url,
           h.name AS hunt_name,
           cur.code AS currency_code
      FROM role r
      JOIN company c       ON r.company_id  = c.id
      JOIN hunt h          ON r.hunt_id     = h.id
      LEFT JOIN currency cur ON r.currency_id = cur.id
"""

_UPDATABLE = {
    "title",
    "notes",
    "description",
    "salary_lower_end",
    "salary_higher_end",
    "currency_id",
    "company_id",
    "description_document_path",
    "description_document_name",
}


def create_role(
    hunt_id: int,
    company_id: int,
    title: str,
    created_at: str,
    *,
    description: str | None = None,
    salary_lower_end: int | None = None,
    salary_higher_end: int | None = None,
    currency_id: int | None = None,
    db: sqlite3.Connection | None = None,
) -> Role:
    """Insert a role. Callers have already checked the hunt and company exist."""
    conn = db or get_db()
    cursor = conn.execute(
        """
        INSERT INTO role (hunt_id, company_id, title, created_at, description,
                          salary_lower_end, salary_higher_end, currency_id)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?)
        RETURNING id
        """,
        (hunt_id, company_id, title, created_at, description,
         salary_lower_end, salary_higher_end, currency_id),
    )
    role_id = cursor.fetchone()["id"]
    conn.commit()
    return get_role(role_id, db=conn)


def get_role(role_id: int, *, db: sqlite3.Connection | None = None) -> Role | None:
    """Fetch a single role by ID (with company/hunt/currency names)."""
    conn = db or get_db()
    row = conn.execute(_SELECT_ROLES + " WHERE r.id = ?", (role_id,)).fetchone()
    return Role.from_row(row) if row else None


def list_roles(
    *,
    hunt_id: int | None = None,
    company_id: int | None = None,
    db: sqlite3.Connection | None = None,
) -> list[Role]:
    """List roles, optionally for one hunt and/or company, in id order."""
    conn = db or get_db()
    clauses: list[str] = []
    params: list = []
    if hunt_id is not None:
        clauses.append("r.hunt_id = ?")
        params.append(hunt_id)
    if company_id is not None:
        clauses.append("r.company_id = ?")
        params.append(company_id)
    where = (" WHERE " + " AND ".join(clauses)) if clauses else ""
    rows = conn.execute(f"{_SELECT_ROLES}{where} ORDER BY r.id", params).fetchall()
    return [Role.from_row(r) for r in rows]


def list_roles_for_person(
    person_id: int, *, db: sqlite3.Connection | None = None
) -> list[Role]:
    """Roles the person took part in (via role interactions), newest role first.

    Each role appears once even if the person has several interactions on it.
    """
    conn = db or get_db()
    rows = conn.execute(
        _SELECT_ROLES
        + """
         WHERE r.id IN (SELECT role_id FROM interaction_role WHERE person_id = ?)
         ORDER BY r.created_at DESC, r.id DESC
        """,
        (person_id,),
    ).fetchall()
    return [Role.from_row(r) for r in rows]


def count_roles_by_company(*, db: sqlite3.Connection | None = None) -> dict[int, int]:
    conn = db or get_db()
    rows = conn.execute(
        "SELECT company_id, COUNT(*) AS n FROM role GROUP BY company_id"
    ).fetchall()
    return {r["company_id"]: r["n"] for r in rows}


def update_role(
    role_id: int, updates: dict, *, db: sqlite3.Connection | None = None
) -> Role | None:
    """Apply column updates to a role. Returns the updated role or None."""
    unknown = set(updates) - _UPDATABLE
    if unknown:
        raise ValueError(f"Cannot update role columns: {sorted(unknown)}")
    conn = db or get_db()
    if updates:
        assignments = ", ".join(f"{column} = ?" for column in updates)
        cursor = conn.execute(
            f"UPDATE role SET {assignments} WHERE id = ?",
            (*updates.values(), role_id),
        )
        if cursor.rowcount and "company_id" in updates:
            # interactions follow the role, or deleting the old company breaks their company_id FK
            conn.execute(
                "UPDATE interaction_role SET company_id = ? WHERE role_id = ?",
                (updates["company_id"], role_id),
            )
        conn.commit()
        if cursor.rowcount == 0:
            return None
    return get_role(role_id, db=conn)


def delete_roles(
    role_ids: list[int], conn: sqlite3.Connection
) -> list[str]:
    """Delete roles with their interactions and tag links (no commit).

    Returns the stored description document names the caller should unlink.
    """
    if not role_ids:
        return []
    marks = ", ".join("?" for _ in role_ids)
    documents = [
        r["description_document_path"]
        for r in conn.execute(
            f"SELECT description_document_path FROM role WHERE id IN ({marks})",
            role_ids,
        ).fetchall()
        if r["description_document_path"]
    ]
    conn.execute(f"DELETE FROM interaction_role WHERE role_id IN ({marks})", role_ids)
    conn.execute(f"DELETE FROM role_tag WHERE role_id IN ({marks})", role_ids)
    conn.execute(f"DELETE FROM role WHERE id IN ({marks})", role_ids)
    return documents


def delete_role(
    role_id: int, *, db: sqlite3.Connection | None = None
) -> list[str] | None:
    """Delete a role and everything hanging off it.

    Returns the document names to unlink, or None if the role did not exist.
    """
    conn = db or get_db()
    if conn.execute("SELECT 1 FROM role WHERE id = ?", (role_id,)).fetchone() is None:
        return None
    documents = delete_roles([role_id], conn)
    conn.commit()
    return documents


# --- role_tag ---

def add_role_tag(
    role_id: int, tag_id: int, *, db: sqlite3.Connection | None = None
) -> None:
    """Link a tag to a role (no-op if already linked)."""
    conn = db or get_db()
    conn.execute(
        "INSERT OR IGNORE INTO role_tag (role_id, tag_id) VALUES (?, ?)",
        (role_id, tag_id),
    )
    conn.commit()


def remove_role_tag(
    role_id: int, tag_id: int, *, db: sqlite3.Connection | None = None
) -> bool:
    conn = db or get_db()
    cursor = conn.execute(
        "DELETE FROM role_tag WHERE role_id = ? AND tag_id = ?", (role_id, tag_id)
    )
    conn.commit()
    return cursor.rowcount > 0


def list_role_tags(role_id: int, *, db: sqlite3.Connection | None = None) -> list[Tag]:
    """Tags on a role ordered by name."""
    conn = db or get_db()
    rows = conn.execute(
        """
        SELECT t.* FROM role_tag rt JOIN tag t ON rt.tag_id = t.id
         WHERE rt.role_id = ?
         ORDER BY t.name
        """,
        (role_id,),
    ).fetchall()
    return [Tag.from_row(r) for r in rows]


def tag_ids_by_role(
    role_ids: list[int], *, db: sqlite3.Connection | None = None
) -> dict[int, list[int]]:
    """Map role id -> tag ids for the given roles."""
    if not role_ids:
        return {}
    conn = db or get_db()
    marks = ", ".join("?" for _ in role_ids)
    rows = conn.execute(
        f"SELECT role_id, tag_id FROM role_tag WHERE role_id IN ({marks})",
        role_ids,
    ).fetchall()
    result: dict[int, list[int]] = {}
    for row in rows:
        result.setdefault(row["role_id"], []).append(row["tag_id"])
    return result
