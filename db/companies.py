"""CRUD operations for the company table."""

from __future__ import annotations

import sqlite3

from .connection import get_db
from .models import Company
from .people import delete_people
from .roles import delete_roles

_UPDATABLE = {"name", "url", "linkedin", "notes"}


def get_company(company_id: int, *, db: sqlite3.Connection | None = None) -> Company | None:
    conn = db or get_db()
    row = conn.execute("SELECT * FROM company WHERE id = ?", (company_id,)).fetchone()
    return Company.from_row(row) if row else None


def get_company_by_name(name: str, *, db: sqlite3.Connection | None = None) -> Company | None:
    conn = db or get_db()
    row = conn.execute(
        "SELECT * FROM company WHERE name = ? ORDER BY id LIMIT 1", (name,)
    ).fetchone()
    return Company.from_row(row) if row else None


def get_or_create_company(
    name: str,
    *,
    url: str | None = None,
    linkedin: str | None = None,
    db: sqlite3.Connection | None = None,
) -> tuple[Company, bool]:
    """Return the company called *name*, creating a new row if needed.

    url and linkedin are only used when creating; an existing company is
    returned untouched.

    Returns:
        Tuple of (company, created).
    """
    conn = db or get_db()
    existing = get_company_by_name(name, db=conn)
    if existing:
        return existing, False
    row = conn.execute(
        "INSERT INTO company (name, url, linkedin) VALUES (?, ?, ?) RETURNING *",
        (name, url, linkedin),
    ).fetchone()
    conn.commit()
    return Company.from_row(row), True


def list_companies(
    *, order_by: str = "id", db: sqlite3.Connection | None = None
) -> list[Company]:
    """List companies ordered by id (default) or name."""
    conn = db or get_db()
    order = "name, id" if order_by == "name" else "id"
    rows = conn.execute(f"SELECT * FROM company ORDER BY {order}").fetchall()
    return [Company.from_row(r) for r in rows]


def update_company(
    company_id: int, updates: dict, *, db: sqlite3.Connection | None = None
) -> Company | None:
    """Apply column updates to a company. Returns the updated company or None."""
    unknown = set(updates) - _UPDATABLE
    if unknown:
        raise ValueError(f"Cannot update company columns: {sorted(unknown)}")
    conn = db or get_db()
    if updates:
        assignments = ", ".join(f"{column} = ?" for column in updates)
        cursor = conn.execute(
            f"UPDATE company SET {assignments} WHERE id = ?",
            (*updates.values(), company_id),
        )
        conn.commit()
        if cursor.rowcount == 0:
            return None
    return get_company(company_id, db=conn)


def delete_company(
    company_id: int, *, db: sqlite3.Connection | None = None
) -> list[str] | None:
    """Delete a company with its roles and people.

    Returns the description document names to unlink, or None if the
    company did not exist.
    """
    conn = db or get_db()
    if conn.execute("SELECT 1 FROM company WHERE id = ?", (company_id,)).fetchone() is None:
        return None

    role_ids = [
        r["id"]
        for r in conn.execute(
            "SELECT id FROM role WHERE company_id = ?", (company_id,)
        ).fetchall()
    ]
    documents = delete_roles(role_ids, conn)

    person_ids = [
        r["id"]
        for r in conn.execute(
            "SELECT id FROM person WHERE company_id = ?", (company_id,)
        ).fetchall()
    ]
    delete_people(person_ids, conn)

    conn.execute("DELETE FROM company WHERE id = ?", (company_id,))
    conn.commit()
    return documents
