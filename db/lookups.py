"""CRUD operations for lookup tables: hunt statuses, currencies, tags and
interaction types.

Everything here except hunt statuses is get-or-create: asking for a name (or
currency code) that already exists returns the existing row.
"""

from __future__ import annotations

import sqlite3

from .connection import get_db
from .models import Currency, HuntStatus, InteractionType, Tag

# Interaction type tables by scope
_INTERACTION_TYPE_TABLES = {
    "role": "interaction_type_role",
    "person": "interaction_type_person",
}


# --- hunt_status ---

def list_hunt_statuses(
    *, order_by: str = "name", db: sqlite3.Connection | None = None
) -> list[HuntStatus]:
    """List hunt statuses ordered by name (or id)."""
    conn = db or get_db()
    column = "id" if order_by == "id" else "name"
    rows = conn.execute(f"SELECT * FROM hunt_status ORDER BY {column}").fetchall()
    return [HuntStatus.from_row(r) for r in rows]


def get_hunt_status(
    status_id: int, *, db: sqlite3.Connection | None = None
) -> HuntStatus | None:
    conn = db or get_db()
    row = conn.execute(
        "SELECT * FROM hunt_status WHERE id = ?", (status_id,)
    ).fetchone()
    return HuntStatus.from_row(row) if row else None


# --- currency ---

def list_currencies(*, db: sqlite3.Connection | None = None) -> list[Currency]:
    """List currencies ordered by code."""
    conn = db or get_db()
    rows = conn.execute("SELECT * FROM currency ORDER BY code").fetchall()
    return [Currency.from_row(r) for r in rows]


def get_currency(
    currency_id: int, *, db: sqlite3.Connection | None = None
) -> Currency | None:
    conn = db or get_db()
    row = conn.execute(
        "SELECT * FROM currency WHERE id = ?", (currency_id,)
    ).fetchone()
    return Currency.from_row(row) if row else None


def get_or_create_currency(
    code: str, *, db: sqlite3.Connection | None = None
) -> Currency:
    """Return the currency for *code* (upper-cased), creating it if needed."""
    conn = db or get_db()
    code = code.strip().upper()
    row = conn.execute("SELECT * FROM currency WHERE code = ?", (code,)).fetchone()
    if row:
        return Currency.from_row(row)
    row = conn.execute(
        "INSERT INTO currency (code) VALUES (?) RETURNING *", (code,)
    ).fetchone()
    conn.commit()
    return Currency.from_row(row)


# --- tag ---

def list_tags(*, db: sqlite3.Connection | None = None) -> list[Tag]:
    """List tags ordered by name."""
    conn = db or get_db()
    rows = conn.execute("SELECT * FROM tag ORDER BY name").fetchall()
    return [Tag.from_row(r) for r in rows]


def get_tag(tag_id: int, *, db: sqlite3.Connection | None = None) -> Tag | None:
    conn = db or get_db()
    row = conn.execute("SELECT * FROM tag WHERE id = ?", (tag_id,)).fetchone()
    return Tag.from_row(row) if row else None


def get_or_create_tag(name: str, *, db: sqlite3.Connection | None = None) -> Tag:
    """Return the tag called *name*, creating a new row if needed."""
    conn = db or get_db()
    row = conn.execute("SELECT * FROM tag WHERE name = ?", (name,)).fetchone()
    if row:
        return Tag.from_row(row)
    row = conn.execute(
        "INSERT INTO tag (name) VALUES (?) RETURNING *", (name,)
    ).fetchone()
    conn.commit()
    return Tag.from_row(row)


# --- interaction_type_role / interaction_type_person ---

def _type_table(scope: str) -> str:
    try:
        return _INTERACTION_TYPE_TABLES[scope]
    except KeyError:
        raise ValueError(f"Unknown interaction type scope: {scope!r}") from None


def list_interaction_types(
    scope: str = "role", *, db: sqlite3.Connection | None = None
) -> list[InteractionType]:
    """List interaction types for *scope* ('role' or 'person') in id order."""
    conn = db or get_db()
    rows = conn.execute(f"SELECT * FROM {_type_table(scope)} ORDER BY id").fetchall()
    return [InteractionType.from_row(r) for r in rows]


def get_interaction_type(
    type_id: int, scope: str = "role", *, db: sqlite3.Connection | None = None
) -> InteractionType | None:
    conn = db or get_db()
    row = conn.execute(
        f"SELECT * FROM {_type_table(scope)} WHERE id = ?", (type_id,)
    ).fetchone()
    return InteractionType.from_row(row) if row else None


def get_or_create_interaction_type(
    name: str, scope: str = "role", *, db: sqlite3.Connection | None = None
) -> InteractionType:
    """Return the interaction type called *name*, creating it if needed."""
    conn = db or get_db()
    table = _type_table(scope)
    row = conn.execute(f"SELECT * FROM {table} WHERE name = ?", (name,)).fetchone()
    if row:
        return InteractionType.from_row(row)
    row = conn.execute(
        f"INSERT INTO {table} (name) VALUES (?) RETURNING *", (name,)
    ).fetchone()
    conn.commit()
    return InteractionType.from_row(row)
