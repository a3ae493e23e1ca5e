#!/usr/bin/env python3
"""Create the database schema and seed the lookup tables.

Seeding is idempotent, so this is safe to run against an existing database.
With --reset the database file (and its WAL/SHM siblings) is deleted first.

Usage:
    python -m db.seed
    python -m db.seed --reset
    python -m db.seed --db-path /path/to/sigh.db
"""

from __future__ import annotations

import argparse
from pathlib import Path

import config

from .connection import close_db, init_db


def reset_database(db_path: Path) -> None:
    """Delete the database file and its -wal/-shm companions."""
    close_db()
    for suffix in ("", "-wal", "-shm"):
        Path(str(db_path) + suffix).unlink(missing_ok=True)
    print(f"Removed {db_path}")


def seed(db_path: str | Path | None = None, *, reset: bool = False) -> dict[str, int]:
    """Initialize the database. Returns row counts per lookup table."""
    path = Path(db_path) if db_path else config.db_path()
    if reset:
        reset_database(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = init_db(path)
    counts = {}
    for table in ("hunt_status", "interaction_type_role", "interaction_type_person", "currency"):
        counts[table] = conn.execute(f"SELECT COUNT(*) AS n FROM {table}").fetchone()["n"]
    return counts


def main() -> None:
    parser = argparse.ArgumentParser(description="Create and seed the sigh database")
    parser.add_argument("--db-path", help="Path to database file")
    parser.add_argument(
        "--reset", action="store_true", help="Delete the database before seeding"
    )
    args = parser.parse_args()

    path = Path(args.db_path) if args.db_path else config.db_path()
    print("=" * 60)
    print(f"Seeding {path}")
    print("=" * 60)
    try:
        counts = seed(path, reset=args.reset)
    finally:
        close_db()
    for table, n in counts.items():
        print(f"  {table:<26} {n:>4} rows")
    print("Done.")


if __name__ == "__main__":
    main()
