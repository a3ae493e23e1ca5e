"""Environment-driven settings.

Values come from the process environment, optionally seeded from a
``.env.local`` file in the working directory. Variables already set in the
environment are never overridden by the file.

Every getter reads the environment at call time, so tests can point the app
at a temp database with ``monkeypatch.setenv``.
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

ENV_FILE = ".env.local"

_loaded = False


def load_env() -> None:
    """Load ``.env.local`` once per process."""
    global _loaded
    if _loaded:
        return
    _loaded = True
    env_path = Path.cwd() / ENV_FILE
    if env_path.exists():
        load_dotenv(env_path, override=False)


def db_path() -> Path:
    """SQLite file: SIGH_DB_LOCATION, then DATABASE_URL, then ./sigh.db."""
    load_env()
    raw = os.getenv("SIGH_DB_LOCATION") or os.getenv("DATABASE_URL")
    return Path(raw) if raw else Path.cwd() / "sigh.db"


def attachments_root() -> Path:
    load_env()
    raw = os.getenv("SIGH_ATTACHMENTS_LOCATION")
    return Path(raw) if raw else Path.cwd() / "attachments"


def log_level() -> str:
    load_env()
    return os.getenv("SIGH_LOG_LEVEL", "INFO").upper()


def port() -> int:
    load_env()
    try:
        return int(os.getenv("SIGH_PORT", "5000"))
    except ValueError:
        return 5000
