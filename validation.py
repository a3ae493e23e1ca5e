"""Parsing helpers for JSON request payloads.

Handlers call these to turn loosely typed JSON values into the typed fields
the db layer expects. Anything a client got wrong surfaces as ApiError,
which the API blueprint renders as ``{"error": message}``.
"""

from __future__ import annotations

from datetime import datetime, timezone

from flask import request

# Largest value SQLite can store in an INTEGER column
MAX_SQLITE_INT = 2**63 - 1


class ApiError(Exception):
    """A client error carrying the HTTP status to answer with."""

    def __init__(self, message: str, status: int = 400):
        super().__init__(message)
        self.message = message
        self.status = status


def read_payload() -> dict:
    """Return the request's JSON object, or {} for anything else."""
    payload = request.get_json(silent=True)
    return payload if isinstance(payload, dict) else {}


def parse_id(raw) -> int | None:
    """Return *raw* as a positive integer, or None.

    Accepts ints, integral floats and numeric strings ("7", " 7 ", "7.0").
    Values too large for an SQLite INTEGER are rejected.
    """
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        value = raw
    elif isinstance(raw, float):
        if not raw.is_integer():
            return None
        value = int(raw)
    elif isinstance(raw, str):
        text = raw.strip()
        try:
            value = int(text)
        except ValueError:
            try:
                number = float(text)
            except ValueError:
                return None
            if not number.is_integer():
                return None
            value = int(number)
    else:
        return None
    return value if 0 < value <= MAX_SQLITE_INT else None


def require_id(raw, message: str) -> int:
    value = parse_id(raw)
    if value is None:
        raise ApiError(message)
    return value


def optional_id(raw, message: str) -> int | None:
    """Absent, null and "" mean no id; anything else must be a valid id."""
    if raw is None or raw == "":
        return None
    return require_id(raw, message)


def optional_text(raw) -> str | None:
    """Stripped string, or None for non-strings and blank strings."""
    if isinstance(raw, str) and raw.strip():
        return raw.strip()
    return None


def required_text(raw, message: str) -> str:
    text = optional_text(raw)
    if text is None:
        raise ApiError(message)
    return text


# ---------------------------------------------------------------------------
# Dates
# ---------------------------------------------------------------------------

def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_iso(value: datetime) -> str:
    """Serialize as ``YYYY-MM-DDTHH:MM:SS.mmmZ`` (UTC, fixed width)."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return (
        f"{value.year:04d}-{value.month:02d}-{value.day:02d}"
        f"T{value.hour:02d}:{value.minute:02d}:{value.second:02d}"
        f".{value.microsecond // 1000:03d}Z"
    )


def from_iso(text: str | None) -> datetime | None:
    """Inverse of to_iso(); also accepts any ISO-8601 form parse_date() does."""
    if not text:
        return None
    return parse_date(text)


def parse_date(raw) -> datetime | None:
    """Parse an ISO-8601 date or datetime string into an aware UTC datetime.

    Returns None for non-strings, blank strings and unparseable values.
    Values without an offset are taken as UTC.
    """
    if not isinstance(raw, str) or not raw.strip():
        return None
    text = raw.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        value = datetime.fromisoformat(text)
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
    except (ValueError, OverflowError):
        return None


def date_or_now(raw) -> datetime:
    return parse_date(raw) or utc_now()


# ---------------------------------------------------------------------------
# Salaries
# ---------------------------------------------------------------------------

def parse_salary(raw, label: str) -> int | None:
    """None for missing/null/"", else a whole number >= 0."""
    if raw is None or raw == "":
        return None
    if isinstance(raw, bool):
        raise ApiError(f"{label} must be a whole number.")
    if isinstance(raw, str):
        try:
            raw = float(raw.strip())
        except ValueError:
            raise ApiError(f"{label} must be a whole number.") from None
    if not isinstance(raw, (int, float)):
        raise ApiError(f"{label} must be a whole number.")
    if isinstance(raw, float) and (raw != raw or raw in (float("inf"), float("-inf"))):
        raise ApiError(f"{label} must be a whole number.")
    if raw < 0 or raw > MAX_SQLITE_INT or int(raw) != raw:
        raise ApiError(f"{label} must be a whole number.")
    return int(raw)


def check_salary_range(lower: int | None, higher: int | None) -> None:
    if lower is not None and higher is not None and lower > higher:
        raise ApiError(
            "Salary lower end must be less than or equal to the higher end."
        )
