"""Role status labels derived from interaction types.

A role has no stored status. Its status comes from the interactions logged
against it: walking from the newest interaction to the oldest, the first one
whose type maps to a status wins. Roles with no such interaction are Open.
"""

from __future__ import annotations

from typing import Iterable

ROLE_STATUSES = ["Open", "Accepted", "Rejected", "Closed"]

STATUS_BY_INTERACTION = {
    "offer declined": "Closed",
    "offer accepted": "Accepted",
    "ghosted": "Rejected",
    "rejected": "Rejected",
    "decision to not pursue": "Closed",
}


def status_from_interaction_type(name: str | None) -> str | None:
    """Map an interaction type name to a status, or None if it carries none."""
    if not name:
        return None
    return STATUS_BY_INTERACTION.get(name.strip().lower())


def derive_role_status(interaction_type_names: Iterable[str | None]) -> str:
    """Status for a role given its interaction type names, newest first."""
    for name in interaction_type_names:
        status = status_from_interaction_type(name)
        if status:
            return status
    return "Open"


def status_tone(status_label: str | None) -> str:
    """CSS tone for a status label (see the .tone-* rules in style.css)."""
    normalized = (status_label or "").strip().lower()
    if not normalized or normalized == "open":
        return "yellow"
    if normalized == "accepted":
        return "green"
    if normalized == "rejected":
        return "red"
    if normalized == "closed":
        return "gray"
    return "accent"


def format_person_name(first_name: str | None, last_name: str | None) -> str:
    """'First Last' with blanks dropped; '' when both are blank."""
    parts = [(first_name or "").strip(), (last_name or "").strip()]
    return " ".join(part for part in parts if part)
