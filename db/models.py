"""Dataclasses for database entities."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field


def _from_row(cls, row):
    """Create a dataclass instance from a sqlite3.Row, ignoring extra columns."""
    known = {f.name for f in dataclasses.fields(cls)}
    return cls(**{k: row[k] for k in row.keys() if k in known})


@dataclass
class HuntStatus:
    id: int | None = None
    name: str = ""

    @classmethod
    def from_row(cls, row) -> HuntStatus:
        return _from_row(cls, row)


@dataclass
class Hunt:
    id: int | None = None
    hunt_status_id: int | None = None
    name: str = ""
    notes: str | None = None
    start_date: str = ""
    end_date: str | None = None
    status: str | None = None  # populated from JOIN with hunt_status
    role_count: int = 0        # populated by list_hunt_summaries()

    @classmethod
    def from_row(cls, row) -> Hunt:
        return _from_row(cls, row)


@dataclass
class Company:
    id: int | None = None
    name: str = ""
    url: str | None = None
    linkedin: str | None = None
    notes: str | None = None

    @classmethod
    def from_row(cls, row) -> Company:
        return _from_row(cls, row)


@dataclass
class Currency:
    id: int | None = None
    code: str = ""

    @classmethod
    def from_row(cls, row) -> Currency:
        return _from_row(cls, row)


@dataclass
class Tag:
    id: int | None = None
    name: str = ""

    @classmethod
    def from_row(cls, row) -> Tag:
        return _from_row(cls, row)


@dataclass
class InteractionType:
    id: int | None = None
    name: str = ""

    @classmethod
    def from_row(cls, row) -> InteractionType:
        return _from_row(cls, row)


@dataclass
class Person:
    id: int | None = None
    company_id: int | None = None
    first_name: str = ""
    last_name: str = ""
    title: str | None = None
    phone: str | None = None
    email: str | None = None
    linkedin: str | None = None
    notes: str | None = None
    company_name: str | None = None  # populated from JOIN with company

    @classmethod
    def from_row(cls, row) -> Person:
        return _from_row(cls, row)


@dataclass
class Role:
    id: int | None = None
    hunt_id: int | None = None
    company_id: int | None = None
    title: str = ""
    created_at: str = ""
    description: str | None = None
    description_document_path: str | None = None
    description_document_name: str | None = None
    notes: str | None = None
    salary_lower_end: int | None = None
    salary_higher_end: int | None = None
    currency_id: int | None = None
    company_name: str | None = None   # populated from JOIN with company
    company_url: str | None = None    # populated from JOIN with company
    hunt_name: str | None = None      # populated from JOIN with hunt
    currency_code: str | None = None  # populated from LEFT JOIN with currency

    @classmethod
    def from_row(cls, row) -> Role:
        return _from_row(cls, row)


@dataclass
class RoleInteraction:
    id: int | None = None
    company_id: int | None = None
    person_id: int | None = None
    role_id: int | None = None
    interaction_type_id: int | None = None
    occurred_at: str = ""
    notes: str | None = None
    interaction_type_name: str | None = None  # JOIN interaction_type_role
    role_title: str | None = None             # JOIN role
    company_name: str | None = None           # JOIN company (via role)
    person_first_name: str | None = None      # LEFT JOIN person
    person_last_name: str | None = None

    @classmethod
    def from_row(cls, row) -> RoleInteraction:
        return _from_row(cls, row)


@dataclass
class PersonInteraction:
    id: int | None = None
    person_id: int | None = None
    interaction_type_id: int | None = None
    occurred_at: str = ""
    notes: str | None = None
    interaction_type_name: str | None = None  # JOIN interaction_type_person
    person_first_name: str | None = None      # JOIN person
    person_last_name: str | None = None

    @classmethod
    def from_row(cls, row) -> PersonInteraction:
        return _from_row(cls, row)


# ---------------------------------------------------------------------------
# Derived views (built in overview.py, never stored)
# ---------------------------------------------------------------------------

@dataclass
class LatestInteraction:
    id: int
    name: str
    occurred_at: str


@dataclass
class RoleSummary:
    id: int
    title: str
    created_at: str
    status: str = "Open"
    company_id: int | None = None
    company_name: str | None = None
    last_interaction_type: str | None = None
    last_interaction_at: str | None = None
    tag_ids: list[int] = field(default_factory=list)


@dataclass
class CompanySummary:
    id: int
    name: str
    url: str | None = None
    linkedin: str | None = None
    role_count: int = 0
    person_count: int = 0
    last_interaction_at: str | None = None


@dataclass
class PersonSummary:
    id: int
    first_name: str
    last_name: str
    company_id: int | None = None
    company_name: str | None = None
    title: str | None = None
    email: str | None = None
    phone: str | None = None
    linkedin: str | None = None
    tag_ids: list[int] = field(default_factory=list)
    interaction_count: int = 0
    last_interaction_at: str | None = None
