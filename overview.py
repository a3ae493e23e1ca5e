"""Derived views built from the stored rows.

Nothing in this module is persisted. Role statuses, "last interaction"
labels and per-company / per-person activity are recomputed from the
interaction tables on every request, and the page builders at the bottom
bundle them into the dictionaries the templates render.
"""

from __future__ import annotations

import functools
from datetime import datetime, timezone
from typing import Iterable

from db.companies import get_company, list_companies
from db.hunts import get_hunt, list_hunt_summaries
from db.interactions import (
    last_person_interaction_by_company,
    last_role_interaction_by_company,
    list_person_interactions,
    list_role_interactions,
    person_interaction_times,
    role_interaction_times_by_person,
)
from db.lookups import (
    list_currencies,
    list_hunt_statuses,
    list_interaction_types,
    list_tags,
)
from db.models import (
    CompanySummary,
    LatestInteraction,
    PersonInteraction,
    PersonSummary,
    Role,
    RoleInteraction,
    RoleSummary,
)
from db.people import (
    count_people_by_company,
    get_person,
    list_people,
    list_person_tags,
    list_role_people,
    tag_ids_by_person,
)
from db.roles import (
    count_roles_by_company,
    get_role,
    list_role_tags,
    list_roles,
    list_roles_for_person,
    tag_ids_by_role,
)
from role_status import ROLE_STATUSES, format_person_name, status_from_interaction_type
from validation import from_iso

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _instant(text: str | None) -> datetime:
    return from_iso(text) or _EPOCH


# ---------------------------------------------------------------------------
# Role aggregation
# ---------------------------------------------------------------------------

def summarize_role_interactions(
    rows: Iterable[RoleInteraction],
) -> tuple[dict[int, LatestInteraction], dict[int, str]]:
    """Latest interaction and derived status per role.

    Args:
        rows: Role interactions ordered newest first (occurred_at DESC,
            id DESC), as the db layer returns them.

    Returns:
        Tuple of (latest interaction by role id, status by role id). Roles
        without a status-bearing interaction are absent from the second
        dict; callers treat them as Open.
    """
    latest: dict[int, LatestInteraction] = {}
    statuses: dict[int, str] = {}
    for row in rows:
        if row.role_id not in latest:
            latest[row.role_id] = LatestInteraction(
                id=row.id,
                name=row.interaction_type_name or "",
                occurred_at=row.occurred_at,
            )
        if row.role_id not in statuses:
            status = status_from_interaction_type(row.interaction_type_name)
            if status:
                statuses[row.role_id] = status
    return latest, statuses


def sort_roles_by_recency(
    roles: Iterable[Role], latest: dict[int, LatestInteraction]
) -> list[Role]:
    """Newest activity first.

    A role's activity time is its latest interaction, or its creation time
    when it has none. Equal times fall back to the newer interaction id when
    both roles have one, then to the title.
    """

    def compare(a: Role, b: Role) -> int:
        a_latest = latest.get(a.id)
        b_latest = latest.get(b.id)
        a_time = _instant(a_latest.occurred_at if a_latest else a.created_at)
        b_time = _instant(b_latest.occurred_at if b_latest else b.created_at)
        if a_time != b_time:
            return -1 if a_time > b_time else 1
        if a_latest and b_latest and a_latest.id != b_latest.id:
            return -1 if a_latest.id > b_latest.id else 1
        a_key = (a.title.casefold(), a.title)
        b_key = (b.title.casefold(), b.title)
        if a_key == b_key:
            return 0
        return -1 if a_key < b_key else 1

    return sorted(roles, key=functools.cmp_to_key(compare))


def build_role_summaries(
    roles: list[Role],
    interactions: Iterable[RoleInteraction],
    tag_map: dict[int, list[int]] | None = None,
    *,
    sort: bool = True,
) -> list[RoleSummary]:
    """RoleSummary per role, by recency unless sort=False."""
    latest, statuses = summarize_role_interactions(interactions)
    ordered = sort_roles_by_recency(roles, latest) if sort else roles
    tag_map = tag_map or {}
    summaries = []
    for role in ordered:
        last = latest.get(role.id)
        summaries.append(
            RoleSummary(
                id=role.id,
                title=role.title,
                created_at=role.created_at,
                status=statuses.get(role.id, "Open"),
                company_id=role.company_id,
                company_name=role.company_name,
                last_interaction_type=last.name if last else None,
                last_interaction_at=last.occurred_at if last else None,
                tag_ids=sorted(tag_map.get(role.id, [])),
            )
        )
    return summaries


def count_statuses(summaries: Iterable[RoleSummary]) -> dict[str, int]:
    counts = {status: 0 for status in ROLE_STATUSES}
    for summary in summaries:
        counts[summary.status] = counts.get(summary.status, 0) + 1
    return counts


def filter_roles(
    summaries: Iterable[RoleSummary],
    *,
    status: str | None = None,
    last_interaction: str | None = None,
    tag_ids: Iterable[int] | None = None,
) -> list[RoleSummary]:
    """Roles matching every given criterion; each selected tag must be present."""
    wanted_tags = set(tag_ids or [])
    result = []
    for summary in summaries:
        if status and summary.status != status:
            continue
        if last_interaction and summary.last_interaction_type != last_interaction:
            continue
        if not wanted_tags.issubset(summary.tag_ids):
            continue
        result.append(summary)
    return result


def filter_people(
    people: Iterable[PersonSummary], tag_ids: Iterable[int] | None = None
) -> list[PersonSummary]:
    wanted_tags = set(tag_ids or [])
    return [p for p in people if wanted_tags.issubset(p.tag_ids)]


# ---------------------------------------------------------------------------
# Company and person aggregation
# ---------------------------------------------------------------------------

def company_last_interactions(
    role_last: dict[int, str], person_last: dict[int, str]
) -> dict[int, str]:
    """Per company, the later of its role and people interaction times."""
    result = dict(role_last)
    for company_id, occurred_at in person_last.items():
        current = result.get(company_id)
        if current is None or _instant(occurred_at) > _instant(current):
            result[company_id] = occurred_at
    return result


def person_interaction_stats(
    person_rows: Iterable[tuple[int, str]],
    role_rows: Iterable[tuple[int, str]],
) -> dict[int, tuple[int, str | None]]:
    """Per person: (interaction count, latest occurred_at).

    Both direct person interactions and role interactions naming the person
    count.
    """
    stats: dict[int, tuple[int, str | None]] = {}
    for rows in (person_rows, role_rows):
        for person_id, occurred_at in rows:
            count, last = stats.get(person_id, (0, None))
            if last is None or _instant(occurred_at) > _instant(last):
                last = occurred_at
            stats[person_id] = (count + 1, last)
    return stats


def merge_company_interactions(
    role_rows: Iterable[RoleInteraction],
    person_rows: Iterable[PersonInteraction],
) -> list[dict]:
    """One newest-first feed of a company's role and people interactions."""
    entries = []
    for row in role_rows:
        entries.append({
            "source": "role",
            "id": row.id,
            "type": row.interaction_type_name,
            "occurred_at": row.occurred_at,
            "notes": row.notes,
            "person_id": row.person_id,
            "person_name": format_person_name(row.person_first_name, row.person_last_name),
            "role_id": row.role_id,
            "role_title": row.role_title,
        })
    for row in person_rows:
        entries.append({
            "source": "person",
            "id": row.id,
            "type": row.interaction_type_name,
            "occurred_at": row.occurred_at,
            "notes": row.notes,
            "person_id": row.person_id,
            "person_name": format_person_name(row.person_first_name, row.person_last_name),
            "role_id": None,
            "role_title": None,
        })
    entries.sort(key=lambda e: (_instant(e["occurred_at"]), e["id"]), reverse=True)
    return entries


def order_role_people(people, company_id: int | None) -> list:
    """People from the role's company first, then by name and id."""
    return sorted(
        people,
        key=lambda p: (p.company_id != company_id, p.first_name, p.last_name, p.id),
    )


# ---------------------------------------------------------------------------
# Page builders
# ---------------------------------------------------------------------------

def hunts_page() -> dict:
    return {
        "hunts": list_hunt_summaries(),
        "statuses": list_hunt_statuses(),
    }


def hunt_roles(
    hunt_id: int,
    *,
    status: str | None = None,
    last_interaction: str | None = None,
    tag_ids: list[int] | None = None,
) -> tuple[list[RoleSummary], dict[str, int], int]:
    """Filtered role summaries for a hunt, with status counts over all roles.

    Returns:
        Tuple of (filtered summaries, status counts, total role count).
    """
    roles = list_roles(hunt_id=hunt_id)
    interactions = list_role_interactions(hunt_id=hunt_id)
    tag_map = tag_ids_by_role([r.id for r in roles])
    summaries = build_role_summaries(roles, interactions, tag_map)
    filtered = filter_roles(
        summaries, status=status, last_interaction=last_interaction, tag_ids=tag_ids
    )
    return filtered, count_statuses(summaries), len(summaries)


def hunt_page(
    hunt_id: int,
    *,
    status: str | None = None,
    last_interaction: str | None = None,
    tag_ids: list[int] | None = None,
) -> dict | None:
    hunt = get_hunt(hunt_id)
    if hunt is None:
        return None
    roles, counts, total = hunt_roles(
        hunt_id, status=status, last_interaction=last_interaction, tag_ids=tag_ids
    )
    tags = list_tags()
    selected = set(tag_ids or [])
    return {
        "hunt": hunt,
        "roles": roles,
        "status_counts": counts,
        "total": total,
        "role_statuses": ROLE_STATUSES,
        "hunt_statuses": list_hunt_statuses(order_by="id"),
        "interaction_types": list_interaction_types("role"),
        "tags": tags,
        "tag_names": {t.id: t.name for t in tags},
        "companies": list_companies(order_by="name"),
        "currencies": list_currencies(),
        "filters": {
            "status": status or "",
            "interaction": last_interaction or "",
            "tags": [t for t in tags if t.id in selected],
        },
    }


def role_page(role_id: int) -> dict | None:
    role = get_role(role_id)
    if role is None:
        return None
    interactions = list_role_interactions(role_id=role_id)
    latest, statuses = summarize_role_interactions(interactions)
    people = order_role_people(list_role_people(role_id), role.company_id)
    person_options = (
        list_people(company_id=role.company_id)
        + list_people(exclude_company_id=role.company_id)
    )
    return {
        "role": role,
        "status": statuses.get(role.id, "Open"),
        "last_interaction": latest.get(role.id),
        "interactions": interactions,
        "people": people,
        "person_options": person_options,
        "tags": list_role_tags(role_id),
        "all_tags": list_tags(),
        "interaction_types": list_interaction_types("role"),
        "currencies": list_currencies(),
        "companies": list_companies(order_by="name"),
    }


def company_summaries() -> list[CompanySummary]:
    """Every company by name with role/person counts and last activity."""
    role_counts = count_roles_by_company()
    person_counts = count_people_by_company()
    last = company_last_interactions(
        last_role_interaction_by_company(), last_person_interaction_by_company()
    )
    return [
        CompanySummary(
            id=c.id,
            name=c.name,
            url=c.url,
            linkedin=c.linkedin,
            role_count=role_counts.get(c.id, 0),
            person_count=person_counts.get(c.id, 0),
            last_interaction_at=last.get(c.id),
        )
        for c in list_companies(order_by="name")
    ]


def companies_page() -> dict:
    return {"companies": company_summaries()}


def company_page(company_id: int) -> dict | None:
    company = get_company(company_id)
    if company is None:
        return None
    roles = list_roles(company_id=company_id)
    role_interactions = list_role_interactions(role_ids=[r.id for r in roles])
    person_interactions = list_person_interactions(company_id=company_id)
    return {
        "company": company,
        "roles": build_role_summaries(roles, role_interactions),
        "people": list_people(company_id=company_id),
        "interactions": merge_company_interactions(role_interactions, person_interactions),
    }


def person_summaries(tag_ids: list[int] | None = None) -> list[PersonSummary]:
    """Everyone (first, last, id) with tags and interaction stats."""
    tag_map = tag_ids_by_person()
    stats = person_interaction_stats(
        person_interaction_times(), role_interaction_times_by_person()
    )
    summaries = []
    for person in list_people():
        count, last = stats.get(person.id, (0, None))
        summaries.append(
            PersonSummary(
                id=person.id,
                first_name=person.first_name,
                last_name=person.last_name,
                company_id=person.company_id,
                company_name=person.company_name,
                title=person.title,
                email=person.email,
                phone=person.phone,
                linkedin=person.linkedin,
                tag_ids=sorted(tag_map.get(person.id, [])),
                interaction_count=count,
                last_interaction_at=last,
            )
        )
    return filter_people(summaries, tag_ids)


def people_page(tag_ids: list[int] | None = None) -> dict:
    tags = list_tags()
    selected = set(tag_ids or [])
    return {
        "people": person_summaries(tag_ids),
        "tags": tags,
        "tag_names": {t.id: t.name for t in tags},
        "companies": list_companies(order_by="name"),
        "selected_tags": [t for t in tags if t.id in selected],
    }


def person_page(person_id: int) -> dict | None:
    person = get_person(person_id)
    if person is None:
        return None
    roles = list_roles_for_person(person_id)
    role_statuses = list_role_interactions(role_ids=[r.id for r in roles])
    return {
        "person": person,
        "tags": list_person_tags(person_id),
        "all_tags": list_tags(),
        "person_interactions": list_person_interactions(person_id=person_id),
        "role_interactions": list_role_interactions(person_id=person_id),
        "roles": build_role_summaries(roles, role_statuses, sort=False),
        "interaction_types": list_interaction_types("person"),
        "companies": list_companies(order_by="name"),
    }
