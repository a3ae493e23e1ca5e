"""Tests for the derived views in overview.py."""

import overview
from db.companies import get_or_create_company
from db.hunts import create_hunt
from db.interactions import create_person_interaction, create_role_interaction
from db.lookups import get_or_create_tag, list_hunt_statuses, list_interaction_types
from db.models import (
    LatestInteraction,
    Person,
    PersonInteraction,
    PersonSummary,
    Role,
    RoleInteraction,
    RoleSummary,
)
from db.people import add_person_tag, create_person
from db.roles import add_role_tag, create_role


def _interaction(id, role_id, name, occurred_at):
    return RoleInteraction(
        id=id, role_id=role_id, interaction_type_name=name, occurred_at=occurred_at
    )


def test_summarize_role_interactions():
    rows = [
        _interaction(9, 1, "Email", "2025-03-05T00:00:00.000Z"),
        _interaction(7, 1, "Ghosted", "2025-03-01T00:00:00.000Z"),
        _interaction(5, 1, "Offer Accepted", "2025-02-01T00:00:00.000Z"),
        _interaction(4, 2, "Interviewed", "2025-02-01T00:00:00.000Z"),
    ]
    latest, statuses = overview.summarize_role_interactions(rows)

    assert latest[1] == LatestInteraction(id=9, name="Email", occurred_at="2025-03-05T00:00:00.000Z")
    assert latest[2].name == "Interviewed"
    assert statuses == {1: "Rejected"}


def test_sort_roles_by_recency():
    roles = [
        Role(id=1, title="beta", created_at="2025-01-01T00:00:00.000Z"),
        Role(id=2, title="Alpha", created_at="2025-01-01T00:00:00.000Z"),
        Role(id=3, title="Gamma", created_at="2025-01-10T00:00:00.000Z"),
        Role(id=4, title="Delta", created_at="2024-01-01T00:00:00.000Z"),
        Role(id=5, title="Epsilon", created_at="2024-01-01T00:00:00.000Z"),
    ]
    latest = {
        # Same time as role 3's creation; no interaction id to compare, so title wins
        4: LatestInteraction(id=10, name="Email", occurred_at="2025-01-10T00:00:00.000Z"),
        5: LatestInteraction(id=11, name="Email", occurred_at="2025-02-01T00:00:00.000Z"),
    }
    ordered = [r.id for r in overview.sort_roles_by_recency(roles, latest)]
    # 5 newest; 4 vs 3 tie on time -> title (Delta < Gamma); 1 vs 2 tie -> Alpha before beta
    assert ordered == [5, 4, 3, 2, 1]


def test_sort_roles_tie_on_time_uses_interaction_id():
    roles = [
        Role(id=1, title="A", created_at="2025-01-01T00:00:00.000Z"),
        Role(id=2, title="B", created_at="2025-01-01T00:00:00.000Z"),
    ]
    latest = {
        1: LatestInteraction(id=3, name="Email", occurred_at="2025-02-01T00:00:00.000Z"),
        2: LatestInteraction(id=8, name="Email", occurred_at="2025-02-01T00:00:00.000Z"),
    }
    assert [r.id for r in overview.sort_roles_by_recency(roles, latest)] == [2, 1]


def test_count_and_filter_roles():
    summaries = [
        RoleSummary(id=1, title="a", created_at="", status="Open",
                    last_interaction_type="Email", tag_ids=[1, 2]),
        RoleSummary(id=2, title="b", created_at="", status="Rejected",
                    last_interaction_type="Rejected", tag_ids=[1]),
        RoleSummary(id=3, title="c", created_at="", status="Open", tag_ids=[]),
    ]
    assert overview.count_statuses(summaries) == {
        "Open": 2, "Accepted": 0, "Rejected": 1, "Closed": 0,
    }
    assert [s.id for s in overview.filter_roles(summaries, status="Open")] == [1, 3]
    assert [s.id for s in overview.filter_roles(summaries, last_interaction="Email")] == [1]
    assert [s.id for s in overview.filter_roles(summaries, tag_ids=[1])] == [1, 2]
    assert [s.id for s in overview.filter_roles(summaries, tag_ids=[1, 2])] == [1]
    assert [s.id for s in overview.filter_roles(summaries, status="Open", tag_ids=[1])] == [1]
    assert overview.filter_roles(summaries, status="Closed") == []


def test_filter_people_requires_every_tag():
    people = [
        PersonSummary(id=1, first_name="A", last_name="A", tag_ids=[1, 2]),
        PersonSummary(id=2, first_name="B", last_name="B", tag_ids=[2]),
    ]
    assert [p.id for p in overview.filter_people(people, [2])] == [1, 2]
    assert [p.id for p in overview.filter_people(people, [1, 2])] == [1]
    assert [p.id for p in overview.filter_people(people, [])] == [1, 2]


def test_company_last_interactions():
    merged = overview.company_last_interactions(
        {1: "2025-01-01T00:00:00.000Z", 2: "2025-03-01T00:00:00.000Z"},
        {1: "2025-02-01T00:00:00.000Z", 3: "2025-01-15T00:00:00.000Z", 2: "2025-01-01T00:00:00.000Z"},
    )
    assert merged == {
        1: "2025-02-01T00:00:00.000Z",
        2: "2025-03-01T00:00:00.000Z",
        3: "2025-01-15T00:00:00.000Z",
    }


def test_person_interaction_stats():
    stats = overview.person_interaction_stats(
        [(1, "2025-01-01T00:00:00.000Z"), (1, "2025-01-05T00:00:00.000Z")],
        [(1, "2025-01-03T00:00:00.000Z"), (2, "2025-02-01T00:00:00.000Z")],
    )
    assert stats == {
        1: (3, "2025-01-05T00:00:00.000Z"),
        2: (1, "2025-02-01T00:00:00.000Z"),
    }


def test_merge_company_interactions():
    role_rows = [
        RoleInteraction(id=4, role_id=1, role_title="Dev", interaction_type_name="Email",
                        occurred_at="2025-01-02T00:00:00.000Z"),
    ]
    person_rows = [
        PersonInteraction(id=6, person_id=3, interaction_type_name="Phone Call",
                          occurred_at="2025-01-02T00:00:00.000Z",
                          person_first_name="Ada", person_last_name="Lovelace"),
        PersonInteraction(id=9, person_id=3, interaction_type_name="Email",
                          occurred_at="2025-01-01T00:00:00.000Z",
                          person_first_name="Ada", person_last_name="Lovelace"),
    ]
    merged = overview.merge_company_interactions(role_rows, person_rows)
    assert [(e["source"], e["id"]) for e in merged] == [("person", 6), ("role", 4), ("person", 9)]
    assert merged[0]["person_name"] == "Ada Lovelace"
    assert merged[1]["role_title"] == "Dev"


def test_order_role_people():
    people = [
        Person(id=1, company_id=2, first_name="Al", last_name="B"),
        Person(id=2, company_id=1, first_name="Zoe", last_name="A"),
        Person(id=3, company_id=1, first_name="Amy", last_name="C"),
    ]
    assert [p.id for p in overview.order_role_people(people, 1)] == [3, 2, 1]


# ---------------------------------------------------------------------------
# Page builders (database-backed)
# ---------------------------------------------------------------------------

def _type_id(scope, name):
    return next(t.id for t in list_interaction_types(scope) if t.name == name)


def test_page_builders_return_none_for_missing(db):
    assert overview.hunt_page(1) is None
    assert overview.role_page(1) is None
    assert overview.company_page(1) is None
    assert overview.person_page(1) is None


def test_hunt_page(db):
    status_id = list_hunt_statuses()[0].id
    hunt = create_hunt("Search", status_id, "2025-01-01T00:00:00.000Z")
    acme, _ = get_or_create_company("Acme")
    quiet = create_role(hunt.id, acme.id, "Quiet", "2025-01-01T00:00:00.000Z")
    busy = create_role(hunt.id, acme.id, "Busy", "2025-01-01T00:00:00.000Z")
    create_role_interaction(busy.id, acme.id, _type_id("role", "Offer Declined"),
                            "2025-02-01T00:00:00.000Z")
    remote = get_or_create_tag("remote")
    add_role_tag(quiet.id, remote.id)

    page = overview.hunt_page(hunt.id)
    assert [r.id for r in page["roles"]] == [busy.id, quiet.id]
    assert page["roles"][0].status == "Closed"
    assert page["roles"][0].last_interaction_type == "Offer Declined"
    assert page["status_counts"]["Closed"] == 1
    assert page["status_counts"]["Open"] == 1
    assert page["total"] == 2

    filtered = overview.hunt_page(hunt.id, tag_ids=[remote.id])
    assert [r.id for r in filtered["roles"]] == [quiet.id]
    assert filtered["total"] == 2
    assert filtered["filters"]["tags"] == [remote]


def test_company_and_people_pages(db):
    status_id = list_hunt_statuses()[0].id
    hunt = create_hunt("Search", status_id, "2025-01-01T00:00:00.000Z")
    acme, _ = get_or_create_company("Acme")
    globex, _ = get_or_create_company("Globex")
    role = create_role(hunt.id, acme.id, "Dev", "2025-01-01T00:00:00.000Z")
    ada = create_person(acme.id, "Ada", "Lovelace")
    bob = create_person(globex.id, "Bob", "Builder")
    friendly = get_or_create_tag("friendly")
    add_person_tag(bob.id, friendly.id)

    create_role_interaction(role.id, acme.id, _type_id("role", "Interviewed"),
                            "2025-01-05T00:00:00.000Z", person_id=bob.id)
    create_person_interaction(ada.id, _type_id("person", "Email"), "2025-01-07T00:00:00.000Z")

    summaries = {c.name: c for c in overview.company_summaries()}
    assert summaries["Acme"].role_count == 1
    assert summaries["Acme"].person_count == 1
    assert summaries["Acme"].last_interaction_at == "2025-01-07T00:00:00.000Z"
    assert summaries["Globex"].last_interaction_at is None

    page = overview.company_page(acme.id)
    assert [e["source"] for e in page["interactions"]] == ["person", "role"]
    assert [p.id for p in page["people"]] == [ada.id]

    people = {p.id: p for p in overview.person_summaries()}
    assert people[bob.id].interaction_count == 1
    assert people[bob.id].last_interaction_at == "2025-01-05T00:00:00.000Z"
    assert people[ada.id].interaction_count == 1
    assert [p.id for p in overview.person_summaries([friendly.id])] == [bob.id]

    role_page = overview.role_page(role.id)
    assert [p.id for p in role_page["people"]] == [bob.id]
    assert [p.id for p in role_page["person_options"]] == [ada.id, bob.id]
    assert role_page["status"] == "Open"

    person_page = overview.person_page(bob.id)
    assert [r.id for r in person_page["roles"]] == [role.id]
    assert len(person_page["role_interactions"]) == 1
