"""Smoke test for the database module.

Run: python -m db.smoke_test
"""

import tempfile
from pathlib import Path

from db.connection import close_db, init_db
from db.companies import delete_company, get_or_create_company, list_companies
from db.hunts import create_hunt, delete_hunt, get_hunt, latest_hunt_id, list_hunt_summaries
from db.interactions import (
    create_person_interaction,
    create_role_interaction,
    list_person_interactions,
    list_role_interactions,
)
from db.lookups import (
    get_or_create_currency,
    get_or_create_tag,
    list_hunt_statuses,
    list_interaction_types,
)
from db.people import add_person_tag, create_person, get_person, list_person_tags
from db.roles import add_role_tag, create_role, get_role, list_role_tags, list_roles
from role_status import derive_role_status


def main() -> None:
    # Use a temp file so we don't pollute the project
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = f.name

    print(f"Using temp DB: {db_path}")

    try:
        conn = init_db(db_path)

        # Verify tables exist
        tables = [
            r["name"]
            for r in conn.execute(
                "SELECT name FROM sqlite_master WHERE type='table' ORDER BY name"
            ).fetchall()
        ]
        expected = {
            "company", "currency", "hunt", "hunt_status", "interaction_person",
            "interaction_role", "interaction_type_person", "interaction_type_role",
            "person", "person_tag", "role", "role_tag", "tag",
        }
        assert expected.issubset(set(tables)), f"Missing tables: {expected - set(tables)}"
        print(f"[PASS] All {len(expected)} tables created")

        # ----------------------------------------------------------
        # Lookups
        # ----------------------------------------------------------
        statuses = [s.name for s in list_hunt_statuses(db=conn)]
        assert statuses == ["active", "cancelled", "failed", "success"]
        role_types = {t.name: t.id for t in list_interaction_types("role", db=conn)}
        assert "Offer Accepted" in role_types
        print("[PASS] Lookups seeded")

        init_db(db_path)
        assert len(list_hunt_statuses(db=conn)) == 4
        print("[PASS] init_db() is idempotent")

        usd = get_or_create_currency("usd", db=conn)
        assert usd.code == "USD"
        assert get_or_create_currency("USD", db=conn).id == usd.id
        print("[PASS] get_or_create_currency() upper-cases and dedupes")

        # ----------------------------------------------------------
        # Hunts, companies, roles
        # ----------------------------------------------------------
        active_id = list_hunt_statuses(db=conn)[0].id
        hunt = create_hunt("Spring search", active_id, "2025-03-01T00:00:00.000Z", db=conn)
        assert hunt.status == "active"
        assert latest_hunt_id(db=conn) == hunt.id
        print(f"[PASS] create_hunt() -> id={hunt.id}")

        acme, created = get_or_create_company("Acme", url="https://acme.test", db=conn)
        assert created
        again, created = get_or_create_company("Acme", db=conn)
        assert not created and again.id == acme.id
        print("[PASS] get_or_create_company() dedupes by name")

        role = create_role(
            hunt.id, acme.id, "Backend Engineer", "2025-03-02T09:00:00.000Z",
            salary_lower_end=100000, salary_higher_end=120000, currency_id=usd.id, db=conn,
        )
        assert role.company_name == "Acme" and role.currency_code == "USD"
        assert list_hunt_summaries(db=conn)[0].role_count == 1
        print(f"[PASS] create_role() -> id={role.id}")

        tag = get_or_create_tag("remote", db=conn)
        add_role_tag(role.id, tag.id, db=conn)
        add_role_tag(role.id, tag.id, db=conn)
        assert [t.name for t in list_role_tags(role.id, db=conn)] == ["remote"]
        print("[PASS] add_role_tag() is idempotent")

        # ----------------------------------------------------------
        # People and interactions
        # ----------------------------------------------------------
        person = create_person(acme.id, "Ada", "Lovelace", title="Recruiter", db=conn)
        add_person_tag(person.id, tag.id, db=conn)
        assert [t.id for t in list_person_tags(person.id, db=conn)] == [tag.id]

        create_role_interaction(
            role.id, acme.id, role_types["Application Submitted"],
            "2025-03-03T10:00:00.000Z", db=conn,
        )
        create_role_interaction(
            role.id, acme.id, role_types["Rejected"],
            "2025-03-10T10:00:00.000Z", person_id=person.id, db=conn,
        )
        rows = list_role_interactions(role_id=role.id, db=conn)
        assert [r.interaction_type_name for r in rows] == ["Rejected", "Application Submitted"]
        assert derive_role_status(r.interaction_type_name for r in rows) == "Rejected"
        print("[PASS] Role interactions listed newest first; status derived")

        email_id = list_interaction_types("person", db=conn)[0].id
        create_person_interaction(person.id, email_id, "2025-03-04T08:00:00.000Z", db=conn)
        assert len(list_person_interactions(company_id=acme.id, db=conn)) == 1
        print("[PASS] Person interactions")

        # ----------------------------------------------------------
        # Cascades
        # ----------------------------------------------------------
        documents = delete_hunt(hunt.id, db=conn)
        assert documents == []
        assert get_hunt(hunt.id, db=conn) is None
        assert get_role(role.id, db=conn) is None
        assert list_role_interactions(db=conn) == []
        print("[PASS] delete_hunt() cascades to roles and interactions")

        assert delete_company(acme.id, db=conn) == []
        assert get_person(person.id, db=conn) is None
        assert list_companies(db=conn) == []
        assert list_roles(db=conn) == []
        print("[PASS] delete_company() cascades to people")

        print("\n=== All smoke tests passed! ===")

    finally:
        close_db()
        Path(db_path).unlink(missing_ok=True)
        Path(db_path + "-wal").unlink(missing_ok=True)
        Path(db_path + "-shm").unlink(missing_ok=True)


if __name__ == "__main__":
    main()
