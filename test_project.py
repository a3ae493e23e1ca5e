#!/usr/bin/env python3
"""Project integrity tests.

Ensures critical files exist and the pure helpers (status derivation,
payload parsing, formatting, attachment names) behave.

Run: python test_project.py   (or: pytest)
"""

import re
import sys
from datetime import datetime, timezone
from pathlib import Path

ROOT = Path(__file__).resolve().parent


def test_critical_files_exist():
    """Test that critical project files exist."""
    critical_files = [
        "app.py",
        "api.py",
        "config.py",
        "validation.py",
        "role_status.py",
        "overview.py",
        "attachments.py",
        "db/connection.py",
        "db/schema.py",
        "db/models.py",
        "db/hunts.py",
        "db/companies.py",
        "db/people.py",
        "db/roles.py",
        "db/interactions.py",
        "db/lookups.py",
        "db/seed.py",
        "templates/base.html",
        "templates/index.html",
        "templates/hunt_detail.html",
        "templates/role_detail.html",
        "templates/companies.html",
        "templates/company_detail.html",
        "templates/people.html",
        "templates/person_detail.html",
        "static/app.js",
        "static/style.css",
    ]

    missing = [f for f in critical_files if not (ROOT / f).exists()]
    for file_path in missing:
        print(f"[FAIL] Missing critical file: {file_path}")
    assert not missing, f"{len(missing)} critical file(s) missing"
    print(f"[PASS] All {len(critical_files)} critical files exist")


def test_app_imports():
    """Test that app.py can be imported without touching the database."""
    import app

    assert callable(app.create_app)
    print("[PASS] app.py imports successfully")


def test_role_status_mapping():
    """Status-bearing interaction types map to statuses; others don't."""
    from role_status import derive_role_status, status_from_interaction_type

    assert status_from_interaction_type("Offer Declined") == "Closed"
    assert status_from_interaction_type("  offer accepted ") == "Accepted"
    assert status_from_interaction_type("GHOSTED") == "Rejected"
    assert status_from_interaction_type("Rejected") == "Rejected"
    assert status_from_interaction_type("Decision To Not Pursue") == "Closed"
    assert status_from_interaction_type("Interviewed") is None
    assert status_from_interaction_type(None) is None

    # Newest first: the first status-bearing type wins
    assert derive_role_status(["Email", "Rejected", "Offer Accepted"]) == "Rejected"
    assert derive_role_status(["Email", "Interviewed"]) == "Open"
    assert derive_role_status([]) == "Open"
    print("[PASS] Role status derivation")


def test_status_tone():
    from role_status import status_tone

    assert status_tone("") == "yellow"
    assert status_tone(None) == "yellow"
    assert status_tone("Open") == "yellow"
    assert status_tone("Accepted") == "green"
    assert status_tone("rejected") == "red"
    assert status_tone("Closed") == "gray"
    assert status_tone("Something else") == "accent"
    print("[PASS] status_tone()")


def test_format_person_name():
    from role_status import format_person_name

    assert format_person_name(" Ada ", "Lovelace") == "Ada Lovelace"
    assert format_person_name("Ada", "  ") == "Ada"
    assert format_person_name(None, None) == ""
    print("[PASS] format_person_name()")


def test_parse_id():
    from validation import parse_id

    assert parse_id(7) == 7
    assert parse_id("7") == 7
    assert parse_id(" 7 ") == 7
    assert parse_id(7.0) == 7
    assert parse_id("7.0") == 7
    for bad in (None, True, False, 0, -3, "-3", 1.5, "1.5", "abc", "", [], {}):
        assert parse_id(bad) is None, bad
    assert parse_id(2**63 - 1) == 2**63 - 1
    assert parse_id(2**63) is None
    assert parse_id("99999999999999999999") is None
    assert parse_id("1e30") is None
    print("[PASS] parse_id()")


def test_parse_salary():
    import pytest

    from validation import ApiError, check_salary_range, parse_salary

    assert parse_salary(None, "Salary lower end") is None
    assert parse_salary("", "Salary lower end") is None
    assert parse_salary(120000, "Salary lower end") == 120000
    assert parse_salary("95000", "Salary lower end") == 95000
    assert parse_salary(0, "Salary lower end") == 0

    for bad in (-1, 12.5, "12.5", "lots", True, 2**63, "1e30", "inf"):
        with pytest.raises(ApiError) as excinfo:
            parse_salary(bad, "Salary higher end")
        assert excinfo.value.message == "Salary higher end must be a whole number."
        assert excinfo.value.status == 400

    check_salary_range(100, 100)
    check_salary_range(None, 5)
    with pytest.raises(ApiError):
        check_salary_range(200, 100)
    print("[PASS] parse_salary()")


def test_parse_date_and_iso():
    from validation import from_iso, parse_date, to_iso

    assert parse_date("2024-01-05") == datetime(2024, 1, 5, tzinfo=timezone.utc)
    assert parse_date("2024-01-05T10:00:00+02:00") == datetime(
        2024, 1, 5, 8, 0, tzinfo=timezone.utc
    )
    assert parse_date("2024-01-05T10:00:00Z") == datetime(
        2024, 1, 5, 10, 0, tzinfo=timezone.utc
    )
    assert parse_date("not a date") is None
    assert parse_date("") is None
    assert parse_date(12345) is None

    stamp = datetime(2024, 1, 5, 8, 0, 0, 123456, tzinfo=timezone.utc)
    assert to_iso(stamp) == "2024-01-05T08:00:00.123Z"
    assert from_iso("2024-01-05T08:00:00.123Z") == stamp.replace(microsecond=123000)
    assert from_iso(None) is None

    # Years below 1000 stay zero-padded so text order matches time order
    early = datetime(999, 1, 1, tzinfo=timezone.utc)
    assert to_iso(early) == "0999-01-01T00:00:00.000Z"
    assert from_iso(to_iso(early)) == early
    assert to_iso(early) < to_iso(datetime(1000, 1, 1, tzinfo=timezone.utc))

    # Valid ISO text whose UTC conversion leaves the datetime range
    assert parse_date("9999-12-31T23:00:00-05:00") is None
    assert parse_date("0001-01-01T00:30:00+01:00") is None
    print("[PASS] Date parsing and ISO round-trip")


def test_template_filters():
    from app import external_url, format_date, format_datetime, format_salary, linkify

    assert format_salary(None) == "N/A"
    assert format_salary(100) == "100"
    assert format_salary(1234567, "USD") == "1 234 567 USD"
    assert format_salary(120000, None) == "120 000"

    assert format_date("2024-01-05T15:04:00.000Z") == "Jan 5, 2024"
    assert format_datetime("2024-01-05T15:04:00.000Z") == "Jan 5, 2024, 3:04 PM"
    assert format_datetime("2024-01-05T00:30:00.000Z") == "Jan 5, 2024, 12:30 AM"
    assert format_date(None) == ""
    assert format_date("garbage") == ""

    html = str(linkify("See https://example.com/job?id=1 <b>now</b>"))
    assert '<a href="https://example.com/job?id=1"' in html
    assert "&lt;b&gt;now&lt;/b&gt;" in html
    assert 'href="https://www.example.com"' in str(linkify("www.example.com"))
    assert linkify("") == ""

    assert external_url("linkedin.com/in/ada") == "https://linkedin.com/in/ada"
    assert external_url("http://acme.test") == "http://acme.test"
    print("[PASS] Template filters")


def test_attachment_names():
    from attachments import build_stored_filename, resolve_attachment_path, sanitize_filename

    assert sanitize_filename("  My CV (final).pdf ") == "My_CV_final_.pdf"
    assert sanitize_filename("   ") == ""
    assert re.fullmatch(r"[0-9a-f]{5}_My_CV.pdf", build_stored_filename("My CV.pdf"))
    assert re.fullmatch(r"[0-9a-f]{5}_document", build_stored_filename(""))
    assert resolve_attachment_path("../../etc/passwd").name == "passwd"
    assert resolve_attachment_path("..\\secret.txt").name == "secret.txt"
    print("[PASS] Attachment file names")


def test_remove_attachment_failures():
    """Missing files and OS errors are reported as False, not raised."""
    from unittest.mock import patch

    from attachments import remove_attachment

    assert remove_attachment(None) is False
    assert remove_attachment("") is False
    with patch("pathlib.Path.unlink", side_effect=FileNotFoundError):
        assert remove_attachment("abcde_cv.pdf") is False
    with patch("pathlib.Path.unlink", side_effect=PermissionError("locked")):
        assert remove_attachment("abcde_cv.pdf") is False
    with patch("pathlib.Path.unlink") as unlink:
        assert remove_attachment("abcde_cv.pdf") is True
        unlink.assert_called_once_with()
    print("[PASS] remove_attachment() failure handling")


def main():
    """Run all project tests."""
    print("=" * 60)
    print("Project Integrity Tests")
    print("=" * 60)

    tests = [
        test_critical_files_exist,
        test_app_imports,
        test_role_status_mapping,
        test_status_tone,
        test_format_person_name,
        test_parse_id,
        test_parse_salary,
        test_parse_date_and_iso,
        test_template_filters,
        test_attachment_names,
        test_remove_attachment_failures,
    ]

    results = []
    for test in tests:
        try:
            test()
            results.append(True)
        except Exception as e:
            print(f"[FAIL] Test {test.__name__} crashed: {e}")
            results.append(False)
        print()

    # Summary
    passed = sum(results)
    total = len(results)

    print("=" * 60)
    if all(results):
        print(f"✅ All {total} tests passed!")
        return 0
    print(f"❌ {total - passed} of {total} tests failed")
    return 1


if __name__ == "__main__":
    sys.exit(main())
