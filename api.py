"""JSON endpoints, mounted by app.py at /api.

Every handler answers with JSON. Client mistakes raise ApiError, which the
blueprint's error handler turns into ``{"error": message}`` with the status
carried on the exception. Keys on the wire are camelCase.
"""

from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request, send_file

import attachments
import overview
from db.companies import (
    delete_company,
    get_company,
    get_or_create_company,
    list_companies,
    update_company,
)
from db.hunts import create_hunt, delete_hunt, get_hunt, list_hunts, update_hunt
from db.interactions import (
    create_person_interaction,
    create_role_interaction,
    delete_person_interaction,
    delete_role_interaction,
    get_person_interaction,
    get_role_interaction,
    update_person_interaction,
    update_role_interaction,
)
from db.lookups import (
    get_currency,
    get_hunt_status,
    get_interaction_type,
    get_or_create_currency,
    get_or_create_interaction_type,
    get_or_create_tag,
    get_tag,
    list_currencies,
    list_hunt_statuses,
    list_interaction_types,
    list_tags,
)
from db.people import (
    add_person_tag,
    create_person,
    delete_person,
    get_person,
    remove_person_tag,
    update_person,
)
from db.roles import (
    add_role_tag,
    create_role,
    delete_role,
    get_role,
    remove_role_tag,
    update_role,
)
from validation import (
    ApiError,
    check_salary_range,
    date_or_now,
    optional_id,
    optional_text,
    parse_date,
    parse_id,
    parse_salary,
    read_payload,
    require_id,
    required_text,
    to_iso,
    utc_now,
)

api = Blueprint("api", __name__, url_prefix="/api")


@api.errorhandler(ApiError)
def handle_api_error(error: ApiError):
    return jsonify({"error": error.message}), error.status


def _path_id(raw: str, entity: str) -> int:
    return require_id(raw, f"Valid {entity} id is required.")


def _camel(column: str) -> str:
    head, *rest = column.split("_")
    return head + "".join(part.title() for part in rest)


def _updated(entity_id: int, updates: dict):
    """Echo a PATCH back as {id, ...updates} with camelCase keys."""
    body = {"id": entity_id}
    body.update({_camel(column): value for column, value in updates.items()})
    return jsonify(body)


def _nullable_text_updates(payload: dict, updates: dict, fields: dict[str, str]) -> None:
    """Copy optional text fields present in *payload*; blanks become None."""
    for key, column in fields.items():
        if key in payload:
            updates[column] = optional_text(payload[key])


def _unlink_documents(documents: list[str]) -> None:
    for name in documents:
        attachments.remove_attachment(name)


def _currency_id(payload: dict) -> int | None:
    raw = payload["currencyId"]
    if raw is None:
        return None
    currency_id = require_id(raw, "Valid currencyId is required.")
    if get_currency(currency_id) is None:
        raise ApiError("Currency not found.")
    return currency_id


def _existing_company_id(raw) -> int:
    company_id = require_id(raw, "Valid companyId is required.")
    if get_company(company_id) is None:
        raise ApiError("Company not found.")
    return company_id


def _tag_ids_arg() -> list[int]:
    return [tag_id for tag_id in (parse_id(v) for v in request.args.getlist("tag")) if tag_id]


# ---------------------------------------------------------------------------
# Attachments
# ---------------------------------------------------------------------------

@api.get("/attachments/<path:filename>")
def serve_attachment(filename):
    path = attachments.resolve_attachment_path(filename)
    if not path.name or not path.is_file():
        raise ApiError("File not found.", 404)
    return send_file(
        path,
        mimetype="application/octet-stream",
        as_attachment=False,
        download_name=path.name,
    )


# ---------------------------------------------------------------------------
# Companies
# ---------------------------------------------------------------------------

def _company_json(company) -> dict:
    return {
        "id": company.id,
        "name": company.name,
        "url": company.url,
        "linkedin": company.linkedin,
    }


@api.get("/companies")
def companies_index():
    return jsonify({"companies": [_company_json(c) for c in list_companies()]})


@api.post("/companies")
def companies_create():
    payload = read_payload()
    name = required_text(payload.get("name"), "Company name is required.")
    company, created = get_or_create_company(
        name,
        url=optional_text(payload.get("url")),
        linkedin=optional_text(payload.get("linkedin")),
    )
    if created:
        current_app.logger.info("Created company %s (%s)", company.id, company.name)
    return jsonify(_company_json(company))


@api.patch("/companies/<raw_id>")
def companies_update(raw_id):
    company_id = _path_id(raw_id, "company")
    if get_company(company_id) is None:
        raise ApiError("Company not found.", 404)
    payload = read_payload()
    updates: dict = {}
    if "name" in payload:
        updates["name"] = required_text(payload["name"], "Company name is required.")
    _nullable_text_updates(
        payload, updates, {"url": "url", "linkedin": "linkedin", "notes": "notes"}
    )
    if not updates:
        raise ApiError("No updates provided.")
    update_company(company_id, updates)
    return _updated(company_id, updates)


@api.delete("/companies/<raw_id>")
def companies_delete(raw_id):
    company_id = _path_id(raw_id, "company")
    documents = delete_company(company_id)
    if documents is None:
        raise ApiError("Company not found.", 404)
    _unlink_documents(documents)
    current_app.logger.info("Deleted company %s", company_id)
    return jsonify({"id": company_id})


# ---------------------------------------------------------------------------
# Lookups: currencies, hunt statuses, tags, interaction types
# ---------------------------------------------------------------------------

@api.get("/currencies")
def currencies_index():
    return jsonify({"currencies": [{"id": c.id, "code": c.code} for c in list_currencies()]})


@api.post("/currencies")
def currencies_create():
    payload = read_payload()
    code = required_text(payload.get("code"), "Currency code is required.")
    currency = get_or_create_currency(code)
    return jsonify({"id": currency.id, "code": currency.code})


@api.get("/hunt-statuses")
def hunt_statuses_index():
    return jsonify({"statuses": [{"id": s.id, "name": s.name} for s in list_hunt_statuses()]})


@api.get("/tags")
def tags_index():
    return jsonify({"tags": [{"id": t.id, "name": t.name} for t in list_tags()]})


@api.post("/tags")
def tags_create():
    payload = read_payload()
    name = required_text(payload.get("name"), "Tag name is required.")
    tag = get_or_create_tag(name)
    return jsonify({"id": tag.id, "name": tag.name})


def _types_index(scope: str):
    types = list_interaction_types(scope)
    return jsonify({"types": [{"id": t.id, "name": t.name} for t in types]})


def _types_create(scope: str):
    payload = read_payload()
    name = required_text(payload.get("name"), "Interaction type name is required.")
    interaction_type = get_or_create_interaction_type(name, scope)
    return jsonify({"id": interaction_type.id, "name": interaction_type.name})


@api.get("/interaction-types")
def interaction_types_index():
    return _types_index("role")


@api.post("/interaction-types")
def interaction_types_create():
    return _types_create("role")


@api.get("/person-interaction-types")
def person_interaction_types_index():
    return _types_index("person")


@api.post("/person-interaction-types")
def person_interaction_types_create():
    return _types_create("person")


# ---------------------------------------------------------------------------
# Hunts
# ---------------------------------------------------------------------------

def _existing_status_id(raw) -> int:
    status_id = require_id(raw, "Valid huntStatusId is required.")
    if get_hunt_status(status_id) is None:
        raise ApiError("Hunt status not found.")
    return status_id


def _check_hunt_dates(start, end) -> None:
    if start is not None and end is not None and end < start:
        raise ApiError("End date must be after the start date.")


@api.get("/hunts")
def hunts_index():
    return jsonify({
        "hunts": [
            {
                "id": h.id,
                "name": h.name,
                "startDate": h.start_date,
                "endDate": h.end_date,
                "statusId": h.hunt_status_id,
                "status": h.status,
            }
            for h in list_hunts()
        ]
    })


@api.post("/hunts")
def hunts_create():
    payload = read_payload()
    name = required_text(payload.get("name"), "Name is required.")
    status_id = _existing_status_id(payload.get("huntStatusId"))
    start = date_or_now(payload.get("startDate"))
    end = parse_date(payload.get("endDate"))
    _check_hunt_dates(start, end)
    hunt = create_hunt(
        name,
        status_id,
        to_iso(start),
        end_date=to_iso(end) if end else None,
        notes=optional_text(payload.get("notes")),
    )
    current_app.logger.info("Created hunt %s (%s)", hunt.id, hunt.name)
    return jsonify({
        "id": hunt.id,
        "name": hunt.name,
        "huntStatusId": hunt.hunt_status_id,
        "startDate": hunt.start_date,
        "endDate": hunt.end_date,
        "notes": hunt.notes,
    })


@api.patch("/hunts/<raw_id>")
def hunts_update(raw_id):
    hunt_id = _path_id(raw_id, "hunt")
    hunt = get_hunt(hunt_id)
    if hunt is None:
        raise ApiError("Hunt not found.", 404)
    payload = read_payload()
    updates: dict = {}
    if "name" in payload:
        updates["name"] = required_text(payload["name"], "Hunt name is required.")
    if "huntStatusId" in payload:
        updates["hunt_status_id"] = _existing_status_id(payload["huntStatusId"])

    next_start = parse_date(hunt.start_date)
    next_end = parse_date(hunt.end_date)
    if "startDate" in payload:
        next_start = parse_date(payload["startDate"])
        if next_start is None:
            raise ApiError("Valid start date is required.")
        updates["start_date"] = to_iso(next_start)
    if "endDate" in payload:
        raw_end = payload["endDate"]
        if raw_end is None or raw_end == "":
            next_end = None
        else:
            next_end = parse_date(raw_end)
            if next_end is None:
                raise ApiError("End date must be a valid date.")
        updates["end_date"] = to_iso(next_end) if next_end else None
    _check_hunt_dates(next_start, next_end)
    _nullable_text_updates(payload, updates, {"notes": "notes"})

    if not updates:
        raise ApiError("No updates provided.")
    update_hunt(hunt_id, updates)
    return _updated(hunt_id, updates)


@api.delete("/hunts/<raw_id>")
def hunts_delete(raw_id):
    hunt_id = _path_id(raw_id, "hunt")
    documents = delete_hunt(hunt_id)
    if documents is None:
        raise ApiError("Hunt not found.", 404)
    _unlink_documents(documents)
    current_app.logger.info("Deleted hunt %s", hunt_id)
    return jsonify({"id": hunt_id})


@api.get("/hunts/<raw_id>/roles")
def hunts_roles(raw_id):
    hunt_id = _path_id(raw_id, "hunt")
    if get_hunt(hunt_id) is None:
        raise ApiError("Hunt not found.", 404)
    roles, counts, total = overview.hunt_roles(
        hunt_id,
        status=request.args.get("status") or None,
        last_interaction=request.args.get("interaction") or None,
        tag_ids=_tag_ids_arg(),
    )
    return jsonify({
        "roles": [
            {
                "id": s.id,
                "title": s.title,
                "createdAt": s.created_at,
                "status": s.status,
                "companyId": s.company_id,
                "companyName": s.company_name,
                "lastInteractionType": s.last_interaction_type,
                "lastInteractionAt": s.last_interaction_at,
                "tagIds": s.tag_ids,
            }
            for s in roles
        ],
        "statusCounts": counts,
        "total": total,
    })


# ---------------------------------------------------------------------------
# Role interactions
# ---------------------------------------------------------------------------

def _existing_type_id(raw, scope: str) -> int:
    type_id = require_id(raw, "Valid interactionTypeId is required.")
    if get_interaction_type(type_id, scope) is None:
        raise ApiError("Interaction type not found.")
    return type_id


@api.post("/interactions")
def interactions_create():
    payload = read_payload()
    role_id = require_id(payload.get("roleId"), "Valid roleId is required.")
    type_id = require_id(payload.get("interactionTypeId"), "Valid interactionTypeId is required.")
    person_id = optional_id(payload.get("personId"), "Valid personId is required.")
    role = get_role(role_id)
    if role is None:
        raise ApiError("Role not found.")
    _existing_type_id(type_id, "role")
    if person_id and get_person(person_id) is None:
        raise ApiError("Person not found.")
    occurred_at = to_iso(date_or_now(payload.get("occurredAt")))
    notes = optional_text(payload.get("notes"))
    interaction = create_role_interaction(
        role_id, role.company_id, type_id, occurred_at, person_id=person_id, notes=notes
    )
    current_app.logger.info(
        "Logged %s on role %s", interaction.interaction_type_name, role_id
    )
    return jsonify({
        "id": interaction.id,
        "roleId": role_id,
        "personId": person_id,
        "interactionTypeId": type_id,
        "occurredAt": occurred_at,
        "notes": notes,
    })


@api.patch("/interactions/<raw_id>")
def interactions_update(raw_id):
    interaction_id = _path_id(raw_id, "interaction")
    payload = read_payload()
    type_id = require_id(payload.get("interactionTypeId"), "Valid interactionTypeId is required.")
    person_id = optional_id(payload.get("personId"), "Valid personId is required.")
    if get_role_interaction(interaction_id) is None:
        raise ApiError("Interaction not found.", 404)
    _existing_type_id(type_id, "role")
    if person_id and get_person(person_id) is None:
        raise ApiError("Person not found.")
    occurred_at = to_iso(date_or_now(payload.get("occurredAt")))
    notes = optional_text(payload.get("notes"))
    update_role_interaction(
        interaction_id, type_id, occurred_at, person_id=person_id, notes=notes
    )
    return jsonify({
        "id": interaction_id,
        "interactionTypeId": type_id,
        "personId": person_id,
        "occurredAt": occurred_at,
        "notes": notes,
    })


@api.delete("/interactions/<raw_id>")
def interactions_delete(raw_id):
    interaction_id = _path_id(raw_id, "interaction")
    if not delete_role_interaction(interaction_id):
        raise ApiError("Interaction not found.", 404)
    return jsonify({"id": interaction_id})


# ---------------------------------------------------------------------------
# Person interactions
# ---------------------------------------------------------------------------

@api.post("/person-interactions")
def person_interactions_create():
    payload = read_payload()
    person_id = require_id(payload.get("personId"), "Valid personId is required.")
    type_id = require_id(payload.get("interactionTypeId"), "Valid interactionTypeId is required.")
    if get_person(person_id) is None:
        raise ApiError("Person not found.")
    _existing_type_id(type_id, "person")
    occurred_at = to_iso(date_or_now(payload.get("occurredAt")))
    notes = optional_text(payload.get("notes"))
    interaction = create_person_interaction(person_id, type_id, occurred_at, notes=notes)
    return jsonify({
        "id": interaction.id,
        "personId": person_id,
        "interactionTypeId": type_id,
        "occurredAt": occurred_at,
        "notes": notes,
    })


@api.patch("/person-interactions/<raw_id>")
def person_interactions_update(raw_id):
    interaction_id = _path_id(raw_id, "interaction")
    payload = read_payload()
    type_id = require_id(payload.get("interactionTypeId"), "Valid interactionTypeId is required.")
    if get_person_interaction(interaction_id) is None:
        raise ApiError("Interaction not found.", 404)
    _existing_type_id(type_id, "person")
    occurred_at = to_iso(date_or_now(payload.get("occurredAt")))
    notes = optional_text(payload.get("notes"))
    update_person_interaction(interaction_id, type_id, occurred_at, notes=notes)
    return jsonify({
        "id": interaction_id,
        "interactionTypeId": type_id,
        "occurredAt": occurred_at,
        "notes": notes,
    })


@api.delete("/person-interactions/<raw_id>")
def person_interactions_delete(raw_id):
    interaction_id = _path_id(raw_id, "interaction")
    if not delete_person_interaction(interaction_id):
        raise ApiError("Interaction not found.", 404)
    return jsonify({"id": interaction_id})


# ---------------------------------------------------------------------------
# People
# ---------------------------------------------------------------------------

_PERSON_TEXT_FIELDS = {
    "title": "title",
    "email": "email",
    "phone": "phone",
    "linkedin": "linkedin",
    "notes": "notes",
}


@api.get("/people")
def people_index():
    return jsonify({
        "people": [
            {
                "id": p.id,
                "firstName": p.first_name,
                "lastName": p.last_name,
                "companyId": p.company_id,
                "companyName": p.company_name,
                "title": p.title,
                "email": p.email,
                "phone": p.phone,
                "linkedin": p.linkedin,
                "tagIds": p.tag_ids,
                "interactionCount": p.interaction_count,
                "lastInteractionAt": p.last_interaction_at,
            }
            for p in overview.person_summaries(_tag_ids_arg())
        ]
    })


@api.post("/people")
def people_create():
    payload = read_payload()
    company_id = require_id(payload.get("companyId"), "Valid companyId is required.")
    first_name = optional_text(payload.get("firstName"))
    last_name = optional_text(payload.get("lastName"))
    if not first_name or not last_name:
        raise ApiError("First and last name are required.")
    if get_company(company_id) is None:
        raise ApiError("Company not found.")
    person = create_person(
        company_id,
        first_name,
        last_name,
        **{column: optional_text(payload.get(key)) for key, column in _PERSON_TEXT_FIELDS.items()},
    )
    current_app.logger.info("Created person %s at company %s", person.id, company_id)
    return jsonify({
        "id": person.id,
        "firstName": first_name,
        "lastName": last_name,
        "companyId": company_id,
    })


@api.patch("/people/<raw_id>")
def people_update(raw_id):
    person_id = _path_id(raw_id, "person")
    if get_person(person_id) is None:
        raise ApiError("Person not found.", 404)
    payload = read_payload()
    updates: dict = {}
    if "firstName" in payload:
        updates["first_name"] = required_text(payload["firstName"], "First name is required.")
    if "lastName" in payload:
        updates["last_name"] = required_text(payload["lastName"], "Last name is required.")
    if "companyId" in payload:
        updates["company_id"] = _existing_company_id(payload["companyId"])
    _nullable_text_updates(payload, updates, _PERSON_TEXT_FIELDS)
    if not updates:
        raise ApiError("No updates provided.")
    update_person(person_id, updates)
    return _updated(person_id, updates)


@api.delete("/people/<raw_id>")
def people_delete(raw_id):
    person_id = _path_id(raw_id, "person")
    if not delete_person(person_id):
        raise ApiError("Person not found.", 404)
    current_app.logger.info("Deleted person %s", person_id)
    return jsonify({"id": person_id})


@api.post("/people/<raw_id>/tags")
def people_tag_add(raw_id):
    person_id = _path_id(raw_id, "person")
    tag_id = require_id(read_payload().get("tagId"), "Valid tag id is required.")
    if get_person(person_id) is None:
        raise ApiError("Person not found.", 404)
    if get_tag(tag_id) is None:
        raise ApiError("Tag not found.", 404)
    add_person_tag(person_id, tag_id)
    return jsonify({"personId": person_id, "tagId": tag_id})


@api.delete("/people/<raw_id>/tags")
def people_tag_remove(raw_id):
    person_id = _path_id(raw_id, "person")
    tag_id = require_id(read_payload().get("tagId"), "Valid tag id is required.")
    remove_person_tag(person_id, tag_id)
    return jsonify({"personId": person_id, "tagId": tag_id})


# ---------------------------------------------------------------------------
# Roles
# ---------------------------------------------------------------------------

@api.post("/roles")
def roles_create():
    payload = read_payload()
    title = required_text(payload.get("title"), "Role title is required.")
    hunt_id = require_id(payload.get("huntId"), "Valid huntId is required.")
    company_id = parse_id(payload.get("companyId"))
    company_name = optional_text(payload.get("companyName"))
    if not company_id and not company_name:
        raise ApiError("Company name is required.")
    if get_hunt(hunt_id) is None:
        raise ApiError("Hunt not found.")
    if company_id and get_company(company_id) is None:
        raise ApiError("Company not found.")

    lower = parse_salary(payload.get("salaryLowerEnd"), "Salary lower end")
    higher = parse_salary(payload.get("salaryHigherEnd"), "Salary higher end")
    check_salary_range(lower, higher)
    currency_id = _currency_id(payload) if "currencyId" in payload else None

    if not company_id:
        company, created = get_or_create_company(
            company_name,
            url=optional_text(payload.get("companyUrl")),
            linkedin=optional_text(payload.get("companyLinkedin")),
        )
        company_id = company.id
        if created:
            current_app.logger.info("Created company %s (%s)", company.id, company.name)

    role = create_role(
        hunt_id,
        company_id,
        title,
        to_iso(utc_now()),
        description=optional_text(payload.get("description")),
        salary_lower_end=lower,
        salary_higher_end=higher,
        currency_id=currency_id,
    )
    current_app.logger.info("Created role %s (%s) in hunt %s", role.id, role.title, hunt_id)
    return jsonify({
        "id": role.id,
        "huntId": role.hunt_id,
        "companyId": role.company_id,
        "title": role.title,
        "createdAt": role.created_at,
        "description": role.description,
        "salaryLowerEnd": role.salary_lower_end,
        "salaryHigherEnd": role.salary_higher_end,
        "currencyId": role.currency_id,
    })


@api.patch("/roles/<raw_id>")
def roles_update(raw_id):
    role_id = _path_id(raw_id, "role")
    payload = read_payload()
    role = get_role(role_id)
    if role is None:
        raise ApiError("Role not found.", 404)
    updates: dict = {}
    _nullable_text_updates(payload, updates, {"notes": "notes"})
    if "title" in payload:
        updates["title"] = required_text(payload["title"], "Role title is required.")
    _nullable_text_updates(payload, updates, {"description": "description"})

    next_lower = role.salary_lower_end
    next_higher = role.salary_higher_end
    if "salaryLowerEnd" in payload:
        next_lower = parse_salary(payload["salaryLowerEnd"], "Salary lower end")
        updates["salary_lower_end"] = next_lower
    if "salaryHigherEnd" in payload:
        next_higher = parse_salary(payload["salaryHigherEnd"], "Salary higher end")
        updates["salary_higher_end"] = next_higher
    check_salary_range(next_lower, next_higher)

    if "currencyId" in payload:
        updates["currency_id"] = _currency_id(payload)
    if "companyId" in payload:
        updates["company_id"] = _existing_company_id(payload["companyId"])

    if not updates:
        raise ApiError("No updates provided.")
    update_role(role_id, updates)
    return _updated(role_id, updates)


@api.delete("/roles/<raw_id>")
def roles_delete(raw_id):
    role_id = _path_id(raw_id, "role")
    documents = delete_role(role_id)
    if documents is None:
        raise ApiError("Role not found.", 404)
    _unlink_documents(documents)
    current_app.logger.info("Deleted role %s", role_id)
    return jsonify({"id": role_id})


@api.post("/roles/<raw_id>/description-document")
def roles_document_upload(raw_id):
    role_id = _path_id(raw_id, "role")
    role = get_role(role_id)
    if role is None:
        raise ApiError("Role not found.", 404)
    upload = request.files.get("file")
    if upload is None:
        raise ApiError("A file is required.")
    stored_name, display_name = attachments.save_upload(upload)
    if role.description_document_path:
        attachments.remove_attachment(role.description_document_path)
    update_role(role_id, {
        "description_document_path": stored_name,
        "description_document_name": display_name,
    })
    return jsonify({"ok": True, "storedName": stored_name, "name": display_name})


@api.delete("/roles/<raw_id>/description-document")
def roles_document_delete(raw_id):
    role_id = _path_id(raw_id, "role")
    role = get_role(role_id)
    if role is None:
        raise ApiError("Role not found.", 404)
    if role.description_document_path:
        attachments.remove_attachment(role.description_document_path)
    update_role(role_id, {
        "description_document_path": None,
        "description_document_name": None,
    })
    return jsonify({"ok": True})


@api.post("/roles/<raw_id>/tags")
def roles_tag_add(raw_id):
    role_id = _path_id(raw_id, "role")
    tag_id = require_id(read_payload().get("tagId"), "Valid tag id is required.")
    if get_role(role_id) is None:
        raise ApiError("Role not found.", 404)
    if get_tag(tag_id) is None:
        raise ApiError("Tag not found.", 404)
    add_role_tag(role_id, tag_id)
    return jsonify({"roleId": role_id, "tagId": tag_id})


@api.delete("/roles/<raw_id>/tags")
def roles_tag_remove(raw_id):
    role_id = _path_id(raw_id, "role")
    tag_id = require_id(read_payload().get("tagId"), "Valid tag id is required.")
    remove_role_tag(role_id, tag_id)
    return jsonify({"roleId": role_id, "tagId": tag_id})
