"""DDL statements for the sigh database.

All statements use IF NOT EXISTS so init_db() is idempotent.

Timestamps are ISO-8601 UTC text with millisecond precision and a trailing
``Z`` (see validation.to_iso), so ORDER BY on them is chronological.
"""

SCHEMA_SQL = """
-- Hunt statuses: lookup seeded with active/cancelled/failed/success
CREATE TABLE IF NOT EXISTS hunt_status (
    id   INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL UNIQUE
);

-- Hunts: one job-search campaign each
CREATE TABLE IF NOT EXISTS hunt (
    id             INTEGER PRIMARY KEY AUTOINCREMENT,
    hunt_status_id INTEGER NOT NULL REFERENCES hunt_status(id),
    name           TEXT NOT NULL,
    notes          TEXT,
    start_date     TEXT NOT NULL,
    end_date       TEXT,
    CHECK (end_date IS NULL OR end_date >= start_date)
);

CREATE TABLE IF NOT EXISTS company (
    id       INTEGER PRIMARY KEY AUTOINCREMENT,
    name     TEXT NOT NULL,
    url      TEXT,
    linkedin TEXT,
    notes    TEXT
);

CREATE TABLE IF NOT EXISTS currency (
    id   INTEGER PRIMARY KEY AUTOINCREMENT,
    code TEXT NOT NULL UNIQUE
);

-- People: contacts, always attached to a company
CREATE TABLE IF NOT EXISTS person (
    id         INTEGER PRIMARY KEY AUTOINCREMENT,
    company_id INTEGER NOT NULL REFERENCES company(id),
    first_name TEXT NOT NULL,
    last_name  TEXT NOT NULL,
    title      TEXT,
    phone      TEXT,
    email      TEXT,
    linkedin   TEXT,
    notes      TEXT
);

-- Roles: job postings tracked within a hunt
CREATE TABLE IF NOT EXISTS role (
    id                        INTEGER PRIMARY KEY AUTOINCREMENT,
    hunt_id                   INTEGER NOT NULL REFERENCES hunt(id),
    company_id                INTEGER NOT NULL REFERENCES company(id),
    title                     TEXT NOT NULL,
    created_at                TEXT NOT NULL,
    description               TEXT,
    description_document_path TEXT,  -- stored file name under the attachments root
    description_document_name TEXT,  -- original upload name, for display
    notes                     TEXT,
    salary_lower_end          INTEGER CHECK (salary_lower_end IS NULL OR salary_lower_end >= 0),
    salary_higher_end         INTEGER CHECK (salary_higher_end IS NULL OR salary_higher_end >= 0),
    currency_id               INTEGER REFERENCES currency(id),
    CHECK (salary_lower_end IS NULL OR salary_higher_end IS NULL
           OR salary_lower_end <= salary_higher_end)
);

CREATE TABLE IF NOT EXISTS tag (
    id   INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL UNIQUE
);

CREATE TABLE IF NOT EXISTS role_tag (
    role_id INTEGER NOT NULL REFERENCES role(id),
    tag_id  INTEGER NOT NULL REFERENCES tag(id),
    PRIMARY KEY (role_id, tag_id)
);

CREATE TABLE IF NOT EXISTS person_tag (
    person_id INTEGER NOT NULL REFERENCES person(id),
    tag_id    INTEGER NOT NULL REFERENCES tag(id),
    PRIMARY KEY (person_id, tag_id)
);

-- Interaction types recorded against roles (drive the derived role status)
CREATE TABLE IF NOT EXISTS interaction_type_role (
    id   INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL UNIQUE
);

-- Role interactions; company_id is copied from the role at creation time
CREATE TABLE IF NOT EXISTS interaction_role (
    id                  INTEGER PRIMARY KEY AUTOINCREMENT,
    company_id          INTEGER NOT NULL REFERENCES company(id),
    person_id           INTEGER REFERENCES person(id),
    role_id             INTEGER NOT NULL REFERENCES role(id),
    interaction_type_id INTEGER NOT NULL REFERENCES interaction_type_role(id),
    occurred_at         TEXT NOT NULL,
    notes               TEXT
);

CREATE TABLE IF NOT EXISTS interaction_type_person (
    id   INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL UNIQUE
);

CREATE TABLE IF NOT EXISTS interaction_person (
    id                  INTEGER PRIMARY KEY AUTOINCREMENT,
    person_id           INTEGER NOT NULL REFERENCES person(id),
    interaction_type_id INTEGER NOT NULL REFERENCES interaction_type_person(id),
    occurred_at         TEXT NOT NULL,
    notes               TEXT
);

-- Indexes for common query patterns
CREATE INDEX IF NOT EXISTS idx_hunt_start_date           ON hunt (start_date);
CREATE INDEX IF NOT EXISTS idx_company_name              ON company (name);
CREATE INDEX IF NOT EXISTS idx_person_company_id         ON person (company_id);
CREATE INDEX IF NOT EXISTS idx_role_hunt_id              ON role (hunt_id);
CREATE INDEX IF NOT EXISTS idx_role_company_id           ON role (company_id);
CREATE INDEX IF NOT EXISTS idx_role_tag_tag_id           ON role_tag (tag_id);
CREATE INDEX IF NOT EXISTS idx_person_tag_tag_id         ON person_tag (tag_id);
CREATE INDEX IF NOT EXISTS idx_interaction_role_role_id  ON interaction_role (role_id);
CREATE INDEX IF NOT EXISTS idx_interaction_role_person   ON interaction_role (person_id);
CREATE INDEX IF NOT EXISTS idx_interaction_role_company  ON interaction_role (company_id);
CREATE INDEX IF NOT EXISTS idx_interaction_role_occurred ON interaction_role (occurred_at DESC, id DESC);
CREATE INDEX IF NOT EXISTS idx_interaction_person_person ON interaction_person (person_id);
"""

HUNT_STATUSES = ["active", "cancelled", "failed", "success"]

ROLE_INTERACTION_TYPES = [
    "Email",
    "Phone Call",
    "Instant Message",
    "Rejected",
    "Application Submitted",
    "Ghosted",
    "Interviewed",
    "Offer Received",
    "Offer Accepted",
    "Offer Declined",
    "Decision To Not Pursue",
]

PERSON_INTERACTION_TYPES = ["Email", "Phone Call", "Instant Message"]

CURRENCY_CODES = ["USD", "EUR", "GBP", "CAD"]
