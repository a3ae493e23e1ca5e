#!/usr/bin/env python3
"""Flask web application for the job-hunt tracker.

Provides web interface to:
- Create and review hunts with their roles and derived role statuses
- Track companies, people and every interaction with them
- Tag roles and people, and attach a description document to a role

JSON endpoints live in api.py under /api; this module serves the pages.

Usage:
    python app.py
    # Then visit http://localhost:5000
"""

import logging
import re
from datetime import datetime

from flask import Flask, abort, render_template, request
from markupsafe import Markup, escape
from werkzeug.routing import IntegerConverter

import config
import overview
from api import api
from db.connection import init_db
from db.hunts import latest_hunt_id
from role_status import ROLE_STATUSES, format_person_name, status_tone
from validation import MAX_SQLITE_INT, from_iso, parse_id


class IdConverter(IntegerConverter):
    """Positive integers that fit an SQLite INTEGER; anything else is a 404."""

    def __init__(self, url_map):
        super().__init__(url_map, min=1, max=MAX_SQLITE_INT)


URL_PATTERN = re.compile(r'(https?://[^\s<>"]+|www\.[^\s<>"]+)', re.IGNORECASE)


def format_date(value):
    """'Jan 5, 2024' for an ISO timestamp; '' when missing or invalid."""
    parsed = value if isinstance(value, datetime) else from_iso(value)
    if parsed is None:
        return ''
    return f"{parsed.strftime('%b')} {parsed.day}, {parsed.year}"


def format_datetime(value):
    """'Jan 5, 2024, 3:04 PM' for an ISO timestamp; '' when missing or invalid."""
    parsed = value if isinstance(value, datetime) else from_iso(value)
    if parsed is None:
        return ''
    hour = parsed.hour % 12 or 12
    meridiem = 'AM' if parsed.hour < 12 else 'PM'
    return f"{format_date(parsed)}, {hour}:{parsed.minute:02d} {meridiem}"


def format_salary(value, currency_code=None):
    """Digits grouped by spaces ('120 000 USD'), or 'N/A' when unset."""
    if value is None:
        return 'N/A'
    digits = str(int(value))
    grouped = re.sub(r'\B(?=(\d{3})+(?!\d))', ' ', digits)
    return f"{grouped} {currency_code or ''}".strip()


def linkify(text):
    """Escape text and turn bare URLs into links that open in a new tab."""
    if not text:
        return ''
    parts = []
    last = 0
    for match in URL_PATTERN.finditer(text):
        parts.append(escape(text[last:match.start()]))
        url = match.group(0)
        href = url if url.lower().startswith('http') else f"https://{url}"
        parts.append(Markup('<a href="{}" target="_blank" rel="noopener noreferrer">{}</a>').format(href, url))
        last = match.end()
    parts.append(escape(text[last:]))
    return Markup('').join(parts)


def external_url(value):
    """Prefix scheme-less links (e.g. 'linkedin.com/in/x') with https://."""
    if not value:
        return ''
    return value if re.match(r'^https?://', value, re.IGNORECASE) else f"https://{value}"


def _tag_ids_arg():
    return [tag_id for tag_id in (parse_id(v) for v in request.args.getlist('tag')) if tag_id]


def create_app():
    """Build the app, make sure the schema exists and register routes."""
    logging.basicConfig(
        level=config.log_level(),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )
    app = Flask(__name__)
    app.url_map.converters['id'] = IdConverter
    app.logger.setLevel(config.log_level())
    init_db()
    app.register_blueprint(api)

    # Make helper functions available in templates
    app.jinja_env.filters['date'] = format_date
    app.jinja_env.filters['datetime'] = format_datetime
    app.jinja_env.filters['salary'] = format_salary
    app.jinja_env.filters['linkify'] = linkify
    app.jinja_env.filters['external_url'] = external_url
    app.jinja_env.globals.update(
        status_tone=status_tone,
        person_name=format_person_name,
        role_statuses=ROLE_STATUSES,
    )

    @app.context_processor
    def inject_latest_hunt():
        return {'latest_hunt_id': latest_hunt_id()}

    @app.route('/')
    def index():
        """Hunt list with create form."""
        return render_template('index.html', **overview.hunts_page())

    @app.route('/hunts/<id:hunt_id>')
    def hunt_detail(hunt_id):
        """Hunt page with role list and status tiles."""
        page = overview.hunt_page(
            hunt_id,
            status=request.args.get('status') or None,
            last_interaction=request.args.get('interaction') or None,
            tag_ids=_tag_ids_arg(),
        )
        if page is None:
            abort(404)
        return render_template('hunt_detail.html', **page)

    @app.route('/roles/<id:role_id>')
    def role_detail(role_id):
        page = overview.role_page(role_id)
        if page is None:
            abort(404)
        return render_template('role_detail.html', **page)

    @app.route('/companies')
    def companies():
        return render_template('companies.html', **overview.companies_page())

    @app.route('/companies/<id:company_id>')
    def company_detail(company_id):
        page = overview.company_page(company_id)
        if page is None:
            abort(404)
        return render_template('company_detail.html', **page)

    @app.route('/people')
    def people():
        return render_template('people.html', **overview.people_page(_tag_ids_arg()))

    @app.route('/people/<id:person_id>')
    def person_detail(person_id):
        page = overview.person_page(person_id)
        if page is None:
            abort(404)
        return render_template('person_detail.html', **page)

    app.logger.info('Using database %s', config.db_path())
    return app


if __name__ == '__main__':
    create_app().run(debug=True, port=config.port())
