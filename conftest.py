import pytest

from db.connection import close_db, init_db


@pytest.fixture
def db(tmp_path, monkeypatch):
    """Fresh seeded database (and attachments dir) under tmp_path."""
    monkeypatch.setenv("SIGH_DB_LOCATION", str(tmp_path / "sigh.db"))
    monkeypatch.setenv("SIGH_ATTACHMENTS_LOCATION", str(tmp_path / "attachments"))
    close_db()
    conn = init_db()
    yield conn
    close_db()


@pytest.fixture
def app(db):
    from app import create_app

    flask_app = create_app()
    flask_app.config.update(TESTING=True)
    return flask_app


@pytest.fixture
def client(app):
    return app.test_client()
