"""
tests/conftest.py
"""
from __future__ import annotations

from pathlib import Path
from typing import Generator

import pytest
from flask.testing import FlaskClient

# The single-file app lives here:
from postdesk.blog import app, get_db, init_db

CSRF = "test-token"  # shared constant so the token matches the session


@pytest.fixture(scope="session")
def _tmp_db_path(tmp_path_factory: pytest.TempPathFactory) -> Path:
    """One temp file for the whole test session (faster than per-test)."""
    db_file = tmp_path_factory.mktemp("data") / "test.sqlite3"
    return db_file


@pytest.fixture(scope="session", autouse=True)
def _configure_app(_tmp_db_path: Path) -> None:
    """
    Configure the Flask app *once* before the first test is collected.
    """
    app.config.update(
        TESTING=True,
        DATABASE=str(_tmp_db_path),
    )
    with app.app_context():
        init_db()


@pytest.fixture(autouse=True)
def _empty_posts(_configure_app) -> None:
    """Every test starts with an empty post table."""
    with app.app_context():
        db = get_db()
        db.execute("DELETE FROM post")
        db.commit()


@pytest.fixture
def client() -> Generator[FlaskClient, None, None]:
    """
    Gives each test an isolated application context *and* test client.

    Yields:
        `flask.testing.FlaskClient`
    """
    with app.test_client() as client:
        with app.app_context():
            yield client


@pytest.fixture
def admin_client(client: FlaskClient) -> FlaskClient:
    """A test client whose session already carries the admin flag."""
    with client.session_transaction() as sess:
        sess["logged_in"] = True
        sess["csrf"] = CSRF
    return client
