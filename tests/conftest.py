"""
Pytest fixtures for Issue Tracker tests.

Each test gets its own in-memory SQLite database (StaticPool keeps the single
connection alive across sessions and threads).
"""

from datetime import datetime, timedelta, timezone

import pytest

from core.db import DatabaseManager
from core.models import Issue

TEST_DATABASE_URL = "sqlite://"


@pytest.fixture(scope="function")
def database():
    """Create a fresh test database for each test."""
    database = DatabaseManager()
    database.initialize(TEST_DATABASE_URL)
    database.create_all_tables()

    yield database

    database.dispose()


@pytest.fixture
def test_session(database):
    """Get a test session from the test database."""
    session = database.SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


@pytest.fixture
def sample_issue_data():
    """Fields of a fully populated issue, as a client would send them."""
    return {
        "issue_title": "Fix error in posting data",
        "issue_text": "When we post data it has an error.",
        "created_by": "Joe",
        "assigned_to": "Joe",
        "status_text": "In QA",
    }


def _create_issue(session, project, created_on=None, **overrides):
    """Helper to create an issue directly through the ORM."""
    created_on = created_on or datetime.now(timezone.utc)
    issue = Issue(
        project=project,
        issue_title=overrides.get("issue_title", "Title"),
        issue_text=overrides.get("issue_text", "Text"),
        created_by=overrides.get("created_by", "Creator"),
        assigned_to=overrides.get("assigned_to", ""),
        status_text=overrides.get("status_text", ""),
        open=overrides.get("open", True),
        created_on=created_on,
        updated_on=created_on,
    )
    session.add(issue)
    session.flush()
    return issue


@pytest.fixture
def multiple_issues_in_db(test_session):
    """Create issues across two projects with distinct creation times."""
    base = datetime(2024, 1, 15, 10, 0, tzinfo=timezone.utc)
    issues = [
        _create_issue(
            test_session,
            "apitest",
            created_on=base,
            issue_title="Login fails",
            created_by="alice",
            assigned_to="bob",
        ),
        _create_issue(
            test_session,
            "apitest",
            created_on=base + timedelta(minutes=5),
            issue_title="Typo in footer",
            created_by="bob",
            open=False,
        ),
        _create_issue(
            test_session,
            "apitest",
            created_on=base + timedelta(minutes=10),
            issue_title="Slow search",
            created_by="alice",
            status_text="In QA",
        ),
        _create_issue(
            test_session,
            "other",
            created_on=base + timedelta(minutes=15),
            issue_title="Unrelated",
            created_by="carol",
        ),
    ]
    test_session.commit()
    return [issue.id for issue in issues]
