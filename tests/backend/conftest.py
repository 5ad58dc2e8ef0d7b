import os
import sys
from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.append(PROJECT_ROOT)

from backend.app.main import create_app  # noqa: E402
from core.db import DatabaseManager  # noqa: E402

PROJECT = "apitest"
ISSUES_URL = f"/api/issues/{PROJECT}"


@pytest.fixture
def test_app_client(database) -> Iterator[tuple[TestClient, DatabaseManager]]:
    app = create_app(database=database)

    with TestClient(app) as client:
        yield client, database


@pytest.fixture
def client(test_app_client) -> TestClient:
    client, _ = test_app_client
    return client


@pytest.fixture
def created_issue(client, sample_issue_data) -> dict:
    """An issue created through the API with every field set."""
    resp = client.post(ISSUES_URL, json=sample_issue_data)
    assert resp.status_code == 200, resp.text
    return resp.json()
