"""
Functional tests for /api/issues/{project}.
"""

from datetime import datetime

import pytest

from core.models import Issue, new_issue_id

PROJECT = "apitest"
ISSUES_URL = f"/api/issues/{PROJECT}"


def _delete(client, body=None, **kwargs):
    return client.request("DELETE", ISSUES_URL, json=body, **kwargs)


def _count_issues(database) -> int:
    with database.session() as session:
        return session.query(Issue).count()


# =============================================================================
# POST
# =============================================================================


def test_create_issue_with_every_field(client, sample_issue_data):
    resp = client.post(ISSUES_URL, json=sample_issue_data)

    assert resp.status_code == 200
    data = resp.json()
    for key, value in sample_issue_data.items():
        assert data[key] == value
    assert data["project"] == PROJECT
    assert data["open"] is True
    assert len(data["_id"]) == 32
    assert "id" not in data
    assert data["created_on"] == data["updated_on"]
    assert datetime.fromisoformat(data["created_on"]).tzinfo is not None


def test_create_issue_with_only_required_fields(client):
    resp = client.post(
        ISSUES_URL,
        json={"issue_title": "T", "issue_text": "X", "created_by": "U"},
    )

    assert resp.status_code == 200
    data = resp.json()
    assert data["project"] == PROJECT
    assert data["assigned_to"] == ""
    assert data["status_text"] == ""
    assert data["open"] is True


def test_create_issue_with_missing_required_fields(test_app_client):
    client, database = test_app_client

    resp = client.post(ISSUES_URL, json={"issue_title": "T"})

    assert resp.status_code == 200
    assert resp.json() == {"error": "required field(s) missing"}
    assert _count_issues(database) == 0


def test_create_issue_with_empty_required_field(test_app_client):
    client, database = test_app_client

    resp = client.post(
        ISSUES_URL,
        json={"issue_title": "T", "issue_text": "", "created_by": "U"},
    )

    assert resp.json() == {"error": "required field(s) missing"}
    assert _count_issues(database) == 0


def test_create_issue_ignores_client_supplied_server_fields(client):
    resp = client.post(
        ISSUES_URL,
        json={
            "issue_title": "T",
            "issue_text": "X",
            "created_by": "U",
            "open": False,
            "project": "elsewhere",
            "_id": "0" * 32,
        },
    )

    data = resp.json()
    assert data["open"] is True
    assert data["project"] == PROJECT
    assert data["_id"] != "0" * 32


def test_create_issue_from_form_body(client):
    resp = client.post(
        ISSUES_URL,
        data={"issue_title": "Form", "issue_text": "Sent as a form", "created_by": "browser"},
    )

    assert resp.status_code == 200
    assert resp.json()["issue_title"] == "Form"


def test_create_issue_with_scalar_field_stores_text(client):
    resp = client.post(
        ISSUES_URL,
        json={"issue_title": 123, "issue_text": "X", "created_by": "U", "status_text": False},
    )

    assert resp.status_code == 200
    data = resp.json()
    assert data["issue_title"] == "123"
    assert data["status_text"] == "false"


@pytest.mark.parametrize("value", [{"$ne": None}, ["T"]])
def test_create_issue_with_structured_field(test_app_client, value):
    client, database = test_app_client

    resp = client.post(ISSUES_URL, json={"issue_title": value, "issue_text": "X", "created_by": "U"})

    assert resp.status_code == 200
    assert resp.json() == {"error": "required field(s) missing"}
    assert _count_issues(database) == 0


def test_malformed_json_body_is_rejected(client):
    resp = client.post(
        ISSUES_URL,
        content=b"{not json",
        headers={"Content-Type": "application/json"},
    )

    assert resp.status_code == 400
    assert resp.json() == {"detail": "Malformed request body", "status_code": 400}


def test_json_array_body_is_rejected(client):
    resp = client.post(ISSUES_URL, json=["issue_title"])

    assert resp.status_code == 400


# =============================================================================
# GET
# =============================================================================


def test_list_issues_on_project(client, created_issue):
    client.post("/api/issues/other", json={"issue_title": "O", "issue_text": "X", "created_by": "U"})

    resp = client.get(ISSUES_URL)

    assert resp.status_code == 200
    data = resp.json()
    assert isinstance(data, list)
    assert [issue["_id"] for issue in data] == [created_issue["_id"]]
    assert set(data[0]) == {
        "_id",
        "project",
        "issue_title",
        "issue_text",
        "created_by",
        "assigned_to",
        "status_text",
        "open",
        "created_on",
        "updated_on",
    }


def test_list_issues_empty_project(client):
    resp = client.get("/api/issues/nothing-here")

    assert resp.status_code == 200
    assert resp.json() == []


def test_list_issues_with_one_filter(client, created_issue):
    client.post(ISSUES_URL, json={"issue_title": "B", "issue_text": "X", "created_by": "Someone"})

    resp = client.get(ISSUES_URL, params={"created_by": "Joe"})

    data = resp.json()
    assert len(data) == 1
    assert data[0]["created_by"] == "Joe"


def test_list_issues_with_multiple_filters(client, created_issue):
    client.post(
        ISSUES_URL,
        json={"issue_title": "B", "issue_text": "X", "created_by": "Joe", "assigned_to": "Ann"},
    )

    resp = client.get(ISSUES_URL, params={"created_by": "Joe", "assigned_to": "Joe", "open": "true"})

    data = resp.json()
    assert [issue["_id"] for issue in data] == [created_issue["_id"]]


def test_open_filter_round_trip(client, created_issue):
    open_ids = [issue["_id"] for issue in client.get(ISSUES_URL, params={"open": "true"}).json()]
    closed_ids = [issue["_id"] for issue in client.get(ISSUES_URL, params={"open": "false"}).json()]

    assert created_issue["_id"] in open_ids
    assert created_issue["_id"] not in closed_ids


def test_list_issues_by_id(client, created_issue):
    client.post(ISSUES_URL, json={"issue_title": "B", "issue_text": "X", "created_by": "U"})

    resp = client.get(ISSUES_URL, params={"_id": created_issue["_id"]})

    assert [issue["_id"] for issue in resp.json()] == [created_issue["_id"]]


def test_list_issues_ignores_unknown_and_malformed_params(client, created_issue):
    resp = client.get(
        ISSUES_URL,
        params={"open": "maybe", "priority": "high", "limit": "zero", "sort": "nope"},
    )

    assert [issue["_id"] for issue in resp.json()] == [created_issue["_id"]]


def test_list_issues_sort_and_limit(client):
    for title in ("first", "second", "third"):
        client.post(ISSUES_URL, json={"issue_title": title, "issue_text": "X", "created_by": "U"})

    default_order = [i["issue_title"] for i in client.get(ISSUES_URL).json()]
    newest_two = [
        i["issue_title"]
        for i in client.get(ISSUES_URL, params={"sort": "-created_on", "limit": "2"}).json()
    ]

    assert default_order == ["first", "second", "third"]
    assert newest_two == ["third", "second"]


# =============================================================================
# PUT
# =============================================================================


def test_update_one_field(client, created_issue):
    issue_id = created_issue["_id"]

    resp = client.put(ISSUES_URL, json={"_id": issue_id, "issue_text": "new text"})

    assert resp.status_code == 200
    assert resp.json() == {"result": "successfully updated", "_id": issue_id}

    updated = client.get(ISSUES_URL, params={"_id": issue_id}).json()[0]
    assert updated["issue_text"] == "new text"
    assert updated["issue_title"] == created_issue["issue_title"]
    assert updated["created_on"] == created_issue["created_on"]
    assert datetime.fromisoformat(updated["updated_on"]) >= datetime.fromisoformat(
        created_issue["updated_on"]
    )


def test_update_multiple_fields(client, created_issue):
    issue_id = created_issue["_id"]

    resp = client.put(
        ISSUES_URL,
        json={"_id": issue_id, "issue_title": "new title", "assigned_to": "Ann", "open": "false"},
    )

    assert resp.json() == {"result": "successfully updated", "_id": issue_id}
    updated = client.get(ISSUES_URL, params={"_id": issue_id}).json()[0]
    assert updated["issue_title"] == "new title"
    assert updated["assigned_to"] == "Ann"
    assert updated["open"] is False
    assert updated["status_text"] == created_issue["status_text"]


def test_update_open_accepts_json_boolean(client, created_issue):
    issue_id = created_issue["_id"]

    client.put(ISSUES_URL, json={"_id": issue_id, "open": False})
    closed = client.get(ISSUES_URL, params={"open": "false"}).json()
    client.put(ISSUES_URL, json={"_id": issue_id, "open": "true"})
    reopened = client.get(ISSUES_URL, params={"open": "true"}).json()

    assert [issue["_id"] for issue in closed] == [issue_id]
    assert [issue["_id"] for issue in reopened] == [issue_id]


def test_update_with_missing_id(client):
    resp = client.put(ISSUES_URL, json={"issue_title": "x"})

    assert resp.json() == {"error": "missing _id"}


def test_update_with_no_fields(client, created_issue):
    issue_id = created_issue["_id"]

    resp = client.put(ISSUES_URL, json={"_id": issue_id})

    assert resp.json() == {"error": "no update field(s) sent", "_id": issue_id}


def test_update_with_only_empty_fields(client, created_issue):
    issue_id = created_issue["_id"]

    resp = client.put(ISSUES_URL, json={"_id": issue_id, "issue_title": "", "open": ""})

    assert resp.json() == {"error": "no update field(s) sent", "_id": issue_id}
    unchanged = client.get(ISSUES_URL, params={"_id": issue_id}).json()[0]
    assert unchanged["issue_title"] == created_issue["issue_title"]
    assert unchanged["updated_on"] == created_issue["updated_on"]


def test_update_with_no_fields_and_unknown_id(client):
    resp = client.put(ISSUES_URL, json={"_id": "bogus"})

    assert resp.json() == {"error": "no update field(s) sent", "_id": "bogus"}


def test_update_with_invalid_id(client):
    resp = client.put(ISSUES_URL, json={"_id": "5f665eb46e296f6b9b6a504d", "issue_text": "x"})

    assert resp.json() == {"error": "could not update", "_id": "5f665eb46e296f6b9b6a504d"}


def test_update_with_unknown_id(client):
    issue_id = new_issue_id()

    resp = client.put(ISSUES_URL, json={"_id": issue_id, "issue_text": "x"})

    assert resp.json() == {"error": "could not update", "_id": issue_id}


@pytest.mark.parametrize(
    "raw_id, echoed",
    [(True, "true"), (1.5, "1.5"), ({}, "{}"), ({"$ne": None}, '{"$ne": null}'), ([], "[]")],
)
def test_update_with_non_string_id(client, created_issue, raw_id, echoed):
    resp = client.put(ISSUES_URL, json={"_id": raw_id, "issue_title": "New"})

    assert resp.status_code == 200
    assert resp.json() == {"error": "could not update", "_id": echoed}
    unchanged = client.get(ISSUES_URL, params={"_id": created_issue["_id"]}).json()[0]
    assert unchanged["issue_title"] == created_issue["issue_title"]


def test_update_with_only_structured_fields(client, created_issue):
    issue_id = created_issue["_id"]

    resp = client.put(ISSUES_URL, json={"_id": issue_id, "issue_title": {"a": 1}, "open": 5})

    assert resp.json() == {"error": "no update field(s) sent", "_id": issue_id}


def test_update_from_form_body(client, created_issue):
    issue_id = created_issue["_id"]

    resp = client.put(ISSUES_URL, data={"_id": issue_id, "status_text": "Done", "issue_text": ""})

    assert resp.json() == {"result": "successfully updated", "_id": issue_id}
    updated = client.get(ISSUES_URL, params={"_id": issue_id}).json()[0]
    assert updated["status_text"] == "Done"
    assert updated["issue_text"] == created_issue["issue_text"]


# =============================================================================
# DELETE
# =============================================================================


def test_delete_issue(test_app_client, created_issue):
    client, database = test_app_client
    issue_id = created_issue["_id"]

    resp = _delete(client, {"_id": issue_id})

    assert resp.status_code == 200
    assert resp.json() == {"result": "successfully deleted", "_id": issue_id}
    assert client.get(ISSUES_URL).json() == []
    assert _count_issues(database) == 0


def test_delete_issue_twice(client, created_issue):
    issue_id = created_issue["_id"]

    first = _delete(client, {"_id": issue_id})
    second = _delete(client, {"_id": issue_id})

    assert first.json() == {"result": "successfully deleted", "_id": issue_id}
    assert second.json() == {"error": "could not delete", "_id": issue_id}


def test_delete_with_invalid_id(client):
    resp = _delete(client, {"_id": "bogus"})

    assert resp.json() == {"error": "could not delete", "_id": "bogus"}


@pytest.mark.parametrize(
    "raw_id, echoed",
    [(True, "true"), (1.5, "1.5"), ({}, "{}"), ({"$ne": None}, '{"$ne": null}')],
)
def test_delete_with_non_string_id(test_app_client, created_issue, raw_id, echoed):
    client, database = test_app_client

    resp = _delete(client, {"_id": raw_id})

    assert resp.status_code == 200
    assert resp.json() == {"error": "could not delete", "_id": echoed}
    assert _count_issues(database) == 1


def test_delete_with_missing_id(client):
    resp = _delete(client, {})

    assert resp.json() == {"error": "missing _id"}


def test_delete_without_body(client):
    resp = client.delete(ISSUES_URL)

    assert resp.json() == {"error": "missing _id"}
