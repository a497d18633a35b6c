from collections.abc import Generator
from datetime import datetime, timedelta, timezone

import pytest
from fastapi import Request
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from todo_api.db.session import get_db

API = "/api/v1"
PASSWORD = "StrongPassw0rd!"


def _deadline(days: int = 1) -> str:
    return (datetime.now(timezone.utc) + timedelta(days=days)).isoformat()


def _auth(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def _register(client: TestClient, username: str) -> dict:
    resp = client.post(
        f"{API}/users/register",
        json={"username": username, "email": f"{username}@example.com", "password": PASSWORD},
    )
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]


def _create_task(client: TestClient, token: str, name: str = "Write report") -> dict:
    resp = client.post(
        f"{API}/tasks",
        json={"name": name, "description": "quarterly numbers", "deadline": _deadline()},
        headers=_auth(token),
    )
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]


@pytest.fixture
def db_calls(app) -> list[str]:
    """记录数据库会话的获取次数。"""
    calls: list[str] = []

    def _counting_get_db(request: Request) -> Generator[Session, None, None]:
        calls.append(request.url.path)
        db = request.app.state.session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _counting_get_db
    return calls


def test_health_endpoints(client: TestClient):
    live = client.get(f"{API}/health/live")
    ready = client.get(f"{API}/health/ready")

    assert live.status_code == 200
    assert live.json()["data"] == {"status": "ok"}
    assert ready.status_code == 200
    assert ready.json()["data"] == {"status": "ready"}
    assert live.headers["X-Request-Id"]


def test_register_and_login_issue_tokens(client: TestClient):
    registered = _register(client, "alice")

    assert registered["token_type"] == "bearer"
    assert registered["user"]["username"] == "alice"
    assert "password_hash" not in registered["user"]
    assert 0 < registered["expires_in"] <= 900

    resp = client.post(f"{API}/users/login", json={"email": "alice@example.com", "password": PASSWORD})
    assert resp.status_code == 200
    assert resp.json()["data"]["user"]["id"] == registered["user"]["id"]


def test_register_conflict_returns_409(client: TestClient):
    _register(client, "alice")

    resp = client.post(
        f"{API}/users/register",
        json={"username": "alice", "email": "another@example.com", "password": PASSWORD},
    )

    assert resp.status_code == 409
    assert resp.json()["error"]["code"] == "CONFLICT"


def test_register_validation_returns_400(client: TestClient):
    resp = client.post(f"{API}/users/register", json={"username": "al", "email": "bad", "password": "short"})

    assert resp.status_code == 400
    body = resp.json()
    assert body["error"]["code"] == "VALIDATION_ERROR"
    fields = {item["field"] for item in body["error"]["details"]["errors"]}
    assert {"username", "email", "password"} <= fields


def test_login_failures_have_identical_bodies(client: TestClient):
    _register(client, "alice")

    wrong_password = client.post(f"{API}/users/login", json={"email": "alice@example.com", "password": "nope-nope"})
    unknown_email = client.post(f"{API}/users/login", json={"email": "ghost@example.com", "password": PASSWORD})

    assert wrong_password.status_code == 401
    assert unknown_email.status_code == 401
    assert wrong_password.content == unknown_email.content
    assert wrong_password.headers["WWW-Authenticate"] == "Bearer"


def test_task_lifecycle_for_owner(client: TestClient):
    registered = _register(client, "alice")
    token = registered["token"]

    task = _create_task(client, token)
    assert task["status"] == "pending"
    assert task["owner_id"] == registered["user"]["id"]
    assert task["name"] == "Write report"

    fetched = client.get(f"{API}/tasks/{task['id']}", headers=_auth(token))
    assert fetched.status_code == 200
    assert fetched.json()["data"]["id"] == task["id"]

    updated = client.patch(
        f"{API}/tasks/{task['id']}",
        json={"status": "in-progress", "name": "Write final report"},
        headers=_auth(token),
    )
    assert updated.status_code == 200
    assert updated.json()["data"]["status"] == "in-progress"
    assert updated.json()["data"]["name"] == "Write final report"
    assert updated.json()["data"]["description"] == "quarterly numbers"

    deleted = client.delete(f"{API}/tasks/{task['id']}", headers=_auth(token))
    assert deleted.status_code == 200
    assert deleted.json()["data"] == {"deleted": True}

    gone = client.get(f"{API}/tasks/{task['id']}", headers=_auth(token))
    assert gone.status_code == 404


def test_list_tasks_is_scoped_and_paginated(client: TestClient):
    alice_token = _register(client, "alice")["token"]
    bob_token = _register(client, "bob")["token"]
    first = _create_task(client, alice_token, "first")
    second = _create_task(client, alice_token, "second")
    _create_task(client, bob_token, "bobs task")

    resp = client.get(f"{API}/tasks", headers=_auth(alice_token))
    assert resp.status_code == 200
    body = resp.json()
    assert [item["id"] for item in body["data"]] == [second["id"], first["id"]]
    assert body["meta"]["pagination"] == {"limit": 10, "offset": 0, "count": 2}

    page = client.get(f"{API}/tasks", params={"limit": 1, "offset": 1}, headers=_auth(alice_token))
    assert [item["id"] for item in page.json()["data"]] == [first["id"]]

    out_of_range = client.get(f"{API}/tasks", params={"limit": 1000}, headers=_auth(alice_token))
    assert out_of_range.json()["meta"]["pagination"]["limit"] == 10


def test_foreign_task_is_indistinguishable_from_missing(client: TestClient):
    alice_token = _register(client, "alice")["token"]
    bob_token = _register(client, "bob")["token"]
    task = _create_task(client, alice_token)

    foreign = client.get(f"{API}/tasks/{task['id']}", headers=_auth(bob_token))
    missing = client.get(f"{API}/tasks/{task['id'] + 1000}", headers=_auth(bob_token))

    assert foreign.status_code == 404
    assert missing.status_code == 404
    assert foreign.content == missing.content

    patch = client.patch(f"{API}/tasks/{task['id']}", json={"name": "Hijacked"}, headers=_auth(bob_token))
    delete = client.delete(f"{API}/tasks/{task['id']}", headers=_auth(bob_token))
    assert patch.status_code == 404
    assert delete.status_code == 404
    assert patch.content == foreign.content == delete.content

    still_there = client.get(f"{API}/tasks/{task['id']}", headers=_auth(alice_token))
    assert still_there.json()["data"]["name"] == "Write report"


def test_owner_cannot_be_reassigned(client: TestClient):
    alice_token = _register(client, "alice")["token"]
    bob_id = _register(client, "bob")["user"]["id"]
    task = _create_task(client, alice_token)

    resp = client.patch(f"{API}/tasks/{task['id']}", json={"owner_id": bob_id}, headers=_auth(alice_token))

    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "VALIDATION_ERROR"


def test_task_deadline_must_be_in_future(client: TestClient):
    token = _register(client, "alice")["token"]

    created = client.post(
        f"{API}/tasks",
        json={"name": "Late", "deadline": _deadline(days=-1)},
        headers=_auth(token),
    )
    assert created.status_code == 400
    assert created.json()["error"]["details"] == {"field": "deadline"}

    task = _create_task(client, token)
    updated = client.patch(f"{API}/tasks/{task['id']}", json={"deadline": _deadline(days=-1)}, headers=_auth(token))
    assert updated.status_code == 400


def test_task_field_limits_return_400(client: TestClient):
    token = _register(client, "alice")["token"]

    resp = client.post(
        f"{API}/tasks",
        json={"name": "x" * 31, "description": "y" * 151, "deadline": _deadline()},
        headers=_auth(token),
    )

    assert resp.status_code == 400
    fields = {item["field"] for item in resp.json()["error"]["details"]["errors"]}
    assert fields == {"name", "description"}


@pytest.mark.parametrize(
    ("headers", "message"),
    [
        ({}, "authorization header required"),
        ({"Authorization": "Token abc"}, "invalid authorization header format"),
        ({"Authorization": "Bearer a b"}, "invalid authorization header format"),
        ({"Authorization": "Bearer not-a-jwt"}, "invalid token"),
    ],
)
def test_gate_rejects_before_touching_database(client: TestClient, db_calls: list[str], headers: dict, message: str):
    resp = client.get(f"{API}/tasks/1", headers=headers)

    assert resp.status_code == 401
    assert resp.json()["error"]["message"] == message
    assert resp.headers["WWW-Authenticate"] == "Bearer"
    assert db_calls == []


def test_gate_runs_before_body_validation(client: TestClient, db_calls: list[str]):
    resp = client.post(f"{API}/tasks", json={"name": ""}, headers={"Authorization": "Bearer garbage"})

    assert resp.status_code == 401
    assert db_calls == []


@pytest.mark.parametrize("headers", [{}, {"Authorization": "Bearer garbage"}, {"Authorization": "Basic abc"}])
def test_gate_runs_before_body_is_parsed(client: TestClient, db_calls: list[str], headers: dict):
    for method, path in (("POST", "/tasks"), ("PATCH", "/tasks/1")):
        resp = client.request(
            method,
            f"{API}{path}",
            content="{not json",
            headers={"Content-Type": "application/json", **headers},
        )

        assert resp.status_code == 401, resp.text
        assert resp.json()["error"]["code"] == "UNAUTHORIZED"
    assert db_calls == []


def test_malformed_body_with_valid_token_is_validation_error(client: TestClient):
    token = _register(client, "alice")["token"]

    resp = client.post(
        f"{API}/tasks",
        content="{not json",
        headers={"Content-Type": "application/json", **_auth(token)},
    )

    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "VALIDATION_ERROR"


def test_expired_and_tampered_tokens_are_rejected(client: TestClient, app):
    registered = _register(client, "alice")
    codec = app.state.token_codec
    expired = codec.issue(registered["user"]["id"], ttl=timedelta(seconds=-1)).token
    header, payload, signature = registered["token"].split(".")
    flipped = "A" if payload[3] != "A" else "B"
    tampered = ".".join([header, payload[:3] + flipped + payload[4:], signature])

    for token in (expired, tampered):
        resp = client.get(f"{API}/tasks", headers=_auth(token))
        assert resp.status_code == 401
        assert resp.json()["error"]["message"] == "invalid token"


def test_unknown_route_uses_error_envelope(client: TestClient):
    resp = client.get(f"{API}/nothing-here")

    assert resp.status_code == 404
    assert resp.json()["error"]["code"] == "NOT_FOUND"


def test_ready_reports_unavailable_database(client: TestClient, app):
    class _DeadSession:
        def execute(self, *_args, **_kwargs):
            raise OperationalError("select 1", {}, Exception("connection refused"))

    app.dependency_overrides[get_db] = lambda: _DeadSession()

    resp = client.get(f"{API}/health/ready")

    assert resp.status_code == 503
    assert resp.json()["error"]["code"] == "SERVICE_UNAVAILABLE"


def test_request_id_is_echoed_and_kept_out_of_error_body(client: TestClient):
    ok = client.get(f"{API}/health/live", headers={"X-Request-Id": "trace-12345678"})
    denied = client.get(f"{API}/tasks", headers={"X-Request-Id": "trace-12345678"})

    assert ok.headers["X-Request-Id"] == "trace-12345678"
    assert ok.json()["request_id"] == "trace-12345678"
    assert denied.headers["X-Request-Id"] == "trace-12345678"
    assert "trace-12345678" not in denied.text


def test_out_of_range_task_id_is_not_found(client: TestClient):
    token = _register(client, "alice")["token"]
    missing = client.get(f"{API}/tasks/999999", headers=_auth(token))

    for task_id in (2**63, 10**30, 0, -5):
        fetched = client.get(f"{API}/tasks/{task_id}", headers=_auth(token))
        patched = client.patch(f"{API}/tasks/{task_id}", json={"name": "x"}, headers=_auth(token))
        deleted = client.delete(f"{API}/tasks/{task_id}", headers=_auth(token))

        assert fetched.status_code == 404
        assert fetched.content == missing.content
        assert patched.content == missing.content
        assert deleted.content == missing.content


def test_unparsable_paging_falls_back_to_defaults(client: TestClient):
    token = _register(client, "alice")["token"]
    _create_task(client, token)

    resp = client.get(f"{API}/tasks", params={"limit": "abc", "offset": "xyz"}, headers=_auth(token))

    assert resp.status_code == 200
    assert resp.json()["meta"]["pagination"] == {"limit": 10, "offset": 0, "count": 1}
