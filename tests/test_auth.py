# File: tests/test_auth.py

from conftest import DEFAULT_PASSWORD, bearer, register
from furniture_ocr.core.config import settings
from furniture_ocr.main import app
from furniture_ocr.services import auth_service


def login(client, email="ana@workshop.io", password=DEFAULT_PASSWORD):
    return client.post("/api/v1/auth/login", json={"email": email, "password": password})


def test_register_returns_token_and_user(client):
    body = register(client, email="Ana@Workshop.io")
    assert body["token_type"] == "bearer"
    assert body["user"]["email"] == "ana@workshop.io"
    assert body["user"]["display_name"] == "Ana"

    me = client.get("/api/v1/auth/me", headers=bearer(body))
    assert me.status_code == 200
    assert me.json()["uid"] == body["user"]["uid"]


def test_register_rejects_duplicate_email(client):
    register(client)
    resp = client.post(
        "/api/v1/auth/register",
        json={"email": "ana@workshop.io", "password": DEFAULT_PASSWORD, "display_name": "Other"},
    )
    assert resp.status_code == 409
    assert resp.json() == {
        "kind": "auth/email-already-in-use",
        "message": "An account with this email already exists",
    }


def test_register_rejects_weak_password(client):
    resp = client.post(
        "/api/v1/auth/register",
        json={"email": "ana@workshop.io", "password": "12345", "display_name": "Ana"},
    )
    assert resp.status_code == 400
    assert resp.json()["kind"] == "auth/weak-password"


def test_register_rejects_invalid_email(client):
    resp = client.post(
        "/api/v1/auth/register",
        json={"email": "not-an-email", "password": DEFAULT_PASSWORD, "display_name": "Ana"},
    )
    assert resp.status_code == 400
    assert resp.json()["kind"] == "auth/invalid-email"


def test_register_disabled(client, monkeypatch):
    monkeypatch.setattr(app.state, "settings", settings.model_copy(update={"allow_registration": False}))
    resp = client.post(
        "/api/v1/auth/register",
        json={"email": "ana@workshop.io", "password": DEFAULT_PASSWORD, "display_name": "Ana"},
    )
    assert resp.status_code == 403
    assert resp.json()["kind"] == "auth/operation-not-allowed"


def test_login_success(client):
    register(client)
    resp = login(client)
    assert resp.status_code == 200
    assert resp.json()["user"]["email"] == "ana@workshop.io"


def test_login_unknown_user(client):
    resp = login(client, email="nobody@workshop.io")
    assert resp.status_code == 401
    assert resp.json()["kind"] == "auth/user-not-found"


def test_login_wrong_password(client):
    register(client)
    resp = login(client, password="not-the-password")
    assert resp.status_code == 401
    assert resp.json() == {"kind": "auth/wrong-password", "message": "Incorrect password"}


def test_login_throttled_after_repeated_failures(client):
    register(client)
    for _ in range(settings.login_max_attempts):
        assert login(client, password="nope-nope").status_code == 401

    # even the right password is refused while throttled
    resp = login(client)
    assert resp.status_code == 429
    assert resp.json()["kind"] == "auth/too-many-requests"


def test_successful_login_clears_failures(client):
    register(client)
    for _ in range(settings.login_max_attempts - 1):
        login(client, password="nope-nope")
    assert login(client).status_code == 200
    assert login(client, password="nope-nope").status_code == 401
    assert login(client).status_code == 200


def test_logout_ends_session(client):
    headers = bearer(register(client))
    assert client.post("/api/v1/auth/logout", headers=headers).status_code == 204

    resp = client.get("/api/v1/auth/me", headers=headers)
    assert resp.status_code == 401
    assert resp.json()["kind"] == "unauthenticated"


def test_logout_only_ends_that_session(client):
    register(client)
    first = bearer(login(client).json())
    second = bearer(login(client).json())

    client.post("/api/v1/auth/logout", headers=first)
    assert client.get("/api/v1/auth/me", headers=second).status_code == 200


def test_protected_routes_require_token(client):
    assert client.get("/api/v1/auth/me").status_code == 401
    assert client.get("/api/v1/projects/").status_code == 401
    resp = client.get("/api/v1/auth/me", headers={"Authorization": "Bearer garbage"})
    assert resp.status_code == 401
    assert resp.json()["kind"] == "unauthenticated"


def test_throttle_blocks_once_max_attempts_reached():
    throttle = auth_service.LoginThrottle(max_attempts=3, window_seconds=60)
    for now in (0, 1):
        throttle.record_failure("ana@workshop.io", now=now)
    assert not throttle.is_blocked("ana@workshop.io", now=2)

    throttle.record_failure("ana@workshop.io", now=2)
    assert throttle.is_blocked("ana@workshop.io", now=3)
    # the first failure ages out of the window
    assert not throttle.is_blocked("ana@workshop.io", now=61)


def test_throttle_forgets_emails_after_window():
    throttle = auth_service.LoginThrottle(max_attempts=5, window_seconds=60)
    for i in range(200):
        throttle.record_failure(f"user{i}@workshop.io", now=0)
    assert len(throttle) == 200

    assert not throttle.is_blocked("fresh@workshop.io", now=61)
    assert len(throttle) == 0


def test_throttle_lookup_does_not_track_email():
    throttle = auth_service.LoginThrottle(max_attempts=5, window_seconds=60)
    assert not throttle.is_blocked("nobody@workshop.io", now=0)
    assert len(throttle) == 0

    throttle.record_failure("ana@workshop.io", now=0)
    throttle.reset("ana@workshop.io")
    assert len(throttle) == 0
