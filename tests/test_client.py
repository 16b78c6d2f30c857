# File: tests/test_client.py

from unittest.mock import Mock

import httpx
import pytest

from conftest import DEFAULT_PASSWORD
from furniture_ocr.client.api import ApiClient, RelayError
from furniture_ocr.client.capture import CapturedImage
from furniture_ocr.client.notify import Notifier
from furniture_ocr.client.relays import ExtractionRelay, ProjectStoreRelay, UploadRelay
from furniture_ocr.client.session import AuthSession
from furniture_ocr.schemas.project import ProjectCreate, ProjectUpdate

IMAGE = CapturedImage(name="capture-1.jpg", content_type="image/jpeg", data=b"\xff\xd8\xff\xe0jpeg")


@pytest.fixture
def offline():
    """An ApiClient whose transport must never be touched."""
    http = Mock(spec=httpx.Client)
    return ApiClient(http), http


# -----------------------------
# ApiClient
# -----------------------------
def test_relay_error_from_structured_body():
    response = httpx.Response(404, json={"kind": "not-found", "message": "Project p1 not found"})
    err = RelayError.from_response(response)
    assert (err.kind, err.message, err.status_code) == ("not-found", "Project p1 not found", 404)


def test_relay_error_from_framework_body():
    err = RelayError.from_response(httpx.Response(422, json={"detail": [{"msg": "field required"}]}))
    assert err.kind == "http-422"


def test_relay_error_from_plain_text():
    err = RelayError.from_response(httpx.Response(502, text="Bad gateway"))
    assert (err.kind, err.message) == ("http-502", "Bad gateway")


def test_network_failure_becomes_unavailable(offline):
    api, http = offline
    http.request.side_effect = httpx.ConnectError("connection refused")
    with pytest.raises(RelayError) as excinfo:
        api.get("/projects/")
    assert excinfo.value.kind == "unavailable"


# -----------------------------
# AuthSession
# -----------------------------
def test_sign_in_and_out(api, notifier, client):
    AuthSession(api, Notifier()).register("ana@workshop.io", DEFAULT_PASSWORD, "Ana")
    api.token = None

    session = AuthSession(api, notifier)
    assert session.sign_in("ana@workshop.io", DEFAULT_PASSWORD)
    assert session.is_authenticated
    assert session.user.label == "Ana"
    assert notifier.last.message == "Welcome back!"

    token = api.token
    session.sign_out()
    assert not session.is_authenticated
    assert notifier.last.message == "Logged out successfully"
    assert client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"}).status_code == 401


def test_sign_in_maps_error_codes(session, notifier):
    session.sign_out()
    notifier.clear()

    assert not session.sign_in("ana@workshop.io", "wrong-password")
    assert session.last_error == "Incorrect password"
    assert notifier.messages("error") == ["Incorrect password"]

    assert not session.sign_in("nobody@workshop.io", DEFAULT_PASSWORD)
    assert session.last_error == "No account found with this email"


def test_register_duplicate_email(api, session, notifier):
    other = AuthSession(ApiClient(api.http), notifier)
    assert not other.register("ana@workshop.io", DEFAULT_PASSWORD, "Ana again")
    assert other.last_error == "An account with this email already exists"


def test_sign_in_while_offline(offline, notifier):
    api, http = offline
    http.request.side_effect = httpx.ConnectError("connection refused")
    session = AuthSession(api, notifier)
    assert not session.sign_in("ana@workshop.io", DEFAULT_PASSWORD)
    assert session.last_error == "Login failed. Please try again."


def test_session_context_manager_signs_out(api, client):
    with AuthSession(api) as session:
        session.register("ana@workshop.io", DEFAULT_PASSWORD, "Ana")
        token = api.token
    assert api.token is None
    assert client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"}).status_code == 401


# -----------------------------
# Relays
# -----------------------------
def test_relays_do_nothing_when_signed_out(offline, notifier):
    api, http = offline
    session = AuthSession(api, notifier)

    assert UploadRelay(api, session).upload(IMAGE) is None
    assert notifier.last.message == "You must be logged in to upload images"

    store = ProjectStoreRelay(api, session)
    assert store.create(ProjectCreate(image_url="x")) is None
    assert store.update("p1", ProjectUpdate(title="t")) is False
    assert store.list() == []
    assert store.delete("p1") is False

    http.request.assert_not_called()


def test_upload_then_extract(api, session, notifier):
    url = UploadRelay(api, session).upload(IMAGE)
    assert url.startswith("http://testserver/api/v1/storage/o/images/")

    relay = ExtractionRelay(api, session)
    result = relay.extract(url)
    assert result.materials == ["Wood", "Screws"]
    assert not relay.processing
    assert notifier.messages("success")[-2:] == ["Image uploaded successfully", "Text extracted successfully"]


def test_project_store_round_trip(api, session, notifier):
    store = ProjectStoreRelay(api, session)
    project_id = store.create(ProjectCreate(title="Desk", image_url="http://testserver/i.jpg", materials=["MDF"]))
    assert project_id

    assert store.update(project_id, ProjectUpdate(materials=["MDF", "Bolts"]))
    projects = store.list()
    assert [p.materials for p in projects] == [["MDF", "Bolts"]]

    assert store.delete(project_id)
    assert store.list() == []
    assert notifier.messages("success")[-3:] == [
        "Project saved successfully",
        "Project updated successfully",
        "Project deleted",
    ]


def test_project_store_reports_failures(api, session, notifier):
    store = ProjectStoreRelay(api, session)
    assert store.update("missing", ProjectUpdate(title="x")) is False
    assert notifier.last.message == "Failed to update project"
    assert store.delete("missing") is False
    assert notifier.last.message == "Failed to delete project"
    assert not store.loading

