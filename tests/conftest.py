# File: tests/conftest.py

"""
Point the app at a throwaway SQLite database and storage directory.

The environment has to be in place before ``furniture_ocr`` is imported,
because settings and the app are built at import time.
"""

import os
import shutil
import tempfile
from pathlib import Path

_TMP = Path(tempfile.mkdtemp(prefix="furniture-ocr-tests-"))

os.environ.update(
    {
        "DATABASE_URL": f"sqlite:///{(_TMP / 'test.db').as_posix()}",
        "STORAGE_ROOT": str(_TMP / "storage"),
        "PUBLIC_BASE_URL": "http://testserver",
        "SECRET_KEY": "test-secret-key-0123456789-abcdefghijklmnopqrstuvwxyz",
        "BCRYPT_ROUNDS": "4",
    }
)

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from furniture_ocr.client.api import ApiClient  # noqa: E402
from furniture_ocr.client.notify import Notifier  # noqa: E402
from furniture_ocr.client.session import AuthSession  # noqa: E402
from furniture_ocr.core.config import settings  # noqa: E402
from furniture_ocr.db.init_db import drop_db, init_db  # noqa: E402
from furniture_ocr.main import app  # noqa: E402

DEFAULT_PASSWORD = "secret123"


@pytest.fixture(autouse=True)
def fresh_backend():
    drop_db(app.state.engine)
    init_db(app.state.engine)
    storage_root = Path(settings.storage_root)
    shutil.rmtree(storage_root, ignore_errors=True)
    storage_root.mkdir(parents=True, exist_ok=True)
    app.state.login_throttle.reset()
    yield


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def storage():
    return app.state.storage


def register(client, email="ana@workshop.io", password=DEFAULT_PASSWORD, display_name="Ana"):
    resp = client.post(
        "/api/v1/auth/register",
        json={"email": email, "password": password, "display_name": display_name},
    )
    assert resp.status_code == 201, resp.text
    return resp.json()


def bearer(body: dict) -> dict:
    return {"Authorization": f"Bearer {body['access_token']}"}


@pytest.fixture
def auth_headers(client):
    return bearer(register(client))


@pytest.fixture
def other_headers(client):
    return bearer(register(client, email="ben@workshop.io", display_name="Ben"))


@pytest.fixture
def notifier():
    return Notifier()


@pytest.fixture
def api(client):
    return ApiClient(client)


@pytest.fixture
def session(api, notifier):
    auth = AuthSession(api, notifier)
    assert auth.register("ana@workshop.io", DEFAULT_PASSWORD, "Ana")
    return auth
