# File: tests/test_config_gate.py

from fastapi.testclient import TestClient
from sqlalchemy import select

from furniture_ocr.core.config import Settings, missing_configuration, settings
from furniture_ocr.main import app, create_application
from furniture_ocr.models.user import User


def unconfigured_client(**overrides) -> TestClient:
    values = {"database_url": "", "storage_root": "", "public_base_url": "", "secret_key": "CHANGE_ME_IN_PRODUCTION"}
    values.update(overrides)
    return TestClient(create_application(Settings(**values)))


def test_test_settings_are_complete():
    assert missing_configuration(settings) == []


def test_missing_configuration_lists_required_names():
    missing = missing_configuration(Settings(database_url="", storage_root="", public_base_url="", secret_key=""))
    assert missing == ["DATABASE_URL", "STORAGE_ROOT", "PUBLIC_BASE_URL", "SECRET_KEY"]


def test_placeholder_values_count_as_missing():
    partial = settings.model_copy(update={"public_base_url": "https://your-project.example.com"})
    assert missing_configuration(partial) == ["PUBLIC_BASE_URL"]


def test_api_is_gated_until_configured():
    client = unconfigured_client()
    resp = client.post("/api/v1/auth/login", json={"email": "a@workshop.io", "password": "secret123"})
    assert resp.status_code == 503
    body = resp.json()
    assert body["kind"] == "failed-precondition"
    assert body["message"] == "Backend configuration required"
    assert "SECRET_KEY" in body["missing"]


def test_setup_and_health_stay_reachable():
    client = unconfigured_client()
    assert client.get("/healthz").json() == {"status": "ok"}

    setup = client.get("/setup").json()
    assert setup["configured"] is False
    assert setup["missing"] == ["DATABASE_URL", "STORAGE_ROOT", "PUBLIC_BASE_URL", "SECRET_KEY"]
    assert setup["steps"]


def test_configured_app_reports_ready(client):
    assert client.get("/setup").json() == {"configured": True, "missing": [], "steps": []}


def test_cors_origins_from_comma_separated_string():
    assert Settings(backend_cors_origins="http://a.test, http://b.test").backend_cors_origins == [
        "http://a.test",
        "http://b.test",
    ]


def test_cors_origins_from_environment_are_trimmed(monkeypatch):
    monkeypatch.setenv("BACKEND_CORS_ORIGINS", "http://a.example, http://b.example ,")
    assert Settings().backend_cors_origins == ["http://a.example", "http://b.example"]


def test_app_uses_its_own_database(tmp_path):
    other = settings.model_copy(
        update={
            "database_url": f"sqlite:///{(tmp_path / 'other.db').as_posix()}",
            "storage_root": str(tmp_path / "store"),
        }
    )
    other_app = create_application(other)

    with TestClient(other_app) as other_client:
        resp = other_client.post(
            "/api/v1/auth/register",
            json={"email": "cam@workshop.io", "password": "secret123", "display_name": "Cam"},
        )
        assert resp.status_code == 201, resp.text

        with other_app.state.session_factory() as db:
            assert db.scalar(select(User).where(User.email == "cam@workshop.io")) is not None

    assert (tmp_path / "other.db").is_file()
    assert (tmp_path / "store").is_dir()
    with app.state.session_factory() as db:
        assert db.scalar(select(User).where(User.email == "cam@workshop.io")) is None


def test_login_throttle_is_per_app(tmp_path):
    other = settings.model_copy(
        update={"database_url": f"sqlite:///{(tmp_path / 'other.db').as_posix()}", "login_max_attempts": 1}
    )
    other_app = create_application(other)

    assert other_app.state.login_throttle is not app.state.login_throttle
    assert other_app.state.login_throttle.max_attempts == 1
    assert app.state.login_throttle.max_attempts == settings.login_max_attempts
