# File: furniture_ocr/core/config.py

import os
from functools import lru_cache
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

# Values that mean "somebody copied the example .env and never filled it in"
PLACEHOLDER_MARKERS = ("CHANGE_ME", "demo", "your-")

REQUIRED_SETTINGS = (
    "database_url",
    "storage_root",
    "public_base_url",
    "secret_key",
)


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Settings(BaseModel):
    # Basic app info
    PROJECT_NAME: str = "Furniture OCR API"
    VERSION: str = "0.1.0"

    api_v1_prefix: str = "/api/v1"
    debug: bool = _env_bool("DEBUG", False)

    # CORS
    backend_cors_origins: List[str] = Field(
        default_factory=lambda: os.getenv(
            "BACKEND_CORS_ORIGINS", "http://localhost:5173,http://127.0.0.1:5173"
        ),
        validate_default=True,
    )

    # Backend connection parameters (all required, see missing_configuration)
    database_url: str = os.getenv("DATABASE_URL", "")
    storage_root: str = os.getenv("STORAGE_ROOT", "")
    public_base_url: str = os.getenv("PUBLIC_BASE_URL", "").rstrip("/")
    secret_key: str = os.getenv("SECRET_KEY", "CHANGE_ME_IN_PRODUCTION")

    # Tokens
    algorithm: str = "HS256"
    access_token_expire_minutes: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", 60 * 24))
    signed_url_ttl_hours: int = int(os.getenv("SIGNED_URL_TTL_HOURS", 24))

    # Accounts
    bcrypt_rounds: int = int(os.getenv("BCRYPT_ROUNDS", 12))
    min_password_length: int = 6
    login_max_attempts: int = int(os.getenv("LOGIN_MAX_ATTEMPTS", 5))
    login_window_seconds: int = int(os.getenv("LOGIN_WINDOW_SECONDS", 15 * 60))
    allow_registration: bool = _env_bool("ALLOW_REGISTRATION", True)

    # Logging
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_file: Optional[str] = os.getenv("LOG_FILE") or None

    @field_validator("backend_cors_origins", mode="before")
    @classmethod
    def assemble_cors_origins(cls, v):
        if isinstance(v, str):
            return [i.strip() for i in v.split(",") if i.strip()]
        if isinstance(v, list):
            return v
        return []

    @field_validator("public_base_url", mode="after")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")


def missing_configuration(settings: Settings) -> list[str]:
    """
    Names of required settings that are empty or still hold a placeholder.

    An empty list means the backend is configured and the API may serve
    requests; anything else keeps the whole API behind the setup notice.
    """
    missing = []
    for name in REQUIRED_SETTINGS:
        value = getattr(settings, name) or ""
        if not value.strip() or any(marker in value for marker in PLACEHOLDER_MARKERS):
            missing.append(name.upper())
    return missing


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
