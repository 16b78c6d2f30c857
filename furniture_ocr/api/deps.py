# File: furniture_ocr/api/deps.py

from collections.abc import Generator
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from furniture_ocr.core.config import Settings
from furniture_ocr.core.errors import NotAuthenticatedError
from furniture_ocr.models.user import LoginSession, User
from furniture_ocr.services import auth_service
from furniture_ocr.services.storage_service import ObjectStorage

bearer_scheme = HTTPBearer(auto_error=False)


def get_db(request: Request) -> Generator[Session, None, None]:
    """
    FastAPI dependency that provides a SQLAlchemy session bound to the
    engine the application was created with.

    Usage in route functions:
        db: Session = Depends(get_db)
    """
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_storage(request: Request) -> ObjectStorage:
    return request.app.state.storage


def get_login_throttle(request: Request) -> auth_service.LoginThrottle:
    return request.app.state.login_throttle


def get_login(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> tuple[User, LoginSession]:
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise NotAuthenticatedError("You must be logged in")
    return auth_service.resolve_token(db, settings, credentials.credentials)


def get_current_user(login: tuple[User, LoginSession] = Depends(get_login)) -> User:
    return login[0]
