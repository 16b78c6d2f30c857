# File: furniture_ocr/services/auth_service.py

"""
Authentication service.

  - Registration with display name
  - Email/password sign-in with a per-email failed-attempt throttle
  - Login sessions backing access tokens, deleted on sign-out

Failures raise ``AuthError`` carrying one of the ``auth/...`` codes listed
in ``core.errors.AUTH_ERROR_MESSAGES``.
"""

import logging
import threading
import time
from collections import deque
from datetime import timedelta
from typing import Optional

import jwt
from email_validator import EmailNotValidError, validate_email
from sqlalchemy import select
from sqlalchemy.orm import Session

from furniture_ocr.core.config import Settings
from furniture_ocr.core.errors import AuthError, NotAuthenticatedError
from furniture_ocr.core.security import (
    ACCESS_TOKEN_TYPE,
    create_access_token,
    decode_token,
    hash_password,
    verify_password,
)
from furniture_ocr.models.user import LoginSession, User

logger = logging.getLogger(__name__)


class LoginThrottle:
    """
    Counts failed sign-ins per email inside a sliding window.

    Once ``max_attempts`` failures fall inside the window, further attempts
    for that email are refused until the oldest failure ages out. Emails
    without a recent failure are not kept, so the map only ever holds
    addresses that failed during the last window.
    """

    def __init__(self, max_attempts: int, window_seconds: int):
        self.max_attempts = max_attempts
        self.window_seconds = window_seconds
        self._failures: dict[str, deque] = {}
        self._last_sweep: Optional[float] = None
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._failures)

    def _prune(self, key: str, now: float) -> Optional[deque]:
        failures = self._failures.get(key)
        if failures is None:
            return None
        while failures and now - failures[0] > self.window_seconds:
            failures.popleft()
        if not failures:
            del self._failures[key]
            return None
        return failures

    def _sweep(self, now: float) -> None:
        if self._last_sweep is not None and now - self._last_sweep < self.window_seconds:
            return
        for key in list(self._failures):
            self._prune(key, now)
        self._last_sweep = now

    def is_blocked(self, key: str, now: Optional[float] = None) -> bool:
        now = time.monotonic() if now is None else now
        with self._lock:
            self._sweep(now)
            failures = self._prune(key, now)
            return failures is not None and len(failures) >= self.max_attempts

    def record_failure(self, key: str, now: Optional[float] = None) -> None:
        now = time.monotonic() if now is None else now
        with self._lock:
            self._sweep(now)
            failures = self._prune(key, now)
            if failures is None:
                failures = self._failures[key] = deque()
            failures.append(now)

    def reset(self, key: Optional[str] = None) -> None:
        with self._lock:
            if key is None:
                self._failures.clear()
            else:
                self._failures.pop(key, None)

    @classmethod
    def from_settings(cls, settings: Settings) -> "LoginThrottle":
        return cls(settings.login_max_attempts, settings.login_window_seconds)


def normalize_email(email: str) -> str:
    try:
        return validate_email(email.strip(), check_deliverability=False).normalized.lower()
    except EmailNotValidError as exc:
        raise AuthError("auth/invalid-email") from exc


def _open_session(db: Session, user: User, settings: Settings) -> str:
    login_session = LoginSession(user_id=user.id)
    db.add(login_session)
    db.commit()
    return create_access_token(
        user.id,
        login_session.id,
        secret_key=settings.secret_key,
        algorithm=settings.algorithm,
        expires_delta=timedelta(minutes=settings.access_token_expire_minutes),
    )


def register_user(
    db: Session,
    settings: Settings,
    *,
    email: str,
    password: str,
    display_name: str,
) -> tuple[User, str]:
    if not settings.allow_registration:
        raise AuthError("auth/operation-not-allowed")

    email = normalize_email(email)
    if len(password) < settings.min_password_length:
        raise AuthError("auth/weak-password")

    existing = db.scalar(select(User).where(User.email == email))
    if existing is not None:
        raise AuthError("auth/email-already-in-use")

    user = User(
        email=email,
        display_name=display_name.strip() or None,
        hashed_password=hash_password(password, settings.bcrypt_rounds),
    )
    db.add(user)
    db.commit()
    db.refresh(user)

    logger.info("Registered user %s (%s)", user.id, email)
    return user, _open_session(db, user, settings)


def authenticate_user(
    db: Session,
    settings: Settings,
    throttle: LoginThrottle,
    *,
    email: str,
    password: str,
) -> tuple[User, str]:
    email = normalize_email(email)

    if throttle.is_blocked(email):
        logger.warning("Sign-in throttled for %s", email)
        raise AuthError("auth/too-many-requests")

    user = db.scalar(select(User).where(User.email == email))
    if user is None:
        throttle.record_failure(email)
        raise AuthError("auth/user-not-found")

    if not verify_password(password, user.hashed_password):
        throttle.record_failure(email)
        logger.info("Wrong password for %s", email)
        raise AuthError("auth/wrong-password")

    throttle.reset(email)
    logger.info("User %s signed in", user.id)
    return user, _open_session(db, user, settings)


def resolve_token(db: Session, settings: Settings, token: str) -> tuple[User, LoginSession]:
    """
    Map a bearer token to its user and live login session.
    """
    try:
        claims = decode_token(
            token,
            secret_key=settings.secret_key,
            token_type=ACCESS_TOKEN_TYPE,
            algorithm=settings.algorithm,
        )
    except jwt.InvalidTokenError as exc:
        raise NotAuthenticatedError("Invalid or expired token") from exc

    login_session = db.get(LoginSession, claims.get("sid"))
    if login_session is None or login_session.user_id != claims.get("sub"):
        raise NotAuthenticatedError("Session has ended")

    user = db.get(User, login_session.user_id)
    if user is None:
        raise NotAuthenticatedError("Unknown user")
    return user, login_session


def sign_out(db: Session, login_session: LoginSession) -> None:
    db.delete(login_session)
    db.commit()
    logger.info("User %s signed out", login_session.user_id)
