# File: furniture_ocr/client/session.py

"""
Client-side authentication state.

An ``AuthSession`` is created explicitly, started by ``sign_in`` or
``register`` and torn down by ``sign_out`` (or by leaving its ``with``
block). Controllers that need the current user receive the session object.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from furniture_ocr.client.api import ApiClient, RelayError
from furniture_ocr.client.notify import Notifier
from furniture_ocr.core.errors import auth_error_message

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionUser:
    uid: str
    email: str
    display_name: Optional[str] = None

    @property
    def label(self) -> str:
        return self.display_name or self.email


class AuthSession:
    def __init__(self, api: ApiClient, notifier: Optional[Notifier] = None):
        self.api = api
        self.notifier = notifier or Notifier()
        self.user: Optional[SessionUser] = None
        self.loading = False
        self.last_error: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None and self.api.token is not None

    def __enter__(self) -> "AuthSession":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if self.is_authenticated:
            self.sign_out()

    def _start(self, body: dict) -> None:
        self.api.token = body["access_token"]
        user = body["user"]
        self.user = SessionUser(uid=user["uid"], email=user["email"], display_name=user.get("display_name"))

    def _fail(self, exc: RelayError, fallback: str) -> bool:
        message = auth_error_message(exc.kind, fallback)
        self.last_error = message
        self.notifier.error(message)
        return False

    def sign_in(self, email: str, password: str) -> bool:
        self.loading = True
        try:
            logger.info("Attempting login with email: %s", email)
            response = self.api.post(
                "/auth/login",
                json={"email": email, "password": password},
                authenticated=False,
            )
            self._start(response.json())
            self.last_error = None
            self.notifier.success("Welcome back!")
            return True
        except RelayError as exc:
            logger.error("Login error: %s", exc)
            return self._fail(exc, "Login failed. Please try again.")
        finally:
            self.loading = False

    def register(self, email: str, password: str, display_name: str) -> bool:
        self.loading = True
        try:
            logger.info("Attempting registration with email: %s", email)
            response = self.api.post(
                "/auth/register",
                json={"email": email, "password": password, "display_name": display_name},
                authenticated=False,
            )
            self._start(response.json())
            self.last_error = None
            self.notifier.success("Account created successfully!")
            return True
        except RelayError as exc:
            logger.error("Registration error: %s", exc)
            return self._fail(exc, "Registration failed. Please try again.")
        finally:
            self.loading = False

    def sign_out(self) -> None:
        try:
            if self.api.token:
                self.api.post("/auth/logout")
            self.notifier.success("Logged out successfully")
        except RelayError as exc:
            logger.error("Logout error: %s", exc)
            self.notifier.error("Logout failed")
        finally:
            # local state goes regardless; the server session expires on its own
            self.api.token = None
            self.user = None
