# File: furniture_ocr/core/errors.py

"""
Structured errors shared by the API and the client controllers.

Every failure that crosses the HTTP boundary is rendered as
``{"kind": ..., "message": ...}`` so the client can map it without parsing
free text.
"""

from fastapi import status


class AppError(Exception):
    kind = "internal"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, *, kind: str | None = None, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if kind is not None:
            self.kind = kind
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self) -> dict:
        return {"kind": self.kind, "message": self.message}


class AuthError(AppError):
    """Raised by the auth service; ``kind`` is one of the ``auth/...`` codes."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, code: str, message: str | None = None):
        super().__init__(message or auth_error_message(code), kind=code)
        if code in ("auth/user-not-found", "auth/wrong-password", "auth/invalid-credential"):
            self.status_code = status.HTTP_401_UNAUTHORIZED
        elif code == "auth/too-many-requests":
            self.status_code = status.HTTP_429_TOO_MANY_REQUESTS
        elif code == "auth/email-already-in-use":
            self.status_code = status.HTTP_409_CONFLICT
        elif code == "auth/operation-not-allowed":
            self.status_code = status.HTTP_403_FORBIDDEN


class NotAuthenticatedError(AppError):
    kind = "unauthenticated"
    status_code = status.HTTP_401_UNAUTHORIZED


class PermissionDeniedError(AppError):
    kind = "permission-denied"
    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(AppError):
    kind = "not-found"
    status_code = status.HTTP_404_NOT_FOUND


class InvalidArgumentError(AppError):
    kind = "invalid-argument"
    status_code = status.HTTP_400_BAD_REQUEST


class StorageError(AppError):
    kind = "storage-error"


class ExtractionError(AppError):
    kind = "extraction-failed"


class ExportError(AppError):
    kind = "export-failed"


# -----------------------------
# Auth error codes -> messages
# -----------------------------

AUTH_ERROR_MESSAGES = {
    "auth/user-not-found": "No account found with this email",
    "auth/wrong-password": "Incorrect password",
    "auth/invalid-email": "Invalid email address",
    "auth/invalid-credential": "Invalid email or password",
    "auth/too-many-requests": "Too many failed attempts. Please try again later.",
    "auth/email-already-in-use": "An account with this email already exists",
    "auth/weak-password": "Password should be at least 6 characters",
    "auth/operation-not-allowed": "Email/password accounts are not enabled. Please contact support.",
}

GENERIC_AUTH_MESSAGE = "Authentication failed. Please try again."


def auth_error_message(code: str | None, fallback: str = GENERIC_AUTH_MESSAGE) -> str:
    if code is None:
        return fallback
    return AUTH_ERROR_MESSAGES.get(code, fallback)
