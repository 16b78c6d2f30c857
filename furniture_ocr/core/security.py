# File: furniture_ocr/core/security.py

"""
Security helpers for the Furniture OCR API.

  - bcrypt password hashing
  - PyJWT access tokens (one per login session)
  - PyJWT storage tokens backing durable and time-limited download URLs
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import bcrypt
import jwt

ACCESS_TOKEN_TYPE = "access"
STORAGE_TOKEN_TYPE = "storage"

DEFAULT_ALGORITHM = "HS256"
DEFAULT_BCRYPT_ROUNDS = 12

# bcrypt only looks at the first 72 bytes; newer releases refuse longer input
_BCRYPT_MAX_BYTES = 72


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:_BCRYPT_MAX_BYTES]


def hash_password(password: str, rounds: int = DEFAULT_BCRYPT_ROUNDS) -> str:
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(_password_bytes(password), salt).decode("ascii")


def verify_password(password: str, hashed_password: str) -> bool:
    try:
        return bcrypt.checkpw(_password_bytes(password), hashed_password.encode("ascii"))
    except ValueError:
        # malformed hash in the database
        return False


def encode_token(
    claims: dict[str, Any],
    *,
    secret_key: str,
    algorithm: str = DEFAULT_ALGORITHM,
    expires_delta: Optional[timedelta] = None,
) -> str:
    to_encode = claims.copy()
    now = datetime.now(timezone.utc)
    to_encode["iat"] = now
    if expires_delta is not None:
        to_encode["exp"] = now + expires_delta
    return jwt.encode(to_encode, secret_key, algorithm=algorithm)


def decode_token(
    token: str,
    *,
    secret_key: str,
    token_type: str,
    algorithm: str = DEFAULT_ALGORITHM,
) -> dict[str, Any]:
    """
    Decode and validate a token issued by ``encode_token``.

    Raises ``jwt.InvalidTokenError`` (or its ``ExpiredSignatureError``
    subclass) when the signature, expiry or token type does not check out.
    """
    payload = jwt.decode(token, secret_key, algorithms=[algorithm])
    if payload.get("typ") != token_type:
        raise jwt.InvalidTokenError(f"expected a {token_type} token")
    return payload


def create_access_token(
    user_id: str,
    session_id: str,
    *,
    secret_key: str,
    expires_delta: timedelta,
    algorithm: str = DEFAULT_ALGORITHM,
) -> str:
    return encode_token(
        {"sub": user_id, "sid": session_id, "typ": ACCESS_TOKEN_TYPE},
        secret_key=secret_key,
        algorithm=algorithm,
        expires_delta=expires_delta,
    )
