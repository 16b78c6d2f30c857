# File: furniture_ocr/services/storage_service.py

"""
Object storage on the local filesystem.

Objects live under ``storage_root`` at slash-separated relative paths such as
``images/<uid>/<ts>-photo.jpg`` or ``exports/<project_id>/<ts>.pdf``.
Every URL handed out carries a signed storage token: durable URLs never
expire, signed URLs expire and may force a download filename.
"""

import logging
import mimetypes
from datetime import timedelta
from pathlib import Path, PurePosixPath
from typing import Optional
from urllib.parse import parse_qs, quote, urlsplit

import jwt

from furniture_ocr.core.config import Settings
from furniture_ocr.core.errors import NotFoundError, PermissionDeniedError, StorageError
from furniture_ocr.core.security import DEFAULT_ALGORITHM, STORAGE_TOKEN_TYPE, decode_token, encode_token

logger = logging.getLogger(__name__)

# Route that serves objects; see api/v1/routes_storage.py
OBJECT_ROUTE = "/storage/o"


class ObjectStorage:
    def __init__(
        self,
        root: Path,
        *,
        public_base_url: str,
        api_prefix: str,
        secret_key: str,
        algorithm: str = DEFAULT_ALGORITHM,
    ):
        self.root = Path(root)
        self.public_base_url = public_base_url.rstrip("/")
        self.api_prefix = api_prefix
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.root.mkdir(parents=True, exist_ok=True)

    @classmethod
    def from_settings(cls, settings: Settings) -> "ObjectStorage":
        return cls(
            Path(settings.storage_root),
            public_base_url=settings.public_base_url,
            api_prefix=settings.api_v1_prefix,
            secret_key=settings.secret_key,
            algorithm=settings.algorithm,
        )

    # -----------------------------
    # Paths
    # -----------------------------
    @staticmethod
    def normalize_path(path: str) -> str:
        """Validate an object path and return its canonical form."""
        if not path or "\\" in path or "\x00" in path:
            raise PermissionDeniedError(f"Invalid object path: {path!r}")
        # PurePosixPath collapses "a//b" and "a/./b", so check the raw parts
        if any(part in ("..", ".", "") for part in path.split("/")):
            raise PermissionDeniedError(f"Invalid object path: {path!r}")
        return path

    def _file(self, path: str) -> Path:
        return self.root.joinpath(*PurePosixPath(self.normalize_path(path)).parts)

    # -----------------------------
    # Object operations
    # -----------------------------
    def put(self, path: str, data: bytes) -> str:
        target = self._file(path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)
        except OSError as exc:
            logger.exception("Failed to write object %s", path)
            raise StorageError(f"Failed to write {path}") from exc
        logger.info("Stored object %s (%d bytes)", path, len(data))
        return self.normalize_path(path)

    def exists(self, path: str) -> bool:
        return self._file(path).is_file()

    def read(self, path: str) -> bytes:
        target = self._file(path)
        if not target.is_file():
            raise NotFoundError(f"Object not found: {path}")
        return target.read_bytes()

    def file_path(self, path: str) -> Path:
        target = self._file(path)
        if not target.is_file():
            raise NotFoundError(f"Object not found: {path}")
        return target

    def delete(self, path: str) -> None:
        target = self._file(path)
        if not target.is_file():
            raise NotFoundError(f"Object not found: {path}")
        try:
            target.unlink()
        except OSError as exc:
            raise StorageError(f"Failed to delete {path}") from exc
        logger.info("Deleted object %s", path)

    @staticmethod
    def content_type(path: str) -> str:
        guessed, _ = mimetypes.guess_type(path)
        return guessed or "application/octet-stream"

    # -----------------------------
    # URLs
    # -----------------------------
    def _url(self, path: str, token: str) -> str:
        return (
            f"{self.public_base_url}{self.api_prefix}{OBJECT_ROUTE}/"
            f"{quote(path)}?token={token}"
        )

    def durable_url(self, path: str) -> str:
        path = self.normalize_path(path)
        token = encode_token(
            {"typ": STORAGE_TOKEN_TYPE, "path": path},
            secret_key=self.secret_key,
            algorithm=self.algorithm,
        )
        return self._url(path, token)

    def signed_url(self, path: str, expires_in: timedelta, filename: Optional[str] = None) -> str:
        path = self.normalize_path(path)
        claims = {"typ": STORAGE_TOKEN_TYPE, "path": path}
        if filename:
            claims["filename"] = filename
        token = encode_token(
            claims,
            secret_key=self.secret_key,
            algorithm=self.algorithm,
            expires_delta=expires_in,
        )
        return self._url(path, token)

    def resolve_token(self, token: str, path: Optional[str] = None) -> dict:
        """
        Check a storage token and return its claims.

        When ``path`` is given the token must have been issued for it.
        """
        try:
            claims = decode_token(
                token,
                secret_key=self.secret_key,
                token_type=STORAGE_TOKEN_TYPE,
                algorithm=self.algorithm,
            )
        except jwt.ExpiredSignatureError as exc:
            raise PermissionDeniedError("Download link has expired") from exc
        except jwt.InvalidTokenError as exc:
            raise PermissionDeniedError("Invalid download link") from exc

        if path is not None and claims.get("path") != self.normalize_path(path):
            raise PermissionDeniedError("Download link does not match the object")
        return claims

    def path_from_url(self, url: str) -> str:
        query = parse_qs(urlsplit(url).query)
        tokens = query.get("token")
        if not tokens:
            raise PermissionDeniedError(f"Not a storage URL: {url}")
        return self.resolve_token(tokens[0])["path"]
