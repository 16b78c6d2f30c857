# File: furniture_ocr/services/upload_service.py

"""
Image upload handling.

Captured or selected images are written to ``images/<uid>/<ts>-<name>`` so
that two uploads never collide, and the caller gets back a durable URL.
"""

import logging
import re
import time

from furniture_ocr.core.errors import InvalidArgumentError
from furniture_ocr.models.user import User
from furniture_ocr.services.storage_service import ObjectStorage

logger = logging.getLogger(__name__)

IMAGES_PREFIX = "images"

_UNSAFE_NAME_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def user_image_prefix(user_id: str) -> str:
    return f"{IMAGES_PREFIX}/{user_id}/"


def safe_object_name(filename: str | None) -> str:
    name = (filename or "").rsplit("/", 1)[-1].rsplit("\\", 1)[-1]
    name = _UNSAFE_NAME_CHARS.sub("-", name).strip(".-")
    return name or "image"


def is_image_type(content_type: str | None) -> bool:
    return bool(content_type) and content_type.lower().startswith("image/")


def upload_image(
    storage: ObjectStorage,
    user: User,
    *,
    filename: str | None,
    content_type: str | None,
    data: bytes,
) -> tuple[str, str]:
    """
    Store an image for ``user`` and return ``(path, durable_url)``.
    """
    if not is_image_type(content_type):
        raise InvalidArgumentError(f"Expected an image, got {content_type or 'unknown type'}")
    if not data:
        raise InvalidArgumentError("File is empty")

    timestamp = int(time.time() * 1000)
    path = f"{user_image_prefix(user.id)}{timestamp}-{safe_object_name(filename)}"
    while storage.exists(path):
        timestamp += 1
        path = f"{user_image_prefix(user.id)}{timestamp}-{safe_object_name(filename)}"

    storage.put(path, data)
    logger.info("User %s uploaded image %s", user.id, path)
    return path, storage.durable_url(path)
