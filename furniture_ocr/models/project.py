# File: furniture_ocr/models/project.py

"""
Project model.

One saved unit of extracted-and-reviewed document content plus the locator
of its source image. The three categorized lists are stored as JSON arrays
and are never NULL.
"""

import uuid
from datetime import datetime

from sqlalchemy import JSON, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from furniture_ocr.core.clock import server_timestamp
from furniture_ocr.models.base import Base


class Project(Base):
    __tablename__ = "projects"

    id: Mapped[str] = mapped_column(
        String(32), primary_key=True, default=lambda: uuid.uuid4().hex
    )
    owner_id: Mapped[str] = mapped_column(
        String(32), ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)

    # Durable storage URL of the captured image
    image_url: Mapped[str] = mapped_column(String(2048), nullable=False)

    full_text: Mapped[str] = mapped_column(Text, nullable=False, default="")
    materials: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    measurements: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    instructions: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=server_timestamp,
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=server_timestamp,
        onupdate=server_timestamp,
        index=True,
        nullable=False,
    )
