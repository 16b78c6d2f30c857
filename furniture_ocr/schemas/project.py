# File: furniture_ocr/schemas/project.py

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, field_validator

from furniture_ocr.schemas.extraction import ExtractionResult


class ProjectBase(ExtractionResult):
    title: str = ""
    image_url: str


class ProjectCreate(ProjectBase):
    pass


class ProjectUpdate(BaseModel):
    """Partial update: only the fields that are sent are changed."""

    title: Optional[str] = None
    image_url: Optional[str] = None
    full_text: Optional[str] = None
    materials: Optional[List[str]] = None
    measurements: Optional[List[str]] = None
    instructions: Optional[List[str]] = None


class ProjectRead(ProjectBase):
    id: str
    owner_id: str
    created_at: datetime
    updated_at: datetime

    @field_validator("materials", "measurements", "instructions", mode="before")
    @classmethod
    def none_as_empty(cls, v):
        return [] if v is None else v

    class Config:
        from_attributes = True


class ProjectListResponse(BaseModel):
    items: List[ProjectRead]
    total: int
