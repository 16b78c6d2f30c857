# File: furniture_ocr/schemas/export.py

from typing import List

from pydantic import BaseModel


class ExportProject(BaseModel):
    """The slice of a project the renderers need."""

    id: str
    title: str = ""
    materials: List[str] = []
    measurements: List[str] = []
    instructions: List[str] = []


class ExportRequest(BaseModel):
    project: ExportProject


class ExportResponse(BaseModel):
    download_url: str
    filename: str
