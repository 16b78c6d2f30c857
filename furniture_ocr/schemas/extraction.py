# File: furniture_ocr/schemas/extraction.py

from typing import List, Optional

from pydantic import BaseModel


class ExtractionResult(BaseModel):
    """Free text plus the three categorized lists pulled from an image."""

    full_text: str = ""
    materials: List[str] = []
    measurements: List[str] = []
    instructions: List[str] = []


class ProcessOCRRequest(BaseModel):
    image_url: Optional[str] = None
