# File: furniture_ocr/schemas/storage.py

from pydantic import BaseModel


class UploadResponse(BaseModel):
    url: str
    path: str
