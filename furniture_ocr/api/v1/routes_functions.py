# File: furniture_ocr/api/v1/routes_functions.py

"""
Callable functions: OCR extraction and PDF / spreadsheet generation.

Failures come back as ``{"kind": ..., "message": ...}`` like every other
error the API raises.
"""

from datetime import timedelta

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from furniture_ocr.api.deps import get_app_settings, get_current_user, get_db, get_storage
from furniture_ocr.core.config import Settings
from furniture_ocr.models.user import User
from furniture_ocr.schemas.export import ExportRequest, ExportResponse
from furniture_ocr.schemas.extraction import ExtractionResult, ProcessOCRRequest
from furniture_ocr.services import export_service, extraction_service, project_service
from furniture_ocr.services.storage_service import ObjectStorage

router = APIRouter()


@router.post("/processOCR", response_model=ExtractionResult, summary="Extract text from an image")
def process_ocr(req: ProcessOCRRequest, user: User = Depends(get_current_user)):
    return extraction_service.process_image(req.image_url)


def _export(
    req: ExportRequest,
    extension: str,
    db: Session,
    user: User,
    storage: ObjectStorage,
    settings: Settings,
) -> ExportResponse:
    # only saved projects of the caller can be exported
    project_service.get_project(db, user, req.project.id)
    return export_service.export_project(
        storage,
        req.project,
        extension,
        ttl=timedelta(hours=settings.signed_url_ttl_hours),
    )


@router.post("/generatePDF", response_model=ExportResponse, summary="Render a project as PDF")
def generate_pdf(
    req: ExportRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
    storage: ObjectStorage = Depends(get_storage),
    settings: Settings = Depends(get_app_settings),
):
    return _export(req, export_service.PDF, db, user, storage, settings)


@router.post("/generateExcel", response_model=ExportResponse, summary="Render a project as a spreadsheet")
def generate_excel(
    req: ExportRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
    storage: ObjectStorage = Depends(get_storage),
    settings: Settings = Depends(get_app_settings),
):
    return _export(req, export_service.EXCEL, db, user, storage, settings)
