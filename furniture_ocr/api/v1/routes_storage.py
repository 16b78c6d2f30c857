# File: furniture_ocr/api/v1/routes_storage.py

"""
Object storage endpoints: image upload and token-checked downloads.
"""

from fastapi import APIRouter, Depends, File, Query, UploadFile, status
from fastapi.responses import FileResponse

from furniture_ocr.api.deps import get_current_user, get_storage
from furniture_ocr.core.errors import InvalidArgumentError
from furniture_ocr.models.user import User
from furniture_ocr.schemas.storage import UploadResponse
from furniture_ocr.services import upload_service
from furniture_ocr.services.storage_service import ObjectStorage

router = APIRouter()

# Maximum image size (25MB)
MAX_UPLOAD_SIZE = 25 * 1024 * 1024


@router.post(
    "/images",
    response_model=UploadResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Upload a captured or selected image",
)
async def upload_image(
    file: UploadFile = File(...),
    user: User = Depends(get_current_user),
    storage: ObjectStorage = Depends(get_storage),
):
    data = await file.read(MAX_UPLOAD_SIZE + 1)
    if len(data) > MAX_UPLOAD_SIZE:
        raise InvalidArgumentError(
            f"Image exceeds the {MAX_UPLOAD_SIZE // (1024 * 1024)}MB limit"
        )

    path, url = upload_service.upload_image(
        storage,
        user,
        filename=file.filename,
        content_type=file.content_type,
        data=data,
    )
    return UploadResponse(url=url, path=path)


@router.get("/o/{path:path}", summary="Download an object with a signed token")
def download_object(
    path: str,
    token: str = Query(...),
    storage: ObjectStorage = Depends(get_storage),
):
    claims = storage.resolve_token(token, path)
    filename = claims.get("filename")
    return FileResponse(
        storage.file_path(path),
        media_type=storage.content_type(path),
        filename=filename,
    )
