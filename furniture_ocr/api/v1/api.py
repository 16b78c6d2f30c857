from fastapi import APIRouter

from furniture_ocr.api.v1.routes_auth import router as auth_router
from furniture_ocr.api.v1.routes_functions import router as functions_router
from furniture_ocr.api.v1.routes_project import router as project_router
from furniture_ocr.api.v1.routes_storage import router as storage_router


api_router = APIRouter()

api_router.include_router(auth_router, prefix="/auth", tags=["auth"])
api_router.include_router(project_router, prefix="/projects", tags=["projects"])
api_router.include_router(storage_router, prefix="/storage", tags=["storage"])
api_router.include_router(functions_router, prefix="/functions", tags=["functions"])
