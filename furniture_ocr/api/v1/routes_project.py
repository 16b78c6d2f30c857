# File: furniture_ocr/api/v1/routes_project.py

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from furniture_ocr.api.deps import get_current_user, get_db, get_storage
from furniture_ocr.models.user import User
from furniture_ocr.schemas.project import (
    ProjectCreate,
    ProjectListResponse,
    ProjectRead,
    ProjectUpdate,
)
from furniture_ocr.services import project_service
from furniture_ocr.services.storage_service import ObjectStorage

router = APIRouter()


@router.get(
    "/",
    response_model=ProjectListResponse,
    summary="List the current user's projects, most recently updated first",
)
def list_projects(db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    projects = project_service.list_projects(db, user)
    return ProjectListResponse(
        items=[ProjectRead.model_validate(p) for p in projects],
        total=len(projects),
    )


@router.post(
    "/",
    response_model=ProjectRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create project",
)
def create_project(
    payload: ProjectCreate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return project_service.create_project(db, user, payload)


@router.get("/{project_id}", response_model=ProjectRead, summary="Get project")
def get_project(
    project_id: str,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return project_service.get_project(db, user, project_id)


@router.patch("/{project_id}", response_model=ProjectRead, summary="Update some project fields")
def update_project(
    project_id: str,
    payload: ProjectUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return project_service.update_project(db, user, project_id, payload)


@router.delete(
    "/{project_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete project (and, best effort, its image)",
)
def delete_project(
    project_id: str,
    image_url: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    storage: ObjectStorage = Depends(get_storage),
    user: User = Depends(get_current_user),
):
    project_service.delete_project(db, storage, user, project_id, image_url)
