# File: furniture_ocr/services/project_service.py

"""
Project persistence.

Every query is scoped to the owning user: a project that belongs to someone
else is reported exactly like one that does not exist.
"""

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from furniture_ocr.core.clock import server_timestamp
from furniture_ocr.core.errors import AppError, NotFoundError
from furniture_ocr.core.naming import default_project_title
from furniture_ocr.models.project import Project
from furniture_ocr.models.user import User
from furniture_ocr.schemas.project import ProjectCreate, ProjectUpdate
from furniture_ocr.services.storage_service import ObjectStorage
from furniture_ocr.services.upload_service import user_image_prefix

logger = logging.getLogger(__name__)


def create_project(db: Session, owner: User, payload: ProjectCreate) -> Project:
    project = Project(
        owner_id=owner.id,
        title=payload.title.strip() or default_project_title(),
        image_url=payload.image_url,
        full_text=payload.full_text,
        materials=list(payload.materials),
        measurements=list(payload.measurements),
        instructions=list(payload.instructions),
    )
    db.add(project)
    db.commit()
    db.refresh(project)
    logger.info("Created project %s for user %s", project.id, owner.id)
    return project


def get_project(db: Session, owner: User, project_id: str) -> Project:
    project = db.get(Project, project_id)
    if project is None or project.owner_id != owner.id:
        raise NotFoundError(f"Project {project_id} not found")
    return project


def list_projects(db: Session, owner: User) -> list[Project]:
    stmt = (
        select(Project)
        .where(Project.owner_id == owner.id)
        .order_by(Project.updated_at.desc(), Project.created_at.desc())
    )
    return list(db.scalars(stmt))


def update_project(db: Session, owner: User, project_id: str, payload: ProjectUpdate) -> Project:
    project = get_project(db, owner, project_id)

    changes = payload.model_dump(exclude_unset=True)
    for field, value in changes.items():
        if field in ("materials", "measurements", "instructions"):
            value = list(value or [])
        elif field == "title":
            value = (value or "").strip() or project.title
        elif value is None:
            # explicit null on a scalar column means "leave it alone"
            continue
        setattr(project, field, value)

    # updated_at moves even when nothing else did
    project.updated_at = server_timestamp()
    db.commit()
    db.refresh(project)
    logger.info("Updated project %s (%s)", project.id, ", ".join(sorted(changes)) or "touch")
    return project


def delete_project(
    db: Session,
    storage: ObjectStorage,
    owner: User,
    project_id: str,
    image_url: Optional[str] = None,
) -> None:
    """
    Delete a project record, then try to delete its image.

    The record is the source of truth: once it is gone the project is
    deleted, whatever happens to the image.
    """
    project = get_project(db, owner, project_id)
    db.delete(project)
    db.commit()
    logger.info("Deleted project %s for user %s", project_id, owner.id)

    if image_url:
        _delete_image_best_effort(storage, owner, image_url)


def _delete_image_best_effort(storage: ObjectStorage, owner: User, image_url: str) -> None:
    try:
        path = storage.path_from_url(image_url)
        if not path.startswith(user_image_prefix(owner.id)):
            logger.warning("Refusing to delete %s: not an image owned by %s", path, owner.id)
            return
        storage.delete(path)
    except AppError as exc:
        logger.warning("Could not delete image %s from storage: %s", image_url, exc.message)
