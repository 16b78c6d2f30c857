# File: furniture_ocr/client/dashboard.py

"""
Dashboard: the top-level flow of the app.

New project: capture -> upload -> extraction -> review -> save, strictly in
that order and one capture at a time. Saved projects: list, edit, export,
and delete behind a confirmation step.
"""

import logging
from contextlib import nullcontext
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

from furniture_ocr.client.capture import (
    BusyPhase,
    CameraDevice,
    CaptureController,
    CapturedImage,
    CaptureState,
)
from furniture_ocr.client.relays import ExportRelay, ExtractionRelay, ProjectStoreRelay, UploadRelay
from furniture_ocr.client.review import ReviewEditor
from furniture_ocr.client.session import AuthSession
from furniture_ocr.core.naming import default_project_title
from furniture_ocr.schemas.project import ProjectCreate, ProjectRead, ProjectUpdate

logger = logging.getLogger(__name__)


class Tab(str, Enum):
    NEW = "new"
    PROJECTS = "projects"


@dataclass(frozen=True)
class DeleteConfirmation:
    project: ProjectRead

    @property
    def prompt(self) -> str:
        return f'Delete "{self.project.title}"? This cannot be undone.'


class DashboardController:
    def __init__(
        self,
        session: AuthSession,
        *,
        upload: Optional[UploadRelay] = None,
        extraction: Optional[ExtractionRelay] = None,
        project_store: Optional[ProjectStoreRelay] = None,
        export: Optional[ExportRelay] = None,
    ):
        self.session = session
        self.notifier = session.notifier
        self.upload = upload or UploadRelay(session.api, session)
        self.extraction = extraction or ExtractionRelay(session.api, session)
        self.project_store = project_store or ProjectStoreRelay(session.api, session)
        self.export = export or ExportRelay(session.api, session)

        self.active_tab = Tab.NEW
        self.projects: list[ProjectRead] = []
        self.capture: Optional[CaptureController] = None
        self.current_image_url: Optional[str] = None
        self.review: Optional[ReviewEditor] = None
        self.project_title = ""
        self.pending_delete: Optional[DeleteConfirmation] = None

    @property
    def is_processing(self) -> bool:
        return self.upload.uploading or self.extraction.processing

    def load_projects(self) -> list[ProjectRead]:
        self.projects = self.project_store.list()
        return self.projects

    # -----------------------------
    # New project
    # -----------------------------
    def open_capture(self, camera: CameraDevice) -> CaptureController:
        """Open the (modal, exclusive) capture dialog and ask for the camera."""
        if self.capture is not None and self.capture.state is not CaptureState.CLOSED:
            return self.capture
        self.capture = CaptureController(camera, self.notifier)
        self.capture.request_permission()
        return self.capture

    def close_capture(self) -> bool:
        if self.capture is None:
            return True
        if not self.capture.close():
            return False
        self.capture = None
        return True

    def capture_photo(self) -> Optional[ReviewEditor]:
        if self.capture is None:
            return None
        image = self.capture.capture()
        if image is None:
            return None
        return self.process_image(image)

    def select_file(self, name: str, data: bytes, content_type: Optional[str]) -> Optional[ReviewEditor]:
        if self.capture is None:
            return None
        image = self.capture.select_file(name, data, content_type)
        if image is None:
            return None
        return self.process_image(image)

    def _busy(self, phase: BusyPhase):
        return self.capture.busy(phase) if self.capture is not None else nullcontext()

    def process_image(self, image: CapturedImage) -> Optional[ReviewEditor]:
        """Upload ``image``, run extraction, and open the review editor."""
        try:
            with self._busy(BusyPhase.UPLOADING):
                image_url = self.upload.upload(image)
            if image_url is None:
                return None
            self.current_image_url = image_url

            with self._busy(BusyPhase.PROCESSING):
                result = self.extraction.extract(image_url)
            if result is None:
                return None
        finally:
            self.close_capture()

        self.review = ReviewEditor(result)
        return self.review

    def close_review(self) -> None:
        if self.review is not None:
            self.review.close()
        self.review = None

    def discard_capture(self) -> None:
        """Start over with a new image."""
        self.current_image_url = None
        self.review = None
        self.project_title = ""

    def save_review(self) -> Optional[str]:
        if self.review is None or self.current_image_url is None:
            return None

        data = self.review.save()
        project = ProjectCreate(
            title=self.project_title.strip() or default_project_title(),
            image_url=self.current_image_url,
            **data.model_dump(),
        )
        project_id = self.project_store.create(project)
        if project_id is None:
            return None

        self.discard_capture()
        self.load_projects()
        self.active_tab = Tab.PROJECTS
        return project_id

    # -----------------------------
    # Saved projects
    # -----------------------------
    def update_project(self, project_id: str, updates: ProjectUpdate) -> bool:
        ok = self.project_store.update(project_id, updates)
        if ok:
            self.load_projects()
        return ok

    def request_delete(self, project: ProjectRead) -> DeleteConfirmation:
        self.pending_delete = DeleteConfirmation(project)
        return self.pending_delete

    def cancel_delete(self) -> None:
        self.pending_delete = None

    def confirm_delete(self) -> bool:
        if self.pending_delete is None:
            return False
        project = self.pending_delete.project
        self.pending_delete = None

        ok = self.project_store.delete(project.id, project.image_url)
        if ok:
            self.load_projects()
        return ok

    def export_pdf(self, project: ProjectRead, dest_dir: Path) -> Optional[Path]:
        return self.export.export_pdf(project, dest_dir)

    def export_excel(self, project: ProjectRead, dest_dir: Path) -> Optional[Path]:
        return self.export.export_excel(project, dest_dir)

    def sign_out(self) -> None:
        self.close_capture()
        self.session.sign_out()
        self.discard_capture()
        self.projects = []
        self.pending_delete = None
        self.active_tab = Tab.NEW
