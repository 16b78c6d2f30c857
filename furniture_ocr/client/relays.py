# File: furniture_ocr/client/relays.py

"""
Thin wrappers that forward one request to the API and translate the result.

Relays never raise for remote failures: they log, post a notice and return
``None`` / ``False`` / ``[]`` so the calling flow can simply stop.
"""

import logging
from pathlib import Path
from typing import Optional

from furniture_ocr.client.api import ApiClient, RelayError
from furniture_ocr.client.capture import CapturedImage
from furniture_ocr.client.notify import Notifier
from furniture_ocr.client.session import AuthSession
from furniture_ocr.core.naming import sanitize_filename
from furniture_ocr.schemas.export import ExportProject, ExportResponse
from furniture_ocr.schemas.extraction import ExtractionResult
from furniture_ocr.schemas.project import ProjectCreate, ProjectRead, ProjectUpdate

logger = logging.getLogger(__name__)


class _Relay:
    def __init__(self, api: ApiClient, session: AuthSession, notifier: Optional[Notifier] = None):
        self.api = api
        self.session = session
        self.notifier = notifier or session.notifier


class UploadRelay(_Relay):
    uploading = False

    def upload(self, image: CapturedImage) -> Optional[str]:
        if not self.session.is_authenticated:
            self.notifier.error("You must be logged in to upload images")
            return None

        self.uploading = True
        try:
            response = self.api.post(
                "/storage/images",
                files={"file": (image.name, image.data, image.content_type)},
            )
            url = response.json()["url"]
            self.notifier.success("Image uploaded successfully")
            return url
        except RelayError as exc:
            logger.error("Error uploading image: %s", exc)
            self.notifier.error("Failed to upload image")
            return None
        finally:
            self.uploading = False


class ExtractionRelay(_Relay):
    processing = False

    def extract(self, image_url: str) -> Optional[ExtractionResult]:
        self.processing = True
        try:
            response = self.api.post("/functions/processOCR", json={"image_url": image_url})
            result = ExtractionResult.model_validate(response.json())
            self.notifier.success("Text extracted successfully")
            return result
        except RelayError as exc:
            logger.error("Error processing OCR: %s", exc)
            self.notifier.error("Failed to extract text from image")
            return None
        finally:
            self.processing = False


class ProjectStoreRelay(_Relay):
    loading = False

    def create(self, project: ProjectCreate) -> Optional[str]:
        if not self.session.is_authenticated:
            return None

        self.loading = True
        try:
            response = self.api.post("/projects/", json=project.model_dump())
            project_id = response.json()["id"]
            self.notifier.success("Project saved successfully")
            return project_id
        except RelayError as exc:
            logger.error("Error saving project: %s", exc)
            self.notifier.error("Failed to save project")
            return None
        finally:
            self.loading = False

    def update(self, project_id: str, updates: ProjectUpdate) -> bool:
        if not self.session.is_authenticated:
            return False

        self.loading = True
        try:
            self.api.patch(f"/projects/{project_id}", json=updates.model_dump(exclude_unset=True))
            self.notifier.success("Project updated successfully")
            return True
        except RelayError as exc:
            logger.error("Error updating project: %s", exc)
            self.notifier.error("Failed to update project")
            return False
        finally:
            self.loading = False

    def list(self) -> list[ProjectRead]:
        if not self.session.is_authenticated:
            return []

        self.loading = True
        try:
            response = self.api.get("/projects/")
            return [ProjectRead.model_validate(item) for item in response.json()["items"]]
        except RelayError as exc:
            logger.error("Error fetching projects: %s", exc)
            self.notifier.error("Failed to load projects")
            return []
        finally:
            self.loading = False

    def delete(self, project_id: str, image_url: Optional[str] = None) -> bool:
        if not self.session.is_authenticated:
            return False

        self.loading = True
        try:
            params = {"image_url": image_url} if image_url else None
            self.api.delete(f"/projects/{project_id}", params=params)
            self.notifier.success("Project deleted")
            return True
        except RelayError as exc:
            logger.error("Error deleting project: %s", exc)
            self.notifier.error("Failed to delete project")
            return False
        finally:
            self.loading = False


class ExportRelay(_Relay):
    exporting = False

    FORMATS = {
        "pdf": ("generatePDF", "PDF exported successfully", "Failed to export PDF"),
        "xlsx": ("generateExcel", "Excel file exported successfully", "Failed to export Excel file"),
    }

    def export_pdf(self, project: ProjectRead, dest_dir: Path) -> Optional[Path]:
        return self._export(project, "pdf", Path(dest_dir))

    def export_excel(self, project: ProjectRead, dest_dir: Path) -> Optional[Path]:
        return self._export(project, "xlsx", Path(dest_dir))

    def _export(self, project: ProjectRead, extension: str, dest_dir: Path) -> Optional[Path]:
        function, success, failure = self.FORMATS[extension]
        payload = ExportProject.model_validate(project, from_attributes=True)

        self.exporting = True
        try:
            response = self.api.post(f"/functions/{function}", json={"project": payload.model_dump()})
            export = ExportResponse.model_validate(response.json())
            download = self.api.get(export.download_url, absolute=True, authenticated=False)

            target = _unique_path(dest_dir, f"{sanitize_filename(project.title)}.{extension}")
            dest_dir.mkdir(parents=True, exist_ok=True)
            target.write_bytes(download.content)
            self.notifier.success(success)
            return target
        except (RelayError, OSError) as exc:
            logger.error("Error exporting %s: %s", extension, exc)
            self.notifier.error(failure)
            return None
        finally:
            self.exporting = False


def _unique_path(directory: Path, filename: str) -> Path:
    """``name.ext``, then ``name (1).ext`` and so on, like a browser download."""
    target = directory / filename
    stem, suffix = target.stem, target.suffix
    counter = 1
    while target.exists():
        target = directory / f"{stem} ({counter}){suffix}"
        counter += 1
    return target
