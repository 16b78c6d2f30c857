# File: furniture_ocr/services/export_service.py

"""
PDF and spreadsheet exports of a saved project.

Rendered files are written to ``exports/<project_id>/<timestamp>.<ext>`` and
handed back as a time-limited signed URL that forces a download under a
filename derived from the project title.
"""

import io
import logging
import time
from datetime import timedelta

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.lib.utils import simpleSplit
from reportlab.pdfgen import canvas

from furniture_ocr.core.errors import AppError, ExportError, InvalidArgumentError
from furniture_ocr.core.naming import DEFAULT_FILENAME, sanitize_filename
from furniture_ocr.schemas.export import ExportProject, ExportResponse
from furniture_ocr.services.storage_service import ObjectStorage

logger = logging.getLogger(__name__)

EXPORTS_PREFIX = "exports"

PDF = "pdf"
EXCEL = "xlsx"

# (label, project field, numbered)
SECTIONS = (
    ("Materials", "materials", False),
    ("Measurements", "measurements", False),
    ("Steps", "instructions", True),
)

LIST_DELIMITER = "; "


# -----------------------------
# PDF
# -----------------------------
class _SinglePage:
    """Draws top-down lines on one page and stops once the page is full."""

    def __init__(self, pdf: canvas.Canvas, width: float, height: float, margin: float):
        self.pdf = pdf
        self.left = margin
        self.bottom = margin
        self.text_width = width - 2 * margin
        self.y = height - margin
        self.full = False

    def line(self, text: str, font: str, size: float, indent: float = 0, leading: float | None = None) -> bool:
        leading = leading or size * 1.35
        if self.full:
            return False
        if self.y - leading < self.bottom:
            self.pdf.setFont("Helvetica", size)
            self.pdf.drawString(self.left + indent, self.y - leading, "…")
            self.full = True
            return False
        self.y -= leading
        self.pdf.setFont(font, size)
        self.pdf.drawString(self.left + indent, self.y, text)
        return True

    def paragraph(self, text: str, font: str, size: float, indent: float = 0, hanging: float = 0) -> bool:
        lines = simpleSplit(text, font, size, self.text_width - indent - hanging) or [""]
        for i, chunk in enumerate(lines):
            if not self.line(chunk, font, size, indent + (hanging if i else 0)):
                return False
        return True

    def gap(self, amount: float) -> None:
        self.y -= amount


def render_pdf(project: ExportProject) -> bytes:
    buffer = io.BytesIO()
    width, height = A4
    pdf = canvas.Canvas(buffer, pagesize=A4)
    pdf.setTitle(project.title or DEFAULT_FILENAME)

    page = _SinglePage(pdf, width, height, margin=20 * mm)
    page.paragraph(project.title or "Untitled project", "Helvetica-Bold", 20)
    page.gap(6 * mm)

    for label, field, numbered in SECTIONS:
        if not page.line(label, "Helvetica-Bold", 14):
            break
        items = getattr(project, field)
        if not items:
            page.line("None", "Helvetica-Oblique", 11, indent=5 * mm)
        for index, item in enumerate(items, 1):
            marker = f"{index}. " if numbered else "• "
            if not page.paragraph(marker + item, "Helvetica", 11, indent=5 * mm, hanging=5 * mm):
                break
        if page.full:
            break
        page.gap(4 * mm)

    pdf.showPage()
    pdf.save()
    return buffer.getvalue()


# -----------------------------
# Spreadsheet
# -----------------------------
def render_excel(project: ExportProject) -> bytes:
    wb = Workbook()
    ws = wb.active
    ws.title = "Project"

    ws.append(["Section", "Value"])
    header_fill = PatternFill(start_color="366092", end_color="366092", fill_type="solid")
    header_font = Font(bold=True, color="FFFFFF")
    for cell in ws[1]:
        cell.fill = header_fill
        cell.font = header_font
        cell.alignment = Alignment(horizontal="center", vertical="center")

    ws.append(["Title", project.title])
    ws.append([])
    for label, field, _ in SECTIONS:
        ws.append([label, LIST_DELIMITER.join(getattr(project, field))])

    ws.column_dimensions["A"].width = 16
    ws.column_dimensions["B"].width = 80
    for row in ws.iter_rows(min_row=2, min_col=2, max_col=2):
        for cell in row:
            cell.alignment = Alignment(wrap_text=True, vertical="top")

    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


RENDERERS = {
    PDF: render_pdf,
    EXCEL: render_excel,
}


def _export_path(storage: ObjectStorage, project_id: str, extension: str) -> str:
    timestamp = int(time.time() * 1000)
    path = f"{EXPORTS_PREFIX}/{project_id}/{timestamp}.{extension}"
    # never overwrite an earlier export of the same project
    while storage.exists(path):
        timestamp += 1
        path = f"{EXPORTS_PREFIX}/{project_id}/{timestamp}.{extension}"
    return path


def export_project(
    storage: ObjectStorage,
    project: ExportProject,
    extension: str,
    ttl: timedelta = timedelta(hours=24),
) -> ExportResponse:
    renderer = RENDERERS.get(extension)
    if renderer is None:
        raise InvalidArgumentError(f"Unsupported export format: {extension}")

    try:
        data = renderer(project)
    except Exception as exc:
        logger.exception("Rendering %s for project %s failed", extension, project.id)
        raise ExportError(f"Failed to generate {extension.upper()}") from exc

    filename = f"{sanitize_filename(project.title)}.{extension}"
    try:
        path = storage.put(_export_path(storage, project.id, extension), data)
    except AppError as exc:
        raise ExportError(f"Failed to store {extension.upper()} export") from exc

    logger.info("Exported project %s to %s", project.id, path)
    return ExportResponse(
        download_url=storage.signed_url(path, ttl, filename=filename),
        filename=filename,
    )
