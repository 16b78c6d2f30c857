# File: furniture_ocr/client/review.py

"""
Review editor for an extraction result.

The editor works on its own deep copy: ``close()`` (or simply dropping the
editor) leaves the original result untouched.
"""

from typing import Optional

from furniture_ocr.schemas.extraction import ExtractionResult

FULL_TEXT = "full_text"
LIST_SECTIONS = ("materials", "measurements", "instructions")
SECTIONS = (FULL_TEXT,) + LIST_SECTIONS

SECTION_TITLES = {
    FULL_TEXT: "Full Text",
    "materials": "Materials",
    "measurements": "Measurements",
    "instructions": "Installation Instructions",
}


class ReviewStateError(RuntimeError):
    """Raised when a section is written without being in edit mode."""


def split_lines(value: str) -> list[str]:
    """One item per line; blank lines are dropped."""
    return [line for line in value.splitlines() if line.strip()]


class ReviewEditor:
    def __init__(self, result: ExtractionResult):
        self.original = result
        self.draft = result.model_copy(deep=True)
        self.editing: Optional[str] = None
        self.closed = False

    def _check_section(self, section: str) -> None:
        if section not in SECTIONS:
            raise KeyError(f"Unknown section: {section}")

    def toggle_edit(self, section: str) -> Optional[str]:
        """Switch ``section`` into edit mode, or back out if it already is."""
        self._check_section(section)
        self.editing = None if self.editing == section else section
        return self.editing

    def section_text(self, section: str) -> str:
        """Text shown in the edit box for ``section``."""
        self._check_section(section)
        if section == FULL_TEXT:
            return self.draft.full_text
        return "\n".join(getattr(self.draft, section))

    def edit(self, section: str, value: str) -> None:
        """Replace the draft content of ``section``, which must be in edit mode."""
        self._check_section(section)
        if self.editing != section:
            raise ReviewStateError(f"Section {section} is not being edited")
        if section == FULL_TEXT:
            self.draft.full_text = value
        else:
            setattr(self.draft, section, split_lines(value))

    def items(self, section: str) -> list[str]:
        if section not in LIST_SECTIONS:
            raise KeyError(f"Not a list section: {section}")
        return list(getattr(self.draft, section))

    def save(self) -> ExtractionResult:
        self.editing = None
        return self.draft.model_copy(deep=True)

    def close(self) -> None:
        self.editing = None
        self.draft = self.original.model_copy(deep=True)
        self.closed = True
