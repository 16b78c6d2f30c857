# File: furniture_ocr/core/naming.py

"""
Names derived from user input: project titles and download filenames.
"""

import re
from datetime import date
from typing import Optional

DEFAULT_FILENAME = "project"

_UNSAFE_FILENAME_CHARS = re.compile(r'[\\/:*?"<>|\x00-\x1f\x7f]+')
_DASH_RUNS = re.compile(r"-{2,}")


def default_project_title(today: Optional[date] = None) -> str:
    today = today or date.today()
    return f"Project {today.month}/{today.day}/{today.year}"


def sanitize_filename(title: Optional[str], default: str = DEFAULT_FILENAME) -> str:
    """
    Turn a project title into a safe download base name.

    ``"My/Plan:V1"`` -> ``"My-Plan-V1"``; an empty result falls back to
    ``default``.
    """
    base = _UNSAFE_FILENAME_CHARS.sub("-", title or "")
    base = _DASH_RUNS.sub("-", base).strip(" .-")
    return base or default
