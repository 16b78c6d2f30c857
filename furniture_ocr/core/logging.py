# File: furniture_ocr/core/logging.py

"""
Logging setup for the API process.

Modules log through ``logging.getLogger(__name__)``; this only decides where
the records go and how they look.
"""

import logging
import sys
from typing import Optional

LOG_FORMAT = "%(asctime)s [%(name)s] %(levelname)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_configured = False


def setup_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    """
    Configure the ``furniture_ocr`` logger hierarchy.

    Safe to call more than once (the app factory runs per test); handlers are
    only installed on the first call, later calls just adjust the level.
    """
    global _configured

    root = logging.getLogger("furniture_ocr")
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    if _configured:
        return

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    root.addHandler(console_handler)

    if log_file:
        try:
            file_handler = logging.FileHandler(log_file, encoding="utf-8")
        except OSError:
            root.warning("LOG_FILE %s could not be opened; logging to stdout only", log_file)
        else:
            file_handler.setFormatter(formatter)
            root.addHandler(file_handler)

    _configured = True
