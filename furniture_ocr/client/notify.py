# File: furniture_ocr/client/notify.py

import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Notice:
    level: str
    message: str


class Notifier:
    """
    Transient user notifications (toasts).

    Notices are kept in order so a UI can pop them, and every one is logged.
    """

    def __init__(self):
        self.notices: list[Notice] = []

    def _post(self, level: str, message: str) -> Notice:
        notice = Notice(level, message)
        self.notices.append(notice)
        logger.log(logging.ERROR if level == "error" else logging.INFO, "[%s] %s", level, message)
        return notice

    def success(self, message: str) -> Notice:
        return self._post("success", message)

    def error(self, message: str) -> Notice:
        return self._post("error", message)

    def info(self, message: str) -> Notice:
        return self._post("info", message)

    @property
    def last(self) -> Notice | None:
        return self.notices[-1] if self.notices else None

    def messages(self, level: str | None = None) -> list[str]:
        return [n.message for n in self.notices if level is None or n.level == level]

    def clear(self) -> None:
        self.notices.clear()
