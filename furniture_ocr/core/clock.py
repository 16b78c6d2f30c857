# File: furniture_ocr/core/clock.py

import threading
from datetime import datetime, timedelta, timezone

_lock = threading.Lock()
_last: datetime | None = None


def server_timestamp() -> datetime:
    """
    Current UTC time, strictly later than any value returned before.

    Project timestamps are only compared for ordering, so two writes in the
    same microsecond must still sort in the order they happened.
    """
    global _last
    with _lock:
        now = datetime.now(timezone.utc)
        if _last is not None and now <= _last:
            now = _last + timedelta(microseconds=1)
        _last = now
        return now
