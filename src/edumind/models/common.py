"""Record ids and timestamps shared by all history records."""

import threading
import time

_id_lock = threading.Lock()
_last_id = 0


def now_ms() -> int:
    """Current epoch time in milliseconds."""
    return time.time_ns() // 1_000_000


def new_record_id() -> str:
    """Time-based record id, strictly increasing within the process."""
    global _last_id
    with _id_lock:
        candidate = now_ms()
        if candidate <= _last_id:
            candidate = _last_id + 1
        _last_id = candidate
    return str(candidate)
