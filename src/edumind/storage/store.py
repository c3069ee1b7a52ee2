"""Key-value persistence standing in for per-browser local storage.

Each logical key holds one JSON document. Writes replace the whole document
(temp file + os.replace); a value that cannot be read back is treated as
absent rather than raised, since history is best-effort.
"""

import fcntl
import json
import os
import tempfile
from enum import StrEnum
from pathlib import Path
from typing import Any, Protocol

import structlog

logger = structlog.get_logger()


class StoreKey(StrEnum):
    CURRENT_USER = "edumind_user"
    CURRENT_CHAT = "edumind_current_chat"
    CHAT_HISTORY = "edumind_chat_history"
    QUIZ_HISTORY = "edumind_quiz_history"
    SUMMARY_HISTORY = "edumind_summary_history"
    PLAN_HISTORY = "edumind_plan_history"


class KeyValueStore(Protocol):
    def get(self, key: StoreKey) -> Any | None: ...

    def set(self, key: StoreKey, value: Any) -> None: ...

    def remove(self, key: StoreKey) -> None: ...


class JsonFileStore:
    """One UTF-8 JSON file per key under a root directory.

    Args:
        root: Directory holding the store; created if missing.
    """

    def __init__(self, root: Path):
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)

    def path_for(self, key: StoreKey) -> Path:
        return self.root / f"{StoreKey(key).value}.json"

    def get(self, key: StoreKey) -> Any | None:
        path = self.path_for(key)
        if not path.exists():
            return None
        try:
            with open(path, encoding="utf-8") as f:
                fcntl.flock(f, fcntl.LOCK_SH)
                try:
                    return json.load(f)
                finally:
                    fcntl.flock(f, fcntl.LOCK_UN)
        except (OSError, ValueError) as e:
            logger.warning("store_read_failed", key=str(key), error=str(e))
            return None

    def set(self, key: StoreKey, value: Any) -> None:
        path = self.path_for(key)
        payload = json.dumps(value, ensure_ascii=False)
        with tempfile.NamedTemporaryFile(
            "w", dir=self.root, delete=False, suffix=".json", encoding="utf-8"
        ) as tmp:
            tmp.write(payload)
        os.replace(tmp.name, path)

    def remove(self, key: StoreKey) -> None:
        self.path_for(key).unlink(missing_ok=True)


class MemoryStore:
    """In-process store; values are kept as JSON text like the file store."""

    def __init__(self):
        self._data: dict[str, str] = {}

    def get(self, key: StoreKey) -> Any | None:
        raw = self._data.get(StoreKey(key).value)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError as e:
            logger.warning("store_read_failed", key=str(key), error=str(e))
            return None

    def set(self, key: StoreKey, value: Any) -> None:
        self._data[StoreKey(key).value] = json.dumps(value, ensure_ascii=False)

    def remove(self, key: StoreKey) -> None:
        self._data.pop(StoreKey(key).value, None)
