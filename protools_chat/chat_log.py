"""
Bounded chat log kept in a key/value store.

The store mirrors browser storage: string blobs under string keys. The log
itself is a JSON array under ``LOG_STORAGE_KEY``; once it reaches capacity the
oldest entries are dropped first. Logging is best effort, so ``ChatLogger.log``
never raises.
"""

import json
import os
import random
import string
import tempfile
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

from .config import COURSE_NAME, LOG_STORAGE_KEY, MAX_LOG_ENTRIES, SESSION_ID_KEY
from .logging import get_logger

logger = get_logger(__name__)

LOG_TYPES = ("user", "assistant")
LOG_SOURCES = ("knowledge_base", "gemini_api", "fallback")


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


# =========================
# Stores
# =========================
class MemoryStore:
    """Process-lifetime store (the equivalent of sessionStorage)."""

    def __init__(self):
        self._data: Dict[str, str] = {}

    def get_item(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove_item(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileStore:
    """File-backed store: one JSON object mapping keys to string blobs."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def _load(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        with self.path.open("r", encoding="utf-8") as fh:
            data = json.load(fh)
        return data if isinstance(data, dict) else {}

    def _save(self, data: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=str(self.path.parent), prefix=".store-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(data, fh)
            os.replace(tmp, self.path)
        except BaseException:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise

    def get_item(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set_item(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self._save(data)

    def remove_item(self, key: str) -> None:
        data = self._load()
        if data.pop(key, None) is not None:
            self._save(data)


# =========================
# Entries
# =========================
@dataclass
class LogEntry:
    type: str
    message: str
    timestamp: str = field(default_factory=now_iso)
    user_query: Optional[str] = None
    source: Optional[str] = None

    def __post_init__(self):
        if self.type not in LOG_TYPES:
            raise ValueError(f"unknown log entry type: {self.type!r}")
        if self.source is not None and self.source not in LOG_SOURCES:
            raise ValueError(f"unknown log entry source: {self.source!r}")

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "type": self.type,
            "message": self.message,
            "timestamp": self.timestamp,
        }
        if self.user_query is not None:
            data["userQuery"] = self.user_query
        if self.source is not None:
            data["source"] = self.source
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LogEntry":
        return cls(
            type=data["type"],
            message=data["message"],
            timestamp=data.get("timestamp") or now_iso(),
            user_query=data.get("userQuery", data.get("user_query")),
            source=data.get("source"),
        )


def generate_session_id(rng: Optional[random.Random] = None) -> str:
    rng = rng or random.Random()
    suffix = "".join(rng.choice(string.digits + string.ascii_lowercase) for _ in range(9))
    return f"session_{int(time.time() * 1000)}_{suffix}"


def default_page_context() -> Dict[str, str]:
    return {"url": "/", "title": COURSE_NAME, "timestamp": now_iso()}


# =========================
# Logger
# =========================
class ChatLogger:
    def __init__(
        self,
        store,
        capacity: int = MAX_LOG_ENTRIES,
        session_store=None,
        page_context: Callable[[], Dict[str, str]] = default_page_context,
        key: str = LOG_STORAGE_KEY,
    ):
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.store = store
        self.capacity = capacity
        self.session_store = session_store if session_store is not None else MemoryStore()
        self.page_context = page_context
        self.key = key

    def session_id(self) -> str:
        sid = self.session_store.get_item(SESSION_ID_KEY)
        if not sid:
            sid = generate_session_id()
            self.session_store.set_item(SESSION_ID_KEY, sid)
        return sid

    def _read(self) -> List[Dict[str, Any]]:
        raw = self.store.get_item(self.key)
        if not raw:
            return []
        try:
            logs = json.loads(raw)
        except json.JSONDecodeError:
            logger.debug("chat_log_unreadable", key=self.key)
            return []
        return logs if isinstance(logs, list) else []

    def log(self, entry: Union[LogEntry, Dict[str, Any]]) -> None:
        try:
            if not isinstance(entry, LogEntry):
                entry = LogEntry.from_dict(entry)
            record = entry.to_dict()
            record["sessionId"] = self.session_id()
            record["context"] = self.page_context()

            logs = self._read()
            logs.append(record)
            if len(logs) > self.capacity:
                del logs[: len(logs) - self.capacity]

            self.store.set_item(self.key, json.dumps(logs))
        except Exception as exc:
            logger.debug("chat_log_write_failed", error=str(exc))

    def entries(self) -> List[Dict[str, Any]]:
        return self._read()

    def count(self) -> int:
        n = len(self._read())
        logger.info("chat_log_count", entries=n)
        return n

    def export(self) -> bytes:
        return json.dumps(self._read(), indent=2, ensure_ascii=False).encode("utf-8")

    def export_filename(self) -> str:
        return f"protools_chat_logs_{datetime.now(timezone.utc).date().isoformat()}.json"

    def export_to(self, directory: Union[str, Path]) -> Path:
        target = Path(directory) / self.export_filename()
        target.write_bytes(self.export())
        return target

    def clear(self, confirm: Callable[[], bool]) -> bool:
        """Empty the log if ``confirm()`` says so. Returns whether it was cleared."""
        if not confirm():
            return False
        self.store.remove_item(self.key)
        logger.info("chat_log_cleared")
        return True
