import json
import threading
import time
from datetime import datetime, timezone
from typing import Callable, Optional

from .chat_log import MemoryStore
from .config import DAILY_LIMIT

KEY_TTL = 86400 * 2  # old day keys linger for two days


def utc_today() -> str:
    return datetime.now(timezone.utc).date().isoformat()


class SessionCounter:
    """Per-UTC-day request counter used to cap upstream calls."""

    def __init__(
        self,
        store=None,
        limit: int = DAILY_LIMIT,
        today: Callable[[], str] = utc_today,
        clock: Callable[[], float] = time.time,
    ):
        self.store = store if store is not None else MemoryStore()
        self.limit = limit
        self.today = today
        self.clock = clock
        self._lock = threading.Lock()

    def key(self, day: Optional[str] = None) -> str:
        return f"requests_{day or self.today()}"

    def _get(self, key: str) -> int:
        raw = self.store.get_item(key)
        if not raw:
            return 0
        try:
            record = json.loads(raw)
            if record.get("expires", 0) <= self.clock():
                self.store.remove_item(key)
                return 0
            return int(record.get("count", 0))
        except (ValueError, AttributeError, TypeError):
            return 0

    def current(self) -> int:
        with self._lock:
            return self._get(self.key())

    def _set(self, key: str, count: int) -> None:
        self.store.set_item(key, json.dumps({"count": count, "expires": self.clock() + KEY_TTL}))

    def try_acquire(self) -> bool:
        """Reserve one request under the ceiling; False once it is spent."""
        with self._lock:
            key = self.key()
            count = self._get(key)
            if count >= self.limit:
                return False
            self._set(key, count + 1)
            return True

    def release(self) -> None:
        """Give back a reservation whose request did not go through."""
        with self._lock:
            key = self.key()
            count = self._get(key)
            if count > 0:
                self._set(key, count - 1)
