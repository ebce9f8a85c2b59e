# ==============================================================================
# In-Memory Session Store
# ==============================================================================
"""
Process-local session id storage with optional expiry.

Plays the role of per-tab storage: lives as long as the process and is
shared by every engine built against the same instance.
"""

import threading
import time
from collections.abc import Callable

from clicksignals.base.session_store import SessionStore


class MemorySessionStore(SessionStore):
    """Dict-backed SessionStore. Expired entries are dropped on read."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._lock = threading.Lock()
        self._values: dict[str, tuple[str, float | None]] = {}

    def get(self, key: str) -> str | None:
        with self._lock:
            entry = self._values.get(key)
            if entry is None:
                return None
            session_id, expires_at = entry
            if expires_at is not None and self._clock() >= expires_at:
                del self._values[key]
                return None
            return session_id

    def set(self, key: str, session_id: str, ttl_seconds: int | None = None) -> None:
        expires_at = self._clock() + ttl_seconds if ttl_seconds is not None else None
        with self._lock:
            self._values[key] = (session_id, expires_at)

    def clear(self) -> None:
        with self._lock:
            self._values.clear()
