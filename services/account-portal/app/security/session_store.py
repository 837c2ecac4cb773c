"""In-memory server-side session storage."""

from __future__ import annotations

import copy
import time
from threading import Lock
from typing import Any, Callable, Protocol


class SessionStore(Protocol):
    def load(self, session_id: str) -> dict[str, Any] | None: ...

    def save(self, session_id: str, data: dict[str, Any], ttl_seconds: int) -> None: ...

    def delete(self, session_id: str) -> None: ...


class MemorySessionStore:
    """Thread-safe dictionary store with per-entry expiry.

    Expired entries are dropped when loaded and swept from the whole store
    on ``save`` at most once every ``sweep_interval`` seconds.
    """

    def __init__(self, *, sweep_interval: float = 60.0, clock: Callable[[], float] = time.time) -> None:
        """Initialise the per-session storage."""
        self._sessions: dict[str, tuple[float, dict[str, Any]]] = {}
        self._lock = Lock()
        self._clock = clock
        self._sweep_interval = sweep_interval
        self._next_sweep = clock() + sweep_interval

    def load(self, session_id: str) -> dict[str, Any] | None:
        """Return a copy of the session data, or ``None`` when absent or expired."""
        now = self._clock()
        with self._lock:
            entry = self._sessions.get(session_id)
            if entry is None:
                return None
            expires_at, data = entry
            if expires_at <= now:
                del self._sessions[session_id]
                return None
            return copy.deepcopy(data)

    def save(self, session_id: str, data: dict[str, Any], ttl_seconds: int) -> None:
        """Store ``data`` under ``session_id`` for ``ttl_seconds``."""
        now = self._clock()
        with self._lock:
            if now >= self._next_sweep:
                self._sweep(now)
            self._sessions[session_id] = (now + ttl_seconds, copy.deepcopy(data))

    def delete(self, session_id: str) -> None:
        with self._lock:
            self._sessions.pop(session_id, None)

    def _sweep(self, now: float) -> None:
        # caller holds the lock
        expired = [key for key, (expires_at, _) in self._sessions.items() if expires_at <= now]
        for key in expired:
            del self._sessions[key]
        self._next_sweep = now + self._sweep_interval

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)
