"""Redis-backed server-side session storage."""

from __future__ import annotations

import json
import logging
from typing import Any

from redis import Redis

logger = logging.getLogger(__name__)


class RedisSessionStore:
    """Session storage shared by every portal process, expiring entries with Redis TTLs."""

    def __init__(self, client: Redis, *, key_prefix: str = "session") -> None:
        """Initialise the Redis client and the key namespace."""
        self._client = client
        self._key_prefix = key_prefix

    def _key(self, session_id: str) -> str:
        return f"{self._key_prefix}:{session_id}"

    def load(self, session_id: str) -> dict[str, Any] | None:
        """Return the decoded session data, or ``None`` when absent or unreadable."""
        raw = self._client.get(self._key(session_id))
        if raw is None:
            return None
        try:
            data = json.loads(raw)
        except (TypeError, ValueError):
            logger.warning("discarding undecodable session payload for %s", self._key(session_id))
            self._client.delete(self._key(session_id))
            return None
        return data if isinstance(data, dict) else None

    def save(self, session_id: str, data: dict[str, Any], ttl_seconds: int) -> None:
        """Serialise ``data`` as JSON and store it with a TTL of ``ttl_seconds``."""
        self._client.set(self._key(session_id), json.dumps(data), ex=ttl_seconds)

    def delete(self, session_id: str) -> None:
        self._client.delete(self._key(session_id))
