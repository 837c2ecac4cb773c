"""In-memory mail transport used in development and tests."""

from __future__ import annotations

import logging
from email.message import EmailMessage
from threading import Lock

logger = logging.getLogger(__name__)


class OutboxTransport:
    """Thread-safe transport that keeps every delivered message in a list."""

    def __init__(self) -> None:
        self._messages: list[EmailMessage] = []
        self._lock = Lock()

    def deliver(self, message: EmailMessage) -> None:
        """Record ``message`` instead of sending it over the network."""
        with self._lock:
            self._messages.append(message)
        logger.info("outbox captured %r for %s", message["Subject"], message["To"])

    @property
    def messages(self) -> list[EmailMessage]:
        with self._lock:
            return list(self._messages)

    def clear(self) -> None:
        with self._lock:
            self._messages.clear()
