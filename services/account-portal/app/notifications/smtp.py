"""SMTP mail transport."""

from __future__ import annotations

import logging
import smtplib
from email.message import EmailMessage

from ..domain.errors import NotificationSendFailed

logger = logging.getLogger(__name__)


class SmtpTransport:
    """Deliver messages through an SMTP relay, optionally upgrading with STARTTLS."""

    def __init__(
        self,
        host: str,
        port: int,
        *,
        username: str = "",
        password: str = "",
        starttls: bool = True,
        timeout: float = 10.0,
    ) -> None:
        self._host = host
        self._port = port
        self._username = username
        self._password = password
        self._starttls = starttls
        self._timeout = timeout

    def deliver(self, message: EmailMessage) -> None:
        """Send ``message``; any SMTP or socket error becomes ``NotificationSendFailed``."""
        try:
            with smtplib.SMTP(self._host, self._port, timeout=self._timeout) as server:
                if self._starttls:
                    server.starttls()
                if self._username:
                    server.login(self._username, self._password)
                server.send_message(message)
        except (smtplib.SMTPException, OSError) as exc:
            logger.error("SMTP error sending %r to %s: %s", message["Subject"], message["To"], exc)
            raise NotificationSendFailed() from exc
        logger.info("email %r sent to %s", message["Subject"], message["To"])
