"""Transactional email composition for the password-recovery workflow."""

from __future__ import annotations

from datetime import datetime, timezone
from email.message import EmailMessage
from typing import Any, Protocol

from pydantic import ValidationError

from schemas import NotificationKind, PasswordResetCompleted, PasswordResetRequested

from ..domain.account import Account
from ..domain.errors import NotificationSendFailed


class MailTransport(Protocol):
    def deliver(self, message: EmailMessage) -> None: ...


class NotificationSender:
    """Render notification events into plain-text email and hand them to a transport."""

    def __init__(self, transport: MailTransport, *, sender_address: str, app_name: str) -> None:
        self._transport = transport
        self._sender_address = sender_address
        self._app_name = app_name

    def send(
        self,
        kind: NotificationKind,
        account: Account,
        payload: dict[str, Any] | None = None,
    ) -> None:
        """Compose and deliver a ``kind`` notification for ``account``.

        Raises ``NotificationSendFailed`` when the payload does not satisfy the
        event contract or the transport refuses the message. Nothing is retried.
        """
        kind = NotificationKind(kind)
        payload = payload or {}
        try:
            if kind is NotificationKind.reset_requested:
                event = PasswordResetRequested(
                    account_id=account.account_id,
                    email=account.email,
                    **payload,
                )
                message = self._reset_requested(event)
            else:
                event = PasswordResetCompleted(
                    account_id=account.account_id,
                    email=account.email,
                    changed_at=payload.get("changed_at", datetime.now(timezone.utc)),
                )
                message = self._reset_completed(event)
        except ValidationError as exc:
            raise NotificationSendFailed() from exc

        self._transport.deliver(message)

    def _envelope(self, to: str, subject: str, body: str) -> EmailMessage:
        message = EmailMessage()
        message["From"] = self._sender_address
        message["To"] = to
        message["Subject"] = subject
        message.set_content(body)
        return message

    def _reset_requested(self, event: PasswordResetRequested) -> EmailMessage:
        body = (
            "You are receiving this email because you (or someone else) have requested "
            "the reset of the password for your account.\n\n"
            "Please click on the following link, or paste this into your browser "
            "to complete the process:\n\n"
            f"{event.reset_url}\n\n"
            f"The link expires at {event.expires_at:%Y-%m-%d %H:%M} UTC.\n\n"
            "If you did not request this, please ignore this email and your password "
            "will remain unchanged.\n"
        )
        return self._envelope(event.email, f"Reset your password on {self._app_name}", body)

    def _reset_completed(self, event: PasswordResetCompleted) -> EmailMessage:
        body = (
            "Hello,\n\n"
            f"This is a confirmation that the password for your account {event.email} "
            "has just been changed.\n"
        )
        return self._envelope(event.email, "Your password has been changed", body)
