"""Password recovery: issue, present and redeem single-use reset tokens."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable

from schemas import NotificationKind

from .account import Account
from .errors import AccountNotFound, TokenInvalidOrExpired
from .policy import check_new_password, normalise_email
from ..config import Settings
from ..metrics import record_auth_event
from ..notifications.sender import NotificationSender
from ..repository import AccountRepository
from ..security.passwords import hash_password
from ..security.tokens import generate_reset_token

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PasswordResetWorkflow:
    """Token lifecycle for password recovery.

    A token moves from issued to presented to completed. Unknown and expired
    tokens fail the same way so callers cannot learn which tokens once
    existed. Expiry is evaluated against the clock on every call.
    """

    def __init__(
        self,
        repository: AccountRepository,
        notifier: NotificationSender,
        settings: Settings,
        *,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._repository = repository
        self._notifier = notifier
        self._settings = settings
        self._clock = clock
        self._token_ttl = timedelta(seconds=settings.reset_token_ttl_seconds)

    def request_reset(self, email: str, reset_url: Callable[[str], str]) -> Account:
        """Issue a token for ``email`` and mail the link built by ``reset_url(token)``.

        A second request replaces the token of the first. If the email cannot
        be sent the stored token stays valid.
        """
        token = generate_reset_token(self._settings.reset_token_bytes)
        expires_at = self._clock() + self._token_ttl
        account = self._repository.set_reset_token(normalise_email(email), token, expires_at)
        if account is None:
            record_auth_event("reset_request", "not_found")
            raise AccountNotFound()
        logger.info("reset token issued for account %s", account.account_id)

        self._notifier.send(
            NotificationKind.reset_requested,
            account,
            {"reset_url": reset_url(token), "expires_at": expires_at},
        )
        record_auth_event("reset_request", "success")
        return account

    def validate_token(self, token: str) -> Account:
        """Return the account holding a live ``token`` or raise ``TokenInvalidOrExpired``."""
        account = None
        if token:
            account = self._repository.find_by_reset_token(token, self._clock())
        if account is None:
            raise TokenInvalidOrExpired()
        return account

    def complete_reset(
        self,
        token: str,
        password: str,
        confirm_password: str,
        *,
        on_reset: Callable[[Account], None] | None = None,
    ) -> Account:
        """Apply a new password for a live token, consuming it, then send the confirmation.

        ``on_reset`` runs after the new hash is stored and before the email is
        sent; controllers pass the session binder here.
        """
        check_new_password(
            password,
            confirm_password,
            min_length=self._settings.password_min_length,
        )
        if not token:
            raise TokenInvalidOrExpired()

        account = self._repository.consume_reset_token(
            token,
            self._clock(),
            hash_password(password, rounds=self._settings.bcrypt_rounds),
        )
        if account is None:
            record_auth_event("reset_complete", "invalid_token")
            raise TokenInvalidOrExpired()
        logger.info("password reset completed for account %s", account.account_id)
        if on_reset is not None:
            on_reset(account)

        self._notifier.send(
            NotificationKind.reset_completed,
            account,
            {"changed_at": self._clock()},
        )
        record_auth_event("reset_complete", "success")
        return account
