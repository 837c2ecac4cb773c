"""Account service covering credential checks and registration."""

from __future__ import annotations

import logging

from .account import Account
from .contracts import NewAccountRecord, RegistrationInput
from .errors import AccountNotFound, EmailTaken, InvalidCredentials
from .policy import check_email, check_new_password, normalise_email
from ..config import Settings
from ..metrics import record_auth_event
from ..repository import AccountRepository
from ..security.passwords import hash_password, verify_password

logger = logging.getLogger(__name__)


class AccountService:
    """Account workflows backed by Postgres storage."""

    def __init__(self, repository: AccountRepository, settings: Settings) -> None:
        """Store dependencies used to orchestrate persistence and password hashing."""
        self._repository = repository
        self._settings = settings

    def get_account(self, account_id: str) -> Account | None:
        """Retrieve an account by identifier, used to resolve the session's identity."""
        return self._repository.get_account(account_id)

    def authenticate(self, email: str, password: str) -> Account:
        """Return the account whose email and password match.

        Raises ``AccountNotFound`` when the lowercased email is unknown and
        ``InvalidCredentials`` when the password does not match the hash.
        """
        account = self._repository.find_by_email(normalise_email(email))
        if account is None:
            record_auth_event("login", "not_found")
            raise AccountNotFound(f"Email {email} not found.")
        if not verify_password(password, account.password_hash):
            record_auth_event("login", "invalid_credentials")
            raise InvalidCredentials()
        record_auth_event("login", "success")
        logger.info("account %s authenticated", account.account_id)
        return account

    def register(self, payload: RegistrationInput) -> Account:
        """Validate signup input and persist a new account with a hashed password."""
        check_new_password(
            payload.password,
            payload.confirm_password,
            min_length=self._settings.password_min_length,
        )
        email = check_email(payload.email)

        if self._repository.find_by_email(email) is not None:
            record_auth_event("signup", "email_taken")
            raise EmailTaken()

        # a concurrent insert still trips the UNIQUE constraint and surfaces as EmailTaken
        account = self._repository.create_account(
            NewAccountRecord(
                email=email,
                password_hash=hash_password(payload.password, rounds=self._settings.bcrypt_rounds),
                name=(payload.name or "").strip(),
                surname=(payload.surname or "").strip(),
            )
        )
        record_auth_event("signup", "success")
        logger.info("account %s registered", account.account_id)
        return account
