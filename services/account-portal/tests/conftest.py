from __future__ import annotations

import re
import uuid
from dataclasses import replace
from datetime import datetime, timedelta, timezone

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.api import routes
from app.api.errors import register_error_handlers
from app.config import Settings
from app.domain.account import Account
from app.domain.contracts import NewAccountRecord, RegistrationInput
from app.domain.errors import EmailTaken
from app.domain.password_reset import PasswordResetWorkflow
from app.domain.service import AccountService
from app.main import build_services
from app.notifications.outbox import OutboxTransport
from app.notifications.sender import NotificationSender
from app.security.session_middleware import ServerSessionMiddleware
from app.security.session_store import MemorySessionStore

RESET_URL_RE = re.compile(r"https?://\S+/reset/([0-9a-f]+)")


class FakeRepository:
    """In-memory repository mimicking the Postgres-backed behaviors."""

    def __init__(self) -> None:
        self._accounts: dict[str, Account] = {}

    def ensure_schema(self) -> None:
        pass

    def create_account(self, payload: NewAccountRecord) -> Account:
        # mirrors the UNIQUE constraint on accounts.email
        if any(existing.email == payload.email for existing in self._accounts.values()):
            raise EmailTaken()
        account = Account(
            account_id=str(uuid.uuid4()),
            email=payload.email,
            password_hash=payload.password_hash,
            name=payload.name,
            surname=payload.surname,
            created_at=datetime.now(timezone.utc),
        )
        self._accounts[account.account_id] = account
        return replace(account)

    def get_account(self, account_id: str):
        account = self._accounts.get(account_id)
        return replace(account) if account else None

    def find_by_email(self, email: str):
        for account in self._accounts.values():
            if account.email == email:
                return replace(account)
        return None

    def set_reset_token(self, email: str, token: str, expires_at: datetime):
        for account in self._accounts.values():
            if account.email == email:
                account.password_reset_token = token
                account.password_reset_expires = expires_at
                return replace(account)
        return None

    def _live(self, token: str, now: datetime):
        for account in self._accounts.values():
            if (
                account.password_reset_token == token
                and account.password_reset_expires is not None
                and account.password_reset_expires > now
            ):
                return account
        return None

    def find_by_reset_token(self, token: str, now: datetime):
        account = self._live(token, now)
        return replace(account) if account else None

    def consume_reset_token(self, token: str, now: datetime, password_hash: str):
        account = self._live(token, now)
        if account is None:
            return None
        account.password_hash = password_hash
        account.password_reset_token = None
        account.password_reset_expires = None
        return replace(account)

    def raw(self, account_id: str) -> Account:
        return self._accounts[account_id]


class FakeClock:
    """Controllable UTC clock."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


def extract_reset_token(outbox: OutboxTransport) -> str:
    for message in reversed(outbox.messages):
        match = RESET_URL_RE.search(message.get_content())
        if match:
            return match.group(1)
    raise AssertionError("Expected a reset link in the outbox")


@pytest.fixture
def settings() -> Settings:
    return Settings(bcrypt_rounds=4, mail_sender="portal@example.com", public_base_url="")


@pytest.fixture
def repository() -> FakeRepository:
    return FakeRepository()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def outbox() -> OutboxTransport:
    return OutboxTransport()


@pytest.fixture
def account_service(repository, settings) -> AccountService:
    return AccountService(repository, settings)


@pytest.fixture
def workflow(repository, outbox, settings, clock) -> PasswordResetWorkflow:
    notifier = NotificationSender(outbox, sender_address=settings.mail_sender, app_name=settings.app_name)
    return PasswordResetWorkflow(repository, notifier, settings, clock=clock)


@pytest.fixture
def registered(account_service) -> Account:
    return account_service.register(
        RegistrationInput(
            email="User@Example.com",
            password="secret1",
            confirm_password="secret1",
            name="Ada",
            surname="Lovelace",
        )
    )


@pytest.fixture
def session_store() -> MemorySessionStore:
    return MemorySessionStore()


@pytest.fixture
def portal(repository, outbox, settings, clock, session_store):
    """Provide a test client for the HTML routes with isolated state."""
    app = FastAPI()
    app.add_middleware(
        ServerSessionMiddleware,
        store=session_store,
        secret_key="test-secret",
        cookie_name=settings.session_cookie_name,
    )
    register_error_handlers(app)
    app.include_router(routes.router)
    build_services(app, repository, outbox, settings, clock=clock)

    with TestClient(app) as client:
        yield client
