"""Bind and release the authenticated identity carried by a session."""

from __future__ import annotations

from typing import Any, MutableMapping

from ..domain.account import Account

ACCOUNT_KEY = "account_id"


class ServerSession(dict):
    """Session data for one request, with a flag asking the middleware to rotate its id."""

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.rotate = False

    def regenerate(self) -> None:
        self.rotate = True


def _regenerate(session: MutableMapping[str, Any]) -> None:
    if isinstance(session, ServerSession):
        session.regenerate()


def bind_session(session: MutableMapping[str, Any], account: Account) -> None:
    """Mark the session as authenticated for ``account`` and rotate its identifier."""
    session[ACCOUNT_KEY] = account.account_id
    _regenerate(session)


def clear_session(session: MutableMapping[str, Any]) -> None:
    """Drop the authenticated identity and rotate the identifier; flashes survive."""
    session.pop(ACCOUNT_KEY, None)
    _regenerate(session)


def session_account_id(session: MutableMapping[str, Any]) -> str | None:
    value = session.get(ACCOUNT_KEY)
    return str(value) if value else None
