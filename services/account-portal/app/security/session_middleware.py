"""ASGI middleware loading and persisting server-side sessions."""

from __future__ import annotations

import logging

from itsdangerous import BadSignature, Signer
from starlette.concurrency import run_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from .session_store import SessionStore
from .sessions import ServerSession
from .tokens import generate_session_id

logger = logging.getLogger(__name__)


class ServerSessionMiddleware(BaseHTTPMiddleware):
    """Expose ``request.session`` backed by a :class:`SessionStore`.

    The cookie only carries the signed session id. Data is written back after
    the endpoint runs; a session flagged for rotation is moved to a fresh id
    and the old entry is deleted.
    """

    def __init__(
        self,
        app: ASGIApp,
        *,
        store: SessionStore,
        secret_key: str,
        cookie_name: str = "portal_session",
        max_age: int = 7200,
        same_site: str = "lax",
        https_only: bool = False,
    ) -> None:
        super().__init__(app)
        self._store = store
        self._signer = Signer(secret_key, salt="account-portal.session")
        self._cookie_name = cookie_name
        self._max_age = max_age
        self._same_site = same_site
        self._https_only = https_only

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        session_id = self._read_cookie(request)
        data = None
        if session_id:
            data = await run_in_threadpool(self._store.load, session_id)
            if data is None:
                session_id = None

        session = ServerSession(data or {})
        request.scope["session"] = session

        response = await call_next(request)
        presented = self._cookie_name in request.cookies
        await self._commit(session_id, session, response, presented=presented)
        return response

    def _read_cookie(self, request: Request) -> str | None:
        raw = request.cookies.get(self._cookie_name)
        if not raw:
            return None
        try:
            return self._signer.unsign(raw).decode("utf-8")
        except BadSignature:
            logger.warning("rejected session cookie with a bad signature")
            return None

    async def _commit(
        self,
        session_id: str | None,
        session: ServerSession,
        response: Response,
        *,
        presented: bool = False,
    ) -> None:
        if session.rotate and session_id:
            await run_in_threadpool(self._store.delete, session_id)
            session_id = None

        if not session:
            if session_id:
                await run_in_threadpool(self._store.delete, session_id)
            # also clears cookies whose id is unknown, expired or badly signed
            if presented:
                response.delete_cookie(self._cookie_name, path="/")
            return

        if session_id is None:
            session_id = generate_session_id()
        # saved on every request so the expiry window slides
        await run_in_threadpool(self._store.save, session_id, dict(session), self._max_age)
        response.set_cookie(
            self._cookie_name,
            self._signer.sign(session_id).decode("utf-8"),
            max_age=self._max_age,
            path="/",
            httponly=True,
            samesite=self._same_site,
            secure=self._https_only,
        )
