"""FastAPI application wiring for the account portal."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Callable

from fastapi import FastAPI, Request, Response
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.staticfiles import StaticFiles
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from psycopg_pool import ConnectionPool
import redis

from .api.errors import register_error_handlers
from .api.routes import router
from .config import Settings, get_settings
from .domain.password_reset import PasswordResetWorkflow, utcnow
from .domain.service import AccountService
from .log_config import configure_logging
from .notifications.outbox import OutboxTransport
from .notifications.sender import MailTransport, NotificationSender
from .notifications.smtp import SmtpTransport
from .repository import AccountRepository
from .security.redis_session_store import RedisSessionStore
from .security.session_middleware import ServerSessionMiddleware
from .security.session_store import MemorySessionStore, SessionStore
from .web.templating import STATIC_DIR

settings = get_settings()
configure_logging(settings.log_level)

logger = logging.getLogger(__name__)


def _build_session_store(settings: Settings) -> SessionStore:
    """Instantiate the configured session backend, preferring Redis when available."""
    if settings.session_backend == "redis" and settings.redis_url:
        try:
            client = redis.from_url(settings.redis_url)
            # ensure connectivity early to fail fast and fall back
            client.ping()
            logger.info("session store configured for redis backend at %s", settings.redis_url)
            return RedisSessionStore(client)
        except (redis.RedisError, ValueError) as exc:
            logger.warning("redis session store unavailable, falling back to in-memory: %s", exc)

    logger.info("session store using in-memory backend")
    return MemorySessionStore()


def _build_mail_transport(settings: Settings) -> MailTransport:
    if settings.mail_backend == "smtp":
        logger.info("mail transport using smtp relay %s:%s", settings.smtp_host, settings.smtp_port)
        return SmtpTransport(
            settings.smtp_host,
            settings.smtp_port,
            username=settings.smtp_username,
            password=settings.smtp_password,
            starttls=settings.smtp_starttls,
        )
    logger.info("mail transport using in-memory outbox")
    return OutboxTransport()


def build_services(
    app: FastAPI,
    repository: AccountRepository,
    transport: MailTransport,
    settings: Settings,
    *,
    clock: Callable[[], datetime] = utcnow,
) -> None:
    """Attach the account workflows to ``app.state`` for the route dependencies."""
    notifier = NotificationSender(
        transport,
        sender_address=settings.mail_sender,
        app_name=settings.app_name,
    )
    app.state.settings = settings
    app.state.mail_transport = transport
    app.state.account_service = AccountService(repository, settings)
    app.state.reset_workflow = PasswordResetWorkflow(repository, notifier, settings, clock=clock)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialise shared resources (Postgres pool, services) for the app lifecycle."""
    pool = ConnectionPool(settings.database_url, open=False)
    pool.open()
    app.state.pool = pool
    repository = AccountRepository(pool)
    repository.ensure_schema()
    build_services(app, repository, _build_mail_transport(settings), settings)
    try:
        yield
    finally:
        pool.close()
        pool.wait_close()


app = FastAPI(title=settings.app_name, version=settings.version, lifespan=lifespan)

app.add_middleware(
    ServerSessionMiddleware,
    store=_build_session_store(settings),
    secret_key=settings.session_secret,
    cookie_name=settings.session_cookie_name,
    max_age=settings.session_ttl_seconds,
    https_only=settings.session_cookie_secure,
)
app.add_middleware(GZipMiddleware, minimum_size=500)


@app.middleware("http")
async def security_headers(request: Request, call_next):
    response = await call_next(request)
    response.headers.setdefault("X-Frame-Options", "SAMEORIGIN")
    response.headers.setdefault("X-XSS-Protection", "1; mode=block")
    return response


register_error_handlers(app)


@app.get("/healthz", tags=["health"])
def healthz() -> dict[str, str]:
    """Return a minimal readiness indicator used by orchestration systems."""
    return {"status": "ok"}


@app.get("/metrics")
def metrics() -> Response:
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


app.include_router(router)
app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")


def run() -> None:
    """Serve the portal with uvicorn on the configured host and port."""
    import uvicorn

    uvicorn.run(app, host=settings.http_host, port=settings.http_port)
