"""Exception handlers rendering the portal's generic error page."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status

from ..domain.errors import PersistenceFailure, TransportFailure
from ..web.templating import templates

logger = logging.getLogger(__name__)


def _error_page(request: Request, message: str | None = None):
    return templates.TemplateResponse(
        request,
        "error.html",
        {"title": "Error", "message": message},
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(PersistenceFailure)
    async def persistence_failure_handler(request: Request, exc: PersistenceFailure):
        logger.error("persistence failure on %s %s: %s", request.method, request.url.path, exc.message)
        return _error_page(request)

    @app.exception_handler(TransportFailure)
    async def transport_failure_handler(request: Request, exc: TransportFailure):
        logger.error("notification failure on %s %s: %s", request.method, request.url.path, exc.message)
        return _error_page(request, exc.message)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
        return _error_page(request)
