"""One-shot flash messages stored in the session."""

from __future__ import annotations

from starlette.requests import Request

FLASH_KEY = "_flashes"


def flash(request: Request, message: str, category: str = "info") -> None:
    """Queue ``message`` under ``category`` for the next rendered page."""
    queued = list(request.session.get(FLASH_KEY, []))
    queued.append([category, message])
    request.session[FLASH_KEY] = queued


def get_flashed_messages(request: Request) -> dict[str, list[str]]:
    """Pop every queued message, grouped by category in arrival order."""
    grouped: dict[str, list[str]] = {}
    if "session" not in request.scope:
        return grouped
    for category, message in request.session.pop(FLASH_KEY, []):
        grouped.setdefault(category, []).append(message)
    return grouped
