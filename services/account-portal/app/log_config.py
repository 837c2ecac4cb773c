"""Process-wide logging setup."""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Install a single stream handler on the root logger at ``level``."""
    root = logging.getLogger()
    if not any(getattr(handler, "_portal_handler", False) for handler in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._portal_handler = True  # type: ignore[attr-defined]
        root.addHandler(handler)
    root.setLevel(level)
