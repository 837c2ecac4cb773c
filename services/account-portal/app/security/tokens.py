"""Utilities for issuing password-reset tokens."""

from __future__ import annotations

import secrets

MIN_RESET_TOKEN_BYTES = 16


def generate_reset_token(num_bytes: int = MIN_RESET_TOKEN_BYTES) -> str:
    """Return a hex-encoded random token carrying at least 128 bits of entropy.

    Parameters
    ----------
    num_bytes:
        Number of random bytes drawn from :mod:`secrets`; values below
        ``MIN_RESET_TOKEN_BYTES`` are raised to that floor.

    Returns
    -------
    str
        The token as lowercase hex, twice ``num_bytes`` characters long.
    """

    return secrets.token_hex(max(num_bytes, MIN_RESET_TOKEN_BYTES))


def generate_session_id() -> str:
    """Return an unguessable identifier for a server-side session."""
    return secrets.token_urlsafe(32)
