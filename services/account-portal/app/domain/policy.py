"""Input rules shared by signup and password reset."""

from __future__ import annotations

from email_validator import EmailNotValidError, validate_email

from .errors import InvalidEmail, PasswordMismatch, PasswordTooShort


def normalise_email(email: str) -> str:
    """Lowercase and trim an email for lookups; the stored form is always lowercase."""
    return (email or "").strip().lower()


def check_email(email: str) -> str:
    """Return the normalised email or raise ``InvalidEmail`` when it is not an address."""
    candidate = normalise_email(email)
    if not candidate:
        raise InvalidEmail()
    try:
        validate_email(candidate, check_deliverability=False)
    except EmailNotValidError as exc:
        raise InvalidEmail() from exc
    return candidate


def check_new_password(password: str, confirm_password: str, *, min_length: int) -> None:
    """Apply the length rule first, then the confirmation rule."""
    if len(password or "") < min_length:
        raise PasswordTooShort(min_length)
    if password != confirm_password:
        raise PasswordMismatch()
