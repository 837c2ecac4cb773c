"""Failure taxonomy raised by the account workflows.

Controllers turn validation, authentication, not-found and conflict failures
into a flash message plus a redirect. Transport and persistence failures are
left to the application's error handlers.
"""

from __future__ import annotations


class AccountError(Exception):
    """Base class for every failure raised by the account domain."""

    default_message = "Something went wrong."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationFailure(AccountError):
    """Input had the wrong shape, length or did not match its confirmation."""


class PasswordTooShort(ValidationFailure):
    def __init__(self, min_length: int) -> None:
        self.min_length = min_length
        super().__init__(f"Password must be at least {min_length} characters long")


class PasswordMismatch(ValidationFailure):
    default_message = "Passwords do not match"


class InvalidEmail(ValidationFailure):
    default_message = "Please enter a valid email address."


class AuthenticationFailure(AccountError):
    """Credentials were presented but did not check out."""


class InvalidCredentials(AuthenticationFailure):
    default_message = "Invalid email or password."


class NotFoundFailure(AccountError):
    """No account or token matched the lookup."""


class AccountNotFound(NotFoundFailure):
    default_message = "Account with that email address does not exist."


class TokenInvalidOrExpired(NotFoundFailure):
    default_message = "Password reset token is invalid or has expired."


class ConflictFailure(AccountError):
    """The write would violate a uniqueness rule."""


class EmailTaken(ConflictFailure):
    default_message = "Account with that email address already exists."


class TransportFailure(AccountError):
    """An outbound notification could not be handed to the mail transport."""


class NotificationSendFailed(TransportFailure):
    default_message = "The notification email could not be sent."


class PersistenceFailure(AccountError):
    """The account store was unavailable or rejected the write."""

    default_message = "The account store is unavailable."


USER_FACING_FAILURES = (
    ValidationFailure,
    AuthenticationFailure,
    NotFoundFailure,
    ConflictFailure,
)
