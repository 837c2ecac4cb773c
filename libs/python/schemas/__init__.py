"""Shared schema exports."""

from .account import Account, AccountProfile
from .notification import NotificationKind, PasswordResetCompleted, PasswordResetRequested

__all__ = [
    "Account",
    "AccountProfile",
    "NotificationKind",
    "PasswordResetRequested",
    "PasswordResetCompleted",
]
