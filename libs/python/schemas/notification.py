"""Transactional email event contracts."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from pydantic import BaseModel, EmailStr


class NotificationKind(str, Enum):
    reset_requested = "resetRequested"
    reset_completed = "resetCompleted"


class PasswordResetRequested(BaseModel):
    account_id: str
    email: EmailStr
    reset_url: str
    expires_at: datetime
    kind: NotificationKind = NotificationKind.reset_requested


class PasswordResetCompleted(BaseModel):
    account_id: str
    email: EmailStr
    changed_at: datetime
    kind: NotificationKind = NotificationKind.reset_completed