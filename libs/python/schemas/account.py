"""Account-related DTOs shared across services."""

from __future__ import annotations

from datetime import datetime
from pydantic import BaseModel, EmailStr


class AccountProfile(BaseModel):
    name: str = ""
    surname: str = ""


class Account(BaseModel):
    account_id: str
    email: EmailStr
    profile: AccountProfile = AccountProfile()
    created_at: datetime | None = None
