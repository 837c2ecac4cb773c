from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(slots=True)
class Account:
    """Aggregate root for a portal user and its password-recovery state."""

    account_id: str
    email: str
    password_hash: str = field(repr=False)
    name: str = ""
    surname: str = ""
    created_at: datetime | None = None
    password_reset_token: str | None = field(default=None, repr=False)
    password_reset_expires: datetime | None = None

    @property
    def display_name(self) -> str:
        full = f"{self.name} {self.surname}".strip()
        return full or self.email
