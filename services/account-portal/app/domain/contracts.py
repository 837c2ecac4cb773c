"""Domain-level request contracts shared by multiple layers."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(slots=True)
class RegistrationInput:
    """Raw signup form values handed to the account registrar."""

    email: str
    password: str = field(repr=False)
    confirm_password: str = field(repr=False)
    name: str = ""
    surname: str = ""


@dataclass(slots=True)
class NewAccountRecord:
    """Validated, hashed values the repository persists for a new account."""

    email: str
    password_hash: str = field(repr=False)
    name: str = ""
    surname: str = ""
