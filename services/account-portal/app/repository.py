"""Database repository for portal accounts."""

from __future__ import annotations

import logging
import uuid
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterator

import psycopg
from psycopg import errors as pg_errors
from psycopg.rows import tuple_row
from psycopg_pool import ConnectionPool

from .domain.account import Account
from .domain.contracts import NewAccountRecord
from .domain.errors import EmailTaken, PersistenceFailure

logger = logging.getLogger(__name__)

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS accounts (
    account_id TEXT PRIMARY KEY,
    email TEXT NOT NULL UNIQUE,
    password_hash TEXT NOT NULL,
    name TEXT NOT NULL DEFAULT '',
    surname TEXT NOT NULL DEFAULT '',
    password_reset_token TEXT,
    password_reset_expires TIMESTAMPTZ,
    created_at TIMESTAMPTZ NOT NULL,
    updated_at TIMESTAMPTZ NOT NULL
);
CREATE INDEX IF NOT EXISTS accounts_password_reset_token_idx
    ON accounts (password_reset_token)
    WHERE password_reset_token IS NOT NULL;
"""

_ACCOUNT_COLUMNS = """
    account_id, email, password_hash, name, surname,
    created_at, password_reset_token, password_reset_expires
"""


@dataclass(slots=True)
class AccountRecord:
    """Row projection used when mapping database tuples to domain aggregates."""

    account_id: str
    email: str
    password_hash: str
    name: str
    surname: str
    created_at: datetime
    password_reset_token: str | None
    password_reset_expires: datetime | None

    def to_domain(self) -> Account:
        return Account(
            account_id=self.account_id,
            email=self.email,
            password_hash=self.password_hash,
            name=self.name,
            surname=self.surname,
            created_at=self.created_at,
            password_reset_token=self.password_reset_token,
            password_reset_expires=self.password_reset_expires,
        )


class AccountRepository:
    """Postgres-backed account persistence.

    Every statement that matters for the reset workflow is a single
    conditional ``UPDATE ... RETURNING`` so lookups and writes cannot
    interleave with a concurrent request on the same row.
    """

    def __init__(self, pool: ConnectionPool) -> None:
        """Store the connection pool used for all database interactions."""
        self._pool = pool

    @contextmanager
    def _connection(self) -> Iterator[psycopg.Connection]:
        try:
            with self._pool.connection() as conn:
                yield conn
        except EmailTaken:
            raise
        except psycopg.Error as exc:
            logger.error("account store operation failed: %s", exc)
            raise PersistenceFailure() from exc

    def ensure_schema(self) -> None:
        """Create the accounts table and its indexes when they are missing."""
        with self._connection() as conn:
            with conn.cursor() as cur:
                cur.execute(SCHEMA_SQL)
            conn.commit()
        logger.info("accounts schema ready")

    def create_account(self, payload: NewAccountRecord) -> Account:
        """Insert a new account row, surfacing the email UNIQUE constraint as ``EmailTaken``."""
        account_id = str(uuid.uuid4())
        now = datetime.now(timezone.utc)
        with self._connection() as conn:
            with conn.cursor(row_factory=tuple_row) as cur:
                try:
                    cur.execute(
                        f"""
                        INSERT INTO accounts (account_id, email, password_hash, name, surname, created_at, updated_at)
                        VALUES (%s, %s, %s, %s, %s, %s, %s)
                        RETURNING {_ACCOUNT_COLUMNS}
                        """,
                        (
                            account_id,
                            payload.email,
                            payload.password_hash,
                            payload.name,
                            payload.surname,
                            now,
                            now,
                        ),
                    )
                except pg_errors.UniqueViolation as exc:
                    conn.rollback()
                    raise EmailTaken() from exc
                row = cur.fetchone()
            conn.commit()
        return self._map_record(row)

    def get_account(self, account_id: str) -> Account | None:
        """Fetch an account by identifier or return ``None``."""
        return self._fetch_one(
            f"SELECT {_ACCOUNT_COLUMNS} FROM accounts WHERE account_id = %s",
            (account_id,),
        )

    def find_by_email(self, email: str) -> Account | None:
        """Fetch the account registered under the (already lowercased) email."""
        return self._fetch_one(
            f"SELECT {_ACCOUNT_COLUMNS} FROM accounts WHERE email = %s",
            (email,),
        )

    def set_reset_token(self, email: str, token: str, expires_at: datetime) -> Account | None:
        """Store a reset token on the account owning ``email``; ``None`` when no account matches."""
        return self._update_one(
            f"""
            UPDATE accounts
            SET password_reset_token = %s, password_reset_expires = %s, updated_at = NOW()
            WHERE email = %s
            RETURNING {_ACCOUNT_COLUMNS}
            """,
            (token, expires_at, email),
        )

    def find_by_reset_token(self, token: str, now: datetime) -> Account | None:
        """Return the account holding ``token`` if it has not expired at ``now``."""
        return self._fetch_one(
            f"""
            SELECT {_ACCOUNT_COLUMNS}
            FROM accounts
            WHERE password_reset_token = %s AND password_reset_expires > %s
            """,
            (token, now),
        )

    def consume_reset_token(self, token: str, now: datetime, password_hash: str) -> Account | None:
        """Atomically swap the password hash and clear a live reset token.

        Returns the updated account, or ``None`` when the token is unknown,
        expired or was consumed by a concurrent request.
        """
        return self._update_one(
            f"""
            UPDATE accounts
            SET password_hash = %s,
                password_reset_token = NULL,
                password_reset_expires = NULL,
                updated_at = NOW()
            WHERE password_reset_token = %s AND password_reset_expires > %s
            RETURNING {_ACCOUNT_COLUMNS}
            """,
            (password_hash, token, now),
        )

    def _fetch_one(self, query: str, params: tuple) -> Account | None:
        with self._connection() as conn:
            with conn.cursor(row_factory=tuple_row) as cur:
                cur.execute(query, params)
                row = cur.fetchone()
        if not row:
            return None
        return self._map_record(row)

    def _update_one(self, query: str, params: tuple) -> Account | None:
        with self._connection() as conn:
            with conn.cursor(row_factory=tuple_row) as cur:
                cur.execute(query, params)
                row = cur.fetchone()
            conn.commit()
        if not row:
            return None
        return self._map_record(row)

    def _map_record(self, row: tuple) -> Account:
        """Convert a raw database tuple into the domain ``Account`` dataclass."""
        return AccountRecord(*row).to_domain()
