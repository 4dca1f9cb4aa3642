"""
auth/store.py -- SQLAlchemy Core persistence layer for accounts.

Pattern: Repository + Data Mapper (same as blog/store.py).
AccountStore is the repository; _row_to_account is the mapper.
Service and dependency code never touches SQL directly.

Uniqueness:
  username and email uniqueness is enforced by named UNIQUE constraints, not
  by a read-before-write check. Two concurrent registrations for the same
  email both reach INSERT; the database lets exactly one through and the
  other gets an IntegrityError, which create_account() translates into
  ConstraintViolation("email"). The constraint names carry the field name so
  the translation works for SQLite ("UNIQUE constraint failed: accounts.email")
  and PostgreSQL ('violates unique constraint "uq_accounts_email"') alike.

  username_key holds the lowercased username so "Alice" and "alice" collide
  and login lookups are case-insensitive. email is lowercased before insert.

Failures:
  OperationalError (database unreachable, locked, missing table) becomes
  StoreUnavailable with the driver error chained for the server log.

Security: all queries use bound parameters. No f-strings in SQL.

Layer rule: no imports from api/ or blog/.
"""

from __future__ import annotations

import logging
import secrets
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime, timezone

from sqlalchemy import Column, MetaData, String, Table, Text, UniqueConstraint, create_engine, event, select, text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import IntegrityError, OperationalError

from auth.models import Account
from core.errors import ConstraintViolation, StoreUnavailable

logger = logging.getLogger("inkwell.auth")

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

_accounts = Table(
    "accounts",
    _metadata,
    Column("id", String(24), primary_key=True),
    Column("username", String(30), nullable=False),
    Column("username_key", String(30), nullable=False),  # lower(username)
    Column("email", String(255), nullable=False),  # stored lowercased
    Column("password_hash", Text, nullable=False),
    Column("created_at", String(32), nullable=False),
    UniqueConstraint("username_key", name="uq_accounts_username"),
    UniqueConstraint("email", name="uq_accounts_email"),
)

# Markers each driver puts in its unique-violation message: SQLite names the
# column ("accounts.email"), PostgreSQL names the constraint.
_UNIQUE_MARKERS = {
    "email": ("uq_accounts_email", "accounts.email"),
    "username": ("uq_accounts_username", "accounts.username_key"),
}


# ---------------------------------------------------------------------------
# WAL mode
# ---------------------------------------------------------------------------


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode so readers are not blocked during writes.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool.
    """
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def new_id() -> str:
    """Return a fresh opaque identifier: 24 lowercase hex characters."""
    return secrets.token_hex(12)


def _violated_field(exc: IntegrityError) -> str | None:
    message = str(exc.orig).lower()
    for field, markers in _UNIQUE_MARKERS.items():
        if any(marker in message for marker in markers):
            return field
    return None


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class AccountStore:
    """Repository for Account entities.

    Usage:
        store = AccountStore("sqlite:///inkwell.db")
        account = store.create_account(Account(username="alice", email="a@x.com", password_hash=digest))
        found = store.get_by_login("ALICE")
        store.close()
    """

    def __init__(self, db_url: str) -> None:
        connect_args: dict = {}
        if db_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        self.engine: Engine = create_engine(db_url, connect_args=connect_args)
        if db_url.startswith("sqlite"):
            event.listen(self.engine, "connect", _set_wal_mode)
        _metadata.create_all(self.engine)

    @contextmanager
    def _connect(self) -> Iterator[Connection]:
        try:
            with self.engine.connect() as conn:
                yield conn
        except OperationalError as exc:
            logger.error("Account store unavailable: %s", exc)
            raise StoreUnavailable() from exc

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create_account(self, account: Account) -> Account:
        """Insert a new account and return it with id and created_at filled in.

        Raises ConstraintViolation("username" | "email") if the unique
        constraint rejects the insert. Any other integrity failure propagates.
        """
        account_id = new_id()
        created_at = _now_iso()
        email = account.email.strip().lower()
        with self._connect() as conn:
            try:
                conn.execute(
                    _accounts.insert().values(
                        id=account_id,
                        username=account.username,
                        username_key=account.username.lower(),
                        email=email,
                        password_hash=account.password_hash,
                        created_at=created_at,
                    )
                )
                conn.commit()
            except IntegrityError as exc:
                conn.rollback()
                field = _violated_field(exc)
                if field is None:
                    raise
                raise ConstraintViolation(field) from exc
        return Account(
            id=account_id,
            username=account.username,
            email=email,
            password_hash=account.password_hash,
            created_at=created_at,
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_by_id(self, account_id: str) -> Account | None:
        """Look up an account by primary key. Returns None if not found."""
        with self._connect() as conn:
            row = conn.execute(_accounts.select().where(_accounts.c.id == account_id)).fetchone()
        return _row_to_account(row) if row is not None else None

    def get_by_login(self, identifier: str) -> Account | None:
        """Look up an account by username or email, case-insensitively.

        An identifier containing "@" is matched against email only; usernames
        cannot contain "@", so one identifier never matches two accounts.
        """
        key = identifier.strip().lower()
        column = _accounts.c.email if "@" in key else _accounts.c.username_key
        with self._connect() as conn:
            row = conn.execute(_accounts.select().where(column == key)).fetchone()
        return _row_to_account(row) if row is not None else None

    def get_usernames(self, account_ids: list[str]) -> dict[str, str]:
        """Return {account_id: username} for the ids that exist."""
        if not account_ids:
            return {}
        with self._connect() as conn:
            rows = conn.execute(
                select(_accounts.c.id, _accounts.c.username).where(_accounts.c.id.in_(sorted(set(account_ids))))
            ).fetchall()
        return {row.id: row.username for row in rows}

    def ping(self) -> bool:
        """Return True if the database answers a trivial query."""
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except OperationalError:
            return False
        return True

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mapper (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_account(row) -> Account:
    return Account(
        id=row.id,
        username=row.username,
        email=row.email,
        password_hash=row.password_hash,
        created_at=row.created_at,
    )
