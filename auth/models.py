"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container). Mirrors blog/models.py --
dataclasses own domain shape; stores and services do the work.

Account is the stored record and carries password_hash. PublicAccount is the
redacted projection and the only account shape that leaves auth/service.py
or auth/dependencies.py. redact() is the one place the hash is dropped.

Layer rule: no imports from api/ or blog/.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class Account:
    """A registered author.

    username keeps the casing the user chose; uniqueness and login lookups use
    its lowercased form. email is stored trimmed and lowercased.
    """

    username: str
    email: str
    password_hash: str
    id: str | None = None  # 24 hex chars, set by the store on insert
    created_at: str | None = None


@dataclass(frozen=True)
class PublicAccount:
    id: str
    username: str
    email: str
    created_at: str


@dataclass(frozen=True)
class AuthResult:
    """Outcome of a successful registration or login."""

    account: PublicAccount
    token: str
    expires_in: int


def redact(account: Account) -> PublicAccount:
    """Project a stored Account onto its outward-facing, hash-free shape."""
    return PublicAccount(
        id=account.id or "",
        username=account.username,
        email=account.email,
        created_at=account.created_at or "",
    )
