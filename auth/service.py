"""
auth/service.py -- Account registration, login and lookup.

AccountService orchestrates the credential pieces:

  register:      validate shape -> hash -> atomic insert -> issue token
  authenticate:  validate shape -> lookup by username or email -> bcrypt -> issue token
  get_by_id:     id format check -> lookup

Design decisions:
  Uniqueness is left entirely to the store's UNIQUE constraints. There is no
  "does this email exist?" query before the insert -- that check is racy.
  ConstraintViolation from the store becomes Conflict(field) here.

  authenticate() raises the same InvalidCredentials for an unknown account
  and a wrong password, and runs bcrypt in both cases (against DUMMY_HASH
  when the account does not exist) so neither the response nor its timing
  reveals whether the username is registered.

  Every account that leaves this module is a PublicAccount. The stored hash
  never crosses the service boundary.

Layer rule: no imports from api/ or blog/.
"""

from __future__ import annotations

import logging
import re

from auth.models import Account, AuthResult, PublicAccount, redact
from auth.passwords import DUMMY_HASH, hash_password, verify_password
from auth.store import AccountStore
from auth.tokens import TokenIssuer
from auth.validation import validate_login, validate_registration
from core.errors import Conflict, ConstraintViolation, InvalidCredentials, InvalidId, NotFound, ValidationError

logger = logging.getLogger("inkwell.auth")

ACCOUNT_ID_PATTERN = re.compile(r"^[0-9a-f]{24}$")


def check_account_id(account_id: str) -> str:
    """Return account_id unchanged, or raise InvalidId if it is malformed."""
    if not isinstance(account_id, str) or not ACCOUNT_ID_PATTERN.match(account_id):
        raise InvalidId("Invalid account ID format.")
    return account_id


class AccountService:
    def __init__(self, store: AccountStore, issuer: TokenIssuer) -> None:
        self.store = store
        self.issuer = issuer

    def _result(self, account: Account) -> AuthResult:
        token = self.issuer.issue(account.id)
        return AuthResult(account=redact(account), token=token, expires_in=self.issuer.expire_seconds)

    def register(self, username: str, email: str, password: str, confirm_password: str) -> AuthResult:
        """Create an account and return it with a fresh token.

        Raises:
            ValidationError: a field failed its shape check (nothing written).
            Conflict:        username or email already taken.
        """
        errors = validate_registration(username, email, password, confirm_password)
        if errors:
            raise ValidationError(errors)

        candidate = Account(
            username=username.strip(),
            email=email.strip().lower(),
            password_hash=hash_password(password),
        )
        try:
            account = self.store.create_account(candidate)
        except ConstraintViolation as exc:
            logger.info("Registration rejected: %s already taken", exc.field)
            raise Conflict(exc.field) from exc

        logger.info("Account registered: id=%s username=%s", account.id, account.username)
        return self._result(account)

    def authenticate(self, username_or_email: str, password: str) -> AuthResult:
        """Check a username/email + password pair and return a fresh token.

        Raises:
            ValidationError:    either field is blank.
            InvalidCredentials: unknown account or wrong password (same error).
        """
        errors = validate_login(username_or_email, password)
        if errors:
            raise ValidationError(errors)

        account = self.store.get_by_login(username_or_email)
        if account is None:
            # Equalize timing -- do NOT return before running bcrypt.
            verify_password(password, DUMMY_HASH)
            logger.info("Login failed for unknown account")
            raise InvalidCredentials()
        if not verify_password(password, account.password_hash):
            logger.info("Login failed: wrong password for id=%s", account.id)
            raise InvalidCredentials()

        return self._result(account)

    def get_by_id(self, account_id: str) -> PublicAccount:
        """Return the redacted account. Raises InvalidId or NotFound."""
        check_account_id(account_id)
        account = self.store.get_by_id(account_id)
        if account is None:
            raise NotFound("Account not found.")
        return redact(account)
