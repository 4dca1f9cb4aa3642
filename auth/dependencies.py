"""
auth/dependencies.py -- FastAPI Depends() helpers for authentication (the Auth Gate).

Only one credential source is accepted: the Authorization: Bearer <token>
header. Per request:

  no header / not "Bearer ..."      -> 401
  token fails verification          -> 401  (bad signature, malformed, expired)
  token ok, account no longer exists -> 401
  token ok, account found           -> PublicAccount attached to
                                       request.state.account and returned

All 401s are the same InvalidToken error, so a caller cannot tell a missing
token from an expired one.

try_get_current_account() is the soft variant (returns None on failure).
get_current_account() wraps it and raises InvalidToken if unauthenticated.

Layer rule: no imports from api/ or blog/.
  auth/dependencies.py may import from fastapi (for Request) because this
  module is part of the FastAPI dependency injection system.
"""

from __future__ import annotations

from fastapi import Request

from auth.models import PublicAccount, redact
from auth.store import AccountStore
from auth.tokens import TokenIssuer
from core.errors import InvalidToken

_BEARER_PREFIX = "bearer "


def _bearer_token(request: Request) -> str | None:
    header = request.headers.get("Authorization", "")
    if header[: len(_BEARER_PREFIX)].lower() != _BEARER_PREFIX:
        return None
    token = header[len(_BEARER_PREFIX) :].strip()
    return token or None


def try_get_current_account(request: Request) -> PublicAccount | None:
    """Authenticate the request via its Bearer header.

    Returns the redacted account on success, None on any failure.
    Never raises InvalidToken -- callers that need a hard 401 should use
    get_current_account().
    """
    token = _bearer_token(request)
    if token is None:
        return None

    issuer: TokenIssuer = request.app.state.token_issuer
    try:
        claims = issuer.verify(token)
    except InvalidToken:
        return None

    store: AccountStore = request.app.state.account_store
    account = store.get_by_id(claims.subject)
    if account is None:
        return None

    public = redact(account)
    request.state.account = public
    return public


def get_current_account(request: Request) -> PublicAccount:
    """Require authentication. Raises InvalidToken (401) if not authenticated.

    Use as a FastAPI dependency:
        @router.get("/protected")
        def route(account: PublicAccount = Depends(get_current_account)): ...
    """
    account = try_get_current_account(request)
    if account is None:
        raise InvalidToken()
    return account
