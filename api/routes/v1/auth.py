"""
api/routes/v1/auth.py -- Registration, login and session REST endpoints.

Routes:
  POST /api/v1/auth/register   -- create account; 201 {account, token}
  POST /api/v1/auth/login      -- username or email + password; 200 {account, token}
  POST /api/v1/auth/logout     -- acknowledges logout (requires auth)
  GET  /api/v1/auth/verify     -- 200 if the bearer token is still good
  GET  /api/v1/auth/me         -- current account (requires auth)

Security:
  register and login are rate-limited per IP (Settings.*_rate_limit).
  AccountService.authenticate() provides timing equalization -- use it, never
  inline a lookup + verify_password() here.
  Cache-Control: no-store on every response that carries a token.

Handlers that hash or verify passwords are plain def so FastAPI runs them in
its threadpool; bcrypt never blocks the event loop.

Logout is client-side: tokens are not revocable, so the server records
nothing and the token stays valid until it expires.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request, Response

from api.limiter import limiter
from api.models import AccountResponse, AuthResponse, LoginRequest, MessageResponse, RegisterRequest, VerifyResponse
from auth.dependencies import get_current_account
from auth.models import PublicAccount
from auth.service import AccountService
from core.config import get_settings

# Auth policy:
# - POST /api/v1/auth/register: public
# - POST /api/v1/auth/login:    public
# - POST /api/v1/auth/logout:   requires auth (get_current_account)
# - GET  /api/v1/auth/verify:   requires auth (get_current_account)
# - GET  /api/v1/auth/me:       requires auth (get_current_account)
router = APIRouter()


def _register_limit() -> str:
    return get_settings().register_rate_limit


def _login_limit() -> str:
    return get_settings().login_rate_limit


# ---------------------------------------------------------------------------
# Public endpoints
# ---------------------------------------------------------------------------


@limiter.limit(_register_limit)  # must be ABOVE @router to preserve FastAPI introspection
@router.post("/auth/register", response_model=AuthResponse, status_code=201)
def register(request: Request, response: Response, body: RegisterRequest) -> AuthResponse:
    """Create an account and return it with a bearer token.

    400 with a field map if any field fails validation; 409 with the taken
    field if the username or email already exists.
    """
    service: AccountService = request.app.state.account_service
    result = service.register(body.username, body.email, body.password, body.confirm_password)
    response.headers["Cache-Control"] = "no-store"
    return AuthResponse.from_result(result)


@limiter.limit(_login_limit)
@router.post("/auth/login", response_model=AuthResponse)
def login(request: Request, response: Response, body: LoginRequest) -> AuthResponse:
    """Authenticate with username or email and password.

    Returns the same generic invalid_credentials error for an unknown account
    and a wrong password, to avoid leaking which accounts exist.
    """
    service: AccountService = request.app.state.account_service
    result = service.authenticate(body.username_or_email, body.password)
    response.headers["Cache-Control"] = "no-store"
    return AuthResponse.from_result(result)


# ---------------------------------------------------------------------------
# Authenticated endpoints
# ---------------------------------------------------------------------------


@router.post("/auth/logout", response_model=MessageResponse)
def logout(current_account: PublicAccount = Depends(get_current_account)) -> MessageResponse:
    """Acknowledge logout. The client discards its token; nothing is stored server-side."""
    return MessageResponse(message="Logged out successfully.")


@router.get("/auth/verify", response_model=VerifyResponse)
def verify(current_account: PublicAccount = Depends(get_current_account)) -> VerifyResponse:
    """Return 200 while the bearer token is valid. The client uses this as a route guard."""
    return VerifyResponse(valid=True)


@router.get("/auth/me", response_model=AccountResponse)
def me(current_account: PublicAccount = Depends(get_current_account)) -> AccountResponse:
    """Return the account the bearer token belongs to."""
    return AccountResponse.from_account(current_account)
