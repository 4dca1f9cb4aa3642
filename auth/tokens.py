"""
auth/tokens.py -- Bearer token issuance and verification.

Security design decisions:
  JWT: python-jose, HS256 by default. Tokens carry only the account id (sub),
       issued-at (iat) and expiry (exp). Nothing else about the account is
       trusted from the token; the Auth Gate re-reads the account on every
       request.

  Config: TokenIssuer receives an immutable core.config.TokenConfig at
       construction. It never reads the environment, so tests build issuers
       from literals and two issuers with different secrets can coexist.

  Failures: verify() raises InvalidToken with one generic message whether the
       signature is wrong, the payload is malformed or the token expired. The
       route layer turns that into a 401 that looks the same in every case.

  Revocation: none. A token is valid until exp. Logout is client-side.

Layer rule: no imports from api/ or blog/. Import from core/ is allowed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from core.config import TokenConfig
from core.errors import ConfigurationError, InvalidToken

logger = logging.getLogger("inkwell.auth")

_REQUIRED_CLAIMS = ("sub", "iat", "exp")


@dataclass(frozen=True)
class TokenClaims:
    subject: str
    issued_at: datetime
    expires_at: datetime


class TokenIssuer:
    """Mints and checks signed, time-limited bearer tokens.

    Usage:
        issuer = TokenIssuer(settings.token_config())
        token = issuer.issue(account.id)
        claims = issuer.verify(token)   # raises InvalidToken
    """

    def __init__(self, config: TokenConfig) -> None:
        self._config = config

    @property
    def expire_seconds(self) -> int:
        return self._config.expire_seconds

    def _require_secret(self) -> str:
        if not self._config.secret_key:
            raise ConfigurationError("Token signing secret is not configured.")
        return self._config.secret_key

    def issue(self, subject: str, expire_seconds: int | None = None) -> str:
        """Encode a signed JWT for subject.

        Args:
            subject:        Account id stored as the sub claim.
            expire_seconds: Lifetime override. None uses the configured default.
        """
        secret = self._require_secret()
        duration = expire_seconds if expire_seconds is not None else self._config.expire_seconds
        now = datetime.now(timezone.utc)
        payload = {
            "sub": subject,
            "iat": int(now.timestamp()),
            "exp": int((now + timedelta(seconds=duration)).timestamp()),
        }
        return jwt.encode(payload, secret, algorithm=self._config.algorithm)

    def verify(self, token: str) -> TokenClaims:
        """Decode and verify a JWT. Raises InvalidToken on any failure."""
        secret = self._require_secret()
        try:
            payload = jwt.decode(token, secret, algorithms=[self._config.algorithm])
        except JWTError as exc:
            logger.debug("Token rejected: %s", exc)
            raise InvalidToken() from exc

        if any(claim not in payload for claim in _REQUIRED_CLAIMS):
            raise InvalidToken()
        subject = payload["sub"]
        if not isinstance(subject, str) or not subject:
            raise InvalidToken()
        try:
            issued_at = datetime.fromtimestamp(int(payload["iat"]), tz=timezone.utc)
            expires_at = datetime.fromtimestamp(int(payload["exp"]), tz=timezone.utc)
        except (TypeError, ValueError, OverflowError) as exc:
            raise InvalidToken() from exc
        return TokenClaims(subject=subject, issued_at=issued_at, expires_at=expires_at)
