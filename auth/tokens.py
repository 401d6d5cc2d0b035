"""
auth/tokens.py -- Signed bearer token issue and validation.

Security design decisions:
  JWT: python-jose with HS256. Tokens carry the subject (the user's email),
       iat and exp. Nothing is persisted; a token is valid exactly when its
       signature verifies against the current secret and the clock has not
       passed exp.

  Secret: injected once at startup (from core.config.get_settings()) and held
       read-only by the TokenService instance on app.state. Rotating it means
       redeploying, which invalidates every outstanding token. There is no
       revocation list.

  Expiry: jose's own exp check is disabled and replaced by a comparison
       against the service's injected clock, so expiry follows one time source
       and tests can move it.

Layer rule: no imports from api/. TokenService takes its secret as an argument
rather than reading settings itself.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from auth.models import AuthError, Result, TokenClaims

logger = logging.getLogger("alexandria.auth.tokens")

ALGORITHM = "HS256"
DEFAULT_LIFETIME = timedelta(hours=24)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TokenService:
    """Issue and validate HS256 bearer tokens.

    Usage:
        tokens = TokenService(settings.secret_key)
        token = tokens.issue("alice@example.com")
        result = tokens.validate(token)
        if result.ok:
            result.value.subject  # "alice@example.com"
    """

    def __init__(
        self,
        secret_key: str,
        lifetime: timedelta = DEFAULT_LIFETIME,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        if not secret_key:
            raise ValueError("TokenService requires a non-empty signing secret.")
        self._secret_key = secret_key
        self._lifetime = lifetime
        self._clock = clock

    @property
    def lifetime_seconds(self) -> int:
        return int(self._lifetime.total_seconds())

    def issue(self, subject: str) -> str:
        """Return a signed token for subject with iat=now and exp=now+lifetime."""
        issued_at = self._clock()
        payload = {
            "sub": subject,
            "iat": issued_at,
            "exp": issued_at + self._lifetime,
        }
        return jwt.encode(payload, self._secret_key, algorithm=ALGORITHM)

    def validate(self, token: str) -> Result[TokenClaims]:
        """Verify signature and expiry.

        TOKEN_INVALID -- signature mismatch, malformed token, or missing claims.
        TOKEN_EXPIRED -- signature verifies but the clock is past exp.
        """
        try:
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[ALGORITHM],
                options={"verify_exp": False},
            )
        except JWTError as exc:
            logger.debug("Token rejected: %s", exc)
            return Result.failure(AuthError.TOKEN_INVALID)

        subject = payload.get("sub")
        iat = payload.get("iat")
        exp = payload.get("exp")
        if not subject or not isinstance(iat, (int, float)) or not isinstance(exp, (int, float)):
            return Result.failure(AuthError.TOKEN_INVALID)

        expires_at = datetime.fromtimestamp(exp, tz=timezone.utc)
        if self._clock() > expires_at:
            return Result.failure(AuthError.TOKEN_EXPIRED)

        return Result.success(
            TokenClaims(
                subject=subject,
                issued_at=datetime.fromtimestamp(iat, tz=timezone.utc),
                expires_at=expires_at,
            )
        )
