"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, zero logic). Dataclasses own domain
shape; stores, services and routes do the work.

Result is the explicit success-or-error return used by the store and the
service for expected outcomes (duplicate email, unknown user, bad token).
Exceptions are reserved for genuinely unexpected failures; the API boundary
maps AuthError kinds onto HTTP statuses.

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Generic, TypeVar

T = TypeVar("T")


class AuthError(str, Enum):
    """Expected failure kinds of the authentication core."""

    DUPLICATE_EMAIL = "duplicate_email"  # registration conflict, user-correctable
    NOT_FOUND = "not_found"  # never surfaced to callers -- collapsed to BAD_CREDENTIALS
    BAD_CREDENTIALS = "bad_credentials"
    TOKEN_INVALID = "token_invalid"  # bad signature, malformed, missing claims
    TOKEN_EXPIRED = "token_expired"  # valid signature, past exp


@dataclass(frozen=True)
class Result(Generic[T]):
    """Either a value or an AuthError kind, never both."""

    value: T | None = None
    error: AuthError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> Result[T]:
        return cls(value=value)

    @classmethod
    def failure(cls, error: AuthError) -> Result[T]:
        return cls(error=error)


@dataclass
class User:
    """A credential record. email is the immutable login key.

    hashed_password is a bcrypt digest. The plaintext is never stored.
    """

    email: str
    hashed_password: str
    id: int | None = None
    created_at: str | None = None


@dataclass(frozen=True)
class TokenClaims:
    """Decoded content of a verified bearer token."""

    subject: str
    issued_at: datetime
    expires_at: datetime


@dataclass(frozen=True)
class AuthSession:
    """Outcome of a successful registration or login: who, and their fresh token."""

    user: User
    token: str


@dataclass(frozen=True)
class SessionCookie:
    """Transport wrapper for a token plus its browser-directed attributes.

    domain=None means no Domain attribute is emitted and the browser scopes the
    cookie to the request's own host.
    """

    name: str
    value: str
    max_age: int
    domain: str | None = None
    path: str = "/"
    secure: bool = False
    httponly: bool = True
    samesite: str = "lax"
