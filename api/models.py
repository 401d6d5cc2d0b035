"""
API request and response models for the auth REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py, which
own the internal domain representation. Route handlers map between the two.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from auth.passwords import MAX_PASSWORD_BYTES

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

# Same shape check the frontend applies before submitting.
EMAIL_PATTERN = r"^[^\s@]+@[^\s@]+\.[^\s@]+$"


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class _Credentials(BaseModel):
    """email + password, shared by registration and login.

    Passwords are deliberately not whitespace-stripped. The byte-length check
    keeps inputs inside bcrypt's 72-byte window.
    """

    email: str = Field(min_length=3, max_length=255, pattern=EMAIL_PATTERN)
    password: str = Field(min_length=1, max_length=MAX_PASSWORD_BYTES)

    @field_validator("password")
    @classmethod
    def check_password_bytes(cls, value: str) -> str:
        if len(value.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes.")
        return value


class RegisterRequest(_Credentials):
    """Request body for POST /auth/users.

    Profile fields (names, address, ...) belong to the profile collaborator and
    are accepted but ignored here.
    """

    model_config = ConfigDict(extra="ignore")


class LoginRequest(_Credentials):
    """Request body for POST /auth/login."""


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class RegisterResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    email: str
    success: bool = True


class LoginResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    email: str
    message: str = "Login successful"


class CookieCheckResponse(BaseModel):
    """Response for GET /auth/check-cookie. Presence only, not validity."""

    model_config = ConfigDict(frozen=True)

    found: bool
    message: str


class MeResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    email: str


class MessageResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    message: str


class ErrorDetail(BaseModel):
    """Machine-readable error payload."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: Optional[str] = None


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail


class HealthResponse(BaseModel):
    """Response for GET /health."""

    model_config = ConfigDict(frozen=True)

    status: str = "healthy"
    version: str
    components: dict[str, str] = Field(default_factory=dict)
