"""
api/routes/auth.py -- Authentication REST endpoints.

Routes:
  POST /auth/users         -- register; sets session cookie
  POST /auth/login         -- password login; sets session cookie
  GET  /auth/check-cookie  -- is a session cookie present? (presence only)
  GET  /auth/me            -- current identity (validates the token)
  POST /auth/logout        -- clears the session cookie

Security:
  Login and registration are rate-limited per client IP (slowapi).
  Login failures are one uniform 401 whether the email is unknown or the
  password is wrong. AuthService.login() also equalizes their timing.
  Cache-Control: no-store on every response that carries a session cookie.
  No cookie is set on any failed registration or login.

  /auth/check-cookie only checks the cookie name, not the token. It is a cheap
  probe for the frontend. /auth/me is the validating check.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from api.limiter import limiter, login_limit, register_limit
from api.models import (
    CookieCheckResponse,
    ErrorDetail,
    ErrorResponse,
    LoginRequest,
    LoginResponse,
    MeResponse,
    MessageResponse,
    RegisterRequest,
    RegisterResponse,
)
from auth.cookies import build_session_cookie, clear_session_cookie, request_is_secure, set_session_cookie
from auth.dependencies import get_current_user
from auth.models import AuthError, User
from auth.service import AuthService
from core.config import get_settings

# Auth policy:
# - POST /auth/users:        public -- registration
# - POST /auth/login:        public -- login endpoint must be unauthenticated
# - GET  /auth/check-cookie: public -- presence probe
# - POST /auth/logout:       public -- clearing a cookie needs no prior auth
# - GET  /auth/me:           requires auth (get_current_user)
router = APIRouter()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _error_response(status_code: int, code: str, message: str) -> JSONResponse:
    resp = JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=ErrorDetail(code=code, message=message)).model_dump(exclude_none=True),
    )
    resp.headers["Cache-Control"] = "no-store"
    return resp


def _bind_session(request: Request, response: JSONResponse, token: str) -> None:
    """Attach a fresh session cookie scoped to this request's host."""
    auth_service: AuthService = request.app.state.auth_service
    cookie = build_session_cookie(
        token,
        request.headers.get("host"),
        name=auth_service.cookie_name,
        max_age=auth_service.tokens.lifetime_seconds,
        secure=request_is_secure(request, force=get_settings().secure_cookies),
    )
    set_session_cookie(response, cookie)
    response.headers["Cache-Control"] = "no-store"


# ---------------------------------------------------------------------------
# Public endpoints
# ---------------------------------------------------------------------------


@router.post("/auth/users", response_model=RegisterResponse)
@limiter.limit(register_limit)  # must be BELOW @router: the registered endpoint has to be the limited wrapper
def register(request: Request, body: RegisterRequest) -> JSONResponse:
    """Create an account and sign it in.

    409 duplicate_email if the email is already registered -- including the
    case where a concurrent request wins the insert race.
    """
    auth_service: AuthService = request.app.state.auth_service
    result = auth_service.register(body.email, body.password)
    if not result.ok:
        if result.error is AuthError.DUPLICATE_EMAIL:
            return _error_response(409, "duplicate_email", "Email already exists.")
        return _error_response(400, result.error.value, "Registration failed.")

    session = result.value
    resp = JSONResponse(status_code=200, content=RegisterResponse(email=session.user.email).model_dump())
    _bind_session(request, resp, session.token)
    return resp


@router.post("/auth/login", response_model=LoginResponse)
@limiter.limit(login_limit)
def login(request: Request, body: LoginRequest) -> JSONResponse:
    """Authenticate with email and password; set a fresh session cookie."""
    auth_service: AuthService = request.app.state.auth_service
    result = auth_service.login(body.email, body.password)
    if not result.ok:
        return _error_response(401, AuthError.BAD_CREDENTIALS.value, "Invalid credentials.")

    session = result.value
    resp = JSONResponse(status_code=200, content=LoginResponse(email=session.user.email).model_dump())
    _bind_session(request, resp, session.token)
    return resp


@router.get("/auth/check-cookie", response_model=CookieCheckResponse)
async def check_cookie(request: Request) -> JSONResponse:
    """Report whether a session cookie is present. The token is NOT verified."""
    auth_service: AuthService = request.app.state.auth_service
    if auth_service.check_session(request.cookies):
        return JSONResponse(content=CookieCheckResponse(found=True, message="Cookie found").model_dump())
    return JSONResponse(
        status_code=401,
        content=CookieCheckResponse(found=False, message="No valid cookie found").model_dump(),
    )


@router.post("/auth/logout", response_model=MessageResponse)
async def logout(request: Request) -> JSONResponse:
    """Clear the session cookie. The token itself stays valid until it expires."""
    auth_service: AuthService = request.app.state.auth_service
    resp = JSONResponse(content=MessageResponse(message="Logged out.").model_dump())
    clear_session_cookie(resp, request.headers.get("host"), auth_service.cookie_name)
    return resp


# ---------------------------------------------------------------------------
# Authenticated endpoints
# ---------------------------------------------------------------------------


@router.get("/auth/me", response_model=MeResponse)
async def me(current_user: User = Depends(get_current_user)) -> MeResponse:
    """Return identity information for the currently authenticated user."""
    return MeResponse(id=current_user.id, email=current_user.email)
