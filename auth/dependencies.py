"""
auth/dependencies.py -- FastAPI Depends() helpers for authentication.

Two token sources are checked in priority order:
  1. Session cookie (name from settings, "JWT" by default) -- set by login and
     registration.
  2. Authorization: Bearer <token> header -- API clients.

try_get_current_user() is the soft variant (returns None on failure).
get_current_user() wraps it and raises HTTP 401 if unauthenticated.

Expired and invalid tokens produce the same 401 body; the distinction is only
logged.

auth/dependencies.py may import from fastapi (for HTTPException/Request)
because this module is part of the FastAPI dependency injection system.
"""

from __future__ import annotations

import logging

from fastapi import HTTPException, Request

from auth.models import User
from auth.service import AuthService

logger = logging.getLogger("alexandria.auth")


def _extract_token(request: Request, cookie_name: str) -> str | None:
    token: str | None = request.cookies.get(cookie_name)
    if not token:
        auth_header = request.headers.get("Authorization", "")
        if auth_header.startswith("Bearer "):
            token = auth_header[7:]
    return token or None


def try_get_current_user(request: Request) -> User | None:
    """Authenticate the request via cookie or Bearer header. Never raises."""
    auth_service: AuthService = request.app.state.auth_service
    token = _extract_token(request, auth_service.cookie_name)
    if token is None:
        return None
    result = auth_service.authenticate(token)
    if not result.ok:
        logger.debug("Token rejected on %s: %s", request.url.path, result.error.value)
        return None
    return result.value


def get_current_user(request: Request) -> User:
    """Require authentication. Raises HTTP 401 if the request is not authenticated.

    Use as a FastAPI dependency:
        @router.get("/protected")
        async def route(user: User = Depends(get_current_user)): ...
    """
    user = try_get_current_user(request)
    if user is None:
        raise HTTPException(
            status_code=401,
            detail={"code": "unauthorized", "message": "Authentication required."},
        )
    return user
