"""
auth/cookies.py -- Session cookie attributes and response helpers.

The cookie Domain is derived per request from the Host header:
  - strip any :port suffix (bracketed IPv6 literals are unwrapped)
  - localhost / 127.0.0.1 -> no Domain attribute. Browsers do not reliably
    accept cookies scoped to loopback names, and omitting Domain makes the
    browser default to the request's own host.
  - anything else -> that hostname, as sent.

domain_for() is a pure function over a host string so it can be tested
without a request object. Only set_session_cookie(), clear_session_cookie()
and request_is_secure() touch Starlette types.

Attributes:
  httponly=True   -- JS cannot read the token (XSS mitigation).
  samesite="lax"  -- not "strict": the API sits behind a reverse proxy on a
                     different origin than the static frontend, and strict
                     would drop the cookie on those navigations.
  path="/", max_age mirrors the token lifetime so both expire together.
"""

from __future__ import annotations

from starlette.requests import Request
from starlette.responses import Response

from auth.models import SessionCookie

LOOPBACK_HOSTS = frozenset({"localhost", "127.0.0.1"})


def _strip_port(host: str) -> str:
    if host.startswith("["):
        end = host.find("]")
        return host[1:end] if end != -1 else host[1:]
    return host.split(":", 1)[0]


def domain_for(host: str | None) -> str | None:
    """Return the cookie Domain for a Host header value, or None to omit it."""
    if not host:
        return None
    hostname = _strip_port(host.strip())
    if not hostname or hostname.lower() in LOOPBACK_HOSTS:
        return None
    return hostname


def build_session_cookie(
    token: str,
    host: str | None,
    *,
    name: str,
    max_age: int,
    secure: bool = False,
) -> SessionCookie:
    """Wrap a token in a session cookie scoped for the given request host."""
    return SessionCookie(
        name=name,
        value=token,
        max_age=max_age,
        domain=domain_for(host),
        path="/",
        secure=secure,
        httponly=True,
        samesite="lax",
    )


def set_session_cookie(response: Response, cookie: SessionCookie) -> None:
    response.set_cookie(
        cookie.name,
        value=cookie.value,
        max_age=cookie.max_age,
        path=cookie.path,
        domain=cookie.domain,
        secure=cookie.secure,
        httponly=cookie.httponly,
        samesite=cookie.samesite,
    )


def clear_session_cookie(response: Response, host: str | None, name: str) -> None:
    """Delete the session cookie.

    Domain and path must match the ones used when the cookie was set, otherwise
    the browser keeps the original.
    """
    response.delete_cookie(name, path="/", domain=domain_for(host), httponly=True, samesite="lax")


def request_is_secure(request: Request, force: bool = False) -> bool:
    """True when cookies for this request should carry the Secure flag.

    Honors X-Forwarded-Proto so TLS terminated at the reverse proxy still
    counts as HTTPS.
    """
    if force:
        return True
    forwarded = request.headers.get("x-forwarded-proto", "")
    scheme = forwarded.split(",")[0].strip().lower() or request.url.scheme
    return scheme == "https"
