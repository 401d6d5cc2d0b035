"""
tests/conftest.py -- Shared test fixtures for the auth service tests.

This module provides:
  - SECRET: a fixed 32+ char signing secret for unit tests
  - FakeClock: a settable clock for TokenService expiry tests
  - make_test_store(): creates an isolated named in-memory DB
  - _patch_lifespan(): wires test collaborators into app.state, bypassing real startup
  - api_client: TestClient + AuthService for HTTP integration tests

Design: Named shared-memory SQLite URIs (not plain :memory:) are required
because TestClient runs sync route handlers in a thread pool. Plain :memory:
DBs are per-connection and would present a blank schema to each worker thread.

DEBUG must be set before any core/api import so get_settings() auto-generates
SECRET_KEY in dev mode instead of raising ValueError. Rate limiting is turned
off so repeated logins from the single test client address are not throttled.
"""

from __future__ import annotations

import os
from collections.abc import Generator
from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone

# CRITICAL: Set env before any api/core import.
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

import pytest
from fastapi.testclient import TestClient

from api.main import app
from auth.service import AuthService
from auth.store import UserStore
from auth.tokens import TokenService
from core.config import get_settings

SECRET = "test-signing-secret-0123456789abcdef"


class FakeClock:
    """Callable clock whose current time the test controls."""

    def __init__(self, now: datetime | None = None) -> None:
        self.now = now or datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


def make_test_store(name: str) -> UserStore:
    """Named shared-memory store; every connection in the process sees one DB."""
    return UserStore(f"sqlite:///file:test_auth_{name}?mode=memory&cache=shared&uri=true")


def _patch_lifespan(store: UserStore, auth_service: AuthService):
    """Return an async context manager that replaces the real lifespan."""

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.user_store = store
        app.state.auth_service = auth_service
        yield

    return test_lifespan


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def tokens(clock: FakeClock) -> TokenService:
    return TokenService(SECRET, clock=clock)


@pytest.fixture
def store() -> Generator[UserStore, None, None]:
    s = UserStore("sqlite:///:memory:")
    yield s
    s.close()


@pytest.fixture(scope="module")
def api_client(request) -> Generator[tuple[TestClient, AuthService], None, None]:
    """Yield (client, auth_service) for HTTP integration tests.

    The TestClient uses the real FastAPI app with a patched lifespan so tests
    hit real route handlers but an isolated in-memory store. The TokenService
    uses the same secret the settings hold, as the real lifespan does.
    """
    settings = get_settings()
    store = make_test_store(request.module.__name__.rsplit(".", 1)[-1])
    token_service = TokenService(settings.secret_key, lifetime=timedelta(seconds=settings.token_expire_seconds))
    auth_service = AuthService(store, token_service, cookie_name=settings.session_cookie_name)

    app.router.lifespan_context = _patch_lifespan(store, auth_service)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield client, auth_service

    store.close()


def set_cookie_headers(resp) -> list[str]:
    """All Set-Cookie header values of an httpx response."""
    return [v for k, v in resp.headers.multi_items() if k.lower() == "set-cookie"]


def parse_set_cookie(header: str) -> tuple[str, str, dict[str, str]]:
    """Split a Set-Cookie value into (name, value, {lowercased attr: value})."""
    first, *attrs = [part.strip() for part in header.split(";")]
    name, _, value = first.partition("=")
    parsed: dict[str, str] = {}
    for attr in attrs:
        key, _, val = attr.partition("=")
        parsed[key.strip().lower()] = val.strip()
    return name, value, parsed
