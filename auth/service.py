"""
auth/service.py -- Registration, login and session inspection.

AuthService composes the store, the password functions and the TokenService.
Every expected outcome comes back as a Result; the route layer decides the
HTTP status.

Login never reveals which half of the credential was wrong. An unknown email
and a wrong password both come back as BAD_CREDENTIALS, and both cost one
bcrypt verification (against DUMMY_HASH for the unknown email).

Registration and the profile hook:
  on_register is an optional collaborator called with the new User after the
  credential row is committed. It is not part of the same transaction. If it
  raises, the failure is logged and registration still succeeds with the row
  in place. Callers must not assume a profile exists for every user.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping

from auth.models import AuthError, AuthSession, Result, User
from auth.passwords import DUMMY_HASH, hash_password, verify_password
from auth.store import UserStore
from auth.tokens import TokenService

logger = logging.getLogger("alexandria.auth")

ProfileHook = Callable[[User], None]


class AuthService:
    def __init__(
        self,
        store: UserStore,
        tokens: TokenService,
        cookie_name: str = "JWT",
        on_register: ProfileHook | None = None,
    ) -> None:
        self.store = store
        self.tokens = tokens
        self.cookie_name = cookie_name
        self._on_register = on_register

    def register(self, email: str, password: str) -> Result[AuthSession]:
        """Create a credential record and issue its first token.

        DUPLICATE_EMAIL if the email is taken, including when a concurrent
        registration wins the insert after our exists() check.
        """
        if self.store.exists(email):
            return Result.failure(AuthError.DUPLICATE_EMAIL)

        created = self.store.create_user(email, hash_password(password))
        if not created.ok:
            return Result.failure(created.error)

        user = created.value
        token = self.tokens.issue(user.email)
        logger.info("Registered user id=%s", user.id)

        if self._on_register is not None:
            try:
                self._on_register(user)
            except Exception:
                # The credential row stays: registration is not rolled back.
                logger.exception("Profile initialization failed for user id=%s", user.id)

        return Result.success(AuthSession(user=user, token=token))

    def login(self, email: str, password: str) -> Result[AuthSession]:
        """Verify credentials and issue a fresh token. BAD_CREDENTIALS on any failure."""
        found = self.store.get_by_email(email)
        if not found.ok:
            verify_password(password, DUMMY_HASH)
            logger.debug("Login rejected: %s", found.error.value)
            return Result.failure(AuthError.BAD_CREDENTIALS)

        user = found.value
        if not verify_password(password, user.hashed_password):
            logger.debug("Login rejected: password mismatch for user id=%s", user.id)
            return Result.failure(AuthError.BAD_CREDENTIALS)

        logger.info("Login succeeded for user id=%s", user.id)
        return Result.success(AuthSession(user=user, token=self.tokens.issue(user.email)))

    def check_session(self, cookies: Mapping[str, str]) -> bool:
        """Return True if a session cookie is present by name.

        Presence only: the token inside is not verified here. Use
        authenticate() when the caller needs a valid identity.
        """
        return self.cookie_name in cookies

    def authenticate(self, token: str) -> Result[User]:
        """Validate a token and load the record it names.

        TOKEN_INVALID / TOKEN_EXPIRED from validation pass through unchanged.
        A well-signed token whose subject has no record is TOKEN_INVALID.
        """
        claims = self.tokens.validate(token)
        if not claims.ok:
            return Result.failure(claims.error)
        found = self.store.get_by_email(claims.value.subject)
        if not found.ok:
            return Result.failure(AuthError.TOKEN_INVALID)
        return Result.success(found.value)
