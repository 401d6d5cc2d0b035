"""Unit tests for auth/tokens.py -- TokenService issue/validate.

Covers:
- validate(issue(subject)) returns the subject immediately after issuance
- iat/exp are 24 hours apart
- Expiry is judged by the injected clock (TOKEN_EXPIRED past exp, valid at exp)
- Any altered signature byte, a foreign secret, or garbage input -> TOKEN_INVALID
- Tokens missing the subject claim are rejected
"""

from datetime import timedelta

import pytest
from conftest import SECRET, FakeClock
from jose import jwt

from auth.models import AuthError
from auth.tokens import ALGORITHM, TokenService


def _tamper_signature(token: str) -> str:
    header, payload, signature = token.split(".")
    # Changing the first base64url char always changes the first decoded byte.
    replacement = "A" if signature[0] != "A" else "B"
    return ".".join([header, payload, replacement + signature[1:]])


class TestRoundTrip:
    def test_validate_returns_subject(self, tokens: TokenService) -> None:
        token = tokens.issue("alice@example.com")
        result = tokens.validate(token)
        assert result.ok
        assert result.value.subject == "alice@example.com"

    def test_claims_span_24_hours(self, tokens: TokenService, clock: FakeClock) -> None:
        claims = tokens.validate(tokens.issue("alice@example.com")).value
        assert claims.issued_at == clock.now
        assert claims.expires_at - claims.issued_at == timedelta(hours=24)

    def test_lifetime_seconds_default(self, tokens: TokenService) -> None:
        assert tokens.lifetime_seconds == 86400

    def test_empty_secret_rejected(self) -> None:
        with pytest.raises(ValueError):
            TokenService("")


class TestExpiry:
    def test_expired_after_lifetime(self, tokens: TokenService, clock: FakeClock) -> None:
        token = tokens.issue("alice@example.com")
        clock.advance(hours=24, seconds=1)
        result = tokens.validate(token)
        assert not result.ok
        assert result.error is AuthError.TOKEN_EXPIRED

    def test_still_valid_at_exact_expiry(self, tokens: TokenService, clock: FakeClock) -> None:
        """Expired means now > exp; the instant of exp itself still validates."""
        token = tokens.issue("alice@example.com")
        clock.advance(hours=24)
        assert tokens.validate(token).ok

    def test_old_token_expired_for_real_clock(self) -> None:
        """A token issued years ago by another instance is expired for the wall clock."""
        past = FakeClock()
        past.now = past.now.replace(year=2020)
        old_token = TokenService(SECRET, clock=past).issue("alice@example.com")
        assert TokenService(SECRET).validate(old_token).error is AuthError.TOKEN_EXPIRED

    def test_tampered_expired_token_is_invalid_not_expired(self, tokens: TokenService, clock: FakeClock) -> None:
        """Signature is checked before expiry: forged tokens never report TOKEN_EXPIRED."""
        token = tokens.issue("alice@example.com")
        clock.advance(days=2)
        assert tokens.validate(_tamper_signature(token)).error is AuthError.TOKEN_INVALID


class TestInvalid:
    def test_altered_signature(self, tokens: TokenService) -> None:
        token = tokens.issue("alice@example.com")
        result = tokens.validate(_tamper_signature(token))
        assert result.error is AuthError.TOKEN_INVALID

    def test_altered_payload(self, tokens: TokenService) -> None:
        header, _payload, signature = tokens.issue("alice@example.com").split(".")
        forged_payload = tokens.issue("mallory@example.com").split(".")[1]
        result = tokens.validate(".".join([header, forged_payload, signature]))
        assert result.error is AuthError.TOKEN_INVALID

    def test_rotated_secret_invalidates(self, tokens: TokenService, clock: FakeClock) -> None:
        token = tokens.issue("alice@example.com")
        rotated = TokenService("a-completely-different-secret-value-123", clock=clock)
        assert rotated.validate(token).error is AuthError.TOKEN_INVALID

    @pytest.mark.parametrize("garbage", ["", "not-a-token", "a.b.c", "....."])
    def test_malformed(self, tokens: TokenService, garbage: str) -> None:
        assert tokens.validate(garbage).error is AuthError.TOKEN_INVALID

    def test_missing_subject(self, tokens: TokenService, clock: FakeClock) -> None:
        token = jwt.encode({"iat": clock.now, "exp": clock.now + timedelta(hours=1)}, SECRET, algorithm=ALGORITHM)
        assert tokens.validate(token).error is AuthError.TOKEN_INVALID

    def test_missing_expiry(self, tokens: TokenService, clock: FakeClock) -> None:
        token = jwt.encode({"sub": "alice@example.com", "iat": clock.now}, SECRET, algorithm=ALGORITHM)
        assert tokens.validate(token).error is AuthError.TOKEN_INVALID

    def test_other_algorithm_rejected(self, tokens: TokenService, clock: FakeClock) -> None:
        token = jwt.encode(
            {"sub": "alice@example.com", "iat": clock.now, "exp": clock.now + timedelta(hours=1)},
            SECRET,
            algorithm="HS512",
        )
        assert tokens.validate(token).error is AuthError.TOKEN_INVALID
