"""
auth/passwords.py -- Password hashing and verification.

Design:
  bcrypt, used directly (no passlib wrapper). gensalt() gives every hash its
  own random salt and the default cost factor makes brute force expensive.
  bcrypt.checkpw compares digests in constant time, so verification does not
  leak how many bytes matched.

  bcrypt only reads the first 72 bytes of input and recent releases raise on
  longer values. The API layer rejects passwords over MAX_PASSWORD_BYTES
  before they get here.

  DUMMY_HASH exists so a login against an unknown email still costs one
  bcrypt round. Response time then does not reveal whether the email exists.

Never log or return the plaintext.
"""

from __future__ import annotations

import bcrypt

MAX_PASSWORD_BYTES = 72


def hash_password(plain: str) -> str:
    """Return a salted bcrypt hash of the given plaintext password."""
    return bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Return True if the plaintext password matches the bcrypt hash.

    A malformed stored hash (or an over-long plaintext) counts as a mismatch.
    """
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        return False


# Computed once at import so the first login attempt is not measurably slower
# than later ones.
DUMMY_HASH: str = hash_password("alexandria_timing_dummy")
