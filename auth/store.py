"""
auth/store.py -- SQLAlchemy Core persistence layer for credential records.

Pattern: Repository + Data Mapper.
UserStore is the repository; _row_to_user is the mapper. Service and route code
never touches SQL directly.

Uniqueness:
  UNIQUE(email) is enforced by the database. create_user() never checks for an
  existing row first -- it inserts and turns the IntegrityError into
  DUPLICATE_EMAIL. Two concurrent registrations for one email therefore
  resolve to exactly one row and one DUPLICATE_EMAIL, whatever the
  interleaving. exists() is a fast path for the common case only.

Security:
  All queries use bound parameters. The password hash is stored; the plaintext
  never reaches this module.

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, MetaData, String, Table, Text, create_engine, event, func, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError

from auth.models import AuthError, Result, User

logger = logging.getLogger("alexandria.auth.store")

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

_users = Table(
    "users",
    _metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("email", String(255), nullable=False, unique=True),  # case-sensitive login key
    Column("hashed_password", Text, nullable=False),
    Column("created_at", String(32), nullable=False),
)


# ---------------------------------------------------------------------------
# WAL mode
# ---------------------------------------------------------------------------


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode so readers do not block behind a writer.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool.
    """
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class UserStore:
    """Repository for User credential records.

    Usage:
        store = UserStore("sqlite:///auth.db")
        result = store.create_user("alice@example.com", hash_password("secret"))
        found = store.get_by_email("alice@example.com")
        store.close()
    """

    def __init__(self, db_url: str) -> None:
        connect_args: dict = {}
        if db_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        self.engine: Engine = create_engine(db_url, connect_args=connect_args)
        if db_url.startswith("sqlite"):
            event.listen(self.engine, "connect", _set_wal_mode)
        _metadata.create_all(self.engine)

    def exists(self, email: str) -> bool:
        """Return True if a record holds this exact email."""
        with self.engine.connect() as conn:
            row = conn.execute(select(_users.c.id).where(_users.c.email == email)).first()
        return row is not None

    def create_user(self, email: str, hashed_password: str) -> Result[User]:
        """Insert a new record.

        Returns DUPLICATE_EMAIL if the UNIQUE constraint rejects the insert,
        whether the other holder was committed long ago or a millisecond ago.
        """
        created_at = _now_iso()
        try:
            with self.engine.begin() as conn:
                result = conn.execute(
                    _users.insert().values(
                        email=email,
                        hashed_password=hashed_password,
                        created_at=created_at,
                    )
                )
                user_id = result.inserted_primary_key[0]
        except IntegrityError:
            logger.debug("Insert rejected by UNIQUE(email)")
            return Result.failure(AuthError.DUPLICATE_EMAIL)
        return Result.success(User(id=user_id, email=email, hashed_password=hashed_password, created_at=created_at))

    def get_by_email(self, email: str) -> Result[User]:
        """Look up a record by exact email (case-sensitive). NOT_FOUND if absent."""
        with self.engine.connect() as conn:
            row = conn.execute(_users.select().where(_users.c.email == email)).fetchone()
        if row is None:
            return Result.failure(AuthError.NOT_FOUND)
        return Result.success(_row_to_user(row))

    def count_users(self) -> int:
        """Return the number of credential records. Doubles as a DB liveness probe."""
        with self.engine.connect() as conn:
            result = conn.execute(select(func.count()).select_from(_users)).scalar()
        return result or 0

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mapper (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_user(row) -> User:
    return User(
        id=row.id,
        email=row.email,
        hashed_password=row.hashed_password,
        created_at=row.created_at,
    )
