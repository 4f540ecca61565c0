"""
auth/store.py -- SQLAlchemy Core user directory.

Pattern: Repository + Data Mapper. SQLUserDirectory is the repository;
_row_to_user is the mapper. Route and service code never touches SQL directly.

Security:
  All queries use bound parameters. No f-strings in SQL.

  UNIQUE(username) is enforced by the database, not by a read-then-write
  check, so two concurrent signups for the same name cannot both succeed.
  The IntegrityError is translated to UserConflict at this boundary.

DB path: auth/sessiongate_auth.db unless Settings.database_url says otherwise.

Layer rule: no imports from api/.
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

from sqlalchemy import Column, Integer, MetaData, String, Table, Text, create_engine, event, func, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError

from auth.errors import UserConflict
from auth.models import UserRecord

DEFAULT_DB_URL = f"sqlite:///{Path(__file__).parent / 'sessiongate_auth.db'}"

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

_users = Table(
    "users",
    _metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("username", String(255), nullable=False, unique=True),
    Column("password_hash", Text, nullable=False),
    Column("role", String(30)),  # NULL for ordinary users
    Column("created_at", String(32), nullable=False),
)


# ---------------------------------------------------------------------------
# Engine helpers (shared with auth/sessions.py)
# ---------------------------------------------------------------------------


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode for concurrent read safety.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool.
    """
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


def make_engine(db_url: str) -> Engine:
    """Create an engine usable from FastAPI's worker threads."""
    connect_args: dict = {}
    if db_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    engine = create_engine(db_url, connect_args=connect_args)
    if db_url.startswith("sqlite"):
        event.listen(engine, "connect", _set_wal_mode)
    return engine


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class SQLUserDirectory:
    """Repository for UserRecord entities.

    Usage:
        users = SQLUserDirectory()
        users.insert("admin", hasher.hash("secret"), role="admin")
        user = users.find_by_username("admin")
        users.close()
    """

    def __init__(self, db_url: str = DEFAULT_DB_URL) -> None:
        self.engine: Engine = make_engine(db_url)
        _metadata.create_all(self.engine)

    def find_by_username(self, username: str) -> UserRecord | None:
        """Look up a user by exact username (case-sensitive). Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(_users.select().where(_users.c.username == username)).fetchone()
        return _row_to_user(row) if row is not None else None

    def insert(self, username: str, password_hash: str, role: str | None = None) -> UserRecord:
        """Insert a new user and return the stored record.

        Raises UserConflict if the username already exists. Nothing is
        overwritten on conflict.
        """
        created_at = _now_iso()
        try:
            with self.engine.connect() as conn:
                result = conn.execute(
                    _users.insert().values(
                        username=username,
                        password_hash=password_hash,
                        role=role,
                        created_at=created_at,
                    )
                )
                conn.commit()
        except IntegrityError as exc:
            raise UserConflict(username) from exc
        return UserRecord(
            id=result.inserted_primary_key[0],
            username=username,
            password_hash=password_hash,
            role=role,
            created_at=created_at,
        )

    def has_users(self) -> bool:
        """Return True if at least one user record exists."""
        with self.engine.connect() as conn:
            result = conn.execute(select(func.count()).select_from(_users)).scalar()
        return (result or 0) > 0

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mapper (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_user(row) -> UserRecord:
    return UserRecord(
        id=row.id,
        username=row.username,
        password_hash=row.password_hash,
        role=row.role,
        created_at=row.created_at,
    )
