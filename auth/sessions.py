"""
auth/sessions.py -- SQL-backed server-side session store.

Maps an opaque session token to a SessionPayload with a fixed lifetime.
Shared by every worker process pointed at the same database, so sessions
survive restarts and are visible across workers.

Security design decisions:
  Tokens: secrets.token_urlsafe(32) gives 256 bits of entropy. The raw
       token only ever lives in the client's cookie.

  At rest: rows are keyed by HMAC-SHA256(SECRET_KEY, token). Someone who
       reads the sessions table cannot replay a session without also knowing
       SECRET_KEY. The digest is deterministic, so lookup stays a primary-key
       hit.

  Payload: stored as JSON of SessionPayload.to_dict() -- username and role
       only. There is no column a password hash could end up in.

Usage:
    sessions = SQLSessionStore(secret_key=settings.secret_key)
    token = sessions.new_token()
    sessions.set(token, SessionPayload(username="alice"))
    sessions.get(token)          # SessionPayload or None
    sessions.destroy(token)
    sessions.purge_expired()     # call periodically to trim old rows

Layer rule: no imports from api/.
"""

from __future__ import annotations

import hashlib
import hmac
import json
import logging
import secrets
import time

from sqlalchemy import Column, Float, MetaData, String, Table, Text
from sqlalchemy.engine import Engine

from auth.models import SessionPayload
from auth.store import DEFAULT_DB_URL, make_engine

logger = logging.getLogger("sessiongate.sessions")

_DEFAULT_TTL = 60 * 60  # 1 hour in seconds

_metadata = MetaData()

_sessions = Table(
    "sessions",
    _metadata,
    Column("token_hash", String(64), primary_key=True),  # HMAC-SHA256 hex
    Column("payload", Text, nullable=False),
    Column("created_at", Float, nullable=False),
    Column("expires_at", Float, nullable=False),
)


class SQLSessionStore:
    def __init__(self, secret_key: str, db_url: str = DEFAULT_DB_URL, ttl: int = _DEFAULT_TTL) -> None:
        if not secret_key:
            raise ValueError("secret_key is required to store session tokens")
        self.ttl = ttl
        self._secret = secret_key.encode("utf-8")
        self.engine: Engine = make_engine(db_url)
        _metadata.create_all(self.engine)

    def new_token(self) -> str:
        return secrets.token_urlsafe(32)

    def get(self, token: str) -> SessionPayload | None:
        """Return the payload for token if it exists and hasn't expired."""
        if not token:
            return None
        key = self._hash_token(token)
        with self.engine.connect() as conn:
            row = conn.execute(_sessions.select().where(_sessions.c.token_hash == key)).fetchone()
        if row is None:
            return None
        if row.expires_at <= time.time():
            self._delete(key)
            return None
        try:
            return SessionPayload.from_dict(json.loads(row.payload))
        except (ValueError, KeyError, TypeError):
            logger.warning("Discarding unreadable session row")
            self._delete(key)
            return None

    def set(self, token: str, payload: SessionPayload) -> None:
        """Store payload for token, replacing any existing entry and resetting its expiry."""
        if not token:
            raise ValueError("token is required")
        key = self._hash_token(token)
        now = time.time()
        with self.engine.connect() as conn:
            conn.execute(_sessions.delete().where(_sessions.c.token_hash == key))
            conn.execute(
                _sessions.insert().values(
                    token_hash=key,
                    payload=json.dumps(payload.to_dict()),
                    created_at=now,
                    expires_at=now + self.ttl,
                )
            )
            conn.commit()

    def destroy(self, token: str) -> None:
        if token:
            self._delete(self._hash_token(token))

    def purge_expired(self) -> int:
        """Delete all expired sessions. Returns number of rows removed."""
        with self.engine.connect() as conn:
            result = conn.execute(_sessions.delete().where(_sessions.c.expires_at <= time.time()))
            conn.commit()
        return result.rowcount

    def _hash_token(self, token: str) -> str:
        return hmac.new(self._secret, token.encode("utf-8"), hashlib.sha256).hexdigest()

    def _delete(self, key: str) -> None:
        with self.engine.connect() as conn:
            conn.execute(_sessions.delete().where(_sessions.c.token_hash == key))
            conn.commit()

    def close(self) -> None:
        self.engine.dispose()
