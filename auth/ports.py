"""
auth/ports.py -- Collaborator contracts the auth core depends on.

AuthService and the access-control gates only ever talk to these Protocols.
The SQL-backed implementations live in auth/store.py and auth/sessions.py;
tests substitute MagicMocks or in-memory stores.

Both collaborators are assumed safe to call from concurrent request threads.
Their own locking/transaction discipline is their business, not the core's.
"""

from __future__ import annotations

from typing import Protocol

from auth.models import SessionPayload, UserRecord


class UserDirectory(Protocol):
    """Lookup and creation of user records."""

    def find_by_username(self, username: str) -> UserRecord | None:
        """Exact, case-sensitive lookup. None when no such user exists."""

    def insert(self, username: str, password_hash: str, role: str | None = None) -> UserRecord:
        """Create a user. Raises UserConflict if the username is taken."""


class SessionStore(Protocol):
    """Server-side mapping from an opaque session token to a SessionPayload."""

    def new_token(self) -> str:
        """Return a fresh, unguessable session token."""

    def get(self, token: str) -> SessionPayload | None:
        """Return the payload for token, or None if absent or expired."""

    def set(self, token: str, payload: SessionPayload) -> None:
        """Store payload under token, replacing any previous payload."""

    def destroy(self, token: str) -> None:
        """Forget token. A no-op for unknown tokens."""
