"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, near-zero logic). Dataclasses own
domain shape; the directory, session store and service do the work.

Layer rule: no imports from api/.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class UserRecord:
    """A registered identity as held by the user directory.

    password_hash is the bcrypt output of PasswordHasher.hash(), never the
    plaintext. role is None for ordinary users; signup never assigns one.
    Records are immutable once created -- there is no update path.
    """

    username: str
    password_hash: str
    role: str | None = None
    id: int | None = None
    created_at: str | None = None


@dataclass(frozen=True)
class Credentials:
    """Username/password pair for the duration of one login or signup call.

    Never persisted. The password is excluded from repr() so an accidental
    log line or traceback cannot expose it.
    """

    username: str
    password: str = field(repr=False)


@dataclass(frozen=True)
class SessionPayload:
    """Minimal authenticated identity stored per session.

    Deliberately a projection of UserRecord: it has no password_hash field,
    so a payload can never carry one.
    """

    username: str
    role: str | None = None

    @classmethod
    def from_user(cls, user: UserRecord) -> SessionPayload:
        return cls(username=user.username, role=user.role)

    @classmethod
    def from_dict(cls, data: dict) -> SessionPayload:
        return cls(username=str(data["username"]), role=data.get("role"))

    def to_dict(self) -> dict:
        """Serialise for storage and for GET /profile. An absent role is omitted."""
        data: dict = {"username": self.username}
        if self.role is not None:
            data["role"] = self.role
        return data


@dataclass(frozen=True)
class Session:
    """A session token paired with the payload it maps to server-side."""

    token: str = field(repr=False)
    payload: SessionPayload
