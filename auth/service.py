"""
auth/service.py -- Login and signup orchestration.

AuthService ties the three collaborators together:
  UserDirectory   -- who exists, and with which hash
  PasswordHasher  -- bcrypt hash/verify
  SessionStore    -- token -> SessionPayload

Each flow is a chain of steps where every step either returns a value or
raises. A raised error ends the flow, so a failed hash can never reach the
directory and a failed insert can never reach the session store.

Timing equalisation:
  login() runs bcrypt whether or not the username exists. Unknown usernames
  are verified against PasswordHasher.dummy_hash, so the response time does
  not reveal which check failed. The stored hash of a real user is only ever
  touched when that user exists.

Session rotation:
  A successful login/signup always issues a new token. If the request came
  in with a token already, that session is destroyed first.

All methods are synchronous and CPU-bound (bcrypt). The API layer calls them
from plain `def` route handlers, which FastAPI runs in its worker threadpool,
so hashing never blocks the event loop.

Layer rule: no imports from api/.
"""

from __future__ import annotations

import logging

from auth.errors import (
    HashingError,
    HashingFailure,
    IncorrectPassword,
    UserAlreadyExists,
    UserConflict,
    UserNotFound,
)
from auth.models import Credentials, Session, SessionPayload
from auth.passwords import PasswordHasher
from auth.ports import SessionStore, UserDirectory

logger = logging.getLogger("sessiongate.auth")


class AuthService:
    """Credential checks and session establishment for login/signup.

    Usage:
        service = AuthService(users, sessions, PasswordHasher(rounds=12))
        session = service.signup(Credentials("alice", "secret"))
        session = service.login(Credentials("alice", "secret"), previous_token=session.token)
    """

    def __init__(self, users: UserDirectory, sessions: SessionStore, hasher: PasswordHasher) -> None:
        self.users = users
        self.sessions = sessions
        self.hasher = hasher

    def login(self, credentials: Credentials, previous_token: str | None = None) -> Session:
        """Verify credentials and open a session.

        Raises:
            UserNotFound:      no user with that username.
            IncorrectPassword: user exists, password does not match.
            HashingFailure:    the stored hash is malformed or bcrypt failed.
        """
        user = self.users.find_by_username(credentials.username)
        if user is None:
            # Equalize timing -- do NOT return before running bcrypt.
            self._verify(credentials.password, self.hasher.dummy_hash)
            logger.info("Login rejected: unknown user")
            raise UserNotFound()

        if not self._verify(credentials.password, user.password_hash):
            logger.info("Login rejected: incorrect password for %r", user.username)
            raise IncorrectPassword()

        session = self._establish(SessionPayload.from_user(user), previous_token)
        logger.info("Login succeeded for %r", user.username)
        return session

    def signup(self, credentials: Credentials, previous_token: str | None = None) -> Session:
        """Register a new user and open a session for them.

        The new user has no role. Steps run strictly in order
        hash -> insert -> session, and stop at the first failure.

        Raises:
            HashingFailure:    the password could not be hashed; nothing was inserted.
            UserAlreadyExists: the username is taken; no session was written.
        """
        try:
            password_hash = self.hasher.hash(credentials.password)
        except HashingError as exc:
            logger.warning("Signup aborted: password hashing failed (%s)", exc)
            raise HashingFailure() from exc

        try:
            user = self.users.insert(credentials.username, password_hash)
        except UserConflict as exc:
            logger.info("Signup rejected: username %r already exists", credentials.username)
            raise UserAlreadyExists() from exc

        session = self._establish(SessionPayload(username=user.username), previous_token)
        logger.info("Signup succeeded for %r", user.username)
        return session

    def logout(self, token: str | None) -> None:
        """Destroy the session behind token, if there is one."""
        if token:
            self.sessions.destroy(token)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _verify(self, plain: str, hashed: str) -> bool:
        try:
            return self.hasher.verify(plain, hashed)
        except HashingError as exc:
            logger.error("Password verification failed: %s", exc)
            raise HashingFailure() from exc

    def _establish(self, payload: SessionPayload, previous_token: str | None) -> Session:
        if previous_token:
            self.sessions.destroy(previous_token)
        token = self.sessions.new_token()
        self.sessions.set(token, payload)
        return Session(token=token, payload=payload)
