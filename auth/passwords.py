"""
auth/passwords.py -- Salted adaptive password hashing (bcrypt).

Security design decisions:
  bcrypt is used directly (no passlib wrapper). Every hash embeds its cost
  factor and a fresh 128-bit salt, so hashing the same password twice yields
  two different strings, and verify() needs nothing but the stored hash.

  The cost factor comes from Settings.bcrypt_rounds. Raising it strengthens
  new hashes without changing verify()'s interface; existing hashes keep
  verifying at the cost they were created with.

  bcrypt.checkpw() recomputes the hash and compares it in constant time, so
  a mismatch does not leak how many leading bytes matched.

  dummy_hash is a hash of a throwaway password at the configured cost. The
  login flow verifies against it when a username is unknown so that "no such
  user" and "wrong password" take comparable time.

Layer rule: no imports from api/.
"""

from __future__ import annotations

import logging
import secrets

import bcrypt

from auth.errors import HashingError

logger = logging.getLogger("sessiongate.auth")

# bcrypt only reads the first 72 bytes; bcrypt >= 5 rejects anything longer.
MAX_PASSWORD_BYTES = 72


class PasswordHasher:
    """Hash and verify passwords with a tunable bcrypt work factor.

    Usage:
        hasher = PasswordHasher(rounds=12)
        stored = hasher.hash("secret")
        hasher.verify("secret", stored)   # True
        hasher.verify("nope", stored)     # False
    """

    def __init__(self, rounds: int = 12) -> None:
        self.rounds = rounds
        # Computed up front so the first unknown-username login does not pay
        # for an extra bcrypt run.
        self.dummy_hash: str = self.hash(secrets.token_hex(16))
        logger.debug("Timing-equalisation hash prepared (rounds=%d)", self.rounds)

    def hash(self, plain: str) -> str:
        """Return a bcrypt hash of plain.

        Raises HashingError on missing/empty input, on input longer than
        bcrypt's 72-byte limit (never silently truncated), or when bcrypt
        rejects the input.
        """
        if not plain:
            raise HashingError("password is missing or empty")
        encoded = plain.encode("utf-8")
        if len(encoded) > MAX_PASSWORD_BYTES:
            raise HashingError(f"password is longer than {MAX_PASSWORD_BYTES} bytes")
        try:
            hashed = bcrypt.hashpw(encoded, bcrypt.gensalt(rounds=self.rounds))
        except (ValueError, TypeError) as exc:
            raise HashingError(str(exc)) from exc
        return hashed.decode("utf-8")

    def verify(self, plain: str, hashed: str) -> bool:
        """Return True iff plain matches hashed.

        A mismatch is a normal False. A password over 72 bytes can never have
        been hashed, so it is a mismatch too -- bcrypt still runs on its first
        72 bytes to keep the timing. A malformed hash or a primitive failure
        raises HashingError.
        """
        if not hashed:
            raise HashingError("stored hash is missing")
        if not plain:
            return False
        encoded = plain.encode("utf-8")
        too_long = len(encoded) > MAX_PASSWORD_BYTES
        try:
            matched = bcrypt.checkpw(encoded[:MAX_PASSWORD_BYTES], hashed.encode("utf-8"))
        except (ValueError, TypeError) as exc:
            raise HashingError(str(exc)) from exc
        return matched and not too_long
