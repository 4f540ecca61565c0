"""
auth/errors.py -- Error taxonomy for authentication and authorization.

Two tiers:
  Collaborator errors (HashingError, UserConflict) are raised by the hasher
  and the user directory. They describe what went wrong in a primitive and
  carry no HTTP meaning.

  Protocol errors (AuthError subclasses) are raised by AuthService and the
  access-control gates. Each carries the status code and client-visible
  message the API layer renders, so route code never picks status codes for
  auth failures itself.

Known weakness: UserNotFound and IncorrectPassword expose different messages,
which lets a client tell whether a username is registered. The distinction is
kept for compatibility with existing clients of the login endpoint; response
timing is equalised in AuthService.login().

Layer rule: no imports from api/.
"""

from __future__ import annotations


class HashingError(Exception):
    """The password hashing primitive failed or was given unusable input."""


class UserConflict(Exception):
    """The user directory already holds a record with this username."""

    def __init__(self, username: str) -> None:
        super().__init__(f"username already taken: {username!r}")
        self.username = username


class AuthError(Exception):
    """Base class for failures that terminate a request with a client response."""

    status_code: int = 401
    message: str = "Unauthorized"

    def __init__(self, message: str | None = None) -> None:
        if message is not None:
            self.message = message
        super().__init__(self.message)

    def to_content(self) -> dict | str:
        """Return the JSON body for this error."""
        return {"error": self.message}


class Unauthenticated(AuthError):
    """No session, or the session token does not resolve to a payload."""

    status_code = 401
    message = "Please log in"


class Forbidden(AuthError):
    """A valid session whose role does not match the required role."""

    status_code = 403
    message = "Not authorized for this content"


class UserNotFound(AuthError):
    status_code = 401
    message = "User not found"


class IncorrectPassword(AuthError):
    status_code = 401
    message = "Incorrect password"


class UserAlreadyExists(AuthError):
    status_code = 400
    message = "User already exists"


class HashingFailure(AuthError):
    """Server-side hashing failure. Rendered as a bare JSON string, not an object."""

    status_code = 500
    message = "Unknown error"

    def to_content(self) -> dict | str:
        return self.message
