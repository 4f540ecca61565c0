"""
auth/cookies.py -- Session cookie transport.

The session token travels in a cookie. Its name, lifetime and `secure` flag
are deployment configuration (Settings); the rest is fixed:

  httponly=True:  JS cannot read the cookie (XSS mitigation).
  samesite="lax": cookie sent on same-site navigations and top-level GETs,
                  not on cross-site POSTs.
  max_age:        matches the server-side session lifetime so both expire
                  together.
"""

from __future__ import annotations

from core.config import get_settings


def set_session_cookie(response, token: str) -> None:
    """Write the session token as an httpOnly cookie on a Starlette response."""
    settings = get_settings()
    response.set_cookie(
        settings.session_cookie_name,
        value=token,
        httponly=True,
        samesite="lax",
        secure=settings.secure_cookies,
        max_age=settings.session_expire_seconds,
    )


def clear_session_cookie(response) -> None:
    settings = get_settings()
    response.delete_cookie(
        settings.session_cookie_name,
        httponly=True,
        samesite="lax",
        secure=settings.secure_cookies,
    )
