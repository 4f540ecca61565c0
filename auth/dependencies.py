"""
auth/dependencies.py -- Access-control gates as FastAPI Depends() helpers.

Gates:
  require_session      -- SessionGate. Resolves the session cookie through the
                          SessionStore; raises Unauthenticated (401) when there
                          is no token or it maps to no payload.
  require_role(role)   -- RoleGate factory. The returned dependency runs
                          require_session itself before comparing roles, so it
                          can be used alone and never sees a missing session.
                          Raises Forbidden (403) unless payload.role == role.

Gates only read. The one side effect is attaching the resolved payload to
request.state.session so later gates and the handler reuse it; the
SessionStore is never written here.

Compose gates on a route as an ordered list:
    @router.get("/admin", dependencies=[Depends(require_session), Depends(require_role("admin"))])

Layer rule: auth/dependencies.py may import from fastapi (for Request)
because this module is part of the FastAPI dependency injection system.
No imports from api/.
"""

from __future__ import annotations

from collections.abc import Callable

from fastapi import Request

from auth.errors import Forbidden, Unauthenticated
from auth.models import SessionPayload
from auth.ports import SessionStore
from core.config import get_settings


def session_token(request: Request) -> str | None:
    """Return the raw session token carried by the request, if any."""
    return request.cookies.get(get_settings().session_cookie_name) or None


def try_get_session(request: Request) -> SessionPayload | None:
    """Resolve the request's session payload. Returns None on any failure.

    Never raises -- callers that need a hard 401 should use require_session().
    """
    cached = getattr(request.state, "session", None)
    if cached is not None:
        return cached
    token = session_token(request)
    if token is None:
        return None
    sessions: SessionStore = request.app.state.session_store
    payload = sessions.get(token)
    if payload is not None:
        request.state.session = payload
    return payload


def require_session(request: Request) -> SessionPayload:
    """SessionGate: require an authenticated session.

    Use as a FastAPI dependency:
        @router.get("/protected")
        def route(session: SessionPayload = Depends(require_session)): ...
    """
    payload = try_get_session(request)
    if payload is None:
        raise Unauthenticated()
    return payload


def require_role(role: str) -> Callable[[Request], SessionPayload]:
    """RoleGate: build a dependency requiring an exact role match on the session."""

    def _gate(request: Request) -> SessionPayload:
        payload = require_session(request)
        if payload.role != role:
            raise Forbidden()
        return payload

    _gate.__name__ = f"require_role_{role}"
    return _gate
