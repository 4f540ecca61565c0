"""
api/routes/profile.py -- Session-gated endpoints.

Routes:
  GET /profile  -- SessionGate; returns the session payload as JSON
  GET /admin    -- SessionGate then RoleGate("admin"); returns "ok"

Gate failures render as:
  401 {"error": "Please log in"}
  403 {"error": "Not authorized for this content"}
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from auth.dependencies import require_role, require_session
from auth.models import SessionPayload

router = APIRouter()


@router.get("/profile")
def profile(session: SessionPayload = Depends(require_session)) -> JSONResponse:
    """Return the current session payload (username, and role when set)."""
    return JSONResponse(content=session.to_dict())


@router.get("/admin", dependencies=[Depends(require_session), Depends(require_role("admin"))])
def admin() -> JSONResponse:
    """Admin-only content."""
    return JSONResponse(content="ok")
