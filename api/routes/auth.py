"""
api/routes/auth.py -- Login, signup and logout endpoints.

Routes:
  POST /auth/login   -- password login; opens a session, sets cookie; 200 "ok"
  POST /auth/signup  -- register (no role); opens a session, sets cookie; 200 "ok"
  POST /auth/logout  -- destroys the current session, clears cookie; 200 "ok"

Failures are raised as AuthError subclasses by AuthService and rendered by
the handler in api/main.py:
  401 {"error": "User not found"}        unknown username
  401 {"error": "Incorrect password"}    wrong password
  400 {"error": "User already exists"}   signup with a taken username
  500 "Unknown error"                    password could not be hashed

Handlers are plain `def`: FastAPI runs them in its threadpool, so bcrypt
work does not block other requests on the event loop.
"""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from api.models import LoginRequest, SignupRequest
from auth.cookies import clear_session_cookie, set_session_cookie
from auth.dependencies import session_token
from auth.models import Credentials, Session
from auth.service import AuthService

# Auth policy: every route here is public -- login/signup must be reachable
# without a session, and clearing a session needs no prior auth.
router = APIRouter()


@router.post("/auth/login")
def login(request: Request, body: LoginRequest) -> JSONResponse:
    """Authenticate with username and password; set the session cookie."""
    service: AuthService = request.app.state.auth_service
    session = service.login(
        Credentials(username=body.username, password=body.password),
        previous_token=session_token(request),
    )
    return _session_response(session)


@router.post("/auth/signup")
def signup(request: Request, body: SignupRequest) -> JSONResponse:
    """Create an account and log it in. The account gets no role."""
    service: AuthService = request.app.state.auth_service
    session = service.signup(
        Credentials(username=body.username, password=body.password),
        previous_token=session_token(request),
    )
    return _session_response(session)


@router.post("/auth/logout")
def logout(request: Request) -> JSONResponse:
    """Destroy the server-side session and clear the cookie."""
    service: AuthService = request.app.state.auth_service
    service.logout(session_token(request))
    resp = JSONResponse(content="ok")
    clear_session_cookie(resp)
    return resp


def _session_response(session: Session) -> JSONResponse:
    resp = JSONResponse(content="ok")
    set_session_cookie(resp, session.token)
    resp.headers["Cache-Control"] = "no-store"
    return resp
