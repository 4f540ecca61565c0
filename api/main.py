"""
api/main.py -- FastAPI application entry point for sessiongate.

Run with:      uvicorn asgi:app --reload
               python main.py serve

Middleware stack (outermost to innermost):
  1. TrustedHostMiddleware -- rejects requests with unexpected Host headers
  2. log_requests          -- one access-log line per request

Lifespan handles startup (stores, hasher, auth service, purge task) and
shutdown (cancel purge task, dispose engines) symmetrically.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager, suppress

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.models import HealthResponse
from api.routes.auth import router as auth_router
from api.routes.profile import router as profile_router
from auth.errors import AuthError
from auth.passwords import PasswordHasher
from auth.service import AuthService
from auth.sessions import SQLSessionStore
from auth.store import DEFAULT_DB_URL, SQLUserDirectory
from core.config import get_settings

VERSION = "0.1.0"

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("sessiongate.api")

_settings = get_settings()

# ---------------------------------------------------------------------------
# Background purge task
# ---------------------------------------------------------------------------


async def _purge_loop(app: FastAPI, interval: int) -> None:
    """Delete expired sessions every `interval` seconds.

    CancelledError from task.cancel() during shutdown propagates out of
    asyncio.sleep and unwinds the coroutine cleanly.
    """
    while True:
        await asyncio.sleep(interval)
        removed = await asyncio.to_thread(app.state.session_store.purge_expired)
        if removed:
            logger.info("Purged %d expired sessions", removed)


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Build the auth collaborators before the first request, tear down after the last."""
    settings = get_settings()
    db_url = settings.database_url or DEFAULT_DB_URL

    logger.info("sessiongate API starting up")
    app.state.user_store = SQLUserDirectory(db_url=db_url)
    app.state.session_store = SQLSessionStore(
        secret_key=settings.secret_key,
        db_url=db_url,
        ttl=settings.session_expire_seconds,
    )
    app.state.hasher = PasswordHasher(rounds=settings.bcrypt_rounds)
    app.state.auth_service = AuthService(app.state.user_store, app.state.session_store, app.state.hasher)
    logger.info(
        "Auth initialized (bcrypt_rounds=%d, session_ttl=%ds, has_users=%s)",
        settings.bcrypt_rounds,
        settings.session_expire_seconds,
        app.state.user_store.has_users(),
    )
    app.state.purge_task = asyncio.create_task(_purge_loop(app, settings.session_purge_interval_seconds))

    yield

    # Shutdown
    app.state.purge_task.cancel()
    with suppress(asyncio.CancelledError):
        await app.state.purge_task
    app.state.session_store.close()
    app.state.user_store.close()
    logger.info("sessiongate API shutdown complete")


# ---------------------------------------------------------------------------
# App instantiation
# ---------------------------------------------------------------------------

app = FastAPI(
    title="sessiongate",
    description="Credential login, server-side sessions and role gates.",
    version=VERSION,
    lifespan=lifespan,
)

app.add_middleware(TrustedHostMiddleware, allowed_hosts=_settings.allowed_hosts)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    ms = (time.perf_counter() - start) * 1000
    logger.info(
        "%s %s %d %.1fms %s",
        request.method,
        request.url.path,
        response.status_code,
        ms,
        request.client.host if request.client else "unknown",
    )
    return response


# ---------------------------------------------------------------------------
# Router registration
# ---------------------------------------------------------------------------

app.include_router(auth_router, tags=["Auth"])
app.include_router(profile_router, tags=["Profile"])


# ---------------------------------------------------------------------------
# Exception handlers
#
# Auth failures keep the exact bodies existing clients parse:
# {"error": "<message>"}, or a bare string for the hashing failure.
# ---------------------------------------------------------------------------


@app.exception_handler(AuthError)
async def auth_error_handler(request: Request, exc: AuthError) -> JSONResponse:
    """Render any AuthError raised by a gate or by AuthService."""
    response = JSONResponse(status_code=exc.status_code, content=exc.to_content())
    response.headers["Cache-Control"] = "no-store"
    return response


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Return 422 when the request body fails validation."""
    return JSONResponse(
        status_code=422,
        content={"error": "Request validation failed.", "detail": str(exc.errors())},
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all handler for unexpected server errors (e.g. storage unreachable).

    The raw exception goes to the log only, never to the response body.
    """
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": "An unexpected error occurred."})


# ---------------------------------------------------------------------------
# Health endpoint
# ---------------------------------------------------------------------------


@app.get("/health", tags=["Health"])
async def health() -> HealthResponse:
    """Return API liveness and current version."""
    return HealthResponse(version=VERSION)
