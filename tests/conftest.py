"""
tests/conftest.py -- Shared test fixtures for sessiongate.

This module provides:
  - hasher: a PasswordHasher at bcrypt's minimum cost (fast tests)
  - stores: isolated in-memory user directory + session store per test
  - _patch_lifespan(): wires test collaborators into app.state, bypassing real startup
  - api_client: TestClient on the real app, with an "root" admin account seeded

Design: Named shared-memory SQLite URIs (not plain :memory:) are required
because TestClient runs `def` route handlers in a thread pool. Plain :memory:
DBs are per-connection and would present a blank schema to each worker thread.
The named URI format (file:name?mode=memory&cache=shared&uri=true) shares one
in-memory instance across all connections in the same process. Each test gets
a unique name, so no state leaks between tests.

DEBUG, BCRYPT_ROUNDS and ALLOWED_HOSTS must be set before any app import so
get_settings() picks them up on first call.
"""

from __future__ import annotations

import asyncio
import os
from collections.abc import Generator
from contextlib import asynccontextmanager
from uuid import uuid4

# CRITICAL: Set before any auth/core/api import -- get_settings() is cached.
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("ALLOWED_HOSTS", '["testserver", "localhost"]')

import pytest
from fastapi.testclient import TestClient

from api.main import app
from auth.passwords import PasswordHasher
from auth.service import AuthService
from auth.sessions import SQLSessionStore
from auth.store import SQLUserDirectory
from core.config import get_settings

ADMIN_USERNAME = "root"
ADMIN_PASSWORD = "rootpass"


def memory_url(name: str) -> str:
    return f"sqlite:///file:{name}_{uuid4().hex}?mode=memory&cache=shared&uri=true"


@pytest.fixture
def hasher() -> PasswordHasher:
    return PasswordHasher(rounds=4)


@pytest.fixture
def stores() -> Generator[tuple[SQLUserDirectory, SQLSessionStore], None, None]:
    """Yield (users, sessions) backed by fresh named shared-memory databases."""
    users = SQLUserDirectory(db_url=memory_url("test_users"))
    sessions = SQLSessionStore(secret_key=get_settings().secret_key, db_url=memory_url("test_sessions"), ttl=3600)
    yield users, sessions
    users.close()
    sessions.close()


def _patch_lifespan(users: SQLUserDirectory, sessions: SQLSessionStore, hasher: PasswordHasher):
    """Return an async context manager that replaces the real lifespan.

    The purge_task is a long-sleeping coroutine standing in for the real
    purge loop (a real asyncio.Task is required; MagicMock would fail on
    .cancel()).
    """

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.user_store = users
        app.state.session_store = sessions
        app.state.hasher = hasher
        app.state.auth_service = AuthService(users, sessions, hasher)
        app.state.purge_task = asyncio.create_task(asyncio.sleep(99999))
        yield
        app.state.purge_task.cancel()

    return test_lifespan


@pytest.fixture
def api_client(stores, hasher) -> Generator[TestClient, None, None]:
    """Yield a TestClient on the real app with isolated stores.

    An admin account (root / rootpass, role "admin") exists before the
    client starts. The client keeps cookies between requests, like a browser.
    """
    users, sessions = stores
    users.insert(ADMIN_USERNAME, hasher.hash(ADMIN_PASSWORD), role="admin")

    app.router.lifespan_context = _patch_lifespan(users, sessions, hasher)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield client
