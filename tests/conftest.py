"""
tests/conftest.py -- Shared test fixtures for eliteapp.

This module provides:
  - make_service(): in-memory stores wrapped in an AccountService for unit tests
  - _make_test_stores(): isolated named shared-memory DBs for integration tests
  - _patch_lifespan(): wires test stores into app.state, bypassing real startup
  - api_client: TestClient plus an admin JWT for API integration tests

Design: Named shared-memory SQLite URIs (not plain :memory:) are required for
the TestClient because route handlers run in a thread pool. Plain :memory:
DBs are per-connection and would present a blank schema to each worker
thread.

Environment variables must be set before any auth/core import so
get_settings() sees them: DEBUG auto-generates SECRET_KEY, the login rate
limit is relaxed, and uploads go to a throwaway directory.
"""

from __future__ import annotations

import os
import tempfile
from collections.abc import Generator
from contextlib import asynccontextmanager

# CRITICAL: Set env before any auth/core import.
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("LOGIN_RATE_LIMIT", "1000/minute")
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="eliteapp-uploads-"))

import pytest
from fastapi.testclient import TestClient

from activity.store import ActivityStore
from api.main import app
from auth.accounts import AccountService
from auth.models import User
from auth.store import UserStore
from auth.tokens import create_access_token, hash_password
from core.status import SystemStatus

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "adminpass123"


def make_service() -> AccountService:
    """AccountService over fresh :memory: stores. Single-threaded use only."""
    return AccountService(UserStore("sqlite:///:memory:"), ActivityStore("sqlite:///:memory:"))


def _make_test_stores(db_suffix: str) -> tuple[UserStore, ActivityStore]:
    """Create isolated named shared-memory SQLite stores for test isolation.

    Args:
        db_suffix: Unique string appended to the DB name so test modules
                   don't share state.
    """
    users_url = f"sqlite:///file:test_users_{db_suffix}?mode=memory&cache=shared&uri=true"
    activity_url = f"sqlite:///file:test_activity_{db_suffix}?mode=memory&cache=shared&uri=true"
    return UserStore(users_url), ActivityStore(activity_url)


def _patch_lifespan(user_store: UserStore, activity_store: ActivityStore):
    """Return an async context manager that replaces the real lifespan."""

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.user_store = user_store
        app.state.activity_store = activity_store
        app.state.accounts = AccountService(user_store, activity_store)
        app.state.system_status = SystemStatus("Online")
        yield

    return test_lifespan


@pytest.fixture
def service() -> Generator[AccountService, None, None]:
    svc = make_service()
    yield svc
    svc.users.close()
    svc.activities.close()


@pytest.fixture(scope="module")
def api_client(request) -> Generator[tuple[TestClient, str, int], None, None]:
    """Yield (client, token, admin_id) for API integration tests.

    Each test module gets its own databases, named after the module. The
    admin account is created before the client starts and its token is
    ready for Authorization headers.
    """
    user_store, activity_store = _make_test_stores(request.module.__name__.replace(".", "_"))

    admin = User(
        name="Admin",
        email=ADMIN_EMAIL,
        role="admin",
        hashed_password=hash_password(ADMIN_PASSWORD),
    )
    uid = user_store.create_user(admin)
    token = create_access_token(uid)

    app.router.lifespan_context = _patch_lifespan(user_store, activity_store)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield client, token, uid

    activity_store.close()
    user_store.close()
