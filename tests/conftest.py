"""
tests/conftest.py -- Shared test fixtures for the forum backend.

This module provides:
  - FakeClock / clock: a controllable UTC clock for expiry tests
  - user_store, forum_store: fresh in-memory stores per test
  - _make_test_stores(): named shared-memory stores for API tests
  - _patch_lifespan(): wires test stores into app.state, bypassing real startup
  - api_client: TestClient plus sign-in tokens for a nonadmin and an admin

Design: Named shared-memory SQLite URIs (not plain :memory:) are required
for the API fixture because TestClient runs route handlers in a thread pool.
Plain :memory: DBs are per-connection and would present a blank schema to
each worker thread. Unit fixtures stay on the calling thread, so plain
:memory: is enough there.

DEBUG and BCRYPT_ROUNDS must be set before any auth module import:
auth/tokens.py reads get_settings() at import time.
"""

from __future__ import annotations

import os
from collections.abc import Generator
from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone

# CRITICAL: set before any auth/core import so get_settings() can
# auto-generate SECRET_KEY and tests hash passwords at the minimum cost.
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import pytest
from fastapi.testclient import TestClient

from api.main import app, wire_services
from auth.models import Role
from auth.service import UserService
from auth.store import UserStore
from forum.store import ForumStore

# ---------------------------------------------------------------------------
# Clock
# ---------------------------------------------------------------------------


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **delta: float) -> None:
        self.now += timedelta(**delta)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


# ---------------------------------------------------------------------------
# Unit-test stores
# ---------------------------------------------------------------------------


@pytest.fixture
def user_store() -> Generator[UserStore, None, None]:
    s = UserStore("sqlite:///:memory:")
    yield s
    s.close()


@pytest.fixture
def forum_store() -> Generator[ForumStore, None, None]:
    s = ForumStore("sqlite:///:memory:")
    yield s
    s.close()


# ---------------------------------------------------------------------------
# API store helpers
# ---------------------------------------------------------------------------


def _make_test_stores(db_suffix: str) -> tuple[UserStore, ForumStore]:
    """Create named shared-memory SQLite stores for one test module.

    Both stores open the same URL, as they do in production with
    DATABASE_URL; their tables do not overlap.

    Args:
        db_suffix: Unique string appended to the DB name so test modules
                   don't share state (e.g. 'test_api_routes').
    """
    url = f"sqlite:///file:test_forum_{db_suffix}?mode=memory&cache=shared&uri=true"
    return UserStore(db_url=url), ForumStore(db_url=url)


def _patch_lifespan(user_store: UserStore, forum_store: ForumStore):
    """Return an async context manager that replaces the real lifespan.

    Runs the same wire_services() as production so routes see the real
    object graph, only over the isolated test DBs.
    """

    @asynccontextmanager
    async def test_lifespan(app):
        wire_services(app, user_store, forum_store)
        yield

    return test_lifespan


# ---------------------------------------------------------------------------
# Module-scoped fixtures -- one TestClient per test module for speed
# ---------------------------------------------------------------------------


@pytest.fixture(scope="module")
def api_client(request) -> Generator[tuple[TestClient, dict[str, str]], None, None]:
    """Yield (client, tokens) for API integration tests.

    Two accounts exist before the client starts:
      alice / alicepass123  -- nonadmin
      root  / rootpass123   -- admin
    tokens maps each username to a live access token. Tests that sign out
    must sign in again for their own token instead of spending these.
    """
    user_store, forum_store = _make_test_stores(request.module.__name__.rsplit(".", 1)[-1])

    users = UserService(user_store)
    users.signup("alice", "alice@example.com", "alicepass123", first_name="Alice", last_name="Ng")
    users.signup("root", "root@example.com", "rootpass123", role=Role.ADMIN)
    tokens = {
        "alice": users.signin("alice", "alicepass123").access_token,
        "root": users.signin("root", "rootpass123").access_token,
    }

    app.router.lifespan_context = _patch_lifespan(user_store, forum_store)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield client, tokens

    forum_store.close()
    user_store.close()
