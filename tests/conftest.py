"""
tests/conftest.py -- Shared test fixtures for Inkwell.

This module provides:
  - _make_test_stores(): isolated named shared-memory DBs for accounts + posts
  - _patch_lifespan(): wires test stores into app.state, bypassing real startup
  - api_client: TestClient plus a registered author and their bearer token

Design: Named shared-memory SQLite URIs (not plain :memory:) are required
because TestClient runs sync route handlers in a thread pool. Plain :memory:
DBs are per-connection and would present a blank schema to each worker
thread. The named URI format (file:name?mode=memory&cache=shared&uri=true)
shares one in-memory instance across all connections in the same process.

The DEBUG env var must be set before any api import so get_settings()
auto-generates SECRET_KEY in dev mode rather than raising.
"""

from __future__ import annotations

import os
from collections.abc import Generator
from contextlib import asynccontextmanager

# CRITICAL: Set DEBUG before any api/core import so get_settings() can
# auto-generate SECRET_KEY in dev mode instead of raising.
os.environ.setdefault("DEBUG", "true")
# TestClient sends Host: testserver, which production hosts never allow.
os.environ.setdefault("ALLOWED_HOSTS", '["localhost", "testserver"]')

import pytest
from fastapi.testclient import TestClient

from api.limiter import limiter
from api.main import app
from auth.service import AccountService
from auth.store import AccountStore
from auth.tokens import TokenIssuer
from blog.store import PostStore
from tests.factories import ApiContext, make_issuer

# Rate limits are covered by slowapi itself; they would only make
# registration-heavy test modules flaky here.
limiter.enabled = False


# ---------------------------------------------------------------------------
# Store helpers
# ---------------------------------------------------------------------------


def _make_test_stores(db_suffix: str) -> tuple[AccountStore, PostStore]:
    """Create isolated named shared-memory SQLite stores for test isolation.

    Both stores point at the same in-memory database, as they do in
    production. db_suffix keeps test modules from sharing state.
    """
    url = f"sqlite:///file:test_inkwell_{db_suffix}?mode=memory&cache=shared&uri=true"
    return AccountStore(url), PostStore(url)


def _patch_lifespan(account_store: AccountStore, post_store: PostStore, issuer: TokenIssuer):
    """Return an async context manager that replaces the real lifespan."""

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.token_issuer = issuer
        app.state.account_store = account_store
        app.state.post_store = post_store
        app.state.account_service = AccountService(account_store, issuer)
        yield

    return test_lifespan


# ---------------------------------------------------------------------------
# Module-scoped fixtures -- one TestClient per test module for speed
# ---------------------------------------------------------------------------


@pytest.fixture(scope="module")
def api_client(request) -> Generator[ApiContext, None, None]:
    """Yield an ApiContext for API integration tests.

    The TestClient uses the real FastAPI app with a patched lifespan so tests
    hit real route handlers but use isolated in-memory stores. One author
    ("testauthor" / "testpass123") is registered before the client starts.
    """
    suffix = request.module.__name__.rsplit(".", 1)[-1]
    account_store, post_store = _make_test_stores(suffix)
    issuer = make_issuer()

    service = AccountService(account_store, issuer)
    result = service.register("testauthor", "testauthor@example.com", "testpass123", "testpass123")

    app.router.lifespan_context = _patch_lifespan(account_store, post_store, issuer)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield ApiContext(
            client=client,
            token=result.token,
            account_id=result.account.id,
            account_store=account_store,
            post_store=post_store,
            issuer=issuer,
        )

    account_store.close()
    post_store.close()


@pytest.fixture
def account_store() -> Generator[AccountStore, None, None]:
    store = AccountStore("sqlite:///:memory:")
    yield store
    store.close()


@pytest.fixture
def service(account_store: AccountStore) -> AccountService:
    return AccountService(account_store, make_issuer())
