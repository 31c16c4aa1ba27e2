"""
tests/conftest.py -- Shared test fixtures for LifeLink.

This module provides:
  - engine:        fresh in-memory SQLite engine with the schema, per test
  - user_store / catalog / drive_store: stores on that engine
  - api_client:    TestClient on the real app with a patched lifespan
  - inline_client: the same app wired with inline-location stores
  - make_user:     signs a new user up through the API and returns auth headers

Design: API tests use named shared-memory SQLite URIs (not plain :memory:)
because TestClient runs sync route handlers in a thread pool. Plain :memory:
DBs are per-connection and would present a blank schema to each worker thread.

DEBUG must be set before any app import so get_settings() auto-generates
SECRET_KEY instead of raising. The login rate limit is raised so the suite
can sign up and log in many users from the same client address.
"""

from __future__ import annotations

import os
import uuid
from collections.abc import Callable, Generator
from contextlib import asynccontextmanager

# CRITICAL: set before any api/auth/core import.
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("LOGIN_RATE_LIMIT", "1000/minute")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.engine import Engine

from api.main import app, init_stores
from auth.store import UserStore
from core.db import make_engine
from drives.locations import LocationCatalog, resolver_for
from drives.store import DriveStore

TEST_PASSWORD = "secret1"


# ---------------------------------------------------------------------------
# Unit-test fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def engine() -> Generator[Engine, None, None]:
    eng = make_engine("sqlite:///:memory:")
    yield eng
    eng.dispose()


@pytest.fixture
def user_store(engine: Engine) -> UserStore:
    return UserStore(engine)


@pytest.fixture
def catalog(engine: Engine) -> LocationCatalog:
    cat = LocationCatalog(engine)
    cat.seed()
    return cat


@pytest.fixture
def drive_store(engine: Engine, catalog: LocationCatalog) -> DriveStore:
    return DriveStore(engine, resolver_for("catalog"))


@pytest.fixture
def inline_store(engine: Engine, catalog: LocationCatalog) -> DriveStore:
    return DriveStore(engine, resolver_for("inline"))


# ---------------------------------------------------------------------------
# API fixtures
# ---------------------------------------------------------------------------


def _patch_lifespan(engine: Engine, location_mode: str = "catalog"):
    """Return a lifespan that wires the test engine into app.state."""

    @asynccontextmanager
    async def test_lifespan(app):
        init_stores(app, engine, location_mode)
        yield

    return test_lifespan


def _client_for(request, location_mode: str) -> Generator[TestClient, None, None]:
    name = f"{request.module.__name__}_{location_mode}".replace(".", "_")
    engine = make_engine(f"sqlite:///file:{name}?mode=memory&cache=shared&uri=true")
    app.router.lifespan_context = _patch_lifespan(engine, location_mode)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield client

    engine.dispose()


@pytest.fixture(scope="module")
def api_client(request) -> Generator[TestClient, None, None]:
    """Yield a TestClient on the real app backed by an isolated shared-memory DB.

    One client per test module; the DB name includes the module name so
    modules never see each other's rows.
    """
    yield from _client_for(request, "catalog")


@pytest.fixture(scope="module")
def inline_client(request) -> Generator[TestClient, None, None]:
    """Same as api_client but with LOCATION_MODE=inline stores.

    app.state is shared, so a module uses either this or api_client, not both.
    """
    yield from _client_for(request, "inline")


@pytest.fixture
def make_user(api_client: TestClient) -> Callable[..., tuple[dict, str]]:
    """Return a factory that signs up and logs in a fresh user.

    The factory returns (headers, email) where headers carries the bearer
    token for that user.
    """

    def _make(email: str | None = None, password: str = TEST_PASSWORD) -> tuple[dict, str]:
        email = email or f"user-{uuid.uuid4().hex[:10]}@example.com"
        resp = api_client.post("/api/auth/signup", json={"email": email, "password": password})
        assert resp.status_code == 201, f"signup failed: {resp.status_code} {resp.text}"
        resp = api_client.post("/api/auth/login", json={"email": email, "password": password})
        assert resp.status_code == 200, f"login failed: {resp.status_code} {resp.text}"
        return {"Authorization": f"Bearer {resp.json()['token']}"}, email

    return _make
