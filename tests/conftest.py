"""
Pytest configuration and shared fixtures for the receipt registry tests.

This conftest.py:
1. Adds the project root to sys.path and pins the environment before any
   application module is imported
2. Gives every test a fresh in-memory database and registry (or a file-backed
   one for multi-threaded tests)
3. Provides an API client wired to that registry and bearer tokens
"""

import os
import sys
from pathlib import Path

# =============================================================================
# Path and environment setup - must happen before any local imports
# =============================================================================

_PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))

TEST_SECRET = "test-secret"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = TEST_SECRET
os.environ.pop("RECEIPT_WEBHOOK_URL", None)

import pytest
from fastapi.testclient import TestClient
from jose import jwt

import dependencies
from database import build_engine, build_session_factory, init_db
from services import ReceiptRegistry
from services.access_gate import initialize


ADMIN = "0xADMIN"
OUTSIDER = "0xEVE"


def make_token(subject: str) -> str:
    return jwt.encode({"sub": subject}, TEST_SECRET, algorithm="HS256")


def auth_header(subject: str) -> dict:
    return {"Authorization": f"Bearer {make_token(subject)}"}


def issue_kwargs(**overrides) -> dict:
    """Arguments for a valid issuance; override any field."""
    kwargs = {
        "buyer": "0xB1",
        "issuer": "0xM1",
        "amount": 1_000000,
        "payment_reference": "tx123",
        "order_reference": "ord-1",
        "metadata_pointer": "ipfs://a",
    }
    kwargs.update(overrides)
    return kwargs


# =============================================================================
# Pytest Fixtures
# =============================================================================

@pytest.fixture
def engine():
    engine = build_engine("sqlite://")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture
def db(session_factory):
    """Session with registry state already initialized for ADMIN."""
    session = session_factory()
    initialize(session, ADMIN)
    yield session
    session.rollback()
    session.close()


@pytest.fixture
def registry(session_factory):
    registry = ReceiptRegistry(session_factory)
    registry.initialize(ADMIN)
    return registry


@pytest.fixture
def file_registry(tmp_path):
    """Registry over a SQLite file, so concurrent sessions get their own connections."""
    engine = build_engine(f"sqlite:///{tmp_path}/receipts.db")
    init_db(engine)
    registry = ReceiptRegistry(build_session_factory(engine))
    registry.initialize(ADMIN)
    yield registry
    engine.dispose()


@pytest.fixture
def client(registry, monkeypatch):
    from main import app

    monkeypatch.setattr(dependencies, "SECRET_KEY", TEST_SECRET)
    app.dependency_overrides[dependencies.get_registry] = lambda: registry
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers():
    return auth_header(ADMIN)


@pytest.fixture
def outsider_headers():
    return auth_header(OUTSIDER)
