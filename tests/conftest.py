"""
conftest.py
===========
Shared fixtures: an isolated SQLite store per test and a TestClient whose
store and token service are swapped in through dependency overrides.
"""

import sys, os
# Ensure the package is discoverable by Python when running from /tests
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

import tempfile

# Settings are read at import time, so point them somewhere harmless first
_tmp_dir = tempfile.mkdtemp()
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_tmp_dir, 'default.db')}"
os.environ["ACCESS_TOKEN_SECRET"] = "test-secret"
os.environ["SEED_SERVICES"] = "false"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from doctors_portal.db import get_store, init_db, make_engine
from doctors_portal.guards import get_token_service
from doctors_portal.main import app
from doctors_portal.models import Base
from doctors_portal.store import Store
from doctors_portal.tokens import TokenService


@pytest.fixture
def session_factory(tmp_path):
    """Fresh database file per test."""
    engine = make_engine(f"sqlite:///{tmp_path / 'portal.db'}")
    init_db(Base, bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture
def store(session_factory):
    s = Store(session_factory())
    yield s
    s.close()


@pytest.fixture
def tokens():
    return TokenService("test-secret")


@pytest.fixture
def client(session_factory, tokens):
    """
    TestClient wired to the per-test database.
    Each request gets its own Store, as in production.
    """
    def override_store():
        s = Store(session_factory())
        try:
            yield s
        finally:
            s.close()

    app.dependency_overrides[get_store] = override_store
    app.dependency_overrides[get_token_service] = lambda: tokens
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def auth_header(tokens):
    """Build an Authorization header for `email`."""
    def build(email):
        return {"Authorization": f"Bearer {tokens.issue(email)}"}
    return build
