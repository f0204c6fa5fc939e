# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# Environment is set before the application modules are imported: auth.py
# reads BCRYPT_ROUNDS at import time and database.py builds its engine from
# DATABASE_URL.
#
# Every test gets its own in-memory SQLite database, wired into the app by
# overriding the get_session dependency.
# =============================================================================

import os

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session

from auth import create_access_token, get_password_hash
from database import get_session, init_db, make_engine
from main import app
from models import User


# =============================================================================
# Database
# =============================================================================

@pytest.fixture
def engine():
    # one shared connection, otherwise every session sees its own empty database
    engine = make_engine("sqlite://", poolclass=StaticPool)
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


# =============================================================================
# HTTP client
# =============================================================================

@pytest.fixture
def client(engine):
    """TestClient whose requests run against the in-memory database."""
    def _session():
        with Session(engine) as s:
            yield s

    app.dependency_overrides[get_session] = _session
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def lenient_client(client):
    """Same app, but 500s come back as responses instead of being re-raised."""
    return TestClient(app, raise_server_exceptions=False)


# =============================================================================
# Users and tokens
# =============================================================================

@pytest.fixture
def make_user(session):
    def _make(username="alice", email="alice@example.com", password="secret"):
        user = User(username=username, email=email, password_hash=get_password_hash(password))
        session.add(user)
        session.commit()
        session.refresh(user)
        return user
    return _make


def bearer(user_id) -> dict:
    token = create_access_token({"sub": str(user_id)})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def user(make_user):
    return make_user()


@pytest.fixture
def headers_for():
    return bearer


@pytest.fixture
def auth_headers(user):
    return bearer(user.id)
