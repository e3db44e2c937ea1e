"""
Pytest fixtures for the test suite.

Data-layer tests use an in-memory SQLite engine and a session that rolls back
after each test, so tests do not affect each other.

API tests build the FastAPI app without running its lifespan: the security
config, token codec and database are wired onto the app here, and the
database is seeded with the same demo data ``init_db`` writes.
"""
from __future__ import annotations

from pathlib import Path

import pytest
from fastapi import Request
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, select
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from itasset.authz.config import TokenConfig
from itasset.authz.tokens import TokenCodec


TEST_DB_URL = "sqlite:///:memory:"
TEST_SECRET = "test-secret-with-at-least-32-bytes-of-entropy"
TEST_PASSWORD = "test-password"
SECURITY_CONFIG_PATH = Path(__file__).resolve().parents[1] / "config" / "security_config.yaml"


@pytest.fixture
def engine():
    """Create a fresh in-memory SQLite engine for each test."""
    return create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        echo=False,
    )


@pytest.fixture
def tables(engine):
    """Create all ORM tables on the test engine."""
    from itasset.db import filters  # noqa: F401  (register the scope listener)
    from itasset.db.base import Base
    from itasset.models import inventory, security  # noqa: F401  (register tables)

    Base.metadata.create_all(bind=engine)
    return engine


@pytest.fixture
def db_session(tables):
    """
    Provide a Session bound to the test DB; roll back after each test.

    Use this in tests that need a database (e.g. data layer tests). The
    transaction is rolled back so the next test gets a clean state.
    """
    connection = tables.connect()
    transaction = connection.begin()
    TestSession = sessionmaker(
        bind=connection,
        autocommit=False,
        autoflush=False,
        class_=Session,
    )
    session = TestSession()
    yield session
    session.close()
    transaction.rollback()
    connection.close()


@pytest.fixture
def token_config():
    return TokenConfig(secret=TEST_SECRET, ttl_seconds=900)


@pytest.fixture
def codec(token_config):
    return TokenCodec(token_config)


# ---- API fixtures -----------------------------------------------------------------------


@pytest.fixture
def api_engine():
    """One shared in-memory database for every session the app opens."""
    from itasset.db import filters  # noqa: F401
    from itasset.db.base import Base
    from itasset.models import inventory, security  # noqa: F401

    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def api_sessionmaker(api_engine):
    return sessionmaker(bind=api_engine, autocommit=False, autoflush=False, class_=Session)


@pytest.fixture
def seeded(api_sessionmaker):
    """Seed demo data and return {email: user_id} plus {code: project_id}."""
    from itasset.db.init_db import seed
    from itasset.models.security import Project, User

    with api_sessionmaker() as db:
        seed(db)
        users = {u.email: u.id for u in db.scalars(select(User)).all()}
        projects = {p.code: p.id for p in db.scalars(select(Project)).all()}
    return {"users": users, "projects": projects}


@pytest.fixture
def app(api_sessionmaker, codec):
    from itasset.db.session import bind_request_scope, get_db
    from itasset.main import create_app
    from itasset.security.config import load_security_config
    from itasset.settings import Settings, get_settings

    application = create_app()
    application.state.security_config = load_security_config(SECURITY_CONFIG_PATH)
    application.state.token_codec = codec

    def override_get_db(request: Request):
        db = api_sessionmaker()
        try:
            bind_request_scope(db, request)
            yield db
        finally:
            db.close()

    application.dependency_overrides[get_db] = override_get_db
    application.dependency_overrides[get_settings] = lambda: Settings(demo_password=TEST_PASSWORD)
    return application


@pytest.fixture
def client(app, seeded):
    # Not used as a context manager: the lifespan (file DB + init_db) stays off.
    return TestClient(app)


@pytest.fixture
def demo_password():
    return TEST_PASSWORD


@pytest.fixture
def login(client):
    """Log in as ``email`` and return ready-to-use Authorization headers."""

    def _login(email: str) -> dict[str, str]:
        response = client.post("/auth/login", json={"email": email, "password": TEST_PASSWORD})
        assert response.status_code == 200, response.text
        return {"Authorization": f"Bearer {response.json()['access_token']}"}

    return _login
