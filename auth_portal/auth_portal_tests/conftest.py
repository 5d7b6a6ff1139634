"""Shared fixtures: a fresh SQLite file and application per test."""
import pytest
from fastapi.testclient import TestClient

from auth_portal.auth_portal.auth_service.config import Settings
from auth_portal.auth_portal.auth_service.db import Database
from auth_portal.auth_portal.auth_service.main import create_app

TEST_SECRET = "test-secret-for-session-tokens-0123456789"


@pytest.fixture
def settings(tmp_path):
    return Settings(
        DATABASE_URL=f"sqlite:///{tmp_path / 'test.db'}",
        JWT_SECRET=TEST_SECRET,
        ENVIRONMENT="test",
    )


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def database(tmp_path):
    db = Database(f"sqlite:///{tmp_path / 'unit.db'}")
    db.init_db()
    yield db
    db.dispose()


@pytest.fixture
def db_session(database):
    session = database.SessionLocal()
    try:
        yield session
    finally:
        session.close()
