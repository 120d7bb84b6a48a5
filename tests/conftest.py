"""Shared fixtures: in-memory database and authenticated clients."""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from household_meter.core.config import settings
from household_meter.core.database import Base, get_db
from household_meter.main import app
from tests.factories import make_token


@pytest.fixture
def test_db():
    """Create an in-memory test database."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    db = testing_session_local()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def client_for(test_db):
    """Factory for test clients authenticated as a given user."""

    def override_get_db():
        try:
            yield test_db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    def _client(username: str | None = None, token: str | None = None) -> TestClient:
        cookies = {}
        if token is None and username is not None:
            token = make_token(username)
        if token is not None:
            cookies[settings.AUTH_COOKIE_NAME] = token
        return TestClient(app, cookies=cookies)

    yield _client
    app.dependency_overrides.clear()


@pytest.fixture
def alice(client_for) -> TestClient:
    return client_for("alice")


@pytest.fixture
def bob(client_for) -> TestClient:
    return client_for("bob")
