"""Test fixtures for API tests."""
import time

import jwt
import pytest
from fastapi.testclient import TestClient

from app.config import get_settings
from app.database import get_db
from app.main import app

TEST_JWT_SECRET = "test-secret-with-enough-length-for-hs256"


@pytest.fixture(autouse=True)
def jwt_settings(monkeypatch):
    """Point token verification at a known secret."""
    settings = get_settings()
    monkeypatch.setattr(settings, "AUTH_JWT_SECRET", TEST_JWT_SECRET)
    monkeypatch.setattr(settings, "AUTH_JWT_AUDIENCE", "authenticated")
    monkeypatch.setattr(settings, "AUTH_JWT_ALGORITHM", "HS256")
    return settings


@pytest.fixture
def make_token():
    """Factory for signed access tokens."""
    def _create(user_id, ttl_seconds=3600, secret=TEST_JWT_SECRET, **claims):
        now = int(time.time())
        payload = {
            "sub": str(user_id),
            "aud": "authenticated",
            "iat": now,
            "exp": now + ttl_seconds,
            **claims,
        }
        return jwt.encode(payload, secret, algorithm="HS256")
    return _create


@pytest.fixture
def auth_headers(make_token):
    def _create(user):
        return {"Authorization": f"Bearer {make_token(user.id, email=user.email)}"}
    return _create


@pytest.fixture
def client(engine, db):
    """Create a TestClient with overridden database dependency.

    Requires both engine (to ensure tables are created) and db (the session).
    """

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    # Clean up
    app.dependency_overrides.clear()
