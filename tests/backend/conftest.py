# tests/backend/conftest.py

import pytest
from fastapi.testclient import TestClient

from backend.config import settings
from backend.main import app
from backend.utils.dependencies import get_redis_client


@pytest.fixture(autouse=True)
def no_api_token(monkeypatch):
    """Tests start with the insecure default; token tests set their own secret."""
    monkeypatch.setattr(settings, "api_token", None)


@pytest.fixture
def test_client(fake_redis) -> TestClient:
    """
    A TestClient whose requests hit the in-memory Redis instead of a real server.
    The lifespan is not run, so no Redis connection or tracing exporter is set up.
    """
    app.dependency_overrides[get_redis_client] = lambda: fake_redis
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


@pytest.fixture
def secret_token(monkeypatch) -> str:
    monkeypatch.setattr(settings, "api_token", "secret")
    return "secret"
