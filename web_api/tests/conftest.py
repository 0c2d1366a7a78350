# web_api/tests/conftest.py
"""Pytest fixtures for web API tests."""

import pytest
from fastapi.testclient import TestClient

TEST_API_KEY = "test-scheduler-key"


@pytest.fixture(autouse=True)
def scheduler_api_key(monkeypatch):
    """Configure the trigger API key for every test in web_api/tests/."""
    monkeypatch.setenv("SCHEDULER_API_KEY", TEST_API_KEY)
    return TEST_API_KEY


@pytest.fixture
def client():
    """
    Test client for the FastAPI app.

    Not used as a context manager, so the lifespan (env checks, scheduler,
    database) does not run.
    """
    from main import app

    return TestClient(app)


@pytest.fixture
def auth_headers():
    return {"X-API-Key": TEST_API_KEY}
