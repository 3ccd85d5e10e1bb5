# This project was developed with assistance from AI tools.
"""Fixtures for functional tests.

The real app from ``src.main`` is a module singleton. ``_clean_overrides``
ensures dependency_overrides are cleared after every test so one test's
store never leaks into the next.
"""

from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from src.main import app as real_app
from src.services.clock import FixedClock
from tests.factories import NOW
from tests.fakes import InMemoryLeadStore, RecordingNotificationHook

from .mock_db import configure_app


@pytest.fixture(autouse=True)
def _clean_overrides():
    """Clear app dependency overrides after each test."""
    yield
    real_app.dependency_overrides.clear()


@pytest.fixture
def app():
    """Return the real FastAPI app with all routers mounted."""
    return real_app


@pytest.fixture
def store():
    return InMemoryLeadStore()


@pytest.fixture
def notifier():
    return RecordingNotificationHook()


@pytest.fixture
def make_client(app, store, notifier):
    """Factory fixture: wire a mock session and the in-memory store, return TestClient."""

    def _make(session: AsyncMock) -> TestClient:
        configure_app(app, session, store, FixedClock(NOW), notifier)
        return TestClient(app)

    return _make
