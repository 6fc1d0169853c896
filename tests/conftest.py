# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Isolated Settings (no .env file, known app key)
# - A fresh in-memory widget store per test
# - A Slack client wired to an httpx.MockTransport that records requests
# - A TestClient around the full widget service
# =============================================================================

import os

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# app.main builds a module-level app from the environment on import

os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("LOG_LEVEL", "DEBUG")

import httpx
import pytest
from fastapi.testclient import TestClient

from app.config import Settings
from app.main import create_app
from core.services.widget_store import InMemoryWidgetStore
from lib.slack_client import SlackClient

TEST_APP_NAME = "tester"
TEST_APP_KEY = "test-app-key"
TEST_SLACK_HOOK = "https://hooks.slack.test/services/T000/B000/XXXX"


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def settings():
    """Settings with a single known app key and no .env lookup."""
    return Settings(
        _env_file=None,
        SERVICE_NAME="widget",
        SERVICE_VERSION="0.1.0",
        APP_KEYS=f"{TEST_APP_NAME}:{TEST_APP_KEY}",
    )


@pytest.fixture
def auth_headers():
    """Authorization header carrying the test app key."""
    return {"Authorization": f"Bearer {TEST_APP_KEY}"}


@pytest.fixture
def store():
    return InMemoryWidgetStore()


@pytest.fixture
def slack_requests():
    """Requests received by the mock Slack webhook."""
    return []


@pytest.fixture
def slack(slack_requests):
    """SlackClient whose webhook always answers 200 "ok"."""

    def handler(request: httpx.Request) -> httpx.Response:
        slack_requests.append(request)
        return httpx.Response(200, text="ok")

    return SlackClient(
        hook=TEST_SLACK_HOOK,
        username="widget",
        transport=httpx.MockTransport(handler),
    )


@pytest.fixture
def app(settings, store, slack):
    return create_app(settings=settings, store=store, messenger=slack)


@pytest.fixture
def client(app):
    """TestClient with lifespan events enabled."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def sample_widget_data():
    """Sample widget payload for testing."""
    return {"name": "sprocket", "color": "blue", "size": 3}
