"""Shared fixtures for the Robot API client test suite."""

import httpx
import pytest

from robot_api.client.models import ClientConfig
from robot_api.client.robot import RobotClient
from robot_api.config.settings import get_settings
from robot_api.mock.server import create_app

MOCK_USERNAME = "test"
MOCK_PASSWORD = "test"


@pytest.fixture
def client_config() -> ClientConfig:
    """Credentials accepted by the mock service."""
    return ClientConfig(
        username=MOCK_USERNAME,
        password=MOCK_PASSWORD,
        base_url="http://test",
    )


@pytest.fixture
def mock_app():
    """A fresh mock Robot service with seeded account data."""
    return create_app(MOCK_USERNAME, MOCK_PASSWORD)


@pytest.fixture
async def robot(mock_app, client_config):
    """RobotClient talking to the in-process mock over ASGI transport."""
    client = RobotClient(client_config, transport=httpx.ASGITransport(app=mock_app))
    yield client
    await client.close()


@pytest.fixture
async def mock_http(mock_app):
    """Raw httpx client against the mock, for wire-level assertions."""
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=mock_app),
        base_url="http://test",
        auth=(MOCK_USERNAME, MOCK_PASSWORD),
    ) as c:
        yield c


@pytest.fixture
def override_settings(monkeypatch):
    """Factory fixture: set env vars and clear settings cache.

    Usage:
        override_settings(ROBOT_USERNAME="user", ROBOT_PASSWORD="secret")
    """
    def _override(**kwargs):
        for key, value in kwargs.items():
            monkeypatch.setenv(key.upper(), str(value))
        # Clear lru_cache so Settings re-reads env
        get_settings.cache_clear()

    yield _override

    # Always clear cache on teardown so other tests get fresh settings
    get_settings.cache_clear()
