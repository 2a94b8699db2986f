"""Tests for robot_api/client/factory.py — default client singleton."""

import pytest

import robot_api.client.factory as factory_mod
from robot_api.client.errors import MissingPasswordError, MissingUsernameError
from robot_api.client.robot import RobotClient


@pytest.fixture(autouse=True)
def reset_client_singleton(monkeypatch):
    """Reset the factory singleton between tests."""
    monkeypatch.setattr(factory_mod, "_client", None)
    yield
    monkeypatch.setattr(factory_mod, "_client", None)


class TestGetDefaultClient:

    def test_built_from_settings(self, override_settings):
        override_settings(
            ROBOT_USERNAME="user",
            ROBOT_PASSWORD="secret",
            ROBOT_BASE_URL="http://localhost:8080",
            ROBOT_TIMEOUT="5",
        )
        client = factory_mod.get_default_client()
        assert isinstance(client, RobotClient)
        assert client.config.username == "user"
        assert client.config.base_url == "http://localhost:8080"
        assert client.config.timeout == 5.0

    def test_singleton_returns_same_instance(self, override_settings):
        override_settings(ROBOT_USERNAME="user", ROBOT_PASSWORD="secret")
        assert factory_mod.get_default_client() is factory_mod.get_default_client()

    def test_missing_username(self, override_settings):
        override_settings(ROBOT_USERNAME="", ROBOT_PASSWORD="secret")
        with pytest.raises(MissingUsernameError):
            factory_mod.get_default_client()

    def test_missing_password(self, override_settings):
        override_settings(ROBOT_USERNAME="user", ROBOT_PASSWORD="")
        with pytest.raises(MissingPasswordError):
            factory_mod.get_default_client()

    def test_explicit_clients_have_own_registry(self, override_settings):
        override_settings(ROBOT_USERNAME="user", ROBOT_PASSWORD="secret")
        default = factory_mod.get_default_client()
        default.register_server("1.2.3.4")
        other = RobotClient({"username": "user", "password": "secret"})
        assert "1.2.3.4" not in other.servers


class TestCloseDefaultClient:

    async def test_close_resets_singleton(self, override_settings):
        override_settings(ROBOT_USERNAME="user", ROBOT_PASSWORD="secret")
        first = factory_mod.get_default_client()
        await factory_mod.close_default_client()
        assert factory_mod._client is None
        assert factory_mod.get_default_client() is not first

    async def test_close_without_client(self):
        await factory_mod.close_default_client()
        assert factory_mod._client is None
