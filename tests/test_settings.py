"""Tests for robot_api/config/settings.py — Settings and has_credentials."""

from robot_api.config.settings import DEFAULT_BASE_URL, get_settings


class TestSettings:

    def test_defaults(self, override_settings, monkeypatch):
        for name in ("ROBOT_USERNAME", "ROBOT_PASSWORD", "ROBOT_BASE_URL", "ROBOT_TIMEOUT"):
            monkeypatch.delenv(name, raising=False)
        override_settings()
        s = get_settings()
        assert s.robot_base_url == DEFAULT_BASE_URL
        assert s.robot_timeout == 1.0
        assert s.robot_response_format == "json"
        assert s.mock_port == 8080
        assert s.log_level == "INFO"

    def test_env_override(self, override_settings):
        override_settings(
            ROBOT_USERNAME="user",
            ROBOT_PASSWORD="secret",
            ROBOT_TIMEOUT="2.5",
            MOCK_PORT="9090",
        )
        s = get_settings()
        assert s.robot_username == "user"
        assert s.robot_password == "secret"
        assert s.robot_timeout == 2.5
        assert s.mock_port == 9090

    def test_has_credentials(self, override_settings):
        override_settings(ROBOT_USERNAME="user", ROBOT_PASSWORD="secret")
        assert get_settings().has_credentials is True

    def test_missing_password_means_no_credentials(self, override_settings):
        override_settings(ROBOT_USERNAME="user", ROBOT_PASSWORD="")
        assert get_settings().has_credentials is False

    def test_cached(self, override_settings):
        override_settings()
        assert get_settings() is get_settings()
