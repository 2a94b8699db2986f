"""Application settings loaded from environment variables."""

from functools import lru_cache

from pydantic_settings import BaseSettings

DEFAULT_BASE_URL = "https://robot-ws.your-server.de"


class Settings(BaseSettings):
    # Robot web service credentials
    robot_username: str = ""
    robot_password: str = ""
    robot_base_url: str = DEFAULT_BASE_URL
    robot_timeout: float = 1.0  # Seconds per request, no retries
    robot_response_format: str = "json"  # json | yaml (yaml is rejected by the client)

    # Mock Robot service
    mock_username: str = "test"
    mock_password: str = "test"
    mock_host: str = "127.0.0.1"
    mock_port: int = 8080

    # Logging
    log_level: str = "INFO"
    log_file: str = ""  # Empty = stdout only

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    @property
    def has_credentials(self) -> bool:
        return bool(self.robot_username and self.robot_password)


@lru_cache
def get_settings() -> Settings:
    return Settings()
