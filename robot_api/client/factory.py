"""Factory for a process-wide default client built from settings."""

from robot_api.client.robot import RobotClient
from robot_api.config.settings import get_settings

_client: RobotClient | None = None


def get_default_client() -> RobotClient:
    """Get the default client singleton, creating it from ROBOT_* settings.

    Raises a ConfigurationError when ROBOT_USERNAME / ROBOT_PASSWORD are
    not set. Explicitly constructed clients are independent of this one,
    each with its own instance registry.
    """
    global _client
    if _client is not None:
        return _client

    _client = RobotClient.from_settings(get_settings())
    return _client


async def close_default_client() -> None:
    """Close and forget the default client."""
    global _client
    if _client is not None:
        await _client.close()
    _client = None
