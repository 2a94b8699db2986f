"""Run the mock Robot service: ``python -m robot_api.mock``."""

import uvicorn

from robot_api.config.settings import get_settings
from robot_api.mock.server import create_app


def main() -> None:
    settings = get_settings()
    app = create_app(settings.mock_username, settings.mock_password)
    uvicorn.run(app, host=settings.mock_host, port=settings.mock_port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
