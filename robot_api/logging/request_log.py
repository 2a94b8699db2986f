"""Structured JSON logging for Robot API traffic.

Every request issued by the client produces one JSON line on the
``robot_api.requests`` logger. The mock service logs to ``robot_api.mock``.
Both sit under the ``robot_api`` logger that ``setup_logging`` configures.

The library itself never installs handlers; applications (and the mock
server's lifespan hook) call ``setup_logging`` when they want output.
Per-request fields travel in ``extra={"request_data": {...}}`` and are
merged into the JSON line.
"""

import json
import logging
import sys
import time
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone

from robot_api.config.settings import get_settings

ROOT_LOGGER = "robot_api"
REQUEST_LOGGER = "robot_api.requests"
REQUEST_DATA = "request_data"

# Id of the Robot request in flight; set by the executor around each call
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


class JSONFormatter(logging.Formatter):
    """One JSON object per record: base fields plus any ``request_data``."""

    def format(self, record: logging.LogRecord) -> str:
        line = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "request_id": request_id_var.get(),
        }
        line.update(getattr(record, REQUEST_DATA, None) or {})
        if record.exc_info:
            line["exception"] = self.formatException(record.exc_info)
        return json.dumps(line, default=str)


def setup_logging() -> None:
    """Route the ``robot_api`` logger tree to stdout (and LOG_FILE) as JSON."""
    settings = get_settings()

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(getattr(logging, settings.log_level.upper(), logging.INFO))
    logger.handlers.clear()
    logger.propagate = False

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if settings.log_file:
        handlers.append(logging.FileHandler(settings.log_file))

    formatter = JSONFormatter()
    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)


def get_request_logger() -> logging.Logger:
    return logging.getLogger(REQUEST_LOGGER)


def generate_request_id() -> str:
    """Short random id correlating the log line of one Robot request."""
    return uuid.uuid4().hex[:12]


class RequestTimer:
    """Wall-clock duration of a Robot round trip, in milliseconds."""

    def __init__(self):
        self._started = 0.0
        self.elapsed_ms = 0.0

    def __enter__(self) -> "RequestTimer":
        self._started = time.perf_counter()
        return self

    def __exit__(self, *exc_info) -> None:
        self.elapsed_ms = round((time.perf_counter() - self._started) * 1000, 2)
