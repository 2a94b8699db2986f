"""Request executor — one HTTP round trip per call, normalised outcome."""

import asyncio
from typing import Any

import httpx

from robot_api.client.errors import RobotApiError
from robot_api.client.models import ClientConfig
from robot_api.logging.request_log import (
    RequestTimer,
    generate_request_id,
    get_request_logger,
    request_id_var,
)

SUCCESS_STATUSES = (200, 201)
USER_AGENT = "robot-api-client"


class RequestExecutor:
    """Sends requests to the Robot web service over a pooled httpx client.

    No retries and no caching: every ``perform`` call is exactly one
    outbound request, and its failure is reported once.

    The connection pool belongs to the event loop that opened it. When the
    executor is used from another loop (a second ``asyncio.run``) a new
    pool is opened there and the old one is dropped.
    """

    def __init__(self, config: ClientConfig, transport: httpx.AsyncBaseTransport | None = None):
        self._config = config
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._loop: asyncio.AbstractEventLoop | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        loop = asyncio.get_running_loop()
        if self._client is None or self._client.is_closed or self._loop is not loop:
            self._client = httpx.AsyncClient(
                base_url=self._config.base_url,
                auth=httpx.BasicAuth(self._config.username, self._config.password),
                timeout=httpx.Timeout(self._config.timeout),
                headers={"Accept": "application/json", "User-Agent": USER_AGENT},
                transport=self._transport,
            )
            self._loop = loop
        return self._client

    async def perform(
        self,
        method: str,
        path: str,
        *,
        params: dict | None = None,
        data: dict | None = None,
    ) -> Any:
        """Issue one request and return the parsed body.

        Returns:
            Parsed JSON for 200/201 responses, ``None`` for an empty body,
            or the raw text when the body is not JSON.

        Raises:
            RobotApiError: for any other status and for transport failures.
        """
        token = request_id_var.set(generate_request_id())
        try:
            return await self._send(method, path, params, data)
        finally:
            request_id_var.reset(token)

    async def _send(self, method: str, path: str, params: dict | None, data: dict | None) -> Any:
        logger = get_request_logger()
        client = await self._get_client()

        with RequestTimer() as timer:
            try:
                response = await client.request(method, path, params=params or None, data=data or None)
            except httpx.TimeoutException as e:
                cause, error = e, RobotApiError("TIMEOUT", f"Request timed out: {e}")
            except httpx.ConnectError as e:
                cause, error = e, RobotApiError("CONNECTION_FAILED", f"Cannot reach Robot service: {e}")
            except httpx.HTTPError as e:
                cause, error = e, RobotApiError("REQUEST_FAILED", f"Request failed: {e}")
            else:
                cause, error = None, None

        if error is not None:
            logger.info(
                "Robot API request failed",
                extra={"request_data": {
                    "method": method,
                    "path": path,
                    "status_code": None,
                    "latency_ms": timer.elapsed_ms,
                    "outcome": error.code,
                }},
            )
            raise error from cause

        logger.info(
            "Robot API request",
            extra={"request_data": {
                "method": method,
                "path": path,
                "status_code": response.status_code,
                "latency_ms": timer.elapsed_ms,
                "outcome": "ok" if response.status_code in SUCCESS_STATUSES else "error",
            }},
        )

        if response.status_code not in SUCCESS_STATUSES:
            raise self._error_from_response(response)

        return self._parse_body(response)

    @staticmethod
    def _parse_body(response: httpx.Response) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text

    @staticmethod
    def _error_from_response(response: httpx.Response) -> RobotApiError:
        """Build an error from the service's ``{"error": {...}}`` envelope."""
        try:
            payload = response.json()
        except ValueError:
            payload = None

        envelope = None
        if isinstance(payload, dict):
            envelope = payload.get("error", payload)

        if isinstance(envelope, dict) and "code" in envelope:
            return RobotApiError(
                code=str(envelope["code"]),
                message=str(envelope.get("message", "")),
                status_code=response.status_code,
            )

        return RobotApiError(
            code="UNKNOWN_ERROR",
            message=response.text or f"HTTP {response.status_code}",
            status_code=response.status_code,
        )

    async def close(self) -> None:
        # A pool opened on another, possibly closed, loop cannot be closed from here
        same_loop = self._loop is asyncio.get_running_loop()
        if self._client and not self._client.is_closed and same_loop:
            await self._client.aclose()
        self._client = None
        self._loop = None
