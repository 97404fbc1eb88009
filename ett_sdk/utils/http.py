"""Thin async HTTP executor shared by every provider and supplier adapter."""

import json
from typing import Any

import httpx

from ett_sdk.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_TIMEOUT = 30.0


class HTTPRequestError(Exception):
    """Transport failure, timeout, or non-2xx response from an external API."""

    def __init__(self, message: str, status_code: int | None = None, body: bytes = b"") -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(message)


def compact_json(payload: Any) -> str:
    """Serialize the way vendor contracts expect: no whitespace, UTF-8 kept as-is."""
    return json.dumps(payload, separators=(",", ":"), ensure_ascii=False)


def json_number(value: float) -> int | float:
    """Render integral floats without a trailing `.0` (3.0 -> 3)."""
    if float(value).is_integer():
        return int(value)
    return value


class HttpExecutor:
    """
    Issues one-shot requests with a call-scoped timeout.

    A custom `transport` (e.g. `httpx.MockTransport`) can be injected; asyncio
    cancellation propagates untouched so callers can abort in-flight calls.
    """

    def __init__(self, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self._transport = transport

    async def send(
        self,
        method: str,
        url: str,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        **kwargs: Any,
    ) -> httpx.Response:
        """Send a request and return the response whatever its status."""
        try:
            async with httpx.AsyncClient(timeout=timeout, transport=self._transport) as client:
                return await client.request(method, url, **kwargs)
        except httpx.TimeoutException as e:
            logger.warning("http_request_timeout", method=method, url=url, timeout=timeout)
            raise HTTPRequestError(f"request timed out after {timeout}s: {e}") from e
        except httpx.RequestError as e:
            logger.warning("http_request_failed", method=method, url=url, error=str(e))
            raise HTTPRequestError(f"request failed: {e}") from e

    async def do_request(
        self,
        url: str,
        method: str,
        body: Any = None,
        api_key: str = "",
        headers: dict[str, str] | None = None,
        *,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> bytes:
        """
        Send a JSON request and return the raw response body.

        Raises:
            HTTPRequestError: on transport errors, or when the status is above 300
                (the message is the response body).
        """
        request_headers: dict[str, str] = {}
        if api_key:
            request_headers["Content-Type"] = "application/json"
            request_headers["authorization"] = "API-KEY"
            request_headers["X-API-KEY"] = api_key
        request_headers.update(headers or {})

        content = compact_json(body).encode() if body is not None else None
        response = await self.send(method, url, timeout=timeout, content=content, headers=request_headers)

        if response.status_code > 300:
            raise HTTPRequestError(response.text, response.status_code, response.content)
        return response.content
