"""
Async HTTP transport shared by the provider clients.

One request in, one ``APIResponse`` or ``APIError`` out. There are no
retries here: payment calls are not idempotent on the provider side, so a
failure always goes back to the caller.
"""
from __future__ import annotations

import json
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Type, Union

import httpx

from core.logging_config import get_logger

logger = get_logger(__name__)

# Header names whose values never reach the logs
SENSITIVE_HEADERS = frozenset({"authorization", "auth", "x-auth"})


class HTTPMethod(str, Enum):
    GET = "GET"
    POST = "POST"
    DELETE = "DELETE"


@dataclass
class APIResponse:
    """A received HTTP response, body kept as raw bytes."""
    status_code: int
    raw_content: bytes = b""
    headers: Dict[str, str] = field(default_factory=dict)
    elapsed_ms: float = 0.0
    request_id: Optional[str] = None

    @classmethod
    def from_httpx(cls, response: httpx.Response, elapsed_ms: float) -> "APIResponse":
        return cls(
            status_code=response.status_code,
            raw_content=response.content,
            headers=dict(response.headers),
            elapsed_ms=elapsed_ms,
            request_id=response.headers.get("x-request-id"),
        )

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300

    def json(self) -> Any:
        """Decoded JSON body. An empty body decodes to ``{}``; invalid JSON raises ``ValueError``."""
        if not self.raw_content.strip():
            return {}
        return json.loads(self.raw_content)

    def text(self) -> str:
        return self.raw_content.decode("utf-8", errors="replace")


class APIError(Exception):
    """Transport level failure: network error, timeout or non-2xx status."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response: Optional[APIResponse] = None,
        request_id: Optional[str] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.response = response
        self.request_id = request_id
        super().__init__(message)

    def __str__(self):
        parts = [self.message]
        if self.status_code:
            parts.append(f"Status: {self.status_code}")
        if self.request_id:
            parts.append(f"Request ID: {self.request_id}")
        return " | ".join(parts)


class APITimeoutError(APIError):
    pass


class RateLimitError(APIError):
    pass


class AuthenticationError(APIError):
    pass


class NotFoundError(APIError):
    pass


class ServerError(APIError):
    pass


_STATUS_ERRORS: Mapping[int, Type[APIError]] = {
    401: AuthenticationError,
    403: AuthenticationError,
    404: NotFoundError,
    429: RateLimitError,
}


def error_for_status(response: APIResponse) -> APIError:
    status = response.status_code
    error_class = _STATUS_ERRORS.get(status) or (ServerError if status >= 500 else APIError)
    return error_class(
        message=f"HTTP error! status: {status}, body: {response.text()}",
        status_code=status,
        response=response,
        request_id=response.request_id,
    )


class BaseAPIClient:
    """
    Minimal JSON-over-HTTP client bound to one base URL.

    The underlying ``httpx.AsyncClient`` is created on first use and kept
    until ``close()``; use the instance as an async context manager to scope it.
    """

    def __init__(
        self,
        base_url: str,
        timeout: Union[float, httpx.Timeout] = 8.0,
        headers: Optional[Dict[str, str]] = None,
        verify_ssl: bool = True,
        debug: bool = False,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            base_url: provider API root; endpoints are appended verbatim
            timeout: seconds, or a full ``httpx.Timeout``
            headers: headers sent with every request
            verify_ssl: verify TLS certificates
            debug: emit request/response events at debug level
            transport: custom httpx transport, e.g. ``httpx.MockTransport``
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout if isinstance(timeout, httpx.Timeout) else httpx.Timeout(timeout)
        self.verify_ssl = verify_ssl
        self.debug = debug
        self.default_headers = {"Content-Type": "application/json", "Accept": "application/json", **(headers or {})}
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout, verify=self.verify_ssl, transport=self._transport)
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "BaseAPIClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def _build_url(self, endpoint: str) -> str:
        if not endpoint:
            return self.base_url
        return f"{self.base_url}/{endpoint.lstrip('/')}"

    async def _request(
        self,
        method: HTTPMethod,
        endpoint: str,
        json_data: Optional[Any] = None,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> APIResponse:
        """
        Raises:
            APITimeoutError: connect/read/write/pool timeout
            APIError: any other network failure, or a non-2xx status
        """
        url = self._build_url(endpoint)
        request_headers = {**self.default_headers, **(headers or {})}
        if self.debug:
            logger.debug(
                "api_request",
                method=method.value,
                url=url,
                headers={k: v for k, v in request_headers.items() if k.lower() not in SENSITIVE_HEADERS},
            )

        started = time.perf_counter()
        try:
            raw = await self.client.request(method.value, url, params=params, json=json_data, headers=request_headers)
        except httpx.TimeoutException as exc:
            raise APITimeoutError(f"Request timeout: {method.value} {url}") from exc
        except httpx.HTTPError as exc:
            raise APIError(f"Network error: {exc}") from exc

        response = APIResponse.from_httpx(raw, (time.perf_counter() - started) * 1000)
        if self.debug:
            logger.debug(
                "api_response",
                status_code=response.status_code,
                elapsed_ms=round(response.elapsed_ms, 2),
                request_id=response.request_id,
            )
        if not response.is_success:
            raise error_for_status(response)
        return response

    async def get(self, endpoint: str, **kwargs) -> APIResponse:
        return await self._request(HTTPMethod.GET, endpoint, **kwargs)

    async def post(self, endpoint: str, json_data: Optional[Any] = None, **kwargs) -> APIResponse:
        return await self._request(HTTPMethod.POST, endpoint, json_data=json_data, **kwargs)

    async def delete(self, endpoint: str, **kwargs) -> APIResponse:
        return await self._request(HTTPMethod.DELETE, endpoint, **kwargs)
