"""
HTTP client for the upstream commerce API.

Wraps a single long-lived ``httpx.AsyncClient`` and normalizes the commerce
API's response envelope:

- ``{"status": "success", "data": ...}`` bodies are unwrapped to ``data``;
- ``{"status": "error", "message": ..., "errors": ...}`` bodies raise
  ``UpstreamAPIError``;
- timeouts and connection failures raise ``UpstreamTimeoutError`` and
  ``UpstreamNetworkError``.
"""
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import httpx
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from order_adaptor.core.config import Settings
from order_adaptor.core.exceptions import (
    UpstreamAPIError,
    UpstreamNetworkError,
    UpstreamTimeoutError,
)
from order_adaptor.core.logging import get_logger

logger = get_logger(__name__)

DEFAULT_HEADERS = {
    "Content-Type": "application/json",
    "Accept": "application/json",
}

LOG_PREFIX = "[Commerce API]"


@dataclass
class CommerceResponse:
    """A successful commerce API response."""
    status_code: int
    data: Any
    envelope: Any = None
    headers: Dict[str, str] = field(default_factory=dict)


def unwrap_envelope(body: Any) -> Any:
    """
    Strip the commerce API success envelope.

    Returns ``data`` when the body is ``{"status": "success", "data": ...}``
    and the body unchanged otherwise.
    """
    if isinstance(body, dict) and body.get("status") == "success" and "data" in body:
        return body["data"]
    return body


def parse_body(response: httpx.Response) -> Any:
    """Decode a JSON body, falling back to the raw text (or None when empty)."""
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


class CommerceAPIClient:
    """
    Async client for the commerce API.

    The bearer token is supplied per call. A static service token may be
    configured and is sent only when a call carries none.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 12.0,
        default_token: Optional[str] = None,
        max_retries: int = 0,
        backoff_factor: float = 0.5,
        health_check_timeout: float = 5.0,
        log_requests: bool = False,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Initialize the commerce API client.

        Args:
            base_url: Base URL of the commerce API
            timeout: Request timeout in seconds
            default_token: Token used when a call does not pass one
            max_retries: Retries for GET requests on timeout or network failure
            backoff_factor: Multiplier for the exponential retry delay
            health_check_timeout: Timeout in seconds for the health check
            log_requests: Log every outgoing request at INFO instead of DEBUG
            transport: Optional httpx transport, used to stub the upstream in tests
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.default_token = default_token
        self.max_retries = max_retries
        self.backoff_factor = backoff_factor
        self.health_check_timeout = health_check_timeout
        self.log_level = logging.INFO if log_requests else logging.DEBUG

        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            headers=DEFAULT_HEADERS,
            transport=transport,
        )

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ) -> "CommerceAPIClient":
        return cls(
            base_url=settings.COMMERCE_API_URL,
            timeout=settings.commerce_timeout_seconds,
            default_token=settings.COMMERCE_API_TOKEN,
            max_retries=settings.MAX_RETRIES,
            backoff_factor=settings.RETRY_BACKOFF_FACTOR,
            health_check_timeout=settings.health_check_timeout_seconds,
            log_requests=settings.LOG_UPSTREAM_REQUESTS,
            transport=transport,
        )

    async def get(
        self,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        token: Optional[str] = None
    ) -> CommerceResponse:
        return await self.request("GET", path, params=params, token=token)

    async def post(
        self,
        path: str,
        json: Optional[Any] = None,
        params: Optional[Dict[str, Any]] = None,
        token: Optional[str] = None
    ) -> CommerceResponse:
        return await self.request("POST", path, params=params, json=json, token=token)

    async def put(
        self,
        path: str,
        json: Optional[Any] = None,
        params: Optional[Dict[str, Any]] = None,
        token: Optional[str] = None
    ) -> CommerceResponse:
        return await self.request("PUT", path, params=params, json=json, token=token)

    async def request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Any] = None,
        token: Optional[str] = None
    ) -> CommerceResponse:
        """
        Send a request and return the unwrapped response.

        Args:
            method: HTTP method
            path: Path relative to the base URL
            params: Query parameters; None values are dropped
            json: JSON request body
            token: Bearer token for this call

        Returns:
            CommerceResponse: Status, unwrapped data and the raw envelope

        Raises:
            UpstreamAPIError: If the commerce API returns its error envelope
            UpstreamTimeoutError: If the request times out
            UpstreamNetworkError: If the commerce API cannot be reached
            httpx.HTTPStatusError: For other non-2xx responses
        """
        method = method.upper()
        if method != "GET" or not self.max_retries:
            return await self._send(method, path, params, json, token)

        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self.max_retries + 1),
            wait=wait_exponential(multiplier=self.backoff_factor),
            retry=retry_if_exception_type((UpstreamTimeoutError, UpstreamNetworkError)),
            reraise=True,
        ):
            with attempt:
                if attempt.retry_state.attempt_number > 1:
                    logger.warning(
                        f"{LOG_PREFIX} Retrying {method} {path}",
                        extra={"data": {"attempt": attempt.retry_state.attempt_number}}
                    )
                return await self._send(method, path, params, json, token)

    async def _send(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]],
        json: Optional[Any],
        token: Optional[str]
    ) -> CommerceResponse:
        headers = self._auth_headers(token)
        if params:
            params = {key: value for key, value in params.items() if value is not None}

        logger.log(self.log_level, f"{LOG_PREFIX} {method} {path}")
        start_time = time.time()

        try:
            response = await self._client.request(
                method, path, params=params or None, json=json, headers=headers
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            error = self._normalize_status_error(exc)
            if error is exc:
                raise
            raise error from exc
        except httpx.TimeoutException as exc:
            logger.error(f"{LOG_PREFIX} Request timeout", extra={"data": {"path": path}})
            raise UpstreamTimeoutError(original_exception=exc) from exc
        except httpx.NetworkError as exc:
            logger.error(f"{LOG_PREFIX} Network error", extra={"data": {"path": path}})
            raise UpstreamNetworkError(original_exception=exc) from exc

        body = parse_body(response)
        logger.log(
            self.log_level,
            f"{LOG_PREFIX} {method} {path} completed",
            extra={"data": {
                "status_code": response.status_code,
                "duration_ms": round((time.time() - start_time) * 1000, 2)
            }}
        )

        return CommerceResponse(
            status_code=response.status_code,
            data=unwrap_envelope(body),
            envelope=body,
            headers=dict(response.headers),
        )

    def _auth_headers(self, token: Optional[str]) -> Dict[str, str]:
        effective_token = token or self.default_token
        if not effective_token:
            return {}
        return {"Authorization": f"Bearer {effective_token}"}

    def _normalize_status_error(self, exc: httpx.HTTPStatusError) -> Exception:
        """Turn an error envelope into ``UpstreamAPIError``; leave anything else as is."""
        body = parse_body(exc.response)

        if isinstance(body, dict) and body.get("status") == "error":
            error = UpstreamAPIError(
                status_code=exc.response.status_code,
                detail=body.get("message") or "An error occurred",
                errors=body.get("errors") or {},
            )
            logger.error(
                f"{LOG_PREFIX} Error: {error.detail}",
                extra={"data": {"status_code": error.status_code, "errors": error.errors}}
            )
            return error

        logger.error(
            f"{LOG_PREFIX} Unexpected error: {exc}",
            extra={"data": {"status_code": exc.response.status_code}}
        )
        return exc

    async def check_health(self) -> bool:
        """
        Probe ``/health`` on the commerce API.

        Returns:
            bool: True if the health endpoint answered 200, False on any other outcome
        """
        try:
            response = await self._client.get(
                f"{self.base_url}/health", timeout=self.health_check_timeout
            )
            return response.status_code == 200
        except httpx.HTTPError as e:
            logger.warning(f"{LOG_PREFIX} Health check failed: {str(e)}")
            return False

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "CommerceAPIClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()
