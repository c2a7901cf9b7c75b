"""
Async HTTP Transport for the GitHub REST API.

Same contract as HTTPTransport, built on httpx's async client so that the
reconciler can work on several specifiers at once.
"""

import asyncio
import random
import time
from collections.abc import Callable, Coroutine
from typing import Any

import httpx

from reposync.exceptions import HostAPIError
from reposync.logging import log_http_request, log_http_response
from reposync.transport import (
    DEFAULT_API_VERSION,
    HostResponse,
    RetryConfig,
    build_headers,
    can_replay,
    decode_body,
)


class AsyncHTTPTransport:
    """
    Async HTTP transport layer with bearer authentication and retry logic.

    Handles:
    - Authorization and API version headers
    - Exponential backoff with jitter for retries
    - Retry-After header respect for rate limiting
    """

    def __init__(
        self,
        base_url: str,
        token: str,
        timeout: float = 30.0,
        retry_config: RetryConfig | None = None,
        api_version: str = DEFAULT_API_VERSION,
    ) -> None:
        """
        Initialize async HTTP transport.

        Args:
            base_url: Base URL for API requests (e.g., "https://api.github.com")
            token: Bearer token
            timeout: Request timeout in seconds
            retry_config: Configuration for retry behavior
            api_version: Value of the X-GitHub-Api-Version header
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.retry_config = retry_config or RetryConfig()

        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            headers=build_headers(token, api_version),
        )

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> "AsyncHTTPTransport":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def request(
        self,
        method: str,
        path: str,
        body: dict[str, Any] | None = None,
    ) -> HostResponse:
        """
        Make a request with automatic retry.

        Raises:
            HostAPIError: On network failure or timeout after all retries
        """
        async def make_request() -> httpx.Response:
            log_http_request(method, f"{self.base_url}{path}", body=body)
            if body is None:
                return await self._client.request(method, path)
            return await self._client.request(method, path, json=body)

        return await self._execute_with_retry(make_request, method, f"{method} {path}")

    async def _execute_with_retry(
        self,
        request_fn: Callable[[], Coroutine[Any, Any, httpx.Response]],
        method: str,
        context: str,
    ) -> HostResponse:
        for attempt in range(self.retry_config.max_retries + 1):
            started = time.monotonic()
            try:
                response = await request_fn()
            except httpx.RequestError as e:
                if attempt >= self.retry_config.max_retries or not can_replay(method, error=e):
                    raise HostAPIError(
                        f"{context} failed: {e}", code="CONNECTION_ERROR"
                    ) from e
                await asyncio.sleep(self._get_backoff_time(attempt, None))
                continue

            result = HostResponse(response.status_code, decode_body(response))
            log_http_response(
                result.status_code,
                context,
                elapsed_ms=(time.monotonic() - started) * 1000,
            )

            if not self._should_retry(result.status_code, attempt, method):
                return result

            retry_after = response.headers.get("Retry-After")
            await asyncio.sleep(self._get_backoff_time(attempt, retry_after))

        raise HostAPIError(f"{context} failed with no response", code="UNKNOWN_ERROR")

    def _should_retry(self, status_code: int, attempt: int, method: str = "GET") -> bool:
        if attempt >= self.retry_config.max_retries:
            return False
        if status_code not in self.retry_config.retry_on:
            return False
        return can_replay(method, status_code=status_code)

    def _get_backoff_time(self, attempt: int, retry_after: str | None) -> float:
        if retry_after and self.retry_config.respect_retry_after:
            try:
                return float(retry_after)
            except ValueError:
                pass

        base_wait = self.retry_config.backoff_factor ** attempt
        jitter_range = base_wait * self.retry_config.jitter
        wait_time = base_wait + random.uniform(-jitter_range, jitter_range)
        return min(wait_time, self.retry_config.max_backoff)
