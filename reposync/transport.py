"""
HTTP Transport for the GitHub REST API.

Handles bearer authentication, automatic retry with backoff, and request
logging. Non-retryable responses are handed back to the resource clients
with their status code, since existence probes depend on 200/404/422
semantics rather than on exceptions.
"""

import random
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

import httpx

from reposync.exceptions import HostAPIError
from reposync.logging import log_http_request, log_http_response

DEFAULT_API_VERSION = "2022-11-28"

IDEMPOTENT_METHODS = frozenset({"GET", "HEAD", "OPTIONS", "PUT", "DELETE"})

# Rejected before processing, so any method may be replayed
REPLAY_SAFE_STATUSES = frozenset({429})


@dataclass
class RetryConfig:
    """Configuration for automatic retry behavior."""

    max_retries: int = 3
    backoff_factor: float = 2.0
    retry_on: list[int] = field(default_factory=lambda: [429, 500, 502, 503])
    respect_retry_after: bool = True
    max_backoff: float = 60.0  # Maximum backoff time in seconds
    jitter: float = 0.1  # Jitter factor (0.1 = ±10%)


@dataclass
class HostResponse:
    """Status code and decoded JSON body of a host API response."""

    status_code: int
    data: Any = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    def field(self, name: str) -> Any:
        """Top-level JSON field, or None when absent or the body is not an object."""
        if isinstance(self.data, dict):
            return self.data.get(name)
        return None


def build_headers(token: str, api_version: str = DEFAULT_API_VERSION) -> dict[str, str]:
    """Default request headers for the GitHub REST API."""
    return {
        "Accept": "application/vnd.github+json",
        "Authorization": f"Bearer {token}",
        "X-GitHub-Api-Version": api_version,
        "User-Agent": "reposync",
    }


def decode_body(response: httpx.Response) -> Any:
    """Decode a JSON body, returning None for empty or non-JSON bodies."""
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return None


def can_replay(method: str, error: httpx.RequestError | None = None, status_code: int | None = None) -> bool:
    """
    Whether repeating a request cannot apply its effect twice.

    Idempotent methods may always be repeated. A POST is repeated only when
    the host never processed it: a 429, or a connection that was never
    established.
    """
    if method.upper() in IDEMPOTENT_METHODS:
        return True
    if error is not None:
        return isinstance(error, (httpx.ConnectError, httpx.ConnectTimeout))
    return status_code in REPLAY_SAFE_STATUSES


def error_for(response: HostResponse, context: str) -> HostAPIError:
    """
    Build a HostAPIError for an unexpected response.

    Args:
        response: The unexpected response
        context: What was being attempted (e.g., "creating acme/svc")

    Returns:
        HostAPIError carrying the status code and the host's message
    """
    message = response.field("message")
    detail = f": {message}" if message else ""
    return HostAPIError(
        f"Error {context} (HTTP {response.status_code}){detail}",
        status_code=response.status_code,
    )


class HTTPTransport:
    """
    HTTP transport layer with bearer authentication and retry logic.

    Handles:
    - Authorization and API version headers
    - Exponential backoff with jitter for retries
    - Retry-After header respect for rate limiting
    - A bounded timeout on every call; timeouts surface as HostAPIError
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
        Initialize HTTP transport.

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

        self._client = httpx.Client(
            base_url=self.base_url,
            timeout=timeout,
            headers=build_headers(token, api_version),
        )

    def close(self) -> None:
        """Close the HTTP client."""
        self._client.close()

    def __enter__(self) -> "HTTPTransport":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def request(
        self,
        method: str,
        path: str,
        body: dict[str, Any] | None = None,
    ) -> HostResponse:
        """
        Make a request with automatic retry.

        Args:
            method: HTTP method
            path: API path (e.g., "/repos/octocat/Hello-World")
            body: JSON request body (for POST)

        Returns:
            HostResponse with the final status code and decoded body

        Raises:
            HostAPIError: On network failure or timeout after all retries
        """
        def make_request() -> httpx.Response:
            log_http_request(method, f"{self.base_url}{path}", body=body)
            if body is None:
                return self._client.request(method, path)
            return self._client.request(method, path, json=body)

        return self._execute_with_retry(make_request, method, f"{method} {path}")

    def _execute_with_retry(
        self, request_fn: Callable[[], httpx.Response], method: str, context: str
    ) -> HostResponse:
        """
        Execute a request with automatic retry on retryable errors.

        Args:
            request_fn: Function that makes the HTTP request
            method: HTTP method, which decides whether a failed attempt may be repeated
            context: Method and path, used in error messages

        Returns:
            HostResponse for the last attempt

        Raises:
            HostAPIError: On network errors after max retries
        """
        for attempt in range(self.retry_config.max_retries + 1):
            started = time.monotonic()
            try:
                response = request_fn()
            except httpx.RequestError as e:
                if attempt >= self.retry_config.max_retries or not can_replay(method, error=e):
                    raise HostAPIError(
                        f"{context} failed: {e}", code="CONNECTION_ERROR"
                    ) from e
                time.sleep(self._get_backoff_time(attempt, None))
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
            time.sleep(self._get_backoff_time(attempt, retry_after))

        raise HostAPIError(f"{context} failed with no response", code="UNKNOWN_ERROR")

    def _should_retry(self, status_code: int, attempt: int, method: str = "GET") -> bool:
        """
        Determine if a request should be retried.

        Args:
            status_code: HTTP status code
            attempt: Current attempt number (0-indexed)
            method: HTTP method; a POST is only repeated when the host never processed it

        Returns:
            True if the request should be retried
        """
        if attempt >= self.retry_config.max_retries:
            return False

        if status_code not in self.retry_config.retry_on:
            return False
        return can_replay(method, status_code=status_code)

    def _get_backoff_time(
        self, attempt: int, retry_after: str | None
    ) -> float:
        """
        Calculate backoff time for retry.

        Uses exponential backoff with jitter, respecting Retry-After header
        if present.

        Args:
            attempt: Current attempt number (0-indexed)
            retry_after: Value of Retry-After header (if present)

        Returns:
            Time to wait in seconds
        """
        if retry_after and self.retry_config.respect_retry_after:
            try:
                return float(retry_after)
            except ValueError:
                pass  # Fall through to exponential backoff

        base_wait = self.retry_config.backoff_factor ** attempt

        jitter_range = base_wait * self.retry_config.jitter
        jitter = random.uniform(-jitter_range, jitter_range)
        wait_time = base_wait + jitter

        return min(wait_time, self.retry_config.max_backoff)
