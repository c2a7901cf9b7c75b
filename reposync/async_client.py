"""
Async host API client.

Async counterpart of HostClient for concurrent reconciliation.
"""

import asyncio
from typing import Any

from reposync.async_clients import AsyncGitClient, AsyncReposClient, AsyncUsersClient
from reposync.async_transport import AsyncHTTPTransport
from reposync.config import DEFAULT_API_URL, DEFAULT_TIMEOUT, Settings
from reposync.credentials import Credential
from reposync.transport import RetryConfig


class AsyncHostClient:
    """
    Async client for the host API.

    Example:
        ```python
        async with AsyncHostClient(token=token) as client:
            state = await client.repos.probe("octocat", "Hello-World")
        ```
    """

    def __init__(
        self,
        token: str,
        username: str | None = None,
        base_url: str = DEFAULT_API_URL,
        timeout: float = DEFAULT_TIMEOUT,
        retry_config: RetryConfig | None = None,
    ) -> None:
        self.base_url = base_url
        self.timeout = timeout
        self._login = username
        self._login_lock = asyncio.Lock()

        self._transport = AsyncHTTPTransport(
            base_url=base_url,
            token=token,
            timeout=timeout,
            retry_config=retry_config,
        )

        self.repos = AsyncReposClient(self._transport)
        self.git = AsyncGitClient(self._transport)
        self.users = AsyncUsersClient(self._transport)

    @classmethod
    def from_credential(
        cls,
        credential: Credential,
        settings: Settings | None = None,
        retry_config: RetryConfig | None = None,
    ) -> "AsyncHostClient":
        settings = settings or Settings()
        return cls(
            token=credential.token,
            username=credential.username,
            base_url=settings.api_url,
            timeout=settings.timeout,
            retry_config=retry_config,
        )

    async def get_login(self) -> str:
        """The authenticated login, fetched once even under concurrent callers."""
        async with self._login_lock:
            if self._login is None:
                self._login = await self.users.get_login()
        return self._login

    async def owns(self, owner: str) -> bool:
        return owner.lower() == (await self.get_login()).lower()

    @property
    def transport(self) -> AsyncHTTPTransport:
        return self._transport

    async def close(self) -> None:
        await self._transport.close()

    async def __aenter__(self) -> "AsyncHostClient":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()
