"""
Host API client.

Provides the primary interface for talking to the GitHub REST API.
"""

from typing import Any

from reposync.clients import GitClient, ReposClient, UsersClient
from reposync.config import DEFAULT_API_URL, DEFAULT_TIMEOUT, Settings
from reposync.credentials import Credential, CredentialProvider, require_credential
from reposync.transport import HTTPTransport, RetryConfig


class HostClient:
    """
    Main client for the host API.

    Aggregates the resource clients and remembers the authenticated login.

    Example:
        ```python
        from reposync import HostClient
        from reposync.types import Probe

        with HostClient.from_env() as client:
            if client.repos.probe("octocat", "Hello-World") is Probe.MISSING:
                client.repos.create("octocat", "Hello-World", user_scoped=True)
        ```
    """

    DEFAULT_BASE_URL = DEFAULT_API_URL
    DEFAULT_TIMEOUT = DEFAULT_TIMEOUT

    def __init__(
        self,
        token: str,
        username: str | None = None,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        retry_config: RetryConfig | None = None,
    ) -> None:
        """
        Initialize the host client.

        Args:
            token: Bearer token
            username: Authenticated login, if already known; otherwise
                looked up from the host on first use
            base_url: Base URL for API requests (default: https://api.github.com)
            timeout: Request timeout in seconds (default: 30.0)
            retry_config: Configuration for retry behavior (optional)
        """
        self.base_url = base_url
        self.timeout = timeout
        self._login = username

        self._transport = HTTPTransport(
            base_url=base_url,
            token=token,
            timeout=timeout,
            retry_config=retry_config,
        )

        self.repos = ReposClient(self._transport)
        self.git = GitClient(self._transport)
        self.users = UsersClient(self._transport)

    @classmethod
    def from_credential(
        cls,
        credential: Credential,
        settings: Settings | None = None,
        retry_config: RetryConfig | None = None,
    ) -> "HostClient":
        settings = settings or Settings()
        return cls(
            token=credential.token,
            username=credential.username,
            base_url=settings.api_url,
            timeout=settings.timeout,
            retry_config=retry_config,
        )

    @classmethod
    def from_env(
        cls,
        provider: CredentialProvider | None = None,
        retry_config: RetryConfig | None = None,
    ) -> "HostClient":
        """
        Create a client from the environment.

        The token comes from GH_TOKEN/GITHUB_TOKEN or git credential
        helpers; the API URL and timeout from REPOSYNC_* settings.

        Raises:
            CredentialError: If no token can be found
            ConfigurationError: If a setting is invalid
        """
        return cls.from_credential(
            require_credential(provider), Settings.from_env(), retry_config
        )

    @property
    def login(self) -> str:
        """The authenticated login, fetched once and then reused."""
        if self._login is None:
            self._login = self.users.get_login()
        return self._login

    def owns(self, owner: str) -> bool:
        """True if ``owner`` is the authenticated user rather than an org."""
        return owner.lower() == self.login.lower()

    @property
    def transport(self) -> HTTPTransport:
        """Get the underlying HTTP transport (for advanced use cases)."""
        return self._transport

    def close(self) -> None:
        """Close the client and release resources."""
        self._transport.close()

    def __enter__(self) -> "HostClient":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()
