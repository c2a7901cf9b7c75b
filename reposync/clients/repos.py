"""Repositories resource client."""

from typing import TYPE_CHECKING, Any

from reposync.transport import error_for
from reposync.types.remote import (
    CreateStatus,
    Probe,
    RemoteRepoState,
    create_status_from,
    probe_from_status,
)

if TYPE_CHECKING:
    from reposync.transport import HTTPTransport


def create_path(owner: str, user_scoped: bool) -> str:
    """Creation endpoint: the user's own namespace or an organization's."""
    return "/user/repos" if user_scoped else f"/orgs/{owner}/repos"


def create_payload(name: str, private: bool, auto_init: bool) -> dict[str, Any]:
    """Create body; ``auto_init`` is sent only when an initial commit is needed."""
    body: dict[str, Any] = {"name": name, "private": private}
    if auto_init:
        body["auto_init"] = True
    return body


class ReposClient:
    """Client for repository existence, metadata and creation."""

    def __init__(self, transport: "HTTPTransport") -> None:
        """
        Initialize the repos client.

        Args:
            transport: HTTP transport for making requests
        """
        self.transport = transport

    def probe(self, owner: str, name: str) -> Probe:
        """
        Check whether a repository exists.

        Returns:
            Probe.EXISTS on 200, Probe.MISSING on 404

        Raises:
            HostAPIError: On any other status, network failure or timeout
        """
        response = self.transport.request("GET", f"/repos/{owner}/{name}")
        state = probe_from_status(response.status_code)
        if state is Probe.UNKNOWN:
            raise error_for(response, f"checking {owner}/{name}")
        return state

    def get_state(self, owner: str, name: str) -> RemoteRepoState:
        """
        Fetch the repository's existence and default branch name.

        Raises:
            HostAPIError: On statuses other than 200/404
        """
        response = self.transport.request("GET", f"/repos/{owner}/{name}")
        state = probe_from_status(response.status_code)
        if state is Probe.MISSING:
            return RemoteRepoState(exists=False)
        if state is Probe.UNKNOWN:
            raise error_for(response, f"reading {owner}/{name}")
        return RemoteRepoState(
            exists=True, default_branch=response.field("default_branch")
        )

    def create(
        self,
        owner: str,
        name: str,
        private: bool = True,
        auto_init: bool = False,
        user_scoped: bool = False,
    ) -> CreateStatus:
        """
        Create a repository.

        Args:
            owner: Owning user or organization
            name: Repository name
            private: Create as private (default) or public
            auto_init: Ask the host for an initial commit
            user_scoped: Create under the authenticated user instead of an org

        Returns:
            CreateStatus.CREATED on 201, CreateStatus.ALREADY_EXISTS on 422

        Raises:
            HostAPIError: On any other status
        """
        response = self.transport.request(
            "POST",
            create_path(owner, user_scoped),
            body=create_payload(name, private, auto_init),
        )
        status = create_status_from(response.status_code)
        if status is CreateStatus.FAILED:
            raise error_for(response, f"creating {owner}/{name}")
        return status
