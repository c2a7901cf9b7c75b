"""Async repositories resource client."""

from typing import TYPE_CHECKING

from reposync.clients.repos import create_path, create_payload
from reposync.transport import error_for
from reposync.types.remote import (
    CreateStatus,
    Probe,
    RemoteRepoState,
    create_status_from,
    probe_from_status,
)

if TYPE_CHECKING:
    from reposync.async_transport import AsyncHTTPTransport


class AsyncReposClient:
    """Async client for repository existence, metadata and creation."""

    def __init__(self, transport: "AsyncHTTPTransport") -> None:
        """
        Initialize the async repos client.

        Args:
            transport: Async HTTP transport for making requests
        """
        self.transport = transport

    async def probe(self, owner: str, name: str) -> Probe:
        """Check whether a repository exists (see ReposClient.probe)."""
        response = await self.transport.request("GET", f"/repos/{owner}/{name}")
        state = probe_from_status(response.status_code)
        if state is Probe.UNKNOWN:
            raise error_for(response, f"checking {owner}/{name}")
        return state

    async def get_state(self, owner: str, name: str) -> RemoteRepoState:
        response = await self.transport.request("GET", f"/repos/{owner}/{name}")
        state = probe_from_status(response.status_code)
        if state is Probe.MISSING:
            return RemoteRepoState(exists=False)
        if state is Probe.UNKNOWN:
            raise error_for(response, f"reading {owner}/{name}")
        return RemoteRepoState(
            exists=True, default_branch=response.field("default_branch")
        )

    async def create(
        self,
        owner: str,
        name: str,
        private: bool = True,
        auto_init: bool = False,
        user_scoped: bool = False,
    ) -> CreateStatus:
        """Create a repository (see ReposClient.create)."""
        response = await self.transport.request(
            "POST",
            create_path(owner, user_scoped),
            body=create_payload(name, private, auto_init),
        )
        status = create_status_from(response.status_code)
        if status is CreateStatus.FAILED:
            raise error_for(response, f"creating {owner}/{name}")
        return status
