"""Async git references resource client."""

from typing import TYPE_CHECKING

from reposync.clients.git import branch_ref
from reposync.transport import error_for
from reposync.types.remote import Probe, probe_from_status

if TYPE_CHECKING:
    from reposync.async_transport import AsyncHTTPTransport


class AsyncGitClient:
    """Async client for branch reference lookup and creation."""

    def __init__(self, transport: "AsyncHTTPTransport") -> None:
        self.transport = transport

    async def probe_branch(self, owner: str, name: str, branch: str) -> Probe:
        response = await self.transport.request(
            "GET", f"/repos/{owner}/{name}/git/ref/heads/{branch}"
        )
        state = probe_from_status(response.status_code)
        if state is Probe.UNKNOWN:
            raise error_for(response, f"checking branch {branch} of {owner}/{name}")
        return state

    async def get_branch_sha(self, owner: str, name: str, branch: str) -> str:
        response = await self.transport.request(
            "GET", f"/repos/{owner}/{name}/git/ref/heads/{branch}"
        )
        target = response.field("object")
        sha = target.get("sha") if isinstance(target, dict) else None
        if response.status_code != 200 or not sha:
            raise error_for(response, f"resolving {branch} of {owner}/{name}")
        return sha

    async def create_branch(self, owner: str, name: str, branch: str, sha: str) -> None:
        response = await self.transport.request(
            "POST",
            f"/repos/{owner}/{name}/git/refs",
            body={"ref": branch_ref(branch), "sha": sha},
        )
        if response.status_code != 201:
            raise error_for(response, f"creating branch {branch} on {owner}/{name}")
