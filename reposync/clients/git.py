"""Git references resource client."""

from typing import TYPE_CHECKING

from reposync.transport import error_for
from reposync.types.remote import Probe, probe_from_status

if TYPE_CHECKING:
    from reposync.transport import HTTPTransport


def branch_ref(branch: str) -> str:
    return f"refs/heads/{branch}"


class GitClient:
    """Client for branch reference lookup and creation."""

    def __init__(self, transport: "HTTPTransport") -> None:
        """
        Initialize the git client.

        Args:
            transport: HTTP transport for making requests
        """
        self.transport = transport

    def probe_branch(self, owner: str, name: str, branch: str) -> Probe:
        """
        Check whether a branch exists.

        Raises:
            HostAPIError: On statuses other than 200/404
        """
        response = self.transport.request(
            "GET", f"/repos/{owner}/{name}/git/ref/heads/{branch}"
        )
        state = probe_from_status(response.status_code)
        if state is Probe.UNKNOWN:
            raise error_for(response, f"checking branch {branch} of {owner}/{name}")
        return state

    def get_branch_sha(self, owner: str, name: str, branch: str) -> str:
        """
        Resolve the commit a branch points at.

        Raises:
            HostAPIError: If the ref cannot be read, e.g. on an empty repository
        """
        response = self.transport.request(
            "GET", f"/repos/{owner}/{name}/git/ref/heads/{branch}"
        )
        target = response.field("object")
        sha = target.get("sha") if isinstance(target, dict) else None
        if response.status_code != 200 or not sha:
            raise error_for(response, f"resolving {branch} of {owner}/{name}")
        return sha

    def create_branch(self, owner: str, name: str, branch: str, sha: str) -> None:
        """
        Create ``refs/heads/<branch>`` pointing at ``sha``.

        Raises:
            HostAPIError: Unless the host answers 201
        """
        response = self.transport.request(
            "POST",
            f"/repos/{owner}/{name}/git/refs",
            body={"ref": branch_ref(branch), "sha": sha},
        )
        if response.status_code != 201:
            raise error_for(response, f"creating branch {branch} on {owner}/{name}")
