"""Authenticated user resource client."""

from typing import TYPE_CHECKING

from reposync.exceptions import CredentialError
from reposync.transport import error_for

if TYPE_CHECKING:
    from reposync.transport import HTTPTransport


class UsersClient:
    """Client for the authenticated identity."""

    def __init__(self, transport: "HTTPTransport") -> None:
        self.transport = transport

    def get_login(self) -> str:
        """
        Return the login the token authenticates as.

        Raises:
            CredentialError: If the host rejects the token
            HostAPIError: On any other unexpected response
        """
        response = self.transport.request("GET", "/user")
        if response.status_code in (401, 403):
            raise CredentialError(
                f"Token rejected by host (HTTP {response.status_code})"
            )
        login = response.field("login")
        if response.status_code != 200 or not login:
            raise error_for(response, "reading the authenticated user")
        return login
