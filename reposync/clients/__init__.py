"""Host API resource clients."""

from reposync.clients.git import GitClient
from reposync.clients.repos import ReposClient
from reposync.clients.users import UsersClient

__all__ = [
    "ReposClient",
    "GitClient",
    "UsersClient",
]
