"""Async host API resource clients."""

from reposync.async_clients.git import AsyncGitClient
from reposync.async_clients.repos import AsyncReposClient
from reposync.async_clients.users import AsyncUsersClient

__all__ = [
    "AsyncReposClient",
    "AsyncGitClient",
    "AsyncUsersClient",
]
