"""reposync testing utilities.

Provides a mock host client and fixtures for testing code that reconciles
repositories or merges permissions documents.
"""

from reposync.testing.fixtures import create_devcontainer, create_spec
from reposync.testing.mock import (
    FakeRepo,
    MockAsyncHostClient,
    MockCall,
    MockHostClient,
    fake_sha,
)

__all__ = [
    # Mock client
    "MockHostClient",
    "MockAsyncHostClient",
    "MockCall",
    "FakeRepo",
    # Helper functions
    "fake_sha",
    "create_spec",
    "create_devcontainer",
]
