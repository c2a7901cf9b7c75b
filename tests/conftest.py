"""Shared fixtures for the reposync test suite."""

from reposync.testing.fixtures import (  # noqa: F401
    devcontainer_file,
    mock_async_host,
    mock_host,
    sample_document,
    sample_specs,
)
