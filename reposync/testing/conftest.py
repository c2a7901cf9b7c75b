"""
Pytest plugin for reposync testing fixtures.

This module re-exports all fixtures from fixtures.py so they can be
discovered by pytest. Add this to your conftest.py:

    pytest_plugins = ["reposync.testing.conftest"]

Or import the fixtures directly:

    from reposync.testing.fixtures import mock_host, sample_specs
"""

from reposync.testing.fixtures import (
    devcontainer_file,
    mock_async_host,
    mock_host,
    sample_document,
    sample_specs,
)

__all__ = [
    "mock_host",
    "mock_async_host",
    "sample_specs",
    "sample_document",
    "devcontainer_file",
]
