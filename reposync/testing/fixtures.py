"""
Pytest fixtures for reposync testing.

Provides common fixtures for tests that drive the reconciler or the
document merger.
"""

import json
from pathlib import Path
from typing import Any, Generator

import pytest

from reposync.testing.mock import MockAsyncHostClient, MockHostClient
from reposync.types.specs import RepoSpec


def create_spec(key: str = "acme/new-svc", branch: str | None = None) -> RepoSpec:
    """Build a RepoSpec from ``owner/name``."""
    owner, name = key.split("/", 1)
    return RepoSpec(owner=owner, name=name, branch=branch)


def create_devcontainer(
    root: Path,
    document: dict[str, Any] | None = None,
    relative: str = ".devcontainer/devcontainer.json",
) -> Path:
    """Write a devcontainer document under ``root`` and return its path."""
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(document if document is not None else {}, indent=2))
    return path


# ============================================================================
# Mock Client Fixtures
# ============================================================================


@pytest.fixture
def mock_host() -> Generator[MockHostClient, None, None]:
    """
    Provide a MockHostClient authenticated as ``octocat``.

    Example:
        ```python
        def test_creates_missing(mock_host):
            RepositoryReconciler(mock_host).reconcile([create_spec()])
            assert mock_host.was_called("repos.create")
        ```
    """
    client = MockHostClient(login="octocat")
    yield client
    client.reset()


@pytest.fixture
def mock_async_host(mock_host: MockHostClient) -> MockAsyncHostClient:
    """Async face over ``mock_host`` (same fake remote and call log)."""
    return MockAsyncHostClient(mock_host)


# ============================================================================
# Data Fixtures
# ============================================================================


@pytest.fixture
def sample_specs() -> list[RepoSpec]:
    """A user repo, an org repo with a branch, and an org repo without one."""
    return [
        create_spec("octocat/Hello-World"),
        create_spec("acme/new-svc", branch="feature-x"),
        create_spec("acme/tools"),
    ]


@pytest.fixture
def sample_document() -> dict[str, Any]:
    """A devcontainer document with unrelated settings around the owned path."""
    return {
        "name": "dev",
        "image": "mcr.microsoft.com/devcontainers/python:3.12",
        "customizations": {
            "vscode": {"extensions": ["ms-python.python"]},
            "codespaces": {
                "openFiles": ["README.md"],
                "repositories": {
                    "acme/legacy": {"permissions": "write-all"},
                },
            },
        },
    }


@pytest.fixture
def devcontainer_file(tmp_path: Path, sample_document: dict[str, Any]) -> Path:
    """``sample_document`` written to ``<tmp>/.devcontainer/devcontainer.json``."""
    return create_devcontainer(tmp_path, sample_document)
