"""
Runtime settings.

Settings come from REPOSYNC_* environment variables; CLI flags override
them field by field.
"""

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

from reposync.exceptions import ConfigurationError

DEFAULT_API_URL = "https://api.github.com"
DEFAULT_TIMEOUT = 30.0
DEFAULT_REPOS_FILE = "repos-to-clone.list"
DEFAULT_DEVFILE = ".devcontainer/devcontainer.json"


@dataclass(frozen=True)
class Settings:
    """Resolved configuration for one invocation."""

    api_url: str = DEFAULT_API_URL
    timeout: float = DEFAULT_TIMEOUT
    root: Path = field(default_factory=Path.cwd)
    repos_file: str = DEFAULT_REPOS_FILE
    devfile: str = DEFAULT_DEVFILE

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> "Settings":
        """
        Build settings from environment variables.

        Environment variables:
            REPOSYNC_API_URL: Host API base URL (default: https://api.github.com)
            REPOSYNC_TIMEOUT: Per-request timeout in seconds (default: 30)
            REPOSYNC_ROOT: Project root (default: current directory)
            REPOSYNC_REPOS_FILE: Specifier list, relative to root (default: repos-to-clone.list)
            REPOSYNC_DEVFILE: Permissions document, relative to root
                (default: .devcontainer/devcontainer.json)

        Raises:
            ConfigurationError: If a value cannot be parsed
        """
        env = os.environ if environ is None else environ

        timeout_str = env.get("REPOSYNC_TIMEOUT")
        timeout = DEFAULT_TIMEOUT
        if timeout_str:
            try:
                timeout = float(timeout_str)
            except ValueError:
                raise ConfigurationError(
                    f"Invalid REPOSYNC_TIMEOUT: {timeout_str!r}"
                ) from None
            if timeout <= 0:
                raise ConfigurationError("REPOSYNC_TIMEOUT must be positive")

        root = Path(env["REPOSYNC_ROOT"]) if env.get("REPOSYNC_ROOT") else Path.cwd()

        return cls(
            api_url=env.get("REPOSYNC_API_URL") or DEFAULT_API_URL,
            timeout=timeout,
            root=root,
            repos_file=env.get("REPOSYNC_REPOS_FILE") or DEFAULT_REPOS_FILE,
            devfile=env.get("REPOSYNC_DEVFILE") or DEFAULT_DEVFILE,
        )

    def override(self, **changes: Any) -> "Settings":
        """Return a copy with every non-None change applied."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})

    def resolve(self, path: str | Path) -> Path:
        """Resolve a path against the project root unless it is absolute."""
        path = Path(path)
        return path if path.is_absolute() else self.root / path

    @property
    def repos_path(self) -> Path:
        return self.resolve(self.repos_file)

    @property
    def devfile_path(self) -> Path:
        return self.resolve(self.devfile)
