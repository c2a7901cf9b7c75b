"""
Credential discovery for the host API.

A CredentialProvider is queried once at startup. Tokens come from the
environment first, then from git's credential helpers.
"""

import os
import subprocess
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Protocol

from reposync.exceptions import CredentialError
from reposync.logging import get_logger

TOKEN_ENV_VARS = ("GH_TOKEN", "GITHUB_TOKEN")
CREDENTIAL_HOSTS = ("api.github.com", "github.com")

_logger = get_logger()


@dataclass(frozen=True)
class Credential:
    """A bearer token and, when the source knows it, the account login."""

    token: str = field(repr=False)
    username: str | None = None
    source: str = "unknown"

    def __repr__(self) -> str:
        return (
            f"Credential(token='[REDACTED]', username={self.username!r}, "
            f"source={self.source!r})"
        )


class CredentialProvider(Protocol):
    """Anything that can produce a Credential or report that it has none."""

    def get_credential(self) -> Credential | None:
        ...


class EnvCredentialProvider:
    """Reads a token from GH_TOKEN, then GITHUB_TOKEN."""

    def __init__(
        self,
        names: Sequence[str] = TOKEN_ENV_VARS,
        environ: dict[str, str] | None = None,
    ) -> None:
        self.names = tuple(names)
        self._environ = environ

    def get_credential(self) -> Credential | None:
        env = os.environ if self._environ is None else self._environ
        for name in self.names:
            token = env.get(name)
            if token:
                return Credential(token=token, source=name)
        return None


def parse_credential_output(output: str) -> dict[str, str]:
    """Parse ``key=value`` lines as printed by ``git credential fill``."""
    fields: dict[str, str] = {}
    for line in output.splitlines():
        key, sep, value = line.partition("=")
        if sep:
            fields[key.strip()] = value
    return fields


class GitCredentialProvider:
    """
    Asks git's configured credential helpers for a host token.

    Hosts are tried in order; the first answer carrying a password wins.
    Prompting is disabled so a missing credential never blocks.
    """

    def __init__(
        self,
        hosts: Sequence[str] = CREDENTIAL_HOSTS,
        timeout: float = 10.0,
    ) -> None:
        self.hosts = tuple(hosts)
        self.timeout = timeout

    def _fill(self, host: str) -> dict[str, str]:
        env = {**os.environ, "GIT_TERMINAL_PROMPT": "0", "GIT_ASKPASS": ""}
        try:
            proc = subprocess.run(
                ["git", "credential", "fill"],
                input=f"protocol=https\nhost={host}\n\n",
                capture_output=True,
                text=True,
                timeout=self.timeout,
                env=env,
            )
        except (OSError, subprocess.TimeoutExpired) as e:
            _logger.debug("git credential fill for %s failed: %s", host, e)
            return {}
        if proc.returncode != 0:
            return {}
        return parse_credential_output(proc.stdout)

    def get_credential(self) -> Credential | None:
        for host in self.hosts:
            fields = self._fill(host)
            token = fields.get("password")
            if token:
                return Credential(
                    token=token,
                    username=fields.get("username") or None,
                    source=f"git-credential:{host}",
                )
        return None


class ChainCredentialProvider:
    """Returns the first credential produced by a list of providers."""

    def __init__(self, providers: Sequence[CredentialProvider]) -> None:
        self.providers = list(providers)

    def get_credential(self) -> Credential | None:
        for provider in self.providers:
            credential = provider.get_credential()
            if credential is not None:
                return credential
        return None


def default_provider() -> ChainCredentialProvider:
    """Environment variables first, then git credential helpers."""
    return ChainCredentialProvider([EnvCredentialProvider(), GitCredentialProvider()])


def require_credential(provider: CredentialProvider | None = None) -> Credential:
    """
    Acquire a credential or fail.

    Raises:
        CredentialError: If no provider yields a token
    """
    provider = provider or default_provider()
    credential = provider.get_credential()
    if credential is None:
        raise CredentialError(
            "Could not retrieve a GitHub token: set GH_TOKEN or configure "
            "a git credential helper"
        )
    _logger.debug("Using credential from %s", credential.source)
    return credential
