from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Optional

import typer

from reposync.async_client import AsyncHostClient
from reposync.cli.common import collect_specs, load_settings, setup_logging
from reposync.client import HostClient
from reposync.config import Settings
from reposync.credentials import Credential, require_credential
from reposync.exceptions import CredentialError, HostAPIError
from reposync.reconciler import AsyncRepositoryReconciler, RepositoryReconciler
from reposync.types.remote import ReconcileReport
from reposync.types.specs import RepoSpec


def _run_sync(
    credential: Credential, settings: Settings, specs: list[RepoSpec], private: bool, dry_run: bool
) -> ReconcileReport:
    with HostClient.from_credential(credential, settings) as client:
        # Resolve the login up front so a rejected token fails the run here
        _ = client.login
        return RepositoryReconciler(client, private=private, dry_run=dry_run).reconcile(specs)


async def _run_async(
    credential: Credential,
    settings: Settings,
    specs: list[RepoSpec],
    private: bool,
    dry_run: bool,
    concurrency: int,
) -> ReconcileReport:
    async with AsyncHostClient.from_credential(credential, settings) as client:
        await client.get_login()
        reconciler = AsyncRepositoryReconciler(
            client, private=private, dry_run=dry_run, concurrency=concurrency
        )
        return await reconciler.reconcile(specs)


def create_repos(
    file: Optional[Path] = typer.Option(None, "--file", "-f", help="Read repos from FILE (default: repos-to-clone.list)"),
    repos: Optional[str] = typer.Option(None, "--repo", "-r", help="Comma-separated repos; overrides the file"),
    public: bool = typer.Option(False, "--public", "-p", help="Create repos as public (default: private)"),
    dry_run: bool = typer.Option(False, "--dry-run", "-n", help="Only report what would be created"),
    concurrency: int = typer.Option(1, "--concurrency", "-j", min=1, help="Repos to reconcile in parallel"),
    api_url: Optional[str] = typer.Option(None, "--api-url", help="Host API base URL"),
    root: Optional[Path] = typer.Option(None, "--root", help="Project root (default: current directory)"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log every API call"),
) -> None:
    """Create missing GitHub repositories and branches from a repo list."""
    setup_logging(verbose)
    settings = load_settings(root, api_url=api_url)
    specs = collect_specs(settings, file, repos)

    try:
        credential = require_credential()
        if concurrency > 1:
            report = asyncio.run(
                _run_async(credential, settings, specs, not public, dry_run, concurrency)
            )
        else:
            report = _run_sync(credential, settings, specs, not public, dry_run)
    except CredentialError as e:
        typer.echo(f"Error: {e.message}", err=True)
        raise typer.Exit(code=1)
    except HostAPIError as e:
        typer.echo(f"Error: {e.message}", err=True)
        raise typer.Exit(code=1)

    for failure in report.failures:
        typer.echo(f"Failed: {failure.spec.raw}: {failure.error}", err=True)
    typer.echo(report.summary())
