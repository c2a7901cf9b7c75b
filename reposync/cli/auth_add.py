from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from reposync.cli.common import collect_specs, load_settings, setup_logging
from reposync.document import render_document, select_merger, update_document
from reposync.exceptions import DocumentIOError, NoBackendError
from reposync.logging import get_logger
from reposync.types.permissions import PermissionMode

_logger = get_logger()


def auth_add(
    file: Optional[Path] = typer.Option(None, "--file", "-f", help="Read repos from FILE (default: repos-to-clone.list)"),
    repos: Optional[str] = typer.Option(None, "--repo", "-r", help="Comma-separated repos; overrides the file"),
    permissions: PermissionMode = typer.Option(PermissionMode.DEFAULT, "--permissions", help="default, all (write-all) or contents (contents: write)"),
    dry_run: bool = typer.Option(False, "--dry-run", "-n", help="Print the resulting devcontainer.json instead of writing it"),
    devfile: Optional[str] = typer.Option(None, "--devfile", help="Permissions document (default: .devcontainer/devcontainer.json)"),
    backend: Optional[str] = typer.Option(None, "--backend", help="Force a merge backend: jq or native"),
    root: Optional[Path] = typer.Option(None, "--root", help="Project root (default: current directory)"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log merge details"),
) -> None:
    """Grant Codespaces access to the listed repos in devcontainer.json."""
    setup_logging(verbose)
    settings = load_settings(root, devfile=devfile)
    specs = collect_specs(settings, file, repos)

    _logger.info("Will add the following repos: %s", ", ".join(s.key for s in specs))

    path = settings.devfile_path
    if not path.is_file():
        typer.echo(f"Error: devcontainer.json not found at {path}", err=True)
        raise typer.Exit(code=1)

    try:
        merger = select_merger(prefer=backend)
        document = update_document(
            path, specs, mode=permissions, merger=merger, dry_run=dry_run
        )
    except NoBackendError as e:
        typer.echo(f"Error: {e.message}", err=True)
        raise typer.Exit(code=1)
    except DocumentIOError as e:
        typer.echo(f"Error: {e.message}", err=True)
        raise typer.Exit(code=1)

    if dry_run:
        typer.echo(render_document(document), nl=False)
    else:
        typer.echo(f"Updated {path} with {len(specs)} repos ({merger.name}).")
