from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer

from reposync.config import Settings
from reposync.exceptions import ConfigurationError, DocumentIOError, ValidationError
from reposync.logging import configure_logging, get_logger
from reposync.parser import ParseResult, dedupe, parse_override, read_spec_file
from reposync.types.specs import RepoSpec
from reposync.validator import require_valid

_logger = get_logger()


def setup_logging(verbose: bool) -> None:
    configure_logging(
        level=logging.DEBUG if verbose else logging.INFO,
        http_level=logging.DEBUG if verbose else logging.WARNING,
    )


def load_settings(root: Optional[Path], **overrides: object) -> Settings:
    """Environment settings with CLI overrides applied."""
    try:
        settings = Settings.from_env()
    except ConfigurationError as e:
        typer.echo(f"Error: {e.message}", err=True)
        raise typer.Exit(code=1)
    return settings.override(root=root, **overrides)


def collect_specs(
    settings: Settings, file: Optional[Path], repos: Optional[str]
) -> list[RepoSpec]:
    """
    Read, normalize, dedupe and validate specifiers.

    The comma-separated ``repos`` override wins over the list file. Bad
    specifiers are reported and dropped; an empty result ends the command.
    """
    if repos:
        parsed = parse_override(repos)
    else:
        path = settings.resolve(file) if file else settings.repos_path
        try:
            parsed = read_spec_file(path)
        except DocumentIOError as e:
            typer.echo(f"Error: {e.message}", err=True)
            raise typer.Exit(code=1)

    _report_parse_errors(parsed)

    try:
        return require_valid(dedupe(parsed.specs))
    except ValidationError as e:
        typer.echo(f"Error: {e.message}", err=True)
        raise typer.Exit(code=1)


def _report_parse_errors(parsed: ParseResult) -> None:
    for error in parsed.errors:
        _logger.warning("Skipping invalid or disallowed: %s", error.raw.strip())
