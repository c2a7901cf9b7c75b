"""
Specifier parsing.

Turns raw specifier lines (from a list file) or comma-separated override
tokens into normalized RepoSpec values. Parsing never aborts a whole run:
malformed specifiers are collected as ParseErrors for the caller to report.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from reposync.exceptions import DocumentIOError, ParseError
from reposync.types.specs import RepoSpec

GITHUB_URL_PREFIX = "https://github.com/"


@dataclass
class ParseResult:
    """Specs parsed from one input, in input order, plus the rejects."""

    specs: list[RepoSpec] = field(default_factory=list)
    errors: list[ParseError] = field(default_factory=list)


def normalize(raw: str) -> RepoSpec:
    """
    Normalize one raw specifier into a RepoSpec.

    Steps, in order: keep the first whitespace token, split off ``@branch``,
    drop one trailing ``/``, drop the ``https://github.com/`` prefix, drop a
    trailing ``.git``.

    Args:
        raw: A specifier such as ``https://github.com/octocat/Hello-World.git@dev``

    Returns:
        The normalized RepoSpec

    Raises:
        ParseError: If the remaining token has no ``/``
    """
    tokens = raw.split()
    token = tokens[0] if tokens else ""

    branch: str | None = None
    if "@" in token:
        token, branch = token.split("@", 1)
        branch = branch or None

    if token.endswith("/"):
        token = token[:-1]
    if token.startswith(GITHUB_URL_PREFIX):
        token = token[len(GITHUB_URL_PREFIX):]
    if token.endswith(".git"):
        token = token[: -len(".git")]

    if "/" not in token:
        raise ParseError(raw, f"Not an owner/repo specifier: {raw.strip()!r}")

    owner, name = token.split("/", 1)
    return RepoSpec(owner=owner, name=name, branch=branch)


def _is_skippable(line: str) -> bool:
    stripped = line.strip()
    return not stripped or stripped.startswith("#")


def _parse_tokens(tokens: Iterable[str]) -> ParseResult:
    result = ParseResult()
    for token in tokens:
        if _is_skippable(token):
            continue
        try:
            result.specs.append(normalize(token))
        except ParseError as e:
            result.errors.append(e)
    return result


def parse_lines(lines: Iterable[str]) -> ParseResult:
    """Parse list-file lines, skipping blanks and ``#`` comments."""
    return _parse_tokens(lines)


def parse_override(text: str) -> ParseResult:
    """Parse a comma-separated override list."""
    return _parse_tokens(text.split(","))


def read_spec_file(path: str | Path) -> ParseResult:
    """
    Read and parse a specifier list file.

    Raises:
        DocumentIOError: If the file does not exist or cannot be read
    """
    path = Path(path)
    if not path.is_file():
        raise DocumentIOError(str(path), f"File not found: {path}")
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise DocumentIOError(str(path), f"Cannot read {path}: {e}") from e
    return parse_lines(text.splitlines())


def dedupe(specs: Iterable[RepoSpec]) -> list[RepoSpec]:
    """
    Collapse duplicate ``owner/name`` keys.

    The first occurrence keeps its position; the branch of the last
    occurrence wins.
    """
    merged: dict[str, RepoSpec] = {}
    for spec in specs:
        merged[spec.key] = spec
    # dict keeps first-insertion order even when a key is reassigned
    return list(merged.values())
