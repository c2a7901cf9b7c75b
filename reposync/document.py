"""
Permissions document merging.

Builds the per-repository Codespaces permissions and merges them into
``customizations.codespaces.repositories`` of a devcontainer.json-style
document. The merge is a shallow override at repository-key level: a key
in the batch replaces the stored entry wholesale, and every other key at
every level of the document is kept as found.

Two interchangeable backends produce the same result: ``jq`` when it is
installed, and the in-process Python implementation. Both walk the
document in Python and differ only in how the repositories object itself
is combined.
"""

import copy
import json
import os
import shutil
import subprocess
import tempfile
from collections.abc import Callable, Iterable, Sequence
from pathlib import Path
from typing import Any, Protocol

from reposync.exceptions import DocumentIOError, NoBackendError
from reposync.logging import get_logger, log_merge
from reposync.types.permissions import PermissionMode, permission_set_for
from reposync.types.specs import RepoSpec

REPOSITORIES_PATH = ("customizations", "codespaces", "repositories")

# Input is the stored repositories value, not the whole document
JQ_MERGE_FILTER = "(. // {}) + $repos"

_logger = get_logger("merge")


def build_batch(
    specs: Iterable[RepoSpec], mode: PermissionMode | str = PermissionMode.DEFAULT
) -> dict[str, dict[str, Any]]:
    """Map every spec's ``owner/name`` to the permission set for ``mode``."""
    permissions = permission_set_for(mode).to_dict()
    return {spec.key: copy.deepcopy(permissions) for spec in specs}


def combine_repositories(
    current: Any, batch: dict[str, Any], source: str = "<document>"
) -> dict[str, Any]:
    """
    Override the stored repositories object with ``batch``.

    A missing, null or false value counts as empty, the way jq's ``//``
    alternative operator treats it.

    Raises:
        DocumentIOError: If the stored value is any other non-object
    """
    if current is None or current is False:
        current = {}
    elif not isinstance(current, dict):
        raise DocumentIOError(source, f"'repositories' in {source} is not an object")
    return {**current, **copy.deepcopy(batch)}


def merge_repositories(
    existing: dict[str, Any] | None,
    batch: dict[str, Any],
    source: str = "<document>",
    combine: Callable[[Any, dict[str, Any], str], dict[str, Any]] = combine_repositories,
) -> dict[str, Any]:
    """
    Merge a permissions batch into a document without mutating either.

    Args:
        existing: The current document, or None when there is none yet
        batch: ``owner/name`` → permissions object
        source: Name used in error messages
        combine: Produces the new repositories object from the stored one

    Returns:
        The new document

    Raises:
        DocumentIOError: If a level of the structural path holds a non-object
    """
    document = {} if existing is None else copy.deepcopy(existing)
    node = document
    for key in REPOSITORIES_PATH[:-1]:
        child = node.get(key)
        if child is None:
            child = node[key] = {}
        elif not isinstance(child, dict):
            raise DocumentIOError(source, f"'{key}' in {source} is not an object")
        node = child

    last = REPOSITORIES_PATH[-1]
    node[last] = combine(node.get(last), batch, source)
    return document


class DocumentMerger(Protocol):
    """A backend able to perform the repository-level merge."""

    name: str

    def available(self) -> bool:
        ...

    def merge(
        self, existing: dict[str, Any] | None, batch: dict[str, Any]
    ) -> dict[str, Any]:
        ...


class NativeMerger:
    """In-process merge; always available."""

    name = "native"

    def available(self) -> bool:
        return True

    def merge(
        self, existing: dict[str, Any] | None, batch: dict[str, Any]
    ) -> dict[str, Any]:
        return merge_repositories(existing, batch)


class JqMerger:
    """
    Merge through the ``jq`` command-line JSON processor.

    jq decides the merged key set and order of the repositories object.
    The values placed under those keys are the Python-held originals.
    """

    name = "jq"

    def __init__(self, executable: str = "jq", timeout: float = 30.0) -> None:
        self.executable = executable
        self.timeout = timeout

    def available(self) -> bool:
        return shutil.which(self.executable) is not None

    def merge(
        self, existing: dict[str, Any] | None, batch: dict[str, Any]
    ) -> dict[str, Any]:
        return merge_repositories(existing, batch, combine=self.combine)

    def combine(
        self, current: Any, batch: dict[str, Any], source: str = "<document>"
    ) -> dict[str, Any]:
        cmd = [self.executable, "--argjson", "repos", json.dumps(batch), JQ_MERGE_FILTER]
        try:
            proc = subprocess.run(
                cmd,
                input=json.dumps(current),
                capture_output=True,
                text=True,
                timeout=self.timeout,
                check=True,
            )
        except FileNotFoundError as e:
            raise NoBackendError(f"{self.executable} not found") from e
        except subprocess.CalledProcessError as e:
            raise DocumentIOError(
                source, f"jq merge failed: {e.stderr.strip()}"
            ) from e
        except subprocess.TimeoutExpired as e:
            raise DocumentIOError(source, "jq merge timed out") from e

        try:
            merged = json.loads(proc.stdout)
        except ValueError as e:
            raise DocumentIOError(source, f"jq merge produced invalid JSON: {e}") from e
        if not isinstance(merged, dict):
            raise DocumentIOError(source, "jq merge produced a non-object")

        stored = current if isinstance(current, dict) else {}
        if not set(merged) <= set(stored) | set(batch):
            raise DocumentIOError(source, "jq merge produced unexpected keys")
        return {
            key: copy.deepcopy(batch[key]) if key in batch else stored[key]
            for key in merged
        }


def default_backends() -> list[DocumentMerger]:
    """Backends in preference order."""
    return [JqMerger(), NativeMerger()]


def select_merger(
    backends: Sequence[DocumentMerger] | None = None,
    prefer: str | None = None,
) -> DocumentMerger:
    """
    Pick the merge backend.

    Args:
        backends: Candidates in preference order (default: jq, then native)
        prefer: Name of a backend to require instead of the first available

    Raises:
        NoBackendError: If the requested (or any) backend is unavailable
    """
    candidates = list(default_backends() if backends is None else backends)
    if prefer is not None:
        candidates = [b for b in candidates if b.name == prefer]
        if not candidates:
            raise NoBackendError(f"Unknown backend: {prefer}")

    for backend in candidates:
        if backend.available():
            _logger.debug("Using %s merge backend", backend.name)
            return backend

    raise NoBackendError("No JSON tool found")


def load_document(path: str | Path) -> dict[str, Any] | None:
    """
    Read a JSON document.

    Returns:
        The parsed object, or None if the file does not exist

    Raises:
        DocumentIOError: If the file is unreadable, not JSON, or not an object
    """
    path = Path(path)
    if not path.exists():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise DocumentIOError(str(path), f"Cannot read {path}: {e}") from e
    except ValueError as e:
        raise DocumentIOError(str(path), f"Invalid JSON in {path}: {e}") from e
    if not isinstance(data, dict):
        raise DocumentIOError(str(path), f"{path} does not contain a JSON object")
    return data


def render_document(document: dict[str, Any]) -> str:
    return json.dumps(document, indent=2, ensure_ascii=False) + "\n"


def write_document_atomic(path: str | Path, document: dict[str, Any]) -> None:
    """
    Replace ``path`` with ``document``.

    The content goes to a temporary file in the same directory and is then
    renamed over the target, so readers see either the old or the new file.

    Raises:
        DocumentIOError: If the file cannot be written
    """
    path = Path(path)
    temp_path: Path | None = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            mode="w",
            encoding="utf-8",
            newline="\n",
            dir=str(path.parent),
            prefix=path.name + ".",
            suffix=".tmp",
            delete=False,
        ) as tmp:
            temp_path = Path(tmp.name)
            tmp.write(render_document(document))
            tmp.flush()
            os.fsync(tmp.fileno())
        if path.exists():
            shutil.copymode(path, temp_path)
        os.replace(temp_path, path)
        temp_path = None
    except OSError as e:
        raise DocumentIOError(str(path), f"Cannot write {path}: {e}") from e
    finally:
        if temp_path is not None and temp_path.exists():
            temp_path.unlink()


def update_document(
    path: str | Path,
    specs: Iterable[RepoSpec],
    mode: PermissionMode | str = PermissionMode.DEFAULT,
    merger: DocumentMerger | None = None,
    dry_run: bool = False,
) -> dict[str, Any]:
    """
    Merge permissions for ``specs`` into the document at ``path``.

    In dry-run mode nothing is written; the caller prints the result.

    Returns:
        The new document
    """
    path = Path(path)
    merger = merger or select_merger()
    batch = build_batch(specs, mode)

    existing = load_document(path)
    document = merger.merge(existing, batch)
    log_merge(merger.name, str(path), list(batch), dry_run)

    if not dry_run:
        write_document_atomic(path, document)
        _logger.info("Updated '%s' with %s.", path, merger.name)
    return document
