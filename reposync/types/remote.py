"""Remote state and reconciliation result models."""

from dataclasses import dataclass, field
from enum import Enum

from reposync.types.specs import RepoSpec


class Probe(str, Enum):
    """Outcome of an existence probe (200 / 404 / anything else)."""

    EXISTS = "exists"
    MISSING = "missing"
    UNKNOWN = "unknown"


class CreateStatus(str, Enum):
    """Outcome of a repository create call (201 / 422 / anything else)."""

    CREATED = "created"
    ALREADY_EXISTS = "already_exists"
    FAILED = "failed"


def probe_from_status(status_code: int) -> Probe:
    if status_code == 200:
        return Probe.EXISTS
    if status_code == 404:
        return Probe.MISSING
    return Probe.UNKNOWN


def create_status_from(status_code: int) -> CreateStatus:
    # 422 covers both "name already exists" and invalid payloads
    if status_code == 201:
        return CreateStatus.CREATED
    if status_code == 422:
        return CreateStatus.ALREADY_EXISTS
    return CreateStatus.FAILED


class Action(str, Enum):
    """What the reconciler did for one step of one spec."""

    EXISTS = "exists"
    CREATED = "created"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class RemoteRepoState:
    """Observed repository state on the host."""

    exists: bool
    default_branch: str | None = None
    default_branch_sha: str | None = None


@dataclass
class SpecResult:
    """Per-spec reconciliation outcome."""

    spec: RepoSpec
    repo_action: Action = Action.SKIPPED
    branch_action: Action | None = None
    error: str | None = None
    mutations: int = 0

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class ReconcileReport:
    """Ordered results of one reconciliation run."""

    results: list[SpecResult] = field(default_factory=list)

    @property
    def created_repos(self) -> list[str]:
        return [r.spec.key for r in self.results if r.repo_action is Action.CREATED]

    @property
    def created_branches(self) -> list[str]:
        return [
            r.spec.raw for r in self.results if r.branch_action is Action.CREATED
        ]

    @property
    def failures(self) -> list[SpecResult]:
        return [r for r in self.results if not r.ok]

    @property
    def mutations(self) -> int:
        return sum(r.mutations for r in self.results)

    def summary(self) -> str:
        return (
            f"{len(self.results)} repos checked, "
            f"{len(self.created_repos)} created, "
            f"{len(self.created_branches)} branches created, "
            f"{len(self.failures)} failed"
        )
