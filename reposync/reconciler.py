"""
Repository reconciliation.

Brings the host in line with a list of RepoSpecs: missing repositories are
created and missing branches are cut from the default branch tip. Every
mutating call is preceded by an existence probe, so a second run against
an unchanged host issues no mutations. Host errors are confined to the RepoSpec
that hit them; the rest of the batch carries on.
"""

import asyncio
from collections.abc import Iterable
from typing import TYPE_CHECKING

from reposync.exceptions import HostAPIError
from reposync.logging import get_logger
from reposync.types.remote import (
    Action,
    CreateStatus,
    Probe,
    ReconcileReport,
    SpecResult,
)
from reposync.types.specs import RepoSpec

if TYPE_CHECKING:
    from reposync.async_client import AsyncHostClient
    from reposync.client import HostClient

DEFAULT_CONCURRENCY = 4

_logger = get_logger()


def _fail(result: SpecResult, error: HostAPIError, branch: bool = False) -> SpecResult:
    if branch:
        result.branch_action = Action.FAILED
    else:
        result.repo_action = Action.FAILED
    result.error = error.message
    _logger.error("%s: %s", result.spec.raw, error.message)
    return result


def _no_default_branch(spec: RepoSpec) -> HostAPIError:
    return HostAPIError(
        f"{spec.key} has no default branch to create {spec.branch} from"
    )


class RepositoryReconciler:
    """
    Creates missing repositories and branches.

    Args:
        client: HostClient (or a test double with the same surface)
        private: Visibility for newly created repositories
        dry_run: Probe only; log the creations that would happen
    """

    def __init__(
        self,
        client: "HostClient",
        private: bool = True,
        dry_run: bool = False,
    ) -> None:
        self.client = client
        self.private = private
        self.dry_run = dry_run

    def reconcile(self, specs: Iterable[RepoSpec]) -> ReconcileReport:
        """Reconcile every spec in order and collect the outcomes."""
        report = ReconcileReport()
        for spec in specs:
            report.results.append(self.reconcile_one(spec))
        return report

    def reconcile_one(self, spec: RepoSpec) -> SpecResult:
        """Probe, create if missing, then handle the requested branch."""
        result = SpecResult(spec=spec)
        repos = self.client.repos

        try:
            state = repos.probe(spec.owner, spec.name)
        except HostAPIError as e:
            return _fail(result, e)

        if state is Probe.EXISTS:
            result.repo_action = Action.EXISTS
            _logger.info("Exists: %s", spec.key)
        elif self.dry_run:
            result.repo_action = Action.SKIPPED
            _logger.info("Would create repo %s", spec.key)
            if spec.branch:
                result.branch_action = Action.SKIPPED
                _logger.info("Would create branch %s", spec.raw)
            return result
        else:
            try:
                user_scoped = self.client.owns(spec.owner)
                result.mutations += 1
                status = repos.create(
                    spec.owner,
                    spec.name,
                    private=self.private,
                    auto_init=spec.branch is not None,
                    user_scoped=user_scoped,
                )
            except HostAPIError as e:
                return _fail(result, e)
            if status is CreateStatus.CREATED:
                result.repo_action = Action.CREATED
                _logger.info("Created repo %s", spec.key)
            else:
                result.repo_action = Action.EXISTS
                _logger.warning(
                    "Repo %s already exists or is invalid (HTTP 422)", spec.key
                )

        if spec.branch:
            self._reconcile_branch(spec, result)
        return result

    def _reconcile_branch(self, spec: RepoSpec, result: SpecResult) -> None:
        assert spec.branch is not None
        git = self.client.git
        try:
            if git.probe_branch(spec.owner, spec.name, spec.branch) is Probe.EXISTS:
                result.branch_action = Action.EXISTS
                _logger.info("Branch exists: %s", spec.raw)
                return
            if self.dry_run:
                result.branch_action = Action.SKIPPED
                _logger.info("Would create branch %s", spec.raw)
                return

            remote = self.client.repos.get_state(spec.owner, spec.name)
            if not remote.exists or not remote.default_branch:
                raise _no_default_branch(spec)
            remote.default_branch_sha = git.get_branch_sha(
                spec.owner, spec.name, remote.default_branch
            )
            result.mutations += 1
            git.create_branch(
                spec.owner, spec.name, spec.branch, remote.default_branch_sha
            )
        except HostAPIError as e:
            _fail(result, e, branch=True)
            return

        result.branch_action = Action.CREATED
        _logger.info(
            "Created branch %s from %s@%s",
            spec.raw,
            remote.default_branch,
            remote.default_branch_sha,
        )


class AsyncRepositoryReconciler:
    """
    Concurrent variant of RepositoryReconciler.

    Specs run concurrently, at most ``concurrency`` at a time. Within one
    spec the probe → create → branch sequence stays strictly ordered.
    Results come back in input order.
    """

    def __init__(
        self,
        client: "AsyncHostClient",
        private: bool = True,
        dry_run: bool = False,
        concurrency: int = DEFAULT_CONCURRENCY,
    ) -> None:
        if concurrency < 1:
            raise ValueError("concurrency must be at least 1")
        self.client = client
        self.private = private
        self.dry_run = dry_run
        self.concurrency = concurrency

    async def reconcile(self, specs: Iterable[RepoSpec]) -> ReconcileReport:
        semaphore = asyncio.Semaphore(self.concurrency)

        async def bounded(spec: RepoSpec) -> SpecResult:
            async with semaphore:
                return await self.reconcile_one(spec)

        results = await asyncio.gather(*(bounded(spec) for spec in specs))
        return ReconcileReport(results=list(results))

    async def reconcile_one(self, spec: RepoSpec) -> SpecResult:
        result = SpecResult(spec=spec)
        repos = self.client.repos

        try:
            state = await repos.probe(spec.owner, spec.name)
        except HostAPIError as e:
            return _fail(result, e)

        if state is Probe.EXISTS:
            result.repo_action = Action.EXISTS
            _logger.info("Exists: %s", spec.key)
        elif self.dry_run:
            result.repo_action = Action.SKIPPED
            _logger.info("Would create repo %s", spec.key)
            if spec.branch:
                result.branch_action = Action.SKIPPED
                _logger.info("Would create branch %s", spec.raw)
            return result
        else:
            try:
                user_scoped = await self.client.owns(spec.owner)
                result.mutations += 1
                status = await repos.create(
                    spec.owner,
                    spec.name,
                    private=self.private,
                    auto_init=spec.branch is not None,
                    user_scoped=user_scoped,
                )
            except HostAPIError as e:
                return _fail(result, e)
            if status is CreateStatus.CREATED:
                result.repo_action = Action.CREATED
                _logger.info("Created repo %s", spec.key)
            else:
                result.repo_action = Action.EXISTS
                _logger.warning(
                    "Repo %s already exists or is invalid (HTTP 422)", spec.key
                )

        if spec.branch:
            await self._reconcile_branch(spec, result)
        return result

    async def _reconcile_branch(self, spec: RepoSpec, result: SpecResult) -> None:
        assert spec.branch is not None
        git = self.client.git
        try:
            state = await git.probe_branch(spec.owner, spec.name, spec.branch)
            if state is Probe.EXISTS:
                result.branch_action = Action.EXISTS
                _logger.info("Branch exists: %s", spec.raw)
                return
            if self.dry_run:
                result.branch_action = Action.SKIPPED
                _logger.info("Would create branch %s", spec.raw)
                return

            remote = await self.client.repos.get_state(spec.owner, spec.name)
            if not remote.exists or not remote.default_branch:
                raise _no_default_branch(spec)
            remote.default_branch_sha = await git.get_branch_sha(
                spec.owner, spec.name, remote.default_branch
            )
            result.mutations += 1
            await git.create_branch(
                spec.owner, spec.name, spec.branch, remote.default_branch_sha
            )
        except HostAPIError as e:
            _fail(result, e, branch=True)
            return

        result.branch_action = Action.CREATED
        _logger.info(
            "Created branch %s from %s@%s",
            spec.raw,
            remote.default_branch,
            remote.default_branch_sha,
        )
