"""End-to-end sequencing of the cross-repository cherry-pick.

Pipeline:

    resolve remote -> fetch source branch -> create temp-<source> from
    <remote>/<source> -> switch to (or create and publish) target branch ->
    cherry-pick -> push gate -> delete temporary branch

Conflicts and failures stop the pipeline after the cherry-pick and leave the
temporary branch and the working tree as they are, for manual recovery.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, replace
from pathlib import Path

from crcp.core.branches import BranchLifecycleManager
from crcp.core.cherry_pick import (
    Applied,
    CherryPickExecutor,
    Conflicted,
    Failed,
    OutputListener,
)
from crcp.core.errors import CrcpError
from crcp.core.git.abc import Git
from crcp.core.history import CommitHistoryFetcher
from crcp.core.push import PushGate
from crcp.core.remotes import RemoteResolver, derive_repo_name, normalize_url
from crcp.core.types import CommitRecord, RemoteSpec, temporary_branch_name
from crcp.core.user_feedback import UserFeedback

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WorkflowConfig:
    """Everything one run needs, fixed before the first git side effect.

    Use WorkflowConfig.create() to build one: it validates the URL and fills
    in the derived remote name.
    """

    remote_name: str
    remote_url: str
    source_branch: str
    commit_hash: str
    target_branch: str

    @staticmethod
    def create(
        *,
        remote_url: str,
        source_branch: str,
        commit_hash: str,
        target_branch: str,
        remote_name: str | None = None,
    ) -> "WorkflowConfig":
        """Validate inputs and build the config.

        Raises:
            InvalidUrlFormat: If remote_url is not a recognized remote URL
            CrcpError: If a branch name or the commit hash is empty
        """
        for label, value in (
            ("Source branch name", source_branch),
            ("Commit hash", commit_hash),
            ("Target branch name", target_branch),
        ):
            if not value.strip():
                raise CrcpError(f"{label} is required.", step="load configuration")
        normalize_url(remote_url)
        return WorkflowConfig(
            remote_name=remote_name if remote_name is not None else derive_repo_name(remote_url),
            remote_url=remote_url.strip(),
            source_branch=source_branch.strip(),
            commit_hash=commit_hash.strip(),
            target_branch=target_branch.strip(),
        )

    @property
    def temporary_branch(self) -> str:
        return temporary_branch_name(self.source_branch)


@dataclass(frozen=True)
class Pushed:
    """Cherry-pick applied and the result was force-pushed."""

    commit_summary: str


@dataclass(frozen=True)
class CompletedNotPushed:
    """Cherry-pick applied; the push was declined."""

    commit_summary: str


@dataclass(frozen=True)
class ConflictPendingManualResolution:
    """Cherry-pick stopped on conflicts that a human has to resolve."""

    conflicting_files: tuple[str, ...]
    changed_files: tuple[str, ...]


@dataclass(frozen=True)
class RunFailed:
    """A fatal error aborted the run at step."""

    step: str
    reason: str


RunStatus = Pushed | CompletedNotPushed | ConflictPendingManualResolution | RunFailed


class WorkflowOrchestrator:
    """Runs the pipeline for one WorkflowConfig against one repository."""

    def __init__(
        self,
        git: Git,
        repo_root: Path,
        *,
        feedback: UserFeedback,
        listener: OutputListener,
        dry_run: bool = False,
    ) -> None:
        self._git = git
        self._repo_root = repo_root
        self._feedback = feedback
        self._dry_run = dry_run
        self.remotes = RemoteResolver(git, repo_root)
        self.history = CommitHistoryFetcher(git, repo_root)
        self.branches = BranchLifecycleManager(git, repo_root)
        self.executor = CherryPickExecutor(git, repo_root, listener)
        self.push_gate = PushGate(git, repo_root)

    def discover_commits(
        self, remote_url: str, source_branch: str
    ) -> tuple[RemoteSpec, list[CommitRecord]]:
        """Resolve the remote, fetch source_branch and list its commits.

        Used only by interactive discovery, before a WorkflowConfig exists.
        """
        remote = self.remotes.ensure_remote(remote_url)
        self._feedback.info(f"Fetching branch {source_branch} from remote {remote.name}...")
        return remote, self.history.fetch_and_list(remote.name, source_branch)

    def bind_remote_name(self, config: WorkflowConfig) -> WorkflowConfig:
        """Return config naming the remote a run will actually fetch from.

        A connected remote for the URL is reused under its own name, which may
        differ from the one derived from the URL.
        """
        existing = self.remotes.find_remote(config.remote_url)
        if existing is None or existing.name == config.remote_name:
            return config
        return replace(config, remote_name=existing.name)

    def run(self, config: WorkflowConfig, confirm_push: Callable[[], bool]) -> RunStatus:
        """Execute the pipeline; every CrcpError becomes a RunFailed status.

        Args:
            config: The frozen run configuration
            confirm_push: Asked only after a clean apply; True force-pushes
        """
        step = "resolve remote"
        try:
            remote = self.remotes.ensure_remote(config.remote_url)

            step = "fetch"
            self._feedback.info("Fetching from source repository...")
            self.history.fetch_branch(remote.name, config.source_branch)

            step = "create temporary branch"
            temporary = config.temporary_branch
            self.branches.create_temporary(temporary, f"{remote.name}/{config.source_branch}")
            self._feedback.info(f'Create and switch to a new temporary branch - "{temporary}".')

            step = "switch target branch"
            self._feedback.info(f'Checking if target branch "{config.target_branch}" exists...')
            target = self.branches.ensure_target(config.target_branch)
            if target.exists:
                self._feedback.info(f'Switched to existing target branch "{target.name}".')
            else:
                self._feedback.info(
                    f'Created target branch "{target.name}" and published it to origin.'
                )

            step = "cherry-pick"
            self._feedback.info(f"Cherry-picking commit {config.commit_hash}...")
            result = self.executor.apply(config.commit_hash)

            match result:
                case Conflicted(conflicting_files=files):
                    logger.debug("Cherry-pick conflicted on %s", sorted(files))
                    return ConflictPendingManualResolution(
                        conflicting_files=tuple(sorted(files)),
                        changed_files=tuple(self._changed_files()),
                    )
                case Failed(reason=reason):
                    return RunFailed(step=step, reason=reason)
                case Applied():
                    pass

            self._feedback.success("Cherry-pick successful")
            # In a dry run HEAD is not the picked commit
            summary = "" if self._dry_run else self._commit_summary()
            if summary:
                self._feedback.info(summary)

            step = "push"
            pushed = self.push_gate.push(temporary, config.target_branch, confirmed=confirm_push())

            step = "cleanup"
            self._feedback.info("Cleaning up...")
            self.branches.delete_temporary(temporary)
        except CrcpError as e:
            failed_step = e.step if e.step != CrcpError.step else step
            logger.debug("Run failed at %s", failed_step, exc_info=True)
            return RunFailed(step=failed_step, reason=e.message)

        if pushed:
            return Pushed(commit_summary=summary)
        return CompletedNotPushed(commit_summary=summary)

    def _changed_files(self) -> list[str]:
        try:
            return self._git.list_changed_files(self._repo_root)
        except RuntimeError as e:
            logger.warning("Could not list changed files: %s", e)
            return []

    def _commit_summary(self) -> str:
        try:
            return self._git.get_last_commit_summary(self._repo_root).strip()
        except RuntimeError as e:
            logger.warning("Could not summarize the cherry-picked commit: %s", e)
            return ""
