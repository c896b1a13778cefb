"""Fetching a source branch and reading its commit history."""

import logging
from pathlib import Path

from crcp.core.errors import CrcpError, FetchFailed
from crcp.core.git.abc import Git
from crcp.core.parsing import parse_commit_log
from crcp.core.types import CommitRecord

logger = logging.getLogger(__name__)


class CommitHistoryFetcher:
    """Fetches `<remote>/<branch>` and decodes its linear history."""

    def __init__(self, git: Git, repo_root: Path) -> None:
        self._git = git
        self._repo_root = repo_root

    def fetch_branch(self, remote_name: str, branch: str) -> None:
        """Fetch branch from remote_name.

        Raises:
            FetchFailed: On any failure of the fetch, carrying the branch name
        """
        logger.debug("Fetching %s from %s", branch, remote_name)
        try:
            self._git.fetch_branch(self._repo_root, remote_name, branch)
        except RuntimeError as e:
            raise FetchFailed(remote_name, branch, str(e)) from e

    def list_commits(self, remote_name: str, branch: str) -> list[CommitRecord]:
        """Commits of `<remote_name>/<branch>`, newest first.

        Must run after fetch_branch() succeeded for the same pair.

        Raises:
            HistoryParseError: If a log line cannot be decoded
        """
        ref = f"{remote_name}/{branch}"
        try:
            output = self._git.get_branch_log(self._repo_root, ref)
        except RuntimeError as e:
            raise CrcpError(str(e), step="list commits") from e
        commits = parse_commit_log(output)
        logger.debug("Read %d commits from %s", len(commits), ref)
        return commits

    def fetch_and_list(self, remote_name: str, branch: str) -> list[CommitRecord]:
        """Fetch then list; the interactive discovery entry point."""
        self.fetch_branch(remote_name, branch)
        return self.list_commits(remote_name, branch)
