"""Tests for fetching a source branch and listing its commits."""

import pytest

from crcp.core.errors import CrcpError, FetchFailed
from crcp.core.history import CommitHistoryFetcher
from tests.test_utils.builders import REPO_ROOT, SOURCE_URL, source_repo_git


def test_fetch_and_list_returns_commits_newest_first() -> None:
    git = source_repo_git(remotes=[("lib", SOURCE_URL)])

    commits = CommitHistoryFetcher(git, REPO_ROOT).fetch_and_list("lib", "main")

    assert [c.hash for c in commits] == ["abc123", "def456"]
    assert commits[0].subject == "Fix parser"
    assert git.fetched_refs == ["lib/main"]


def test_fetch_failure_names_branch() -> None:
    git = source_repo_git(remotes=[("lib", SOURCE_URL)])

    with pytest.raises(FetchFailed) as exc_info:
        CommitHistoryFetcher(git, REPO_ROOT).fetch_branch("lib", "does-not-exist")

    assert exc_info.value.branch == "does-not-exist"
    assert exc_info.value.step == "fetch"
    assert "Please check the branch" in exc_info.value.message


def test_list_commits_before_fetch_fails_with_list_commits_step() -> None:
    git = source_repo_git(remotes=[("lib", SOURCE_URL)])

    with pytest.raises(CrcpError) as exc_info:
        CommitHistoryFetcher(git, REPO_ROOT).list_commits("lib", "main")

    assert exc_info.value.step == "list commits"
