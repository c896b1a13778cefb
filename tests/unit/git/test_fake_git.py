"""Tests for FakeGit behaving like git where the workflow depends on it."""

from pathlib import Path

import pytest

from crcp.core.git.abc import OutputLine, ProcessExit
from crcp.core.git.fake import FakeGit, ScriptedCherryPick
from crcp.core.parsing import parse_commit_log, parse_unmerged_paths
from tests.test_utils.builders import REPO_ROOT, SOURCE_URL, source_repo_git


def test_remote_listing_has_fetch_and_push_entries() -> None:
    git = FakeGit(remotes=[("lib", SOURCE_URL)])

    assert git.list_remotes_verbose(REPO_ROOT) == (
        f"lib\t{SOURCE_URL} (fetch)\nlib\t{SOURCE_URL} (push)\n"
    )


def test_empty_remote_listing() -> None:
    assert FakeGit().list_remotes_verbose(REPO_ROOT) == ""


def test_add_remote_rejects_duplicate_name() -> None:
    git = FakeGit(remotes=[("lib", SOURCE_URL)])

    with pytest.raises(RuntimeError, match="already exists"):
        git.add_remote(REPO_ROOT, "lib", "git@github.com:other/lib.git")


def test_log_requires_fetch_first() -> None:
    git = source_repo_git(remotes=[("lib", SOURCE_URL)])

    with pytest.raises(RuntimeError, match="bad revision"):
        git.get_branch_log(REPO_ROOT, "lib/main")

    git.fetch_branch(REPO_ROOT, "lib", "main")
    commits = parse_commit_log(git.get_branch_log(REPO_ROOT, "lib/main"))

    assert [c.hash for c in commits] == ["abc123", "def456"]


def test_fetch_of_unknown_branch_fails() -> None:
    git = source_repo_git(remotes=[("lib", SOURCE_URL)])

    with pytest.raises(RuntimeError, match="couldn't find remote ref"):
        git.fetch_branch(REPO_ROOT, "lib", "nope")


def test_cannot_delete_checked_out_branch() -> None:
    git = FakeGit(local_branches=["main"], current_branch="main")

    with pytest.raises(RuntimeError, match="checked out"):
        git.delete_branch(REPO_ROOT, "main", force=True)


def test_checkout_new_branch_with_reset_keeps_single_entry() -> None:
    git = FakeGit(local_branches=["main", "temp-main"], current_branch="temp-main")

    git.checkout_new_branch(REPO_ROOT, "temp-main", "main", reset=True)

    assert git.local_branches == ["main", "temp-main"]
    assert git.branch_heads == {"temp-main": "main"}


def test_cherry_pick_conflict_leaves_unmerged_paths() -> None:
    git = FakeGit(
        cherry_pick=ScriptedCherryPick(
            returncode=1, stdout=("Auto-merging a.py",), unmerged_files=("a.py",)
        )
    )

    events = list(git.cherry_pick_streaming(REPO_ROOT, "abc123"))

    assert events == [OutputLine(stream="stdout", text="Auto-merging a.py"), ProcessExit(1)]
    assert parse_unmerged_paths(git.get_porcelain_status(REPO_ROOT)) == frozenset({"a.py"})


def test_fail_on_raises_runtime_error() -> None:
    git = FakeGit(fail_on={"push_with_upstream"})

    with pytest.raises(RuntimeError, match="Failed to push with upstream"):
        git.push_with_upstream(REPO_ROOT, "origin", "release")


def test_git_dir_is_under_repo_root() -> None:
    assert FakeGit(repo_root=Path("/x")).get_git_dir(Path("/x/y")) == Path("/x/.git")
    assert FakeGit().get_git_dir(Path("/x")) is None
