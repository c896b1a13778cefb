"""Shared test data for crcp tests."""

from datetime import datetime
from pathlib import Path

from crcp.core.git.fake import FakeGit, ScriptedCherryPick
from crcp.core.types import CommitRecord

REPO_ROOT = Path("/repo")
SOURCE_URL = "git@github.com:acme/lib.git"
SOURCE_URL_HTTPS = "https://github.com/acme/lib.git"
ORIGIN_URL = "git@github.com:acme/app.git"


def commit(
    sha: str,
    subject: str = "Fix parser",
    author: str = "Ada Lovelace",
    date: datetime | None = None,
) -> CommitRecord:
    return CommitRecord(
        hash=sha,
        author=author,
        date=date or datetime(2024, 5, 1, 12, 30, 0),
        subject=subject,
    )


def source_repo_git(
    *,
    local_branches: list[str] | None = None,
    remotes: list[tuple[str, str]] | None = None,
    cherry_pick: ScriptedCherryPick | None = None,
    changed_files: list[str] | None = None,
    fail_on: set[str] | None = None,
    repo_root: Path = REPO_ROOT,
) -> FakeGit:
    """FakeGit for a repository whose origin is acme/app and that can fetch lib/main."""
    return FakeGit(
        repo_root=repo_root,
        remotes=remotes if remotes is not None else [("origin", ORIGIN_URL)],
        local_branches=local_branches if local_branches is not None else ["main"],
        current_branch="main",
        commit_logs={
            "lib/main": [
                commit("abc123", "Fix parser"),
                commit("def456", "Add tokenizer", date=datetime(2024, 4, 30, 9, 0, 0)),
            ]
        },
        cherry_pick=cherry_pick,
        changed_files=changed_files,
        last_commit_summary="commit abc123\n src/parser.py | 2 +-",
        fail_on=fail_on,
    )
