"""Fake git operations for testing.

FakeGit is an in-memory implementation that accepts pre-configured state
in its constructor. Construct instances directly with keyword arguments.
"""

from collections.abc import Iterator
from dataclasses import dataclass, field
from fnmatch import fnmatchcase
from pathlib import Path

from crcp.core.git.abc import Git, OutputLine, ProcessExit, StreamEvent
from crcp.core.parsing import LOG_DATE_FORMAT, LOG_FIELD_SEPARATOR
from crcp.core.types import CommitRecord


@dataclass(frozen=True)
class ScriptedCherryPick:
    """What the next `git cherry-pick` does in a FakeGit.

    Attributes:
        returncode: Exit status of the process
        stdout: Lines written to stdout, in order
        stderr: Lines written to stderr, in order
        unmerged_files: Paths left unmerged (reported by porcelain status as UU)
    """

    returncode: int = 0
    stdout: tuple[str, ...] = ()
    stderr: tuple[str, ...] = ()
    unmerged_files: tuple[str, ...] = field(default_factory=tuple)


class FakeGit(Git):
    """In-memory fake implementation of git operations.

    This class has NO public setup methods. All state is provided via constructor
    using keyword arguments with sensible defaults. Mutations are recorded and
    exposed through read-only properties for assertions.

    Any operation named in `fail_on` raises RuntimeError, the way RealGit does
    when git exits non-zero.
    """

    def __init__(
        self,
        *,
        repo_root: Path | None = None,
        remotes: list[tuple[str, str]] | None = None,
        local_branches: list[str] | None = None,
        current_branch: str = "main",
        commit_logs: dict[str, list[CommitRecord]] | None = None,
        cherry_pick: ScriptedCherryPick | None = None,
        status_text: str = "",
        changed_files: list[str] | None = None,
        last_commit_summary: str = "",
        fail_on: set[str] | None = None,
    ) -> None:
        """Create FakeGit with pre-configured state.

        Args:
            repo_root: Repository root reported for any cwd (None: not a repository)
            remotes: (name, url) pairs in registration order, origin included
            local_branches: Names of local branches
            current_branch: Branch checked out initially
            commit_logs: Mapping of `remote/branch` ref -> commits, newest first.
                Only refs listed here can be fetched.
            cherry_pick: Outcome of cherry-pick (default: clean apply)
            status_text: Output of `git status`
            changed_files: Output of `git diff --name-only`
            last_commit_summary: Output of `git log -1 --stat`
            fail_on: Names of Git methods that raise RuntimeError
        """
        self._repo_root = repo_root
        self._remotes = list(remotes) if remotes is not None else []
        self._local_branches = list(local_branches) if local_branches is not None else ["main"]
        self._current_branch = current_branch
        self._commit_logs = commit_logs or {}
        self._cherry_pick = cherry_pick or ScriptedCherryPick()
        self._status_text = status_text
        self._changed_files = changed_files or []
        self._last_commit_summary = last_commit_summary
        self._fail_on = fail_on or set()

        self._fetched_refs: list[str] = []
        self._unmerged_files: tuple[str, ...] = ()
        self._added_remotes: list[tuple[str, str]] = []
        self._deleted_branches: list[str] = []
        self._created_branches: list[tuple[str, str | None]] = []
        self._checked_out_branches: list[str] = []
        self._pushed_upstream: list[tuple[str, str]] = []
        self._force_pushes: list[tuple[str, str]] = []
        self._cherry_picked: list[str] = []
        self._branch_heads: dict[str, str] = {}
        self._status_reads = 0

    def _check(self, operation: str) -> None:
        if operation in self._fail_on:
            msg = f"Failed to {operation.replace('_', ' ')}\nstderr: fatal: simulated failure"
            raise RuntimeError(msg)

    def get_repository_root(self, cwd: Path) -> Path | None:
        return self._repo_root

    def get_git_dir(self, cwd: Path) -> Path | None:
        if self._repo_root is None:
            return None
        return self._repo_root / ".git"

    def list_remotes_verbose(self, repo_root: Path) -> str:
        self._check("list_remotes_verbose")
        lines = []
        for name, url in self._remotes:
            lines.append(f"{name}\t{url} (fetch)")
            lines.append(f"{name}\t{url} (push)")
        return "\n".join(lines) + ("\n" if lines else "")

    def add_remote(self, repo_root: Path, name: str, url: str) -> None:
        self._check("add_remote")
        if any(existing == name for existing, _ in self._remotes):
            msg = f"Failed to add remote\nstderr: error: remote {name} already exists."
            raise RuntimeError(msg)
        self._remotes.append((name, url))
        self._added_remotes.append((name, url))

    def fetch_branch(self, repo_root: Path, remote: str, branch: str) -> None:
        self._check("fetch_branch")
        ref = f"{remote}/{branch}"
        if not any(name == remote for name, _ in self._remotes):
            raise RuntimeError(
                f"Failed to fetch\nstderr: fatal: '{remote}' does not appear to be a git repository"
            )
        if ref not in self._commit_logs:
            raise RuntimeError(f"Failed to fetch\nstderr: fatal: couldn't find remote ref {branch}")
        self._fetched_refs.append(ref)

    def get_branch_log(self, repo_root: Path, ref: str) -> str:
        self._check("get_branch_log")
        if ref not in self._fetched_refs:
            raise RuntimeError(f"Failed to read log\nstderr: fatal: bad revision '{ref}'")
        lines = [
            LOG_FIELD_SEPARATOR.join(
                [commit.date.strftime(LOG_DATE_FORMAT), commit.author, commit.subject, commit.hash]
            )
            for commit in self._commit_logs[ref]
        ]
        return "\n".join(lines)

    def list_local_branches(self, repo_root: Path, pattern: str) -> list[str]:
        self._check("list_local_branches")
        return [branch for branch in self._local_branches if fnmatchcase(branch, pattern)]

    def delete_branch(self, repo_root: Path, branch: str, *, force: bool) -> None:
        self._check("delete_branch")
        if branch not in self._local_branches:
            msg = f"Failed to delete branch\nstderr: error: branch '{branch}' not found."
            raise RuntimeError(msg)
        if branch == self._current_branch:
            raise RuntimeError(
                f"Failed to delete branch\nstderr: error: Cannot delete branch '{branch}' "
                "checked out"
            )
        self._local_branches.remove(branch)
        self._deleted_branches.append(branch)

    def get_current_branch(self, repo_root: Path) -> str | None:
        self._check("get_current_branch")
        return self._current_branch

    def checkout_new_branch(
        self, repo_root: Path, branch: str, start_point: str | None, *, reset: bool = False
    ) -> None:
        self._check("checkout_new_branch")
        if branch in self._local_branches and not reset:
            raise RuntimeError(
                f"Failed to create branch\nstderr: fatal: a branch named '{branch}' already exists"
            )
        if (
            start_point is not None
            and start_point not in self._fetched_refs
            and start_point not in self._local_branches
        ):
            raise RuntimeError(
                f"Failed to create branch\nstderr: fatal: '{start_point}' is not a commit"
            )
        if branch not in self._local_branches:
            self._local_branches.append(branch)
        self._branch_heads[branch] = start_point or self._current_branch
        self._current_branch = branch
        self._created_branches.append((branch, start_point))

    def checkout_branch(self, repo_root: Path, branch: str) -> None:
        self._check("checkout_branch")
        if branch not in self._local_branches:
            msg = f"Failed to checkout\nstderr: error: pathspec '{branch}' did not match"
            raise RuntimeError(msg)
        self._current_branch = branch
        self._checked_out_branches.append(branch)

    def push_with_upstream(self, repo_root: Path, remote: str, branch: str) -> None:
        self._check("push_with_upstream")
        self._pushed_upstream.append((remote, branch))

    def force_push_refspec(self, repo_root: Path, remote: str, refspec: str) -> None:
        self._check("force_push_refspec")
        self._force_pushes.append((remote, refspec))

    def cherry_pick_streaming(self, repo_root: Path, commit: str) -> Iterator[StreamEvent]:
        self._check("cherry_pick_streaming")
        self._cherry_picked.append(commit)
        for text in self._cherry_pick.stdout:
            yield OutputLine(stream="stdout", text=text)
        for text in self._cherry_pick.stderr:
            yield OutputLine(stream="stderr", text=text)
        if self._cherry_pick.returncode != 0:
            self._unmerged_files = self._cherry_pick.unmerged_files
        yield ProcessExit(returncode=self._cherry_pick.returncode)

    def get_status_text(self, repo_root: Path) -> str:
        self._check("get_status_text")
        self._status_reads += 1
        if self._status_text:
            return self._status_text
        return f"On branch {self._current_branch}\n"

    def get_porcelain_status(self, repo_root: Path) -> str:
        self._check("get_porcelain_status")
        return "".join(f"UU {path}\n" for path in self._unmerged_files)

    def list_changed_files(self, repo_root: Path) -> list[str]:
        self._check("list_changed_files")
        return list(self._changed_files)

    def get_last_commit_summary(self, repo_root: Path) -> str:
        self._check("get_last_commit_summary")
        return self._last_commit_summary

    # Read-only views for test assertions

    @property
    def remotes(self) -> list[tuple[str, str]]:
        return list(self._remotes)

    @property
    def local_branches(self) -> list[str]:
        return list(self._local_branches)

    @property
    def current_branch(self) -> str:
        return self._current_branch

    @property
    def branch_heads(self) -> dict[str, str]:
        """Ref each branch created during the test was started from."""
        return dict(self._branch_heads)

    @property
    def fetched_refs(self) -> list[str]:
        return list(self._fetched_refs)

    @property
    def added_remotes(self) -> list[tuple[str, str]]:
        return list(self._added_remotes)

    @property
    def deleted_branches(self) -> list[str]:
        return list(self._deleted_branches)

    @property
    def created_branches(self) -> list[tuple[str, str | None]]:
        return list(self._created_branches)

    @property
    def checked_out_branches(self) -> list[str]:
        return list(self._checked_out_branches)

    @property
    def pushed_upstream(self) -> list[tuple[str, str]]:
        return list(self._pushed_upstream)

    @property
    def force_pushes(self) -> list[tuple[str, str]]:
        return list(self._force_pushes)

    @property
    def cherry_picked(self) -> list[str]:
        return list(self._cherry_picked)

    @property
    def status_reads(self) -> int:
        return self._status_reads
