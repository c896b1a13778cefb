"""High-level git operations interface.

This module provides a clean abstraction over git subprocess calls, making the
workflow testable without touching a real repository.

Architecture:
- Git: Abstract base class defining the interface
- RealGit: Production implementation using subprocess
- DryRunGit: Wrapper that prints mutating commands instead of running them
- FakeGit: In-memory implementation for tests

Commands whose output the core decodes itself (`git remote -v`, `git log`,
`git status --porcelain`) are returned as raw text. The decoders live in
crcp.core.parsing.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import Literal


@dataclass(frozen=True)
class OutputLine:
    """One line emitted by a streamed git process."""

    stream: Literal["stdout", "stderr"]
    text: str


@dataclass(frozen=True)
class ProcessExit:
    """Terminal event of a streamed git process."""

    returncode: int


StreamEvent = OutputLine | ProcessExit


# ============================================================================
# Abstract Interface
# ============================================================================


class Git(ABC):
    """Abstract interface for git operations.

    All implementations (real, dry-run and fake) must implement this interface.
    Mutating operations raise RuntimeError when git rejects them.
    """

    def with_timeout(self, seconds: float | None) -> "Git":
        """Return an implementation whose blocking calls are bounded by seconds.

        Implementations that never block (fakes) return themselves.
        """
        return self

    @abstractmethod
    def get_repository_root(self, cwd: Path) -> Path | None:
        """Get the top-level directory of the repository containing cwd."""
        ...

    @abstractmethod
    def get_git_dir(self, cwd: Path) -> Path | None:
        """Get the absolute path of the repository's git directory."""
        ...

    @abstractmethod
    def list_remotes_verbose(self, repo_root: Path) -> str:
        """Return the raw output of `git remote -v`."""
        ...

    @abstractmethod
    def add_remote(self, repo_root: Path, name: str, url: str) -> None:
        """Register a new remote.

        Raises:
            RuntimeError: If git rejects the name (e.g. it already exists)
        """
        ...

    @abstractmethod
    def fetch_branch(self, repo_root: Path, remote: str, branch: str) -> None:
        """Fetch a specific branch from a remote.

        Args:
            repo_root: Path to the git repository root
            remote: Remote name (e.g., "lib")
            branch: Branch name to fetch
        """
        ...

    @abstractmethod
    def get_branch_log(self, repo_root: Path, ref: str) -> str:
        """Return the linear history of ref, newest first, one commit per line.

        Each line has the shape `<date> | <author> | <subject> | <short hash>`
        with the date formatted as `%Y-%m-%d %H:%M:%S`.
        """
        ...

    @abstractmethod
    def list_local_branches(self, repo_root: Path, pattern: str) -> list[str]:
        """List local branches matching pattern (`git branch --list`)."""
        ...

    @abstractmethod
    def delete_branch(self, repo_root: Path, branch: str, *, force: bool) -> None:
        """Delete a local branch.

        Args:
            repo_root: Path to the git repository root
            branch: Name of the branch to delete
            force: Use -D (force delete) instead of -d
        """
        ...

    @abstractmethod
    def get_current_branch(self, repo_root: Path) -> str | None:
        """Name of the checked-out branch, or None when HEAD is detached."""
        ...

    @abstractmethod
    def checkout_new_branch(
        self, repo_root: Path, branch: str, start_point: str | None, *, reset: bool = False
    ) -> None:
        """Create a branch and switch to it (`git checkout -b`).

        Args:
            repo_root: Path to the git repository root
            branch: Name of the branch to create
            start_point: Ref to base the branch on, or None for the current HEAD
            reset: Use -B, which resets the branch if it already exists (even
                when it is checked out)
        """
        ...

    @abstractmethod
    def checkout_branch(self, repo_root: Path, branch: str) -> None:
        """Switch to an existing branch."""
        ...

    @abstractmethod
    def push_with_upstream(self, repo_root: Path, remote: str, branch: str) -> None:
        """Publish branch to remote and set it as upstream (`git push -u`)."""
        ...

    @abstractmethod
    def force_push_refspec(self, repo_root: Path, remote: str, refspec: str) -> None:
        """Force-push a `<src>:<dst>` refspec (`git push -f`)."""
        ...

    @abstractmethod
    def cherry_pick_streaming(self, repo_root: Path, commit: str) -> Iterator[StreamEvent]:
        """Cherry-pick one commit onto the current branch, streaming its output.

        Yields OutputLine events as the process writes them (stdout and stderr
        interleaved in arrival order) and exactly one final ProcessExit.
        """
        ...

    @abstractmethod
    def get_status_text(self, repo_root: Path) -> str:
        """Return the human-readable `git status` output."""
        ...

    @abstractmethod
    def get_porcelain_status(self, repo_root: Path) -> str:
        """Return the raw `git status --porcelain` output."""
        ...

    @abstractmethod
    def list_changed_files(self, repo_root: Path) -> list[str]:
        """List files with unstaged changes (`git diff --name-only`)."""
        ...

    @abstractmethod
    def get_last_commit_summary(self, repo_root: Path) -> str:
        """Return `git log -1 --stat` for the current HEAD."""
        ...
