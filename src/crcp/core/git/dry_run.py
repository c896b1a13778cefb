"""Dry-run Git wrapper.

This module provides a Git wrapper that prevents execution of operations that
change the repository (or a remote) while delegating read-only queries to the
wrapped implementation.
"""

from collections.abc import Iterator
from pathlib import Path

import click

from crcp.cli.output import user_output
from crcp.core.git.abc import Git, ProcessExit, StreamEvent

# ============================================================================
# Dry-run Wrapper
# ============================================================================


class DryRunGit(Git):
    """Wrapper that prints mutating commands instead of executing them.

    Usage:
        real_ops = RealGit()
        dry_run_ops = DryRunGit(real_ops)

        # Prints "[DRY RUN] Would run: git push -f origin temp-main:release"
        dry_run_ops.force_push_refspec(repo_root, "origin", "temp-main:release")
    """

    def __init__(self, wrapped: Git) -> None:
        """Create a dry-run wrapper around a Git implementation.

        Args:
            wrapped: The Git implementation to wrap (usually RealGit or FakeGit)
        """
        self._wrapped = wrapped

    def with_timeout(self, seconds: float | None) -> "DryRunGit":
        return DryRunGit(self._wrapped.with_timeout(seconds))

    def _announce(self, *args: str) -> None:
        user_output(click.style("[DRY RUN] ", fg="yellow") + "Would run: git " + " ".join(args))

    # Read-only operations: delegate to wrapped implementation

    def get_repository_root(self, cwd: Path) -> Path | None:
        """Get repository root (read-only, delegates to wrapped)."""
        return self._wrapped.get_repository_root(cwd)

    def get_git_dir(self, cwd: Path) -> Path | None:
        """Get git directory (read-only, delegates to wrapped)."""
        return self._wrapped.get_git_dir(cwd)

    def list_remotes_verbose(self, repo_root: Path) -> str:
        """List remotes (read-only, delegates to wrapped)."""
        return self._wrapped.list_remotes_verbose(repo_root)

    def get_branch_log(self, repo_root: Path, ref: str) -> str:
        """Read history (read-only, delegates to wrapped)."""
        return self._wrapped.get_branch_log(repo_root, ref)

    def list_local_branches(self, repo_root: Path, pattern: str) -> list[str]:
        """List local branches (read-only, delegates to wrapped)."""
        return self._wrapped.list_local_branches(repo_root, pattern)

    def get_current_branch(self, repo_root: Path) -> str | None:
        """Get current branch (read-only, delegates to wrapped)."""
        return self._wrapped.get_current_branch(repo_root)

    def get_status_text(self, repo_root: Path) -> str:
        """Show status (read-only, delegates to wrapped)."""
        return self._wrapped.get_status_text(repo_root)

    def get_porcelain_status(self, repo_root: Path) -> str:
        """Show porcelain status (read-only, delegates to wrapped)."""
        return self._wrapped.get_porcelain_status(repo_root)

    def list_changed_files(self, repo_root: Path) -> list[str]:
        """List changed files (read-only, delegates to wrapped)."""
        return self._wrapped.list_changed_files(repo_root)

    def get_last_commit_summary(self, repo_root: Path) -> str:
        """Summarize HEAD (read-only, delegates to wrapped)."""
        return self._wrapped.get_last_commit_summary(repo_root)

    # Mutating operations: print dry-run message instead of executing

    def add_remote(self, repo_root: Path, name: str, url: str) -> None:
        """Print dry-run message instead of adding the remote."""
        self._announce("remote", "add", name, url)

    def fetch_branch(self, repo_root: Path, remote: str, branch: str) -> None:
        """Print dry-run message instead of fetching."""
        self._announce("fetch", remote, branch)

    def delete_branch(self, repo_root: Path, branch: str, *, force: bool) -> None:
        """Print dry-run message instead of deleting the branch."""
        self._announce("branch", "-D" if force else "-d", branch)

    def checkout_new_branch(
        self, repo_root: Path, branch: str, start_point: str | None, *, reset: bool = False
    ) -> None:
        """Print dry-run message instead of creating the branch."""
        args = ["checkout", "-B" if reset else "-b", branch]
        if start_point is not None:
            args.append(start_point)
        self._announce(*args)

    def checkout_branch(self, repo_root: Path, branch: str) -> None:
        """Print dry-run message instead of switching branches."""
        self._announce("checkout", branch)

    def push_with_upstream(self, repo_root: Path, remote: str, branch: str) -> None:
        """Print dry-run message instead of publishing the branch."""
        self._announce("push", "-u", remote, branch)

    def force_push_refspec(self, repo_root: Path, remote: str, refspec: str) -> None:
        """Print dry-run message instead of force-pushing."""
        self._announce("push", "-f", remote, refspec)

    def cherry_pick_streaming(self, repo_root: Path, commit: str) -> Iterator[StreamEvent]:
        """Print dry-run message and report a clean apply."""
        self._announce("cherry-pick", commit)
        yield ProcessExit(returncode=0)
