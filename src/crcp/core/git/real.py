"""Production Git implementation using subprocess.

This module provides the real Git implementation that executes actual git
commands via subprocess.
"""

import logging
import queue
import subprocess
import threading
import time
from collections.abc import Iterator
from pathlib import Path
from typing import IO, Literal

from crcp.core.errors import OperationTimedOut
from crcp.core.git.abc import Git, OutputLine, ProcessExit, StreamEvent
from crcp.core.subprocess import run_subprocess_with_context

logger = logging.getLogger(__name__)

LOG_FORMAT = "--pretty=format:%ad | %an | %s | %h"
LOG_DATE_FORMAT = "--date=format:%Y-%m-%d %H:%M:%S"

# ============================================================================
# Production Implementation
# ============================================================================


class RealGit(Git):
    """Production implementation using subprocess.

    All git operations execute actual git commands via subprocess. Every
    command is bounded by `timeout` seconds when one is configured.
    """

    def __init__(self, *, timeout: float | None = None) -> None:
        self._timeout = timeout

    def with_timeout(self, seconds: float | None) -> "RealGit":
        return RealGit(timeout=seconds)

    def _run(
        self, cmd: list[str], operation_context: str, repo_root: Path
    ) -> subprocess.CompletedProcess[str]:
        return run_subprocess_with_context(
            cmd,
            operation_context=operation_context,
            cwd=repo_root,
            timeout=self._timeout,
        )

    def get_repository_root(self, cwd: Path) -> Path | None:
        """Get the top-level directory of the repository containing cwd."""
        result = subprocess.run(
            ["git", "rev-parse", "--show-toplevel"],
            cwd=cwd,
            capture_output=True,
            text=True,
            check=False,
        )
        if result.returncode != 0:
            return None
        return Path(result.stdout.strip())

    def get_git_dir(self, cwd: Path) -> Path | None:
        """Get the absolute path of the repository's git directory."""
        result = subprocess.run(
            ["git", "rev-parse", "--absolute-git-dir"],
            cwd=cwd,
            capture_output=True,
            text=True,
            check=False,
        )
        if result.returncode != 0:
            return None
        return Path(result.stdout.strip())

    def list_remotes_verbose(self, repo_root: Path) -> str:
        """Return the raw output of `git remote -v`."""
        result = self._run(["git", "remote", "-v"], "list remotes", repo_root)
        return result.stdout

    def add_remote(self, repo_root: Path, name: str, url: str) -> None:
        """Register a new remote."""
        self._run(["git", "remote", "add", name, url], f"add remote '{name}'", repo_root)

    def fetch_branch(self, repo_root: Path, remote: str, branch: str) -> None:
        """Fetch a specific branch from a remote."""
        self._run(
            ["git", "fetch", remote, branch],
            f"fetch branch '{branch}' from remote '{remote}'",
            repo_root,
        )

    def get_branch_log(self, repo_root: Path, ref: str) -> str:
        """Return the linear history of ref, newest first."""
        result = self._run(
            ["git", "log", ref, LOG_FORMAT, LOG_DATE_FORMAT],
            f"read commit history of '{ref}'",
            repo_root,
        )
        return result.stdout

    def list_local_branches(self, repo_root: Path, pattern: str) -> list[str]:
        """List local branches matching pattern."""
        result = self._run(
            ["git", "branch", "--list", pattern, "--format=%(refname:short)"],
            f"check if branch '{pattern}' exists",
            repo_root,
        )
        return [line.strip() for line in result.stdout.splitlines() if line.strip()]

    def delete_branch(self, repo_root: Path, branch: str, *, force: bool) -> None:
        """Delete a local branch."""
        flag = "-D" if force else "-d"
        self._run(["git", "branch", flag, branch], f"delete branch '{branch}'", repo_root)

    def get_current_branch(self, repo_root: Path) -> str | None:
        """Name of the checked-out branch, or None when HEAD is detached."""
        result = self._run(
            ["git", "branch", "--show-current"], "get current branch", repo_root
        )
        return result.stdout.strip() or None

    def checkout_new_branch(
        self, repo_root: Path, branch: str, start_point: str | None, *, reset: bool = False
    ) -> None:
        """Create a branch and switch to it."""
        cmd = ["git", "checkout", "-B" if reset else "-b", branch]
        if start_point is not None:
            cmd.append(start_point)
        self._run(cmd, f"create and switch to branch '{branch}'", repo_root)

    def checkout_branch(self, repo_root: Path, branch: str) -> None:
        """Switch to an existing branch."""
        self._run(["git", "checkout", branch], f"checkout branch '{branch}'", repo_root)

    def push_with_upstream(self, repo_root: Path, remote: str, branch: str) -> None:
        """Publish branch to remote and set it as upstream."""
        self._run(
            ["git", "push", "-u", remote, branch],
            f"push branch '{branch}' to '{remote}' with upstream",
            repo_root,
        )

    def force_push_refspec(self, repo_root: Path, remote: str, refspec: str) -> None:
        """Force-push a `<src>:<dst>` refspec."""
        self._run(
            ["git", "push", "-f", remote, refspec],
            f"force-push '{refspec}' to '{remote}'",
            repo_root,
        )

    def cherry_pick_streaming(self, repo_root: Path, commit: str) -> Iterator[StreamEvent]:
        """Cherry-pick one commit, yielding output lines as they arrive.

        Implementation details:
        - Uses subprocess.Popen() with line-buffered text pipes
        - One reader thread per pipe feeds a shared queue, so stdout and
          stderr lines are yielded in arrival order
        - The consumer waits on the queue with the remaining deadline and
          kills the process when it expires
        """
        cmd = ["git", "cherry-pick", commit]
        logger.debug("Streaming %s (cwd=%s)", " ".join(cmd), repo_root)
        try:
            process = subprocess.Popen(
                cmd,
                cwd=repo_root,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                bufsize=1,  # Line buffered
            )
        except FileNotFoundError as e:
            raise RuntimeError(
                f"Command not found while trying to cherry-pick commit '{commit}': git"
            ) from e

        lines: queue.Queue[OutputLine | None] = queue.Queue()

        def pump(pipe: IO[str] | None, stream: Literal["stdout", "stderr"]) -> None:
            if pipe is not None:
                for raw in pipe:
                    lines.put(OutputLine(stream=stream, text=raw.rstrip("\n")))
            lines.put(None)

        readers = [
            threading.Thread(target=pump, args=(process.stdout, "stdout"), daemon=True),
            threading.Thread(target=pump, args=(process.stderr, "stderr"), daemon=True),
        ]
        for reader in readers:
            reader.start()

        deadline = None if self._timeout is None else time.monotonic() + self._timeout
        open_streams = len(readers)
        try:
            while open_streams > 0:
                remaining = None if deadline is None else deadline - time.monotonic()
                try:
                    if remaining is not None and remaining <= 0:
                        raise queue.Empty
                    item = lines.get(timeout=remaining)
                except queue.Empty:
                    assert self._timeout is not None
                    raise OperationTimedOut(
                        f"cherry-pick commit '{commit}'", self._timeout
                    ) from None
                if item is None:
                    open_streams -= 1
                    continue
                yield item
            returncode = process.wait()
        finally:
            # Timeout, or the consumer stopped iterating early
            if process.poll() is None:
                process.kill()
                process.wait()
            for reader in readers:
                reader.join(timeout=1.0)
        yield ProcessExit(returncode=returncode)

    def get_status_text(self, repo_root: Path) -> str:
        """Return the human-readable `git status` output."""
        result = self._run(["git", "status"], "show working tree status", repo_root)
        return result.stdout

    def get_porcelain_status(self, repo_root: Path) -> str:
        """Return the raw `git status --porcelain` output."""
        result = self._run(["git", "status", "--porcelain"], "get file status", repo_root)
        return result.stdout

    def list_changed_files(self, repo_root: Path) -> list[str]:
        """List files with unstaged changes, unquoted."""
        result = self._run(
            ["git", "diff", "--name-only", "-z"], "list changed files", repo_root
        )
        return [path for path in result.stdout.split("\0") if path]

    def get_last_commit_summary(self, repo_root: Path) -> str:
        """Return `git log -1 --stat` for the current HEAD."""
        result = self._run(["git", "log", "-1", "--stat"], "summarize last commit", repo_root)
        return result.stdout
