"""Cherry-pick execution and outcome classification.

States: Running -> Applied | Conflicted | Failed (all terminal).

A non-zero exit is a conflict only if the working tree has unmerged paths
afterwards; anything else is a hard failure. Conflicts are never resolved,
continued or aborted here: they end the automated part of the workflow.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path

from crcp.core.git.abc import Git, OutputLine, ProcessExit
from crcp.core.parsing import parse_unmerged_paths

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Applied:
    """The commit applied cleanly."""


@dataclass(frozen=True)
class Conflicted:
    """The commit stopped on conflicts; the listed paths are unmerged."""

    conflicting_files: frozenset[str]


@dataclass(frozen=True)
class Failed:
    """The cherry-pick failed for a reason other than a conflict."""

    reason: str


CherryPickResult = Applied | Conflicted | Failed


class OutputListener(ABC):
    """Receives live progress while a cherry-pick runs."""

    @abstractmethod
    def on_output(self, line: OutputLine) -> None:
        """Called for every stdout/stderr line in arrival order."""

    @abstractmethod
    def on_status(self, status_text: str) -> None:
        """Called at most once, with `git status`, when stderr first speaks."""


class SilentOutputListener(OutputListener):
    """Listener that discards all progress."""

    def on_output(self, line: OutputLine) -> None:
        pass

    def on_status(self, status_text: str) -> None:
        pass


class CherryPickExecutor:
    """Applies one commit onto the current branch and classifies the outcome."""

    def __init__(self, git: Git, repo_root: Path, listener: OutputListener) -> None:
        self._git = git
        self._repo_root = repo_root
        self._listener = listener

    def _dump_status(self) -> None:
        try:
            status_text = self._git.get_status_text(self._repo_root)
        except RuntimeError as e:
            logger.warning("Could not read git status during cherry-pick: %s", e)
            return
        self._listener.on_status(status_text)

    def apply(self, commit_hash: str) -> CherryPickResult:
        """Cherry-pick commit_hash; any hash is accepted and git decides validity."""
        logger.debug("Cherry-picking %s", commit_hash)
        stderr_lines: list[str] = []
        status_dumped = False
        returncode: int | None = None

        for event in self._git.cherry_pick_streaming(self._repo_root, commit_hash):
            if isinstance(event, ProcessExit):
                returncode = event.returncode
                continue
            self._listener.on_output(event)
            if event.stream == "stderr":
                stderr_lines.append(event.text)
                if not status_dumped:
                    status_dumped = True
                    self._dump_status()

        logger.debug("Cherry-pick of %s exited with %s", commit_hash, returncode)
        if returncode == 0:
            return Applied()

        try:
            porcelain = self._git.get_porcelain_status(self._repo_root)
        except RuntimeError as e:
            return Failed(reason=f"Cherry-pick failed and the working tree could not be read.\n{e}")
        unmerged = parse_unmerged_paths(porcelain)
        if unmerged:
            return Conflicted(conflicting_files=unmerged)

        message = "\n".join(line for line in stderr_lines if line.strip())
        if not message:
            message = f"git cherry-pick {commit_hash} exited with code {returncode}"
        return Failed(reason=message)
