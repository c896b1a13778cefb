"""The dependencies one crcp invocation runs with."""

from dataclasses import dataclass, replace
from pathlib import Path

import click

from crcp.cli.output import user_output
from crcp.cli.prompts import ClickPrompter, Prompter
from crcp.core.git.abc import Git
from crcp.core.git.dry_run import DryRunGit
from crcp.core.git.real import RealGit
from crcp.core.user_feedback import InteractiveFeedback, SuppressedFeedback, UserFeedback

DEFAULT_TIMEOUT_SECONDS = 600.0


@dataclass(frozen=True)
class CrcpContext:
    """Git gateway, feedback sink, prompter and repository paths for one invocation.

    Built once by the `cli` group and passed to commands as `ctx.obj`; tests
    pass their own through CliRunner.invoke(obj=...).

    repo_root and git_dir are None when crcp runs outside a git repository;
    commands that need a repository check this themselves.
    """

    git: Git
    feedback: UserFeedback
    prompter: Prompter
    cwd: Path
    repo_root: Path | None
    git_dir: Path | None
    dry_run: bool

    @staticmethod
    def minimal(git: Git, cwd: Path, dry_run: bool = False) -> "CrcpContext":
        """Test context where only git matters.

        Repository paths are discovered through git, so a FakeGit constructed
        with repo_root=... is all a simple test needs.

        Example:
            >>> git = FakeGit(repo_root=Path("/repo"))
            >>> ctx = CrcpContext.minimal(git, Path("/repo"))
        """
        return CrcpContext.for_test(git=git, cwd=cwd, dry_run=dry_run)

    @staticmethod
    def for_test(
        git: Git | None = None,
        feedback: UserFeedback | None = None,
        prompter: Prompter | None = None,
        cwd: Path | None = None,
        dry_run: bool = False,
    ) -> "CrcpContext":
        """Test context; anything not given is replaced by a fake.

        Args:
            git: Defaults to a FakeGit rooted at cwd
            feedback: Defaults to a recording FakeUserFeedback
            prompter: Defaults to a FakePrompter with no scripted answers
            cwd: Defaults to Path("/repo")
            dry_run: Wrap git in DryRunGit, as create_context does
        """
        from tests.fakes.prompter import FakePrompter
        from tests.fakes.user_feedback import FakeUserFeedback

        from crcp.core.git.fake import FakeGit

        if cwd is None:
            cwd = Path("/repo")

        if git is None:
            git = FakeGit(repo_root=cwd)

        if feedback is None:
            feedback = FakeUserFeedback()

        if prompter is None:
            prompter = FakePrompter()

        repo_root = git.get_repository_root(cwd)
        git_dir = git.get_git_dir(cwd)

        if dry_run:
            git = DryRunGit(git)

        return CrcpContext(
            git=git,
            feedback=feedback,
            prompter=prompter,
            cwd=cwd,
            repo_root=repo_root,
            git_dir=git_dir,
            dry_run=dry_run,
        )

    def for_run(self, *, dry_run: bool, quiet: bool, timeout: float | None) -> "CrcpContext":
        """Derive the context for one `pick` run from per-command options.

        Args:
            dry_run: Wrap git so mutating commands are printed, not run
            quiet: Suppress informational feedback (JSON output mode)
            timeout: Seconds per git command; None keeps the current bound,
                0 removes it
        """
        git = self.git
        if timeout is not None:
            git = git.with_timeout(timeout if timeout > 0 else None)
        if dry_run and not self.dry_run:
            git = DryRunGit(git)

        feedback = self.feedback
        if quiet and isinstance(feedback, InteractiveFeedback):
            feedback = SuppressedFeedback()

        return replace(self, git=git, feedback=feedback, dry_run=self.dry_run or dry_run)


def safe_cwd() -> tuple[Path | None, str | None]:
    """The working directory, or an explanation when it has been deleted.

    Returns:
        (path, None) normally, (None, message) when the directory is gone
    """
    try:
        return Path.cwd(), None
    except OSError:
        return None, "The directory crcp was started from no longer exists"


def create_context(
    *, dry_run: bool, timeout: float | None = DEFAULT_TIMEOUT_SECONDS
) -> CrcpContext:
    """Context backed by the real git executable and the terminal.

    Args:
        dry_run: Print mutating git commands instead of running them
        timeout: Seconds each git command may run before it is killed
    """
    cwd, error = safe_cwd()
    if cwd is None:
        assert error is not None
        user_output(click.style("Error: ", fg="red") + error)
        user_output("cd into an existing directory and run crcp again.")
        raise SystemExit(1)

    # Paths are discovered before any dry-run wrapping; None outside a repository
    git: Git = RealGit(timeout=timeout)
    repo_root = git.get_repository_root(cwd)
    git_dir = git.get_git_dir(cwd)
    if dry_run:
        git = DryRunGit(git)

    return CrcpContext(
        git=git,
        feedback=InteractiveFeedback(),
        prompter=ClickPrompter(),
        cwd=cwd,
        repo_root=repo_root,
        git_dir=git_dir,
        dry_run=dry_run,
    )
