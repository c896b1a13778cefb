"""Exit-on-failure checks for command bodies.

Every failure is one stderr line starting with a red "Error:", followed by
SystemExit, so commands read as a list of preconditions.
"""

from pathlib import Path
from typing import NoReturn, TypeVar

import click

from crcp.cli.output import user_output
from crcp.core.errors import CrcpError

T = TypeVar("T")


class Ensure:
    """Precondition helpers that print the problem and exit."""

    @staticmethod
    def fail(error_message: str, exit_code: int = 1) -> NoReturn:
        """Print `Error: <error_message>` on stderr and exit with exit_code."""
        user_output(click.style("Error: ", fg="red") + error_message)
        raise SystemExit(exit_code)

    @staticmethod
    def invariant(condition: bool, error_message: str) -> None:
        """Exit with status 1 unless condition holds."""
        if not condition:
            Ensure.fail(error_message)

    @staticmethod
    def not_none(value: T | None, error_message: str) -> T:
        """Return value, or exit with status 1 when it is None.

        The return type is narrowed to T for the caller.

        Example:
            >>> git_dir = Ensure.not_none(ctx.git_dir, "Could not locate the git directory")
        """
        if value is None:
            Ensure.fail(error_message)
        return value

    @staticmethod
    def in_repository(repo_root: Path | None) -> Path:
        """Ensure crcp runs inside a git work tree."""
        return Ensure.not_none(repo_root, "Not in a git repository")

    @staticmethod
    def step_failed(step: str, reason: str) -> NoReturn:
        """Report a fatal workflow error naming the failed step, then exit 1."""
        Ensure.fail(f"{step} failed: {reason}")

    @staticmethod
    def from_error(error: CrcpError) -> NoReturn:
        """Report a CrcpError raised outside a workflow run, then exit 1."""
        Ensure.step_failed(error.step, error.message)
