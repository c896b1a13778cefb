"""Output utilities for CLI commands with clear intent.

- user_output(): diagnostics and progress, always on stderr
- machine_output(): results meant for pipes (JSON), on stdout
- render_*(): rich renderables for confirmation tables and final summaries
"""

from typing import TYPE_CHECKING, Any

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

if TYPE_CHECKING:
    from crcp.core.types import CommitRecord, RemoteSpec
    from crcp.core.workflow import ConflictPendingManualResolution, RunStatus, WorkflowConfig


def user_output(message: Any = "", nl: bool = True) -> None:
    """Write a user-facing message to stderr."""
    click.echo(message, err=True, nl=nl)


def machine_output(message: Any = "", nl: bool = True) -> None:
    """Write machine-readable output to stdout."""
    click.echo(message, nl=nl)


def stderr_console() -> Console:
    """Console bound to whatever sys.stderr is at print time."""
    return Console(stderr=True, highlight=False)


def render_confirmation(config: "WorkflowConfig") -> Table:
    """Table of the values a run is about to use."""
    table = Table(title="Confirmation", title_justify="left", show_lines=False)
    table.add_column("Confirmation Item", style="bold")
    table.add_column("Value", style="yellow")
    table.add_row("Source project", config.remote_name)
    table.add_row("Source repo", config.remote_url)
    table.add_row("Source branch", config.source_branch)
    table.add_row("Source commit hash", config.commit_hash)
    table.add_row("Target branch", config.target_branch)
    return table


def render_commits(commits: list["CommitRecord"], branch: str) -> Table:
    """Numbered commit table, newest first, with the newest highlighted."""
    table = Table(title=f"Commits on {branch}", title_justify="left")
    table.add_column("#", justify="right")
    table.add_column("Date")
    table.add_column("Author")
    table.add_column("Subject")
    table.add_column("Hash", style="cyan")
    for index, commit in enumerate(commits, start=1):
        table.add_row(
            str(index),
            commit.date.strftime("%Y-%m-%d %H:%M:%S"),
            commit.author,
            commit.subject,
            commit.hash,
            style="green" if index == 1 else None,
        )
    return table


def render_remotes(remotes: list["RemoteSpec"]) -> Table:
    """Connected remotes with their canonical URLs."""
    table = Table(title="Connected remotes", title_justify="left")
    table.add_column("Name", style="bold")
    table.add_column("URL")
    for remote in remotes:
        table.add_row(remote.name, remote.url)
    return table


def render_status(status: "RunStatus") -> Panel:
    """Final summary box for a run."""
    from crcp.core.workflow import (
        CompletedNotPushed,
        ConflictPendingManualResolution,
        Pushed,
        RunFailed,
    )

    match status:
        case Pushed():
            return Panel(
                Text("Changes successfully pushed.", style="green"),
                title="Pushed",
                border_style="green",
            )
        case CompletedNotPushed():
            return Panel(
                Text("Merge completed but not pushed.", style="yellow"),
                title="Completed, not pushed",
                border_style="yellow",
            )
        case ConflictPendingManualResolution(conflicting_files=files):
            return Panel(
                Text(f"{len(files)} conflicted file(s) left in the working tree.", style="magenta"),
                title="Conflicts pending manual resolution",
                border_style="magenta",
            )
        case RunFailed(step=step, reason=reason):
            return Panel(
                Text(reason, style="red"),
                title=f"Failed during {step}",
                border_style="red",
            )


def report_conflicts(status: "ConflictPendingManualResolution") -> None:
    """Plain-text conflict listing, so paths are never wrapped or truncated."""
    user_output(click.style("Conflicted files:", fg="magenta", bold=True))
    for path in status.conflicting_files:
        user_output(f"- {path}")
    if status.changed_files:
        user_output(click.style("Changed files:", bold=True))
        for path in status.changed_files:
            user_output(f"- {path}")
    user_output("Please resolve the conflicts manually and commit the changes before pushing.")
