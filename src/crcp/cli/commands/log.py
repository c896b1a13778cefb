"""Log command - show the commit history of a branch in another repository."""

import click

from crcp.cli.ensure import Ensure
from crcp.cli.output import render_commits, stderr_console, user_output
from crcp.core.context import CrcpContext
from crcp.core.errors import CrcpError
from crcp.core.history import CommitHistoryFetcher
from crcp.core.remotes import RemoteResolver


@click.command("log")
@click.argument("remote_url")
@click.argument("branch")
@click.option(
    "-n",
    "--limit",
    type=click.IntRange(min=1),
    default=None,
    help="Show at most this many commits (newest first).",
)
@click.pass_obj
def log_cmd(ctx: CrcpContext, remote_url: str, branch: str, limit: int | None) -> None:
    """Fetch BRANCH from REMOTE_URL and list its commits.

    The remote is registered first if no connected remote points at
    REMOTE_URL.
    """
    repo_root = Ensure.in_repository(ctx.repo_root)
    try:
        remote = RemoteResolver(ctx.git, repo_root).ensure_remote(remote_url)
        commits = CommitHistoryFetcher(ctx.git, repo_root).fetch_and_list(remote.name, branch)
    except CrcpError as e:
        Ensure.from_error(e)

    if not commits:
        user_output(f"Branch {branch} has no commits.")
        return

    if limit is not None:
        commits = commits[:limit]
    stderr_console().print(render_commits(commits, f"{remote.name}/{branch}"))
