"""Remotes command - list the repositories crcp can pick from."""

import click

from crcp.cli.ensure import Ensure
from crcp.cli.output import render_remotes, stderr_console, user_output
from crcp.core.context import CrcpContext
from crcp.core.errors import CrcpError
from crcp.core.remotes import RemoteResolver


@click.command("remotes")
@click.pass_obj
def remotes_cmd(ctx: CrcpContext) -> None:
    """List connected remotes (origin excluded) with their canonical URLs."""
    repo_root = Ensure.in_repository(ctx.repo_root)
    try:
        remotes = RemoteResolver(ctx.git, repo_root).list_connected_remotes()
    except CrcpError as e:
        Ensure.from_error(e)

    if not remotes:
        user_output("No connected remotes.")
        return

    stderr_console().print(render_remotes(remotes))

    names_by_url: dict[str, list[str]] = {}
    for remote in remotes:
        names_by_url.setdefault(remote.url, []).append(remote.name)
    for url, names in names_by_url.items():
        if len(names) > 1:
            user_output(
                click.style("Warning: ", fg="yellow")
                + f"{', '.join(names)} all point at {url}; the first one is used."
            )
