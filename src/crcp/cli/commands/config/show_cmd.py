"""Show the configuration a `crcp pick` without arguments would use."""

from pathlib import Path

import click

from crcp.cli.ensure import Ensure
from crcp.cli.output import machine_output, user_output
from crcp.core.config import load_file_config
from crcp.core.context import CrcpContext
from crcp.core.errors import CrcpError


@click.command("show")
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path, dir_okay=False),
    default=None,
    help="Show this JSON file instead of the default lookup.",
)
@click.pass_obj
def show_config(ctx: CrcpContext, config_path: Path | None) -> None:
    """Print the resolved file configuration and where it came from."""
    try:
        file_config = load_file_config(
            cwd=ctx.cwd, repo_root=ctx.repo_root, explicit_path=config_path
        )
    except CrcpError as e:
        Ensure.from_error(e)

    if file_config is None:
        user_output("No configuration file found; `crcp pick` will prompt.")
        return

    user_output(f"Configuration from {file_config.origin}:")
    machine_output(f"source_repo_url={file_config.source_repo_url}")
    machine_output(f"source_branch={file_config.source_branch}")
    machine_output(f"commit_hash={file_config.commit_hash}")
    machine_output(f"target_branch={file_config.target_branch}")
