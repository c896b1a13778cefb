import logging
import os

import click

from crcp.cli.commands.config import config_group
from crcp.cli.commands.log import log_cmd
from crcp.cli.commands.pick import pick_cmd
from crcp.cli.commands.remotes import remotes_cmd
from crcp.core.context import create_context

CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])  # terse help flags

DEBUG_LOG_FORMAT = "[DEBUG %(name)s:%(lineno)d] %(message)s"


def configure_logging(debug: bool) -> None:
    """Send debug records to stderr when --debug or CRCP_DEBUG is set."""
    if debug or os.getenv("CRCP_DEBUG"):
        logging.basicConfig(level=logging.DEBUG, format=DEBUG_LOG_FORMAT)


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(package_name="crcp")
@click.option("--debug", is_flag=True, help="Log every pipeline step and git command.")
@click.pass_context
def cli(ctx: click.Context, debug: bool) -> None:
    """Cherry-pick commits from other repositories onto local branches."""
    configure_logging(debug)
    # Only create context if not already provided (e.g., by tests)
    if ctx.obj is None:
        ctx.obj = create_context(dry_run=False)


# Register all commands
cli.add_command(config_group)
cli.add_command(log_cmd)
cli.add_command(pick_cmd)
cli.add_command(remotes_cmd)


def main() -> None:
    """CLI entry point used by the `crcp` console script."""
    cli()
