"""Configuration commands."""

import click

from crcp.cli.commands.config.set_cmd import set_config
from crcp.cli.commands.config.show_cmd import show_config


@click.group("config")
def config_group() -> None:
    """Show or edit the run configuration stored in files."""
    pass


# Register subcommands
config_group.add_command(show_config)
config_group.add_command(set_config)
