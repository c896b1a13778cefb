"""Write one [tool.crcp] key into the repository's pyproject.toml."""

import click

from crcp.cli.ensure import Ensure
from crcp.cli.output import user_output
from crcp.core.config import CONFIG_KEYS, write_pyproject_value
from crcp.core.context import CrcpContext
from crcp.core.errors import CrcpError


@click.command("set")
@click.argument("key", type=click.Choice(CONFIG_KEYS))
@click.argument("value")
@click.pass_obj
def set_config(ctx: CrcpContext, key: str, value: str) -> None:
    """Set KEY to VALUE in [tool.crcp], preserving the file's formatting."""
    repo_root = Ensure.in_repository(ctx.repo_root)
    Ensure.invariant(bool(value.strip()), f"A value for {key} is required")

    try:
        path = write_pyproject_value(repo_root, key, value.strip())
    except CrcpError as e:
        Ensure.from_error(e)
    user_output(click.style("✓ ", fg="green") + f"Set {key} in {path}")
