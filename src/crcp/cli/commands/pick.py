"""Pick command - cherry-pick one commit from another repository onto a local branch."""

import contextlib
import logging
from collections.abc import Callable
from pathlib import Path

import click

from crcp.cli.ensure import Ensure
from crcp.cli.interactive import discover_config
from crcp.cli.json_output import (
    EXIT_INTERRUPTED,
    build_report,
    emit_json,
    exit_code_for,
)
from crcp.cli.output import (
    render_confirmation,
    render_status,
    report_conflicts,
    stderr_console,
    user_output,
)
from crcp.cli.progress import ConsoleOutputListener
from crcp.core.cherry_pick import OutputListener, SilentOutputListener
from crcp.core.config import load_file_config
from crcp.core.context import CrcpContext
from crcp.core.errors import CrcpError
from crcp.core.lock import RepoLock
from crcp.core.workflow import (
    ConflictPendingManualResolution,
    RunFailed,
    RunStatus,
    WorkflowConfig,
    WorkflowOrchestrator,
)

logger = logging.getLogger(__name__)

ARGUMENT_NAMES = ("SOURCE_REPO_URL", "SOURCE_BRANCH", "COMMIT_HASH", "TARGET_BRANCH")
PUSH_QUESTION = "Do you want to push the changes to the remote repository?"


def _resolve_config(
    ctx: CrcpContext,
    orchestrator: WorkflowOrchestrator,
    args: tuple[str, ...],
    config_path: Path | None,
    interactive: bool,
) -> WorkflowConfig:
    """Pick the first complete configuration source.

    Precedence: positional arguments, configuration file, prompts.
    """
    if args:
        if len(args) < len(ARGUMENT_NAMES):
            raise click.UsageError(f"Missing argument '{ARGUMENT_NAMES[len(args)]}'.")
        if len(args) > len(ARGUMENT_NAMES):
            raise click.UsageError(f"Got unexpected extra argument ({args[len(ARGUMENT_NAMES)]})")
        remote_url, source_branch, commit_hash, target_branch = args
        return WorkflowConfig.create(
            remote_url=remote_url,
            source_branch=source_branch,
            commit_hash=commit_hash,
            target_branch=target_branch,
        )

    if not interactive:
        file_config = load_file_config(
            cwd=ctx.cwd, repo_root=ctx.repo_root, explicit_path=config_path
        )
        if file_config is not None:
            logger.debug("Using configuration from %s", file_config.origin)
            return WorkflowConfig.create(
                remote_url=file_config.source_repo_url,
                source_branch=file_config.source_branch,
                commit_hash=file_config.commit_hash,
                target_branch=file_config.target_branch,
            )

    if not (interactive or ctx.prompter.is_interactive()):
        raise click.UsageError(
            "No configuration found. Pass the four arguments, add .crcpconfig.json "
            "or [tool.crcp] to pyproject.toml, or run with --interactive."
        )
    return discover_config(ctx.prompter, orchestrator, ctx.feedback)


def _push_decision(
    ctx: CrcpContext, push: bool | None, yes: bool, output_json: bool
) -> Callable[[], bool]:
    def confirm_push() -> bool:
        if push is not None:
            return push
        if yes:
            return True
        if output_json or not ctx.prompter.is_interactive():
            logger.debug("No one to ask about pushing, not pushing")
            return False
        return ctx.prompter.confirm(PUSH_QUESTION, default=True)

    return confirm_push


def _finish(
    status: RunStatus, config: WorkflowConfig | None, *, output_json: bool, dry_run: bool
) -> None:
    exit_code = exit_code_for(status)
    if output_json:
        emit_json(build_report(status, config, dry_run=dry_run).model_dump(mode="json"))
        raise SystemExit(exit_code)

    if isinstance(status, ConflictPendingManualResolution):
        report_conflicts(status)
    stderr_console().print(render_status(status))
    if isinstance(status, RunFailed):
        Ensure.step_failed(status.step, status.reason)
    if exit_code != 0:
        raise SystemExit(exit_code)


@click.command("pick")
@click.argument(
    "args", nargs=-1, metavar="[SOURCE_REPO_URL SOURCE_BRANCH COMMIT_HASH TARGET_BRANCH]"
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path, dir_okay=False),
    default=None,
    help="Read the run configuration from this JSON file instead of .crcpconfig.json.",
)
@click.option(
    "-i",
    "--interactive",
    is_flag=True,
    help="Ignore configuration files and choose remote, commit and branches interactively.",
)
@click.option(
    "--push/--no-push",
    default=None,
    help="Decide up front whether to force-push the result (default: ask).",
)
@click.option("-y", "--yes", is_flag=True, help="Push without asking.")
@click.option(
    "--dry-run", is_flag=True, help="Print mutating git commands instead of running them."
)
@click.option(
    "--timeout",
    type=click.FloatRange(min=0),
    default=None,
    help="Seconds each git command may run (default 600, 0 disables).",
)
@click.option("--no-lock", is_flag=True, help="Do not take the repository lock.")
@click.option("--json", "output_json", is_flag=True, help="Print the final status as JSON.")
@click.pass_obj
def pick_cmd(
    ctx: CrcpContext,
    args: tuple[str, ...],
    config_path: Path | None,
    interactive: bool,
    push: bool | None,
    yes: bool,
    dry_run: bool,
    timeout: float | None,
    no_lock: bool,
    output_json: bool,
) -> None:
    """Cherry-pick one commit from another repository onto TARGET_BRANCH.

    The commit is applied on the local target branch; the result is pushed to
    origin only after confirmation. Configuration comes from the four
    arguments, a configuration file, or interactive prompts, in that order.

    Exit status: 0 done, 1 failed, 2 conflicts left for manual resolution,
    130 aborted.
    """
    run_ctx = ctx.for_run(dry_run=dry_run, quiet=output_json, timeout=timeout)
    repo_root = Ensure.in_repository(run_ctx.repo_root)

    listener: OutputListener = SilentOutputListener() if output_json else ConsoleOutputListener()
    orchestrator = WorkflowOrchestrator(
        run_ctx.git,
        repo_root,
        feedback=run_ctx.feedback,
        listener=listener,
        dry_run=run_ctx.dry_run,
    )

    # Held across interactive discovery, which registers remotes and fetches
    lock: contextlib.AbstractContextManager[RepoLock | None] = contextlib.nullcontext()
    if not (run_ctx.dry_run or no_lock):
        git_dir = Ensure.not_none(run_ctx.git_dir, "Could not locate the git directory")
        lock = RepoLock(git_dir)

    config: WorkflowConfig | None = None
    try:
        with lock:
            config = _resolve_config(run_ctx, orchestrator, args, config_path, interactive)
            config = orchestrator.bind_remote_name(config)
            if not output_json:
                stderr_console().print(render_confirmation(config))
            status = orchestrator.run(config, _push_decision(run_ctx, push, yes, output_json))
    except CrcpError as e:
        status = RunFailed(step=e.step, reason=e.message)
    except (KeyboardInterrupt, click.exceptions.Abort):
        # click prompts turn Ctrl-C and a closed stdin into Abort
        user_output(click.style("Operation aborted by user.", fg="red"))
        raise SystemExit(EXIT_INTERRUPTED) from None

    _finish(status, config, output_json=output_json, dry_run=run_ctx.dry_run)
