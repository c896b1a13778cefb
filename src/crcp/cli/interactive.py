"""Interactive discovery of a run configuration.

Walks the user from "which repository" to "which commit onto which branch":

1. reuse the most recently connected remote, or enter a URL
2. enter the source branch, which is fetched so its commits can be listed
3. select a commit by number
4. enter the target branch
"""

import logging

import click

from crcp.cli.output import render_commits, render_remotes, stderr_console
from crcp.cli.prompts import Prompter
from crcp.core.errors import CrcpError, InvalidUrlFormat
from crcp.core.remotes import RemoteResolver
from crcp.core.user_feedback import UserFeedback
from crcp.core.workflow import WorkflowConfig, WorkflowOrchestrator

logger = logging.getLogger(__name__)

MAX_URL_ATTEMPTS = 3


def choose_remote_url(
    prompter: Prompter, resolver: RemoteResolver, feedback: UserFeedback
) -> str:
    """Ask which source repository to pick from; returns its URL.

    Raises:
        click.UsageError: If no acceptable URL was given in MAX_URL_ATTEMPTS tries
    """
    remotes = resolver.list_connected_remotes()
    if remotes:
        stderr_console().print(render_remotes(remotes))
        last = remotes[0]
        if prompter.confirm(
            f'Use the most recently added remote repository "{last.name}"?', default=True
        ):
            return last.url

    for attempt in range(1, MAX_URL_ATTEMPTS + 1):
        url = prompter.text("Enter the source repository URL")
        try:
            existing = resolver.find_remote(url)
        except InvalidUrlFormat as e:
            feedback.error(e.message)
            continue
        if existing is None:
            return url
        if prompter.confirm(
            f'Remote repository "{url}" already exists, do you want to use it?', default=True
        ):
            return url
        logger.debug("Declined existing remote %s (attempt %d)", existing.name, attempt)

    raise click.UsageError(f"No source repository selected after {MAX_URL_ATTEMPTS} attempts.")


def discover_config(
    prompter: Prompter, orchestrator: WorkflowOrchestrator, feedback: UserFeedback
) -> WorkflowConfig:
    """Build a WorkflowConfig from prompts.

    Registers the remote (if new) and fetches the source branch, since the
    commit list can only be shown from fetched history.

    Raises:
        CrcpError: If the remote cannot be resolved or the branch fetched
        click.UsageError: If no source repository was selected
    """
    url = choose_remote_url(prompter, orchestrator.remotes, feedback)
    source_branch = prompter.text("Enter the source branch name")
    remote, commits = orchestrator.discover_commits(url, source_branch)
    if not commits:
        raise CrcpError(f"Branch '{source_branch}' has no commits.", step="list commits")

    stderr_console().print(render_commits(commits, source_branch))
    index = prompter.choose(
        f"Please select a commit record to perform cherry-pick (branch: {source_branch})",
        len(commits),
    )
    commit = commits[index - 1]
    target_branch = prompter.text("Enter the target branch name")

    return WorkflowConfig.create(
        remote_url=url,
        source_branch=source_branch,
        commit_hash=commit.hash,
        target_branch=target_branch,
        remote_name=remote.name,
    )
