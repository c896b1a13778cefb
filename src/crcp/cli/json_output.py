"""JSON output for `crcp pick --json`."""

import json
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from crcp.cli.output import machine_output
from crcp.core.workflow import (
    CompletedNotPushed,
    ConflictPendingManualResolution,
    Pushed,
    RunFailed,
    RunStatus,
    WorkflowConfig,
)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_CONFLICT = 2
EXIT_INTERRUPTED = 130


class RunReport(BaseModel):
    """Pydantic model for the final status of one run.

    Attributes:
        status: Which terminal state the run reached
        exit_code: Exit code of the process
        step: Failed step (failures only)
        reason: Failure description (failures only)
        commit_summary: `git log -1 --stat` of the applied commit
        conflicting_files: Unmerged paths (conflicts only)
        changed_files: Files with unstaged changes (conflicts only)
        remote_name, source_repo_url, source_branch, commit_hash, target_branch:
            The run's configuration, when one was resolved
        dry_run: Whether mutating git commands were only printed
    """

    model_config = ConfigDict(strict=True)

    status: Literal["pushed", "completed_not_pushed", "conflict", "failed"]
    exit_code: int = Field(ge=0, le=255)
    step: str | None = None
    reason: str | None = None
    commit_summary: str | None = None
    conflicting_files: list[str] = Field(default_factory=list)
    changed_files: list[str] = Field(default_factory=list)
    remote_name: str | None = None
    source_repo_url: str | None = None
    source_branch: str | None = None
    commit_hash: str | None = None
    target_branch: str | None = None
    dry_run: bool = False


def exit_code_for(status: RunStatus) -> int:
    match status:
        case Pushed() | CompletedNotPushed():
            return EXIT_OK
        case ConflictPendingManualResolution():
            return EXIT_CONFLICT
        case RunFailed():
            return EXIT_FAILED


def build_report(status: RunStatus, config: WorkflowConfig | None, *, dry_run: bool) -> RunReport:
    """Translate a RunStatus (and the config it ran with) into a RunReport."""
    fields: dict[str, Any] = {"exit_code": exit_code_for(status), "dry_run": dry_run}
    if config is not None:
        fields.update(
            remote_name=config.remote_name,
            source_repo_url=config.remote_url,
            source_branch=config.source_branch,
            commit_hash=config.commit_hash,
            target_branch=config.target_branch,
        )

    match status:
        case Pushed(commit_summary=summary):
            return RunReport(status="pushed", commit_summary=summary, **fields)
        case CompletedNotPushed(commit_summary=summary):
            return RunReport(status="completed_not_pushed", commit_summary=summary, **fields)
        case ConflictPendingManualResolution(conflicting_files=files, changed_files=changed):
            return RunReport(
                status="conflict",
                conflicting_files=list(files),
                changed_files=list(changed),
                **fields,
            )
        case RunFailed(step=step, reason=reason):
            return RunReport(status="failed", step=step, reason=reason, **fields)


def emit_json(data: dict[str, Any]) -> None:
    """Output JSON data to stdout for machine consumption.

    Routes JSON through machine_output() to ensure correct stream
    separation (data on stdout, human messages on stderr).

    For Pydantic models, call model.model_dump(mode='json') before
    passing to this function.
    """
    machine_output(json.dumps(data, indent=2))
