"""End-to-end workflow runs against real git repositories in a temp directory.

The source repository is reached through a `url.<base>.insteadOf` rewrite so
that it can be addressed with an ordinary https URL.
"""

import shutil
import subprocess
import sys
from pathlib import Path
from typing import Any

import pytest

from crcp.core.cherry_pick import CherryPickExecutor, Conflicted, SilentOutputListener
from crcp.core.git.abc import OutputLine
from crcp.core.git.real import RealGit
from crcp.core.workflow import (
    ConflictPendingManualResolution,
    Pushed,
    RunFailed,
    RunStatus,
    WorkflowConfig,
    WorkflowOrchestrator,
)
from tests.fakes.user_feedback import FakeUserFeedback

pytestmark = pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")

SOURCE_URL = "https://example.com/acme/lib.git"


def _git(cwd: Path, *args: str) -> str:
    result = subprocess.run(
        ["git", *args], cwd=cwd, capture_output=True, text=True, check=True
    )
    return result.stdout.strip()


def _commit(repo: Path, filename: str, content: str, message: str) -> str:
    (repo / filename).write_text(content, encoding="utf-8")
    _git(repo, "add", filename)
    _git(repo, "commit", "-q", "-m", message)
    return _git(repo, "rev-parse", "--short", "HEAD")


@pytest.fixture
def repos(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> dict[str, Path]:
    for var in ("GIT_AUTHOR_NAME", "GIT_COMMITTER_NAME"):
        monkeypatch.setenv(var, "Test User")
    for var in ("GIT_AUTHOR_EMAIL", "GIT_COMMITTER_EMAIL"):
        monkeypatch.setenv(var, "test@example.com")

    lib = tmp_path / "lib"
    lib.mkdir()
    _git(lib, "init", "-q", "-b", "main")
    _commit(lib, "README.md", "lib\n", "Initial lib commit")

    lib_bare = tmp_path / "lib.git"
    _git(tmp_path, "clone", "-q", "--bare", str(lib), str(lib_bare))

    app = tmp_path / "app"
    app.mkdir()
    _git(app, "init", "-q", "-b", "main")
    _commit(app, "README.md", "app\n", "Initial app commit")

    app_bare = tmp_path / "app.git"
    _git(tmp_path, "clone", "-q", "--bare", str(app), str(app_bare))
    _git(app, "remote", "add", "origin", str(app_bare))
    _git(app, "config", f"url.{lib_bare.as_uri()}.insteadOf", SOURCE_URL)

    return {"lib": lib, "lib_bare": lib_bare, "app": app, "app_bare": app_bare}


def _publish_lib_commit(repos: dict[str, Path], filename: str, content: str, message: str) -> str:
    sha = _commit(repos["lib"], filename, content, message)
    _git(repos["lib"], "push", "-q", str(repos["lib_bare"]), "main")
    return sha


def _install_hook(repo: Path, name: str, script: str) -> None:
    hooks = repo / ".git" / "hooks"
    hooks.mkdir(exist_ok=True)
    hook = hooks / name
    hook.write_text(f"#!/bin/sh\n{script}\n", encoding="utf-8")
    hook.chmod(0o755)


def _run(
    repos: dict[str, Path], commit_hash: str, target: str, timeout: float = 60.0
) -> RunStatus:
    app = repos["app"]
    orchestrator = WorkflowOrchestrator(
        RealGit(timeout=timeout),
        app,
        feedback=FakeUserFeedback(),
        listener=SilentOutputListener(),
    )
    config = WorkflowConfig.create(
        remote_url=SOURCE_URL,
        source_branch="main",
        commit_hash=commit_hash,
        target_branch=target,
    )
    return orchestrator.run(config, lambda: True)


def test_clean_pick_onto_existing_branch(repos: dict[str, Path]) -> None:
    sha = _publish_lib_commit(repos, "feature.py", "print('hi')\n", "Add feature")

    status = _run(repos, sha, "main")

    assert isinstance(status, Pushed), status
    app = repos["app"]
    assert _git(app, "log", "-1", "--format=%s") == "Add feature"
    assert _git(app, "branch", "--list", "temp-main") == ""
    assert "lib" in _git(app, "remote").splitlines()


def test_conflicting_pick_is_left_for_manual_resolution(repos: dict[str, Path]) -> None:
    sha = _publish_lib_commit(repos, "README.md", "lib changed\n", "Rewrite readme")

    status = _run(repos, sha, "main")

    assert status == ConflictPendingManualResolution(
        conflicting_files=("README.md",), changed_files=("README.md",)
    )
    app = repos["app"]
    assert _git(app, "branch", "--list", "temp-main") != ""
    assert _git(repos["app_bare"], "log", "-1", "--format=%s", "main") == "Initial app commit"


def test_unknown_commit_fails_cherry_pick_step(repos: dict[str, Path]) -> None:
    status = _run(repos, "0000000", "main")

    assert isinstance(status, RunFailed)
    assert status.step == "cherry-pick"


def test_missing_source_branch_fails_fetch(repos: dict[str, Path]) -> None:
    orchestrator = WorkflowOrchestrator(
        RealGit(timeout=60.0),
        repos["app"],
        feedback=FakeUserFeedback(),
        listener=SilentOutputListener(),
    )
    config = WorkflowConfig.create(
        remote_url=SOURCE_URL,
        source_branch="does-not-exist",
        commit_hash="abc123",
        target_branch="main",
    )

    status = orchestrator.run(config, lambda: True)

    assert isinstance(status, RunFailed)
    assert status.step == "fetch"
    assert "does-not-exist" in status.reason


def test_conflict_on_non_ascii_path_is_reported_unquoted(repos: dict[str, Path]) -> None:
    _commit(repos["app"], "résumé.txt", "app version\n", "Add app résumé")
    sha = _publish_lib_commit(repos, "résumé.txt", "lib version\n", "Add lib résumé")

    status = _run(repos, sha, "main")

    assert isinstance(status, ConflictPendingManualResolution), status
    assert status.conflicting_files == ("résumé.txt",)


def test_executor_reports_non_ascii_conflict(repos: dict[str, Path]) -> None:
    app = repos["app"]
    _commit(app, "résumé.txt", "app version\n", "Add app résumé")
    sha = _publish_lib_commit(repos, "résumé.txt", "lib version\n", "Add lib résumé")
    _git(app, "fetch", "-q", str(repos["lib_bare"]), "main")

    result = CherryPickExecutor(RealGit(timeout=60.0), app, SilentOutputListener()).apply(sha)

    assert result == Conflicted(conflicting_files=frozenset({"résumé.txt"}))


@pytest.mark.skipif(sys.platform == "win32", reason="shell hooks")
def test_cherry_pick_outliving_timeout_fails_cherry_pick_step(repos: dict[str, Path]) -> None:
    sha = _publish_lib_commit(repos, "feature.py", "print('hi')\n", "Add feature")
    _install_hook(repos["app"], "prepare-commit-msg", "sleep 20")

    status = _run(repos, sha, "main", timeout=3.0)

    assert isinstance(status, RunFailed), status
    assert status.step == "cherry-pick"
    assert "Timed out after 3s while trying to cherry-pick commit" in status.reason


@pytest.mark.skipif(sys.platform == "win32", reason="shell hooks")
def test_abandoned_cherry_pick_stream_kills_git(
    repos: dict[str, Path], monkeypatch: pytest.MonkeyPatch
) -> None:
    app = repos["app"]
    sha = _publish_lib_commit(repos, "feature.py", "print('hi')\n", "Add feature")
    _git(app, "fetch", "-q", str(repos["lib_bare"]), "main")
    _install_hook(app, "prepare-commit-msg", "echo preparing >&2\nsleep 20")

    started: list[subprocess.Popen[str]] = []
    popen = subprocess.Popen

    def recording_popen(*args: Any, **kwargs: Any) -> subprocess.Popen[str]:
        process = popen(*args, **kwargs)
        started.append(process)
        return process

    monkeypatch.setattr(subprocess, "Popen", recording_popen)

    stream = RealGit(timeout=60.0).cherry_pick_streaming(app, sha)
    first = next(stream)
    stream.close()

    assert isinstance(first, OutputLine)
    assert len(started) == 1
    assert started[0].poll() is not None
