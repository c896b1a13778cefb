"""Tests for context creation and per-run derivation."""

import os
import shutil
from dataclasses import replace
from pathlib import Path

import pytest

from crcp.core.context import CrcpContext, create_context, safe_cwd
from crcp.core.git.dry_run import DryRunGit
from crcp.core.git.fake import FakeGit
from crcp.core.git.real import RealGit
from crcp.core.user_feedback import InteractiveFeedback, SuppressedFeedback
from tests.fakes.user_feedback import FakeUserFeedback


def test_for_test_discovers_paths_through_git() -> None:
    ctx = CrcpContext.for_test(git=FakeGit(repo_root=Path("/work")), cwd=Path("/work/sub"))

    assert ctx.repo_root == Path("/work")
    assert ctx.git_dir == Path("/work/.git")
    assert ctx.cwd == Path("/work/sub")


def test_for_test_outside_repository() -> None:
    ctx = CrcpContext.minimal(FakeGit(repo_root=None), Path("/tmp"))

    assert ctx.repo_root is None
    assert ctx.git_dir is None


def test_for_run_wraps_dry_run_once() -> None:
    ctx = CrcpContext.for_test()

    derived = ctx.for_run(dry_run=True, quiet=False, timeout=None)

    assert isinstance(derived.git, DryRunGit)
    assert derived.dry_run is True
    again = derived.for_run(dry_run=True, quiet=False, timeout=None)
    assert again.git is derived.git


def test_for_run_quiet_swaps_interactive_feedback() -> None:
    ctx = CrcpContext.for_test(feedback=InteractiveFeedback())

    derived = ctx.for_run(dry_run=False, quiet=True, timeout=None)

    assert isinstance(derived.feedback, SuppressedFeedback)


def test_for_run_quiet_keeps_test_feedback() -> None:
    feedback = FakeUserFeedback()
    ctx = CrcpContext.for_test(feedback=feedback)

    derived = ctx.for_run(dry_run=False, quiet=True, timeout=None)

    assert derived.feedback is feedback


def test_for_run_timeout_rebuilds_real_git() -> None:
    ctx = replace(CrcpContext.for_test(), git=RealGit(timeout=600.0))

    derived = ctx.for_run(dry_run=False, quiet=False, timeout=5)

    assert isinstance(derived.git, RealGit)
    assert derived.git is not ctx.git


def test_for_run_timeout_is_noop_for_fake_git() -> None:
    git = FakeGit(repo_root=Path("/repo"))
    ctx = CrcpContext.for_test(git=git)

    assert ctx.for_run(dry_run=False, quiet=False, timeout=0).git is git


def test_safe_cwd_with_valid_directory(tmp_path: Path) -> None:
    original_cwd = Path.cwd()
    try:
        os.chdir(tmp_path)
        path, error = safe_cwd()
    finally:
        os.chdir(original_cwd)

    assert path == tmp_path
    assert error is None


@pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")
def test_create_context_outside_repository(tmp_path: Path) -> None:
    original_cwd = Path.cwd()
    try:
        os.chdir(tmp_path)
        ctx = create_context(dry_run=True)
    finally:
        os.chdir(original_cwd)

    assert isinstance(ctx.git, DryRunGit)
    assert ctx.dry_run is True
    assert ctx.cwd == tmp_path
