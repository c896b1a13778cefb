"""Tests for the confirmation-gated push."""

import pytest

from crcp.core.errors import PushFailed
from crcp.core.git.fake import FakeGit
from crcp.core.push import PushGate
from tests.test_utils.builders import REPO_ROOT


def test_declined_push_does_nothing() -> None:
    git = FakeGit(repo_root=REPO_ROOT)

    assert PushGate(git, REPO_ROOT).push("temp-main", "release", confirmed=False) is False
    assert git.force_pushes == []


def test_confirmed_push_force_pushes_temporary_onto_target() -> None:
    git = FakeGit(repo_root=REPO_ROOT)

    assert PushGate(git, REPO_ROOT).push("temp-main", "release", confirmed=True) is True
    assert git.force_pushes == [("origin", "temp-main:release")]


def test_rejected_push_raises_push_failed() -> None:
    git = FakeGit(repo_root=REPO_ROOT, fail_on={"force_push_refspec"})

    with pytest.raises(PushFailed) as exc_info:
        PushGate(git, REPO_ROOT).push("temp-main", "release", confirmed=True)

    assert exc_info.value.refspec == "temp-main:release"
    assert exc_info.value.step == "push"
