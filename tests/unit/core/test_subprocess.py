"""Tests for blocking subprocess invocation."""

import sys
import time

import pytest

from crcp.core.errors import OperationTimedOut
from crcp.core.subprocess import run_subprocess_with_context


def test_non_zero_exit_raises_with_context() -> None:
    cmd = [sys.executable, "-c", "import sys; sys.stderr.write('boom'); sys.exit(3)"]

    with pytest.raises(RuntimeError) as exc_info:
        run_subprocess_with_context(cmd, "run the failing step")

    message = str(exc_info.value)
    assert "Failed to run the failing step" in message
    assert "Exit code: 3" in message
    assert "stderr: boom" in message


def test_expired_timeout_kills_child_and_raises() -> None:
    cmd = [sys.executable, "-c", "import time; time.sleep(30)"]

    started = time.monotonic()
    with pytest.raises(OperationTimedOut) as exc_info:
        run_subprocess_with_context(cmd, "wait for the slow step", timeout=0.2)

    assert time.monotonic() - started < 10
    assert exc_info.value.seconds == 0.2
    assert "Timed out after 0.2s while trying to wait for the slow step" in exc_info.value.message


def test_missing_executable_raises_runtime_error() -> None:
    with pytest.raises(RuntimeError, match="is not installed or not on PATH"):
        run_subprocess_with_context(["crcp-no-such-program"], "run a missing tool")
