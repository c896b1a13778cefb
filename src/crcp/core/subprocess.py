"""Blocking git invocations that fail loudly.

Every failure names the step it belonged to, the command line, the exit
status and whatever git printed, so the message can be shown to the user
unchanged.
"""

import logging
import subprocess
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from crcp.core.errors import OperationTimedOut

logger = logging.getLogger(__name__)


def _describe_failure(
    cmd: Sequence[str], operation_context: str, returncode: int, stdout: str, stderr: str
) -> str:
    parts = [
        f"Failed to {operation_context}",
        f"Command: {' '.join(cmd)}",
        f"Exit code: {returncode}",
    ]
    for label, text in (("stdout", stdout), ("stderr", stderr)):
        if text and text.strip():
            parts.append(f"{label}: {text.strip()}")
    return "\n".join(parts)


def run_subprocess_with_context(
    cmd: Sequence[str],
    operation_context: str,
    cwd: Path | None = None,
    timeout: float | None = None,
    check: bool = True,
    **kwargs: Any,
) -> subprocess.CompletedProcess[str]:
    """Run cmd to completion and capture its text output.

    Args:
        cmd: Program and arguments
        operation_context: What the command is for, e.g. "fetch branch 'main'"
        cwd: Directory to run in
        timeout: Seconds before the child is killed; None waits forever
        check: Raise when the exit status is non-zero
        **kwargs: Passed through to subprocess.run()

    Raises:
        RuntimeError: On a non-zero exit (with check) or a missing executable
        OperationTimedOut: When timeout expired; the child has been killed
    """
    logger.debug("Running %s (cwd=%s, timeout=%s)", " ".join(cmd), cwd, timeout)
    try:
        return subprocess.run(
            cmd,
            cwd=cwd,
            capture_output=True,
            text=True,
            encoding="utf-8",
            check=check,
            timeout=timeout,
            **kwargs,
        )
    except subprocess.CalledProcessError as e:
        message = _describe_failure(cmd, operation_context, e.returncode, e.stdout, e.stderr)
        raise RuntimeError(message) from e
    except subprocess.TimeoutExpired as e:
        raise OperationTimedOut(operation_context, e.timeout) from e
    except FileNotFoundError as e:
        raise RuntimeError(
            f"Cannot {operation_context}: {cmd[0]} is not installed or not on PATH"
        ) from e
