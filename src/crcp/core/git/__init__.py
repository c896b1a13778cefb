"""Git operations subpackage.

This subpackage provides abstractions over git operations with support for
testing via fakes and dry-run via wrappers.
"""

from crcp.core.git.abc import Git, OutputLine, ProcessExit, StreamEvent
from crcp.core.git.dry_run import DryRunGit
from crcp.core.git.real import RealGit

__all__ = [
    "Git",
    "OutputLine",
    "ProcessExit",
    "StreamEvent",
    "RealGit",
    "DryRunGit",
]
