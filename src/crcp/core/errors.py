"""Error taxonomy for the cherry-pick workflow.

Every fatal condition the core can detect is a subclass of CrcpError. Each
error carries the pipeline step that raised it so the CLI can print a
diagnostic naming the failed step.

Conflicts are NOT errors: a conflicting cherry-pick is a normal result
variant (see crcp.core.cherry_pick.Conflicted).
"""


class CrcpError(Exception):
    """Base class for all fatal workflow errors."""

    step: str = "run"

    def __init__(self, message: str, *, step: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        if step is not None:
            self.step = step


class InvalidUrlFormat(CrcpError):
    """URL matches neither the SSH nor the HTTPS remote-URL shape."""

    step = "resolve remote"

    def __init__(self, url: str) -> None:
        super().__init__(
            f"'{url}' is not a recognized repository URL. "
            "Expected git@host:org/repo.git or https://host/org/repo.git"
        )
        self.url = url


class RemoteRegistrationFailed(CrcpError):
    """`git remote add` was rejected (e.g. the name points at another URL)."""

    step = "resolve remote"

    def __init__(self, name: str, url: str, detail: str) -> None:
        super().__init__(f"Failed to add remote '{name}' for {url}\n{detail}")
        self.name = name
        self.url = url


class FetchFailed(CrcpError):
    """Fetching the source branch failed."""

    step = "fetch"

    def __init__(self, remote: str, branch: str, detail: str) -> None:
        super().__init__(
            f"Pulling branch '{branch}' from remote '{remote}' failed. "
            f"Please check the branch.\n{detail}"
        )
        self.remote = remote
        self.branch = branch


class HistoryParseError(CrcpError):
    """A `git log` line could not be decomposed into a commit record."""

    step = "list commits"

    def __init__(self, line: str, reason: str) -> None:
        super().__init__(f"Could not parse commit record {line!r}: {reason}")
        self.line = line


class BranchCleanupFailed(CrcpError):
    """A stale temporary branch could not be deleted."""

    step = "create temporary branch"

    def __init__(self, branch: str, detail: str) -> None:
        super().__init__(f"Cleaning up temporary branch '{branch}' failed.\n{detail}")
        self.branch = branch


class BranchOperationFailed(CrcpError):
    """Creating, switching to, or publishing a branch failed."""

    def __init__(self, branch: str, action: str, detail: str, *, step: str) -> None:
        super().__init__(f"Failed to {action} '{branch}'.\n{detail}", step=step)
        self.branch = branch


class PushFailed(CrcpError):
    """The confirmed force-push was rejected."""

    step = "push"

    def __init__(self, refspec: str, detail: str) -> None:
        super().__init__(f"Failed to push '{refspec}' to origin.\n{detail}")
        self.refspec = refspec


class OperationTimedOut(CrcpError):
    """A git command exceeded the configured timeout and was killed."""

    def __init__(self, operation: str, seconds: float) -> None:
        super().__init__(f"Timed out after {seconds:g}s while trying to {operation}")
        self.operation = operation
        self.seconds = seconds


class RepositoryLocked(CrcpError):
    """Another crcp run holds the repository lock."""

    step = "lock repository"

    def __init__(self, lock_path: str, owner: str) -> None:
        super().__init__(
            f"Another crcp run ({owner}) is using this repository. "
            f"Remove {lock_path} if that run is no longer active."
        )
        self.lock_path = lock_path


class ConfigError(CrcpError):
    """The configuration file is unreadable or incomplete."""

    step = "load configuration"
