"""Per-repository run lock.

Two crcp runs in the same repository would fight over the temporary branch
and the working tree, so a run holds `crcp.lock` in the git directory for its
whole duration. The lock file holds the owner's pid; a lock whose owner is no
longer alive is stale and gets replaced.
"""

import logging
import os
from pathlib import Path
from types import TracebackType

from crcp.core.errors import RepositoryLocked

logger = logging.getLogger(__name__)

LOCK_FILE_NAME = "crcp.lock"


def _is_process_running(pid: int) -> bool:
    try:
        os.kill(pid, 0)
    except ProcessLookupError:
        return False
    except PermissionError:
        # Exists, owned by someone else
        return True
    return True


def _read_owner_pid(lock_path: Path) -> int | None:
    try:
        return int(lock_path.read_text(encoding="utf-8").strip())
    except (OSError, ValueError):
        return None


class RepoLock:
    """Exclusive lock on one repository, usable as a context manager.

    Usage:
        with RepoLock(git_dir):
            orchestrator.run(config, confirm_push)
    """

    def __init__(self, git_dir: Path) -> None:
        self.lock_path = git_dir / LOCK_FILE_NAME
        self._held = False

    def _try_create(self) -> bool:
        try:
            fd = os.open(self.lock_path, os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o644)
        except FileExistsError:
            return False
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(f"{os.getpid()}\n")
        return True

    def acquire(self) -> None:
        """Take the lock, replacing it if its owner is gone.

        Raises:
            RepositoryLocked: If another live process holds the lock
        """
        if self._try_create():
            self._held = True
            logger.debug("Acquired lock %s", self.lock_path)
            return

        owner = _read_owner_pid(self.lock_path)
        if owner is not None and owner != os.getpid() and _is_process_running(owner):
            raise RepositoryLocked(str(self.lock_path), f"pid {owner}")

        logger.warning("Removing stale lock %s (owner pid %s)", self.lock_path, owner)
        self.lock_path.unlink(missing_ok=True)
        if not self._try_create():
            raise RepositoryLocked(str(self.lock_path), "unknown")
        self._held = True
        logger.debug("Acquired lock %s", self.lock_path)

    def release(self) -> None:
        if not self._held:
            return
        self.lock_path.unlink(missing_ok=True)
        self._held = False
        logger.debug("Released lock %s", self.lock_path)

    def __enter__(self) -> "RepoLock":
        self.acquire()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.release()
