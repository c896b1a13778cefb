"""Branch lifecycle: temporary branch recreation and target branch resolution.

Each branch name is either Absent or Present locally. The transitions are:

- create_temporary: Present -> Absent (force delete), then Absent -> Present
  (checkout -b from the fetched ref). The temporary branch is disposable, so
  it is always recreated rather than reused. When it is the checked-out
  branch it cannot be deleted, and is reset in place with checkout -B.
- ensure_target: Present -> Present (switch), or Absent -> Present (create
  from HEAD and publish to origin with upstream). Publishing happens
  immediately, before any cherry-pick is attempted.
"""

import logging
from pathlib import Path

from crcp.core.errors import BranchCleanupFailed, BranchOperationFailed, CrcpError
from crcp.core.git.abc import Git
from crcp.core.types import TEMPORARY_BRANCH_PREFIX, BranchRef

logger = logging.getLogger(__name__)

PUBLISH_REMOTE = "origin"


class BranchLifecycleManager:
    """Creates, recreates and switches local branches."""

    def __init__(self, git: Git, repo_root: Path) -> None:
        self._git = git
        self._repo_root = repo_root

    def exists(self, name: str) -> bool:
        """Whether a local branch called name exists.

        Raises:
            CrcpError: If the branch list cannot be read; the step is left to
                the caller
        """
        try:
            branches = self._git.list_local_branches(self._repo_root, name)
        except RuntimeError as e:
            raise CrcpError(f"Could not look up branch '{name}'.\n{e}") from e
        return name in branches

    def create_temporary(self, name: str, from_ref: str) -> BranchRef:
        """(Re)create name from from_ref and switch to it.

        Raises:
            BranchCleanupFailed: If a stale branch of that name cannot be deleted
            BranchOperationFailed: If the new branch cannot be checked out
        """
        reset = False
        if self.exists(name):
            try:
                # git refuses to delete the checked-out branch; reset it in place
                if self._git.get_current_branch(self._repo_root) == name:
                    reset = True
                else:
                    self._git.delete_branch(self._repo_root, name, force=True)
            except RuntimeError as e:
                raise BranchCleanupFailed(name, str(e)) from e
            logger.debug("Discarded stale temporary branch %s", name)

        try:
            self._git.checkout_new_branch(self._repo_root, name, from_ref, reset=reset)
        except RuntimeError as e:
            raise BranchOperationFailed(
                name,
                "create and switch to temporary branch",
                str(e),
                step="create temporary branch",
            ) from e
        logger.debug("Created temporary branch %s from %s", name, from_ref)
        return BranchRef(name=name, exists=True, is_temporary=True)

    def ensure_target(self, name: str) -> BranchRef:
        """Switch to name, creating and publishing it first when absent.

        Returns:
            BranchRef whose `exists` records whether the branch was already
            present before this call (False means it was created and pushed)

        Raises:
            BranchOperationFailed: If switching, creating or publishing fails
        """
        is_temporary = name.startswith(TEMPORARY_BRANCH_PREFIX)
        if self.exists(name):
            try:
                self._git.checkout_branch(self._repo_root, name)
            except RuntimeError as e:
                raise BranchOperationFailed(
                    name, "switch to target branch", str(e), step="switch target branch"
                ) from e
            logger.debug("Switched to existing target branch %s", name)
            return BranchRef(name=name, exists=True, is_temporary=is_temporary)

        try:
            self._git.checkout_new_branch(self._repo_root, name, None)
        except RuntimeError as e:
            raise BranchOperationFailed(
                name, "create target branch", str(e), step="create target branch"
            ) from e
        try:
            self._git.push_with_upstream(self._repo_root, PUBLISH_REMOTE, name)
        except RuntimeError as e:
            raise BranchOperationFailed(
                name, "publish target branch", str(e), step="publish target branch"
            ) from e
        logger.debug("Created target branch %s and published it to %s", name, PUBLISH_REMOTE)
        return BranchRef(name=name, exists=False, is_temporary=is_temporary)

    def delete_temporary(self, name: str) -> bool:
        """Best-effort removal of a temporary branch; failures are only logged."""
        try:
            self._git.delete_branch(self._repo_root, name, force=True)
        except RuntimeError as e:
            logger.warning("Could not delete temporary branch %s: %s", name, e)
            return False
        return True
