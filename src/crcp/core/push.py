"""Confirmation-gated force push of the temporary branch onto the target."""

import logging
from pathlib import Path

from crcp.core.errors import PushFailed
from crcp.core.git.abc import Git

logger = logging.getLogger(__name__)

PUSH_REMOTE = "origin"


class PushGate:
    """Pushes `<temporary>:<target>` to origin only when the caller confirmed."""

    def __init__(self, git: Git, repo_root: Path) -> None:
        self._git = git
        self._repo_root = repo_root

    def push(self, temporary_branch: str, target_branch: str, *, confirmed: bool) -> bool:
        """Force-push when confirmed; return whether a push happened.

        Declining is not an error: the run ends as "completed, not pushed".

        Raises:
            PushFailed: If the confirmed push is rejected
        """
        if not confirmed:
            logger.debug("Push of %s declined", target_branch)
            return False

        refspec = f"{temporary_branch}:{target_branch}"
        try:
            self._git.force_push_refspec(self._repo_root, PUSH_REMOTE, refspec)
        except RuntimeError as e:
            raise PushFailed(refspec, str(e)) from e
        logger.debug("Force-pushed %s to %s", refspec, PUSH_REMOTE)
        return True
