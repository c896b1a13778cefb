"""Remote resolution: URL normalization, lookup and on-demand registration.

Remotes are compared by canonical URL, never by name, so
`git@github.com:acme/lib.git` and `https://github.com/acme/lib.git` are the
same remote no matter what either was registered as.
"""

import logging
import re
from pathlib import Path

from crcp.core.errors import CrcpError, InvalidUrlFormat, RemoteRegistrationFailed
from crcp.core.git.abc import Git
from crcp.core.parsing import parse_remote_listing
from crcp.core.types import RemoteSpec

logger = logging.getLogger(__name__)

ORIGIN_REMOTE = "origin"
FALLBACK_REPO_NAME = "source-repo"

_SSH_URL = re.compile(r"^[^@\s/]+@([^:/\s]+):([^/\s]+)/(\S+)\.git$")
_HTTPS_URL = re.compile(r"^https?://([^/\s]+)/([^/\s]+)/(\S+)\.git$")
_REPO_NAME_URL = re.compile(r"^(?:https?://|git@)(?:[^/:]+)[/:]([^/]+/[^/.]+)(?:\.git)?$", re.I)


def normalize_url(url: str) -> str:
    """Convert an SSH or HTTPS remote URL into canonical `https://host/org/repo.git`.

    >>> normalize_url("git@github.com:acme/lib.git")
    'https://github.com/acme/lib.git'

    Raises:
        InvalidUrlFormat: If url matches neither shape
    """
    candidate = url.strip()
    match = _SSH_URL.match(candidate) or _HTTPS_URL.match(candidate)
    if match is None:
        raise InvalidUrlFormat(url)
    host, owner, repo = match.groups()
    return f"https://{host}/{owner}/{repo}.git"


def derive_repo_name(url: str) -> str:
    """Short remote name for url: its last path segment without `.git`.

    Naming is advisory, so URLs of an unexpected shape get FALLBACK_REPO_NAME
    instead of an error.
    """
    match = _REPO_NAME_URL.match(url.strip())
    if match is None:
        logger.warning(
            "Failed to resolve project name from %r, using default name: %s",
            url,
            FALLBACK_REPO_NAME,
        )
        return FALLBACK_REPO_NAME
    return match.group(1).split("/")[-1]


class RemoteResolver:
    """Finds or registers the remote for a source repository URL."""

    def __init__(self, git: Git, repo_root: Path) -> None:
        self._git = git
        self._repo_root = repo_root

    def list_connected_remotes(self) -> list[RemoteSpec]:
        """Remotes this tool may fetch from, in `git remote -v` order.

        Keeps fetch entries only, drops `origin` and entries whose URL is
        missing or the literal "undefined". Entries whose URL does not
        normalize cannot match any valid request and are skipped.
        """
        specs: list[RemoteSpec] = []
        seen_urls: dict[str, str] = {}
        try:
            output = self._git.list_remotes_verbose(self._repo_root)
        except RuntimeError as e:
            raise CrcpError(f"Could not list remotes.\n{e}", step="list remotes") from e
        for entry in parse_remote_listing(output):
            if entry.kind != "fetch" or entry.name == ORIGIN_REMOTE:
                continue
            if not entry.url or entry.url == "undefined":
                continue
            try:
                canonical = normalize_url(entry.url)
            except InvalidUrlFormat:
                logger.warning("Skipping remote '%s': unrecognized URL %s", entry.name, entry.url)
                continue
            if canonical in seen_urls:
                logger.warning(
                    "Remotes '%s' and '%s' both point at %s",
                    seen_urls[canonical],
                    entry.name,
                    canonical,
                )
            else:
                seen_urls[canonical] = entry.name
            specs.append(RemoteSpec(name=entry.name, url=canonical))
        return specs

    def last_connected_remote(self) -> RemoteSpec | None:
        """The remote offered for reuse in interactive mode, if any."""
        remotes = self.list_connected_remotes()
        if not remotes:
            return None
        return remotes[0]

    def find_remote(self, candidate_url: str) -> RemoteSpec | None:
        """The first connected remote whose canonical URL equals candidate_url's."""
        canonical = normalize_url(candidate_url)
        for spec in self.list_connected_remotes():
            if spec.url == canonical:
                return spec
        return None

    def remote_exists(self, candidate_url: str) -> bool:
        """True iff some connected remote points at candidate_url."""
        return self.find_remote(candidate_url) is not None

    def ensure_remote(self, url: str) -> RemoteSpec:
        """Return the remote for url, registering it under a derived name if needed.

        Raises:
            InvalidUrlFormat: If url is not a recognized remote URL
            RemoteRegistrationFailed: If git rejects the new remote
        """
        existing = self.find_remote(url)
        if existing is not None:
            logger.debug("Using existing remote '%s' for %s", existing.name, url)
            return existing

        name = derive_repo_name(url)
        logger.debug("Adding remote '%s' for %s", name, url)
        try:
            self._git.add_remote(self._repo_root, name, url)
        except RuntimeError as e:
            raise RemoteRegistrationFailed(name, url, str(e)) from e
        return RemoteSpec(name=name, url=normalize_url(url))
