"""Value types shared across the workflow components."""

from dataclasses import dataclass
from datetime import datetime

TEMPORARY_BRANCH_PREFIX = "temp-"


@dataclass(frozen=True)
class RemoteSpec:
    """A named remote whose URL is stored in canonical HTTPS form."""

    name: str
    url: str


@dataclass(frozen=True)
class CommitRecord:
    """One entry of a branch's linear history.

    Identity is the hash; records are never mutated after being decoded.
    """

    hash: str
    author: str
    date: datetime
    subject: str


@dataclass(frozen=True)
class BranchRef:
    """A local branch and what is known about it."""

    name: str
    exists: bool
    is_temporary: bool


def temporary_branch_name(source_branch: str) -> str:
    """Name of the disposable branch that stages source_branch.

    >>> temporary_branch_name("feature-x")
    'temp-feature-x'
    """
    return f"{TEMPORARY_BRANCH_PREFIX}{source_branch}"
