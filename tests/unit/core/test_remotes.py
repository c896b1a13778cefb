"""Tests for remote URL normalization and resolution."""

from pathlib import Path

import pytest

from crcp.core.errors import InvalidUrlFormat, RemoteRegistrationFailed
from crcp.core.git.fake import FakeGit
from crcp.core.remotes import (
    FALLBACK_REPO_NAME,
    RemoteResolver,
    derive_repo_name,
    normalize_url,
)
from crcp.core.types import RemoteSpec
from tests.test_utils.builders import ORIGIN_URL, REPO_ROOT, SOURCE_URL, SOURCE_URL_HTTPS


@pytest.mark.parametrize(
    ("url", "expected"),
    [
        ("git@github.com:acme/lib.git", "https://github.com/acme/lib.git"),
        ("https://github.com/acme/lib.git", "https://github.com/acme/lib.git"),
        ("http://gitlab.example.com/team/tool.git", "https://gitlab.example.com/team/tool.git"),
        ("git@gitlab.com:group/sub/proj.git", "https://gitlab.com/group/sub/proj.git"),
    ],
)
def test_normalize_url_converts_to_canonical_https(url: str, expected: str) -> None:
    assert normalize_url(url) == expected


@pytest.mark.parametrize("url", [SOURCE_URL, SOURCE_URL_HTTPS, "git@host.io:a/b.git"])
def test_normalize_url_is_idempotent(url: str) -> None:
    once = normalize_url(url)

    assert normalize_url(once) == once


@pytest.mark.parametrize(
    "url",
    ["", "github.com/acme/lib", "https://github.com/acme/lib", "ftp://host/a/b.git", "not a url"],
)
def test_normalize_url_rejects_unrecognized_shapes(url: str) -> None:
    with pytest.raises(InvalidUrlFormat):
        normalize_url(url)


def test_derive_repo_name_uses_last_path_segment() -> None:
    assert derive_repo_name(SOURCE_URL) == "lib"
    assert derive_repo_name(SOURCE_URL_HTTPS) == "lib"


def test_derive_repo_name_falls_back_for_unexpected_shapes() -> None:
    assert derive_repo_name("file:///tmp/lib") == FALLBACK_REPO_NAME


def test_list_connected_remotes_skips_origin_and_push_entries() -> None:
    git = FakeGit(
        repo_root=REPO_ROOT,
        remotes=[("origin", ORIGIN_URL), ("lib", SOURCE_URL)],
    )

    remotes = RemoteResolver(git, REPO_ROOT).list_connected_remotes()

    assert remotes == [RemoteSpec(name="lib", url=SOURCE_URL_HTTPS)]


def test_list_connected_remotes_skips_undefined_and_unrecognized_urls() -> None:
    git = FakeGit(
        repo_root=REPO_ROOT,
        remotes=[("broken", "undefined"), ("local", "/srv/git/lib"), ("lib", SOURCE_URL)],
    )

    remotes = RemoteResolver(git, REPO_ROOT).list_connected_remotes()

    assert [r.name for r in remotes] == ["lib"]


def test_list_connected_remotes_keeps_duplicates_in_order() -> None:
    """Two names for one repository are both listed; the first wins lookups."""
    git = FakeGit(
        repo_root=REPO_ROOT,
        remotes=[("lib", SOURCE_URL), ("lib-https", SOURCE_URL_HTTPS)],
    )
    resolver = RemoteResolver(git, REPO_ROOT)

    assert [r.name for r in resolver.list_connected_remotes()] == ["lib", "lib-https"]
    assert resolver.find_remote(SOURCE_URL_HTTPS) == RemoteSpec(name="lib", url=SOURCE_URL_HTTPS)


def test_last_connected_remote_is_none_without_remotes() -> None:
    git = FakeGit(repo_root=REPO_ROOT, remotes=[("origin", ORIGIN_URL)])

    assert RemoteResolver(git, REPO_ROOT).last_connected_remote() is None


def test_remote_exists_compares_canonical_urls() -> None:
    """An SSH registration matches an HTTPS query for the same repository."""
    git = FakeGit(repo_root=REPO_ROOT, remotes=[("lib", SOURCE_URL)])
    resolver = RemoteResolver(git, REPO_ROOT)

    assert resolver.remote_exists(SOURCE_URL_HTTPS)
    assert not resolver.remote_exists("git@github.com:acme/other.git")


def test_ensure_remote_reuses_existing_remote_under_any_name() -> None:
    git = FakeGit(repo_root=REPO_ROOT, remotes=[("upstream-lib", SOURCE_URL)])

    spec = RemoteResolver(git, REPO_ROOT).ensure_remote(SOURCE_URL_HTTPS)

    assert spec == RemoteSpec(name="upstream-lib", url=SOURCE_URL_HTTPS)
    assert git.added_remotes == []


def test_ensure_remote_registers_new_remote_under_derived_name() -> None:
    git = FakeGit(repo_root=REPO_ROOT, remotes=[("origin", ORIGIN_URL)])

    spec = RemoteResolver(git, REPO_ROOT).ensure_remote(SOURCE_URL)

    assert spec == RemoteSpec(name="lib", url=SOURCE_URL_HTTPS)
    assert git.added_remotes == [("lib", SOURCE_URL)]


def test_ensure_remote_rejects_invalid_url_before_any_git_call() -> None:
    git = FakeGit(repo_root=REPO_ROOT)

    with pytest.raises(InvalidUrlFormat):
        RemoteResolver(git, REPO_ROOT).ensure_remote("acme/lib")

    assert git.added_remotes == []


def test_ensure_remote_reports_name_collision() -> None:
    """A remote called `lib` pointing elsewhere blocks registration."""
    git = FakeGit(repo_root=REPO_ROOT, remotes=[("lib", "git@github.com:someone/lib.git")])

    with pytest.raises(RemoteRegistrationFailed) as exc_info:
        RemoteResolver(git, REPO_ROOT).ensure_remote(SOURCE_URL)

    assert exc_info.value.step == "resolve remote"
    assert "already exists" in exc_info.value.message


def test_resolver_works_with_any_repo_root() -> None:
    git = FakeGit(repo_root=Path("/elsewhere"), remotes=[("lib", SOURCE_URL)])

    assert RemoteResolver(git, Path("/elsewhere")).remote_exists(SOURCE_URL)
