"""
Tests for local git queries.
"""

import logging
from types import SimpleNamespace

import pytest
from git.exc import GitCommandError

from changebot.git import GitRepository, parse_remote_url


def make_stub_repository(**git_commands):
    """
    Build GitRepository whose git command runner is replaced by stubs.
    """
    repository = GitRepository.__new__(GitRepository)
    repository.logger = logging.getLogger("test")
    repository.repo = None
    repository.git = SimpleNamespace(**git_commands)
    return repository


def failing(*args):
    raise GitCommandError("git", 128)


@pytest.mark.parametrize("url, expected", [
    ("https://github.com/acme/shop", ("acme", "shop")),
    ("https://github.com/acme/shop.git", ("acme", "shop")),
    ("https://token@github.com/acme/shop.git", ("acme", "shop")),
    ("git@github.com:acme/shop.git", ("acme", "shop")),
    ("ssh://git@github.com/acme/shop.git", ("acme", "shop")),
    ("https://github.com/acme/shop.web.git", ("acme", "shop.web")),
    ("https://gitlab.com/acme/shop.git", (None, None)),
    ("", (None, None)),
])
def test_parse_remote_url(url, expected) -> None:
    assert parse_remote_url(url) == expected


def test_previous_tag_follows_creation_order() -> None:
    repository = make_stub_repository(tag=lambda *args: "v1.0.0\nv1.1.0\nv1.2.0\n")
    assert repository.previous_tag("v1.2.0") == "v1.1.0"
    assert repository.previous_tag("v1.0.0") is None
    assert repository.previous_tag("v9.9.9") is None


def test_latest_tag_without_tags() -> None:
    repository = make_stub_repository(describe=failing)
    assert repository.latest_tag() is None


def test_latest_tag() -> None:
    repository = make_stub_repository(describe=lambda *args: "v1.2.0\n")
    assert repository.latest_tag() == "v1.2.0"


def test_commit_subjects_uses_tag_range() -> None:
    """
    Commit subjects come from start..end, one per line.
    """
    calls = []

    def log(*args):
        calls.append(args)
        return "Merge pull request #5 from x/y\nFix typo\n"

    repository = make_stub_repository(log=log)
    assert repository.commit_subjects("v1.0.0", "v1.1.0") == ["Merge pull request #5 from x/y", "Fix typo"]
    assert calls == [("v1.0.0..v1.1.0", "--pretty=format:%s")]


def test_repository_info_from_origin() -> None:
    repository = make_stub_repository(remote=lambda *args: "git@github.com:acme/shop.git\n")
    assert repository.repository_info() == ("acme", "shop")


def test_repository_info_without_origin() -> None:
    repository = make_stub_repository(remote=failing)
    assert repository.repository_info() == (None, None)
