"""Source-control repository browsers that produce per-commit links."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol

from .models import ChangeEntry


class ChangeSetBrowser(Protocol):
    def change_set_link(self, entry: ChangeEntry) -> str | None: ...


class _CommitUrlBrowser:
    commit_path = "commit/"

    def __init__(self, repo_url: str):
        self.repo_url = repo_url.rstrip("/") + "/"

    def change_set_link(self, entry: ChangeEntry) -> str | None:
        if not entry.commit_id:
            return None
        return f"{self.repo_url}{self.commit_path}{entry.commit_id}"

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.repo_url!r})"


class GitHubBrowser(_CommitUrlBrowser):
    commit_path = "commit/"


class GitLabBrowser(_CommitUrlBrowser):
    commit_path = "-/commit/"


class BitbucketBrowser(_CommitUrlBrowser):
    commit_path = "commits/"


BROWSER_KINDS: dict[str, type[_CommitUrlBrowser]] = {
    "github": GitHubBrowser,
    "gitlab": GitLabBrowser,
    "bitbucket": BitbucketBrowser,
}


def browser_from_config(cfg: Mapping[str, Any] | None) -> ChangeSetBrowser | None:
    """Build a browser from a ``{"kind": ..., "url": ...}`` mapping.

    Unknown kinds and missing URLs yield ``None`` so the report falls back to
    the build's changes page.
    """
    if not cfg:
        return None
    kind = str(cfg.get("kind") or "").strip().lower()
    url = cfg.get("url")
    cls = BROWSER_KINDS.get(kind)
    if cls is None or not url:
        return None
    return cls(str(url))
