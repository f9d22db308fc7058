"""JIRA issue tracker wrapper used for issue lookups while rendering reports."""

from __future__ import annotations

from typing import Any

from jira import JIRA, JIRAError

from .mappers import issue_type_icon, map_issue
from .models import Issue

ISSUE_FIELDS = "summary,issuetype"


class IssueLookupError(RuntimeError):
    """Raised when the tracker cannot answer a lookup (I/O or service failure)."""


class JiraTracker:
    def __init__(self, server: str, email: str, token: str):
        self.server = server.rstrip("/")
        self.client = JIRA(basic_auth=(email, token), options={"server": self.server})

    def issue_url(self, key: str) -> str:
        return f"{self.server}/browse/{key}"

    def fetch_issue_raw(self, key: str) -> dict[str, Any] | None:
        """Return the raw issue JSON, or ``None`` when JIRA does not know ``key``."""
        try:
            issue = self.client.issue(key, fields=ISSUE_FIELDS)
        except JIRAError as exc:
            if exc.status_code == 404:
                return None
            raise IssueLookupError(f"Failed to fetch issue {key}: {exc}") from exc
        except OSError as exc:
            raise IssueLookupError(f"Failed to fetch issue {key}: {exc}") from exc
        if hasattr(issue, "raw"):
            return issue.raw
        if isinstance(issue, dict):
            return issue
        raise IssueLookupError(f"Unexpected issue payload type for {key}: {type(issue)!r}")

    def get_issue(self, key: str) -> Issue | None:
        raw = self.fetch_issue_raw(key)
        return map_issue(raw) if raw is not None else None

    def exists(self, key: str) -> bool:
        return self.fetch_issue_raw(key) is not None

    def issue_type_icon(self, key: str) -> str | None:
        raw = self.fetch_issue_raw(key)
        return issue_type_icon(raw) if raw is not None else None
