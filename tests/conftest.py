"""Test configuration ensuring local package import when editable install not active.

If users invoke `pytest` outside the project's virtualenv, we still add the project
root to sys.path so `import jira_changes` works.
"""

from __future__ import annotations

import sys
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from jira_changes.core.jira_client import IssueLookupError  # noqa: E402
from jira_changes.core.models import Build, ChangeEntry, ProjectRef  # noqa: E402

BASE_TIME = datetime(2024, 9, 1, 12, 0, 0, tzinfo=UTC)


class FakeTracker:
    """In-memory stand-in for JiraTracker; counts lookups per key."""

    def __init__(self, issues: dict[str, str] | None = None, failing: set[str] | None = None):
        self.issues = issues or {}
        self.failing = failing or set()
        self.calls: dict[str, int] = {}

    def fetch_issue_raw(self, key):
        self.calls[key] = self.calls.get(key, 0) + 1
        if key in self.failing:
            raise IssueLookupError(f"Failed to fetch issue {key}: boom")
        if key not in self.issues:
            return None
        return {
            "key": key,
            "fields": {
                "summary": self.issues[key],
                "issuetype": {"iconUrl": f"https://jira.example/icons/{key}.png"},
            },
        }

    def issue_url(self, key):
        return f"https://jira.example/browse/{key}"


def make_project(name: str = "app", browser=None) -> ProjectRef:
    return ProjectRef(name=name, display_name=name.title(), url=f"https://ci.example/job/{name}/", browser=browser)


def make_build(number: int, messages=(), project: ProjectRef | None = None, upstream=()) -> Build:
    """Build whose entries get one-minute-apart timestamps; a message may be ``(msg, minutes)``."""
    project = project or make_project()
    build = Build(
        project=project,
        number=number,
        display_name=f"#{number}",
        timestamp=BASE_TIME + timedelta(hours=number),
        url=f"{project.url}{number}/",
        upstream=tuple(upstream),
    )
    for idx, msg in enumerate(messages):
        if isinstance(msg, tuple):
            msg, minutes = msg
        else:
            minutes = idx
        build.change_set.append(
            ChangeEntry(
                build=build,
                message=msg,
                timestamp=BASE_TIME + timedelta(minutes=minutes),
                commit_id=f"{project.name}{number}c{idx}",
            )
        )
    return build


@pytest.fixture
def tracker():
    return FakeTracker({"PROJ-123": "Crash on save", "PROJ-7": "Slow startup"})
