"""Domain data models for Jenkins builds, change entries, and JIRA issues."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .browsers import ChangeSetBrowser


@dataclass(frozen=True, slots=True)
class ProjectRef:
    name: str
    display_name: str = field(default="", compare=False)
    url: str = field(default="", compare=False)
    browser: ChangeSetBrowser | None = field(default=None, compare=False, repr=False)


@dataclass(frozen=True, slots=True)
class Build:
    """A single build of a project.

    Two builds are the same build when they share project name and number;
    everything else is presentation data and does not take part in equality.
    """

    project: ProjectRef
    number: int
    display_name: str = field(default="", compare=False)
    timestamp: datetime | None = field(default=None, compare=False)
    url: str = field(default="", compare=False)
    change_set: list[ChangeEntry] = field(default_factory=list, compare=False, repr=False)
    # (upstream project name, upstream build number)
    upstream: tuple[tuple[str, int], ...] = field(default=(), compare=False, repr=False)

    @property
    def changes_url(self) -> str:
        return f"{self.url}changes"


@dataclass(frozen=True, slots=True)
class ChangeEntry:
    build: Build
    message: str
    timestamp: datetime | None = None
    commit_id: str | None = None
    author: str | None = None


@dataclass(frozen=True, slots=True)
class Issue:
    key: str
    title: str = field(default="", compare=False)


@dataclass(slots=True)
class Project:
    ref: ProjectRef
    builds: dict[int, Build] = field(default_factory=dict)
    # Permalink name -> build number (None when the permalink points nowhere)
    permalinks: dict[str, int | None] = field(default_factory=dict)

    @property
    def name(self) -> str:
        return self.ref.name

    def permalink_number(self, name: str | None) -> int | None:
        """Build number Jenkins reports for permalink ``name``, fetched or not."""
        if not name:
            return None
        return self.permalinks.get(name)

    def resolve_permalink(self, name: str | None) -> Build | None:
        number = self.permalink_number(name)
        if number is None:
            return None
        return self.builds.get(number)
