"""ChangesService: contributing-build closure and grouping of changes by JIRA issue."""

from __future__ import annotations

import logging
import math
import re
from collections.abc import Callable, Iterable, Sequence
from typing import Any, Protocol

from .config import NOT_FOUND_TITLE, NOT_SPECIFIED_ID, NOT_SPECIFIED_TITLE
from .mappers import issue_type_icon, map_issue
from .models import Build, ChangeEntry, Issue

logger = logging.getLogger(__name__)

AggregatorFn = Callable[[Build], Iterable[Build]]
IssueLookup = Callable[[str], Issue | None]
IssueGroups = dict[Issue, list[ChangeEntry]]


class IssueTracker(Protocol):
    def fetch_issue_raw(self, key: str) -> dict[str, Any] | None: ...

    def issue_url(self, key: str) -> str: ...


class RenderLookup:
    """Issue lookups for one render; each key hits the tracker at most once.

    Create a new instance per render so results never outlive the request.
    """

    def __init__(self, tracker: IssueTracker):
        self.tracker = tracker
        self._raw: dict[str, dict[str, Any] | None] = {}

    def _fetch(self, key: str) -> dict[str, Any] | None:
        if key not in self._raw:
            logger.debug("Looking up issue %s", key)
            self._raw[key] = self.tracker.fetch_issue_raw(key)
        return self._raw[key]

    def __call__(self, key: str) -> Issue | None:
        raw = self._fetch(key)
        return map_issue(raw) if raw is not None else None

    def exists(self, key: str) -> bool:
        return self._fetch(key) is not None

    def issue_type_icon(self, key: str) -> str | None:
        raw = self._fetch(key)
        return issue_type_icon(raw) if raw is not None else None

    def issue_url(self, key: str) -> str:
        return self.tracker.issue_url(key)


def compute_contributing_builds(build: Build, aggregators: Sequence[AggregatorFn]) -> set[Build]:
    """Grow ``{build}`` with every aggregator's related builds until nothing new appears."""
    builds: set[Build] = {build}
    passes = 0
    while True:
        passes += 1
        found: set[Build] = set()
        for aggregator in aggregators:
            for dep in list(builds):
                found.update(aggregator(dep))
        size = len(builds)
        builds |= found
        if len(builds) == size:
            break
    logger.debug(
        "Closure of %s #%s: %d build(s) in %d pass(es)",
        build.project.name,
        build.number,
        len(builds),
        passes,
    )
    return builds


def resolve_issue(message: str, pattern: re.Pattern[str], lookup: IssueLookup) -> Issue:
    """Issue referenced by ``message``.

    A key that JIRA no longer knows keeps its key with a placeholder title;
    a message without any key falls into the shared "not specified" issue.
    """
    match = pattern.search(message)
    if match is None:
        return Issue(NOT_SPECIFIED_ID, NOT_SPECIFIED_TITLE)
    key = match.group(1)
    issue = lookup(key)
    if issue is None:
        return Issue(key, NOT_FOUND_TITLE)
    return issue


def entry_sort_key(entry: ChangeEntry) -> tuple[int, float]:
    # Build number ascending, then newest change first within a build.
    ts = entry.timestamp
    return entry.build.number, (-ts.timestamp() if ts is not None else math.inf)


def group_changes_by_issue(
    builds: Iterable[Build],
    pattern: re.Pattern[str],
    lookup: IssueLookup,
) -> IssueGroups:
    grouped: dict[Issue, list[ChangeEntry]] = {}
    for build in builds:
        for entry in build.change_set:
            issue = resolve_issue(entry.message, pattern, lookup)
            entries = grouped.setdefault(issue, [])
            if entry not in entries:
                entries.append(entry)
    return {issue: sorted(grouped[issue], key=entry_sort_key) for issue in sorted(grouped, key=lambda i: i.key)}


class ChangesService:
    def __init__(
        self,
        aggregators: Sequence[AggregatorFn],
        pattern: re.Pattern[str] | str,
        lookup: IssueLookup,
    ):
        self.aggregators = list(aggregators)
        self.pattern = re.compile(pattern) if isinstance(pattern, str) else pattern
        self.lookup = lookup

    def contributing_builds(self, build: Build) -> set[Build]:
        return compute_contributing_builds(build, self.aggregators)

    def all_jira_changes(self, build: Build) -> IssueGroups:
        """Changes of ``build`` and its contributing builds, grouped by issue."""
        builds = self.contributing_builds(build)
        # Stable traversal keeps repeated renders identical.
        ordered = sorted(builds, key=lambda b: (b.project.name, b.number))
        return group_changes_by_issue(ordered, self.pattern, self.lookup)
