"""Mapping raw Jenkins and JIRA JSON payloads into domain models."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import UTC, datetime
from typing import Any

from .browsers import ChangeSetBrowser
from .config import PERMALINK_NAMES
from .models import Build, ChangeEntry, Issue, Project, ProjectRef

logger = logging.getLogger(__name__)


def parse_jenkins_timestamp(value: Any) -> datetime | None:
    """Jenkins reports epoch milliseconds; negative values mean unknown."""
    if value is None or isinstance(value, bool):
        return None
    try:
        millis = int(value)
    except (TypeError, ValueError):
        return None
    if millis < 0:
        return None
    return datetime.fromtimestamp(millis / 1000, tz=UTC)


def map_project_ref(raw: dict[str, Any], browser: ChangeSetBrowser | None = None) -> ProjectRef:
    name = raw.get("fullName") or raw.get("name") or ""
    return ProjectRef(
        name=name,
        display_name=raw.get("fullDisplayName") or raw.get("displayName") or name,
        url=raw.get("url") or "",
        browser=browser,
    )


def _upstream_causes(actions: Iterable[Any]) -> tuple[tuple[str, int], ...]:
    out: list[tuple[str, int]] = []
    for action in actions or []:
        if not isinstance(action, dict):
            continue
        for cause in action.get("causes") or []:
            project = cause.get("upstreamProject")
            number = cause.get("upstreamBuild")
            if not project or number is None:
                continue
            try:
                pair = (str(project), int(number))
            except (TypeError, ValueError):
                logger.warning("Skipping malformed upstream cause: %r", cause)
                continue
            if pair not in out:
                out.append(pair)
    return tuple(out)


def _change_items(raw: dict[str, Any]) -> list[dict[str, Any]]:
    items: list[dict[str, Any]] = []
    single = raw.get("changeSet")
    if isinstance(single, dict):
        items.extend(single.get("items") or [])
    for change_set in raw.get("changeSets") or []:
        if isinstance(change_set, dict):
            items.extend(change_set.get("items") or [])
    return items


def map_build(raw: dict[str, Any], project: ProjectRef) -> Build:
    number = int(raw["number"])
    build = Build(
        project=project,
        number=number,
        display_name=raw.get("displayName") or f"#{number}",
        timestamp=parse_jenkins_timestamp(raw.get("timestamp")),
        url=raw.get("url") or f"{project.url}{number}/",
        upstream=_upstream_causes(raw.get("actions") or []),
    )
    for item in _change_items(raw):
        if not isinstance(item, dict):
            continue
        build.change_set.append(
            ChangeEntry(
                build=build,
                message=item.get("msg") or "",
                timestamp=parse_jenkins_timestamp(item.get("timestamp")),
                commit_id=item.get("commitId") or item.get("id"),
                author=(item.get("author") or {}).get("fullName"),
            )
        )
    return build


def map_project(raw: dict[str, Any], browser: ChangeSetBrowser | None = None) -> Project:
    ref = map_project_ref(raw, browser)
    builds: dict[int, Build] = {}
    for raw_build in raw.get("builds") or []:
        if not isinstance(raw_build, dict) or raw_build.get("number") is None:
            continue
        build = map_build(raw_build, ref)
        builds[build.number] = build
    permalinks: dict[str, int | None] = {}
    for name in PERMALINK_NAMES:
        target = raw.get(name)
        permalinks[name] = target.get("number") if isinstance(target, dict) else None
    return Project(ref=ref, builds=builds, permalinks=permalinks)


def map_issue(raw: dict[str, Any]) -> Issue:
    fields = raw.get("fields") or {}
    return Issue(key=raw.get("key") or "", title=fields.get("summary") or "")


def issue_type_icon(raw: dict[str, Any]) -> str | None:
    fields = raw.get("fields") or {}
    return (fields.get("issuetype") or {}).get("iconUrl")
