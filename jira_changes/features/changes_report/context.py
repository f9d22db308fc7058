"""Pure helpers that turn selected builds into the report document (no Streamlit)."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from datetime import datetime
from typing import Protocol

import pytz

from jira_changes.core.config import (
    DATE_FORMAT,
    ICON_STYLE,
    MSG_DETAIL,
    MSG_NO_BUILDS,
    MSG_NO_CHANGES,
    NOT_SPECIFIED_ID,
    PAGE_TITLE,
    TIMEZONE,
)
from jira_changes.core.models import Build, ChangeEntry, Issue
from jira_changes.core.service import ChangesService, IssueGroups

from .document import Document, Heading, Image, Link, ListItem, OrderedList, Paragraph, Text


ProgressCallback = Callable[[str, int | None, int | None], None]


class IssuePresence(Protocol):
    def exists(self, key: str) -> bool: ...

    def issue_url(self, key: str) -> str: ...

    def issue_type_icon(self, key: str) -> str | None: ...


def format_timestamp(ts: datetime | None, tz_name: str = TIMEZONE, fmt: str = DATE_FORMAT) -> str:
    if ts is None:
        return ""
    tz = pytz.timezone(tz_name)
    if ts.tzinfo is None:
        ts = pytz.UTC.localize(ts)
    return ts.astimezone(tz).strftime(fmt)


def strip_issue_key(message: str, key: str) -> str:
    if message.startswith(key):
        return message[len(key) :].strip()
    return message


def detail_link(entry: ChangeEntry) -> str:
    """Browser commit link for ``entry`` when its project has one, else the build's changes page."""
    browser = entry.build.project.browser
    link = browser.change_set_link(entry) if browser is not None else None
    return link or entry.build.changes_url


def _issue_title(issue: Issue, tracker: IssuePresence, exists: bool) -> list:
    title = f"{issue.key} - {issue.title}"
    if not exists:
        return [Text(title)]
    nodes: list = []
    icon = tracker.issue_type_icon(issue.key)
    if icon:
        nodes.append(Image(src=icon, style=ICON_STYLE))
    nodes.append(Link(href=tracker.issue_url(issue.key), children=[Text(title)]))
    return nodes


def _change_item(rendered: Build, issue: Issue, entry: ChangeEntry, exists: bool) -> ListItem:
    message = strip_issue_key(entry.message, issue.key) if exists else entry.message
    children: list = [
        Text(message),
        Text(" - "),
        Link(href=detail_link(entry), children=[Text(MSG_DETAIL)]),
    ]
    source = entry.build
    if source != rendered:
        children += [
            Text(" ("),
            Link(href=source.project.url, children=[Text(source.project.display_name)]),
            Text("\u00a0"),
            Link(href=source.url, children=[Text(source.display_name)]),
            Text(")"),
        ]
    return ListItem(children=children)


def _build_heading(build: Build, tz_name: str, date_format: str) -> Heading:
    label = build.display_name
    stamp = format_timestamp(build.timestamp, tz_name, date_format)
    if stamp:
        label = f"{label} ({stamp})"
    return Heading(level=2, children=[Link(href=build.changes_url, children=[Text(label)])])


def collect_groups(
    builds: Sequence[Build],
    service: ChangesService,
    progress: ProgressCallback | None = None,
) -> list[tuple[Build, IssueGroups]]:
    """Group the changes of each build once; document and table both read the result."""
    grouped = []
    total = len(builds)
    for idx, build in enumerate(builds, start=1):
        grouped.append((build, service.all_jira_changes(build)))
        if progress is not None:
            progress(f"Grouped changes of {build.display_name}", idx, total)
    return grouped


def build_document(
    grouped: Sequence[tuple[Build, IssueGroups]],
    tracker: IssuePresence,
    *,
    tz_name: str = TIMEZONE,
    date_format: str = DATE_FORMAT,
) -> Document:
    """Render grouped builds (newest first) into the report document.

    Builds without any changes are skipped entirely. ``tracker`` should be
    the same per-render lookup the groups were resolved with.
    """
    doc = Document(children=[Heading(level=1, children=[Text(PAGE_TITLE)])])
    if not grouped:
        doc.children.append(Paragraph(children=[Text(MSG_NO_BUILDS)]))
        return doc

    had_changes = False
    for build, groups in grouped:
        if not groups:
            continue
        had_changes = True
        doc.children.append(_build_heading(build, tz_name, date_format))
        for issue, entries in groups.items():
            exists = issue.key != NOT_SPECIFIED_ID and tracker.exists(issue.key)
            doc.children.append(Heading(level=3, children=_issue_title(issue, tracker, exists)))
            doc.children.append(
                OrderedList(items=[_change_item(build, issue, entry, exists) for entry in entries])
            )

    if not had_changes:
        doc.children.append(Paragraph(children=[Text(MSG_NO_CHANGES)]))
    return doc
