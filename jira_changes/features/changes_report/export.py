"""Flatten grouped changes into a table for CSV download."""

from __future__ import annotations

from collections.abc import Sequence

import pandas as pd

from jira_changes.core.config import EXPORT_COLUMNS
from jira_changes.core.models import Build
from jira_changes.core.service import IssueGroups

from .context import detail_link


def report_to_dataframe(grouped: Sequence[tuple[Build, IssueGroups]]) -> pd.DataFrame:
    rows = []
    for build, groups in grouped:
        for issue, entries in groups.items():
            for entry in entries:
                rows.append(
                    {
                        "build": build.display_name,
                        "issue_key": issue.key,
                        "issue_title": issue.title,
                        "message": entry.message,
                        "timestamp": entry.timestamp,
                        "source_project": entry.build.project.display_name,
                        "source_build": entry.build.display_name,
                        "detail_url": detail_link(entry),
                    }
                )
    df = pd.DataFrame(rows, columns=list(EXPORT_COLUMNS))
    if not df.empty:
        df["timestamp"] = pd.to_datetime(df["timestamp"], utc=True, errors="coerce")
    return df
