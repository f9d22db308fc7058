"""All JIRA Changes report: range selection and document building."""

from jira_changes.features.changes_report.context import (
    build_document,
    collect_groups,
    detail_link,
    format_timestamp,
    strip_issue_key,
)
from jira_changes.features.changes_report.document import Document
from jira_changes.features.changes_report.export import report_to_dataframe
from jira_changes.features.changes_report.range import resolve_build_number, select_build_range

__all__ = [
    "Document",
    "build_document",
    "collect_groups",
    "detail_link",
    "format_timestamp",
    "report_to_dataframe",
    "resolve_build_number",
    "select_build_range",
    "strip_issue_key",
]
