"""Central configuration, constants, and user-facing messages."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

# =============================================================================
# Connection Settings
# =============================================================================
JIRA_DEFAULT_SERVER = "https://issues.example.com"
JENKINS_DEFAULT_SERVER = "https://ci.example.com"
TIMEZONE = "UTC"

# =============================================================================
# Issue Extraction
# =============================================================================
# Same default the Jenkins JIRA plugin applies when a site has no custom
# pattern. Group 1 must capture the issue key.
DEFAULT_ISSUE_PATTERN = r"([a-zA-Z][a-zA-Z0-9_]+-[1-9][0-9]*)([^.]|\.[^0-9]|\.$|$)"

NOT_SPECIFIED_ID = "not specified"
NOT_SPECIFIED_TITLE = "N/A"
NOT_FOUND_TITLE = "N/A"

# =============================================================================
# Jenkins Permalinks
# =============================================================================
PERMALINK_NAMES: Sequence[str] = (
    "lastBuild",
    "lastStableBuild",
    "lastSuccessfulBuild",
    "lastFailedBuild",
    "lastUnstableBuild",
    "lastUnsuccessfulBuild",
    "lastCompletedBuild",
)

# Fields requested for every build; pipeline jobs report ``changeSets``
# while freestyle jobs report a single ``changeSet``.
JENKINS_BUILD_TREE = (
    "number,displayName,timestamp,url,"
    "actions[causes[upstreamProject,upstreamBuild]],"
    "changeSet[items[msg,timestamp,commitId,id,author[fullName]]],"
    "changeSets[items[msg,timestamp,commitId,id,author[fullName]]]"
)

# =============================================================================
# UI Messages
# =============================================================================
PAGE_TITLE = "All JIRA Changes"
MSG_NO_BUILDS = "No builds."
MSG_NO_CHANGES = "No changes in any of the builds."
MSG_DETAIL = "detail"

# Medium date-time style, e.g. "Oct 18, 2026 3:04:05 PM"
DATE_FORMAT = "%b %d, %Y %I:%M:%S %p"
ICON_STYLE = "width: 17px; height: 17px; margin-right: 5px"

EXPORT_COLUMNS: Sequence[str] = (
    "build",
    "issue_key",
    "issue_title",
    "message",
    "timestamp",
    "source_project",
    "source_build",
    "detail_url",
)


@dataclass(slots=True)
class AppSettings:
    max_builds: int = 100
    download_encoding: str = "utf-8"


SETTINGS = AppSettings()
