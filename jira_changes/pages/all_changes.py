"""All JIRA Changes page.

Reads optional ``from``/``to`` query parameters (build numbers or permalink
names such as ``lastSuccessfulBuild``) and lists every change of the selected
builds, including changes inherited from upstream builds, grouped by issue.
"""

from __future__ import annotations

import streamlit as st

from jira_changes.app import register_page
from jira_changes.core.jenkins_client import JenkinsAPI, JenkinsError, UpstreamCauseAggregator
from jira_changes.core.jira_client import IssueLookupError, JiraTracker
from jira_changes.core.models import Build, Project
from jira_changes.core.service import ChangesService, RenderLookup
from jira_changes.core.settings import load_settings
from jira_changes.features.changes_report import (
    build_document,
    collect_groups,
    report_to_dataframe,
    resolve_build_number,
    select_build_range,
)
from jira_changes.visual.html import render_html
from jira_changes.visual.progress import ProgressReporter


def _param(name: str) -> str | None:
    value = st.query_params.get(name)
    return value or None


def select_builds(api: JenkinsAPI, project: Project, from_token: str | None, to_token: str | None) -> list[Build]:
    """Builds between the resolved ``from``/``to`` bounds, newest first.

    Ranges reaching below the fetched window are fetched from Jenkins.
    """
    from_number = resolve_build_number(from_token, project)
    to_number = resolve_build_number(to_token, project)
    builds = project.builds
    if from_number is not None or to_number is not None:
        in_window = from_number is not None and builds and int(from_number) >= min(builds)
        if not in_window:
            builds = api.fetch_builds_in_range(
                project.ref,
                int(from_number) if from_number is not None else None,
                int(to_number) if to_number is not None else None,
            )
    return select_build_range(from_number, to_number, builds)


@register_page("All JIRA Changes")
def all_changes_page():
    api: JenkinsAPI | None = st.session_state.get("jenkins_api")
    tracker: JiraTracker | None = st.session_state.get("changes_tracker")
    if api is None or tracker is None:
        st.warning("Initialize Jenkins and JIRA connections on Setup page first.")
        return

    job = st.text_input("Jenkins job", value=_param("job") or st.session_state.get("job_name", ""))
    col_from, col_to = st.columns(2)
    from_token = col_from.text_input("From (build number or permalink)", value=_param("from") or "")
    to_token = col_to.text_input("To (build number or permalink)", value=_param("to") or "")
    if not job:
        st.info("Enter a job name to list its changes.")
        return
    st.session_state["job_name"] = job

    settings = load_settings()
    reporter = ProgressReporter(f"Collecting changes for {job}")
    try:
        reporter.callback("Fetching builds from Jenkins")
        project = api.fetch_project(job)
        builds = select_builds(api, project, from_token or None, to_token or None)

        aggregator = UpstreamCauseAggregator(api)
        aggregator.remember(*project.builds.values(), *builds)
        lookup = RenderLookup(tracker)
        service = ChangesService([aggregator], settings.compiled_pattern(), lookup)

        reporter.callback("Resolving JIRA issues", 0, len(builds))
        grouped = collect_groups(builds, service, reporter.callback)
        document = build_document(
            grouped,
            lookup,
            tz_name=settings.timezone,
            date_format=settings.date_format,
        )
        table = report_to_dataframe(grouped)
        reporter.complete(f"Collected {len(table)} change(s) across {len(builds)} build(s).")
    except (JenkinsError, IssueLookupError) as exc:
        reporter.error(f"Failed to build report: {exc}")
        raise

    st.markdown(render_html(document), unsafe_allow_html=True)
    if not table.empty:
        csv = table.to_csv(index=False).encode("utf-8")
        st.download_button(
            "Download Changes CSV",
            data=csv,
            file_name=f"jira_changes_{project.name.replace('/', '_')}.csv",
            mime="text/csv",
        )
