"""Connection setup page: collect Jenkins and JIRA credentials."""

from __future__ import annotations

import streamlit as st

from jira_changes.app import register_page
from jira_changes.core.config import JENKINS_DEFAULT_SERVER, JIRA_DEFAULT_SERVER
from jira_changes.core.jenkins_client import JenkinsAPI
from jira_changes.core.jira_client import JiraTracker
from jira_changes.core.settings import load_settings


def secret(section: str, *names: str) -> str | None:
    """First value found under ``[section]`` or at top level of Streamlit secrets."""
    scoped = st.secrets.get(section, {})
    for name in names:
        value = scoped.get(name) or st.secrets.get(name)
        if value:
            return value
    return None


def connect(jenkins_server, jenkins_user, jenkins_token, jira_server, jira_email, jira_token) -> None:
    settings = load_settings()
    st.session_state["jenkins_api"] = JenkinsAPI(
        jenkins_server,
        jenkins_user,
        jenkins_token,
        browser_lookup=settings.browser_for,
    )
    st.session_state["changes_tracker"] = JiraTracker(jira_server, jira_email, jira_token)
    st.session_state["jenkins_server"] = jenkins_server
    st.session_state["jira_server"] = jira_server


@register_page("Setup / Connection")
def setup_page():
    st.title("Connection Setup")
    st.caption("Enter credentials (use secrets manager in production).")

    st.subheader("Jenkins")
    jenkins_server = st.text_input(
        "Jenkins URL",
        value=st.session_state.get("jenkins_server")
        or secret("jenkins", "JENKINS_URL", "JENKINS_SERVER")
        or JENKINS_DEFAULT_SERVER,
    )
    jenkins_user = st.text_input("Jenkins user", value=secret("jenkins", "JENKINS_USER") or "")
    jenkins_token = st.text_input(
        "Jenkins API token", type="password", value=secret("jenkins", "JENKINS_TOKEN") or ""
    )

    st.subheader("JIRA")
    jira_server = st.text_input(
        "JIRA Server URL",
        value=st.session_state.get("jira_server") or secret("jira", "JIRA_SERVER") or JIRA_DEFAULT_SERVER,
    )
    jira_email = st.text_input("Email / Username", value=secret("jira", "JIRA_EMAIL") or "")
    jira_token = st.text_input(
        "JIRA API Token",
        type="password",
        value=secret("jira", "JIRA_API_TOKEN", "JIRA_TOKEN") or "",
    )

    if st.button("Initialize Connections", type="primary"):
        if not (jenkins_server and jira_server and jira_email and jira_token):
            st.error("Jenkins URL and all JIRA fields are required.")
            return
        try:
            connect(jenkins_server, jenkins_user, jenkins_token, jira_server, jira_email, jira_token)
            st.success("Connections initialized.")
        except Exception as e:  # pragma: no cover
            st.error(f"Failed to initialize clients: {e}")

    if "changes_tracker" in st.session_state and "jenkins_api" in st.session_state:
        st.info("Jenkins and JIRA clients ready.")
