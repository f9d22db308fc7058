"""Convenience launcher for the Streamlit app.

Usage:
  streamlit run run_dashboard.py

Automatically imports every module in ``jira_changes/pages`` so each page
decorated with ``@register_page`` registers itself without manual edits here.
"""

import logging
from importlib import import_module
from pathlib import Path

import streamlit as st

from jira_changes.app import main

st.set_page_config(layout="wide")
logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")
logger = logging.getLogger("jira_changes")


def _auto_connect():
    """Initialize Jenkins and JIRA clients from Streamlit secrets if available."""
    if "changes_tracker" in st.session_state and "jenkins_api" in st.session_state:
        return

    from jira_changes.pages.setup import connect, secret

    jenkins_server = secret("jenkins", "JENKINS_URL", "JENKINS_SERVER")
    jira_server = secret("jira", "JIRA_SERVER")
    jira_email = secret("jira", "JIRA_EMAIL")
    jira_token = secret("jira", "JIRA_API_TOKEN", "JIRA_TOKEN")

    if jenkins_server and jira_server and jira_email and jira_token:
        st.sidebar.info("Secrets found, connecting to Jenkins and JIRA...")
        try:
            connect(
                jenkins_server,
                secret("jenkins", "JENKINS_USER"),
                secret("jenkins", "JENKINS_TOKEN"),
                jira_server,
                jira_email,
                jira_token,
            )
            st.sidebar.success("Connections ready.")
        except Exception as e:
            st.sidebar.error(f"Connection failed: {e}")
            # Clear any partial state to ensure user is directed to setup
            for key in ("jenkins_api", "changes_tracker"):
                st.session_state.pop(key, None)
    else:
        st.sidebar.warning("Secrets not found. Please use the Setup page.")


PAGES_DIR = Path(__file__).parent / "jira_changes" / "pages"
for py in sorted(PAGES_DIR.glob("[!_]*.py")):
    mod_name = f"jira_changes.pages.{py.stem}"
    try:
        import_module(mod_name)
    except Exception as e:  # pragma: no cover - defensive
        logger.error("Failed importing page %s: %s", mod_name, e)

_auto_connect()

if __name__ == "__main__":
    main()
