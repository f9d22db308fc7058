"""Application entry point: page registry and router."""

from __future__ import annotations

import streamlit as st

PAGES = {}

PREFERRED_ORDER = (
    "All JIRA Changes",
    "Setup / Connection",
)


def register_page(label):
    def decorator(func):
        PAGES[label] = func
        return func

    return decorator


def ordered_pages() -> list[str]:
    ordered = [name for name in PREFERRED_ORDER if name in PAGES]
    trailing = sorted(name for name in PAGES if name not in PREFERRED_ORDER)
    return ordered + trailing


def main():
    st.sidebar.title("All JIRA Changes")
    pages = ordered_pages()
    if not pages:
        st.write("No pages registered yet.")
        return
    # Without both connections the report cannot run; start on setup.
    connected = "changes_tracker" in st.session_state and "jenkins_api" in st.session_state
    if "Setup / Connection" in pages and not connected:
        default = pages.index("Setup / Connection")
    else:
        default = 0
    page = st.sidebar.selectbox("Page", pages, index=default)
    PAGES[page]()


if __name__ == "__main__":
    main()
