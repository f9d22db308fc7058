import pytest
from conftest import make_build, make_project

from jira_changes.core.browsers import BitbucketBrowser, GitHubBrowser, browser_from_config
from jira_changes.core.config import DEFAULT_ISSUE_PATTERN
from jira_changes.core.settings import load_settings, reset_settings


@pytest.fixture(autouse=True)
def _fresh_settings():
    reset_settings()
    yield
    reset_settings()


def test_defaults_without_yaml(tmp_path):
    settings = load_settings(tmp_path)
    assert settings.issue_pattern == DEFAULT_ISSUE_PATTERN
    assert settings.compiled_pattern().search("fixed ABC-12 today").group(1) == "ABC-12"


def test_yaml_overrides(tmp_path):
    (tmp_path / "report.yaml").write_text(
        "report:\n"
        "  issue_pattern: '(PROJ-\\d+)'\n"
        "  timezone: America/Santiago\n"
        "browsers:\n"
        "  team/app:\n"
        "    kind: bitbucket\n"
        "    url: https://bitbucket.example/team/app/\n"
    )
    settings = load_settings(tmp_path)
    assert settings.issue_pattern == r"(PROJ-\d+)"
    assert settings.timezone == "America/Santiago"
    browser = settings.browser_for("team/app")
    assert isinstance(browser, BitbucketBrowser)
    assert settings.browser_for("other") is None


def test_settings_are_cached_until_reset(tmp_path):
    first = load_settings(tmp_path)
    (tmp_path / "report.yaml").write_text("report:\n  timezone: Europe/Paris\n")
    assert load_settings(tmp_path) is first
    reset_settings()
    assert load_settings(tmp_path).timezone == "Europe/Paris"


def test_default_pattern_ignores_version_numbers():
    settings = load_settings()
    pattern = settings.compiled_pattern()
    assert pattern.search("Release ABC-1.2") is None
    assert pattern.search("ABC-12: tidy").group(1) == "ABC-12"


def test_browser_from_config():
    assert browser_from_config(None) is None
    assert browser_from_config({"kind": "svn", "url": "x"}) is None
    assert browser_from_config({"kind": "github"}) is None
    browser = browser_from_config({"kind": "GitHub", "url": "https://github.com/example/app/"})
    assert isinstance(browser, GitHubBrowser)
    build = make_build(1, ["A-1 x"], project=make_project())
    assert browser.change_set_link(build.change_set[0]) == "https://github.com/example/app/commit/app1c0"
