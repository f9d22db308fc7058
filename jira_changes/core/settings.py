"""Load report settings from YAML (with fallbacks to ``config`` constants)."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .browsers import ChangeSetBrowser, browser_from_config
from .config import DATE_FORMAT, DEFAULT_ISSUE_PATTERN, TIMEZONE

_CACHE: ReportSettings | None = None


@dataclass(slots=True)
class ReportSettings:
    issue_pattern: str = DEFAULT_ISSUE_PATTERN
    timezone: str = TIMEZONE
    date_format: str = DATE_FORMAT
    # Job name -> {"kind": "github" | "gitlab" | "bitbucket", "url": repo URL}
    browsers: dict[str, dict[str, Any]] = field(default_factory=dict)

    def compiled_pattern(self) -> re.Pattern[str]:
        return re.compile(self.issue_pattern)

    def browser_for(self, job_name: str) -> ChangeSetBrowser | None:
        return browser_from_config(self.browsers.get(job_name))


def load_settings(base_path: str | Path | None = None) -> ReportSettings:
    global _CACHE
    if _CACHE is not None:
        return _CACHE
    base = Path(base_path or Path(__file__).resolve().parent.parent)
    yaml_path = base / "report.yaml"
    if not yaml_path.exists():
        _CACHE = ReportSettings()
        return _CACHE
    try:
        data = yaml.safe_load(yaml_path.read_text()) or {}
    except yaml.YAMLError as exc:
        logging.getLogger(__name__).warning("Ignoring unreadable %s: %s", yaml_path, exc)
        _CACHE = ReportSettings()
        return _CACHE
    report = data.get("report", {}) or {}
    pattern = report.get("issue_pattern") or DEFAULT_ISSUE_PATTERN
    # Fail early on a broken pattern rather than on the first render.
    re.compile(pattern)
    _CACHE = ReportSettings(
        issue_pattern=pattern,
        timezone=report.get("timezone") or TIMEZONE,
        date_format=report.get("date_format") or DATE_FORMAT,
        browsers=dict(data.get("browsers", {}) or {}),
    )
    return _CACHE


def reset_settings() -> None:
    """Drop the cached settings so the next ``load_settings`` re-reads YAML."""
    global _CACHE
    _CACHE = None
