"""Jenkins JSON API client and the upstream-cause changes aggregator."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any
from urllib.parse import quote

import requests

from .browsers import ChangeSetBrowser
from .config import JENKINS_BUILD_TREE, PERMALINK_NAMES, SETTINGS
from .mappers import map_build, map_project, map_project_ref
from .models import Build, Project, ProjectRef

logger = logging.getLogger(__name__)

BrowserLookup = Callable[[str], ChangeSetBrowser | None]


class JenkinsError(RuntimeError):
    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


def job_path(job_name: str) -> str:
    """``folder/job`` -> ``/job/folder/job/job``."""
    parts = [p for p in job_name.strip("/").split("/") if p]
    if not parts:
        raise ValueError("Job name must not be empty")
    return "".join(f"/job/{quote(p, safe='')}" for p in parts)


class JenkinsAPI:
    def __init__(
        self,
        server: str,
        user: str | None = None,
        token: str | None = None,
        *,
        browser_lookup: BrowserLookup | None = None,
        timeout: float = 30.0,
    ):
        self.server = server.rstrip("/")
        self.session = requests.Session()
        if user and token:
            self.session.auth = (user, token)
        self.timeout = timeout
        self.browser_lookup = browser_lookup

    def _get_json(self, path: str, tree: str) -> dict[str, Any]:
        url = f"{self.server}{path}/api/json"
        try:
            resp = self.session.get(url, params={"tree": tree}, timeout=self.timeout)
        except requests.RequestException as exc:
            raise JenkinsError(f"Jenkins request to {url} failed: {exc}") from exc
        if resp.status_code >= 400:
            raise JenkinsError(
                f"Jenkins request failed {resp.status_code}: {resp.text[:200]}",
                status_code=resp.status_code,
            )
        return resp.json()

    def _browser(self, job_name: str) -> ChangeSetBrowser | None:
        return self.browser_lookup(job_name) if self.browser_lookup else None

    def fetch_project_ref(self, job_name: str) -> ProjectRef:
        raw = self._get_json(job_path(job_name), "name,fullName,displayName,fullDisplayName,url")
        return map_project_ref(raw, self._browser(raw.get("fullName") or job_name))

    def fetch_project(self, job_name: str, *, max_builds: int | None = None) -> Project:
        limit = max_builds or SETTINGS.max_builds
        permalinks = ",".join(f"{name}[number]" for name in PERMALINK_NAMES)
        tree = (
            "name,fullName,displayName,fullDisplayName,url,"
            f"{permalinks},builds[{JENKINS_BUILD_TREE}]{{0,{limit}}}"
        )
        raw = self._get_json(job_path(job_name), tree)
        project = map_project(raw, self._browser(raw.get("fullName") or job_name))
        logger.debug("Fetched %s with %d build(s)", project.name, len(project.builds))
        return project

    def fetch_builds_in_range(
        self,
        project: ProjectRef,
        from_number: int | None,
        to_number: int | None,
    ) -> dict[int, Build]:
        """Every build numbered within ``[from_number, to_number]``, however old.

        ``allBuilds`` is sliced by position, so the numbers are listed first
        and only the slice covering the range is fetched in full.
        """
        path = job_path(project.name)
        listing = self._get_json(path, "allBuilds[number]").get("allBuilds") or []
        positions = [
            idx
            for idx, raw in enumerate(listing)
            if (from_number is None or raw["number"] >= from_number)
            and (to_number is None or raw["number"] <= to_number)
        ]
        if not positions:
            return {}
        start, end = positions[0], positions[-1] + 1
        raw = self._get_json(path, f"allBuilds[{JENKINS_BUILD_TREE}]{{{start},{end}}}")
        builds: dict[int, Build] = {}
        for raw_build in raw.get("allBuilds") or []:
            build = map_build(raw_build, project)
            builds[build.number] = build
        logger.debug("Fetched %d build(s) of %s in range %s..%s", len(builds), project.name, from_number, to_number)
        return builds

    def fetch_build(self, project: ProjectRef, number: int) -> Build:
        raw = self._get_json(f"{job_path(project.name)}/{number}", JENKINS_BUILD_TREE)
        return map_build(raw, project)


class UpstreamCauseAggregator:
    """Aggregator function mapping a build to the upstream builds that triggered it.

    One instance should serve a single render: fetched projects and builds are
    memoized on the instance and never refreshed.
    """

    def __init__(self, api: JenkinsAPI):
        self.api = api
        self._projects: dict[str, ProjectRef] = {}
        self._builds: dict[tuple[str, int], Build] = {}

    def remember(self, *builds: Build) -> None:
        for build in builds:
            self._projects.setdefault(build.project.name, build.project)
            self._builds.setdefault((build.project.name, build.number), build)

    def __call__(self, build: Build) -> set[Build]:
        related: set[Build] = set()
        for project_name, number in build.upstream:
            key = (project_name, number)
            upstream = self._builds.get(key)
            if upstream is None:
                try:
                    ref = self._projects.get(project_name)
                    if ref is None:
                        ref = self.api.fetch_project_ref(project_name)
                        self._projects[project_name] = ref
                    upstream = self.api.fetch_build(ref, number)
                except JenkinsError as exc:
                    if exc.status_code != 404:
                        raise
                    # Deleted upstream builds contribute nothing.
                    logger.warning("Upstream build %s #%s unavailable: %s", project_name, number, exc)
                    continue
                self._builds[key] = upstream
            related.add(upstream)
        return related
