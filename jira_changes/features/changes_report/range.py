"""Build-number resolution and range selection for the report's ``from``/``to`` parameters."""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Protocol

from jira_changes.core.models import Build

_INTEGER = re.compile(r"[+-]?\d+")


class PermalinkResolver(Protocol):
    def permalink_number(self, name: str | None) -> int | None: ...


def resolve_build_number(token: str | None, project: PermalinkResolver) -> str | None:
    """Literal build numbers pass through; permalink names resolve against ``project``."""
    if token is not None and _INTEGER.fullmatch(token.strip()):
        return token
    number = project.permalink_number(token)
    if number is None:
        return None
    return str(number)


def select_build_range(
    from_number: str | int | None,
    to_number: str | int | None,
    builds_by_number: Mapping[int, Build],
) -> list[Build]:
    """Builds numbered within ``[from_number, to_number]``, newest first.

    A missing bound leaves that side open; an inverted range selects nothing.
    """
    low = int(from_number) if from_number is not None else None
    high = int(to_number) if to_number is not None else None
    selected = [
        build
        for number, build in builds_by_number.items()
        if (low is None or number >= low) and (high is None or number <= high)
    ]
    selected.sort(key=lambda b: b.number, reverse=True)
    return selected
