import re

import pytest
from conftest import FakeTracker, make_build, make_project

from jira_changes.core.jira_client import IssueLookupError
from jira_changes.core.models import ChangeEntry
from jira_changes.core.service import (
    ChangesService,
    RenderLookup,
    compute_contributing_builds,
    group_changes_by_issue,
)

PATTERN = re.compile(r"([A-Z]+-\d+)")


def _graph_aggregator(edges):
    def aggregate(build):
        return edges.get(build.number, set())

    return aggregate


def test_closure_contains_build_and_is_fixed_point():
    b1, b2, b3, b4 = (make_build(n) for n in (1, 2, 3, 4))
    first = _graph_aggregator({1: {b2}, 2: {b3}})
    second = _graph_aggregator({3: {b4}})
    builds = compute_contributing_builds(b1, [first, second])
    assert builds == {b1, b2, b3, b4}
    for agg in (first, second):
        for b in builds:
            assert set(agg(b)) <= builds


def test_closure_terminates_on_cycles():
    b1, b2 = make_build(1), make_build(2)
    agg = _graph_aggregator({1: {b2}, 2: {b1}})
    assert compute_contributing_builds(b1, [agg]) == {b1, b2}


def test_closure_without_aggregators_is_just_the_build():
    b1 = make_build(1)
    assert compute_contributing_builds(b1, []) == {b1}


def test_groups_sorted_by_key():
    build = make_build(1, ["PROJ-7 one", "PROJ-123 two", "ABC-1 three", "misc"])
    lookup = RenderLookup(FakeTracker({"PROJ-7": "a", "PROJ-123": "b", "ABC-1": "c"}))
    groups = group_changes_by_issue([build], PATTERN, lookup)
    assert [i.key for i in groups] == ["ABC-1", "PROJ-123", "PROJ-7", "not specified"]


def test_entries_build_ascending_then_newest_first():
    b3 = make_build(3, [("PROJ-7 older build", 0)])
    b5 = make_build(5, [("PROJ-7 early", 1), ("PROJ-7 late", 5)])
    service = ChangesService([_graph_aggregator({5: {b3}})], PATTERN, RenderLookup(FakeTracker({"PROJ-7": "x"})))
    groups = service.all_jira_changes(b5)
    (entries,) = groups.values()
    assert [e.message for e in entries] == ["PROJ-7 older build", "PROJ-7 late", "PROJ-7 early"]


def test_same_build_number_later_timestamp_first_across_projects():
    a = make_build(2, [("PROJ-7 a", 1)], project=make_project("a"))
    b = make_build(2, [("PROJ-7 b", 9)], project=make_project("b"))
    groups = group_changes_by_issue([a, b], PATTERN, RenderLookup(FakeTracker({"PROJ-7": "x"})))
    assert [e.message for e in groups[next(iter(groups))]] == ["PROJ-7 b", "PROJ-7 a"]


def test_undated_entry_sorts_last_within_its_build():
    build = make_build(2, [("PROJ-7 dated", 1)])
    build.change_set.insert(0, ChangeEntry(build=build, message="PROJ-7 undated"))
    older = make_build(1, [("PROJ-7 older build", 0)])
    groups = group_changes_by_issue([build, older], PATTERN, RenderLookup(FakeTracker({"PROJ-7": "x"})))
    (entries,) = groups.values()
    assert [e.message for e in entries] == ["PROJ-7 older build", "PROJ-7 dated", "PROJ-7 undated"]


def test_equal_timestamps_keep_change_log_order():
    build = make_build(1, [("PROJ-7 first", 3), ("PROJ-7 second", 3), ("PROJ-7 third", 3)])
    groups = group_changes_by_issue([build], PATTERN, RenderLookup(FakeTracker({"PROJ-7": "x"})))
    (entries,) = groups.values()
    assert [e.message for e in entries] == ["PROJ-7 first", "PROJ-7 second", "PROJ-7 third"]


def test_unmatched_messages_share_sentinel_group():
    b1 = make_build(1, ["cleanup unrelated files"])
    b2 = make_build(2, ["bump version", "PROJ-123 fixed bug"])
    groups = group_changes_by_issue([b1, b2], PATTERN, RenderLookup(FakeTracker({"PROJ-123": "Crash"})))
    sentinel = [i for i in groups if i.key == "not specified"]
    assert len(sentinel) == 1
    assert sentinel[0].title == "N/A"
    assert sorted(e.message for e in groups[sentinel[0]]) == ["bump version", "cleanup unrelated files"]


def test_unknown_issue_gets_placeholder_title():
    build = make_build(1, ["PROJ-999 legacy fix"])
    groups = group_changes_by_issue([build], PATTERN, RenderLookup(FakeTracker()))
    (issue,) = groups
    assert issue.key == "PROJ-999"
    assert issue.title == "N/A"


def test_found_issue_keeps_tracker_title(tracker):
    build = make_build(1, ["PROJ-123 fixed bug"])
    groups = group_changes_by_issue([build], PATTERN, RenderLookup(tracker))
    (issue,) = groups
    assert issue.title == "Crash on save"


def test_each_entry_in_exactly_one_group(tracker):
    build = make_build(1, ["PROJ-123 a", "PROJ-7 b", "nothing", "PROJ-123 c"])
    groups = group_changes_by_issue([build], PATTERN, RenderLookup(tracker))
    flat = [e for entries in groups.values() for e in entries]
    assert len(flat) == len(set(flat)) == 4


def test_grouping_is_idempotent(tracker):
    builds = [make_build(1, ["PROJ-7 a", "x"]), make_build(2, ["PROJ-123 b", "PROJ-7 c"])]
    lookup = RenderLookup(tracker)
    first = group_changes_by_issue(builds, PATTERN, lookup)
    second = group_changes_by_issue(builds, PATTERN, lookup)
    assert list(first.items()) == list(second.items())


def test_duplicate_builds_do_not_duplicate_entries(tracker):
    build = make_build(1, ["PROJ-7 a"])
    groups = group_changes_by_issue([build, build], PATTERN, RenderLookup(tracker))
    assert len(next(iter(groups.values()))) == 1


def test_lookup_failure_aborts():
    build = make_build(1, ["PROJ-1 boom"])
    lookup = RenderLookup(FakeTracker(failing={"PROJ-1"}))
    with pytest.raises(IssueLookupError):
        group_changes_by_issue([build], PATTERN, lookup)


def test_render_lookup_fetches_each_key_once(tracker):
    lookup = RenderLookup(tracker)
    build = make_build(1, ["PROJ-123 a", "PROJ-123 b"])
    group_changes_by_issue([build], PATTERN, lookup)
    assert lookup.exists("PROJ-123")
    assert lookup.issue_type_icon("PROJ-123").endswith("PROJ-123.png")
    assert tracker.calls["PROJ-123"] == 1


def test_service_accepts_string_pattern(tracker):
    service = ChangesService([], r"([A-Z]+-\d+)", RenderLookup(tracker))
    groups = service.all_jira_changes(make_build(1, ["PROJ-7 go"]))
    assert [i.key for i in groups] == ["PROJ-7"]
