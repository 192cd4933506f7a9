from datetime import datetime, timezone

import pytest

from orchkit.records import (
    IssueRow,
    IssueStatus,
    ListRunsFilter,
    Run,
    RunRow,
    Status,
    parse_issue_status,
)


@pytest.mark.parametrize("status", list(IssueStatus))
def test_parse_issue_status_round_trip(status):
    assert parse_issue_status(status.value) is status


def test_parse_issue_status_empty_defaults_to_open():
    assert parse_issue_status("") is IssueStatus.OPEN
    assert parse_issue_status(None) is IssueStatus.OPEN


def test_parse_issue_status_ignores_case_and_space():
    assert parse_issue_status("  Resolved ") is IssueStatus.RESOLVED


def test_status_values_from_text():
    assert Status("running") is Status.RUNNING
    assert Status("blocked") is Status.BLOCKED
    assert Status("done") is Status.DONE
    assert Status("queued") is Status.QUEUED


def test_short_id_shape_and_stability():
    run = Run(issue_id="test123", run_id="20231220-100000")
    short = run.short_id
    assert len(short) == 6
    assert all(ch in "0123456789abcdef" for ch in short)
    assert Run(issue_id="test123", run_id="20231220-100000").short_id == short


def test_short_id_differs_between_runs():
    ids = {Run(issue_id="test", run_id=f"20231220-{i:02d}0000").short_id for i in range(20)}
    assert len(ids) > 1


def test_run_events_not_shared():
    a = Run()
    b = Run()
    a.events.append("x")
    assert b.events == []


def test_rows_hold_values():
    when = datetime(2024, 1, 1, tzinfo=timezone.utc)
    run = Run(issue_id="a", run_id="001")
    row = RunRow(issue_id="a", status=Status.RUNNING, updated=when, run=run)
    assert row.run.run_id == "001"
    assert row.updated == when
    assert row.index == 0
    issue = IssueRow(id="orch-1", status="open")
    assert issue.latest_updated is None


def test_list_runs_filter_defaults():
    flt = ListRunsFilter()
    assert flt.limit == 0
    assert flt.statuses == []
    assert flt.issue_id == ""
    other = ListRunsFilter()
    flt.statuses.append(Status.DONE)
    assert other.statuses == []