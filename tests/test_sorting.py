from datetime import datetime, timedelta, timezone

import pytest

from orchkit.records import IssueRow, IssueStatus, Run, RunRow, Status
from orchkit.sorting import (
    SortKey,
    is_valid_sort_key,
    issue_status_rank,
    next_sort_key,
    parse_sort_key,
    run_status_rank,
    sort_issue_rows,
    sort_run_rows,
    sort_runs,
    valid_sort_keys,
)


@pytest.mark.parametrize(
    "value, fallback, expected",
    [
        ("", SortKey.UPDATED, SortKey.UPDATED),
        ("name", SortKey.UPDATED, SortKey.NAME),
        ("updated", SortKey.NAME, SortKey.UPDATED),
        ("status", SortKey.NAME, SortKey.STATUS),
        ("id", SortKey.UPDATED, SortKey.NAME),
    ],
)
def test_parse_sort_key(value, fallback, expected):
    assert parse_sort_key(value, fallback) is expected


def test_parse_sort_key_invalid():
    with pytest.raises(ValueError, match="invalid sort key"):
        parse_sort_key("nope", SortKey.UPDATED)


def test_parse_sort_key_bad_fallback_uses_updated():
    assert parse_sort_key("", "bogus") is SortKey.UPDATED


def test_valid_sort_keys_and_validity():
    assert valid_sort_keys() == ["name", "updated", "status"]
    assert is_valid_sort_key(SortKey.STATUS)
    assert is_valid_sort_key("name")
    assert not is_valid_sort_key("invalid_key")
    assert not is_valid_sort_key(None)


def test_next_sort_key_cycles():
    assert next_sort_key(SortKey.NAME) is SortKey.UPDATED
    assert next_sort_key(SortKey.UPDATED) is SortKey.STATUS
    assert next_sort_key(SortKey.STATUS) is SortKey.NAME
    assert next_sort_key("bogus") is SortKey.NAME


def test_status_ranks():
    ranks = [run_status_rank(s) for s in Status]
    assert run_status_rank(Status.RUNNING) < run_status_rank(Status.DONE)
    assert run_status_rank("bogus") > max(ranks)
    assert issue_status_rank(IssueStatus.OPEN) < issue_status_rank(IssueStatus.RESOLVED)
    assert issue_status_rank(IssueStatus.RESOLVED) < issue_status_rank(IssueStatus.CLOSED)
    assert issue_status_rank("bogus") > issue_status_rank(IssueStatus.CLOSED)


def test_sort_run_rows():
    base = datetime(2024, 1, 1, 9, 0, 0, tzinfo=timezone.utc)
    old, mid, new = base, base + timedelta(hours=1), base + timedelta(hours=2)
    rows = [
        RunRow(issue_id="b", short_id="b1", status=Status.BLOCKED, updated=mid, run=Run(issue_id="b", run_id="002")),
        RunRow(issue_id="a", short_id="a1", status=Status.RUNNING, updated=new, run=Run(issue_id="a", run_id="001")),
        RunRow(issue_id="a", short_id="a0", status=Status.DONE, updated=old, run=Run(issue_id="a", run_id="000")),
    ]

    sort_run_rows(rows, SortKey.UPDATED)
    assert [r.status for r in rows] == [Status.RUNNING, Status.BLOCKED, Status.DONE]
    assert [r.index for r in rows] == [1, 2, 3]

    sort_run_rows(rows, SortKey.NAME)
    assert [r.run.run_id for r in rows] == ["000", "001", "002"]

    rows = [
        RunRow(issue_id="c", short_id="c1", status=Status.RUNNING, updated=old, run=Run(issue_id="c", run_id="003")),
        RunRow(issue_id="b", short_id="b1", status=Status.BLOCKED, updated=mid, run=Run(issue_id="b", run_id="002")),
        RunRow(issue_id="a", short_id="a1", status=Status.RUNNING, updated=new, run=Run(issue_id="a", run_id="001")),
        RunRow(issue_id="d", short_id="d1", status=Status.DONE, updated=new, run=Run(issue_id="d", run_id="004")),
    ]
    sort_run_rows(rows, SortKey.STATUS)
    assert [r.issue_id for r in rows] == ["a", "c", "b", "d"]


def test_sort_run_rows_single_row_indexed():
    rows = [RunRow(issue_id="x")]
    sort_run_rows(rows, SortKey.NAME)
    assert rows[0].index == 1


def test_sort_run_rows_invalid_key_falls_back_to_updated():
    base = datetime(2024, 1, 1, tzinfo=timezone.utc)
    rows = [
        RunRow(issue_id="a", updated=base),
        RunRow(issue_id="b", updated=base + timedelta(hours=1)),
    ]
    sort_run_rows(rows, "bogus")
    assert [r.issue_id for r in rows] == ["b", "a"]


def test_sort_issue_rows():
    base = datetime(2024, 1, 2, 9, 0, 0, tzinfo=timezone.utc)
    old, mid, new = base, base + timedelta(hours=2), base + timedelta(hours=4)
    rows = [
        IssueRow(id="orch-2", status="resolved", latest_updated=mid),
        IssueRow(id="orch-1", status="open", latest_updated=old),
        IssueRow(id="orch-3", status="closed", latest_updated=new),
    ]

    sort_issue_rows(rows, SortKey.STATUS)
    assert [r.status for r in rows] == ["open", "resolved", "closed"]

    sort_issue_rows(rows, SortKey.NAME)
    assert [r.id for r in rows] == ["orch-1", "orch-2", "orch-3"]

    rows = [
        IssueRow(id="orch-2", status="resolved", latest_updated=mid),
        IssueRow(id="orch-4", status="open"),
        IssueRow(id="orch-1", status="open", latest_updated=old),
        IssueRow(id="orch-3", status="closed", latest_updated=new),
    ]
    sort_issue_rows(rows, SortKey.UPDATED)
    assert [r.id for r in rows] == ["orch-3", "orch-2", "orch-1", "orch-4"]
    assert rows[0].index == 1
    assert rows[3].index == 4


def test_sort_runs_updated_and_missing_last():
    base = datetime(2024, 1, 1, tzinfo=timezone.utc)
    older = Run(issue_id="a", run_id="1", updated_at=base)
    newer = Run(issue_id="b", run_id="2", updated_at=base + timedelta(hours=1))
    runs = [None, older, newer]
    sort_runs(runs, SortKey.UPDATED)
    assert runs == [newer, older, None]


def test_sort_runs_by_status_and_name():
    base = datetime(2024, 1, 1, tzinfo=timezone.utc)
    done = Run(issue_id="a", run_id="1", status=Status.DONE, updated_at=base)
    running = Run(issue_id="b", run_id="2", status=Status.RUNNING, updated_at=base)
    runs = [done, running]
    sort_runs(runs, SortKey.STATUS)
    assert runs == [running, done]
    sort_runs(runs, SortKey.NAME)
    assert runs == [done, running]