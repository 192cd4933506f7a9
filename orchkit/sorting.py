"""Sort keys and orderings for the monitor panes."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from enum import Enum
from functools import cmp_to_key
from typing import Any

from orchkit.records import IssueRow, IssueStatus, Run, RunRow, Status, parse_issue_status


class SortKey(str, Enum):
    """Supported sort keys for monitor panes."""

    NAME = "name"
    UPDATED = "updated"
    STATUS = "status"


_SORT_KEY_CYCLE = (SortKey.NAME, SortKey.UPDATED, SortKey.STATUS)

_RUN_STATUS_ORDER = {
    Status.RUNNING: 0,
    Status.BLOCKED: 1,
    Status.BLOCKED_API: 2,
    Status.BOOTING: 3,
    Status.QUEUED: 4,
    Status.PR_OPEN: 5,
    Status.DONE: 6,
    Status.FAILED: 7,
    Status.CANCELED: 8,
    Status.UNKNOWN: 9,
}

_ISSUE_STATUS_ORDER = {
    IssueStatus.OPEN: 0,
    IssueStatus.RESOLVED: 1,
    IssueStatus.CLOSED: 2,
}


def valid_sort_keys() -> list[str]:
    """Return the supported sort key strings."""
    return [key.value for key in _SORT_KEY_CYCLE]


def is_valid_sort_key(key: Any) -> bool:
    """Return True when the key is recognised."""
    if isinstance(key, SortKey):
        return True
    return isinstance(key, str) and key in valid_sort_keys()


def parse_sort_key(value: str | None, fallback: SortKey | str | None) -> SortKey:
    """Validate a sort key string, using the fallback when it is empty."""
    trimmed = (value or "").lower().strip()
    if not trimmed:
        if is_valid_sort_key(fallback):
            return SortKey(fallback)
        return SortKey.UPDATED
    if trimmed == "id":
        return SortKey.NAME
    if trimmed in valid_sort_keys():
        return SortKey(trimmed)
    raise ValueError(f"invalid sort key {value!r} (valid: {', '.join(valid_sort_keys())})")


def next_sort_key(current: SortKey | str | None) -> SortKey:
    """Cycle to the next sort key."""
    if is_valid_sort_key(current):
        position = _SORT_KEY_CYCLE.index(SortKey(current))
        return _SORT_KEY_CYCLE[(position + 1) % len(_SORT_KEY_CYCLE)]
    return _SORT_KEY_CYCLE[0]


def run_status_rank(status: Status | str) -> int:
    """Rank of a run status; unknown values sort last."""
    try:
        return _RUN_STATUS_ORDER[Status(status)]
    except ValueError:
        return len(_RUN_STATUS_ORDER) + 1


def issue_status_rank(status: IssueStatus | str) -> int:
    """Rank of an issue status; unknown values sort last."""
    try:
        return _ISSUE_STATUS_ORDER[IssueStatus(status)]
    except ValueError:
        return len(_ISSUE_STATUS_ORDER) + 1


def _cmp(a: Any, b: Any) -> int:
    return (a > b) - (a < b)


def _newer_first(a: datetime | None, b: datetime | None) -> int:
    """Order later times first; a missing time counts as the earliest."""
    if a == b:
        return 0
    if a is None:
        return 1
    if b is None:
        return -1
    return -1 if a > b else 1


def _resolve_key(key: Any, default: SortKey) -> SortKey:
    return SortKey(key) if is_valid_sort_key(key) else default


def _row_run_id(row: RunRow) -> str:
    return row.run.run_id if row.run is not None else ""


def _run_row_comparator(key: SortKey) -> Callable[[RunRow, RunRow], int]:
    def by_name(a: RunRow, b: RunRow) -> int:
        return (
            _cmp(a.issue_id, b.issue_id)
            or _cmp(_row_run_id(a), _row_run_id(b))
            or _cmp(a.short_id, b.short_id)
        )

    def by_updated(a: RunRow, b: RunRow) -> int:
        return _newer_first(a.updated, b.updated) or by_name(a, b)

    def by_status(a: RunRow, b: RunRow) -> int:
        return _cmp(run_status_rank(a.status), run_status_rank(b.status)) or by_updated(a, b)

    return {SortKey.NAME: by_name, SortKey.STATUS: by_status}.get(key, by_updated)


def _reindex(rows: list[Any]) -> None:
    for position, row in enumerate(rows, start=1):
        row.index = position


def sort_run_rows(rows: list[RunRow], key: SortKey | str) -> None:
    """Sort run rows in place and renumber them from 1."""
    if len(rows) >= 2:
        comparator = _run_row_comparator(_resolve_key(key, SortKey.UPDATED))
        rows.sort(key=cmp_to_key(comparator))
    _reindex(rows)


def _issue_row_comparator(key: SortKey) -> Callable[[IssueRow, IssueRow], int]:
    def by_name(a: IssueRow, b: IssueRow) -> int:
        return _cmp(a.id, b.id) or _newer_first(a.latest_updated, b.latest_updated)

    def by_updated(a: IssueRow, b: IssueRow) -> int:
        return _newer_first(a.latest_updated, b.latest_updated) or _cmp(a.id, b.id)

    def by_status(a: IssueRow, b: IssueRow) -> int:
        rank_a = issue_status_rank(parse_issue_status(a.status))
        rank_b = issue_status_rank(parse_issue_status(b.status))
        return _cmp(rank_a, rank_b) or by_updated(a, b)

    return {SortKey.UPDATED: by_updated, SortKey.STATUS: by_status}.get(key, by_name)


def sort_issue_rows(rows: list[IssueRow], key: SortKey | str) -> None:
    """Sort issue rows in place and renumber them from 1."""
    if len(rows) >= 2:
        comparator = _issue_row_comparator(_resolve_key(key, SortKey.NAME))
        rows.sort(key=cmp_to_key(comparator))
    _reindex(rows)


def _run_comparator(key: SortKey) -> Callable[[Run | None, Run | None], int]:
    def by_name(a: Run, b: Run) -> int:
        return _cmp(a.issue_id, b.issue_id) or _cmp(a.run_id, b.run_id) or _cmp(a.short_id, b.short_id)

    def by_updated(a: Run, b: Run) -> int:
        return _newer_first(a.updated_at, b.updated_at) or by_name(a, b)

    def by_status(a: Run, b: Run) -> int:
        return _cmp(run_status_rank(a.status), run_status_rank(b.status)) or by_updated(a, b)

    ordered = {SortKey.NAME: by_name, SortKey.STATUS: by_status}.get(key, by_updated)

    def compare(a: Run | None, b: Run | None) -> int:
        if a is None or b is None:
            return (a is None) - (b is None)
        return ordered(a, b)

    return compare


def sort_runs(runs: list[Run | None], key: SortKey | str) -> None:
    """Sort runs in place; missing entries go last."""
    if len(runs) < 2:
        return
    runs.sort(key=cmp_to_key(_run_comparator(_resolve_key(key, SortKey.UPDATED))))