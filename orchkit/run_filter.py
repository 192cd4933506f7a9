"""Filter settings for the runs dashboard."""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from fractions import Fraction

from orchkit.records import RunRow, Status, parse_issue_status
from orchkit.sorting import run_status_rank

AGENT_FILTER_ALL = "all"
MERGED_FILTER_ALL = "all"
MERGED_FILTER_CLEAN = "clean"
MERGED_FILTER_CONFLICT = "conflict"
MERGED_FILTER_MERGED = "merged"
MERGED_FILTER_NO_CHANGE = "no change"
PR_FILTER_ALL = "all"
PR_FILTER_HAS = "has"
PR_FILTER_NONE = "none"
ISSUE_STATUS_ALL = "all"
ISSUE_STATUS_OPEN = "open"
ISSUE_STATUS_RESOLVED = "resolved"

RUN_STATUS_OPTIONS: tuple[Status, ...] = (
    Status.RUNNING,
    Status.BLOCKED,
    Status.BLOCKED_API,
    Status.QUEUED,
    Status.BOOTING,
    Status.PR_OPEN,
    Status.DONE,
    Status.FAILED,
    Status.CANCELED,
    Status.UNKNOWN,
)

RUN_AGENT_OPTIONS: tuple[str, ...] = ("claude", "codex", "gemini", "custom")

RUN_ISSUE_STATUS_OPTIONS: tuple[str, ...] = (
    ISSUE_STATUS_ALL,
    ISSUE_STATUS_OPEN,
    ISSUE_STATUS_RESOLVED,
)

# Statuses of runs that are still in progress; shown by default.
DEFAULT_STATUSES: frozenset[Status] = frozenset(
    {
        Status.RUNNING,
        Status.BLOCKED,
        Status.BLOCKED_API,
        Status.QUEUED,
        Status.BOOTING,
        Status.PR_OPEN,
    }
)

_NS_PER_UNIT = {
    "ns": 1,
    "us": 1_000,
    "µs": 1_000,
    "μs": 1_000,
    "ms": 1_000_000,
    "s": 1_000_000_000,
    "m": 60 * 1_000_000_000,
    "h": 3600 * 1_000_000_000,
}
_DURATION_PART = r"(\d+\.?\d*|\.\d+)(ns|us|µs|μs|ms|s|m|h)"
_DURATION_FULL = re.compile(rf"(?:{_DURATION_PART})+")
_DURATION_ITEM = re.compile(_DURATION_PART)
_DAYS_WEEKS = re.compile(r"^(\d+)([dwDW])$")


@dataclass
class RunFilter:
    """Active filter settings for the runs dashboard."""

    statuses: set[Status] | None = field(default_factory=lambda: set(DEFAULT_STATUSES))
    agent: str = AGENT_FILTER_ALL
    issue_query: str = ""
    issue_regex: re.Pattern[str] | None = None
    merged: str = MERGED_FILTER_ALL
    pr: str = PR_FILTER_ALL
    updated_within: timedelta = field(default_factory=timedelta)
    updated_within_raw: str = ""
    issue_status: str = ISSUE_STATUS_ALL

    def clone(self) -> RunFilter:
        """Copy the filter, including its status set."""
        statuses = None if self.statuses is None else set(self.statuses)
        return replace(self, statuses=statuses)

    def normalized(self) -> RunFilter:
        """Return a copy with trimmed, lower-cased fields and defaults filled in."""
        statuses = set(DEFAULT_STATUSES) if self.statuses is None else set(self.statuses)
        return replace(
            self,
            statuses=statuses,
            agent=_lower_or(self.agent, AGENT_FILTER_ALL),
            merged=_lower_or(self.merged, MERGED_FILTER_ALL),
            pr=_lower_or(self.pr, PR_FILTER_ALL),
            issue_status=_lower_or(self.issue_status, ISSUE_STATUS_ALL),
            issue_query=(self.issue_query or "").strip(),
            updated_within_raw=(self.updated_within_raw or "").strip(),
        )

    def is_default(self) -> bool:
        """Return True when the filter matches the default dashboard filter."""
        f = self.normalized()
        return (
            f.statuses == set(DEFAULT_STATUSES)
            and f.agent == AGENT_FILTER_ALL
            and f.issue_query == ""
            and f.merged == MERGED_FILTER_ALL
            and f.pr == PR_FILTER_ALL
            and f.issue_status == ISSUE_STATUS_ALL
            and f.updated_within <= timedelta(0)
            and f.updated_within_raw == ""
        )

    def summary(self) -> str:
        """Human-readable summary of the filter state."""
        f = self.normalized()
        parts: list[str] = []
        if status_label := f._status_summary():
            parts.append(status_label)
        if f.agent != AGENT_FILTER_ALL:
            parts.append(f"agent={f.agent}")
        if f.merged != MERGED_FILTER_ALL:
            parts.append(f"merged={f.merged}")
        if f.pr != PR_FILTER_ALL:
            parts.append(f"pr={f.pr}")
        if f.issue_status != ISSUE_STATUS_ALL:
            parts.append(f"issue_status={f.issue_status}")
        if f.issue_query:
            parts.append(f"issue={f.issue_query}")
        if f.updated_within > timedelta(0):
            label = f.updated_within_raw or _format_duration(f.updated_within)
            parts.append(f"updated<={label}")
        if not parts:
            return "filter: all"
        return "filter: " + " ".join(parts)

    def _status_summary(self) -> str:
        statuses = self.statuses or set()
        if not statuses:
            return "status=none"
        if statuses == set(DEFAULT_STATUSES):
            return "status=active"
        if statuses == set(RUN_STATUS_OPTIONS):
            return ""
        chosen = [status.value for status in RUN_STATUS_OPTIONS if status in statuses]
        if not chosen:
            return "status=none"
        return "status=" + ",".join(chosen)

    def filter_rows(self, rows: Iterable[RunRow], now: datetime) -> list[RunRow]:
        """Return the rows that pass every active criterion, in order."""
        f = self.normalized()
        if not f.statuses:
            return []
        cutoff = now - f.updated_within if f.updated_within > timedelta(0) else None
        query = f.issue_query.lower()
        return [row for row in rows if f._accepts(row, query, cutoff)]

    def _accepts(self, row: RunRow, query: str, cutoff: datetime | None) -> bool:
        if row.status not in (self.statuses or set()):
            return False
        if self.agent != AGENT_FILTER_ALL:
            agent = (row.run.agent if row.run is not None else "") or row.agent
            if (agent or "").strip().lower() != self.agent:
                return False
        if self.issue_query:
            if self.issue_regex is not None:
                if not self.issue_regex.search(row.issue_id):
                    return False
            elif query not in row.issue_id.lower():
                return False
        if self.merged != MERGED_FILTER_ALL and (row.merged or "").lower() != self.merged:
            return False
        if self.pr != PR_FILTER_ALL:
            has_pr = bool(row.pr) and row.pr != "-"
            if self.pr == PR_FILTER_HAS and not has_pr:
                return False
            if self.pr == PR_FILTER_NONE and has_pr:
                return False
        if self.issue_status != ISSUE_STATUS_ALL:
            if parse_issue_status(row.issue_status).value != self.issue_status:
                return False
        if cutoff is not None and (row.updated is None or row.updated < cutoff):
            return False
        return True


def _lower_or(value: str | None, fallback: str) -> str:
    cleaned = (value or "").strip().lower()
    return cleaned or fallback


def default_run_filter() -> RunFilter:
    """Return the baseline filter configuration."""
    return RunFilter()


def new_run_filter(statuses: Iterable[Status] | None = None, issue: str | None = None) -> RunFilter:
    """Build a normalised filter from command-line style options."""
    filter_ = default_run_filter()
    chosen = list(statuses or [])
    if chosen:
        filter_.statuses = set(chosen)
    if issue and issue.strip():
        filter_.issue_query = issue
    return filter_.normalized()


def compile_issue_query(raw: str | None) -> tuple[re.Pattern[str] | None, bool]:
    """Compile a /regex/ issue query.

    Returns the case-insensitive pattern and whether the query was a regex.
    Raises ValueError for an empty or invalid pattern.
    """
    trimmed = (raw or "").strip()
    if not trimmed:
        return None, False
    if trimmed.startswith("/") and trimmed.endswith("/") and len(trimmed) > 2:
        pattern = trimmed[1:-1]
        if not pattern.strip():
            raise ValueError("regex pattern is empty")
        try:
            return re.compile(pattern, re.IGNORECASE), True
        except re.error as exc:
            raise ValueError(str(exc)) from exc
    return None, False


def _parse_go_duration(text: str) -> int | None:
    """Parse a duration such as 1h30m into nanoseconds, or None if malformed."""
    sign = 1
    body = text
    if body[:1] in "+-" and body:
        if body[0] == "-":
            sign = -1
        body = body[1:]
    if body == "0":
        return 0
    if not body or not _DURATION_FULL.fullmatch(body):
        return None
    total = Fraction(0)
    for match in _DURATION_ITEM.finditer(body):
        total += Fraction(match.group(1)) * _NS_PER_UNIT[match.group(2)]
    return sign * int(total)


def parse_filter_duration(raw: str | None) -> timedelta:
    """Parse an "updated within" value such as 24h, 7d or 2w.

    An empty value gives a zero duration. Raises ValueError otherwise.
    """
    trimmed = (raw or "").strip()
    if not trimmed:
        return timedelta(0)
    nanoseconds = _parse_go_duration(trimmed)
    if nanoseconds is not None:
        if nanoseconds <= 0:
            raise ValueError("duration must be positive")
        return timedelta(microseconds=nanoseconds / 1000)
    match = _DAYS_WEEKS.match(trimmed)
    if match is None:
        raise ValueError(f"invalid duration format: {trimmed} (use 24h, 7d, or 2w)")
    value = int(match.group(1))
    if match.group(2).lower() == "d":
        return timedelta(days=value)
    return timedelta(weeks=value)


def _trim_fraction(value: Fraction) -> str:
    whole = int(value)
    rest = value - whole
    if rest == 0:
        return str(whole)
    digits = ""
    while rest and len(digits) < 9:
        rest *= 10
        digit = int(rest)
        digits += str(digit)
        rest -= digit
    return f"{whole}.{digits.rstrip('0')}"


def _format_duration(delta: timedelta) -> str:
    """Render a duration compactly, e.g. 24h0m0s, 1m30s or 500ms."""
    ns = (delta // timedelta(microseconds=1)) * 1000
    if ns == 0:
        return "0s"
    sign = "-" if ns < 0 else ""
    ns = abs(ns)
    if ns < 1_000_000_000:
        if ns < 1_000:
            return f"{sign}{ns}ns"
        if ns < 1_000_000:
            return f"{sign}{_trim_fraction(Fraction(ns, 1_000))}µs"
        return f"{sign}{_trim_fraction(Fraction(ns, 1_000_000))}ms"
    hours, rest = divmod(ns, _NS_PER_UNIT["h"])
    minutes, rest = divmod(rest, _NS_PER_UNIT["m"])
    seconds = _trim_fraction(Fraction(rest, 1_000_000_000))
    if hours:
        return f"{sign}{hours}h{minutes}m{seconds}s"
    if minutes:
        return f"{sign}{minutes}m{seconds}s"
    return f"{sign}{seconds}s"


def status_slice(statuses: Iterable[Status] | None) -> list[Status]:
    """Return the statuses as a list in dashboard rank order."""
    return sorted(set(statuses or ()), key=run_status_rank)


def reindex_run_rows(rows: list[RunRow]) -> None:
    """Renumber rows from 1 in their current order."""
    for position, row in enumerate(rows, start=1):
        row.index = position