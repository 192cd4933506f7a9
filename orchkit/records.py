"""Core records shared by the store, the monitor and the CLI."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class Status(str, Enum):
    """Lifecycle state of a run."""

    RUNNING = "running"
    BLOCKED = "blocked"
    BLOCKED_API = "blocked_api"
    QUEUED = "queued"
    BOOTING = "booting"
    PR_OPEN = "pr_open"
    DONE = "done"
    FAILED = "failed"
    CANCELED = "canceled"
    UNKNOWN = "unknown"


class IssueStatus(str, Enum):
    """State of an issue as recorded in its frontmatter."""

    OPEN = "open"
    RESOLVED = "resolved"
    CLOSED = "closed"


def parse_issue_status(value: str | None) -> IssueStatus:
    """Parse an issue status, falling back to open for empty or unknown values."""
    cleaned = (value or "").strip().lower()
    try:
        return IssueStatus(cleaned)
    except ValueError:
        return IssueStatus.OPEN


@dataclass
class Run:
    """A single agent run for an issue."""

    issue_id: str = ""
    run_id: str = ""
    path: str = ""
    status: Status = Status.UNKNOWN
    agent: str = ""
    branch: str = ""
    worktree_path: str = ""
    tmux_session: str = ""
    pr_url: str = ""
    continued_from: str = ""
    started_at: datetime | None = None
    updated_at: datetime | None = None
    events: list[Any] = field(default_factory=list)

    @property
    def short_id(self) -> str:
        """Six hex digits derived from the run reference."""
        digest = hashlib.sha256(f"{self.issue_id}#{self.run_id}".encode()).hexdigest()
        return digest[:6]


@dataclass
class RunRow:
    """One line of the runs dashboard."""

    index: int = 0
    issue_id: str = ""
    short_id: str = ""
    status: Status = Status.UNKNOWN
    agent: str = ""
    pr: str = ""
    merged: str = ""
    updated: datetime | None = None
    issue_status: str = ""
    run: Run | None = None


@dataclass
class IssueRow:
    """One line of the issues dashboard."""

    index: int = 0
    id: str = ""
    status: str = ""
    latest_updated: datetime | None = None


@dataclass
class ListRunsFilter:
    """Criteria for selecting runs from a store."""

    issue_id: str = ""
    statuses: list[Status] = field(default_factory=list)
    limit: int = 0
    since: str = ""