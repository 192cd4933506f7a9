"""Text shortening helpers for dashboard columns."""

from __future__ import annotations

import os
from pathlib import Path

SUMMARY_MAX_LEN = 40
TOPIC_MAX_LEN = 30
TOPIC_MAX_WORDS = 5


def truncate_with_ellipsis(text: str, max_len: int) -> str:
    """Cut text to max_len characters, ending in "..." when there is room."""
    if len(text) <= max_len:
        return text
    if max_len <= 3:
        return text[: max(max_len, 0)]
    return text[: max_len - 3] + "..."


def truncate_leading(text: str, max_len: int) -> str:
    """Cut text to max_len characters, keeping its end and starting with "..."."""
    if len(text) <= max_len:
        return text
    if max_len <= 3:
        return text[: max(max_len, 0)]
    return "..." + text[len(text) - (max_len - 3):]


def format_topic(topic: str | None) -> str:
    """Shorten a topic to a few words and a bounded length."""
    topic = (topic or "").strip()
    if not topic:
        return ""
    words = topic.split()
    if len(words) > TOPIC_MAX_WORDS:
        topic = " ".join(words[:TOPIC_MAX_WORDS]) + "..."
    if len(topic) > TOPIC_MAX_LEN:
        topic = truncate_with_ellipsis(topic, TOPIC_MAX_LEN)
    return topic


def format_issue_topic(topic: str | None, summary: str | None) -> str:
    """Label for an issue: its topic, or else its shortened summary."""
    formatted = format_topic(topic)
    if formatted:
        return formatted
    summary = (summary or "").strip()
    if not summary:
        return ""
    return truncate_with_ellipsis(summary, SUMMARY_MAX_LEN)


def format_branch_display(branch: str | None, max_len: int) -> str:
    """Branch label for a column; "-" when there is none."""
    branch = (branch or "").strip()
    if not branch:
        return "-"
    if max_len <= 0:
        return branch
    return truncate_with_ellipsis(branch, max_len)


def abbreviate_home(path: str) -> str:
    """Replace the home directory prefix with "~"."""
    try:
        home = str(Path.home())
    except (RuntimeError, KeyError):
        return path
    if not home:
        return path
    if path == home:
        return "~"
    if path.startswith(home + os.sep):
        return "~" + path[len(home):]
    return path


def shorten_path(path: str) -> str:
    """Keep only the last two components of a path, prefixed with "..."."""
    cleaned = os.path.normpath(path)
    parts = cleaned.split(os.sep)
    if len(parts) < 2:
        return cleaned
    joined = os.path.join(parts[-2], parts[-1])
    suffix = os.path.normpath(joined) if joined else ""
    if suffix == cleaned:
        return cleaned
    return "..." + os.sep + suffix


def format_worktree_display(path: str | None, max_len: int) -> str:
    """Compact worktree path for a column; "-" when there is none."""
    path = (path or "").strip()
    if not path:
        return "-"
    if max_len <= 0:
        return path
    return truncate_leading(shorten_path(abbreviate_home(path)), max_len)