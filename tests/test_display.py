import os

import pytest

from orchkit.display import (
    SUMMARY_MAX_LEN,
    TOPIC_MAX_LEN,
    abbreviate_home,
    format_branch_display,
    format_issue_topic,
    format_topic,
    format_worktree_display,
    shorten_path,
    truncate_leading,
    truncate_with_ellipsis,
)


@pytest.fixture
def home(tmp_path, monkeypatch):
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.setenv("USERPROFILE", str(tmp_path))
    return str(tmp_path)


def test_truncate_with_ellipsis_short_text_unchanged():
    assert truncate_with_ellipsis("short", 10) == "short"


def test_truncate_with_ellipsis_long_text():
    text = "abcdefghijklmnopqrstuvwxyz"
    result = truncate_with_ellipsis(text, 10)
    assert len(result) == 10
    assert result.endswith("...")
    assert text.startswith(result[:-3])


def test_truncate_with_ellipsis_tiny_limit():
    assert truncate_with_ellipsis("abcdef", 2) == "ab"


def test_truncate_leading():
    text = "/very/long/path/to/some/worktree"
    result = truncate_leading(text, 12)
    assert len(result) == 12
    assert result.startswith("...")
    assert text.endswith(result[3:])
    assert truncate_leading("abc", 10) == "abc"


def test_format_topic_word_limit():
    result = format_topic("one two three four five six seven")
    assert result.endswith("...")
    assert result.startswith("one two three four five")
    assert len(result) <= TOPIC_MAX_LEN


def test_format_topic_length_limit():
    result = format_topic("supercalifragilisticexpialidocious words")
    assert len(result) == TOPIC_MAX_LEN
    assert result.endswith("...")


def test_format_topic_empty():
    assert format_topic("   ") == ""


def test_format_issue_topic_prefers_topic():
    assert format_issue_topic("Short topic", "A summary") == "Short topic"


def test_format_issue_topic_falls_back_to_summary():
    assert format_issue_topic("", "  A summary ") == "A summary"
    long_summary = "x" * 100
    result = format_issue_topic(None, long_summary)
    assert len(result) == SUMMARY_MAX_LEN
    assert result.endswith("...")
    assert format_issue_topic("", "") == ""


def test_format_branch_display():
    assert format_branch_display("  ", 10) == "-"
    assert format_branch_display("feature/x", 0) == "feature/x"
    result = format_branch_display("feature/a-very-long-branch-name", 12)
    assert len(result) == 12
    assert result.endswith("...")


def test_abbreviate_home(home):
    assert abbreviate_home(home) == "~"
    assert abbreviate_home(os.path.join(home, "proj")) == "~" + os.sep + "proj"
    assert abbreviate_home(home + "other") == home + "other"


def test_shorten_path():
    relative = os.path.join("a", "b")
    assert shorten_path(relative) == relative
    deep = os.path.join("a", "b", "c", "d")
    assert shorten_path(deep) == "..." + os.sep + os.path.join("c", "d")
    assert shorten_path("single") == "single"


def test_format_worktree_display(home):
    path = os.path.join(home, "repo", "worktrees", "run-1")
    assert format_worktree_display(path, 100) == "..." + os.sep + os.path.join("worktrees", "run-1")
    short = format_worktree_display(path, 8)
    assert len(short) == 8
    assert short.startswith("...")
    assert format_worktree_display("", 10) == "-"
    assert format_worktree_display(path, 0) == path