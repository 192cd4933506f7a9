"""Terminal styles for the dashboard."""

from __future__ import annotations

from dataclasses import dataclass, field

from rich.style import Style

from orchkit.records import Status


def _fg(color: str) -> Style:
    return Style(color=f"color({color})")


@dataclass
class Styles:
    """Rich styles used across the dashboard panes."""

    box: Style
    title: Style
    header: Style
    text: Style
    selected: Style
    faint: Style
    status: dict[Status, Style] = field(default_factory=dict)
    alive: dict[str, Style] = field(default_factory=dict)
    pr_state: dict[str, Style] = field(default_factory=dict)
    box_padding: tuple[int, int] = (0, 1)


def default_styles() -> Styles:
    """Return the standard dashboard styles."""
    return Styles(
        box=_fg("240"),
        title=Style(bold=True, color="color(39)"),
        header=Style(bold=True),
        text=Style(),
        selected=Style(color="color(230)", bgcolor="color(237)"),
        faint=_fg("241"),
        status={
            Status.RUNNING: _fg("2"),
            Status.BLOCKED: _fg("3"),
            Status.BLOCKED_API: _fg("3"),
            Status.BOOTING: _fg("2"),
            Status.QUEUED: _fg("7"),
            Status.PR_OPEN: _fg("6"),
            Status.DONE: _fg("4"),
            Status.FAILED: _fg("1"),
            Status.CANCELED: _fg("8"),
            Status.UNKNOWN: _fg("5"),
        },
        alive={
            "yes": _fg("2"),
            "no": _fg("1"),
            "-": _fg("241"),
        },
        pr_state={
            "open": _fg("2"),
            "merged": _fg("5"),
            "closed": _fg("1"),
        },
    )