"""Building blocks for supervising coding-agent runs: records, sorting, filtering, display helpers, settings, styles, tmux control and PR lookups."""

__version__ = "0.1.0"

__all__ = [
    "records",
    "sorting",
    "settings",
    "styles",
    "run_filter",
    "display",
    "tmux",
    "pr_cache",
]