# orchkit

Building blocks for tools that supervise many coding-agent runs. In such a
tool each run has its own git branch and worktree and its own tmux session.
`orchkit` supplies the parts that a dashboard or command-line front end is
built from.

## Install

```
pip install orchkit
```

For the test suite:

```
pip install "orchkit[test]"
pytest
```

## Modules

### `orchkit.records`

Plain records used by the other modules:

- `Status`: the run states `running`, `blocked`, `blocked_api`, `queued`,
  `booting`, `pr_open`, `done`, `failed`, `canceled` and `unknown`.
- `IssueStatus`: the issue states `open`, `resolved` and `closed`.
- `parse_issue_status`: reads an issue status. An empty or unknown value
  gives `open`.
- `Run`: a run record. Its `short_id` is the first six hex digits of the
  SHA-256 hash of `issue_id#run_id`.
- `RunRow` and `IssueRow`: one line each of the runs table and the issues
  table.
- `ListRunsFilter`: selection criteria for runs.

### `orchkit.sorting`

- `SortKey`: the sort keys `name`, `updated` and `status`.
- `parse_sort_key(value, fallback)`: reads a key. `id` is accepted as
  another name for `name`. An empty value gives the fallback. An unknown
  value raises `ValueError`.
- `next_sort_key`: moves to the next key in the cycle name → updated →
  status.
- `sort_run_rows` and `sort_issue_rows`: sort stably in place, then
  renumber `index` from 1.
- `sort_runs`: sorts `Run` objects stably in place. Any `None` entries go
  to the end.

With `updated`, newer items come first and items with no time come last.
With `status`, items are ordered by `run_status_rank` or
`issue_status_rank`.

### `orchkit.run_filter`

`RunFilter` selects `RunRow`s. Each criterion is optional:

- a set of statuses; by default, the statuses of runs still in progress
- agent
- issue text, matched as a substring without regard to case
- an issue regex, set as `issue_regex`
- merge state
- whether there is a pull request (`has` / `none`)
- issue status
- `updated_within`, a `timedelta`

The filter also has these methods:

- `filter_rows(rows, now)`: returns the rows that match.
- `summary()`: gives a one-line description such as
  `filter: status=active agent=codex`.
- `is_default()`: tells whether the filter is the default one.
- `clone()` and `normalized()`: return copies.

Helpers:

- `compile_issue_query`: turns `/pattern/` into a case-insensitive regex.
- `parse_filter_duration`: reads values such as `90m`, `24h`, `7d` and
  `2w`.
- `new_run_filter`
- `default_run_filter`
- `status_slice`
- `reindex_run_rows`

### `orchkit.display`

These functions give short, fixed-width forms for table cells:

- `format_topic`
- `format_issue_topic`
- `format_branch_display`
- `format_worktree_display`
- `truncate_with_ellipsis`
- `truncate_leading`
- `shorten_path`
- `abbreviate_home`

### `orchkit.settings`

`UISettings` holds the monitor settings: the run sort, the issue sort, and
whether resolved and closed issues are shown. The settings are kept in
`monitor-settings.yaml` inside the `.orch` directory.

- `load_ui_settings`: reads the file. A missing or unreadable file gives
  the defaults, and an invalid sort key falls back to its default.
- `save_ui_settings`: writes the file and creates the directory if needed.
- `get_orch_dir`: returns the parent of a vault path.

### `orchkit.styles`

`default_styles()` returns the dashboard colour scheme as `rich.style.Style`
objects. It covers the box, title, header and selected-row styles, one style
for each run status, and styles for the "alive" column and for pull-request
states.

### `orchkit.tmux`

Thin wrappers that run the `tmux` program. They cover:

- sessions
- windows
- panes
- options
- sending keys
- capturing pane content
- `agent_alive`, which tells whether a session's panes run anything other
  than a shell

Failed commands raise `TmuxError`. `wait_for_ready` raises `TimeoutError`.
The listing functions return an empty result when no tmux server is
running.

### `orchkit.pr_cache`

These functions find pull requests through the GitHub CLI (`gh`):

- `lookup_info(repo_root, branch)`: asks `gh` directly.
- `populate_run_info(runs, repo_root)`: fills in `pr_url` on runs and
  returns a dict of `PRInfo` keyed by branch.

`populate_run_info` keeps its answers in a JSON cache for each repository,
stored in the user cache directory (see `cache_path`). A found PR is cached
for 24 hours and a miss for 30 seconds. The function calls `gh` for at most
three branches per call, and not again within 30 seconds of the last fetch.

## Example

```python
from datetime import datetime, timezone

from orchkit.run_filter import default_run_filter, parse_filter_duration
from orchkit.sorting import SortKey, sort_run_rows

rows = [...]  # RunRow objects built from your runs
flt = default_run_filter()
flt.agent = "codex"
flt.updated_within_raw = "7d"
flt.updated_within = parse_filter_duration(flt.updated_within_raw)

visible = flt.filter_rows(rows, datetime.now(timezone.utc))
sort_run_rows(visible, SortKey.STATUS)
print(flt.summary())
```

## What it does not do

`orchkit` is a library. It does not provide:

- a command-line program
- an interactive dashboard screen
- storage for issues and runs. `ListRunsFilter` is only a record, and
  reading and writing run files is left to the caller.
- git inspection. The merge state shown in `RunRow.merged` must be worked
  out by the caller.