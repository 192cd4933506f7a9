"""Pull request lookups through the GitHub CLI, with an on-disk cache."""

from __future__ import annotations

import hashlib
import json
import os
import re
import shutil
import subprocess
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

import platformdirs

from orchkit.records import Run

CACHE_HIT_TTL = timedelta(hours=24)
CACHE_MISS_TTL = timedelta(seconds=30)
CACHE_MIN_FETCH_INTERVAL = timedelta(seconds=30)
CACHE_MAX_FETCHES = 3

_ZERO_TIME = "0001-01-01T00:00:00Z"
_FRACTION = re.compile(r"\.(\d+)")


@dataclass
class PRInfo:
    """Details of a pull request."""

    url: str = ""
    number: int = 0
    state: str = ""  # OPEN, MERGED or CLOSED


@dataclass
class _CacheEntry:
    url: str = ""
    number: int = 0
    state: str = ""
    checked_at: datetime | None = None

    def to_info(self) -> PRInfo:
        return PRInfo(url=self.url, number=self.number, state=self.state)


@dataclass
class _Cache:
    last_fetch: datetime | None = None
    entries: dict[str, _CacheEntry] = field(default_factory=dict)


def _format_time(moment: datetime | None) -> str:
    if moment is None:
        return _ZERO_TIME
    return moment.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def _parse_time(text: Any) -> datetime | None:
    if not isinstance(text, str):
        raise ValueError("time must be a string")
    if text.startswith("0001-01-01T00:00:00"):
        return None
    normalized = text.replace("Z", "+00:00").replace("z", "+00:00")
    normalized = _FRACTION.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), normalized, count=1)
    moment = datetime.fromisoformat(normalized)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment


def cache_path(repo_root: str) -> Path:
    """Location of the cache file for a repository."""
    directory = Path(platformdirs.user_cache_dir("orch", appauthor=False))
    digest = hashlib.sha256(repo_root.encode()).hexdigest()
    return directory / f"pr_cache_{digest}.json"


def _load_cache(path: Path) -> _Cache:
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, ValueError):
        return _Cache()
    try:
        if not isinstance(raw, dict):
            raise ValueError("cache is not an object")
        last_fetch = _parse_time(raw.get("last_fetch", _ZERO_TIME))
        entries: dict[str, _CacheEntry] = {}
        for branch, item in (raw.get("entries") or {}).items():
            if not isinstance(item, dict):
                raise ValueError("cache entry is not an object")
            entries[branch] = _CacheEntry(
                url=str(item.get("url", "")),
                number=int(item.get("number", 0)),
                state=str(item.get("state", "")),
                checked_at=_parse_time(item.get("checked_at", _ZERO_TIME)),
            )
    except (AttributeError, TypeError, ValueError):
        return _Cache()
    return _Cache(last_fetch=last_fetch, entries=entries)


def _save_cache(path: Path, cache: _Cache) -> None:
    entries: dict[str, dict[str, Any]] = {}
    for branch, entry in cache.entries.items():
        item: dict[str, Any] = {}
        if entry.url:
            item["url"] = entry.url
        if entry.number:
            item["number"] = entry.number
        if entry.state:
            item["state"] = entry.state
        item["checked_at"] = _format_time(entry.checked_at)
        entries[branch] = item
    document = {"last_fetch": _format_time(cache.last_fetch), "entries": entries}
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_name(path.name + ".tmp")
        tmp.write_text(json.dumps(document), encoding="utf-8")
        os.replace(tmp, path)
    except OSError:
        pass


def _needs_lookup(run: Run | None) -> bool:
    return run is not None and not run.pr_url and bool(run.branch)


def _apply_cached_info(
    runs: Sequence[Run | None], cache: _Cache, now: datetime, info_map: dict[str, PRInfo]
) -> None:
    for run in runs:
        if not _needs_lookup(run):
            continue
        entry = cache.entries.get(run.branch)
        if entry is None or not entry.url:
            continue
        if entry.checked_at is not None and now - entry.checked_at > CACHE_HIT_TTL:
            continue
        run.pr_url = entry.url
        info_map[run.branch] = entry.to_info()


def _query_gh(repo_root: str, branch: str) -> PRInfo | None:
    result = subprocess.run(
        [
            "gh", "pr", "list",
            "--head", branch,
            "--state", "all",
            "--json", "url,number,state",
            "--limit", "1",
        ],
        cwd=repo_root or None,
        capture_output=True,
        text=True,
        check=True,
    )
    prs = json.loads(result.stdout)
    if not isinstance(prs, list):
        raise ValueError("unexpected gh output")
    if not prs:
        return None
    first = prs[0]
    return PRInfo(
        url=str(first.get("url", "")),
        number=int(first.get("number", 0)),
        state=str(first.get("state", "")),
    )


def lookup_info(repo_root: str, branch: str) -> PRInfo | None:
    """Return PR info for a branch, or None when it has no pull request.

    An empty repo_root runs the lookup in the current directory.
    Raises ValueError for an empty branch and FileNotFoundError when gh is missing.
    """
    if not (branch or "").strip():
        raise ValueError("branch is required")
    if shutil.which("gh") is None:
        raise FileNotFoundError("gh: executable file not found")
    return _query_gh(repo_root, branch)


def populate_run_info(runs: Sequence[Run | None], repo_root: str) -> dict[str, PRInfo]:
    """Fill in PR URLs on runs and return PR info keyed by branch.

    Cached answers are used first; at most a few branches are looked up per
    call, and not more often than the minimum fetch interval.
    """
    info_map: dict[str, PRInfo] = {}
    if not runs or not repo_root or shutil.which("gh") is None:
        return info_map

    path = cache_path(repo_root)
    cache = _load_cache(path)
    now = datetime.now(timezone.utc)
    _apply_cached_info(runs, cache, now, info_map)

    if cache.last_fetch is not None and now - cache.last_fetch < CACHE_MIN_FETCH_INTERVAL:
        return info_map

    dirty = False
    fetches = 0
    for run in runs:
        if not _needs_lookup(run) or run.branch in info_map:
            continue

        entry = cache.entries.get(run.branch)
        if entry is not None:
            ttl = CACHE_HIT_TTL if entry.url else CACHE_MISS_TTL
            if entry.checked_at is not None and now - entry.checked_at < ttl:
                if entry.url:
                    run.pr_url = entry.url
                    info_map[run.branch] = entry.to_info()
                continue

        if fetches >= CACHE_MAX_FETCHES:
            break

        try:
            info = _query_gh(repo_root, run.branch)
        except (OSError, subprocess.SubprocessError, ValueError, TypeError, AttributeError):
            info = None
        fetch_time = datetime.now(timezone.utc)
        cache.last_fetch = fetch_time
        fetches += 1
        dirty = True

        if info is None:
            cache.entries[run.branch] = _CacheEntry(checked_at=fetch_time)
            continue

        cache.entries[run.branch] = _CacheEntry(
            url=info.url, number=info.number, state=info.state, checked_at=fetch_time
        )
        if info.url:
            run.pr_url = info.url
            info_map[run.branch] = info

    if dirty:
        _save_cache(path, cache)
    return info_map