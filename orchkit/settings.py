"""Persistent UI settings for the monitor."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

import yaml

from orchkit.sorting import SortKey, is_valid_sort_key

UI_SETTINGS_FILE = "monitor-settings.yaml"


@dataclass
class UISettings:
    """Monitor settings that survive restarts."""

    run_sort: SortKey = SortKey.UPDATED
    issue_sort: SortKey = SortKey.NAME
    show_resolved: bool = False
    show_closed: bool = True


def default_ui_settings() -> UISettings:
    """Return the default UI settings."""
    return UISettings()


def load_ui_settings(orch_dir: str | os.PathLike[str] | None) -> UISettings:
    """Load settings from the .orch directory, falling back to defaults."""
    settings = default_ui_settings()
    if not orch_dir:
        return settings

    try:
        text = (Path(orch_dir) / UI_SETTINGS_FILE).read_text(encoding="utf-8")
        loaded = yaml.safe_load(text)
    except (OSError, UnicodeDecodeError, yaml.YAMLError):
        return settings

    if loaded is None:
        loaded = {}
    if not isinstance(loaded, dict):
        return settings

    show_resolved = loaded.get("show_resolved")
    show_closed = loaded.get("show_closed")
    if any(v is not None and not isinstance(v, bool) for v in (show_resolved, show_closed)):
        return settings

    run_sort = loaded.get("run_sort")
    if is_valid_sort_key(run_sort):
        settings.run_sort = SortKey(run_sort)
    issue_sort = loaded.get("issue_sort")
    if is_valid_sort_key(issue_sort):
        settings.issue_sort = SortKey(issue_sort)
    settings.show_resolved = bool(show_resolved)
    settings.show_closed = bool(show_closed)
    return settings


def _key_text(key: SortKey | str | None) -> str:
    if isinstance(key, SortKey):
        return key.value
    return key or ""


def save_ui_settings(orch_dir: str | os.PathLike[str] | None, settings: UISettings) -> None:
    """Write settings into the .orch directory, creating it if needed."""
    if not orch_dir:
        return
    directory = Path(orch_dir)
    directory.mkdir(parents=True, exist_ok=True)

    document: dict[str, object] = {}
    if run_sort := _key_text(settings.run_sort):
        document["run_sort"] = run_sort
    if issue_sort := _key_text(settings.issue_sort):
        document["issue_sort"] = issue_sort
    document["show_resolved"] = bool(settings.show_resolved)
    document["show_closed"] = bool(settings.show_closed)

    (directory / UI_SETTINGS_FILE).write_text(
        yaml.safe_dump(document, sort_keys=False), encoding="utf-8"
    )


def get_orch_dir(vault_path: str | None) -> str:
    """Return the .orch directory that holds the given vault."""
    if not vault_path:
        return ""
    return os.path.normpath(os.path.dirname(vault_path))