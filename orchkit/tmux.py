"""Thin wrappers around the tmux command line."""

from __future__ import annotations

import os
import subprocess
import time
from dataclasses import dataclass, field

_SHELL_COMMANDS = frozenset(
    {
        "bash",
        "zsh",
        "sh",
        "fish",
        "ksh",
        "tcsh",
        "dash",
        "pwsh",
        "powershell",
        "cmd",
        "cmd.exe",
        "nu",
        "elvish",
    }
)

_ENTER_KEY = "Enter"
_POLL_INTERVAL = 0.2
_NO_SERVER = "no server running"


class TmuxError(Exception):
    """A tmux command failed."""

    def __init__(self, message: str, returncode: int | None = None, stderr: str = "") -> None:
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr or ""


@dataclass
class SessionConfig:
    """Settings for a new detached tmux session."""

    session_name: str
    work_dir: str = ""
    command: str = ""
    env: list[str] = field(default_factory=list)
    window_name: str = ""


@dataclass
class Window:
    """A tmux window."""

    index: int
    name: str
    id: str


@dataclass
class Pane:
    """A tmux pane."""

    id: str
    index: int
    title: str = ""
    command: str = ""


def _run(
    args: list[str],
    *,
    capture: bool = False,
    quiet: bool = False,
    env: dict[str, str] | None = None,
) -> str:
    """Run tmux with the given arguments; return stdout when captured."""
    if capture:
        stdout = stderr = subprocess.PIPE
    elif quiet:
        stdout = stderr = subprocess.DEVNULL
    else:
        stdout = stderr = None
    try:
        result = subprocess.run(
            ["tmux", *args],
            stdout=stdout,
            stderr=stderr,
            text=True,
            env=env,
            check=False,
        )
    except OSError as exc:
        raise TmuxError(f"tmux {args[0] if args else ''}: {exc}") from exc
    if result.returncode != 0:
        err_text = result.stderr if isinstance(result.stderr, str) else ""
        raise TmuxError(
            f"tmux {args[0] if args else ''} exited with status {result.returncode}",
            returncode=result.returncode,
            stderr=err_text,
        )
    return result.stdout if isinstance(result.stdout, str) else ""


def _lines(output: str) -> list[str]:
    return [line for line in output.strip().split("\n") if line]


def has_session(name: str) -> bool:
    """Return True if a session with this name exists."""
    try:
        _run(["has-session", "-t", name], quiet=True)
    except TmuxError:
        return False
    return True


def _merged_env(extra: list[str]) -> dict[str, str]:
    env = dict(os.environ)
    for entry in extra:
        key, sep, value = entry.partition("=")
        if sep:
            env[key] = value
    return env


def new_session(config: SessionConfig) -> None:
    """Create a detached session and send its command, if any."""
    args = ["new-session", "-d", "-s", config.session_name]
    if config.work_dir:
        args += ["-c", config.work_dir]
    if config.window_name:
        args += ["-n", config.window_name]
    try:
        _run(args, env=_merged_env(config.env))
    except TmuxError as exc:
        raise TmuxError(f"failed to create tmux session: {exc}", exc.returncode, exc.stderr) from exc
    if config.command:
        try:
            send_keys(config.session_name, config.command)
        except TmuxError as exc:
            raise TmuxError(
                f"failed to send command to session: {exc}", exc.returncode, exc.stderr
            ) from exc


def send_keys(session: str, keys: str) -> None:
    """Type keys literally into a session, then press Enter."""
    send_keys_literal(session, keys)
    send_text(session, _ENTER_KEY)


def send_keys_literal(session: str, keys: str) -> None:
    """Type keys literally, without interpreting key names or pressing Enter."""
    _run(["send-keys", "-t", session, "-l", keys])


def send_text(session: str, text: str) -> None:
    """Send keys to a session without pressing Enter."""
    _run(["send-keys", "-t", session, text])


def capture_pane(session: str, lines: int) -> str:
    """Return the last lines of a pane's content."""
    return _run(["capture-pane", "-t", session, "-p", "-S", f"-{lines}"], capture=True)


def wait_for_ready(session: str, pattern: str, timeout: float) -> None:
    """Poll a pane until the pattern appears; raise TimeoutError after timeout seconds."""
    if not pattern:
        return
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        try:
            content = capture_pane(session, 50)
        except TmuxError:
            time.sleep(_POLL_INTERVAL)
            continue
        if pattern in content:
            return
        time.sleep(_POLL_INTERVAL)
    raise TimeoutError(f"timeout waiting for agent to be ready (pattern: {pattern!r})")


def attach_session(session: str) -> None:
    """Attach the terminal to a session in the foreground."""
    _run(["attach-session", "-t", session])


def kill_session(session: str) -> None:
    """Kill a session."""
    _run(["kill-session", "-t", session])


def list_sessions() -> list[str]:
    """Return all session names; empty when no server is running."""
    try:
        output = _run(["list-sessions", "-F", "#{session_name}"], capture=True)
    except TmuxError as exc:
        if _NO_SERVER in exc.stderr:
            return []
        raise
    return _lines(output)


def new_window(session: str, name: str = "", work_dir: str = "", command: str = "") -> None:
    """Create a window in a session and send its command, if any."""
    args = ["new-window", "-t", session]
    if name:
        args += ["-n", name]
    if work_dir:
        args += ["-c", work_dir]
    _run(args)
    if command:
        target = f"{session}:{name}" if name else session
        send_keys(target, command)


def is_tmux_available() -> bool:
    """Return True if tmux can be run."""
    try:
        _run(["-V"], quiet=True)
    except TmuxError:
        return False
    return True


def is_inside_tmux() -> bool:
    """Return True when running inside a tmux session."""
    return bool(os.environ.get("TMUX"))


def list_windows(session: str) -> list[Window]:
    """Return the windows of a session; empty if it or the server is missing."""
    try:
        output = _run(
            ["list-windows", "-t", session, "-F", "#{window_index}:#{window_name}:#{window_id}"],
            capture=True,
        )
    except TmuxError as exc:
        if _NO_SERVER in exc.stderr or "can't find session" in exc.stderr:
            return []
        raise
    windows = []
    for line in _lines(output):
        parts = line.split(":", 2)
        if len(parts) != 3:
            continue
        try:
            index = int(parts[0])
        except ValueError:
            continue
        windows.append(Window(index=index, name=parts[1], id=parts[2]))
    return windows


def has_window(session: str, index: int) -> bool:
    """Return True if the session has a window at this index."""
    try:
        windows = list_windows(session)
    except TmuxError:
        return False
    return any(window.index == index for window in windows)


def list_panes(target: str) -> list[Pane]:
    """Return the panes of a window target such as session:window."""
    try:
        output = _run(
            [
                "list-panes",
                "-t",
                target,
                "-F",
                "#{pane_id}:#{pane_index}:#{pane_title}:#{pane_current_command}",
            ],
            capture=True,
        )
    except TmuxError as exc:
        if _NO_SERVER in exc.stderr or "can't find" in exc.stderr:
            return []
        raise
    panes = []
    for line in _lines(output):
        parts = line.split(":", 3)
        if len(parts) < 2:
            continue
        try:
            index = int(parts[1])
        except ValueError:
            continue
        panes.append(
            Pane(
                id=parts[0],
                index=index,
                title=parts[2] if len(parts) > 2 else "",
                command=parts[3] if len(parts) > 3 else "",
            )
        )
    return panes


def list_pane_commands() -> dict[str, list[str]]:
    """Return the foreground command of every pane, grouped by session."""
    try:
        output = _run(
            ["list-panes", "-a", "-F", "#{session_name}\t#{pane_current_command}"],
            capture=True,
        )
    except TmuxError as exc:
        if _NO_SERVER in exc.stderr:
            return {}
        raise
    commands: dict[str, list[str]] = {}
    for line in _lines(output):
        session, sep, command = line.partition("\t")
        if not sep:
            continue
        session = session.strip()
        if not session:
            continue
        commands.setdefault(session, []).append(command.strip())
    return commands


def _is_shell_command(command: str) -> bool:
    command = command.strip().lower()
    return not command or command in _SHELL_COMMANDS


def agent_alive(session: str, pane_commands: dict[str, list[str]] | None) -> tuple[bool, bool]:
    """Report (alive, known): whether a session runs a non-shell command."""
    if pane_commands is None:
        return False, False
    session = (session or "").strip()
    if not session:
        return False, False
    commands = pane_commands.get(session)
    if not commands:
        return False, True
    return any(not _is_shell_command(command) for command in commands), True


def split_window(target: str, vertical: bool, percent: int = 0) -> str:
    """Split a pane and return the new pane's ID."""
    args = ["split-window", "-d", "-t", target, "-P", "-F", "#{pane_id}"]
    args.append("-v" if vertical else "-h")
    if percent > 0:
        args += ["-p", str(percent)]
    return _run(args, capture=True).strip()


def kill_pane(target: str) -> None:
    """Kill a pane."""
    _run(["kill-pane", "-t", target])


def move_window(session: str, source: str, index: int) -> None:
    """Move a window of a session to a new index."""
    _run(["move-window", "-s", f"{session}:{source}", "-t", f"{session}:{index}"])


def join_pane(source: str, target: str) -> None:
    """Join a pane into another target."""
    _run(["join-pane", "-s", source, "-t", target])


def move_pane(source: str, target: str) -> None:
    """Move a pane to another target."""
    _run(["move-pane", "-s", source, "-t", target])


def swap_pane(source: str, target: str) -> None:
    """Swap two panes."""
    _run(["swap-pane", "-s", source, "-t", target])


def select_pane(target: str) -> None:
    """Focus a pane."""
    _run(["select-pane", "-t", target])


def set_pane_title(target: str, title: str) -> None:
    """Set a pane's title, then give focus back to the pane that had it."""
    try:
        current = _run(["display-message", "-p", "#{pane_id}"], capture=True).strip()
    except TmuxError:
        current = ""
    _run(["select-pane", "-t", target, "-T", title])
    if current and current != target:
        try:
            _run(["select-pane", "-t", current])
        except TmuxError:
            pass


def rename_window(session: str, index: int, name: str) -> None:
    """Rename a window of a session."""
    _run(["rename-window", "-t", f"{session}:{index}", name])


def link_window(source_session: str, source_window: int, target_session: str, target_index: int) -> None:
    """Link a window of one session into another."""
    _run(
        [
            "link-window",
            "-s",
            f"{source_session}:{source_window}",
            "-t",
            f"{target_session}:{target_index}",
        ]
    )


def link_window_by_id(window_id: str, target_session: str, target_index: int) -> None:
    """Link a window, given by ID, into a session."""
    _run(["link-window", "-s", window_id, "-t", f"{target_session}:{target_index}"])


def unlink_window(session: str, index: int) -> None:
    """Remove a window from a session."""
    _run(["unlink-window", "-t", f"{session}:{index}"])


def select_window(session: str, index: int) -> None:
    """Switch to a window of a session."""
    _run(["select-window", "-t", f"{session}:{index}"])


def current_session() -> str:
    """Return the name of the current session."""
    return _run(["display-message", "-p", "#{session_name}"], capture=True).strip()


def set_option(session: str, option: str, value: str) -> None:
    """Set a session option."""
    _run(["set-option", "-t", session, option, value])


def get_option(session: str, option: str) -> str:
    """Return the value of a session option."""
    return _run(["show-option", "-t", session, "-v", option], capture=True).strip()


def select_window_by_id(window_id: str) -> None:
    """Switch to a window by ID."""
    _run(["select-window", "-t", window_id])


def switch_client(session: str) -> None:
    """Switch the active client to a session."""
    _run(["switch-client", "-t", session])