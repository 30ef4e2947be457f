"""Shared fixtures: an in-memory screen, scripted keys and a fake launcher."""

from __future__ import annotations

import io
import threading
from collections import deque
from contextlib import contextmanager
from pathlib import Path

import pytest
from rich.console import Console

from minish.config import ShellConfig
from minish.keys import KeyEvent
from minish.settings import JsonSettingsFile
from minish.shell import CommandShell


class ScreenTerminal:
    """Character grid implementing the terminal interface.

    Rows grow on demand, so the screen never scrolls. A write that fills the
    last column leaves the cursor pending at the right edge like xterm does.
    """

    def __init__(self, width: int = 40, height: int = 12) -> None:
        self.lock = threading.RLock()
        self.width = width
        self.height = height
        self.rows: dict[int, list[str]] = {}
        self.row = 0
        self.col = 0
        self.writes: list[tuple[int, int, str, str | None]] = []
        self.clears = 0

    def _cells(self, row: int) -> list[str]:
        return self.rows.setdefault(row, [" "] * self.width)

    def write(self, text: str, style: str | None = None) -> None:
        with self.lock:
            self.writes.append((self.row, self.col, text, style))
            for ch in text:
                if ch == "\n":
                    self.row += 1
                    self.col = 0
                elif ch == "\r":
                    self.col = 0
                else:
                    if self.col >= self.width:
                        self.row += 1
                        self.col = 0
                    self._cells(self.row)[self.col] = ch
                    self.col += 1

    def write_at(self, row: int, col: int, text: str, style: str | None = None) -> None:
        with self.lock:
            self.set_cursor(row, col)
            self.write(text, style)

    def get_cursor(self) -> tuple[int, int]:
        return self.row, min(self.col, self.width - 1)

    def set_cursor(self, row: int, col: int) -> None:
        self.row = max(0, row)
        self.col = max(0, min(col, self.width - 1))

    def get_size(self) -> tuple[int, int]:
        return self.width, self.height

    def clear(self) -> None:
        with self.lock:
            self.rows = {}
            self.row = self.col = 0
            self.clears += 1

    def flush(self) -> None:
        pass

    def line(self, row: int) -> str:
        return "".join(self.rows.get(row, [])).rstrip()


class ScriptedKeys:
    """Key source that replays queued events, then reports end of input."""

    def __init__(self, events=()) -> None:
        self.events: deque[KeyEvent] = deque(events)
        self.raw_entered = 0
        self.cooked_entered = 0

    def feed(self, *events: KeyEvent) -> None:
        self.events.extend(events)

    def type(self, text: str) -> None:
        self.events.extend(KeyEvent.char(ch) for ch in text)

    @contextmanager
    def raw_mode(self):
        self.raw_entered += 1
        yield

    @contextmanager
    def cooked_mode(self):
        self.cooked_entered += 1
        yield

    def read_key(self) -> KeyEvent:
        if not self.events:
            raise EOFError("script exhausted")
        return self.events.popleft()


class FakeHandle:
    def __init__(self, code: int) -> None:
        self.code = code

    def wait(self) -> int:
        return self.code


class FakeLauncher:
    """Records spawns instead of starting programs."""

    def __init__(self, programs: dict[str, str] | None = None) -> None:
        self.programs = dict(programs or {})
        self.spawned: list[tuple[str, list[str], bool]] = []
        self.stdout: list[str] = []
        self.stderr: list[str] = []
        self.exit_code = 0
        self.error: Exception | None = None

    def which(self, name: str) -> str | None:
        return self.programs.get(name)

    def spawn(self, executable, args=(), redirect=False, on_stdout=None, on_stderr=None):
        if self.error is not None:
            raise self.error
        self.spawned.append((executable, list(args), redirect))
        if redirect:
            for line in self.stdout:
                on_stdout(line)
            for line in self.stderr:
                on_stderr(line)
        return FakeHandle(self.exit_code)


@pytest.fixture
def screen() -> ScreenTerminal:
    return ScreenTerminal()


@pytest.fixture
def keys() -> ScriptedKeys:
    return ScriptedKeys()


@pytest.fixture
def launcher() -> FakeLauncher:
    return FakeLauncher()


@pytest.fixture
def console() -> Console:
    return Console(file=io.StringIO(), width=100, color_system=None, highlight=False)


@pytest.fixture
def settings_path(tmp_path: Path) -> Path:
    return tmp_path / "state" / "settings.json"


@pytest.fixture
def config(settings_path: Path) -> ShellConfig:
    return ShellConfig(settings_file=settings_path, prompt_format="> ")


@pytest.fixture
def make_shell(config, screen, keys, console, launcher, settings_path):
    """Build a shell wired to the in-memory fakes."""

    def _make(**overrides) -> CommandShell:
        shell_config = overrides.pop("config", config)
        kwargs = {
            "terminal": screen,
            "keys": keys,
            "console": console,
            "settings": JsonSettingsFile(settings_path),
            "launcher": launcher,
        }
        kwargs.update(overrides)
        return CommandShell(shell_config, **kwargs)

    return _make
