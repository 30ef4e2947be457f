"""Tests for launching external processes."""

from __future__ import annotations

import sys

import pytest

from minish.exceptions import ProcessLaunchError
from minish.process import ProcessLauncher, system_interpreter


class TestSystemInterpreter:
    """Tests for building the interpreter command."""

    def test_posix(self, monkeypatch):
        monkeypatch.setattr("minish.process.os.name", "posix")
        monkeypatch.setenv("SHELL", "/bin/zsh")
        assert system_interpreter("ls | wc") == ["/bin/zsh", "-c", "ls | wc"]

    def test_posix_default(self, monkeypatch):
        monkeypatch.setattr("minish.process.os.name", "posix")
        monkeypatch.delenv("SHELL", raising=False)
        assert system_interpreter("x")[0] == "/bin/sh"

    def test_windows(self, monkeypatch):
        monkeypatch.setattr("minish.process.os.name", "nt")
        monkeypatch.setenv("COMSPEC", "C:\\Windows\\cmd.exe")
        assert system_interpreter("dir") == ["C:\\Windows\\cmd.exe", "/c", "dir"]

    def test_explicit_interpreter(self):
        assert system_interpreter("x", "/opt/sh")[0] == "/opt/sh"


class TestProcessLauncher:
    """Tests for spawning real programs."""

    def test_which(self):
        launcher = ProcessLauncher()
        assert launcher.which("") is None
        assert launcher.which("zzz-not-a-command") is None

    def test_redirected_output(self):
        out: list[str] = []
        err: list[str] = []
        handle = ProcessLauncher().spawn(
            sys.executable,
            ["-c", "import sys; print('hello'); print('oops', file=sys.stderr); sys.exit(3)"],
            redirect=True,
            on_stdout=out.append,
            on_stderr=err.append,
        )
        assert handle.wait() == 3
        assert out == ["hello"]
        assert err == ["oops"]

    def test_missing_executable(self, tmp_path):
        with pytest.raises(ProcessLaunchError) as exc_info:
            ProcessLauncher().spawn(str(tmp_path / "missing"))
        assert exc_info.value.executable == str(tmp_path / "missing")
