"""External process launching with optional line-oriented output capture."""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import threading
from collections.abc import Callable, Sequence
from typing import IO

from minish.exceptions import ProcessLaunchError

logger = logging.getLogger(__name__)

OutputCallback = Callable[[str], None]


def system_interpreter(line: str, interpreter: str | None = None) -> list[str]:
    """Build the argv that hands a raw command line to the system shell."""
    if os.name == "nt":
        return [interpreter or os.environ.get("COMSPEC", "cmd.exe"), "/c", line]
    return [interpreter or os.environ.get("SHELL", "/bin/sh"), "-c", line]


def _pump(stream: IO[str], callback: OutputCallback) -> None:
    with stream:
        for line in stream:
            callback(line.rstrip("\r\n"))


class ProcessHandle:
    """A started process and the threads draining its output."""

    def __init__(self, process: subprocess.Popen, readers: list[threading.Thread]) -> None:
        self._process = process
        self._readers = readers

    @property
    def pid(self) -> int:
        return self._process.pid

    def wait(self) -> int:
        """Block until the process exits and all its output is delivered."""
        try:
            code = self._process.wait()
        except OSError as e:
            raise ProcessLaunchError(
                f"Waiting for process failed: {e}", original_error=e
            ) from e
        for reader in self._readers:
            reader.join()
        return code


class ProcessLauncher:
    """Starts external programs for the shell."""

    def which(self, name: str) -> str | None:
        """Resolve a command name through the search path."""
        if not name:
            return None
        return shutil.which(name)

    def spawn(
        self,
        executable: str,
        args: Sequence[str] = (),
        redirect: bool = False,
        on_stdout: OutputCallback | None = None,
        on_stderr: OutputCallback | None = None,
    ) -> ProcessHandle:
        """Start ``executable``.

        With ``redirect``, standard output and error are read line by line on
        background threads and passed to the callbacks; otherwise the child
        shares the shell's terminal.
        """
        argv = [executable, *args]
        pipe = subprocess.PIPE if redirect else None
        try:
            process = subprocess.Popen(
                argv,
                stdout=pipe,
                stderr=pipe,
                text=True if redirect else None,
                encoding="utf-8" if redirect else None,
                errors="replace" if redirect else None,
            )
        except (OSError, ValueError) as e:
            raise ProcessLaunchError(
                f"Cannot start {executable}: {e}", executable=executable, original_error=e
            ) from e

        logger.debug("Started %s (pid %s, redirect=%s)", argv, process.pid, redirect)
        readers: list[threading.Thread] = []
        if redirect:
            for stream, callback, name in (
                (process.stdout, on_stdout, "stdout"),
                (process.stderr, on_stderr, "stderr"),
            ):
                if stream is None:
                    continue
                reader = threading.Thread(
                    target=_pump,
                    args=(stream, callback or (lambda _line: None)),
                    name=f"minish-{name}-{process.pid}",
                    daemon=True,
                )
                reader.start()
                readers.append(reader)
        return ProcessHandle(process, readers)
