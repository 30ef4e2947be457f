"""Errors raised inside the shell.

Everything here derives from :class:`ShellError`, which carries a context
dict for diagnostics and is what the command dispatch boundary reports.
"""

from __future__ import annotations

import logging
from typing import Any

logger = logging.getLogger(__name__)


class ShellError(Exception):
    """Base class for shell faults.

    Attributes:
        message: Text shown to the user
        context: Key/value details for the debug log
    """

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}
        self._log_error()

    def _log_error(self) -> None:
        """Record the error at debug level; handlers decide what the user sees."""
        logger.debug(
            "%s: %s",
            type(self).__name__,
            self.message,
            extra={"error_context": self.context},
        )

    def __str__(self) -> str:
        if not self.context:
            return self.message
        details = ", ".join(f"{key}={value!r}" for key, value in self.context.items())
        return f"{self.message} [{details}]"


class ConfigError(ShellError):
    """Raised for configuration errors.

    Examples:
        - Malformed config file
        - Invalid log level
    """


class ShellWarning(ShellError):
    """Raised by built-in commands when the user referenced something missing.

    Rendered as a warning line; the shell keeps running.

    Examples:
        - ``cat`` of a file that does not exist
        - ``cd`` or ``ls`` of a directory that does not exist
    """

    def __init__(
        self,
        message: str,
        path: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        ctx = context or {}
        if path is not None:
            ctx["path"] = path
        super().__init__(message, ctx)
        self.path = path

    def __str__(self) -> str:
        # Shown to the user verbatim.
        return self.message


class ProcessLaunchError(ShellError):
    """Raised when an external process cannot be started or waited on.

    Attributes:
        executable: The program that failed to start
        original_error: The underlying OS error
    """

    def __init__(
        self,
        message: str,
        executable: str | None = None,
        original_error: Exception | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        ctx = context or {}
        if executable:
            ctx["executable"] = executable
        if original_error:
            ctx["original_error"] = str(original_error)
        super().__init__(message, ctx)
        self.executable = executable
        self.original_error = original_error


class HistoryFormatError(ShellError):
    """Raised when serialized history cannot be decoded."""


class SettingsError(ShellError):
    """Raised when the settings store cannot be written."""
