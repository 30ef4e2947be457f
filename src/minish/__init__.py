"""minish - a small interactive command shell with history and completion."""

__version__ = "0.3.0"

# Re-export core components for convenience
from .arguments import CommandArguments
from .completion import CompletionEngine
from .config import ShellConfig, configure_logging
from .exceptions import (
    ConfigError,
    HistoryFormatError,
    ProcessLaunchError,
    SettingsError,
    ShellError,
    ShellWarning,
)
from .history import CommandHistory
from .line_editor import CommandLine, LineEditor
from .shell import CommandShell, DispatchResult, ShellMode

__all__ = [
    "__version__",
    # Core
    "CommandShell",
    "CommandLine",
    "DispatchResult",
    "ShellMode",
    "LineEditor",
    "CommandArguments",
    "CommandHistory",
    "CompletionEngine",
    # Config
    "ShellConfig",
    "configure_logging",
    # Exceptions
    "ShellError",
    "ConfigError",
    "ShellWarning",
    "ProcessLaunchError",
    "HistoryFormatError",
    "SettingsError",
]
