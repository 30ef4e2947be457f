"""Configuration management for minish."""

import json
import logging
import tomllib
from datetime import datetime, timezone
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError, field_validator

from minish.exceptions import ConfigError
from minish.settings import default_settings_path

_LEVEL_NAMES = {
    "critical": logging.CRITICAL,
    "error": logging.ERROR,
    "warning": logging.WARNING,
    "warn": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
}

# Attributes every record has; anything else arrived through ``extra``.
_STANDARD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime", "taskName"}


def level_number(name: str) -> int:
    """Translate a level name such as ``"debug"`` to its logging constant."""
    try:
        return _LEVEL_NAMES[name.strip().lower()]
    except KeyError:
        choices = ", ".join(n for n in _LEVEL_NAMES if n != "warn")
        raise ValueError(f"Unknown log level {name!r}, expected one of: {choices}") from None


def _normalize_level(name: str) -> str:
    level_number(name)
    return name.strip().lower()


class JsonLogFormatter(logging.Formatter):
    """One JSON object per record, with ``extra`` fields inlined."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, value in vars(record).items():
            if key in _STANDARD_ATTRS:
                continue
            plain = value is None or isinstance(value, (str, int, float, bool))
            entry[key] = value if plain else repr(value)
        if record.exc_info:
            entry["traceback"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False)


def configure_logging(config: "ShellConfig") -> None:
    """Send all logging through one JSON handler at the configured levels."""
    handler: logging.Handler
    if config.log_file:
        handler = logging.FileHandler(config.log_file, encoding="utf-8")
    else:
        handler = logging.StreamHandler()
    handler.setFormatter(JsonLogFormatter())

    root = logging.getLogger()
    for old in list(root.handlers):
        root.removeHandler(old)
    root.addHandler(handler)

    # The root must let through the most verbose component level.
    levels = [level_number(config.log_level)]
    levels += [level_number(level) for level in config.log_levels.values()]
    root.setLevel(min(levels))
    for name, level in config.log_levels.items():
        logging.getLogger(name).setLevel(level_number(level))


class ShellConfig(BaseModel):
    """Main configuration for the interactive shell."""

    header: str = Field(default="minish", description="Banner shown when the shell starts")
    prompt_format: str = Field(
        default="minish {cwd}> ",
        description="Prompt format, {cwd} is replaced with the working directory",
    )

    # Persistence
    settings_file: Path = Field(
        default_factory=default_settings_path,
        description="JSON settings file holding persisted shell state",
    )
    history_key: str = Field(default="history", description="Settings key for the history")
    history_max_entries: int = Field(
        default=1000, ge=1, description="Maximum number of history lines kept"
    )

    # Completion
    peek_max: int = Field(
        default=255, ge=1, description="Maximum number of completions shown in the preview"
    )
    peek_style: str = Field(default="ansigreen", description="Style of the completion preview")
    page_commands: list[str] = Field(
        default_factory=lambda: ["man"],
        description="Commands whose argument completes against command names",
    )

    # Execution
    redirect_output: bool = Field(
        default=True,
        description="Capture output of programs found on the search path",
    )
    interpreter: str | None = Field(
        default=None,
        description="System interpreter for unknown commands ($SHELL or cmd.exe when unset)",
    )

    # Display
    prompt_style: str = Field(default="ansigray", description="Style of the prompt")

    # Logging
    log_level: str = Field(default="warning", description="Log level")
    log_levels: dict[str, str] = Field(
        default_factory=dict,
        description="Per-component log levels (e.g., {'minish.shell': 'debug'})",
    )
    log_file: str | None = Field(
        default=None,
        description="Write JSON log lines to this file instead of stderr",
    )

    @field_validator("prompt_format")
    @classmethod
    def _validate_prompt_format(cls, value: str) -> str:
        try:
            value.format(cwd="")
        except (KeyError, IndexError, ValueError) as e:
            raise ValueError(f"Invalid prompt_format: {e}") from e
        return value

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, value: str) -> str:
        return _normalize_level(value)

    @field_validator("log_levels")
    @classmethod
    def _validate_log_levels(cls, value: dict[str, str]) -> dict[str, str]:
        return {name: _normalize_level(level) for name, level in value.items()}

    @classmethod
    def from_file(cls, path: str | Path) -> "ShellConfig":
        """Load configuration from a TOML file. A missing file gives defaults."""
        path = Path(path)
        try:
            raw = path.read_bytes()
        except FileNotFoundError:
            return cls()

        try:
            return cls.model_validate(tomllib.loads(raw.decode("utf-8")))
        except (tomllib.TOMLDecodeError, UnicodeDecodeError, ValidationError) as e:
            raise ConfigError(f"Invalid config file: {e}", {"path": str(path)}) from e

    @classmethod
    def default_path(cls) -> Path:
        return Path.home() / ".config" / "minish" / "config.toml"

    def format_prompt(self, cwd: str) -> str:
        return self.prompt_format.format(cwd=cwd)
