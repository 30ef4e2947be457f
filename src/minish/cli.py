"""CLI interface for minish."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from minish import __version__
from minish.config import ShellConfig, configure_logging
from minish.exceptions import ConfigError, SettingsError
from minish.history import CommandHistory
from minish.settings import JsonSettingsFile
from minish.ui import MessageType, show_message

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="minish",
    help="minish - a small interactive command shell.",
    no_args_is_help=False,
    invoke_without_command=True,
)
console = Console(highlight=False)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"minish version {__version__}")
        raise typer.Exit()


def _load_config(config_file: Path | None, settings_file: Path | None) -> ShellConfig:
    try:
        config = ShellConfig.from_file(config_file or ShellConfig.default_path())
    except ConfigError as e:
        show_message(console, str(e), MessageType.ERROR)
        raise typer.Exit(1) from None
    if settings_file is not None:
        config.settings_file = settings_file
    return config


ConfigOption = Annotated[
    Path | None,
    typer.Option("--config", "-c", help="Config file (default: ~/.config/minish/config.toml)"),
]
SettingsOption = Annotated[
    Path | None,
    typer.Option("--settings", help="Settings file holding the persisted history"),
]


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit",
        ),
    ] = False,
    config_file: ConfigOption = None,
    settings_file: SettingsOption = None,
    prompt: Annotated[
        str | None, typer.Option("--prompt", "-p", help="Prompt format, {cwd} is the directory")
    ] = None,
    log_level: Annotated[
        str | None, typer.Option("--log-level", "-l", help="Log level (debug, info, warning...)")
    ] = None,
) -> None:
    """Start the interactive shell."""
    if ctx.invoked_subcommand is not None:
        return

    config = _load_config(config_file, settings_file)
    overrides = {}
    if prompt is not None:
        overrides["prompt_format"] = prompt
    if log_level is not None:
        overrides["log_level"] = log_level
    if overrides:
        try:
            config = ShellConfig(**{**config.model_dump(), **overrides})
        except ValueError as e:
            show_message(console, f"Invalid option: {e}", MessageType.ERROR)
            raise typer.Exit(1) from None
    configure_logging(config)

    from minish.shell import CommandShell

    logger.debug("Starting shell with settings %s", config.settings_file)
    CommandShell(config, console=console).run()


@app.command()
def history(
    config_file: ConfigOption = None,
    settings_file: SettingsOption = None,
    clear: Annotated[
        bool, typer.Option("--clear", help="Remove the persisted history")
    ] = False,
) -> None:
    """Show or clear the persisted command history."""
    config = _load_config(config_file, settings_file)
    settings = JsonSettingsFile(config.settings_file)

    if clear:
        settings.set(config.history_key, None)
        try:
            settings.write()
        except SettingsError as e:
            show_message(console, str(e), MessageType.ERROR)
            raise typer.Exit(1) from None
        show_message(console, "History cleared.", MessageType.NOTICE)
        return

    entries = CommandHistory.from_base64(
        settings.get(config.history_key), max_entries=config.history_max_entries
    )
    show_message(console, entries.format() or "The list is empty.")


if __name__ == "__main__":
    app()
