"""Key/value settings store used to persist shell state between sessions."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Protocol, runtime_checkable

from minish.exceptions import SettingsError

logger = logging.getLogger(__name__)


@runtime_checkable
class SettingsStore(Protocol):
    """String settings addressed by key, persisted on :meth:`write`."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str | None) -> None: ...

    def write(self) -> None: ...


def default_settings_path() -> Path:
    """Get path to the user settings file."""
    return Path.home() / ".minish" / "settings.json"


class JsonSettingsFile:
    """Settings kept as a flat JSON object in a file."""

    def __init__(self, path: Path | None = None) -> None:
        self.path = path or default_settings_path()
        self._data: dict[str, str] = {}
        self.read()

    def read(self) -> None:
        """Load settings from file. A missing or unreadable file reads as empty."""
        self._data = {}
        if not self.path.exists():
            return
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("Ignoring unreadable settings file %s: %s", self.path, e)
            return
        if isinstance(data, dict):
            self._data = {str(k): str(v) for k, v in data.items() if v is not None}

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str | None) -> None:
        """Set a key; ``None`` removes it."""
        if value is None:
            self._data.pop(key, None)
        else:
            self._data[key] = value

    def write(self) -> None:
        """Save settings to file."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump(self._data, f, indent=2)
        except OSError as e:
            raise SettingsError(f"Cannot write settings: {e}", {"path": str(self.path)}) from e

    def __contains__(self, key: object) -> bool:
        return key in self._data
