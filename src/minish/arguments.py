"""Command argument parsing: positional arguments, switches and options."""

from __future__ import annotations

import os
import re
from collections.abc import Iterable, Iterator, Mapping

_DASH_SWITCH = re.compile(r"^(?:--|-)(.+)$")
_SLASH_SWITCH = re.compile(r"^/(.+)$")
_ALIAS_SEPARATORS = re.compile(r"[|, ]")


def _aliases(name: str) -> list[str]:
    return [alias for alias in name.split("|") if alias]


class PositionalArguments:
    """Positional arguments, queried without range checking."""

    def __init__(self, values: Iterable[str]) -> None:
        self._values = list(values)

    def __getitem__(self, index: int) -> str | None:
        if 0 <= index < len(self._values):
            return self._values[index]
        return None

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __repr__(self) -> str:
        return f"PositionalArguments({self._values!r})"


class Switches:
    """Switch names present on a command line."""

    def __init__(self, values: Iterable[str]) -> None:
        self._values = list(values)

    def __getitem__(self, name: str) -> bool:
        """Check a switch by name, or by aliases separated with ``|``."""
        return any(alias in self._values for alias in _aliases(name))

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self[name]

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)


class Options:
    """Value-taking switches, accessible by name or alias."""

    def __init__(self, values: Mapping[str, str]) -> None:
        self._values = dict(values)

    def __getitem__(self, name: str) -> str | None:
        for alias in _aliases(name):
            if alias in self._values:
                return self._values[alias]
        return None

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def items(self):
        return self._values.items()


class CommandArguments:
    """
    Parses command arguments into positional arguments, switches and options.

    Switches are written ``-x``, ``--x`` or ``/x``. A switch listed in
    ``options`` takes the following argument as its value. The slash form is
    only recognised where paths use backslashes, unless ``slash_switches`` is
    given explicitly.
    """

    def __init__(
        self,
        args: Iterable[str] | None = None,
        options: str | None = None,
        slash_switches: bool | None = None,
    ) -> None:
        self.raw: list[str] = list(args or [])
        if slash_switches is None:
            slash_switches = os.sep == "\\"
        marked = {m for m in _ALIAS_SEPARATORS.split(options or "") if m}

        positional: list[str] = []
        switches: list[str] = []
        values: dict[str, str] = {}
        items = iter(self.raw)
        for item in items:
            match = _DASH_SWITCH.match(item)
            if match is None and slash_switches:
                match = _SLASH_SWITCH.match(item)
            if match is None:
                positional.append(item)
                continue
            key = match.group(1)
            if key in marked:
                value = next(items, None)
                if value is not None and key not in values:
                    values[key] = value
            else:
                switches.append(key)

        self.positional = PositionalArguments(positional)
        self.switches = Switches(switches)
        self.options = Options(values)

    @property
    def is_empty(self) -> bool:
        return not self.raw

    def __repr__(self) -> str:
        return (
            f"CommandArguments(positional={list(self.positional)!r}, "
            f"switches={list(self.switches)!r}, options={dict(self.options.items())!r})"
        )
