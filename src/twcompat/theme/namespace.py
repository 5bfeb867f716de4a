"""
Custom-property theme store with provenance tracking.

Every entry remembers whether it is still the built-in baseline value
(`DEFAULT`) or was changed by CSS, config or a plugin (`OVERRIDE`), and
which layer changed it. Only overrides are emitted.

Tuple values are stored as a primary property plus one property per
companion, using a double dash:

    --font-size-base: 1rem;
    --font-size-base--line-height: 1.5rem;
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass
from enum import StrEnum
from typing import Any, NamedTuple

from twcompat.values import ThemeTuple


class Provenance(StrEnum):
    """Whether an entry still holds the baseline value."""

    DEFAULT = "default"
    OVERRIDE = "override"


class ThemeSource(StrEnum):
    """Layer that last wrote an entry."""

    BASELINE = "baseline"
    CSS = "css"
    CONFIG = "config"
    PLUGIN = "plugin"


@dataclass(frozen=True)
class ThemeEntry:
    value: str
    provenance: Provenance
    source: ThemeSource
    # Value declared by `@theme default`, if any
    baseline: str | None = None


class CustomPropertyDeclaration(NamedTuple):
    name: str
    value: str


def kebab_case(name: str) -> str:
    """lineHeight -> line-height"""
    return re.sub(r"(?<=[a-z0-9])([A-Z])", r"-\1", name).lower()


def camel_case(name: str) -> str:
    """line-height -> lineHeight"""
    head, *rest = name.split("-")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


class ThemeNamespace:
    """Ordered mapping of custom-property name to ThemeEntry."""

    def __init__(self) -> None:
        self._entries: dict[str, ThemeEntry] = {}

    # -- population -----------------------------------------------------------

    def add_default(self, name: str, value: str) -> None:
        """Declare a baseline value (`@theme default { ... }`)."""
        value = str(value)
        self._entries[name] = ThemeEntry(value, Provenance.DEFAULT, ThemeSource.BASELINE, value)

    def add_css(self, name: str, value: str) -> None:
        """Declare a native CSS value (`@theme { ... }`). CSS always wins."""
        existing = self._entries.get(name)
        baseline = existing.baseline if existing is not None else None
        self._entries[name] = ThemeEntry(str(value), Provenance.OVERRIDE, ThemeSource.CSS, baseline)

    def set(self, name: str, value: Any, source: ThemeSource) -> bool:
        """
        Write `value` from a non-CSS layer.

        CSS entries are never replaced and an unchanged value keeps its
        provenance. Writing the baseline value back restores `DEFAULT`.

        Returns:
            True if the entry changed
        """
        value = str(value)
        existing = self._entries.get(name)
        baseline = existing.baseline if existing is not None else None
        if existing is not None:
            if existing.source is ThemeSource.CSS or existing.value == value:
                return False
        if value == baseline:
            self._entries[name] = ThemeEntry(
                value, Provenance.DEFAULT, ThemeSource.BASELINE, baseline
            )
        else:
            self._entries[name] = ThemeEntry(value, Provenance.OVERRIDE, source, baseline)
        return True

    def remove_defaults(self, prefix: str) -> None:
        """Drop baseline entries under `prefix` (used when a key is replaced)."""
        for name in self.names_in(prefix):
            if self._entries[name].provenance is Provenance.DEFAULT:
                del self._entries[name]

    # -- queries --------------------------------------------------------------

    def get(self, name: str) -> ThemeEntry | None:
        return self._entries.get(name)

    def value(self, name: str, default: Any = None) -> Any:
        entry = self._entries.get(name)
        return entry.value if entry is not None else default

    def names_in(self, prefix: str) -> list[str]:
        return [
            name for name in self._entries if name == prefix or name.startswith(prefix + "-")
        ]

    def namespace(self, prefix: str) -> dict[str, Any]:
        """
        Legacy view of every entry under `prefix`.

        `--font-size-base` and `--font-size-base--line-height` become
        `{"base": ThemeTuple(primary, {"lineHeight": ...})}`; the bare
        prefix itself becomes the `DEFAULT` key.
        """
        order: list[str] = []
        primaries: dict[str, str] = {}
        companions: dict[str, dict[str, str]] = {}
        for name in self.names_in(prefix):
            rest = name[len(prefix) + 1 :] or "DEFAULT"
            key, _, companion = rest.partition("--")
            if key not in order:
                order.append(key)
            if companion:
                companions.setdefault(key, {})[camel_case(companion)] = self._entries[name].value
            else:
                primaries[key] = self._entries[name].value

        view: dict[str, Any] = {}
        for key in order:
            if key in companions:
                view[key] = ThemeTuple(primaries.get(key), companions[key])
            else:
                view[key] = primaries[key]
        return view

    def emit(self) -> list[CustomPropertyDeclaration]:
        """All override entries, in declaration order."""
        return [
            CustomPropertyDeclaration(name, entry.value)
            for name, entry in self._entries.items()
            if entry.provenance is Provenance.OVERRIDE
        ]

    def copy(self) -> ThemeNamespace:
        clone = ThemeNamespace()
        clone._entries = dict(self._entries)
        return clone

    def items(self) -> Iterator[tuple[str, ThemeEntry]]:
        return iter(self._entries.items())

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ThemeNamespace):
            return NotImplemented
        return list(self._entries.items()) == list(other._entries.items())

    def __repr__(self) -> str:
        return f"ThemeNamespace({len(self._entries)} entries)"
