"""
Bridge between legacy `theme` objects and the custom-property namespace.

Legacy keys with a namespace (`colors` -> `--color`) are written into the
ThemeNamespace property by property, so native CSS values keep winning even
for a single tuple companion. Keys without one (`typography`, `aria`, ...)
live in a side tree that only the `theme()` accessor reads.

Keys are processed in declaration order. A theme function sees every key
processed before it and nothing after it.
"""

from __future__ import annotations

import copy
import logging
import re
from collections.abc import Mapping
from typing import Any

from twcompat.paths import get_path, parse_path, scalar
from twcompat.settings import DEFAULT_SETTINGS, CompatSettings, ThemeKeySpec
from twcompat.values import (
    MISSING,
    ValueKind,
    as_theme_tuple,
    classify,
    is_scalar,
    merge_values,
    realize,
    walk_leaves,
)

from .namespace import CustomPropertyDeclaration, ThemeNamespace, ThemeSource, kebab_case

logger = logging.getLogger(__name__)

_ALPHA_RE = re.compile(r"^(?P<path>[^\[]*(?:\[[^\]]*\][^\[]*)*?)\s*/\s*(?P<alpha>[\d.]+%?)$")


def with_alpha(color: Any, alpha: str) -> str:
    """Apply an opacity modifier (`50%`, `0.5`) to a color value."""
    if alpha.endswith("%"):
        percent = alpha
    else:
        percent = f"{float(alpha) * 100:g}%"
    if percent == "100%":
        return str(color)
    return f"color-mix(in oklab, {color} {percent}, transparent)"


def _css_value(value: Any) -> str | None:
    if isinstance(value, bool) or value is None:
        return None
    if is_scalar(value):
        return str(value)
    if isinstance(value, list | tuple) and value and all(
        is_scalar(item) and item is not None for item in value
    ):
        return ", ".join(str(item) for item in value)
    return None


def flatten_entries(spec: ThemeKeySpec, value: Mapping[str, Any]) -> list[tuple[str, str]]:
    """
    Turn one legacy key's mapping into custom-property declarations.

    Leaves of an unexpected shape are skipped.
    """
    declarations: list[tuple[str, str]] = []

    def visit(path: tuple[str, ...], leaf: Any) -> None:
        if not path or (len(path) > 1 and not spec.nested):
            return
        suffix = "-".join(part for part in path if part != "DEFAULT")
        name = f"{spec.namespace}-{suffix}" if suffix else spec.namespace

        kind = classify(leaf)
        if kind is ValueKind.TUPLE:
            pair = as_theme_tuple(leaf)
            primary = _css_value(pair.primary)
            if primary is not None:
                declarations.append((name, primary))
            for companion, companion_value in pair.companions.items():
                rendered = _css_value(companion_value)
                if rendered is not None:
                    declarations.append((f"{name}--{kebab_case(str(companion))}", rendered))
        elif kind in (ValueKind.SCALAR, ValueKind.SEQUENCE):
            rendered = _css_value(leaf)
            if rendered is not None:
                declarations.append((name, rendered))

    walk_leaves(value, visit)
    return declarations


class ThemeAccessor:
    """
    Read-only `theme()` function handed to theme functions and plugins.

    Example:
        accessor.theme("colors.primary")
        accessor.theme("fontSize.base[1].lineHeight")
        accessor.theme("colors.red / 50%")
    """

    def __init__(self, bridge: ThemeBridge):
        self._bridge = bridge

    def theme(self, path: str, default: Any = None) -> Any:
        alpha = None
        match = _ALPHA_RE.match(path)
        if match:
            path, alpha = match.group("path"), match.group("alpha")

        segments = parse_path(path.strip())
        if not segments:
            return default

        spec = self._bridge.settings.theme_keys.get(segments[0])
        if spec is not None:
            value = self._lookup_namespace(spec, segments[1:])
        else:
            value = get_path(self._bridge.legacy, segments, MISSING)
            if isinstance(value, Mapping | list):
                # Callers get their own copy; the side tree stays frozen.
                value = copy.deepcopy(value)

        if value is MISSING:
            return default
        if alpha is not None:
            return with_alpha(scalar(value), alpha)
        return value

    __call__ = theme

    def _lookup_namespace(self, spec: ThemeKeySpec, rest: list[str]) -> Any:
        view = self._bridge.namespace.namespace(spec.namespace)
        if not rest:
            return view or MISSING

        for split in range(len(rest), 0, -1):
            key = "-".join(rest[:split])
            if key in view:
                return get_path(view[key], rest[split:], MISSING)

        group = "-".join(rest) + "-"
        nested = {key[len(group) :]: value for key, value in view.items() if key.startswith(group)}
        return nested or MISSING


class ThemeBridge:
    """Applies legacy theme blocks to a ThemeNamespace."""

    def __init__(self, namespace: ThemeNamespace, settings: CompatSettings = DEFAULT_SETTINGS):
        self.namespace = namespace
        self.settings = settings
        # Resolved values of keys that have no custom-property namespace.
        self.legacy: dict[str, Any] = {}
        # Realized values each key received from config/plugins (no baseline).
        self.contributed: dict[str, Any] = {}
        self.accessor = ThemeAccessor(self)

    def apply(self, theme: Mapping[str, Any], source: ThemeSource = ThemeSource.CONFIG) -> None:
        """
        Resolve a `theme` block (bare keys plus `extend`) into the namespace.

        Args:
            theme: Merged legacy theme block
            source: Layer recorded on entries this block changes
        """
        if not isinstance(theme, Mapping):
            return
        extend = theme.get("extend", {})
        if not isinstance(extend, Mapping):
            extend = {}
        bare = {key: value for key, value in theme.items() if key != "extend"}

        order = [*bare, *(key for key in extend if key not in bare)]
        for key in order:
            self._apply_key(str(key), bare.get(key, MISSING), extend.get(key, MISSING), source)

    def extend(self, fragment: Mapping[str, Any], source: ThemeSource) -> None:
        self.apply({"extend": fragment}, source)

    def _current(self, key: str, spec: ThemeKeySpec | None) -> Any:
        if spec is not None:
            return self.namespace.namespace(spec.namespace)
        return self.legacy.get(key, MISSING)

    def _apply_key(self, key: str, replacement: Any, extension: Any, source: ThemeSource) -> None:
        spec = self.settings.theme_keys.get(key)
        contributed: Any = MISSING

        if replacement is not MISSING:
            value = realize(replacement, self.accessor)
            contributed = value
            if spec is not None and isinstance(value, Mapping):
                self.namespace.remove_defaults(spec.namespace)
        else:
            value = self._current(key, spec)

        if extension is not MISSING:
            realized = realize(extension, self.accessor)
            contributed = merge_values(contributed, realized)
            value = merge_values(value, realized)

        if contributed is not MISSING:
            self.contributed[key] = merge_values(self.contributed.get(key, MISSING), contributed)

        if spec is None:
            self.legacy[key] = value
            return
        if not isinstance(value, Mapping):
            return

        changed = 0
        for name, rendered in flatten_entries(spec, value):
            changed += self.namespace.set(name, rendered, source)
        logger.debug("theme.%s: %d custom properties changed (%s)", key, changed, source)


def resolve_namespace(
    theme: Mapping[str, Any],
    baseline: ThemeNamespace,
    settings: CompatSettings = DEFAULT_SETTINGS,
    source: ThemeSource = ThemeSource.CONFIG,
) -> ThemeNamespace:
    """
    Resolve a merged legacy theme on top of a copy of `baseline`.

    Returns:
        A new ThemeNamespace; `baseline` is left untouched
    """
    bridge = ThemeBridge(baseline.copy(), settings)
    bridge.apply(theme, source)
    return bridge.namespace


def emit(namespace: ThemeNamespace) -> list[CustomPropertyDeclaration]:
    """Custom-property declarations for every override entry."""
    return namespace.emit()


def to_css(declarations: list[CustomPropertyDeclaration], selector: str = ":root") -> str:
    if not declarations:
        return ""
    lines = [f"{selector} {{"]
    for name, value in declarations:
        lines.append(f"  {name}: {value};")
    lines.append("}")
    return "\n".join(lines) + "\n"


def flatten_color_palette(colors: Any) -> dict[str, Any]:
    """
    Flatten a nested color mapping into dash-joined scalar keys.

        {"slate": {"200": "#e2e8f0", "DEFAULT": "#64748b"}}
        -> {"slate-200": "#e2e8f0", "slate": "#64748b"}
    """
    flat: dict[str, Any] = {}
    if not isinstance(colors, Mapping):
        return flat
    for key, value in colors.items():
        if isinstance(value, Mapping):
            for child, color in flatten_color_palette(value).items():
                flat[str(key) if child == "DEFAULT" else f"{key}-{child}"] = color
        elif value is not None:
            flat[str(key)] = scalar(value)
    return flat
