"""
Config and preset merging.

A loaded config is flattened into an ordered list of layers, lowest
precedence first:

1. Presets (depth first, each preset's own presets before it)
2. Static config fragments declared by plugins
3. The config itself

The layers are then folded with `merge_config`. `theme.extend` fragments
accumulate across every layer; bare `theme` keys replace wholesale.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from twcompat.plugins import Plugin, normalize_plugin
from twcompat.values import MISSING, merge_values

logger = logging.getLogger(__name__)

ConfigTree = dict[str, Any]

# Keys collected by `extract_layers` instead of being merged.
_COLLECTED_KEYS = ("plugins", "presets", "content")


@dataclass(frozen=True)
class GlobEntry:
    """A content glob relative to the module that declared it."""

    base: str
    pattern: str


@dataclass
class ConfigLayers:
    """Configs, plugins and content gathered from one or more modules."""

    configs: list[Mapping[str, Any]] = field(default_factory=list)
    plugins: list[Plugin] = field(default_factory=list)
    content: list[GlobEntry | Mapping[str, Any]] = field(default_factory=list)


@dataclass
class MergedConfig:
    """Result of folding every layer into one tree."""

    tree: ConfigTree
    plugins: list[Plugin]
    content: list[GlobEntry | Mapping[str, Any]]

    @property
    def theme(self) -> Mapping[str, Any]:
        theme = self.tree.get("theme", {})
        return theme if isinstance(theme, Mapping) else {}

    @property
    def dark_mode(self) -> Any:
        return self.tree.get("darkMode")

    @property
    def globs(self) -> list[GlobEntry]:
        return [entry for entry in self.content if isinstance(entry, GlobEntry)]


def _sequence(value: Any) -> list[Any]:
    if isinstance(value, list | tuple):
        return list(value)
    return []


def _content_entries(content: Any, base: str) -> list[GlobEntry | Mapping[str, Any]]:
    files = content.get("files", []) if isinstance(content, Mapping) else content
    entries: list[GlobEntry | Mapping[str, Any]] = []
    for item in _sequence(files):
        if isinstance(item, str):
            entries.append(GlobEntry(base=base, pattern=item))
        elif isinstance(item, Mapping) and isinstance(item.get("pattern"), str):
            entries.append(GlobEntry(base=str(item.get("base", base)), pattern=item["pattern"]))
        elif isinstance(item, Mapping):
            # Raw content descriptors ({"raw": ..., "extension": ...}) go to the host untouched.
            entries.append(item)
    return entries


def extract_layers(
    config: Any,
    base: str,
    layers: ConfigLayers | None = None,
) -> ConfigLayers:
    """
    Flatten a config, its presets and its plugins' static fragments.

    Args:
        config: A loaded config value (non-mappings are ignored)
        base: Directory content globs are relative to
        layers: Accumulator shared across several modules

    Returns:
        The accumulator, with this config's layers appended
    """
    if layers is None:
        layers = ConfigLayers()
    if not isinstance(config, Mapping):
        return layers

    plugins = [
        plugin for plugin in map(normalize_plugin, _sequence(config.get("plugins"))) if plugin
    ]

    for preset in _sequence(config.get("presets")):
        extract_layers(preset, base, layers)

    for plugin in plugins:
        layers.plugins.append(plugin)
        if isinstance(plugin.config, Mapping):
            extract_layers(plugin.config, base, layers)

    layers.content.extend(_content_entries(config.get("content", []), base))
    layers.configs.append(config)
    return layers


def merge_theme(base: Any, extension: Any) -> dict[str, Any]:
    """
    Merge a `theme` block onto another.

    Bare keys replace; `extend` entries merge key-wise, chaining theme
    functions so they can be evaluated later in order.
    """
    result: dict[str, Any] = dict(base) if isinstance(base, Mapping) else {}
    if not isinstance(extension, Mapping):
        return result

    for key, value in extension.items():
        if key == "extend":
            if not isinstance(value, Mapping):
                continue
            extend = dict(result.get("extend", {}))
            for name, fragment in value.items():
                extend[name] = merge_values(extend.get(name, MISSING), fragment)
            result["extend"] = extend
        else:
            result[key] = value
    return result


def merge_config(base: Mapping[str, Any], extension: Mapping[str, Any]) -> ConfigTree:
    """
    Merge `extension` on top of `base` without mutating either.

    Mappings merge recursively, other collisions replace, `plugins` and
    `content` concatenate, `presets` are dropped (they are expanded by
    `extract_layers`).
    """
    merged: ConfigTree = dict(base)
    if not isinstance(extension, Mapping):
        return merged

    for key, value in extension.items():
        if key == "presets":
            continue
        if key == "theme":
            merged["theme"] = merge_theme(merged.get("theme"), value)
        elif key in ("plugins", "content"):
            merged[key] = [*_sequence(merged.get(key)), *_sequence(value)]
        else:
            merged[key] = merge_values(merged.get(key, MISSING), value)
    return merged


def merge_presets(presets: Sequence[Any]) -> ConfigTree:
    """Fold presets left to right; later presets win."""
    layers = ConfigLayers()
    for preset in _sequence(presets):
        extract_layers(preset, "", layers)
    tree: ConfigTree = {}
    for config in layers.configs:
        tree = merge_config(tree, _without_collected(config))
    return tree


def _without_collected(config: Mapping[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in config.items() if key not in _COLLECTED_KEYS}


def merge_layers(layers: ConfigLayers) -> MergedConfig:
    """Fold every collected layer into a MergedConfig."""
    tree: ConfigTree = {}
    for config in layers.configs:
        tree = merge_config(tree, _without_collected(config))

    logger.debug(
        "Merged %d config layers, %d plugins, %d content entries",
        len(layers.configs),
        len(layers.plugins),
        len(layers.content),
    )
    return MergedConfig(tree=tree, plugins=list(layers.plugins), content=list(layers.content))


def resolve_config(config: Any, base: str) -> MergedConfig:
    """Extract and merge a single config module."""
    return merge_layers(extract_layers(config, base))
