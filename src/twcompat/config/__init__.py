"""Config and preset normalization."""

from .merger import (
    ConfigLayers,
    ConfigTree,
    GlobEntry,
    MergedConfig,
    extract_layers,
    merge_config,
    merge_layers,
    merge_presets,
    merge_theme,
    resolve_config,
)

__all__ = [
    "ConfigLayers",
    "ConfigTree",
    "GlobEntry",
    "MergedConfig",
    "extract_layers",
    "merge_config",
    "merge_layers",
    "merge_presets",
    "merge_theme",
    "resolve_config",
]
