"""
Apply legacy config and plugin references to a design system.

Pipeline for one compile:

1. Load every referenced module, sequentially, once per identifier
2. Flatten plugins, presets and configs into layers and merge them
3. Resolve the merged theme into the namespace, then the default fonts
4. Register the dark mode and theme-driven variants
5. Run plugin handlers

Native `@variant` declarations registered on the design system keep
precedence over anything registered here.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from typing import Any, Literal

from .config.merger import ConfigLayers, GlobEntry, MergedConfig, extract_layers, merge_layers
from .design_system import DesignSystem
from .errors import CompatError, make_load_error
from .plugins import PluginContribution, normalize_plugin, run_plugins
from .theme.fonts import apply_default_fonts
from .variants import dark_mode_variant, register_theme_variants

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConfigReference:
    """An `@config` or `@plugin` reference found by the host."""

    identifier: str
    base: str
    kind: Literal["config", "plugin"] = "config"
    options: Any = None


@dataclass
class LoadedModule:
    """A loaded module value and the directory it resolved from."""

    module: Any
    base: str


ModuleLoader = Callable[[str, str], Awaitable[LoadedModule]]


@dataclass
class CompatResult:
    config: MergedConfig
    contributions: list[PluginContribution] = field(default_factory=list)

    @property
    def globs(self) -> list[GlobEntry]:
        return self.config.globs


async def load_references(
    references: Sequence[ConfigReference],
    load_module: ModuleLoader,
) -> list[tuple[ConfigReference, LoadedModule]]:
    """
    Await the loader for each reference in declaration order.

    Raises:
        ConfigLoadError: If the loader fails or returns nothing
    """
    cache: dict[str, LoadedModule] = {}
    loaded: list[tuple[ConfigReference, LoadedModule]] = []

    for reference in references:
        if reference.identifier not in cache:
            try:
                module = await load_module(reference.identifier, reference.base)
            except CompatError:
                raise
            except Exception as e:
                raise make_load_error(
                    f"Could not load {reference.kind}: {e}",
                    reference.identifier,
                    reference.base,
                ) from e
            if module is None:
                raise make_load_error(
                    f"Loader returned nothing for {reference.kind}",
                    reference.identifier,
                    reference.base,
                )
            cache[reference.identifier] = module
        loaded.append((reference, cache[reference.identifier]))

    logger.debug("Loaded %d modules for %d references", len(cache), len(references))
    return loaded


def collect_layers(loaded: Sequence[tuple[ConfigReference, LoadedModule]]) -> ConfigLayers:
    """
    Flatten loaded modules into config layers.

    `@plugin` references come first so their static fragments rank below
    every `@config`.
    """
    layers = ConfigLayers()
    for reference, module in loaded:
        if reference.kind != "plugin":
            continue
        item = normalize_plugin(module.module, reference.options)
        if item is None:
            raise make_load_error("Module is not a plugin", reference.identifier, reference.base)
        extract_layers({"plugins": [item]}, module.base, layers)

    for reference, module in loaded:
        if reference.kind == "plugin":
            continue
        extract_layers(module.module, module.base, layers)
    return layers


def apply_compat(
    design_system: DesignSystem,
    loaded: Sequence[tuple[ConfigReference, LoadedModule]],
) -> CompatResult:
    """Synchronous part of the pipeline, once every module is loaded."""
    merged = merge_layers(collect_layers(loaded))

    design_system.bridge.apply(merged.theme)
    apply_default_fonts(design_system.bridge)

    dark = dark_mode_variant(merged.dark_mode, design_system.settings)
    if dark is not None:
        design_system.variants.register(dark)
    register_theme_variants(design_system.variants, design_system.bridge.accessor)

    contributions = run_plugins(design_system, merged.plugins, merged.tree)
    logger.debug(
        "Compat applied: %d theme overrides, %d plugins",
        len(design_system.theme.emit()),
        len(contributions),
    )
    return CompatResult(config=merged, contributions=contributions)


async def apply_compat_hooks(
    design_system: DesignSystem,
    references: Sequence[ConfigReference],
    load_module: ModuleLoader,
) -> CompatResult:
    """
    Load and apply config/plugin references to `design_system`.

    Args:
        design_system: Host system with its baseline and CSS theme seeded
        references: `@config` / `@plugin` references in source order
        load_module: Async loader capability

    Returns:
        CompatResult with the merged config, content globs and plugin
        contributions

    Raises:
        ConfigLoadError: If a reference cannot be loaded
        PluginError: If a plugin handler raises
    """
    if not references:
        return CompatResult(config=MergedConfig(tree={}, plugins=[], content=[]))
    loaded = await load_references(references, load_module)
    return apply_compat(design_system, loaded)
