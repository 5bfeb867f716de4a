"""
Plugin runtime.

A plugin is a handler called once per compile with a PluginAPI. The API is
the only thing a plugin can see: it reads the resolved theme and registers
utilities, variants and theme extensions. Everything a plugin registers is
recorded on its PluginContribution.

Usage:
    from twcompat.plugins import plugin

    @plugin
    def buttons(api):
        api.add_utilities({".btn": {"color": api.theme("colors.primary")}})

Plugins that take options are built with `plugin_with_options`:

    def forms(options):
        def handler(api):
            ...
        return handler

    forms_plugin = plugin_with_options(forms)
    config = {"plugins": [forms_plugin({"strategy": "class"})]}
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from .errors import CompatError, PluginError
from .paths import get_path
from .theme.namespace import ThemeSource
from .utilities import FunctionalUtility, split_selector, utility_nodes
from .values import merge_values
from .variants import (
    FunctionalVariant,
    Origin,
    VariantDefinition,
    selector_wrapper,
    variant_selectors,
)

if TYPE_CHECKING:
    from .design_system import DesignSystem

logger = logging.getLogger(__name__)

Handler = Callable[["PluginAPI"], None]


@dataclass
class Plugin:
    """A plugin handler plus its optional static config fragment."""

    handler: Handler
    config: Mapping[str, Any] | None = None
    name: str = ""

    def __post_init__(self) -> None:
        if not self.name:
            self.name = getattr(self.handler, "__name__", type(self.handler).__name__)


@dataclass
class OptionsPlugin:
    """A plugin factory; calling it with options yields a Plugin."""

    factory: Callable[[Any], Handler]
    config_factory: Callable[[Any], Mapping[str, Any]] | None = None
    name: str = ""

    def __post_init__(self) -> None:
        if not self.name:
            self.name = getattr(self.factory, "__name__", type(self.factory).__name__)

    def __call__(self, options: Any = None) -> Plugin:
        config = self.config_factory(options) if self.config_factory else None
        return Plugin(self.factory(options), config, name=self.name)


def plugin(handler: Handler, config: Mapping[str, Any] | None = None) -> Plugin:
    """Wrap a handler (usable as a decorator)."""
    return Plugin(handler, config)


def plugin_with_options(
    factory: Callable[[Any], Handler],
    config_factory: Callable[[Any], Mapping[str, Any]] | None = None,
) -> OptionsPlugin:
    return OptionsPlugin(factory, config_factory)


def normalize_plugin(value: Any, options: Any = None) -> Plugin | None:
    """
    Coerce a plugin value from a config into a Plugin.

    Accepts a Plugin, an OptionsPlugin (called with `options`), a bare
    callable, or a `(handler, config_fragment)` pair. Anything else yields
    None.
    """
    if isinstance(value, Plugin):
        return value
    if isinstance(value, OptionsPlugin):
        return value(options)
    if isinstance(value, list | tuple) and len(value) == 2:
        handler, fragment = value
        if callable(handler) and isinstance(fragment, Mapping):
            return Plugin(handler, fragment)
        return None
    if callable(value):
        return Plugin(value)
    return None


@dataclass
class PluginContribution:
    """What one plugin registered while it ran."""

    plugin_name: str
    utilities: list[str] = field(default_factory=list)
    variants: list[str] = field(default_factory=list)
    theme: dict[str, Any] = field(default_factory=dict)


class PluginAPI:
    """
    Capability object handed to plugin handlers.

    Theme reads go through the live accessor, so a plugin sees theme
    extensions made by plugins that ran before it.
    """

    def __init__(
        self,
        design_system: DesignSystem,
        contribution: PluginContribution,
        config_tree: Mapping[str, Any] | None = None,
    ):
        self._design_system = design_system
        self._config_tree = config_tree or {}
        self.contribution = contribution

    def theme(self, path: str, default: Any = None) -> Any:
        return self._design_system.bridge.accessor.theme(path, default)

    def config(self, path: str | None = None, default: Any = None) -> Any:
        """Read a copy of the merged config tree (`config("darkMode")`)."""
        if path is None:
            return copy.deepcopy(dict(self._config_tree))
        return copy.deepcopy(get_path(self._config_tree, path, default))

    def add_utilities(self, utilities: Mapping[str, Any] | Sequence[Mapping[str, Any]]) -> None:
        """
        Register static utilities.

        Keys are class selectors (`.btn`, `.btn:hover`, `.a, .b`); values
        are CSS-in-JS declaration blocks.
        """
        blocks = [utilities] if isinstance(utilities, Mapping) else list(utilities)
        registry = self._design_system.utilities
        for block in blocks:
            for selector, declarations in block.items():
                if not isinstance(declarations, Mapping):
                    continue
                for name, rest in split_selector(str(selector)):
                    if registry.add_static(name, utility_nodes(rest, declarations), Origin.PLUGIN):
                        self.contribution.utilities.append(name)

    add_components = add_utilities

    def match_utilities(
        self,
        utilities: Mapping[str, Callable[..., Mapping[str, Any] | None]],
        *,
        values: Mapping[str, Any] | None = None,
        modifiers: Mapping[str, Any] | None = None,
    ) -> None:
        """
        Register functional utilities.

            api.match_utilities(
                {"tab": lambda value: {"tabSize": value}},
                values={"2": "2", "4": "4"},
            )

        With `modifiers`, handlers take a second argument and candidates may
        carry one (`bg-tint-red/50`):

            api.match_utilities(
                {"bg-tint": lambda value, extra: {"color": value, "opacity": extra["modifier"]}},
                values={"red": "#f00"},
                modifiers={"50": "0.5"},
            )
        """
        table = dict(values or {})
        modifier_table = dict(modifiers) if modifiers is not None else None
        for root, fn in utilities.items():
            utility = FunctionalUtility(root, fn, table, Origin.PLUGIN, modifier_table)
            if self._design_system.utilities.add_functional(utility):
                self.contribution.utilities.append(f"{root}-*")

    def add_variant(self, name: str, variant: Any) -> None:
        """
        Register a variant.

        `variant` is a selector or at-rule, a list of them, a strategy pair
        such as `["media", "(hover: hover)"]`, or a callable mapping inner
        nodes to wrapped nodes.
        """
        if callable(variant):
            definition = VariantDefinition(name, variant, origin=Origin.PLUGIN)
        else:
            selectors = variant_selectors(variant, self._design_system.settings)
            if not selectors:
                return
            definition = VariantDefinition(
                name,
                selector_wrapper(selectors),
                origin=Origin.PLUGIN,
                selectors=tuple(selectors),
            )
        if self._design_system.variants.register(definition):
            self.contribution.variants.append(name)

    def match_variant(
        self,
        name: str,
        fn: Callable[[str], str | list[str] | None],
        *,
        values: Mapping[str, Any] | None = None,
    ) -> None:
        """Register a variant family (`name-<value>`, `name-[arbitrary]`)."""
        family = FunctionalVariant(name, fn, origin=Origin.PLUGIN, values=dict(values or {}))
        if self._design_system.variants.register_functional(family):
            self.contribution.variants.append(f"{name}-*")

    def extend_theme(self, fragment: Mapping[str, Any]) -> None:
        """Merge `fragment` into the theme as if it were `theme.extend`."""
        if not isinstance(fragment, Mapping):
            return
        self._design_system.bridge.extend(fragment, ThemeSource.PLUGIN)
        self.contribution.theme = merge_values(self.contribution.theme, dict(fragment))


def run_plugins(
    design_system: DesignSystem,
    plugins: Sequence[Plugin],
    config_tree: Mapping[str, Any] | None = None,
) -> list[PluginContribution]:
    """
    Execute plugin handlers in declaration order.

    Raises:
        PluginError: If a handler raises; contributions made before the
            failure stay registered
    """
    contributions: list[PluginContribution] = []
    for item in plugins:
        contribution = PluginContribution(item.name)
        api = PluginAPI(design_system, contribution, config_tree)
        try:
            item.handler(api)
        except CompatError:
            raise
        except Exception as e:
            raise PluginError(f"Plugin '{item.name}' failed: {e}", plugin_name=item.name) from e

        logger.debug(
            "Plugin %s registered %d utilities, %d variants",
            item.name,
            len(contribution.utilities),
            len(contribution.variants),
        )
        contributions.append(contribution)
    return contributions
