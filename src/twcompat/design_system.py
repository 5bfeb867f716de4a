"""
Minimal host design system.

Holds the theme namespace, the utility and variant registries for one
compile, and can build plugin utilities (with variants) into CSS. Core
utilities and final rule ordering belong to the real compiler; this class
only covers what config compatibility touches.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from .css import Node, Rule, escape_class, print_nodes
from .settings import DEFAULT_SETTINGS, CompatSettings
from .theme.bridge import ThemeBridge, emit, to_css
from .theme.namespace import ThemeNamespace
from .utilities import UtilityRegistry
from .variants import (
    Origin,
    VariantDefinition,
    VariantRegistry,
    breakpoint_variant,
    breakpoints,
    register_core_variants,
    selector_wrapper,
)

logger = logging.getLogger(__name__)


def split_candidate(candidate: str) -> list[str]:
    """Split `md:hover:bg-[url(a:b)]` on colons outside brackets."""
    parts: list[str] = []
    depth = 0
    current = ""
    for char in candidate:
        if char in "[(":
            depth += 1
        elif char in "])":
            depth = max(depth - 1, 0)
        if char == ":" and depth == 0:
            parts.append(current)
            current = ""
        else:
            current += char
    parts.append(current)
    return parts


class DesignSystem:
    """
    Theme and registries for one compile.

    Example:
        ds = DesignSystem.from_theme(
            defaults={"--color-red-500": "#ef4444"},
            css={"--breakpoint-md": "50rem"},
        )
    """

    def __init__(
        self,
        theme: ThemeNamespace | None = None,
        settings: CompatSettings = DEFAULT_SETTINGS,
    ):
        self.settings = settings
        self.theme = theme if theme is not None else ThemeNamespace()
        self.bridge = ThemeBridge(self.theme, settings)
        self.utilities = UtilityRegistry()
        self.variants = VariantRegistry(settings)
        register_core_variants(self.variants)

    @classmethod
    def from_theme(
        cls,
        defaults: Mapping[str, Any] | None = None,
        css: Mapping[str, Any] | None = None,
        settings: CompatSettings = DEFAULT_SETTINGS,
    ) -> DesignSystem:
        """Seed `@theme default` and `@theme` declarations."""
        namespace = ThemeNamespace()
        for name, value in (defaults or {}).items():
            namespace.add_default(name, str(value))
        for name, value in (css or {}).items():
            namespace.add_css(name, str(value))
        return cls(namespace, settings)

    def add_css_variant(self, name: str, selectors: str | list[str]) -> None:
        """Register a native `@variant` declaration."""
        if isinstance(selectors, str):
            selectors = [selectors]
        self.variants.register(
            VariantDefinition(
                name,
                selector_wrapper(selectors),
                origin=Origin.CSS,
                selectors=tuple(selectors),
            )
        )

    def breakpoints(self) -> dict[str, str]:
        return breakpoints(self.theme, self.settings)

    def resolve_variant(self, name: str) -> VariantDefinition | None:
        definition = self.variants.get(name)
        if definition is not None:
            return definition
        return breakpoint_variant(name, self.breakpoints())

    def _variant_order(self, definition: VariantDefinition) -> tuple[int, int]:
        if definition.name in self.variants:
            return self.variants.sort_key(definition.name)
        return (definition.weight, 0)

    def compile_candidate(self, candidate: str) -> tuple[list[tuple[int, int]], Rule] | None:
        """
        Build one candidate into a rule.

        Returns:
            (variant sort keys, rule), or None if the utility or a variant
            is unknown
        """
        *variant_names, utility = split_candidate(candidate)
        nodes: list[Node] | None = self.utilities.compile(utility)
        if nodes is None:
            return None

        definitions: list[VariantDefinition] = []
        for name in variant_names:
            definition = self.resolve_variant(name)
            if definition is None:
                logger.debug("Unknown variant %s in %s", name, candidate)
                return None
            definitions.append(definition)

        for definition in reversed(definitions):
            nodes = definition.wrap(nodes)

        keys = sorted((self._variant_order(d) for d in definitions), reverse=True)
        return keys, Rule(f".{escape_class(candidate)}", nodes)

    def build(self, candidates: Iterable[str]) -> str:
        """CSS for the candidates this system knows, variant-sorted."""
        compiled: list[tuple[list[tuple[int, int]], int, Rule]] = []
        for index, candidate in enumerate(dict.fromkeys(candidates)):
            result = self.compile_candidate(candidate)
            if result is not None:
                keys, rule = result
                compiled.append((keys, index, rule))
        compiled.sort(key=lambda item: (item[0], item[1]))
        return print_nodes([rule for _, _, rule in compiled])

    def theme_css(self) -> str:
        """`:root` block with every overridden custom property."""
        return to_css(emit(self.theme))
