"""
Variant registry, dark mode and breakpoint reconciliation.

Variants wrap a utility's nodes in a selector or at-rule. Each definition
records where it came from; a native CSS `@variant` is never replaced by a
config or plugin registration, while later plugins replace earlier ones.
"""

from __future__ import annotations

import copy
import logging
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from .css import Node, Rule
from .settings import DEFAULT_SETTINGS, CompatSettings
from .theme.namespace import ThemeNamespace

logger = logging.getLogger(__name__)

Wrapper = Callable[[list[Node]], list[Node]]

LAST_WEIGHT = 1_000_000
BREAKPOINT_WEIGHT = 1_000


class Origin(StrEnum):
    """Who registered a variant or utility."""

    CORE = "core"
    CONFIG = "config"
    PLUGIN = "plugin"
    CSS = "css"


@dataclass
class VariantDefinition:
    """
    A named wrapping transform.

    Example:
        VariantDefinition("dark", selector_wrapper("&:is(.dark)"), selectors=("&:is(.dark)",))
    """

    name: str
    wrap: Wrapper
    origin: Origin = Origin.PLUGIN
    weight: int = 0
    selectors: tuple[str, ...] = ()


@dataclass
class FunctionalVariant:
    """A family of variants (`aria-*`) resolved from the suffix."""

    root: str
    resolve: Callable[[str], str | list[str] | None]
    origin: Origin = Origin.CORE
    values: dict[str, Any] = field(default_factory=dict)


def selector_wrapper(selectors: str | list[str] | tuple[str, ...]) -> Wrapper:
    """Wrap nodes in each selector or at-rule (one copy per selector)."""
    if isinstance(selectors, str):
        selectors = [selectors]
    selectors = list(selectors)

    def wrap(nodes: list[Node]) -> list[Node]:
        return [Rule(selector, copy.deepcopy(nodes)) for selector in selectors]

    return wrap


def variant_selectors(value: Any, settings: CompatSettings = DEFAULT_SETTINGS) -> list[str] | None:
    """
    Interpret a variant value.

    Accepts a selector string, a list of selectors, or a strategy pair:
    `["variant", S]`, `["selector", ".cls"]`, `["class", ".cls"]`,
    `["media", "(query)"]`. Returns None for anything else.
    """
    if isinstance(value, str):
        return [value]
    if not isinstance(value, list | tuple) or not value:
        return None

    if len(value) == 2 and value[0] in ("variant", "selector", "class", "media"):
        strategy, argument = value
        if strategy == "variant":
            return variant_selectors(argument, settings)
        if not isinstance(argument, str):
            return None
        if strategy == "media":
            return [f"@media {argument}"]
        return [f"&:where({argument}, {argument} *)"]

    if all(isinstance(item, str) for item in value):
        return list(value)
    return None


def dark_mode_variant(
    dark_mode: Any,
    settings: CompatSettings = DEFAULT_SETTINGS,
) -> VariantDefinition | None:
    """
    Turn the `darkMode` option into a `dark` variant.

    "media" wraps in a prefers-color-scheme query, "selector"/"class" wrap
    in an ancestor class, `["variant", S]` uses S verbatim. Unsupported
    values yield None.
    """
    if dark_mode == "media":
        selectors = ["@media (prefers-color-scheme: dark)"]
    elif dark_mode in ("selector", "class"):
        cls = f".{settings.dark_class}"
        selectors = [f"&:where({cls}, {cls} *)"]
    elif (
        isinstance(dark_mode, list | tuple)
        and len(dark_mode) == 2
        and dark_mode[0] in ("variant", "selector", "class")
    ):
        selectors = variant_selectors(dark_mode, settings)
    else:
        selectors = None

    if not selectors:
        return None
    return VariantDefinition(
        "dark",
        selector_wrapper(selectors),
        origin=Origin.CONFIG,
        selectors=tuple(selectors),
    )


# -- theme-driven variant families ---------------------------------------------------


def aria_selector(value: str) -> str:
    return f"&[aria-{value}]"


def data_selector(value: str) -> str:
    return f"&[data-{value}]"


def supports_condition(value: str) -> str:
    """
    `@supports` condition for a theme value.

    "grid" -> "(grid: var(--tw))", "display: grid" -> "(display: grid)",
    "selector(h2 > p)" is used as is.
    """
    value = value.strip()
    if re.fullmatch(r"[\w-]+", value):
        return f"({value}: var(--tw))"
    if "(" not in value and ":" in value:
        return f"({value})"
    return value


def _core_aria(value: str) -> str:
    # aria-busy -> [aria-busy="true"], aria-[sort=ascending] -> [aria-sort=ascending]
    if "=" in value:
        return aria_selector(value)
    return aria_selector(f'{value}="true"')


def _core_data(value: str) -> str:
    return data_selector(value)


def supports_rule(value: str) -> str:
    return f"@supports {supports_condition(value)}"


_THEME_FAMILIES: dict[str, Callable[[str], str]] = {
    "aria": aria_selector,
    "data": data_selector,
    "supports": supports_rule,
}


class VariantRegistry:
    """Named variants plus functional families, ordered for output."""

    def __init__(self, settings: CompatSettings = DEFAULT_SETTINGS):
        self.settings = settings
        self._variants: dict[str, VariantDefinition] = {}
        self._functional: dict[str, FunctionalVariant] = {}
        self._order: dict[str, int] = {}

    def _remember(self, name: str) -> None:
        if name not in self._order:
            self._order[name] = len(self._order)

    def register(self, definition: VariantDefinition) -> bool:
        """
        Add or replace a variant.

        Returns:
            False if an existing CSS-origin variant blocked the registration
        """
        existing = self._variants.get(definition.name)
        if (
            existing is not None
            and existing.origin is Origin.CSS
            and definition.origin is not Origin.CSS
        ):
            logger.debug(
                "Variant %s kept from CSS, ignoring %s", definition.name, definition.origin
            )
            return False
        if definition.name == self.settings.print_variant:
            definition.weight = LAST_WEIGHT
        self._remember(definition.name)
        self._variants[definition.name] = definition
        return True

    def register_functional(self, variant: FunctionalVariant) -> bool:
        existing = self._functional.get(variant.root)
        if (
            existing is not None
            and existing.origin is Origin.CSS
            and variant.origin is not Origin.CSS
        ):
            return False
        self._remember(variant.root)
        self._functional[variant.root] = variant
        return True

    def get(self, name: str) -> VariantDefinition | None:
        """Resolve `name` to a definition (static first, then families)."""
        if name in self._variants:
            return self._variants[name]

        for root, family in self._functional.items():
            if not name.startswith(root + "-"):
                continue
            suffix = name[len(root) + 1 :]
            if suffix.startswith("[") and suffix.endswith("]"):
                value = suffix[1:-1].replace("_", " ")
            else:
                value = family.values.get(suffix, suffix)
            selectors = family.resolve(value)
            if selectors:
                return VariantDefinition(
                    name,
                    selector_wrapper(selectors),
                    origin=family.origin,
                    selectors=tuple([selectors] if isinstance(selectors, str) else selectors),
                )
        return None

    def _family_root(self, name: str) -> str | None:
        for root in self._functional:
            if name.startswith(root + "-"):
                return root
        return None

    def sort_key(self, name: str) -> tuple[int, int]:
        """Family members sort with their family; `print` sorts last."""
        definition = self._variants.get(name)
        weight = definition.weight if definition is not None else 0
        root = self._family_root(name)
        if root is not None:
            return (weight, self._order[root])
        return (weight, self._order.get(name, len(self._order)))

    def names(self) -> list[str]:
        return sorted(self._variants, key=self.sort_key)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.get(name) is not None


def register_core_variants(registry: VariantRegistry) -> None:
    """Built-in variants the minimal host provides."""
    registry.register_functional(FunctionalVariant("aria", _core_aria))
    registry.register_functional(FunctionalVariant("data", _core_data))
    registry.register_functional(FunctionalVariant("supports", supports_rule))
    registry.register(
        VariantDefinition(
            "print",
            selector_wrapper("@media print"),
            origin=Origin.CORE,
            selectors=("@media print",),
        )
    )


def register_theme_variants(
    registry: VariantRegistry,
    theme: Callable[..., Any],
    origin: Origin = Origin.CONFIG,
) -> None:
    """
    Register `aria-*`, `data-*` and `supports-*` variants from the theme.

        theme.aria = {"polite": 'live="polite"'}  ->  aria-polite: &[aria-live="polite"]
    """
    for family, to_selector in _THEME_FAMILIES.items():
        values = theme(family)
        if not isinstance(values, Mapping):
            continue
        for key, value in values.items():
            if not isinstance(value, str):
                continue
            selector = to_selector(value)
            registry.register(
                VariantDefinition(
                    f"{family}-{key}",
                    selector_wrapper(selector),
                    origin=origin,
                    selectors=(selector,),
                )
            )


# -- breakpoints --------------------------------------------------------------------

_LENGTH_RE = re.compile(r"^\s*(-?[\d.]+)\s*(px|rem|em)?\s*$")


def _length_key(value: str) -> float:
    match = _LENGTH_RE.match(value)
    if not match:
        return float("inf")
    number = float(match.group(1))
    return number / 16 if match.group(2) == "px" else number


def breakpoints(
    namespace: ThemeNamespace, settings: CompatSettings = DEFAULT_SETTINGS
) -> dict[str, str]:
    """Merged breakpoints (`screens`), ordered by width."""
    prefix = settings.theme_keys["screens"].namespace
    view = {
        key: str(value)
        for key, value in namespace.namespace(prefix).items()
        if isinstance(value, str)
    }
    return dict(sorted(view.items(), key=lambda item: _length_key(item[1])))


def breakpoint_variant(
    name: str,
    screens: Mapping[str, str],
) -> VariantDefinition | None:
    """`sm`, `min-sm` and `max-sm` style variants from the merged breakpoints."""
    order = list(screens)
    if name in screens:
        key, query = name, f"(width >= {screens[name]})"
    elif name.startswith("min-") and name[4:] in screens:
        key, query = name[4:], f"(width >= {screens[name[4:]]})"
    elif name.startswith("max-") and name[4:] in screens:
        key, query = name[4:], f"(width < {screens[name[4:]]})"
    else:
        return None
    selector = f"@media {query}"
    return VariantDefinition(
        name,
        selector_wrapper(selector),
        origin=Origin.CORE,
        weight=BREAKPOINT_WEIGHT + order.index(key),
        selectors=(selector,),
    )
