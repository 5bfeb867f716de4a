"""
Utility registry for plugin-contributed utilities.

Static utilities map a class name to a declaration block. Functional
utilities map a root (`hover-bg`) to a function that turns a value from a
caller-supplied table into a declaration block.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from .css import Node, Rule, from_object
from .variants import Origin

logger = logging.getLogger(__name__)

_CLASS_SELECTOR_RE = re.compile(r"^\.((?:\\.|[\w-])+)(.*)$", re.DOTALL)


@dataclass
class StaticUtility:
    name: str
    nodes: list[Node]
    origin: Origin = Origin.PLUGIN


@dataclass
class FunctionalUtility:
    root: str
    fn: Callable[..., Mapping[str, Any] | None]
    values: dict[str, Any] = field(default_factory=dict)
    origin: Origin = Origin.PLUGIN
    # None: the utility takes no modifier and `fn` is called with the value only
    modifiers: dict[str, Any] | None = None


def split_selector(selector: str) -> list[tuple[str, str]]:
    """
    Split `.btn:hover, .link` into `[("btn", ":hover"), ("link", "")]`.

    Selectors that do not start with a class are skipped.
    """
    parts: list[tuple[str, str]] = []
    for piece in selector.split(","):
        match = _CLASS_SELECTOR_RE.match(piece.strip())
        if match:
            parts.append((match.group(1).replace("\\", ""), match.group(2)))
    return parts


def utility_nodes(rest: str, block: Mapping[str, Any]) -> list[Node]:
    """Nodes for one selector; a pseudo/compound remainder nests under `&`."""
    nodes = from_object(block)
    if rest.strip():
        return [Rule(f"&{rest}", nodes)]
    return nodes


def _lookup(table: Mapping[str, Any], key: str) -> Any:
    """Table value for `key`; `[arbitrary]` keys pass through with `_` as space."""
    if key.startswith("[") and key.endswith("]"):
        return key[1:-1].replace("_", " ")
    return table.get(key)


class UtilityRegistry:
    """Class name -> utility. Later registrations replace earlier ones."""

    def __init__(self) -> None:
        self._static: dict[str, StaticUtility] = {}
        self._functional: dict[str, FunctionalUtility] = {}

    def add_static(self, name: str, nodes: list[Node], origin: Origin) -> bool:
        existing = self._static.get(name)
        if existing is not None and existing.origin is Origin.CSS and origin is not Origin.CSS:
            return False
        self._static[name] = StaticUtility(name, nodes, origin)
        return True

    def add_functional(self, utility: FunctionalUtility) -> bool:
        existing = self._functional.get(utility.root)
        if (
            existing is not None
            and existing.origin is Origin.CSS
            and utility.origin is not Origin.CSS
        ):
            return False
        self._functional[utility.root] = utility
        return True

    def get(self, name: str) -> StaticUtility | None:
        return self._static.get(name)

    def names(self) -> list[str]:
        return [*self._static, *(f"{root}-*" for root in self._functional)]

    def compile(self, name: str) -> list[Node] | None:
        """
        Nodes for a utility candidate without variants, or None.

        Functional roots are matched longest first; `root-[value]` passes the
        bracketed value through, `root` alone uses the `DEFAULT` value.
        Utilities declared with modifiers accept `root-value/modifier` and are
        called as `fn(value, {"modifier": modifier})`.
        """
        static = self._static.get(name)
        if static is not None:
            return static.nodes

        for root in sorted(self._functional, key=len, reverse=True):
            utility = self._functional[root]
            if name == root:
                suffix = "DEFAULT"
            elif name.startswith(root + "-"):
                suffix = name[len(root) + 1 :]
            else:
                continue

            modifier = None
            head, _, raw_modifier = suffix.rpartition("/")
            if (
                utility.modifiers is not None
                and suffix not in utility.values
                and head
                and head.count("[") == head.count("]")
            ):
                suffix = head
                modifier = _lookup(utility.modifiers, raw_modifier)
                if modifier is None:
                    continue
            value = _lookup(utility.values, suffix)
            if value is None:
                continue

            if utility.modifiers is None:
                block = utility.fn(value)
            else:
                block = utility.fn(value, {"modifier": modifier})
            if isinstance(block, Mapping):
                return from_object(block)
            logger.debug("Utility %s returned %r, ignoring", name, type(block).__name__)
        return None

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.compile(name) is not None
