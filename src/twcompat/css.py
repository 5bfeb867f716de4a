"""
Minimal CSS node model and printer.

Only what is needed to hand plugin utilities and variant wrappers to the
host: rules with nested children and declarations. Output uses CSS
nesting, two-space indentation.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Union

from .paths import scalar


@dataclass
class Declaration:
    property: str
    value: str


@dataclass
class Rule:
    selector: str
    nodes: list[Node] = field(default_factory=list)


Node = Union[Declaration, Rule]


def property_name(name: str) -> str:
    """CSS-in-JS property name to CSS (`scrollbarColor` -> `scrollbar-color`)."""
    if name.startswith("--"):
        return name
    # WebkitAppearance -> -webkit-appearance
    return re.sub(r"([A-Z])", r"-\1", name).lower()


def from_object(block: Mapping[str, Any]) -> list[Node]:
    """
    Convert a CSS-in-JS object into nodes.

    Nested mappings become nested rules keyed by their selector or at-rule;
    list values emit one declaration per item; None values are dropped.
    """
    nodes: list[Node] = []
    for key, value in block.items():
        key = str(key)
        if isinstance(value, Mapping):
            nodes.append(Rule(key, from_object(value)))
        elif isinstance(value, list):
            for item in value:
                if item is not None:
                    nodes.append(Declaration(property_name(key), str(scalar(item))))
        elif value is not None:
            nodes.append(Declaration(property_name(key), str(scalar(value))))
    return nodes


def print_nodes(nodes: list[Node], depth: int = 0) -> str:
    pad = "  " * depth
    out: list[str] = []
    for node in nodes:
        if isinstance(node, Declaration):
            out.append(f"{pad}{node.property}: {node.value};\n")
        else:
            out.append(f"{pad}{node.selector} {{\n")
            out.append(print_nodes(node.nodes, depth + 1))
            out.append(f"{pad}}}\n")
    return "".join(out)


def escape_class(name: str) -> str:
    """Escape a candidate for use as a class selector."""
    return re.sub(r"([^\w-])", r"\\\1", name)
