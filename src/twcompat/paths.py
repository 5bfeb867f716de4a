"""
Dotted/bracketed path lookup over nested config structures.

    get_path(theme, "fontSize.base[1].lineHeight")
    get_path(theme, "spacing[2.5]")

Lookups never raise; a missing path yields the supplied default.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from .values import MISSING, ThemeTuple


def parse_path(path: str) -> list[str]:
    """
    Split a path into segments.

    Dots separate segments; brackets hold a literal segment that may itself
    contain dots (`spacing[2.5]`). Quotes inside brackets are stripped.
    """
    segments: list[str] = []
    current = ""
    i = 0
    while i < len(path):
        char = path[i]
        if char == ".":
            if current:
                segments.append(current)
            current = ""
        elif char == "[":
            if current:
                segments.append(current)
            current = ""
            end = path.find("]", i)
            if end == -1:
                end = len(path)
            segments.append(path[i + 1 : end].strip().strip("'\""))
            i = end
        else:
            current += char
        i += 1
    if current:
        segments.append(current)
    return segments


def _step(current: Any, segment: str) -> Any:
    if isinstance(current, Mapping):
        if segment in current:
            return current[segment]
        if segment.isdigit() and int(segment) in current:
            return current[int(segment)]
        return MISSING
    if isinstance(current, Sequence) and not isinstance(current, str):
        if not segment.isdigit():
            return MISSING
        index = int(segment)
        return current[index] if index < len(current) else MISSING
    return MISSING


def get_path(tree: Any, path: str | Sequence[str], default: Any = None) -> Any:
    """
    Return the value at `path` inside `tree`, or `default` if absent.

    Args:
        tree: Nested mappings, sequences and ThemeTuples
        path: Dotted path string or pre-split segments

    Returns:
        The value found, or `default`
    """
    segments = parse_path(path) if isinstance(path, str) else list(path)
    current = tree
    for segment in segments:
        current = _step(current, segment)
        if current is MISSING:
            return default
    return current


def scalar(value: Any) -> Any:
    """Value of `value` in a scalar context (tuples yield their primary)."""
    if isinstance(value, ThemeTuple):
        return value.primary
    return value
