"""
Value model for legacy config trees.

Every value found in a config is classified into one of five kinds and
merged by a single recursive function. Callables (theme functions) are not
evaluated while merging; they are chained into a `Deferred` and realized
later, once a theme accessor exists.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from enum import StrEnum
from typing import Any, NamedTuple


class _Missing:
    """Sentinel for "no value at this position"."""

    _instance: _Missing | None = None

    def __new__(cls) -> _Missing:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()


class ValueKind(StrEnum):
    """Shape of a config value."""

    SCALAR = "scalar"
    SEQUENCE = "sequence"
    MAPPING = "mapping"
    TUPLE = "tuple"
    DEFERRED = "deferred"


class ThemeTuple(NamedTuple):
    """
    A theme value paired with named companion values.

    Example:
        ThemeTuple("1rem", {"lineHeight": "1.5rem"})

    `[0]` is the primary value and `[1]` the companion mapping. In string
    contexts the tuple renders as its primary value.
    """

    primary: Any
    companions: dict[str, Any]

    def __str__(self) -> str:
        return str(self.primary)


class Deferred:
    """
    An ordered chain of layers, at least one of which is a theme function.

    Realizing the chain evaluates every callable layer with the helpers
    bound at that moment and folds the results with `merge_values`.
    """

    __slots__ = ("layers",)

    def __init__(self, layers: Sequence[Any]):
        self.layers = tuple(layers)

    @classmethod
    def chain(cls, base: Any, override: Any) -> Deferred:
        layers: list[Any] = []
        for value in (base, override):
            if value is MISSING:
                continue
            if isinstance(value, Deferred):
                layers.extend(value.layers)
            else:
                layers.append(value)
        return cls(layers)

    def __repr__(self) -> str:
        return f"Deferred({len(self.layers)} layers)"


def is_scalar(value: Any) -> bool:
    return value is None or isinstance(value, str | int | float | bool)


def is_tuple_shaped(value: Any) -> bool:
    """True for `[primary, {companions}]` pairs and ThemeTuple instances."""
    if isinstance(value, ThemeTuple):
        return True
    if isinstance(value, list | tuple) and len(value) == 2:
        head, tail = value
        return isinstance(tail, Mapping) and (
            is_scalar(head) or (isinstance(head, list | tuple) and all(map(is_scalar, head)))
        )
    return False


def classify(value: Any) -> ValueKind:
    if isinstance(value, Deferred) or callable(value):
        return ValueKind.DEFERRED
    if is_tuple_shaped(value):
        return ValueKind.TUPLE
    if isinstance(value, Mapping):
        return ValueKind.MAPPING
    if isinstance(value, list | tuple):
        return ValueKind.SEQUENCE
    return ValueKind.SCALAR


def as_theme_tuple(value: Any) -> ThemeTuple:
    """Normalize a tuple-shaped value into a ThemeTuple."""
    if isinstance(value, ThemeTuple):
        return value
    head, tail = value
    return ThemeTuple(head, dict(tail))


def merge_values(base: Any, override: Any) -> Any:
    """
    Merge `override` on top of `base`.

    Mappings merge key-wise and recursively; any other collision replaces
    the base value, except that a mapping never replaces a sequence or
    tuple (the prior value is kept). Callables on either side produce a
    `Deferred` chain.
    """
    if override is MISSING:
        return base
    if base is MISSING:
        return override

    base_kind = classify(base)
    override_kind = classify(override)

    if ValueKind.DEFERRED in (base_kind, override_kind):
        return Deferred.chain(base, override)

    if base_kind is ValueKind.MAPPING and override_kind is ValueKind.MAPPING:
        merged = dict(base)
        for key, value in override.items():
            merged[key] = merge_values(merged.get(key, MISSING), value)
        return merged

    if override_kind is ValueKind.MAPPING and base_kind in (ValueKind.SEQUENCE, ValueKind.TUPLE):
        return base

    return override


def realize(value: Any, helpers: Any) -> Any:
    """Evaluate every theme function inside `value` with `helpers`."""
    kind = classify(value)
    if kind is ValueKind.DEFERRED:
        if isinstance(value, Deferred):
            result: Any = MISSING
            for layer in value.layers:
                result = merge_values(result, realize(layer, helpers))
            return None if result is MISSING else result
        return realize(value(helpers), helpers)
    if kind is ValueKind.MAPPING:
        return {key: realize(item, helpers) for key, item in value.items()}
    if kind is ValueKind.SEQUENCE:
        return [realize(item, helpers) for item in value]
    return value


def walk_leaves(
    value: Any,
    visit: Callable[[tuple[str, ...], Any], None],
    prefix: tuple[str, ...] = (),
) -> None:
    """Call `visit(path, leaf)` for every non-mapping leaf, depth first."""
    if classify(value) is ValueKind.MAPPING:
        for key, item in value.items():
            walk_leaves(item, visit, (*prefix, str(key)))
    else:
        visit(prefix, value)
