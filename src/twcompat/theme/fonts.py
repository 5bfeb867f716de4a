"""
Default font family compatibility.

Legacy configs customise the body font through `fontFamily.sans` (and the
code font through `fontFamily.mono`). The CSS theme instead binds three
`--default-*` properties to those families. When config wins the family,
the bound defaults are rewritten to the concrete values.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from twcompat.paths import get_path
from twcompat.values import is_scalar

from .bridge import ThemeBridge
from .namespace import ThemeSource

_FONT_DEFAULTS = {
    "sans": "--default-font",
    "mono": "--default-mono-font",
}


@dataclass(frozen=True)
class FontOverride:
    family: str
    feature_settings: str | None = None
    variation_settings: str | None = None


def _family(value: Any) -> str | None:
    if isinstance(value, str):
        return value
    if isinstance(value, list | tuple) and value and all(isinstance(v, str) for v in value):
        return ", ".join(value)
    return None


def parse_font_family(value: Any) -> FontOverride | None:
    """
    Recognize a legacy `fontFamily` entry.

    Accepted shapes: "Inter", ["Inter", "sans-serif"] and
    ["Inter", {"fontFeatureSettings": ..., "fontVariationSettings": ...}].
    Anything else yields None.
    """
    family = _family(value)
    if family is not None:
        return FontOverride(family)

    if isinstance(value, list | tuple) and len(value) == 2 and isinstance(value[1], Mapping):
        family = _family(value[0])
        if family is None:
            return None
        details = value[1]
        feature = details.get("fontFeatureSettings")
        variation = details.get("fontVariationSettings")
        return FontOverride(
            family,
            feature_settings=str(feature) if is_scalar(feature) and feature is not None else None,
            variation_settings=(
                str(variation) if is_scalar(variation) and variation is not None else None
            ),
        )
    return None


def apply_default_fonts(bridge: ThemeBridge, source: ThemeSource = ThemeSource.CONFIG) -> None:
    """
    Point `--default-font-*` / `--default-mono-font-*` at config fonts.

    Skipped per family when CSS owns `--font-family-<name>`, when the
    default properties are not declared, or when the config value has an
    unrecognized shape.
    """
    namespace = bridge.namespace
    fallback = bridge.settings.default_font_settings
    family_namespace = bridge.settings.theme_keys["fontFamily"].namespace

    for name, prefix in _FONT_DEFAULTS.items():
        override = parse_font_family(get_path(bridge.contributed, ["fontFamily", name]))
        if override is None:
            continue

        family_entry = namespace.get(f"{family_namespace}-{name}")
        if family_entry is not None and family_entry.source is ThemeSource.CSS:
            continue

        targets = {
            f"{prefix}-family": override.family,
            f"{prefix}-feature-settings": override.feature_settings or fallback,
            f"{prefix}-variation-settings": override.variation_settings or fallback,
        }
        for property_name, value in targets.items():
            if property_name in namespace:
                namespace.set(property_name, value, source)
