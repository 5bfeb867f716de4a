"""
Theme resolution for legacy configs.

Usage:
    from twcompat.theme import ThemeBridge, ThemeNamespace, emit, to_css

    namespace = ThemeNamespace()
    namespace.add_default("--color-red", "red")

    bridge = ThemeBridge(namespace)
    bridge.apply({"extend": {"colors": {"primary": "#c0ffee"}}})
    print(to_css(emit(namespace)))
"""

from .bridge import (
    ThemeAccessor,
    ThemeBridge,
    emit,
    flatten_color_palette,
    resolve_namespace,
    to_css,
    with_alpha,
)
from .fonts import FontOverride, apply_default_fonts, parse_font_family
from .namespace import (
    CustomPropertyDeclaration,
    Provenance,
    ThemeEntry,
    ThemeNamespace,
    ThemeSource,
)

__all__ = [
    # Namespace
    "ThemeNamespace",
    "ThemeEntry",
    "ThemeSource",
    "Provenance",
    "CustomPropertyDeclaration",
    # Bridge
    "ThemeAccessor",
    "ThemeBridge",
    "resolve_namespace",
    "emit",
    "to_css",
    "flatten_color_palette",
    "with_alpha",
    # Default fonts
    "FontOverride",
    "parse_font_family",
    "apply_default_fonts",
]
