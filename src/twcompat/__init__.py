"""
twcompat - legacy theme config compatibility for CSS-first utility engines.

Loads executable config objects (theme, darkMode, presets, plugins, content)
and reconciles them with a custom-property theme declared in CSS.

Usage:
    import asyncio

    from twcompat import ConfigReference, DesignSystem, FileModuleLoader, apply_compat_hooks

    ds = DesignSystem.from_theme(defaults={"--color-red-500": "#ef4444"})
    asyncio.run(
        apply_compat_hooks(
            ds,
            [ConfigReference("./tailwind.config.py", "/project")],
            FileModuleLoader(),
        )
    )
    print(ds.theme_css())
"""

__version__ = "0.1.0"

from .compat import (
    CompatResult,
    ConfigReference,
    LoadedModule,
    ModuleLoader,
    apply_compat,
    apply_compat_hooks,
    load_references,
)
from .config import GlobEntry, MergedConfig, merge_config, merge_presets, resolve_config
from .design_system import DesignSystem
from .errors import CompatError, ConfigLoadError, PluginError, SettingsError
from .loader import FileModuleLoader
from .paths import get_path, parse_path
from .plugins import Plugin, PluginAPI, PluginContribution, plugin, plugin_with_options
from .settings import CompatSettings, load_settings
from .theme import (
    ThemeNamespace,
    ThemeSource,
    emit,
    flatten_color_palette,
    resolve_namespace,
    to_css,
)
from .values import ThemeTuple

__all__ = [
    "__version__",
    # Pipeline
    "apply_compat_hooks",
    "apply_compat",
    "load_references",
    "ConfigReference",
    "LoadedModule",
    "ModuleLoader",
    "CompatResult",
    "FileModuleLoader",
    "DesignSystem",
    # Config
    "GlobEntry",
    "MergedConfig",
    "merge_config",
    "merge_presets",
    "resolve_config",
    # Theme
    "ThemeNamespace",
    "ThemeSource",
    "ThemeTuple",
    "resolve_namespace",
    "emit",
    "to_css",
    "flatten_color_palette",
    "get_path",
    "parse_path",
    # Plugins
    "Plugin",
    "PluginAPI",
    "PluginContribution",
    "plugin",
    "plugin_with_options",
    # Settings and errors
    "CompatSettings",
    "load_settings",
    "CompatError",
    "ConfigLoadError",
    "PluginError",
    "SettingsError",
]
