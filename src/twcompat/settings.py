"""
Settings for the compatibility layer.

Settings are read from an optional `twcompat.toml` in the project root:

    [compat]
    dark_class = "dark"
    default_font_settings = "normal"

    [compat.theme_keys.tabSize]
    namespace = "--tab-size"

Missing files yield the defaults below.
"""

from __future__ import annotations

import logging
import tomllib
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import SettingsError

logger = logging.getLogger(__name__)

SETTINGS_FILE = "twcompat.toml"


class ThemeKeySpec(BaseModel):
    """How one legacy theme key maps onto the custom-property namespace."""

    model_config = ConfigDict(frozen=True)

    namespace: str = Field(description="Custom property prefix, e.g. --color")
    nested: bool = Field(
        default=False,
        description="Nested mappings flatten into dash-joined names (colors.slate.200)",
    )


def default_theme_keys() -> dict[str, ThemeKeySpec]:
    return {
        "colors": ThemeKeySpec(namespace="--color", nested=True),
        "fontSize": ThemeKeySpec(namespace="--font-size"),
        "fontFamily": ThemeKeySpec(namespace="--font-family"),
        "fontWeight": ThemeKeySpec(namespace="--font-weight"),
        "lineHeight": ThemeKeySpec(namespace="--line-height"),
        "letterSpacing": ThemeKeySpec(namespace="--letter-spacing"),
        "screens": ThemeKeySpec(namespace="--breakpoint"),
        "spacing": ThemeKeySpec(namespace="--spacing"),
        "borderRadius": ThemeKeySpec(namespace="--radius"),
        "boxShadow": ThemeKeySpec(namespace="--shadow"),
        "dropShadow": ThemeKeySpec(namespace="--drop-shadow"),
        "blur": ThemeKeySpec(namespace="--blur"),
        "animation": ThemeKeySpec(namespace="--animate"),
        "perspective": ThemeKeySpec(namespace="--perspective"),
        "aspectRatio": ThemeKeySpec(namespace="--aspect"),
        "zIndex": ThemeKeySpec(namespace="--z-index"),
    }


class CompatSettings(BaseModel):
    """Knobs for config-to-theme translation."""

    model_config = ConfigDict(frozen=True)

    dark_class: str = Field(default="dark", description="Class used by darkMode 'selector'")
    default_font_settings: str = Field(
        default="normal",
        description="Value for font feature/variation settings a font tuple omits",
    )
    print_variant: str = Field(default="print", description="Variant that always sorts last")
    theme_keys: dict[str, ThemeKeySpec] = Field(default_factory=default_theme_keys)


DEFAULT_SETTINGS = CompatSettings()


def get_settings_path(project_root: Path) -> Path:
    """Get the twcompat.toml file path."""
    return project_root / SETTINGS_FILE


def _parse_settings_data(data: dict[str, Any]) -> CompatSettings:
    section = dict(data.get("compat", {}))
    extra_keys = section.pop("theme_keys", {})
    theme_keys = default_theme_keys()
    for key, spec in extra_keys.items():
        theme_keys[key] = ThemeKeySpec(**spec)
    return CompatSettings(**section, theme_keys=theme_keys)


def load_settings(project_root: Path) -> CompatSettings:
    """
    Load settings from twcompat.toml.

    Args:
        project_root: Directory that may contain twcompat.toml

    Returns:
        CompatSettings (defaults when the file does not exist)

    Raises:
        SettingsError: If the file exists but is not valid
    """
    path = get_settings_path(project_root)
    if not path.exists():
        logger.debug("No %s found, using defaults", SETTINGS_FILE)
        return DEFAULT_SETTINGS

    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
        return _parse_settings_data(data)
    except tomllib.TOMLDecodeError as e:
        raise SettingsError(f"Invalid TOML in {path}: {e}") from e
    except (ValidationError, TypeError) as e:
        raise SettingsError(f"Invalid settings in {path}: {e}") from e
