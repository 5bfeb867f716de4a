"""
Error types for legacy configuration loading and plugin execution.

Shape mismatches inside a config are never errors: the offending leaf is
skipped. Only load failures and plugin faults abort a compile.
"""

from __future__ import annotations

from dataclasses import dataclass


class CompatError(Exception):
    """Base exception for all twcompat errors."""

    def __init__(self, message: str, context: ErrorContext | None = None):
        self.message = message
        self.context = context
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format error message with context if available."""
        if self.context:
            return f"{self.context.format()}\n{self.message}"
        return self.message


class ConfigLoadError(CompatError):
    """
    Raised when a referenced config or plugin module cannot be loaded.

    Examples:
    - The loader capability raised or returned nothing
    - A `.py` module has no `config`/`plugin`/`default` attribute
    - A YAML/JSON file is not valid
    """

    @property
    def identifier(self) -> str | None:
        return self.context.identifier if self.context else None


class PluginError(CompatError):
    """
    Raised when a plugin function fails while it is being executed.

    The registries are left as they were when the plugin failed; callers
    must discard the design system.
    """

    def __init__(
        self,
        message: str,
        plugin_name: str,
        context: ErrorContext | None = None,
    ):
        self.plugin_name = plugin_name
        super().__init__(message, context)


class SettingsError(CompatError):
    """Raised when twcompat.toml exists but cannot be parsed or validated."""

    pass


@dataclass
class ErrorContext:
    """
    Where an error came from.

    Attributes:
        identifier: The config/plugin reference as written by the user
        base: Directory the reference was resolved against
    """

    identifier: str
    base: str | None = None

    def format(self) -> str:
        """
        Format error context as a human-readable string.

        Returns:
            Formatted string like: "./tailwind.config.js (from /root)"
        """
        if self.base:
            return f"{self.identifier} (from {self.base})"
        return self.identifier


def make_load_error(message: str, identifier: str, base: str | None = None) -> ConfigLoadError:
    """
    Helper to create a ConfigLoadError with context.

    Args:
        message: Error description
        identifier: The reference that failed to load
        base: Optional base directory it was resolved against

    Returns:
        ConfigLoadError with context attached
    """
    return ConfigLoadError(message, ErrorContext(identifier=identifier, base=base))
