"""Shared pytest fixtures for twcompat tests."""

from collections.abc import Callable
from typing import Any

import pytest

from twcompat.compat import LoadedModule
from twcompat.design_system import DesignSystem

BASELINE = {
    "--color-red-500": "#ef4444",
    "--color-slate-200": "#e2e8f0",
    "--color-slate-500": "#64748b",
    "--font-size-base": "1rem",
    "--font-size-base--line-height": "1.5rem",
    "--font-family-sans": "ui-sans-serif, system-ui, sans-serif",
    "--font-family-mono": "ui-monospace, monospace",
    "--default-font-family": "var(--font-family-sans)",
    "--default-font-feature-settings": "var(--font-family-sans--font-feature-settings)",
    "--default-font-variation-settings": "var(--font-family-sans--font-variation-settings)",
    "--default-mono-font-family": "var(--font-family-mono)",
    "--default-mono-font-feature-settings": "var(--font-family-mono--font-feature-settings)",
    "--default-mono-font-variation-settings": "var(--font-family-mono--font-variation-settings)",
    "--breakpoint-sm": "40rem",
    "--breakpoint-md": "48rem",
}


@pytest.fixture
def baseline() -> dict[str, str]:
    """Return the built-in theme used by most tests."""
    return dict(BASELINE)


@pytest.fixture
def make_design_system(baseline: dict[str, str]) -> Callable[..., DesignSystem]:
    """Return a factory for design systems seeded with the baseline."""

    def factory(css: dict[str, str] | None = None, **kwargs: Any) -> DesignSystem:
        return DesignSystem.from_theme(defaults=baseline, css=css, **kwargs)

    return factory


@pytest.fixture
def memory_loader() -> Callable[..., Any]:
    """
    Return a factory for in-memory module loaders.

    The loader records every identifier it is asked for in `calls`.
    """

    def factory(modules: dict[str, Any], calls: list[str] | None = None):
        async def load(identifier: str, base: str) -> LoadedModule:
            if calls is not None:
                calls.append(identifier)
            if identifier not in modules:
                raise FileNotFoundError(identifier)
            return LoadedModule(module=modules[identifier], base=base)

        return load

    return factory
