"""
twcompat command line.

Commands:
- resolve: print the `:root` block a set of configs and plugins produce
- inspect: table of every theme entry with its provenance
- build: CSS for plugin utility candidates

The baseline theme is a YAML or JSON file:

    default:            # @theme default { ... }
      --color-red-500: "#ef4444"
    theme:              # @theme { ... }
      --breakpoint-md: 50rem
    variants:           # @variant name (selector)
      dark: "&:is(.my-dark)"
"""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Annotated, Any

import typer
import yaml
from rich.console import Console
from rich.table import Table

from . import __version__
from .compat import CompatResult, ConfigReference, apply_compat_hooks
from .design_system import DesignSystem
from .errors import CompatError
from .loader import FileModuleLoader
from .settings import load_settings
from .theme.namespace import Provenance

app = typer.Typer(
    help="Resolve legacy theme configs and plugins into CSS theme variables",
    no_args_is_help=True,
)

console = Console()
err_console = Console(stderr=True)

logger = logging.getLogger(__name__)

ConfigOption = Annotated[
    list[Path] | None,
    typer.Option("--config", "-c", help="Config module (.py, .json, .yaml)"),
]
PluginOption = Annotated[
    list[Path] | None,
    typer.Option("--plugin", "-p", help="Plugin module (.py)"),
]
BaselineOption = Annotated[
    Path | None,
    typer.Option("--baseline", "-b", help="Baseline theme file (YAML or JSON)"),
]
ProjectRootOption = Annotated[
    Path | None,
    typer.Option("--project-root", help="Directory containing twcompat.toml (default: current)"),
]


def version_callback(value: bool) -> None:
    if value:
        typer.echo(f"twcompat {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: Annotated[
        bool | None,
        typer.Option("--version", callback=version_callback, is_eager=True, help="Show version"),
    ] = None,
    verbose: Annotated[bool, typer.Option("--verbose", help="Debug logging")] = False,
) -> None:
    """twcompat CLI main callback for global options."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        )


def read_baseline(path: Path | None) -> dict[str, Any]:
    if path is None:
        return {}
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as e:
        err_console.print(f"[red]Cannot read baseline {path}: {e}[/red]")
        raise typer.Exit(1) from e
    return data if isinstance(data, dict) else {}


def _references(configs: list[Path] | None, plugins: list[Path] | None) -> list[ConfigReference]:
    cwd = str(Path.cwd())
    references = [ConfigReference(str(path), cwd, kind="plugin") for path in plugins or []]
    references += [ConfigReference(str(path), cwd, kind="config") for path in configs or []]
    return references


def _run(
    configs: list[Path] | None,
    plugins: list[Path] | None,
    baseline: Path | None,
    project_root: Path | None,
) -> tuple[DesignSystem, CompatResult]:
    try:
        settings = load_settings(project_root or Path.cwd())
    except CompatError as e:
        err_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e

    data = read_baseline(baseline)
    design_system = DesignSystem.from_theme(
        defaults=data.get("default") or {},
        css=data.get("theme") or {},
        settings=settings,
    )

    try:
        result = asyncio.run(
            apply_compat_hooks(design_system, _references(configs, plugins), FileModuleLoader())
        )
    except CompatError as e:
        err_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e

    # Native @variant declarations are applied after compat and always win.
    for name, selectors in (data.get("variants") or {}).items():
        design_system.add_css_variant(name, selectors)
    return design_system, result


@app.command()
def resolve(
    config: ConfigOption = None,
    plugin: PluginOption = None,
    baseline: BaselineOption = None,
    project_root: ProjectRootOption = None,
    output_json: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
) -> None:
    """Print the custom properties that differ from the baseline."""
    design_system, result = _run(config, plugin, baseline, project_root)

    if output_json:
        data = {
            "theme": {name: value for name, value in design_system.theme.emit()},
            "content": [
                {"base": glob.base, "pattern": glob.pattern} for glob in result.globs
            ],
            "variants": design_system.variants.names(),
        }
        console.print_json(json.dumps(data))
        return

    css = design_system.theme_css()
    typer.echo(css.rstrip("\n") if css else "/* no theme overrides */")


@app.command()
def inspect(
    config: ConfigOption = None,
    plugin: PluginOption = None,
    baseline: BaselineOption = None,
    project_root: ProjectRootOption = None,
    show_all: Annotated[
        bool, typer.Option("--all", "-a", help="Include unchanged baseline entries")
    ] = False,
) -> None:
    """Show theme entries with their provenance and source."""
    design_system, result = _run(config, plugin, baseline, project_root)

    table = Table(title="Theme")
    table.add_column("Property", style="cyan")
    table.add_column("Value")
    table.add_column("Provenance")
    table.add_column("Source", style="dim")

    for name, entry in design_system.theme.items():
        if entry.provenance is Provenance.DEFAULT and not show_all:
            continue
        style = "green" if entry.provenance is Provenance.OVERRIDE else "dim"
        table.add_row(
            name,
            entry.value,
            f"[{style}]{entry.provenance}[/{style}]",
            entry.source,
        )
    console.print(table)

    for contribution in result.contributions:
        console.print(
            f"Plugin [bold]{contribution.plugin_name}[/bold]: "
            f"{len(contribution.utilities)} utilities, {len(contribution.variants)} variants"
        )


@app.command()
def build(
    candidates: Annotated[list[str], typer.Argument(help="Utility candidates, e.g. hover:btn")],
    config: ConfigOption = None,
    plugin: PluginOption = None,
    baseline: BaselineOption = None,
    project_root: ProjectRootOption = None,
) -> None:
    """Build plugin utility candidates into CSS."""
    design_system, _ = _run(config, plugin, baseline, project_root)
    css = design_system.build(candidates)
    if not css:
        err_console.print("[yellow]No candidates matched a registered utility[/yellow]")
        raise typer.Exit(1)
    typer.echo(css.rstrip("\n"))


def main() -> None:
    app()


if __name__ == "__main__":
    main()
