"""
File-based module loader.

Stands in for the host's module loader when configs live on disk as data
or Python modules:

- `.json`: parsed with json
- `.yaml` / `.yml`: parsed with PyYAML
- `.py`: executed; the `config`, `plugin` or `default` attribute is used

Python modules are how theme functions and plugins are expressed; data
files can only carry static values.
"""

from __future__ import annotations

import importlib.util
import json
import logging
from pathlib import Path
from typing import Any

import yaml

from .compat import LoadedModule
from .errors import make_load_error

logger = logging.getLogger(__name__)

MODULE_ATTRIBUTES = ("config", "plugin", "default")


def _load_python(path: Path, identifier: str) -> Any:
    module_name = f"twcompat_user_{path.stem}_{abs(hash(path))}"
    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        raise make_load_error("Cannot import module", identifier, str(path.parent))
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)

    for attribute in MODULE_ATTRIBUTES:
        if hasattr(module, attribute):
            return getattr(module, attribute)
    raise make_load_error(
        f"Module defines none of: {', '.join(MODULE_ATTRIBUTES)}",
        identifier,
        str(path.parent),
    )


class FileModuleLoader:
    """
    Async loader for config and plugin files.

    Example:
        loader = FileModuleLoader()
        loaded = await loader("./tailwind.config.py", "/project")
    """

    def __init__(self) -> None:
        self.loaded: list[Path] = []

    def resolve(self, identifier: str, base: str) -> Path:
        path = Path(identifier)
        if not path.is_absolute():
            path = Path(base) / path
        return path.resolve()

    async def __call__(self, identifier: str, base: str) -> LoadedModule:
        path = self.resolve(identifier, base)
        if not path.is_file():
            raise make_load_error(f"File not found: {path}", identifier, base)

        suffix = path.suffix.lower()
        try:
            if suffix == ".json":
                value = json.loads(path.read_text(encoding="utf-8"))
            elif suffix in (".yaml", ".yml"):
                value = yaml.safe_load(path.read_text(encoding="utf-8"))
            elif suffix == ".py":
                value = _load_python(path, identifier)
            else:
                raise make_load_error(
                    f"Unsupported module type: {suffix or path.name}", identifier, base
                )
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise make_load_error(f"Invalid {suffix[1:].upper()}: {e}", identifier, base) from e

        logger.debug("Loaded %s", path)
        self.loaded.append(path)
        return LoadedModule(module=value, base=str(path.parent))
