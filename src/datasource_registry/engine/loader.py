"""Plugin module loading."""

from __future__ import annotations

import asyncio
import importlib
import importlib.metadata
import importlib.util
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol

from datasource_registry.core.errors import PluginImportError

if TYPE_CHECKING:
    from types import ModuleType

logger = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "datasource_registry.plugins"


class PluginLoader(Protocol):
    """Asynchronously resolve a plugin module reference to its exports."""

    async def load_module(self, module_ref: str) -> Any: ...


def _load_local_module(module_path: str, plugin_dir: Path) -> ModuleType:
    """Load a Python module from a file relative to *plugin_dir*."""
    parts = module_path.split(".")
    candidates = [
        plugin_dir / Path(*parts).with_suffix(".py"),
        plugin_dir / Path(*parts) / "__init__.py",
    ]
    file_path = next((p for p in candidates if p.exists()), None)
    if file_path is None:
        raise PluginImportError(f"Module '{module_path}' not found relative to {plugin_dir}")

    spec = importlib.util.spec_from_file_location(module_path, file_path)
    if spec is None or spec.loader is None:
        raise PluginImportError(f"Failed to create module spec for '{file_path}'")
    mod = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(mod)
    return mod


def _import_module(module_path: str, plugin_dir: Path | None) -> ModuleType:
    try:
        return importlib.import_module(module_path)
    except ModuleNotFoundError as exc:
        missing = exc.name or module_path
        # Only fall back when the requested module itself is missing, not one of its imports.
        own_module = module_path == missing or module_path.startswith(f"{missing}.")
        if plugin_dir is None or not own_module:
            raise PluginImportError(f"Failed to import '{module_path}': {exc}") from exc
        return _load_local_module(module_path, plugin_dir)


def resolve_module_ref(module_ref: str, plugin_dir: Path | None = None) -> Any:
    """Resolve *module_ref* to plugin exports.

    Resolution order:

    1. Has ``:``: split into ``module_path:attribute`` and return the attribute.
    2. A name registered in the ``datasource_registry.plugins`` entry-point group.
    3. A dotted module path: ``importlib.import_module`` (installed packages),
       falling back to a file relative to *plugin_dir*.
    """
    if ":" in module_ref:
        module_path, _, attr = module_ref.rpartition(":")
        if not module_path or not attr:
            raise PluginImportError(
                f"Invalid module reference '{module_ref}': expected 'module.path:attribute'"
            )
        mod = _import_module(module_path, plugin_dir)
        try:
            return getattr(mod, attr)
        except AttributeError as exc:
            raise PluginImportError(
                f"Module '{module_path}' has no attribute '{attr}' (from '{module_ref}')"
            ) from exc

    eps = list(importlib.metadata.entry_points(group=ENTRY_POINT_GROUP, name=module_ref))
    if eps:
        logger.debug("Loading plugin '%s' from entry point %s", module_ref, ENTRY_POINT_GROUP)
        return eps[0].load()

    return _import_module(module_ref, plugin_dir)


class ImportlibPluginLoader:
    """Plugin loader backed by importlib; imports run in a worker thread."""

    def __init__(self, plugin_dir: Path | str | None = None) -> None:
        self.plugin_dir = Path(plugin_dir) if plugin_dir is not None else None

    async def load_module(self, module_ref: str) -> Any:
        logger.debug("Importing plugin module '%s'", module_ref)
        return await asyncio.to_thread(resolve_module_ref, module_ref, self.plugin_dir)
