"""YAML configuration loading and service composition."""

from __future__ import annotations

from typing import TYPE_CHECKING

from datasource_registry.config.loader import ConfigError, load_config
from datasource_registry.config.schema import Config, RegistrySettings
from datasource_registry.core.store import ConfigStore
from datasource_registry.core.variables import VariableIndex
from datasource_registry.engine.loader import ImportlibPluginLoader
from datasource_registry.engine.service import DatasourceService

if TYPE_CHECKING:
    from pathlib import Path

    from datasource_registry.core.alerts import AlertChannel
    from datasource_registry.engine.loader import PluginLoader

__all__ = [
    "Config",
    "ConfigError",
    "RegistrySettings",
    "build_service",
    "load",
    "load_config",
]


def load(path: Path | str) -> Config:
    """Load a YAML configuration file."""
    return load_config(path)


def build_service(
    config: Config,
    *,
    plugin_loader: PluginLoader | None = None,
    alerts: AlertChannel | None = None,
) -> DatasourceService:
    """Build a ``DatasourceService`` from a ``Config`` instance.

    This is the composition root: construct the service once and pass it to
    the code that needs datasources.
    """
    store = ConfigStore(config.datasources.values(), default_name=config.default_datasource)
    variables = VariableIndex(config.variables)
    if plugin_loader is None:
        plugin_loader = ImportlibPluginLoader(config.registry.plugin_dir or config.config_dir)
    return DatasourceService(
        store,
        variables,
        plugin_loader,
        alerts=alerts,
        failure_mode=config.registry.failure_mode,
        dedupe_loads=config.registry.dedupe_loads,
    )
