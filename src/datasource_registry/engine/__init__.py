"""Name resolution, plugin loading and the datasource instance cache."""

from datasource_registry.engine.loader import (
    ENTRY_POINT_GROUP,
    ImportlibPluginLoader,
    PluginLoader,
    resolve_module_ref,
)
from datasource_registry.engine.resolver import DEFAULT_NAME, NameResolver
from datasource_registry.engine.service import DatasourceService, LoadFailureMode

__all__ = [
    "DEFAULT_NAME",
    "ENTRY_POINT_GROUP",
    "DatasourceService",
    "ImportlibPluginLoader",
    "LoadFailureMode",
    "NameResolver",
    "PluginLoader",
    "resolve_module_ref",
]
