"""Core datasource registry types."""

from datasource_registry.core.alerts import AlertChannel, AlertEvent, LoggingAlertChannel
from datasource_registry.core.errors import (
    DatasourceNotFoundError,
    MalformedPluginError,
    PluginImportError,
    PluginLoadError,
    RegistryError,
)
from datasource_registry.core.models import (
    DatasourceSettings,
    PluginMeta,
    ScopedVar,
    SourceItem,
    Variable,
    VariableCurrent,
)
from datasource_registry.core.plugin import DatasourceApi
from datasource_registry.core.store import ConfigStore
from datasource_registry.core.variables import VariableIndex

__all__ = [
    "AlertChannel",
    "AlertEvent",
    "ConfigStore",
    "DatasourceApi",
    "DatasourceNotFoundError",
    "DatasourceSettings",
    "LoggingAlertChannel",
    "MalformedPluginError",
    "PluginImportError",
    "PluginLoadError",
    "PluginMeta",
    "RegistryError",
    "ScopedVar",
    "SourceItem",
    "Variable",
    "VariableCurrent",
    "VariableIndex",
]
