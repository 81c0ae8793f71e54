"""Plugin capability interface.

A plugin module (or any object returned by the plugin loader) must expose a
``Datasource`` attribute holding a :class:`DatasourceApi` subclass. The
registry instantiates it with the datasource's settings and stamps the
identity attributes afterwards.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from datasource_registry.core.models import DatasourceSettings, PluginMeta

PLUGIN_EXPORT = "Datasource"


class DatasourceApi:
    """Base class for datasource plugin implementations."""

    name: str
    meta: PluginMeta
    plugin_exports: Any

    def __init__(self, instance_settings: DatasourceSettings) -> None:
        self.instance_settings = instance_settings

    def __repr__(self) -> str:
        name = getattr(self, "name", self.instance_settings.name)
        return f"{type(self).__name__}(name={name!r})"


def datasource_class(exports: Any) -> type[DatasourceApi] | None:
    """Return the ``Datasource`` class exported by *exports*, or None if malformed."""
    factory = getattr(exports, PLUGIN_EXPORT, None)
    if isinstance(factory, type) and issubclass(factory, DatasourceApi):
        return factory
    return None
