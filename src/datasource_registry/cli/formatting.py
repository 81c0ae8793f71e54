"""Terminal rendering of datasource lists and load results."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.table import Table

if TYPE_CHECKING:
    from collections.abc import Iterable

    from datasource_registry.core.models import DatasourceSettings, PluginMeta, SourceItem
    from datasource_registry.core.plugin import DatasourceApi


def _capabilities(meta: PluginMeta) -> str:
    flags = [
        label
        for label, enabled in (
            ("built-in", meta.built_in),
            ("annotations", meta.annotations),
            ("metrics", meta.metrics),
        )
        if enabled
    ]
    return ", ".join(flags)


def settings_table(datasources: Iterable[DatasourceSettings], *, default_name: str) -> Table:
    """Table of configured datasources; the default one is starred."""
    table = Table(title="Datasources")
    table.add_column("Name")
    table.add_column("Plugin")
    table.add_column("Module")
    table.add_column("Capabilities")
    for ds in datasources:
        name = f"{ds.name} *" if ds.name == default_name else ds.name
        table.add_row(name, ds.meta.id, ds.meta.module, _capabilities(ds.meta))
    return table


def sources_table(sources: Iterable[SourceItem], *, title: str) -> Table:
    """Table of picker entries in display order."""
    table = Table(title=title)
    table.add_column("Name")
    table.add_column("Value")
    table.add_column("Plugin")
    for item in sources:
        value = item.value if item.value is not None else "(default)"
        table.add_row(item.name, value, item.meta.id)
    return table


def format_instance(instance: DatasourceApi) -> str:
    """One-line summary of a loaded datasource instance."""
    return f"{instance.name}: {type(instance).__name__} (plugin {instance.meta.id})"
