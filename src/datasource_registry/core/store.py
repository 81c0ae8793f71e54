"""Read-only datasource configuration store."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from types import MappingProxyType
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from datasource_registry.core.models import DatasourceSettings


class ConfigStore(Mapping[str, "DatasourceSettings"]):
    """Mapping ``name -> DatasourceSettings`` plus the default datasource name.

    Iteration follows declaration order.
    """

    def __init__(self, datasources: Iterable[DatasourceSettings], default_name: str) -> None:
        by_name: dict[str, DatasourceSettings] = {}
        for ds in datasources:
            if ds.name in by_name:
                raise ValueError(f"Datasource already configured: {ds.name}")
            by_name[ds.name] = ds
        self._datasources = MappingProxyType(by_name)
        self._default_name = default_name

    @property
    def default_name(self) -> str:
        return self._default_name

    def __getitem__(self, name: str) -> DatasourceSettings:
        return self._datasources[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._datasources)

    def __len__(self) -> int:
        return len(self._datasources)

    def __repr__(self) -> str:
        return f"ConfigStore({list(self._datasources)!r}, default_name={self._default_name!r})"
