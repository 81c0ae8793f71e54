"""Datasource service: resolve, lazily load and cache datasource instances."""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import TYPE_CHECKING, Any, NoReturn

from datasource_registry.core.alerts import AlertEvent, LoggingAlertChannel
from datasource_registry.core.errors import (
    DatasourceNotFoundError,
    MalformedPluginError,
    PluginLoadError,
    RegistryError,
)
from datasource_registry.core.models import SourceItem
from datasource_registry.core.plugin import datasource_class
from datasource_registry.engine.resolver import DEFAULT_NAME, NameResolver

if TYPE_CHECKING:
    from collections.abc import Mapping

    from datasource_registry.core.alerts import AlertChannel
    from datasource_registry.core.models import DatasourceSettings, ScopedVar
    from datasource_registry.core.plugin import DatasourceApi
    from datasource_registry.core.store import ConfigStore
    from datasource_registry.core.variables import VariableIndex
    from datasource_registry.engine.loader import PluginLoader

logger = logging.getLogger(__name__)

# Sort keys of the built-in grafana and mixed datasources; they always rank last.
_GRAFANA_SORT = chr(253)
_MIXED_SORT = chr(254)
_SORT_RANK = {_GRAFANA_SORT: 1, _MIXED_SORT: 2}


class LoadFailureMode(str, Enum):
    """What a caller sees when a plugin fails to load.

    ``REJECT`` raises :class:`PluginLoadError` (or :class:`MalformedPluginError`).
    ``PENDING`` only reports the failure on the alert channel and leaves the
    caller's await unresolved; it can still be cancelled or timed out.
    """

    REJECT = "reject"
    PENDING = "pending"


class DatasourceService:
    """Resolve datasource names and serve plugin instances from a process-wide cache.

    The cache is append-only: once an instance is cached for a resolved name
    it is returned by every later lookup. Failed loads are not cached, so the
    next lookup for the same name loads again.
    """

    def __init__(
        self,
        store: ConfigStore,
        variables: VariableIndex,
        plugin_loader: PluginLoader,
        *,
        alerts: AlertChannel | None = None,
        failure_mode: LoadFailureMode = LoadFailureMode.REJECT,
        dedupe_loads: bool = True,
    ) -> None:
        self.store = store
        self.variables = variables
        self.plugin_loader = plugin_loader
        self.alerts: AlertChannel = alerts or LoggingAlertChannel()
        self.failure_mode = LoadFailureMode(failure_mode)
        self.dedupe_loads = dedupe_loads
        self.resolver = NameResolver(store, variables)
        self._datasources: dict[str, DatasourceApi] = {}
        self._in_flight: dict[str, asyncio.Task[DatasourceApi]] = {}

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def resolve(
        self,
        name: str | None = None,
        scoped_vars: Mapping[str, ScopedVar | Mapping[str, str]] | None = None,
    ) -> str:
        """Return the resolved name (cache key) for *name*."""
        return self.resolver.resolve(name, scoped_vars)

    def cached(self, name: str) -> DatasourceApi | None:
        """Return the cached instance for a resolved name, if any."""
        return self._datasources.get(name)

    async def get(
        self,
        name: str | None = None,
        scoped_vars: Mapping[str, ScopedVar | Mapping[str, str]] | None = None,
    ) -> DatasourceApi:
        """Return the datasource instance for *name*, loading it on first use.

        Raises:
            DatasourceNotFoundError: The resolved name is not configured.
            MalformedPluginError: The plugin does not export a ``Datasource`` class.
            PluginLoadError: The plugin module failed to load or instantiate.
        """
        resolved = self.resolve(name, scoped_vars)
        instance = self._datasources.get(resolved)
        if instance is not None:
            logger.debug("Datasource %s served from cache", resolved)
            return instance
        return await self.load(resolved)

    async def load(self, name: str) -> DatasourceApi:
        """Load the plugin for the resolved *name*, instantiate and cache it."""
        settings = self.store.get(name)
        if settings is None:
            raise DatasourceNotFoundError(name)

        if not self.dedupe_loads:
            return await self._load(name, settings)

        task = self._in_flight.get(name)
        if task is None:
            task = asyncio.ensure_future(self._load(name, settings))
            self._in_flight[name] = task
            task.add_done_callback(lambda t: self._forget(name, t))
        else:
            logger.debug("Joining in-flight load of datasource %s", name)
        # A cancelled caller must not cancel the load other callers wait on.
        return await asyncio.shield(task)

    def _forget(self, name: str, task: asyncio.Task[Any] | None = None) -> None:
        if task is None or self._in_flight.get(name) is task:
            self._in_flight.pop(name, None)
        if task is not None and not task.cancelled():
            # Retrieve the exception so an unawaited failure is not reported as lost.
            task.exception()

    async def _load(self, name: str, settings: DatasourceSettings) -> DatasourceApi:
        module_ref = settings.meta.module
        logger.debug("Loading plugin '%s' for datasource %s", module_ref, name)
        try:
            exports = await self.plugin_loader.load_module(module_ref)
        except Exception as exc:
            await self._fail(settings, PluginLoadError(name, module_ref, str(exc)), exc)

        # Another load for the same name may have finished while this one was suspended.
        instance = self._datasources.get(name)
        if instance is not None:
            logger.debug("Datasource %s was cached by a concurrent load", name)
            return instance

        factory = datasource_class(exports)
        if factory is None:
            await self._fail(settings, MalformedPluginError(name, module_ref))

        try:
            instance = factory(settings)
        except Exception as exc:
            await self._fail(settings, PluginLoadError(name, module_ref, str(exc)), exc)

        instance.meta = settings.meta.model_copy()
        instance.name = name
        instance.plugin_exports = exports
        self._datasources[name] = instance
        logger.info("Datasource %s instantiated from plugin '%s'", name, module_ref)
        return instance

    async def _fail(
        self,
        settings: DatasourceSettings,
        error: RegistryError,
        cause: BaseException | None = None,
    ) -> NoReturn:
        self.alerts.emit(
            AlertEvent(title=f"{settings.name} plugin failed", body=str(cause or error))
        )
        if self.failure_mode is LoadFailureMode.PENDING:
            self._forget(settings.name)
            # Never resolved: the caller stays pending until cancelled.
            await asyncio.get_running_loop().create_future()
        raise error from cause

    # ------------------------------------------------------------------
    # Enumeration
    # ------------------------------------------------------------------

    def list_all(self) -> list[DatasourceSettings]:
        """Every configured datasource, in declaration order."""
        return list(self.store.values())

    def list_external(self) -> list[DatasourceSettings]:
        """Datasources provided by installable plugins, sorted by name."""
        return sorted(
            (ds for ds in self.store.values() if not ds.meta.built_in),
            key=lambda ds: ds.name,
        )

    def list_annotation_sources(self) -> list[SourceItem]:
        """Variable-backed entries followed by datasources that support annotations."""
        sources = self.variable_sources()
        sources.extend(
            SourceItem(name=name, value=name, meta=ds.meta, sort=name)
            for name, ds in self.store.items()
            if ds.meta.annotations
        )
        return sources

    def list_metric_sources(self, *, skip_variables: bool = False) -> list[SourceItem]:
        """Datasources that support metrics, as picker entries.

        A synthetic ``default`` entry follows the configured default datasource,
        the built-in ``grafana`` and ``mixed`` datasources sort last, and
        variable-backed entries are included unless *skip_variables* is set.
        """
        sources: list[SourceItem] = []
        default_name = self._default_name()
        for name, ds in self.store.items():
            if not ds.meta.metrics:
                continue
            sort = name
            if ds.meta.id == "grafana":
                sort = _GRAFANA_SORT
            elif ds.meta.id == "mixed":
                sort = _MIXED_SORT
            sources.append(SourceItem(name=name, value=name, meta=ds.meta, sort=sort))

            if name == default_name:
                sources.append(SourceItem(name=DEFAULT_NAME, value=None, meta=ds.meta, sort=name))

        if not skip_variables:
            sources.extend(self.variable_sources())

        return sorted(sources, key=lambda s: (_SORT_RANK.get(s.sort, 0), s.sort.lower()))

    def _default_name(self) -> str:
        """Resolved default name, or an empty string when there is none."""
        try:
            return self.resolver.resolve_default()
        except DatasourceNotFoundError:
            return ""

    def variable_sources(self) -> list[SourceItem]:
        """One ``$<name>`` entry per datasource variable whose value is a known datasource."""
        sources: list[SourceItem] = []
        for variable in self.variables.variables:
            if variable.type != "datasource":
                continue

            value = variable.current.value
            first = value if isinstance(value, str) else next(iter(value), "")
            if first == DEFAULT_NAME:
                first = self._default_name()

            ds = self.store.get(first)
            if ds is None:
                logger.debug("Skipping variable $%s: no datasource named %r", variable.name, first)
                continue

            key = f"${variable.name}"
            sources.append(SourceItem(name=key, value=key, meta=ds.meta, sort=key))
        return sources
