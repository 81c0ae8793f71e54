"""Shared fixtures for unit tests."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from datasource_registry.config import load
from datasource_registry.core.store import ConfigStore
from datasource_registry.core.variables import VariableIndex
from datasource_registry.engine.service import DatasourceService, LoadFailureMode
from tests.unit.fakes import FakePluginLoader, RecordingAlerts, datasource, ds_variable

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

    from datasource_registry.config.schema import Config

_ENV_VARS = (
    "DATASOURCES_DEFAULT_DATASOURCE",
    "DATASOURCES_PLUGIN_DIR",
    "DATASOURCES_FAILURE_MODE",
    "DATASOURCES_DEDUPE_LOADS",
    "DATASOURCES_LOG",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove DATASOURCES_* env vars so unit tests don't leak host config."""
    for var in _ENV_VARS:
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def make_config(tmp_path: Path) -> Callable[..., Config]:
    """Factory fixture: write YAML + optional .env, return loaded Config."""

    def _make(yaml_str: str, *, dotenv: str | None = None) -> Config:
        (tmp_path / "config.yaml").write_text(yaml_str)
        if dotenv is not None:
            (tmp_path / ".env").write_text(dotenv)
        return load(tmp_path / "config.yaml")

    return _make


@pytest.fixture
def store() -> ConfigStore:
    return ConfigStore(
        [
            datasource("prom", metrics=True, annotations=True),
            datasource("Loki", "loki", metrics=True),
            datasource("broken", module="plugins.missing", metrics=True),
            datasource("no_export", module="plugins.no_export"),
            datasource("exploding", "exploding"),
        ],
        default_name="prom",
    )


@pytest.fixture
def variables() -> VariableIndex:
    return VariableIndex(
        [
            ds_variable("ds", "Loki"),
            ds_variable("multi", ["Loki", "prom"]),
            ds_variable("region", "eu-west", var_type="custom"),
        ]
    )


@pytest.fixture
def loader() -> FakePluginLoader:
    return FakePluginLoader()


@pytest.fixture
def alerts() -> RecordingAlerts:
    return RecordingAlerts()


@pytest.fixture
def make_service(
    store: ConfigStore,
    variables: VariableIndex,
    loader: FakePluginLoader,
    alerts: RecordingAlerts,
) -> Callable[..., DatasourceService]:
    """Factory fixture: service over the shared store, variables and fake loader."""

    def _make(
        *,
        failure_mode: LoadFailureMode = LoadFailureMode.REJECT,
        dedupe_loads: bool = True,
    ) -> DatasourceService:
        return DatasourceService(
            store,
            variables,
            loader,
            alerts=alerts,
            failure_mode=failure_mode,
            dedupe_loads=dedupe_loads,
        )

    return _make
