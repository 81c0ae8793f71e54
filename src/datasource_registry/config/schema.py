"""Configuration models for YAML-based registry definitions."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Any, Self

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from datasource_registry.core.models import (
    DatasourceSettings,  # noqa: TC001 - Pydantic needs this at runtime
    Variable,  # noqa: TC001 - Pydantic needs this at runtime
)
from datasource_registry.engine.service import LoadFailureMode


class RegistrySettings(BaseSettings):
    """Registry behaviour settings.

    Fields can be set via YAML (constructor kwargs) or environment variables
    with the ``DATASOURCES_`` prefix.  Constructor kwargs take precedence.
    """

    model_config = SettingsConfigDict(env_prefix="DATASOURCES_")

    default_datasource: str | None = None
    plugin_dir: Path | None = None
    failure_mode: LoadFailureMode = LoadFailureMode.REJECT
    dedupe_loads: bool = True


def _none_to_list(v: Any) -> Any:
    return v if v is not None else []


def _none_to_dict(v: Any) -> Any:
    return v if v is not None else {}


def _named_datasources(v: Any) -> Any:
    """Fill in ``name`` from the mapping key when an entry omits it."""
    if not isinstance(v, dict):
        return v
    named: dict[str, Any] = {}
    for key, entry in v.items():
        if isinstance(entry, dict):
            entry = {"name": key, **entry}
        named[key] = entry
    return named


class Config(BaseModel):
    """Registry configuration as read from YAML."""

    model_config = ConfigDict(extra="forbid")

    registry: RegistrySettings
    datasources: Annotated[
        dict[str, DatasourceSettings],
        BeforeValidator(_none_to_dict),
        BeforeValidator(_named_datasources),
    ] = Field(default_factory=dict)
    variables: Annotated[list[Variable], BeforeValidator(_none_to_list)] = []
    config_dir: Path = Path()

    @model_validator(mode="after")
    def _keys_match_names(self) -> Self:
        for key, ds in self.datasources.items():
            if key != ds.name:
                msg = f"Datasource key '{key}' does not match its name '{ds.name}'"
                raise ValueError(msg)
        return self

    @property
    def default_datasource(self) -> str:
        """Configured default name, falling back to the datasource flagged ``isDefault``."""
        if self.registry.default_datasource:
            return self.registry.default_datasource
        for ds in self.datasources.values():
            if ds.is_default:
                return ds.name
        return ""
