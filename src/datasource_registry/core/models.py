"""Datasource, plugin and template variable models."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class PluginMeta(BaseModel):
    """Capability descriptor of a datasource plugin."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    id: str
    name: str = ""
    module: str
    built_in: bool = Field(default=False, alias="builtIn")
    annotations: bool = False
    metrics: bool = False


class DatasourceSettings(BaseModel):
    """Settings of one configured datasource, keyed by ``name`` in the store."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    name: str = Field(min_length=1)
    type: str = ""
    url: str = ""
    access: str = "proxy"
    is_default: bool = Field(default=False, alias="isDefault")
    json_data: dict[str, Any] = Field(default_factory=dict, alias="jsonData")
    meta: PluginMeta


class VariableCurrent(BaseModel):
    """Currently selected value of a template variable."""

    model_config = ConfigDict(extra="forbid")

    value: str | list[str] = ""
    text: str | list[str] = ""


class Variable(BaseModel):
    """A declared template variable. Only ``type == "datasource"`` matters to the registry."""

    model_config = ConfigDict(extra="forbid")

    name: str = Field(pattern=r"^\w+$")
    type: str = "custom"
    current: VariableCurrent = Field(default_factory=VariableCurrent)
    options: list[dict[str, Any]] = Field(default_factory=list)
    multi: bool = False


class ScopedVar(BaseModel):
    """Per-request variable binding that overrides the declared current value."""

    model_config = ConfigDict(frozen=True)

    value: str
    text: str = ""


@dataclass(frozen=True)
class SourceItem:
    """Entry of a datasource picker list.

    ``value`` is ``None`` for the synthetic ``default`` entry.
    """

    name: str
    value: str | None
    meta: PluginMeta
    sort: str
