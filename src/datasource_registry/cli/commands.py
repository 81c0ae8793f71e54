"""CLI command implementations."""

from __future__ import annotations

import asyncio
import os
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Annotated

import typer

from datasource_registry.cli import app
from datasource_registry.cli.errors import handle_error

if TYPE_CHECKING:
    from datasource_registry.core.models import ScopedVar
    from datasource_registry.core.plugin import DatasourceApi
    from datasource_registry.engine.service import DatasourceService

ConfigPath = Annotated[
    Path,
    typer.Option("--config", "-c", help="Path to the configuration file."),
]

NoColor = Annotated[
    bool,
    typer.Option("--no-color", help="Disable colored output."),
]

ScopedVars = Annotated[
    list[str] | None,
    typer.Option("--var", help="Scoped variable override as NAME=VALUE (repeatable)."),
]


class SourceKind(str, Enum):
    all = "all"
    external = "external"
    annotations = "annotations"
    metrics = "metrics"


def _use_color(no_color: bool) -> bool:
    """Determine whether to use color output."""
    return not (no_color or os.environ.get("NO_COLOR"))


def _service(config: Path) -> DatasourceService:
    from datasource_registry.config import build_service, load

    return build_service(load(config))


def _parse_scoped_vars(pairs: list[str] | None) -> dict[str, ScopedVar]:
    """Parse ``NAME=VALUE`` pairs into scoped variable bindings."""
    from datasource_registry.core.models import ScopedVar

    scoped: dict[str, ScopedVar] = {}
    for pair in pairs or []:
        name, sep, value = pair.partition("=")
        name = name.strip().lstrip("$")
        if not sep or not name:
            raise typer.BadParameter(f"Expected NAME=VALUE, got {pair!r}", param_hint="--var")
        scoped[name] = ScopedVar(value=value, text=value)
    return scoped


@app.command()
def sources(
    config: ConfigPath = Path("datasources.yaml"),
    kind: Annotated[
        SourceKind,
        typer.Option("--kind", "-k", help="Which list to show."),
    ] = SourceKind.all,
    skip_variables: Annotated[
        bool,
        typer.Option("--skip-variables", help="Omit variable-backed metric sources."),
    ] = False,
    no_color: NoColor = False,
) -> None:
    """List configured datasources or picker entries."""
    from rich.console import Console

    from datasource_registry.cli.formatting import settings_table, sources_table

    color = _use_color(no_color)
    try:
        service = _service(config)
    except Exception as exc:
        raise typer.Exit(handle_error(exc, color=color)) from exc

    default_name = service.store.default_name
    if kind is SourceKind.all:
        table = settings_table(service.list_all(), default_name=default_name)
    elif kind is SourceKind.external:
        table = settings_table(service.list_external(), default_name=default_name)
    elif kind is SourceKind.annotations:
        table = sources_table(service.list_annotation_sources(), title="Annotation sources")
    else:
        table = sources_table(
            service.list_metric_sources(skip_variables=skip_variables), title="Metric sources"
        )

    Console(no_color=not color, highlight=False).print(table)


@app.command()
def resolve(
    name: Annotated[str, typer.Argument(help="Datasource name, variable reference or 'default'.")],
    config: ConfigPath = Path("datasources.yaml"),
    var: ScopedVars = None,
    no_color: NoColor = False,
) -> None:
    """Print the resolved datasource name without loading its plugin."""
    color = _use_color(no_color)
    scoped = _parse_scoped_vars(var)
    try:
        service = _service(config)
        resolved = service.resolve(name, scoped)
    except Exception as exc:
        raise typer.Exit(handle_error(exc, color=color)) from exc

    typer.echo(resolved)
    if resolved not in service.store:
        typer.echo(f"warning: no datasource named {resolved} is configured", err=True)


@app.command(name="load")
def load_cmd(
    name: Annotated[str, typer.Argument(help="Datasource name, variable reference or 'default'.")],
    config: ConfigPath = Path("datasources.yaml"),
    var: ScopedVars = None,
    timeout: Annotated[
        float,
        typer.Option("--timeout", "-t", min=0.0, help="Seconds to wait for the plugin to load."),
    ] = 30.0,
    no_color: NoColor = False,
) -> None:
    """Resolve a datasource and load its plugin instance."""
    from datasource_registry.cli.formatting import format_instance

    color = _use_color(no_color)
    scoped = _parse_scoped_vars(var)

    async def _load(service: DatasourceService) -> DatasourceApi:
        try:
            return await asyncio.wait_for(service.get(name, scoped), timeout=timeout)
        except TimeoutError as exc:
            msg = f"datasource {name} did not load within {timeout:g}s"
            raise TimeoutError(msg) from exc

    try:
        service = _service(config)
        instance = asyncio.run(_load(service))
    except Exception as exc:
        raise typer.Exit(handle_error(exc, color=color)) from exc

    typer.echo(format_instance(instance))
