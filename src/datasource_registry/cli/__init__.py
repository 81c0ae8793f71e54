"""``datasource-registry`` command line: inspect a registry config, resolve names, load plugins."""

from __future__ import annotations

import logging
from typing import Annotated, Any, Literal

import typer
from pydantic import ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from datasource_registry import __version__

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

# -v and -vv; more flags stay at DEBUG.
_VERBOSITY_LEVELS: tuple[LogLevel, ...] = ("INFO", "DEBUG")

app = typer.Typer(
    name="datasource-registry",
    help="Resolve datasource names and load their plugins from a registry config.",
    no_args_is_help=True,
    add_completion=False,
)


class LogSettings(BaseSettings):
    """Logging options taken from the environment (``DATASOURCES_LOG``)."""

    model_config = SettingsConfigDict(env_prefix="DATASOURCES_", extra="ignore")

    log: LogLevel | None = None

    @field_validator("log", mode="before")
    @classmethod
    def _normalize_level(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().upper() or None
        return v


def _env_log_level() -> LogLevel | None:
    try:
        return LogSettings().log
    except ValidationError:
        typer.echo(
            "warning: DATASOURCES_LOG must be one of DEBUG, INFO, WARNING, ERROR, CRITICAL;"
            " using INFO",
            err=True,
        )
        return "INFO"


def _configure_logging(verbose: int) -> None:
    """Route ``datasource_registry`` loggers to stderr at the requested level.

    ``DATASOURCES_LOG`` wins over ``-v`` flags. Without either, logging is
    left unconfigured.
    """
    level = _env_log_level()
    if level is None and verbose > 0:
        level = _VERBOSITY_LEVELS[min(verbose, len(_VERBOSITY_LEVELS)) - 1]
    if level is None:
        return

    logging.basicConfig(
        level=logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        force=True,
    )
    logging.getLogger("datasource_registry").setLevel(level)


def _print_version(value: bool) -> None:
    if value:
        typer.echo(f"datasource-registry {__version__}")
        raise typer.Exit


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version", "-V", callback=_print_version, is_eager=True, help="Print the version."
        ),
    ] = False,
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose", "-v", count=True, help="Log resolution and plugin loads (-vv for debug)."
        ),
    ] = 0,
) -> None:
    del version
    _configure_logging(verbose)


# Commands register themselves on ``app`` at import time.
from datasource_registry.cli import commands as _commands  # noqa: E402, F401
