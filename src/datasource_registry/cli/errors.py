"""Map exceptions to clean stderr messages and exit codes."""

from __future__ import annotations

import typer


def _err(msg: str, *, fg: str | None) -> None:
    """Print a styled message to stderr."""
    typer.echo(typer.style(msg, fg=fg), err=True)


def handle_error(exc: BaseException, *, color: bool = True) -> int:
    """Print a clean error message to stderr and return an exit code.

    All errors map to exit code 1.  No tracebacks are printed.
    """
    from datasource_registry.config.loader import ConfigError
    from datasource_registry.core.errors import (
        DatasourceNotFoundError,
        MalformedPluginError,
        PluginLoadError,
    )

    fg = typer.colors.RED if color else None

    if isinstance(exc, ConfigError):
        _err("Configuration error:", fg=fg)
        for line in str(exc).splitlines():
            _err(f"  - {line}", fg=fg)
    elif isinstance(exc, DatasourceNotFoundError):
        _err(f"Not found: {exc}", fg=fg)
    elif isinstance(exc, MalformedPluginError):
        _err(f"Malformed plugin: {exc}", fg=fg)
    elif isinstance(exc, PluginLoadError):
        _err(f"Plugin load failed: {exc}", fg=fg)
        if exc.__cause__ is not None:
            _err(f"  Caused by {type(exc.__cause__).__name__}: {exc.__cause__}", fg=fg)
    elif isinstance(exc, TimeoutError):
        _err(f"Timed out: {str(exc) or 'the operation did not finish in time'}", fg=fg)
    else:
        _err(f"Error: {exc}", fg=fg)

    return 1
