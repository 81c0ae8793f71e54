"""YAML configuration file loader."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

from dotenv import dotenv_values
from pydantic import ValidationError
from ruamel.yaml import YAML
from ruamel.yaml.constructor import SafeConstructor

from datasource_registry.config.schema import Config

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """Raised for configuration loading / validation errors."""


# Field name → environment variable.
_REGISTRY_ENV_MAP: dict[str, str] = {
    "default_datasource": "DATASOURCES_DEFAULT_DATASOURCE",
    "plugin_dir": "DATASOURCES_PLUGIN_DIR",
    "failure_mode": "DATASOURCES_FAILURE_MODE",
    "dedupe_loads": "DATASOURCES_DEDUPE_LOADS",
}

_REGISTRY_BOOL_FIELDS: frozenset[str] = frozenset({"dedupe_loads"})

# Registry settings may be given at the top level of the YAML file.
_TOP_LEVEL_REGISTRY_KEYS: frozenset[str] = frozenset(_REGISTRY_ENV_MAP)


def _resolve_registry(raw_registry: dict[str, Any], config_dir: Path) -> dict[str, Any]:
    """Resolve registry fields from YAML, env vars, and ``.env`` file.

    Priority (highest wins): YAML value > env var > ``.env`` file.
    """
    env_file = config_dir / ".env"
    dotenv_vals = dotenv_values(env_file, encoding="utf-8-sig") if env_file.is_file() else {}

    resolved: dict[str, Any] = {}
    for field, env_key in _REGISTRY_ENV_MAP.items():
        val = raw_registry.get(field)
        if val is None:
            val = os.environ.get(env_key)
        if val is None:
            val = dotenv_vals.get(env_key)
        if val is not None:
            if field in _REGISTRY_BOOL_FIELDS and isinstance(val, str):
                if val.lower() not in SafeConstructor.bool_values:
                    raise ConfigError(f"Invalid boolean for {env_key}: {val!r}")
                val = SafeConstructor.bool_values[val.lower()]
            resolved[field] = val

    plugin_dir = resolved.get("plugin_dir")
    if plugin_dir is not None and not Path(plugin_dir).is_absolute():
        resolved["plugin_dir"] = config_dir / plugin_dir

    return resolved


def _validate(config: Config) -> list[str]:
    """Cross-field checks that need the whole configuration."""
    errors: list[str] = []
    default = config.default_datasource
    if not default:
        errors.append("No default datasource: set default_datasource or mark one isDefault")
    elif default not in config.datasources:
        errors.append(f"Default datasource '{default}' is not configured")

    seen: set[str] = set()
    for variable in config.variables:
        if variable.name in seen:
            errors.append(f"Duplicate variable name '{variable.name}'")
        seen.add(variable.name)
    return errors


def load_config(path: Path | str) -> Config:
    """Load a YAML configuration file and return a ``Config`` object.

    Raises:
        ConfigError: On YAML parse errors, missing sections, or validation failures.
    """
    path = Path(path)

    try:
        raw = YAML(typ="safe").load(path)
    except Exception as exc:
        raise ConfigError(f"Failed to read {path}: {exc}") from exc

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ConfigError(f"Expected a mapping at the top level of {path}")

    raw_registry = dict(raw.pop("registry", None) or {})
    for key in [k for k in _TOP_LEVEL_REGISTRY_KEYS if k in raw]:
        raw_registry.setdefault(key, raw.pop(key))

    try:
        raw["registry"] = _resolve_registry(raw_registry, path.parent)
        config = Config.model_validate(raw)
    except ValidationError as exc:
        raise ConfigError(str(exc)) from exc

    config.config_dir = path.parent

    errors = _validate(config)
    if errors:
        raise ConfigError("\n".join(errors))

    logger.info(
        "Loaded config from %s (%d datasources, %d variables)",
        path,
        len(config.datasources),
        len(config.variables),
    )
    return config
