"""Datasource name resolution through template variables."""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

from datasource_registry.core.errors import DatasourceNotFoundError
from datasource_registry.core.models import ScopedVar

if TYPE_CHECKING:
    from collections.abc import Mapping

    from datasource_registry.core.store import ConfigStore
    from datasource_registry.core.variables import VariableIndex

logger = logging.getLogger(__name__)

DEFAULT_NAME = "default"

_VARIABLE_NAME_RE = re.compile(r"\$\{?(\w+)|\[\[(\w+)")
_BRACE_LIST_RE = re.compile(r"\{([^,}]+).*")


def variable_name(raw_name: str) -> str:
    """Return the identifier referenced by *raw_name* (``$ds``, ``${ds}``, ``[[ds]]`` -> ``ds``)."""
    match = _VARIABLE_NAME_RE.search(raw_name)
    if match is None:
        return raw_name
    return match.group(1) or match.group(2)


def first_of_brace_list(name: str) -> str:
    """Unwrap a multi-value rendering: ``{a,b,c}`` -> ``a``."""
    return _BRACE_LIST_RE.sub(r"\1", name, count=1)


class NameResolver:
    """Turn a raw datasource name into the resolved name used as cache key.

    Resolution never consults the cache and never fails for unknown names;
    a missing datasource surfaces when it is loaded.
    """

    def __init__(self, store: ConfigStore, variables: VariableIndex) -> None:
        self.store = store
        self.variables = variables

    def resolve(
        self,
        raw_name: str | None = None,
        scoped_vars: Mapping[str, ScopedVar | Mapping[str, str]] | None = None,
    ) -> str:
        """Resolve *raw_name* to the datasource name used as cache key.

        *scoped_vars* maps variable names to a ``ScopedVar`` or a plain
        ``{"value": ..., "text": ...}`` mapping.
        """
        if not raw_name:
            return self.resolve_default()

        name = self._unwrap(raw_name, scoped_vars)
        if name == DEFAULT_NAME:
            return self.resolve_default()
        return name

    def resolve_default(self) -> str:
        """Resolve the configured default name; it must not resolve to ``default`` again."""
        default = self.store.default_name
        name = self._unwrap(default) if default else ""
        if not name or name == DEFAULT_NAME:
            raise DatasourceNotFoundError(DEFAULT_NAME)
        return name

    def _unwrap(
        self,
        raw_name: str,
        scoped_vars: Mapping[str, ScopedVar | Mapping[str, str]] | None = None,
    ) -> str:
        name = self.variables.substitute(raw_name)
        if name != raw_name:
            ref = variable_name(raw_name)
            variable = self.variables.by_name(ref)
            if (
                scoped_vars
                and ref in scoped_vars
                and variable is not None
                and variable.type == "datasource"
            ):
                name = ScopedVar.model_validate(scoped_vars[ref]).value
            else:
                # Multi-select datasource variables resolve to their first value.
                name = first_of_brace_list(name)
            logger.debug("Resolved variable reference %r to %r", raw_name, name)
        return name
