"""Template variable index and text substitution.

Supported reference syntaxes, matching dashboard templating:

- ``$name``
- ``${name}`` and ``${name:format}`` (the format is accepted and ignored)
- ``[[name]]``

A multi-valued variable renders as a brace list, e.g. ``{a,b,c}``.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from datasource_registry.core.models import ScopedVar, Variable, VariableCurrent

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

_VARIABLE_RE = re.compile(r"\$(\w+)|\[\[([\s\S]+?)(?::\w+)?\]\]|\$\{(\w+)(?::[^}]+)?\}")


def format_value(value: str | list[str]) -> str:
    """Render a variable value for interpolation into a string."""
    if isinstance(value, str):
        return value
    if len(value) == 1:
        return value[0]
    return "{" + ",".join(value) + "}"


class VariableIndex:
    """Ordered collection of declared variables with a by-name index."""

    def __init__(self, variables: Iterable[Variable] = ()) -> None:
        self._variables: list[Variable] = []
        self._index: dict[str, Variable] = {}
        for variable in variables:
            if variable.name in self._index:
                raise ValueError(f"Variable already declared: {variable.name}")
            self._variables.append(variable)
            self._index[variable.name] = variable

    @property
    def variables(self) -> list[Variable]:
        return list(self._variables)

    def by_name(self, name: str) -> Variable | None:
        return self._index.get(name)

    def update(self, name: str, value: str | list[str]) -> None:
        """Change the current value of a declared variable."""
        variable = self._index.get(name)
        if variable is None:
            raise KeyError(name)
        updated = variable.model_copy(update={"current": VariableCurrent(value=value, text=value)})
        self._index[name] = updated
        self._variables = [updated if v.name == name else v for v in self._variables]

    def substitute(
        self,
        text: str,
        scoped_vars: Mapping[str, ScopedVar | Mapping[str, str]] | None = None,
    ) -> str:
        """Replace variable references in *text*; unknown variables are left as-is."""

        def _replace(match: re.Match[str]) -> str:
            name = match.group(1) or match.group(2) or match.group(3)
            if scoped_vars and name in scoped_vars:
                return ScopedVar.model_validate(scoped_vars[name]).value
            variable = self._index.get(name)
            if variable is None:
                return match.group(0)
            return format_value(variable.current.value)

        return _VARIABLE_RE.sub(_replace, text)
