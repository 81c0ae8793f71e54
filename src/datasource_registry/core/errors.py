"""Registry error types."""

from __future__ import annotations


class RegistryError(Exception):
    """Base exception for datasource registry errors."""


class DatasourceNotFoundError(RegistryError):
    """Raised when a resolved name has no configured datasource."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Datasource named {name} was not found")
        self.name = name


class MalformedPluginError(RegistryError):
    """Raised when a plugin module does not provide a ``Datasource`` class."""

    def __init__(self, name: str, module_ref: str) -> None:
        super().__init__(
            f"Plugin module '{module_ref}' for datasource {name} is missing "
            "a Datasource class derived from DatasourceApi"
        )
        self.name = name
        self.module_ref = module_ref


class PluginLoadError(RegistryError):
    """Raised when a plugin module cannot be loaded or instantiated.

    The underlying exception is chained via ``__cause__``.
    """

    def __init__(self, name: str, module_ref: str, message: str) -> None:
        super().__init__(f"Failed to load plugin '{module_ref}' for datasource {name}: {message}")
        self.name = name
        self.module_ref = module_ref


class PluginImportError(RegistryError):
    """Raised by the importlib loader when a module reference cannot be imported."""
