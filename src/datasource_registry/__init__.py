"""Named datasource resolution with lazy plugin loading and an instance cache."""

__version__ = "0.1.0"
