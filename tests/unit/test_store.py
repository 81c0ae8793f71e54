"""Tests for the read-only config store (core/store.py)."""

from __future__ import annotations

import pytest

from datasource_registry.core.store import ConfigStore
from tests.unit.fakes import datasource


def test_mapping_access() -> None:
    prom = datasource("prom")
    store = ConfigStore([prom], default_name="prom")

    assert store["prom"] is prom
    assert store.get("missing") is None
    assert "prom" in store
    assert len(store) == 1
    assert store.default_name == "prom"


def test_iteration_follows_declaration_order() -> None:
    store = ConfigStore([datasource("b"), datasource("a"), datasource("c")], default_name="a")
    assert list(store) == ["b", "a", "c"]


def test_duplicate_names_rejected() -> None:
    with pytest.raises(ValueError, match="already configured"):
        ConfigStore([datasource("a"), datasource("a")], default_name="a")


def test_store_is_read_only() -> None:
    store = ConfigStore([datasource("a")], default_name="a")
    with pytest.raises(TypeError):
        store["b"] = datasource("b")  # type: ignore[index]
