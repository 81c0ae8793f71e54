"""Tests for datasource list building (engine/service.py enumerators)."""

from __future__ import annotations

from typing import TYPE_CHECKING

from datasource_registry.core.store import ConfigStore
from datasource_registry.core.variables import VariableIndex
from datasource_registry.engine.service import DatasourceService
from tests.unit.fakes import FakePluginLoader, datasource, ds_variable

if TYPE_CHECKING:
    from collections.abc import Iterable

    from datasource_registry.core.models import DatasourceSettings, Variable


def _service(
    datasources: Iterable[DatasourceSettings],
    *,
    default_name: str,
    variables: Iterable[Variable] = (),
) -> DatasourceService:
    return DatasourceService(
        ConfigStore(datasources, default_name=default_name),
        VariableIndex(variables),
        FakePluginLoader(),
    )


class TestListAll:
    def test_returns_every_datasource_in_declaration_order(self) -> None:
        service = _service(
            [datasource("b"), datasource("grafana", "grafana", built_in=True), datasource("a")],
            default_name="a",
        )
        assert [ds.name for ds in service.list_all()] == ["b", "grafana", "a"]

    def test_returns_a_fresh_list(self) -> None:
        service = _service([datasource("a")], default_name="a")
        service.list_all().clear()
        assert len(service.list_all()) == 1


class TestListExternal:
    def test_excludes_built_in_and_sorts_by_name(self) -> None:
        service = _service(
            [
                datasource("zeta"),
                datasource("-- Grafana --", "grafana", built_in=True),
                datasource("Alpha"),
                datasource("beta"),
                datasource("-- Mixed --", "mixed", built_in=True),
            ],
            default_name="zeta",
        )
        names = [ds.name for ds in service.list_external()]
        # Case-sensitive: uppercase sorts before lowercase.
        assert names == ["Alpha", "beta", "zeta"]


class TestAnnotationSources:
    def test_variables_first_then_annotation_datasources(self) -> None:
        service = _service(
            [
                datasource("prom", annotations=True),
                datasource("loki", "loki"),
                datasource("elastic", "elasticsearch", annotations=True),
            ],
            default_name="prom",
            variables=[ds_variable("ds", "loki"), ds_variable("env", "prod", var_type="custom")],
        )

        sources = service.list_annotation_sources()

        assert [s.name for s in sources] == ["$ds", "prom", "elastic"]
        assert sources[0].value == "$ds"
        assert sources[0].meta.id == "loki"
        assert sources[1].value == "prom"


class TestMetricSources:
    def test_example_ordering(self) -> None:
        service = _service(
            [datasource("A", "a", metrics=True), datasource("grafana", "grafana", metrics=True)],
            default_name="A",
        )

        sources = service.list_metric_sources()

        assert [(s.name, s.value) for s in sources] == [
            ("A", "A"),
            ("default", None),
            ("grafana", "grafana"),
        ]
        assert sources[1].meta.id == "a"

    def test_grafana_and_mixed_sort_last(self) -> None:
        service = _service(
            [
                datasource("-- Mixed --", "mixed", metrics=True, built_in=True),
                datasource("zzz", metrics=True),
                datasource("-- Grafana --", "grafana", metrics=True, built_in=True),
                datasource("Aaa", metrics=True),
            ],
            default_name="zzz",
            variables=[ds_variable("ds", "Aaa")],
        )

        names = [s.name for s in service.list_metric_sources()]

        assert names == ["$ds", "Aaa", "zzz", "default", "-- Grafana --", "-- Mixed --"]

    def test_sort_is_case_insensitive_and_stable(self) -> None:
        service = _service(
            [
                datasource("b", metrics=True),
                datasource("B", metrics=True),
                datasource("a", metrics=True),
            ],
            default_name="a",
        )

        names = [s.name for s in service.list_metric_sources()]

        assert names == ["a", "default", "b", "B"]

    def test_built_ins_stay_last_after_non_latin_names(self) -> None:
        service = _service(
            [
                datasource("-- Mixed --", "mixed", metrics=True, built_in=True),
                datasource("-- Grafana --", "grafana", metrics=True, built_in=True),
                datasource("Ωmega", metrics=True),
                datasource("温度", metrics=True),
            ],
            default_name="Ωmega",
        )

        names = [s.name for s in service.list_metric_sources()]

        assert names == ["Ωmega", "default", "温度", "-- Grafana --", "-- Mixed --"]

    def test_only_metrics_capable_datasources(self) -> None:
        service = _service(
            [datasource("prom", metrics=True), datasource("annot", annotations=True)],
            default_name="prom",
        )
        assert [s.name for s in service.list_metric_sources()] == ["prom", "default"]

    def test_no_default_entry_when_default_lacks_metrics(self) -> None:
        service = _service(
            [datasource("prom", metrics=True), datasource("annot", annotations=True)],
            default_name="annot",
        )
        assert [s.name for s in service.list_metric_sources()] == ["prom"]

    def test_default_given_as_variable_reference(self) -> None:
        service = _service(
            [datasource("prom", metrics=True), datasource("loki", "loki", metrics=True)],
            default_name="$ds",
            variables=[ds_variable("ds", "prom")],
        )

        names = [s.name for s in service.list_metric_sources(skip_variables=True)]

        assert names == ["loki", "prom", "default"]

    def test_skip_variables(self) -> None:
        service = _service(
            [datasource("prom", metrics=True)],
            default_name="prom",
            variables=[ds_variable("ds", "prom")],
        )

        assert "$ds" in [s.name for s in service.list_metric_sources()]
        assert "$ds" not in [s.name for s in service.list_metric_sources(skip_variables=True)]


class TestVariableSources:
    def test_only_datasource_variables_with_known_values(self) -> None:
        service = _service(
            [datasource("prom", metrics=True), datasource("loki", "loki")],
            default_name="prom",
            variables=[
                ds_variable("ds", "loki"),
                ds_variable("gone", "deleted"),
                ds_variable("env", "prom", var_type="custom"),
                ds_variable("dflt", "default"),
                ds_variable("multi", ["loki", "prom"]),
            ],
        )

        sources = service.variable_sources()

        assert [(s.name, s.meta.id) for s in sources] == [
            ("$ds", "loki"),
            ("$dflt", "prometheus"),
            ("$multi", "loki"),
        ]
        assert all(s.value == s.name == s.sort for s in sources)

    def test_default_value_follows_default_given_as_variable_reference(self) -> None:
        service = _service(
            [datasource("prom", metrics=True), datasource("loki", "loki")],
            default_name="$ds",
            variables=[ds_variable("ds", "loki"), ds_variable("dflt", "default")],
        )

        sources = service.variable_sources()

        assert [(s.name, s.meta.id) for s in sources] == [("$ds", "loki"), ("$dflt", "loki")]
