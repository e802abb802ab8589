"""Unit tests for MappingDefinition configuration and replay."""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass, field
from typing import Any

import pytest

from typemapper.config import MapperSettings
from typemapper.core.definition import MappingDefinition
from typemapper.core.registry import MappingRegistry
from typemapper.core.steps import PredicateTarget
from typemapper.exceptions import (
    InvalidSelectorError,
    IterationLimitError,
    NullArgumentError,
)

# -------------------- Fakes / helpers --------------------


@dataclass
class FlatFrom:
    value: int = 0


@dataclass
class FlatTo:
    value: int = 0
    label: str = ""
    stamp: int = 0


class FakeReader:
    """Cursor-style source: ``read()`` advances, ``current`` is the row."""

    def __init__(self, rows: list[Any]) -> None:
        self._rows = list(rows)
        self._position = -1
        self.reads = 0

    def read(self) -> bool:
        self.reads += 1
        self._position += 1
        return self._position < len(self._rows)

    @property
    def current(self) -> Any:
        return self._rows[self._position]


@dataclass
class Rows:
    items: list[Any] = field(default_factory=list)
    indexes: list[int] = field(default_factory=list)


@pytest.fixture
def registry() -> MappingRegistry:
    return MappingRegistry()


@pytest.fixture
def flat(registry: MappingRegistry) -> MappingDefinition:
    return registry.define(FlatFrom, FlatTo)


# --------------------------- Tests ---------------------------


class TestArgumentValidation:
    @pytest.mark.parametrize(
        "configure, argument",
        [
            (lambda d: d.construct(None), "factory"),
            (lambda d: d.before_map(None), "action"),
            (lambda d: d.after_map(None), "action"),
            (lambda d: d.assign(None, 1), "member"),
            (lambda d: d.assign_factory("value", None), "factory"),
            (lambda d: d.map(None, "value"), "from_selector"),
            (lambda d: d.map(lambda s: s.value, None), "member"),
            (lambda d: d.map_with(None, lambda to, v: None), "from_selector"),
            (lambda d: d.map_with(lambda s: s, None), "setter"),
            (lambda d: d.map_while(None, lambda to, s: None), "predicate"),
            (lambda d: d.map_while(lambda s: False, None), "setter"),
            (lambda d: d.map_many(None, lambda to, v: None), "selector"),
            (lambda d: d.map_many(lambda s: [], None), "setter"),
            (lambda d: d.bridge(None), "other"),
        ],
    )
    def test_missing_arguments_fail_fast(
        self, flat: MappingDefinition, configure, argument: str
    ) -> None:
        with pytest.raises(NullArgumentError) as exc:
            configure(flat)
        assert exc.value.argument == argument
        assert not flat.has_steps

    def test_invalid_member_selector(self, flat: MappingDefinition) -> None:
        with pytest.raises(InvalidSelectorError):
            flat.map(lambda s: s.value, lambda to: to.value * 2)
        with pytest.raises(InvalidSelectorError):
            flat.assign(lambda to: to.missing, 1)

    def test_unknown_predicate_target(self, flat: MappingDefinition) -> None:
        with pytest.raises(ValueError):
            flat.map_while(lambda s: False, lambda to, s: None, over="sideways")


class TestChaining:
    def test_every_configuration_call_returns_definition(
        self, flat: MappingDefinition
    ) -> None:
        result = (
            flat.construct(lambda s: FlatTo())
            .before_map(lambda s: None)
            .after_map(lambda s: None)
            .assign("label", "x")
            .assign_factory("stamp", lambda: 1)
            .map(lambda s: s.value, "value")
            .map_with(lambda s: s.value, lambda to, v: None)
            .map_while(lambda s: False, lambda to, s: None)
            .map_many(lambda s: [], lambda to, v: None)
        )
        assert result is flat
        assert len(flat.assignment_steps) == 2
        assert len(flat.projection_steps) == 4

    def test_step_logging(
        self, flat: MappingDefinition, caplog: pytest.LogCaptureFixture
    ) -> None:
        caplog.set_level(logging.DEBUG, logger="typemapper")
        flat.map(lambda s: s.value, "value")
        assert any("added step 'map -> value'" in r.message for r in caplog.records)


class TestAssignments:
    def test_constant_is_shared_by_every_destination(
        self, flat: MappingDefinition
    ) -> None:
        marker = object()
        flat.assign("label", marker)
        first = flat.execute(FlatFrom())
        second = flat.execute(FlatFrom())
        assert first.label is marker
        assert second.label is marker

    def test_factory_runs_once_per_mapping(self, flat: MappingDefinition) -> None:
        clock = itertools.count(100)
        flat.assign_factory(lambda to: to.stamp, lambda: next(clock))
        first = flat.execute(FlatFrom())
        second = flat.execute(FlatFrom())
        assert (first.stamp, second.stamp) == (100, 101)

    def test_assignments_run_before_projections(self, flat: MappingDefinition) -> None:
        flat.map(lambda s: s.value, "value")
        flat.assign("value", -1)
        assert flat.execute(FlatFrom(value=5)).value == 5


class TestProjections:
    def test_map_property_to_property(self, flat: MappingDefinition) -> None:
        flat.map(lambda s: s.value, lambda to: to.value)
        assert flat.execute(FlatFrom(value=123)).value == 123

    def test_map_with_setter(self, flat: MappingDefinition) -> None:
        def double(to: FlatTo, value: int) -> None:
            to.value = value * 2

        flat.map_with(lambda s: s.value, double)
        assert flat.execute(FlatFrom(value=21)).value == 42

    def test_steps_run_in_registration_order(self, flat: MappingDefinition) -> None:
        order: list[str] = []
        flat.map_with(lambda s: "a", lambda to, v: order.append(v))
        flat.map_many(lambda s: ["b", "c"], lambda to, v: order.append(v))
        flat.map_with(lambda s: "d", lambda to, v: order.append(v))
        flat.execute(FlatFrom())
        assert order == ["a", "b", "c", "d"]


class TestRepetition:
    def test_cursor_source_appends_each_row(self, registry: MappingRegistry) -> None:
        registry.define(FakeReader, Rows).map_while(
            lambda reader: reader.read(),
            lambda rows, reader: rows.items.append(reader.current),
        )
        reader = FakeReader(["a", "b", "c"])
        rows = registry.get(FakeReader, Rows).execute(reader)
        assert rows.items == ["a", "b", "c"]
        assert reader.reads == 4

    def test_indexed_predicate_and_setter(self, registry: MappingRegistry) -> None:
        seen: list[int] = []

        def keep_going(reader: FakeReader, index: int) -> bool:
            seen.append(index)
            return reader.read()

        def append(rows: Rows, index: int, reader: FakeReader) -> None:
            rows.indexes.append(index)
            rows.items.append(reader.current)

        registry.define(FakeReader, Rows).map_while(keep_going, append, indexed=True)
        rows = registry.get(FakeReader, Rows).execute(FakeReader([10, 20, 30]))
        assert rows.items == [10, 20, 30]
        assert rows.indexes == [0, 1, 2]
        assert seen == [0, 1, 2, 3]

    def test_predicate_over_destination(self, registry: MappingRegistry) -> None:
        registry.define(FlatFrom, Rows).map_while(
            lambda rows: len(rows.items) < 3,
            lambda rows, source: rows.items.append(source.value),
            over=PredicateTarget.DESTINATION,
        )
        rows = registry.get(FlatFrom, Rows).execute(FlatFrom(value=7))
        assert rows.items == [7, 7, 7]

    def test_predicate_over_both_with_index(self, registry: MappingRegistry) -> None:
        registry.define(FlatFrom, Rows).map_while(
            lambda source, rows, index: index < source.value,
            lambda rows, index, source: rows.indexes.append(index),
            over="both",
            indexed=True,
        )
        rows = registry.get(FlatFrom, Rows).execute(FlatFrom(value=4))
        assert rows.indexes == [0, 1, 2, 3]

    def test_false_predicate_never_calls_setter(self, flat: MappingDefinition) -> None:
        calls: list[Any] = []
        flat.map_while(lambda s: False, lambda to, s: calls.append(s))
        flat.execute(FlatFrom())
        assert calls == []

    def test_iteration_cap_from_settings(self) -> None:
        registry = MappingRegistry(MapperSettings(max_iterations=5))
        registry.define(FlatFrom, Rows).map_while(
            lambda source: True,
            lambda rows, source: rows.items.append(source.value),
        )
        rows = Rows()
        with pytest.raises(IterationLimitError):
            registry.get(FlatFrom, Rows).execute(FlatFrom(value=1), rows)
        assert len(rows.items) == 5


class TestPerElement:
    def test_map_many_in_order(self, registry: MappingRegistry) -> None:
        registry.define(FlatFrom, Rows).map_many(
            lambda source: range(source.value),
            lambda rows, value: rows.items.append(value * 10),
        )
        rows = registry.get(FlatFrom, Rows).execute(FlatFrom(value=3))
        assert rows.items == [0, 10, 20]

    def test_map_many_indexed(self, registry: MappingRegistry) -> None:
        registry.define(FlatFrom, Rows).map_many(
            lambda source: ["x", "y"],
            lambda rows, index, value: rows.items.append((index, value)),
            indexed=True,
        )
        rows = registry.get(FlatFrom, Rows).execute(FlatFrom())
        assert rows.items == [(0, "x"), (1, "y")]

    def test_map_each_over_iterable_source(self, registry: MappingRegistry) -> None:
        registry.define(tuple, Rows).map_each(
            lambda rows, value: rows.items.append(value)
        )
        rows = registry.get(tuple, Rows).execute(("a", "b"))
        assert rows.items == ["a", "b"]


class TestDescribe:
    def test_summary(self, flat: MappingDefinition) -> None:
        flat.construct(lambda s: FlatTo()).after_map(lambda s: None)
        flat.assign("label", "x").map(lambda s: s.value, "value")
        summary = flat.describe()
        assert summary["source"] == "FlatFrom"
        assert summary["destination"] == "FlatTo"
        assert summary["identifier"] == ""
        assert summary["custom_constructor"] is True
        assert summary["before_hook"] is False
        assert summary["after_hook"] is True
        assert summary["assignments"] == ["assign label = 'x'"]
        assert summary["projections"] == ["map -> value"]

    def test_repr_includes_identifier(self, registry: MappingRegistry) -> None:
        definition = registry.define(FlatFrom, FlatTo, "double")
        assert repr(definition) == "<MappingDefinition FlatFrom -> FlatTo ['double']>"
