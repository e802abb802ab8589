"""Tests for the define_mapping / map_from entry points."""

from __future__ import annotations

from typing import Iterator

import pytest

from typemapper import (
    MappingRegistry,
    NotConfiguredError,
    define_mapping,
    get_default_registry,
    map_from,
    set_default_registry,
)

# ---------------------------------------------------------------------------
#                                FIXTURES
# ---------------------------------------------------------------------------


class EmptyFrom:
    pass


class EmptyTo:
    pass


class FlatFrom:
    def __init__(self, value: int = 0) -> None:
        self.value = value


class FlatTo:
    def __init__(self) -> None:
        self.value = 0


class Base:
    pass


class Derived(Base):
    def __init__(self, value: int = 0) -> None:
        self.value = value


class Stamped:
    def __init__(self) -> None:
        self.created = 0.0


@pytest.fixture(autouse=True)
def fresh_default_registry() -> Iterator[MappingRegistry]:
    """Isolate every test from mappings declared by other tests."""
    registry = MappingRegistry()
    previous = set_default_registry(registry)
    yield registry
    set_default_registry(previous)


# ---------------------------------------------------------------------------
#                                TESTS
# ---------------------------------------------------------------------------


def test_destination_created_when_not_provided() -> None:
    define_mapping(EmptyFrom, EmptyTo)
    destination = map_from(EmptyFrom()).to(EmptyTo)
    assert isinstance(destination, EmptyTo)


def test_constructor_not_called_when_destination_passed() -> None:
    def probe(source: EmptyFrom) -> EmptyTo:
        pytest.fail("The constructor should not have been called.")

    define_mapping(EmptyFrom, EmptyTo).construct(probe)
    destination = EmptyTo()
    assert map_from(EmptyFrom()).to(destination) is destination


def test_string_to_int_conversion() -> None:
    define_mapping(str, int).construct(int)
    assert map_from("123").to(int) == 123


def test_map_properties() -> None:
    define_mapping(FlatFrom, FlatTo).map(lambda s: s.value, lambda to: to.value)
    assert map_from(FlatFrom(123)).to(FlatTo).value == 123


def test_named_mapping_is_independent_of_unnamed() -> None:
    identifier = "Multiply Ints"
    define_mapping(FlatFrom, FlatTo, identifier).map_with(
        lambda s: s.value, lambda to, value: setattr(to, "value", value * 2)
    )
    define_mapping(FlatFrom, FlatTo)

    source = FlatFrom(123)
    assert map_from(source).to(FlatTo, identifier).value == 246
    assert map_from(source).to(FlatTo).value == 0


def test_generated_values_differ_per_mapping() -> None:
    clock = iter([1700000000.0, 1700000001.5])
    define_mapping(EmptyFrom, Stamped).assign_factory("created", lambda: next(clock))
    first = map_from(EmptyFrom()).to(Stamped)
    second = map_from(EmptyFrom()).to(Stamped)
    assert (first.created, second.created) == (1700000000.0, 1700000001.5)


def test_undeclared_mapping_raises_without_mutation() -> None:
    destination = FlatTo()
    with pytest.raises(NotConfiguredError):
        map_from(FlatFrom(5)).to(destination)
    assert destination.value == 0
    with pytest.raises(NotConfiguredError):
        map_from(FlatFrom(5)).to(FlatTo, "missing")


def test_declared_source_type_override() -> None:
    define_mapping(Base, FlatTo).map(lambda s: s.value, "value")
    with pytest.raises(NotConfiguredError):
        map_from(Derived(3)).to(FlatTo)
    assert map_from(Derived(3), source_type=Base).to(FlatTo).value == 3


def test_to_instance_with_type_destination() -> None:
    class Holder:
        name = ""

    define_mapping(str, type).map_with(
        lambda s: s, lambda to, v: setattr(to, "name", v)
    )
    assert map_from("held").to_instance(Holder) is Holder
    assert Holder.name == "held"


def test_explicit_registry_bypasses_default() -> None:
    own = MappingRegistry()
    define_mapping(FlatFrom, FlatTo, registry=own).map(lambda s: s.value, "value")
    assert not get_default_registry().is_defined(FlatFrom, FlatTo)
    assert map_from(FlatFrom(2), registry=own).to(FlatTo).value == 2


def test_none_destination_rejected() -> None:
    with pytest.raises(ValueError):
        map_from(FlatFrom()).to(None)
