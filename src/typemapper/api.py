"""
Entry points for declaring and running mappings.

    define_mapping(FlatFrom, FlatTo).map(lambda s: s.value, "value")
    flat_to = map_from(FlatFrom(value=123)).to(FlatTo)

Both resolve through the default registry unless one is passed explicitly.
"""

from __future__ import annotations

from typing import Any, Optional

from .core.definition import MappingDefinition
from .core.registry import MappingRegistry, get_default_registry
from .exceptions import NullArgumentError


def _resolve(registry: Optional[MappingRegistry]) -> MappingRegistry:
    return get_default_registry() if registry is None else registry


def define_mapping(
    source_type: Any,
    destination_type: Any,
    identifier: str = "",
    *,
    registry: Optional[MappingRegistry] = None,
) -> MappingDefinition:
    """Start (or continue) configuring the mapping for the given key."""
    return _resolve(registry).define(source_type, destination_type, identifier)


class MappingSource:
    """A source value waiting for its destination."""

    def __init__(
        self,
        source: Any,
        source_type: Any = None,
        registry: Optional[MappingRegistry] = None,
    ) -> None:
        self._source = source
        self._source_type = type(source) if source_type is None else source_type
        self._registry = registry

    @property
    def source_type(self) -> Any:
        return self._source_type

    def to(self, destination: Any, identifier: str = "") -> Any:
        """
        Map the source.

        Args:
            destination: A destination type, to construct a new destination,
                or a destination instance to populate.
            identifier: Name of the mapping variant to use.

        Returns:
            The constructed or populated destination.

        Raises:
            NotConfiguredError: If no such mapping was defined.
        """
        if destination is None:
            raise NullArgumentError("destination")
        if isinstance(destination, type):
            definition = self._definition(destination, identifier)
            return definition.execute(self._source)
        return self.to_instance(destination, identifier)

    def to_instance(self, destination: Any, identifier: str = "") -> Any:
        """Populate ``destination``, even when it is itself a type."""
        if destination is None:
            raise NullArgumentError("destination")
        definition = self._definition(type(destination), identifier)
        return definition.execute(self._source, destination)

    def _definition(self, destination_type: Any, identifier: str) -> MappingDefinition:
        registry = _resolve(self._registry)
        return registry.get(self._source_type, destination_type, identifier)


def map_from(
    source: Any,
    *,
    source_type: Any = None,
    registry: Optional[MappingRegistry] = None,
) -> MappingSource:
    """
    Start a mapping of ``source``.

    ``source_type`` defaults to ``type(source)``; pass it when the mapping was
    declared for a base class of the value.
    """
    return MappingSource(source, source_type=source_type, registry=registry)
