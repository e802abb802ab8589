"""Mapping registry keyed by (source type, destination type, identifier)."""

import logging
from dataclasses import dataclass
from typing import Any, Iterator, Optional

from ..config import MapperSettings
from ..exceptions import NotConfiguredError, NullArgumentError
from .definition import MappingDefinition
from .utils import type_name

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MappingKey:
    """Structural identity of a mapping definition."""

    source_type: Any
    destination_type: Any
    identifier: str = ""

    def __str__(self) -> str:
        label = f"{type_name(self.source_type)} -> {type_name(self.destination_type)}"
        if self.identifier:
            label += f" ['{self.identifier}']"
        return label


class MappingRegistry:
    """
    Append-only lookup of mapping definitions.

    ``define`` creates a definition the first time a key is seen and returns
    the same instance afterwards, so definitions may reference each other in
    any declaration order as long as everything is defined before the first
    execution. ``get`` never creates.

    A registry is not synchronised: finish configuring it before mapping from
    several threads.
    """

    def __init__(self, settings: Optional[MapperSettings] = None):
        self._definitions: dict[MappingKey, MappingDefinition] = {}
        self._settings = settings or MapperSettings()
        self._logger = logger.getChild(self.__class__.__name__)

    @property
    def settings(self) -> MapperSettings:
        return self._settings

    def define(
        self, source_type: Any, destination_type: Any, identifier: str = ""
    ) -> MappingDefinition:
        """
        Return the definition for the key, creating an empty one if needed.

        Raises:
            NullArgumentError: If a type or the identifier is None.
        """
        key = self._key(source_type, destination_type, identifier)

        definition = self._definitions.get(key)
        if definition is None:
            definition = MappingDefinition(
                source_type, destination_type, key.identifier, registry=self
            )
            self._definitions[key] = definition
            self._logger.info(f"Defined mapping {key}")
        elif self._settings.warn_on_merge and definition.has_steps:
            self._logger.warning(
                f"Mapping {key} is already configured; new steps will be merged"
            )
        return definition

    def get(
        self, source_type: Any, destination_type: Any, identifier: str = ""
    ) -> MappingDefinition:
        """
        Return the existing definition for the key.

        Raises:
            NotConfiguredError: If the key was never defined.
        """
        key = self._key(source_type, destination_type, identifier)
        try:
            return self._definitions[key]
        except KeyError:
            raise NotConfiguredError(f"No mapping configured for {key}") from None

    def is_defined(
        self, source_type: Any, destination_type: Any, identifier: str = ""
    ) -> bool:
        if source_type is None or destination_type is None or identifier is None:
            return False
        key = MappingKey(source_type, destination_type, identifier)
        return key in self._definitions

    def keys(self) -> list[MappingKey]:
        """Keys in definition order."""
        return list(self._definitions)

    def describe(self) -> list[dict[str, Any]]:
        """One summary dictionary per definition, in definition order."""
        return [definition.describe() for definition in self._definitions.values()]

    def __len__(self) -> int:
        return len(self._definitions)

    def __iter__(self) -> Iterator[MappingDefinition]:
        return iter(list(self._definitions.values()))

    def __contains__(self, key: object) -> bool:
        return key in self._definitions

    @staticmethod
    def _key(source_type: Any, destination_type: Any, identifier: str) -> MappingKey:
        if source_type is None:
            raise NullArgumentError("source_type")
        if destination_type is None:
            raise NullArgumentError("destination_type")
        if identifier is None:
            raise NullArgumentError("identifier")
        return MappingKey(source_type, destination_type, identifier)


# Process-wide registry used by the facades when no registry is passed
_default_registry = MappingRegistry()


def get_default_registry() -> MappingRegistry:
    """Get the process-wide registry instance."""
    return _default_registry


def set_default_registry(registry: MappingRegistry) -> MappingRegistry:
    """
    Replace the process-wide registry and return the previous one.

    Intended for application start-up (to apply settings) and for tests.
    """
    global _default_registry
    if registry is None:
        raise NullArgumentError("registry")
    previous = _default_registry
    _default_registry = registry
    logger.info("Default mapping registry replaced")
    return previous
