"""Declarative, registry-based mapping between Python types."""

from .api import MappingSource, define_mapping, map_from
from .config import MapperSettings, configure_logging, load_settings
from .core import (
    MappingDefinition,
    MappingExecutor,
    MappingKey,
    MappingRegistry,
    PredicateTarget,
    get_default_registry,
    set_default_registry,
)
from .exceptions import (
    ConstructorNotDefinedError,
    InvalidBridgeError,
    InvalidSelectorError,
    IterationLimitError,
    MappingError,
    NotConfiguredError,
    NullArgumentError,
    SettingsLoadError,
)

__version__ = "0.1.0"

__all__ = [
    "ConstructorNotDefinedError",
    "InvalidBridgeError",
    "InvalidSelectorError",
    "IterationLimitError",
    "MapperSettings",
    "MappingDefinition",
    "MappingError",
    "MappingExecutor",
    "MappingKey",
    "MappingRegistry",
    "MappingSource",
    "NotConfiguredError",
    "NullArgumentError",
    "PredicateTarget",
    "SettingsLoadError",
    "configure_logging",
    "define_mapping",
    "get_default_registry",
    "load_settings",
    "map_from",
    "set_default_registry",
]
