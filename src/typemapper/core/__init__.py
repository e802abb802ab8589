"""Registry, definitions and execution pipeline."""

from .accessors import MemberAccessor, resolve_member
from .definition import MappingDefinition
from .protocols import MappingExecutor
from .registry import (
    MappingKey,
    MappingRegistry,
    get_default_registry,
    set_default_registry,
)
from .steps import PredicateTarget

__all__ = [
    "MappingDefinition",
    "MappingExecutor",
    "MappingKey",
    "MappingRegistry",
    "MemberAccessor",
    "PredicateTarget",
    "get_default_registry",
    "resolve_member",
    "set_default_registry",
]
