"""Mapping definition: the fluent, incrementally built configuration of one mapping."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Callable, Iterable, Union

from ..exceptions import InvalidBridgeError, NullArgumentError
from . import pipeline
from .accessors import MemberSelector, resolve_member
from .construction import DefaultConstructor
from .protocols import MappingExecutor
from .steps import (
    ConstantAssignment,
    GeneratedAssignment,
    ManyStep,
    PredicateTarget,
    ProjectionStep,
    RepeatStep,
)
from .utils import type_name

if TYPE_CHECKING:
    from .registry import MappingKey, MappingRegistry

logger = logging.getLogger(__name__)

AssignmentStep = Union[ConstantAssignment, GeneratedAssignment]
Step = Union[ProjectionStep, RepeatStep, ManyStep]


def _no_op(source: Any) -> None:
    return None


class MappingDefinition(MappingExecutor):
    """
    Configuration for mapping ``source_type`` values to ``destination_type``.

    Definitions are created by a ``MappingRegistry`` and live as long as it
    does. Every configuration method appends to (or, for the constructor and
    hooks, replaces part of) the definition and returns it, so calls chain::

        registry.define(FlatFrom, FlatTo) \\
            .map(lambda s: s.value, lambda to: to.value) \\
            .assign_factory("mapped_at", datetime.now)

    Steps are never removed or reordered.
    """

    def __init__(
        self,
        source_type: type,
        destination_type: type,
        identifier: str,
        registry: "MappingRegistry",
    ) -> None:
        self._source_type = source_type
        self._destination_type = destination_type
        self._identifier = identifier
        self._registry = registry
        self._logger = logger.getChild(self.__class__.__name__)

        self._constructor: Callable[[Any], Any] = DefaultConstructor(destination_type)
        self._before_hook: Callable[[Any], None] = _no_op
        self._after_hook: Callable[[Any], None] = _no_op
        self._assignments: list[AssignmentStep] = []
        self._projections: list[Step] = []

    # --- Identity ---

    @property
    def source_type(self) -> type:
        return self._source_type

    @property
    def destination_type(self) -> type:
        return self._destination_type

    @property
    def identifier(self) -> str:
        return self._identifier

    @property
    def key(self) -> "MappingKey":
        from .registry import MappingKey

        return MappingKey(
            self._source_type, self._destination_type, self._identifier
        )

    @property
    def label(self) -> str:
        return str(self.key)

    @property
    def registry(self) -> "MappingRegistry":
        return self._registry

    # --- Read access for the pipeline ---

    @property
    def constructor(self) -> Callable[[Any], Any]:
        return self._constructor

    @property
    def before_hook(self) -> Callable[[Any], None]:
        return self._before_hook

    @property
    def after_hook(self) -> Callable[[Any], None]:
        return self._after_hook

    @property
    def assignment_steps(self) -> tuple[AssignmentStep, ...]:
        return tuple(self._assignments)

    @property
    def projection_steps(self) -> tuple[Step, ...]:
        return tuple(self._projections)

    @property
    def has_steps(self) -> bool:
        return bool(self._assignments or self._projections)

    # --- Construction and hooks ---

    def construct(self, factory: Callable[[Any], Any]) -> "MappingDefinition":
        """
        Replace the strategy that builds a destination from the source.

        Ignored whenever a destination is passed to ``execute``.
        """
        if factory is None:
            raise NullArgumentError("factory")
        self._constructor = factory
        return self

    def before_map(self, action: Callable[[Any], None]) -> "MappingDefinition":
        """Replace the hook called with the source before any step runs."""
        if action is None:
            raise NullArgumentError("action")
        self._before_hook = action
        return self

    def after_map(self, action: Callable[[Any], None]) -> "MappingDefinition":
        """Replace the hook called with the source after all steps, even on failure."""
        if action is None:
            raise NullArgumentError("action")
        self._after_hook = action
        return self

    # --- Assignment steps ---

    def assign(self, member: MemberSelector, value: Any) -> "MappingDefinition":
        """Assign ``value``, captured now, to ``member`` on every mapping."""
        accessor = resolve_member(self._destination_type, member)
        self._assignments.append(ConstantAssignment(accessor, value))
        self._logger.debug(f"{self.label}: assign constant to '{accessor.name}'")
        return self

    def assign_factory(
        self, member: MemberSelector, factory: Callable[[], Any]
    ) -> "MappingDefinition":
        """Assign ``factory()``, called afresh on every mapping, to ``member``."""
        if factory is None:
            raise NullArgumentError("factory")
        accessor = resolve_member(self._destination_type, member)
        self._assignments.append(GeneratedAssignment(accessor, factory))
        self._logger.debug(
            f"{self.label}: assign generated value to '{accessor.name}'"
        )
        return self

    # --- Projection steps ---

    def map(
        self, from_selector: Callable[[Any], Any], member: MemberSelector
    ) -> "MappingDefinition":
        """Copy ``from_selector(source)`` into the destination member ``member``."""
        if from_selector is None:
            raise NullArgumentError("from_selector")
        accessor = resolve_member(self._destination_type, member)
        return self._append(
            ProjectionStep(
                from_selector, accessor.set, label=f"map -> {accessor.name}"
            )
        )

    def map_with(
        self,
        from_selector: Callable[[Any], Any],
        setter: Callable[[Any, Any], None],
    ) -> "MappingDefinition":
        """Call ``setter(destination, from_selector(source))`` once per mapping."""
        if from_selector is None:
            raise NullArgumentError("from_selector")
        if setter is None:
            raise NullArgumentError("setter")
        return self._append(
            ProjectionStep(from_selector, setter, label="map with setter")
        )

    def map_while(
        self,
        predicate: Callable[..., bool],
        setter: Callable[..., None],
        *,
        over: Union[PredicateTarget, str] = PredicateTarget.SOURCE,
        indexed: bool = False,
    ) -> "MappingDefinition":
        """
        Repeatedly call ``setter`` while ``predicate`` returns True.

        ``over`` chooses the predicate arguments: the source, the destination
        or both (``predicate(source, destination)``). With ``indexed`` the
        zero-based iteration count is appended to the predicate arguments and
        the setter is called as ``setter(destination, index, source)``;
        otherwise as ``setter(destination, source)``.

        This expresses cursor-style sources::

            definition.map_while(
                lambda reader: reader.read(),
                lambda rows, reader: rows.append(reader.current),
            )
        """
        if predicate is None:
            raise NullArgumentError("predicate")
        if setter is None:
            raise NullArgumentError("setter")
        target = PredicateTarget(over)

        return self._append(
            RepeatStep(
                predicate=_normalize_predicate(predicate, target, indexed),
                setter=setter if indexed else _ignore_index(setter),
                target=target,
                max_iterations=self._registry.settings.max_iterations,
            )
        )

    def map_many(
        self,
        selector: Callable[[Any], Iterable[Any]],
        setter: Callable[..., None],
        *,
        indexed: bool = False,
    ) -> "MappingDefinition":
        """
        Call ``setter`` once per element of ``selector(source)``, in order.

        The setter receives ``(destination, value)``, or
        ``(destination, index, value)`` when ``indexed`` is True.
        """
        if selector is None:
            raise NullArgumentError("selector")
        if setter is None:
            raise NullArgumentError("setter")

        return self._append(
            ManyStep(selector, setter if indexed else _ignore_index(setter))
        )

    def map_each(
        self, setter: Callable[..., None], *, indexed: bool = False
    ) -> "MappingDefinition":
        """``map_many`` over the source itself, for iterable source types."""
        return self.map_many(_identity, setter, indexed=indexed)

    # --- Composition ---

    def bridge(
        self, other: MappingExecutor, identifier: str = ""
    ) -> "MappingDefinition":
        """
        Define ``source_type -> other.destination_type`` through this mapping.

        The new definition, registered in the same registry under
        ``identifier``, gets one projection step: map the source with this
        definition (always constructing the intermediate value), then map the
        intermediate into the destination with ``other``. It can be configured
        further like any other definition.

        Raises:
            NullArgumentError: If ``other`` is None.
            InvalidBridgeError: If ``other`` does not read this definition's
                destination type.
        """
        if other is None:
            raise NullArgumentError("other")
        if identifier is None:
            raise NullArgumentError("identifier")
        if not isinstance(other, MappingExecutor):
            raise InvalidBridgeError(
                f"Cannot bridge to {type(other).__name__}: it is not a mapping"
            )
        if not _accepts(other.source_type, self._destination_type):
            raise InvalidBridgeError(
                f"Cannot bridge {self.label} with a mapping reading "
                f"{type_name(other.source_type)}"
            )

        bridged = self._registry.define(
            self._source_type, other.destination_type, identifier
        )

        def populate(destination: Any, intermediate: Any) -> None:
            other.execute(intermediate, destination)

        bridged._append(
            ProjectionStep(
                self.execute,
                populate,
                label=f"bridge via {type_name(self._destination_type)}",
            )
        )
        self._logger.info(
            f"Bridged {self.label} into {bridged.label}"
        )
        return bridged

    # --- Execution ---

    def execute(self, source: Any, destination: Any = None) -> Any:
        """Map ``source``, into ``destination`` if given, else into a new one."""
        return pipeline.execute(self, source, destination)

    # --- Introspection ---

    def describe(self) -> dict[str, Any]:
        """Summary used by ``MappingRegistry.describe`` and the CLI."""
        return {
            "source": type_name(self._source_type),
            "destination": type_name(self._destination_type),
            "identifier": self._identifier,
            "custom_constructor": not isinstance(self._constructor, DefaultConstructor),
            "before_hook": self._before_hook is not _no_op,
            "after_hook": self._after_hook is not _no_op,
            "assignments": [step.describe() for step in self._assignments],
            "projections": [step.describe() for step in self._projections],
        }

    def __repr__(self) -> str:
        return f"<MappingDefinition {self.label}>"

    # --- Internals ---

    def _append(self, step: Step) -> "MappingDefinition":
        self._projections.append(step)
        self._logger.debug(f"{self.label}: added step '{step.describe()}'")
        return self


def _identity(value: Any) -> Any:
    return value


def _ignore_index(
    setter: Callable[[Any, Any], None]
) -> Callable[[Any, int, Any], None]:
    return lambda destination, index, value: setter(destination, value)


def _accepts(expected: Any, actual: Any) -> bool:
    if isinstance(expected, type) and isinstance(actual, type):
        return issubclass(actual, expected)
    return expected == actual


def _normalize_predicate(
    predicate: Callable[..., bool], target: PredicateTarget, indexed: bool
) -> Callable[[Any, Any, int], bool]:
    if target is PredicateTarget.SOURCE:
        if indexed:
            return lambda source, destination, index: predicate(source, index)
        return lambda source, destination, index: predicate(source)
    if target is PredicateTarget.DESTINATION:
        if indexed:
            return lambda source, destination, index: predicate(destination, index)
        return lambda source, destination, index: predicate(destination)
    if indexed:
        return predicate
    return lambda source, destination, index: predicate(source, destination)
