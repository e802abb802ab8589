"""
Step records replayed by the execution pipeline.

Every configuration call on a definition appends one of these. Callables are
normalised at configuration time so that replay never inspects arity:

* assignment steps take ``destination``;
* projection steps take ``(source, destination)``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Iterable, Optional

from ..exceptions import IterationLimitError
from .accessors import MemberAccessor

logger = logging.getLogger(__name__)


class PredicateTarget(str, Enum):
    """What a repetition predicate is evaluated against."""

    SOURCE = "source"
    DESTINATION = "destination"
    BOTH = "both"


# ---------------------------------------------------------------------------
# Assignment steps
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ConstantAssignment:
    """Writes a value captured at configuration time."""

    accessor: MemberAccessor
    value: Any

    def apply(self, destination: Any) -> None:
        self.accessor.set(destination, self.value)

    def describe(self) -> str:
        return f"assign {self.accessor.name} = {self.value!r}"


@dataclass(frozen=True)
class GeneratedAssignment:
    """Writes a value produced by ``factory`` on every replay."""

    accessor: MemberAccessor
    factory: Callable[[], Any]

    def apply(self, destination: Any) -> None:
        self.accessor.set(destination, self.factory())

    def describe(self) -> str:
        return f"assign {self.accessor.name} = <generated>"


# ---------------------------------------------------------------------------
# Projection steps
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ProjectionStep:
    """Reads one value from the source and hands it to a setter, once."""

    selector: Callable[[Any], Any]
    setter: Callable[[Any, Any], None]
    label: str = "map"

    def apply(self, source: Any, destination: Any) -> None:
        self.setter(destination, self.selector(source))

    def describe(self) -> str:
        return self.label


@dataclass(frozen=True)
class RepeatStep:
    """
    Invokes ``setter`` while ``predicate`` holds.

    ``predicate(source, destination, index)`` and
    ``setter(destination, index, source)`` are the normalised forms built by
    the definition. ``max_iterations`` of None leaves the loop unbounded.
    """

    predicate: Callable[[Any, Any, int], bool]
    setter: Callable[[Any, int, Any], None]
    target: PredicateTarget = PredicateTarget.SOURCE
    max_iterations: Optional[int] = None

    def apply(self, source: Any, destination: Any) -> None:
        index = 0
        while self.predicate(source, destination, index):
            if self.max_iterations is not None and index >= self.max_iterations:
                raise IterationLimitError(
                    f"Repetition step exceeded max_iterations={self.max_iterations}"
                )
            self.setter(destination, index, source)
            index += 1
        logger.debug(f"Repetition step finished after {index} iteration(s)")

    def describe(self) -> str:
        return f"map while <predicate over {self.target.value}>"


@dataclass(frozen=True)
class ManyStep:
    """Invokes ``setter(destination, index, value)`` per element of a sequence."""

    selector: Callable[[Any], Iterable[Any]]
    setter: Callable[[Any, int, Any], None]
    label: str = "map many"

    def apply(self, source: Any, destination: Any) -> None:
        count = 0
        for index, value in enumerate(self.selector(source)):
            self.setter(destination, index, value)
            count += 1
        logger.debug(f"Per-element step mapped {count} element(s)")

    def describe(self) -> str:
        return self.label
