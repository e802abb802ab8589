"""
Member Accessor Resolver.

Turns a member selector into a reusable setter for one attribute of the
destination type. A selector is either an attribute name or a one-argument
callable performing exactly one attribute read on its argument::

    resolve_member(FlatTo, "value")
    resolve_member(FlatTo, lambda to: to.value)

Callables are evaluated once, at configuration time, against a recording
proxy, so they never touch a real destination object.
"""

from __future__ import annotations

import dataclasses
import inspect
import keyword
import logging
import types
from dataclasses import dataclass
from typing import Any, Callable, Optional, Union

from pydantic import BaseModel

from ..exceptions import InvalidSelectorError, NullArgumentError
from .utils import type_name

logger = logging.getLogger(__name__)

MemberSelector = Union[str, Callable[[Any], Any]]

_MISSING = object()


class _MemberRecorder:
    """Proxy recording every attribute read performed on it or its children."""

    __slots__ = ("_typemapper_reads", "_typemapper_name")

    def __init__(self, reads: list[str], name: Optional[str] = None) -> None:
        object.__setattr__(self, "_typemapper_reads", reads)
        object.__setattr__(self, "_typemapper_name", name)

    def __getattr__(self, name: str) -> "_MemberRecorder":
        self._typemapper_reads.append(name)
        return _MemberRecorder(self._typemapper_reads, name)

    def __setattr__(self, name: str, value: Any) -> None:
        raise TypeError("member selectors must not assign attributes")


@dataclass(frozen=True)
class MemberAccessor:
    """A resolved, settable attribute of a destination type."""

    owner: Any
    name: str

    def set(self, destination: Any, value: Any) -> None:
        setattr(destination, self.name, value)


def resolve_member(destination_type: Any, selector: MemberSelector) -> MemberAccessor:
    """
    Resolve ``selector`` to a settable attribute of ``destination_type``.

    Raises:
        NullArgumentError: If ``selector`` is None.
        InvalidSelectorError: If the selector is not a single attribute access
            or the attribute cannot be written on ``destination_type``.
    """
    if selector is None:
        raise NullArgumentError("member")

    if isinstance(selector, str):
        name = selector.strip()
    elif callable(selector):
        name = _record_member_name(selector)
    else:
        raise InvalidSelectorError(
            f"Member selector must be an attribute name or a callable, "
            f"got {type(selector).__name__}"
        )

    if not name.isidentifier() or keyword.iskeyword(name):
        raise InvalidSelectorError(f"'{name}' is not a valid attribute name")
    if name.startswith("_"):
        raise InvalidSelectorError(
            f"Private attribute '{name}' cannot be mapped"
        )

    if isinstance(destination_type, type):
        _check_settable(destination_type, name)

    logger.debug(f"Resolved member '{name}' on {type_name(destination_type)}")
    return MemberAccessor(owner=destination_type, name=name)


def _record_member_name(selector: Callable[[Any], Any]) -> str:
    reads: list[str] = []
    root = _MemberRecorder(reads)
    try:
        result = selector(root)
    except Exception as exc:
        raise InvalidSelectorError(
            f"Member selector must be a simple attribute access: {exc}"
        ) from exc

    if not reads:
        raise InvalidSelectorError("Member selector does not access any attribute")
    if len(reads) > 1:
        raise InvalidSelectorError(
            f"Member selector must access a single attribute, "
            f"got nested access '{'.'.join(reads)}'"
        )
    if not isinstance(result, _MemberRecorder) or result._typemapper_name != reads[0]:
        raise InvalidSelectorError(
            f"Member selector must return the attribute '{reads[0]}' itself"
        )
    return reads[0]


def _check_settable(destination_type: type, name: str) -> None:
    _check_not_frozen(destination_type)
    static = inspect.getattr_static(destination_type, name, _MISSING)

    if isinstance(static, property):
        if static.fset is None:
            raise InvalidSelectorError(
                f"Property '{name}' of {destination_type.__name__} is read-only"
            )
        return

    if inspect.isroutine(static) or isinstance(static, (classmethod, staticmethod)):
        raise InvalidSelectorError(
            f"'{name}' is a method of {destination_type.__name__}, not a field"
        )

    if isinstance(static, (types.MemberDescriptorType, types.GetSetDescriptorType)):
        return

    if dataclasses.is_dataclass(destination_type):
        field_names = {f.name for f in dataclasses.fields(destination_type)}
        if name not in field_names:
            raise InvalidSelectorError(
                f"{destination_type.__name__} has no field '{name}'"
            )
        return

    if issubclass(destination_type, BaseModel):
        if name not in destination_type.model_fields:
            raise InvalidSelectorError(
                f"{destination_type.__name__} has no field '{name}'"
            )
        return

    declared = _declared_members(destination_type)
    if declared and name not in declared:
        raise InvalidSelectorError(
            f"{destination_type.__name__} declares no member '{name}'"
        )

    # Instances without a __dict__ only accept slots and data descriptors.
    if getattr(destination_type, "__dictoffset__", 0) == 0:
        raise InvalidSelectorError(
            f"Instances of {destination_type.__name__} have no settable "
            f"attribute '{name}'"
        )


def _check_not_frozen(destination_type: type) -> None:
    # Frozen types reject every assignment, slot-backed fields included.
    if dataclasses.is_dataclass(destination_type):
        if destination_type.__dataclass_params__.frozen:
            raise InvalidSelectorError(
                f"Dataclass {destination_type.__name__} is frozen"
            )
    elif issubclass(destination_type, BaseModel):
        if destination_type.model_config.get("frozen"):
            raise InvalidSelectorError(f"Model {destination_type.__name__} is frozen")


def _declared_members(destination_type: type) -> set[str]:
    """Public annotated names and plain class attributes along the MRO."""
    declared: set[str] = set()
    for klass in destination_type.__mro__:
        if klass is object:
            continue
        namespace = vars(klass)
        declared.update(inspect.get_annotations(klass))
        declared.update(
            attr
            for attr, value in namespace.items()
            if not callable(value)
            and not isinstance(value, (classmethod, staticmethod, property))
        )
    return {attr for attr in declared if not attr.startswith("_")}
