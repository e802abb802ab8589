"""Default construction strategy for destination types."""

from __future__ import annotations

import functools
import inspect
import logging
from typing import Any, Optional

from ..exceptions import ConstructorNotDefinedError
from .utils import type_name

logger = logging.getLogger(__name__)

_VARIADIC = (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)


@functools.lru_cache(maxsize=None)
def has_default_constructor(destination_type: type) -> Optional[bool]:
    """
    Tell whether ``destination_type`` can be called without arguments.

    Returns None when the signature cannot be introspected (some builtins);
    the caller then has to attempt the call to find out.
    """
    if not isinstance(destination_type, type):
        return False
    if inspect.isabstract(destination_type):
        return False
    try:
        signature = inspect.signature(destination_type)
    except (TypeError, ValueError):
        return None
    return all(
        parameter.default is not inspect.Parameter.empty
        or parameter.kind in _VARIADIC
        for parameter in signature.parameters.values()
    )


class DefaultConstructor:
    """
    Construction strategy calling the destination type with no arguments.

    The capability check is deferred to the first call so that definitions
    can be declared for types that are only ever populated in place.
    """

    def __init__(self, destination_type: type) -> None:
        self.destination_type = destination_type

    def __call__(self, source: Any) -> Any:
        capable = has_default_constructor(self.destination_type)
        if capable is False:
            raise ConstructorNotDefinedError(
                f"{type_name(self.destination_type)} has no zero-argument "
                "constructor; configure one with construct()"
            )
        if capable is None:
            try:
                return self.destination_type()
            except TypeError as exc:
                raise ConstructorNotDefinedError(
                    f"{type_name(self.destination_type)} cannot be constructed "
                    f"without arguments: {exc}"
                ) from exc
        return self.destination_type()

    def __repr__(self) -> str:
        return f"DefaultConstructor({type_name(self.destination_type)})"
