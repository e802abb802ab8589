"""
exceptions.py

Typed exception hierarchy raised by the mapping registry, the mapping
definitions and the execution pipeline.
"""

from __future__ import annotations

# --------------------------------------------------------------------------- #
#                              Base hierarchy                                 #
# --------------------------------------------------------------------------- #


class MappingError(Exception):
    """
    Root of all errors raised by typemapper itself.

    Exceptions raised by user-supplied selectors, setters, predicates or hooks
    are never wrapped in a ``MappingError``; they reach the caller unchanged.
    """


# --------------------------------------------------------------------------- #
#                           Configuration errors                              #
# --------------------------------------------------------------------------- #


class NullArgumentError(MappingError, ValueError):
    """
    Raised at configuration time when a required argument is ``None``.

    The offending parameter name is available as ``argument``.
    """

    def __init__(self, argument: str) -> None:
        super().__init__(f"Argument '{argument}' must not be None")
        self.argument = argument


class InvalidSelectorError(MappingError, ValueError):
    """
    Raised when a member selector does not resolve to a single settable
    attribute of the destination type.

    Examples
    --------
    * ``lambda to: to.child.value`` (nested access)
    * ``lambda to: to.items[0]`` (indexing)
    * ``lambda to: 42`` (no attribute access at all)
    * a read-only property
    """


class InvalidBridgeError(MappingError, TypeError):
    """
    Raised when two definitions cannot be composed because the destination
    type of the first is not the source type of the second.
    """


# --------------------------------------------------------------------------- #
#                             Execution errors                                #
# --------------------------------------------------------------------------- #


class ConstructorNotDefinedError(MappingError):
    """
    Raised on the first construction attempt when the destination type cannot
    be called without arguments and no ``construct`` factory was configured.
    """


class NotConfiguredError(MappingError, LookupError):
    """
    Raised when a mapping is requested for a (source type, destination type,
    identifier) key that was never defined.
    """


class IterationLimitError(MappingError):
    """
    Raised when a repetition step runs more iterations than the configured
    ``max_iterations`` setting allows.
    """


# --------------------------------------------------------------------------- #
#                              Settings errors                                #
# --------------------------------------------------------------------------- #


class SettingsLoadError(MappingError):
    """
    Raised when a settings file cannot be read or parsed.

    Examples
    --------
    * File does not exist / bad extension
    * YAML or JSON syntax error
    * Top-level object is not a mapping
    * Values rejected by ``MapperSettings`` validation
    """
