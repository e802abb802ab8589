from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class MappingExecutor(Protocol):
    """Defines the contract for running a configured mapping pipeline."""

    @property
    def source_type(self) -> type:
        """The type of the values this mapping reads from."""
        ...

    @property
    def destination_type(self) -> type:
        """The type of the values this mapping produces or populates."""
        ...

    def execute(self, source: Any, destination: Any = None) -> Any:
        """
        Map ``source`` into ``destination``, constructing it when absent.

        Args:
            source: The value to read from.
            destination: An existing destination to populate, or None to
                build one with the configured construction strategy.

        Returns:
            The populated destination.
        """
        ...

