"""Execution pipeline replaying the steps of a mapping definition."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from .definition import MappingDefinition

logger = logging.getLogger(__name__)


def execute(
    definition: "MappingDefinition", source: Any, destination: Any = None
) -> Any:
    """
    Replay ``definition`` against ``source``.

    1. Construct the destination if none was given.
    2. Run the before hook.
    3. Run every assignment step in registration order.
    4. Run every projection step in registration order; a repetition step
       exhausts its loop before the next step starts.
    5. Run the after hook, whether or not 2-4 raised.
    6. Return the destination.

    Nothing is retried and nothing is wrapped: errors from the construction
    strategy, hooks or steps reach the caller as raised. When the after hook
    fails while an earlier error is propagating, its error is logged and the
    earlier one is re-raised.
    """
    key_label = definition.label

    if destination is None:
        logger.debug(f"Constructing destination for {key_label}")
        destination = definition.constructor(source)

    logger.debug(f"Executing {key_label}")
    failure: Optional[Exception] = None
    try:
        definition.before_hook(source)

        for assignment in definition.assignment_steps:
            assignment.apply(destination)

        for step in definition.projection_steps:
            step.apply(source, destination)

    except Exception as e:
        failure = e
        logger.error(f"Mapping {key_label} failed: {e}")
        raise

    finally:
        try:
            definition.after_hook(source)
        except Exception as e:
            if failure is None:
                raise
            # The earlier failure keeps propagating.
            logger.error(f"After hook of {key_label} failed: {e}")

    logger.debug(f"Mapping {key_label} completed")
    return destination
