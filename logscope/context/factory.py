"""Factory function for instantiating ambient context pairs."""

import logging
from typing import Tuple, Union

from logscope.config.models import PropagationMode

from .base import NestedVariablesContext, VariablesContext
from .mapped import LogicalVariablesContext, ThreadVariablesContext
from .nested import LogicalNestedContext, ThreadNestedContext

logger = logging.getLogger(__name__)


def create_contexts(
    mode: Union[PropagationMode, str] = PropagationMode.THREAD,
) -> Tuple[VariablesContext, NestedVariablesContext]:
    """Create a variables context and a nested context for one propagation mode.

    Every call returns fresh storage, so two pairs created separately never
    see each other's variables even in the same thread.

    Args:
        mode: PropagationMode (or its string value)

    Returns:
        Tuple of (VariablesContext, NestedVariablesContext)

    Raises:
        ValueError: If mode is not a known propagation mode

    Example:
        >>> variables, markers = create_contexts(PropagationMode.LOGICAL)
        >>> variables.set("request_id", "abc123")
    """
    context_map = {
        PropagationMode.THREAD: (ThreadVariablesContext, ThreadNestedContext),
        PropagationMode.LOGICAL: (LogicalVariablesContext, LogicalNestedContext),
    }

    try:
        resolved = PropagationMode(mode)
    except ValueError:
        supported = ", ".join(m.value for m in PropagationMode)
        raise ValueError(
            f"Unknown propagation mode: {mode}. Supported modes: {supported}"
        ) from None

    variables_class, nested_class = context_map[resolved]

    logger.debug(
        "Creating ambient contexts",
        extra={
            "propagation": resolved.value,
            "variables_class": variables_class.__name__,
            "nested_class": nested_class.__name__,
        },
    )

    return variables_class(), nested_class()
