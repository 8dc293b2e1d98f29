"""Ambient context implementations for logging scopes.

Two propagation modes are available for both kinds of ambient state:
- thread: mapped.ThreadVariablesContext / nested.ThreadNestedContext
- logical: mapped.LogicalVariablesContext / nested.LogicalNestedContext

Use the factory function to get a matching pair:
    from logscope.context.factory import create_contexts
    variables, markers = create_contexts("logical")

Null objects for environments without ambient storage:
    from logscope.context.base import NullVariablesContext, NullNestedContext
"""

from .base import (
    ContextSupport,
    NestedVariablesContext,
    NullNestedContext,
    NullVariablesContext,
    VariablesContext,
)
from .factory import create_contexts
from .mapped import EMPTY_VARIABLES, LogicalVariablesContext, ThreadVariablesContext
from .nested import LogicalNestedContext, ThreadNestedContext

__all__ = [
    # Interfaces and factory
    "ContextSupport",
    "VariablesContext",
    "NestedVariablesContext",
    "create_contexts",
    # Implementations
    "ThreadVariablesContext",
    "LogicalVariablesContext",
    "ThreadNestedContext",
    "LogicalNestedContext",
    "EMPTY_VARIABLES",
    # Null objects
    "NullVariablesContext",
    "NullNestedContext",
]
