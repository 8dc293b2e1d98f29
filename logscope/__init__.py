"""Scoped, ambient diagnostic context for structured logging.

Open a scope, attach variables to it, and every log record emitted while it
is open (on this thread, or in logical mode on tasks and flowing threads
spawned from it) carries them. Closing the scope restores exactly what was
there before.

    >>> from logscope import begin_scope, push_variable
    >>> with begin_scope("checkout", {"order_id": 1001}):
    ...     push_variable("step", "payment")
"""

from .exceptions import (
    EmptyStackError,
    InvalidArgumentError,
    InvalidOperationError,
    InvalidStateError,
    NoActiveScopeError,
    ScopeError,
    UnbalancedStackError,
)
from .scopes import (
    ScopeGuard,
    ScopeManager,
    begin_scope,
    configure_scopes,
    get_scope_manager,
    get_scope_variables,
    push_variable,
    push_variables_for,
)

__all__ = [
    # Facade
    "begin_scope",
    "push_variable",
    "push_variables_for",
    "get_scope_variables",
    "get_scope_manager",
    "configure_scopes",
    "ScopeManager",
    "ScopeGuard",
    # Exceptions
    "ScopeError",
    "InvalidArgumentError",
    "InvalidStateError",
    "NoActiveScopeError",
    "EmptyStackError",
    "UnbalancedStackError",
    "InvalidOperationError",
]
