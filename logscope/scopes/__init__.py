"""Logging scopes: guards, per-branch scope stacks and the scope manager.

Use the module-level facade for the process default manager:
    from logscope.scopes.api import begin_scope, push_variable

Or own a manager explicitly:
    from logscope.scopes.manager import ScopeManager
    manager = ScopeManager(propagation="logical")
"""

from .api import (
    begin_scope,
    configure_scopes,
    get_scope_manager,
    get_scope_variables,
    push_variable,
    push_variables_for,
)
from .guard import ScopeGuard
from .manager import ScopeManager
from .optimizer import ABSENT, can_clear_context
from .stack import ScopeStack

__all__ = [
    # Facade
    "begin_scope",
    "push_variable",
    "push_variables_for",
    "get_scope_variables",
    "get_scope_manager",
    "configure_scopes",
    # Building blocks
    "ScopeManager",
    "ScopeGuard",
    "ScopeStack",
    "ABSENT",
    "can_clear_context",
]
