"""Process-wide default scope manager and the module-level facade.

Most applications need exactly one ScopeManager. These functions operate on
a default instance which is created on first use from load_settings()
(logscope.yaml and LOGSCOPE_* environment variables) and can be replaced
with configure_scopes().

Example:
    >>> from logscope import begin_scope, push_variable
    >>> with begin_scope("handle request", {"request_id": "abc123"}):
    ...     push_variable("user_id", 42)
    ...     logger.info("Request handled")
"""

import threading
from typing import Any, Mapping, Optional

from logscope.config.loader import load_settings
from logscope.config.models import ScopeSettings
from logscope.utils.disposable import Disposable

from .guard import ScopeGuard
from .manager import ScopeManager, Variables

_default_manager: Optional[ScopeManager] = None
_default_lock = threading.Lock()


def get_scope_manager() -> ScopeManager:
    """Return the default manager, creating it from loaded settings if needed.

    Raises:
        ConfigurationError: If the settings found on first use are invalid
    """
    global _default_manager
    manager = _default_manager
    if manager is not None:
        return manager

    with _default_lock:
        if _default_manager is None:
            _default_manager = ScopeManager.from_settings(load_settings())
        return _default_manager


def configure_scopes(settings: Optional[ScopeSettings] = None) -> ScopeManager:
    """Replace the default manager.

    Scopes opened through the previous manager keep working through their
    handles but are no longer visible to the facade functions.

    Args:
        settings: Settings to build the manager from (default: load_settings())

    Returns:
        The new default manager
    """
    global _default_manager
    manager = ScopeManager.from_settings(settings if settings is not None else load_settings())
    with _default_lock:
        _default_manager = manager
    return manager


def begin_scope(
    description: str,
    variables: Optional[Variables] = None,
    prefix: Optional[str] = None,
) -> Disposable[ScopeGuard]:
    """Open a logging scope on the default manager. See ScopeManager.begin_scope."""
    return get_scope_manager().begin_scope(description, variables, prefix)


def push_variable(name: str, value: Any) -> None:
    """Set a variable in the current scope. See ScopeManager.push_variable."""
    get_scope_manager().push_variable(name, value)


def push_variables_for(variables: Variables, prefix: Optional[str] = None) -> None:
    """Set several variables in the current scope. See ScopeManager.push_variables_for."""
    get_scope_manager().push_variables_for(variables, prefix)


def get_scope_variables() -> Optional[Mapping[str, Any]]:
    """Return the current scope's variables, or None outside any scope."""
    return get_scope_manager().get_scope_variables()
