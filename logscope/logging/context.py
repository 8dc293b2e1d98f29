"""Read side of the ambient scope state, for log record enrichment.

Log handlers call into this module to find out which variables and scope
markers are active on the branch that emitted a record. It also offers
log_context, a small context manager for the common case of opening a
scope just to attach a few fields.
"""

from typing import Any, Dict, Optional, Tuple

from logscope.scopes.api import get_scope_manager
from logscope.scopes.manager import ScopeManager


def get_log_context(manager: Optional[ScopeManager] = None) -> Dict[str, Any]:
    """Get the ambient variables active on the current branch.

    Args:
        manager: Scope manager to read (default: the process default)

    Returns:
        Copy of the current variables, without the reserved scope stack key
    """
    manager = manager if manager is not None else get_scope_manager()
    return dict(manager.get_ambient_variables())


def get_scope_markers(manager: Optional[ScopeManager] = None) -> Tuple[str, ...]:
    """Get the scope markers active on the current branch, outermost first.

    Args:
        manager: Scope manager to read (default: the process default)
    """
    manager = manager if manager is not None else get_scope_manager()
    return tuple(reversed(manager.get_markers()))


class log_context:
    """Context manager opening a logging scope with the given fields.

    Example:
        >>> with log_context("sync account", account_id="acme", attempt=2):
        ...     logger.info("Sync started")  # includes account_id and attempt
        ... # fields restored on exit, even if an exception occurs
    """

    def __init__(self, description: str = "", manager: Optional[ScopeManager] = None, **kwargs):
        """Initialize context manager.

        Args:
            description: Scope marker (defaults to an empty marker)
            manager: Scope manager to use (default: the process default)
            **kwargs: Variables to set in the scope
        """
        self.description = description
        self.manager = manager
        self.kwargs = kwargs
        self.handle = None

    def __enter__(self):
        manager = self.manager if self.manager is not None else get_scope_manager()
        self.handle = manager.begin_scope(self.description, self.kwargs)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.handle is not None:
            self.handle.dispose()
        return False  # Don't suppress exceptions
