"""Scope guard: records prior values and restores them on disposal."""

import threading
from types import MappingProxyType
from typing import Any, Callable, Dict, Mapping, Optional

from logscope.context.base import VariablesContext
from logscope.exceptions import InvalidArgumentError, InvalidStateError

from .optimizer import ABSENT, can_clear_context

# Called once before restoration; returning False skips restoration
Disposer = Callable[["ScopeGuard"], bool]


class ScopeGuard:
    """Tracks the variables one logging scope has written.

    The first write to a key records what the context held before (or
    ABSENT), and later writes to the same key leave that record alone.
    Disposal therefore always restores the value from before the scope
    opened, however many times the scope overwrote it.

    A guard may be shared by branches forked while it was the current
    scope, so its bookkeeping is serialised with a lock. Writes and
    restoration always go to the ambient context of the calling branch.

    Attributes:
        description: Marker text of the scope this guard belongs to
    """

    def __init__(
        self,
        context: VariablesContext,
        disposer: Optional[Disposer] = None,
        description: Optional[str] = None,
    ) -> None:
        """Initialize scope guard.

        Args:
            context: Ambient variables context to write through
            disposer: Optional callback fired first on disposal. Returning
                False aborts restoration.
            description: Optional scope description, for diagnostics

        Raises:
            InvalidArgumentError: If context is None
        """
        if context is None:
            raise InvalidArgumentError("ScopeGuard requires a variables context")

        self.description = description
        self._context = context
        self._disposer = disposer
        self._saved_entries: Dict[str, Any] = {}
        self._disposed = False
        # Re-entrant so a disposer that disposes again returns instead of deadlocking
        self._lock = threading.RLock()

    @property
    def disposed(self) -> bool:
        return self._disposed

    @property
    def saved_entries(self) -> Mapping[str, Any]:
        """Read-only view of key -> prior value (or ABSENT)."""
        with self._lock:
            return MappingProxyType(dict(self._saved_entries))

    def set(self, key: str, value: Any) -> None:
        """Write a variable, remembering the value it replaces.

        Args:
            key: Variable name (non-empty string)
            value: Variable value

        Raises:
            InvalidArgumentError: If key is empty or not a string
            InvalidStateError: If the guard has been disposed
        """
        if not isinstance(key, str) or not key:
            raise InvalidArgumentError("Scope variable key cannot be empty")

        with self._lock:
            if self._disposed:
                raise InvalidStateError(
                    f"Logging scope '{self.description}' already disposed"
                )

            if key not in self._saved_entries:
                if self._context.contains(key):
                    self._saved_entries[key] = self._context.get(key)
                else:
                    self._saved_entries[key] = ABSENT

            self._context.set(key, value)

    def get_variables(self) -> Mapping[str, Any]:
        """Return the tracked variables with their current values.

        Only keys this guard has written are included; other ambient
        variables stay hidden.
        """
        with self._lock:
            return MappingProxyType(
                {
                    key: self._context.get(key)
                    for key in self._saved_entries
                    if self._context.contains(key)
                }
            )

    def dispose(self) -> bool:
        """Restore every recorded key, exactly once.

        Returns:
            True if this call performed the disposal, False if the guard
            had already been disposed
        """
        with self._lock:
            if self._disposed:
                return False
            self._disposed = True

            try:
                if self._disposer is not None and self._disposer(self) is False:
                    return True
                self._restore()
            finally:
                self._saved_entries.clear()
            return True

    def _restore(self) -> None:
        if can_clear_context(self._saved_entries, self._context):
            self._context.clear()
            return

        for key, prior in self._saved_entries.items():
            if prior is ABSENT:
                self._context.remove(key)
            else:
                self._context.set(key, prior)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.dispose()
        return False  # Don't suppress exceptions

    def __repr__(self) -> str:
        state = "disposed" if self._disposed else "open"
        return f"ScopeGuard(description={self.description!r}, {state})"
