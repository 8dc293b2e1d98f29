"""Single-fire disposables.

A Disposable runs its cleanup action at most once, no matter how many times
or from how many threads dispose() is called. It doubles as a context
manager so scopes read naturally in a ``with`` block.
"""

import threading
from typing import Any, Callable, Generic, Optional, TypeVar

T = TypeVar("T")


class Disposable(Generic[T]):
    """Wraps an optional instance and a cleanup action that fires once.

    Attributes:
        instance: Object the cleanup action receives (may be None)
    """

    def __init__(
        self,
        dispose_action: Optional[Callable[..., Any]] = None,
        instance: Optional[T] = None,
    ) -> None:
        """Initialize disposable.

        Args:
            dispose_action: Cleanup callable. Called with ``instance`` when an
                instance was given, otherwise with no arguments. None makes
                this a no-op disposable.
            instance: Optional object handed to the cleanup action
        """
        self.instance = instance
        self._dispose_action = dispose_action
        self._disposed = False
        self._lock = threading.Lock()

    @classmethod
    def using(cls, instance: T, dispose_action: Callable[[T], Any]) -> "Disposable[T]":
        """Create a disposable that passes ``instance`` to ``dispose_action``."""
        return cls(dispose_action, instance)

    @classmethod
    def noop(cls) -> "Disposable[Any]":
        """Create a disposable that does nothing when disposed."""
        return cls()

    @property
    def disposed(self) -> bool:
        return self._disposed

    def dispose(self) -> bool:
        """Run the cleanup action if this is the first disposal.

        Returns:
            True if this call ran the action, False if already disposed
        """
        # Test-and-set under the lock; the action itself runs outside it so
        # a re-entrant dispose() from inside the action returns immediately.
        with self._lock:
            if self._disposed:
                return False
            self._disposed = True

        if self._dispose_action is not None:
            if self.instance is not None:
                self._dispose_action(self.instance)
            else:
                self._dispose_action()
        return True

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.dispose()
        return False  # Don't suppress exceptions
