"""Capability interfaces for ambient variable contexts.

Two kinds of ambient state back a logging scope:

- a VariablesContext: key/value pairs ("mapped diagnostic context")
- a NestedVariablesContext: a LIFO stack of string markers ("nested
  diagnostic context") labelling the active call depth

Each comes in a thread-confined and a logical (flowing) flavour, see
mapped.py and nested.py. The null objects at the bottom of this module
report ContextSupport.UNSUPPORTED so scope managers can degrade gracefully
instead of failing.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Iterable, Mapping, Optional, Tuple

from logscope.utils.disposable import Disposable


class ContextSupport(str, Enum):
    """Capability reported by a context implementation."""

    SUPPORTED = "supported"
    UNSUPPORTED = "unsupported"


class VariablesContext(ABC):
    """Ambient key/value store visible to every log call on a branch."""

    support: ContextSupport = ContextSupport.SUPPORTED

    @abstractmethod
    def get(self, key: str, default: Any = None) -> Any:
        """Return the value for key, or default if absent. Never raises."""

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        """Set a new or existing variable."""

    @abstractmethod
    def contains(self, key: str) -> bool:
        """Return True if key is present."""

    @abstractmethod
    def remove(self, key: str) -> None:
        """Remove key. Removing an absent key is a no-op."""

    @abstractmethod
    def clear(self) -> None:
        """Remove every variable."""

    @abstractmethod
    def keys(self) -> Iterable[str]:
        """Return the keys currently present."""

    @abstractmethod
    def __len__(self) -> int:
        pass

    @abstractmethod
    def snapshot(self) -> Mapping[str, Any]:
        """Return a read-only view of the current variables.

        The view must not change when the context is written afterwards.
        """

    @property
    def is_supported(self) -> bool:
        return self.support is ContextSupport.SUPPORTED

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.contains(key)


class NestedVariablesContext(ABC):
    """Ambient LIFO stack of string markers."""

    support: ContextSupport = ContextSupport.SUPPORTED

    @abstractmethod
    def push(self, marker: str) -> Disposable:
        """Push a marker.

        Returns:
            Token whose first disposal pops the stack once
        """

    @abstractmethod
    def pop(self) -> str:
        """Remove and return the most recent marker.

        Raises:
            EmptyStackError: If the stack is empty
        """

    @abstractmethod
    def peek(self) -> Optional[str]:
        """Return the most recent marker, or None if the stack is empty."""

    @abstractmethod
    def clear(self) -> None:
        """Remove every marker."""

    @abstractmethod
    def get_all(self) -> Tuple[str, ...]:
        """Return all markers, most recent first."""

    @abstractmethod
    def __len__(self) -> int:
        pass

    @property
    def has_items(self) -> bool:
        return len(self) > 0

    @property
    def is_supported(self) -> bool:
        return self.support is ContextSupport.SUPPORTED


class NullVariablesContext(VariablesContext):
    """Variables context that stores nothing."""

    support = ContextSupport.UNSUPPORTED

    def get(self, key: str, default: Any = None) -> Any:
        return default

    def set(self, key: str, value: Any) -> None:
        pass

    def contains(self, key: str) -> bool:
        return False

    def remove(self, key: str) -> None:
        pass

    def clear(self) -> None:
        pass

    def keys(self) -> Iterable[str]:
        return ()

    def __len__(self) -> int:
        return 0

    def snapshot(self) -> Mapping[str, Any]:
        return {}


class NullNestedContext(NestedVariablesContext):
    """Nested context that stores nothing.

    pop() returns an empty string instead of raising, as a null object
    should never be the reason a caller fails.
    """

    support = ContextSupport.UNSUPPORTED

    def push(self, marker: str) -> Disposable:
        return Disposable.noop()

    def pop(self) -> str:
        return ""

    def peek(self) -> Optional[str]:
        return None

    def clear(self) -> None:
        pass

    def get_all(self) -> Tuple[str, ...]:
        return ()

    def __len__(self) -> int:
        return 0
