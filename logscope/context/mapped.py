"""Ambient key/value contexts.

ThreadVariablesContext keeps one mutable dict per OS thread. Nothing ever
crosses a thread boundary: a new thread always starts empty.

LogicalVariablesContext keeps one immutable snapshot per logical execution
branch in a ContextVar. Writes never mutate a snapshot in place; they copy
it, change one key and install the copy. A branch forked from another
(an asyncio task, or a thread started through logscope.utils.threads)
starts with a reference to its parent's snapshot, and from then on each
side only ever replaces its own reference, so neither sees the other's
later writes.
"""

import threading
from contextvars import ContextVar
from types import MappingProxyType
from typing import Any, Dict, Iterable, Mapping

from .base import VariablesContext

# Shared by every branch that has never written
EMPTY_VARIABLES: Mapping[str, Any] = MappingProxyType({})


class ThreadVariablesContext(VariablesContext):
    """Per-thread variables, mutated in place."""

    def __init__(self) -> None:
        self._local = threading.local()

    def _entries(self, create: bool = False) -> Dict[str, Any]:
        entries = getattr(self._local, "entries", None)
        if entries is None:
            if not create:
                return {}
            entries = self._local.entries = {}
        return entries

    def get(self, key: str, default: Any = None) -> Any:
        return self._entries().get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._entries(create=True)[key] = value

    def contains(self, key: str) -> bool:
        return key in self._entries()

    def remove(self, key: str) -> None:
        self._entries().pop(key, None)

    def clear(self) -> None:
        self._entries().clear()

    def keys(self) -> Iterable[str]:
        return list(self._entries())

    def __len__(self) -> int:
        return len(self._entries())

    def snapshot(self) -> Mapping[str, Any]:
        return MappingProxyType(dict(self._entries()))


class LogicalVariablesContext(VariablesContext):
    """Copy-on-write variables that flow with the contextvars context."""

    def __init__(self, name: str = "logscope_variables") -> None:
        """Initialize logical context.

        Args:
            name: Name of the backing ContextVar (shows up in debuggers)
        """
        self._snapshot: ContextVar[Mapping[str, Any]] = ContextVar(
            name, default=EMPTY_VARIABLES
        )

    def _install(self, entries: Dict[str, Any]) -> None:
        # The only point where a branch publishes new state
        self._snapshot.set(MappingProxyType(entries) if entries else EMPTY_VARIABLES)

    def get(self, key: str, default: Any = None) -> Any:
        return self._snapshot.get().get(key, default)

    def set(self, key: str, value: Any) -> None:
        entries = dict(self._snapshot.get())
        entries[key] = value
        self._install(entries)

    def contains(self, key: str) -> bool:
        return key in self._snapshot.get()

    def remove(self, key: str) -> None:
        current = self._snapshot.get()
        if key not in current:
            return
        self._install({k: v for k, v in current.items() if k != key})

    def clear(self) -> None:
        self._snapshot.set(EMPTY_VARIABLES)

    def keys(self) -> Iterable[str]:
        return list(self._snapshot.get())

    def __len__(self) -> int:
        return len(self._snapshot.get())

    def snapshot(self) -> Mapping[str, Any]:
        # Snapshots are never mutated once installed
        return self._snapshot.get()
