"""Ambient nested marker stacks ("nested diagnostic context").

The logical flavour is a persistent singly linked list: every push creates
an immutable frame pointing at its parent, and the ContextVar only ever
holds the head. Forking a branch therefore shares the whole chain for free,
and each branch pushes and pops by moving its own head.
"""

import threading
from abc import abstractmethod
from contextvars import ContextVar
from typing import List, NamedTuple, Optional, Tuple

from logscope.exceptions import EmptyStackError, InvalidArgumentError
from logscope.logging import get_logger
from logscope.utils.disposable import Disposable

from .base import NestedVariablesContext

logger = get_logger(__name__, component="context")


def _validate_marker(marker: str) -> str:
    if not isinstance(marker, str):
        raise InvalidArgumentError(
            f"Nested context marker must be a string, got: {type(marker).__name__}"
        )
    return marker


class _Frame(NamedTuple):
    value: str
    parent: Optional["_Frame"]
    depth: int


class _MarkerStack(NestedVariablesContext):
    """Shared push-token handling for both flavours."""

    def push(self, marker: str) -> Disposable:
        self._push(_validate_marker(marker))
        return Disposable(self._pop_from_token)

    @abstractmethod
    def _push(self, marker: str) -> None:
        pass

    def _pop_from_token(self) -> None:
        if not self.has_items:
            logger.warning(
                "Nested context token disposed with no markers left",
                extra={"event": "context.nested.token_on_empty"},
            )
            return
        self.pop()


class ThreadNestedContext(_MarkerStack):
    """Per-thread marker stack."""

    def __init__(self) -> None:
        self._local = threading.local()

    def _frames(self) -> List[str]:
        frames = getattr(self._local, "frames", None)
        if frames is None:
            frames = self._local.frames = []
        return frames

    def _push(self, marker: str) -> None:
        self._frames().append(marker)

    def pop(self) -> str:
        frames = self._frames()
        if not frames:
            raise EmptyStackError("Nested context is empty, nothing to pop")
        return frames.pop()

    def peek(self) -> Optional[str]:
        frames = self._frames()
        return frames[-1] if frames else None

    def clear(self) -> None:
        self._frames().clear()

    def get_all(self) -> Tuple[str, ...]:
        return tuple(reversed(self._frames()))

    def __len__(self) -> int:
        return len(self._frames())


class LogicalNestedContext(_MarkerStack):
    """Marker stack that flows with the contextvars context."""

    def __init__(self, name: str = "logscope_markers") -> None:
        self._head: ContextVar[Optional[_Frame]] = ContextVar(name, default=None)

    def _push(self, marker: str) -> None:
        parent = self._head.get()
        depth = parent.depth + 1 if parent is not None else 1
        self._head.set(_Frame(marker, parent, depth))

    def pop(self) -> str:
        head = self._head.get()
        if head is None:
            raise EmptyStackError("Nested context is empty, nothing to pop")
        self._head.set(head.parent)
        return head.value

    def peek(self) -> Optional[str]:
        head = self._head.get()
        return head.value if head is not None else None

    def clear(self) -> None:
        self._head.set(None)

    def get_all(self) -> Tuple[str, ...]:
        markers = []
        frame = self._head.get()
        while frame is not None:
            markers.append(frame.value)
            frame = frame.parent
        return tuple(markers)

    def __len__(self) -> int:
        head = self._head.get()
        return head.depth if head is not None else 0
