"""Immutable per-branch stack of open scopes.

The stack is stored inside the ambient variables context under a reserved
key, so it propagates exactly like the variables do. Every push or pop
returns a new ScopeStack which the manager installs in place of the old
one; a branch forked from another keeps the stack it inherited even if the
parent opens or closes scopes afterwards.
"""

from typing import Optional, Tuple

from logscope.exceptions import EmptyStackError, UnbalancedStackError
from logscope.utils.threads import current_branch_id

from .guard import ScopeGuard


class ScopeStack:
    """LIFO of ScopeGuard instances for one execution branch.

    Attributes:
        frames: Open guards, outermost first
        owner_branch_id: Branch that created the stack (diagnostics only)
    """

    __slots__ = ("frames", "owner_branch_id")

    def __init__(self, owner_branch_id: str, frames: Tuple[ScopeGuard, ...] = ()) -> None:
        self.owner_branch_id = owner_branch_id
        self.frames = frames

    @classmethod
    def create(cls) -> "ScopeStack":
        """Create an empty stack owned by the current branch."""
        return cls(current_branch_id())

    @property
    def depth(self) -> int:
        return len(self.frames)

    @property
    def is_empty(self) -> bool:
        return not self.frames

    def peek(self) -> Optional[ScopeGuard]:
        """Return the current (innermost) scope, or None if empty."""
        return self.frames[-1] if self.frames else None

    def innermost_open(self) -> Optional[ScopeGuard]:
        """Return the innermost scope not yet disposed, or None.

        A forked branch keeps the guards it inherited even after the branch
        that opened them closes them; those frames are skipped here.
        """
        for guard in reversed(self.frames):
            if not guard.disposed:
                return guard
        return None

    def push(self, guard: ScopeGuard) -> "ScopeStack":
        return ScopeStack(self.owner_branch_id, self.frames + (guard,))

    def pop(self) -> Tuple[ScopeGuard, "ScopeStack"]:
        """Pop the innermost scope.

        Returns:
            Tuple of (popped guard, remaining stack)

        Raises:
            EmptyStackError: If no scope is open
        """
        if not self.frames:
            raise EmptyStackError("No logging scope open on this branch")
        return self.frames[-1], ScopeStack(self.owner_branch_id, self.frames[:-1])

    def pop_expected(self, guard: ScopeGuard) -> "ScopeStack":
        """Pop the innermost scope, checking it is the one being closed.

        The top is popped either way. On a mismatch the remaining stack is
        carried on the raised error so the caller can still install it.

        Args:
            guard: Guard the caller is disposing

        Returns:
            Remaining stack

        Raises:
            UnbalancedStackError: If the stack is empty or its top is not guard
        """
        if not self.frames:
            raise UnbalancedStackError(
                f"Closing scope '{guard.description}' but no scope is open on this branch",
                expected=guard,
                actual=None,
            )

        top, remaining = self.pop()
        if top is not guard:
            raise UnbalancedStackError(
                f"Closing scope '{guard.description}' but the innermost open scope "
                f"is '{top.description}'",
                expected=guard,
                actual=top,
                remaining=remaining,
            )
        return remaining

    def __repr__(self) -> str:
        # Kept short: this object lives among the ambient variables
        return f"ScopeStack(depth={self.depth}, owner={self.owner_branch_id})"
