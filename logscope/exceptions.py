"""Logging scope exceptions.

All scope-related exceptions inherit from ScopeError so callers can catch
every failure raised by this package with a single except clause. Each one
also inherits from the closest built-in exception so code that only knows
about ValueError or RuntimeError still behaves sensibly.
"""


class ScopeError(Exception):
    """Base exception for all logging scope errors."""

    pass


class InvalidArgumentError(ScopeError, ValueError):
    """Raised when a required key is empty or a required reference is None."""

    pass


class InvalidStateError(ScopeError, RuntimeError):
    """Raised when an operation is attempted on an already disposed scope."""

    pass


class NoActiveScopeError(ScopeError, RuntimeError):
    """Raised when a variable is pushed with no open scope on the current branch.

    Variables can only be attached to an open scope, because the scope is
    what restores them. Open one with begin_scope() first.
    """

    pass


class EmptyStackError(ScopeError, IndexError):
    """Raised when popping a marker from an empty nested context."""

    pass


class UnbalancedStackError(ScopeError):
    """Raised when scopes are disposed out of order.

    The scope manager never lets this escape to callers: it is caught at
    disposal time and reported as a warning.
    """

    def __init__(self, message: str, expected=None, actual=None, remaining=None) -> None:
        """Initialize unbalanced stack error.

        Args:
            message: Human-readable error message
            expected: Guard that was being disposed
            actual: Guard found at the top of the stack (None if empty)
            remaining: Stack left after popping actual (None if empty)
        """
        super().__init__(message)
        self.expected = expected
        self.actual = actual
        self.remaining = remaining


class InvalidOperationError(ScopeError, RuntimeError):
    """Wraps an unexpected failure raised while mutating the ambient context."""

    pass
