"""Scope manager: opens, tracks and closes logging scopes.

A scope is opened with begin_scope() and closed by disposing the handle it
returns (normally via ``with``). While open, the scope's description sits
on the nested context and every variable written through it is recorded
so the previous values can be put back when it closes:

    >>> manager = ScopeManager(propagation="logical")
    >>> with manager.begin_scope("import batch", {"batch_id": 42}):
    ...     manager.push_variable("row", 7)
    ...     logger.info("Row imported")  # carries batch_id=42 row=7
    ... # batch_id and row are gone again

Scopes that are never disposed are never restored: their variables stay
visible until the branch itself ends. Always close scopes with ``with`` or
try/finally.
"""

from typing import Any, Iterable, Mapping, Optional, Tuple, Union

from logscope.config.models import (
    DEFAULT_STACK_KEY,
    PropagationMode,
    ScopeSettings,
    check_stack_key,
)
from logscope.context.base import NestedVariablesContext, VariablesContext
from logscope.context.factory import create_contexts
from logscope.exceptions import (
    InvalidArgumentError,
    InvalidOperationError,
    NoActiveScopeError,
    ScopeError,
    UnbalancedStackError,
)
from logscope.logging import get_logger
from logscope.utils.disposable import Disposable
from logscope.utils.threads import current_branch_id

from .guard import ScopeGuard
from .stack import ScopeStack

logger = get_logger(__name__, component="scopes")

Variables = Union[Mapping[str, Any], Iterable[Tuple[str, Any]]]


class ScopeManager:
    """Facade over a variables context and a nested context.

    Attributes:
        variables: Ambient key/value context
        nested: Ambient marker stack
        stack_key: Reserved variable key holding each branch's ScopeStack
        swallow_internal_errors: Log and ignore unexpected context failures
            instead of raising InvalidOperationError
    """

    def __init__(
        self,
        variables: Optional[VariablesContext] = None,
        nested: Optional[NestedVariablesContext] = None,
        *,
        propagation: Union[PropagationMode, str] = PropagationMode.THREAD,
        swallow_internal_errors: bool = False,
        stack_key: str = DEFAULT_STACK_KEY,
    ) -> None:
        """Initialize scope manager.

        Contexts that are not supplied are created for ``propagation``.

        Args:
            variables: Optional variables context
            nested: Optional nested context
            propagation: Propagation mode for contexts created here
            swallow_internal_errors: Error policy for unexpected failures
            stack_key: Reserved key for the scope stack

        Raises:
            InvalidArgumentError: If stack_key is empty, contains whitespace
                or is not namespaced with a dot
        """
        if not isinstance(stack_key, str):
            raise InvalidArgumentError(f"stack_key must be a string, got {type(stack_key).__name__}")
        try:
            check_stack_key(stack_key)
        except ValueError as e:
            raise InvalidArgumentError(str(e)) from e

        if variables is None or nested is None:
            default_variables, default_nested = create_contexts(propagation)
            if variables is None:
                variables = default_variables
            if nested is None:
                nested = default_nested

        self.variables = variables
        self.nested = nested
        self.stack_key = stack_key
        self.swallow_internal_errors = swallow_internal_errors

    @classmethod
    def from_settings(cls, settings: ScopeSettings) -> "ScopeManager":
        """Create a manager with fresh contexts configured by settings."""
        return cls(
            propagation=settings.propagation,
            swallow_internal_errors=settings.swallow_internal_errors,
            stack_key=settings.stack_key,
        )

    @property
    def is_supported(self) -> bool:
        return self.variables.is_supported and self.nested.is_supported

    def begin_scope(
        self,
        description: str,
        variables: Optional[Variables] = None,
        prefix: Optional[str] = None,
    ) -> Disposable[ScopeGuard]:
        """Open a logging scope on the current branch.

        Args:
            description: Marker pushed onto the nested context
            variables: Optional variables to set in the new scope
            prefix: Optional prefix prepended to every variable name

        Returns:
            Disposable handle closing the scope (``handle.instance`` is the
            scope's guard). A no-op handle if the contexts are unsupported.

        Raises:
            InvalidArgumentError: If description is None or a variable name
                is empty or reserved
        """
        if description is None:
            raise InvalidArgumentError("Scope description cannot be None")

        if not self.is_supported:
            logger.warning(
                "Ambient context not supported, logging scope ignored",
                extra={"event": "scope.unsupported_context", "scope": description},
            )
            return Disposable.noop()

        stack = self._get_stack()
        if stack is None:
            stack = ScopeStack.create()

        self.nested.push(description)

        guard = ScopeGuard(self.variables, disposer=self._on_disposing, description=description)

        if variables:
            try:
                self._set_variables(guard, variables, prefix)
            except Exception:
                # Unwind marker and partial writes through the normal close path
                self._install_stack(stack.push(guard))
                guard.dispose()
                raise

        self._install_stack(stack.push(guard))

        logger.debug(
            "Logging scope opened",
            extra={"event": "scope.opened", "scope": description, "depth": stack.depth + 1},
        )

        return Disposable.using(guard, ScopeGuard.dispose)

    def push_variable(self, name: str, value: Any) -> None:
        """Set a variable in the current scope.

        Raises:
            NoActiveScopeError: If no scope is open on this branch
            InvalidArgumentError: If name is empty or reserved
            InvalidOperationError: If the context fails unexpectedly and
                errors are not swallowed
        """
        if not self.is_supported:
            self._warn_unsupported("push_variable")
            return

        self._set_variables(self._current_guard(), ((name, value),), None)

    def push_variables_for(self, variables: Variables, prefix: Optional[str] = None) -> None:
        """Set several variables in the current scope.

        Args:
            variables: Mapping or iterable of (name, value) pairs
            prefix: Optional prefix prepended to every name

        Raises:
            InvalidArgumentError: If variables is None, or a name is empty or reserved
            NoActiveScopeError: If no scope is open on this branch
            InvalidOperationError: If the context fails unexpectedly and
                errors are not swallowed
        """
        if variables is None:
            raise InvalidArgumentError("variables cannot be None")

        if not self.is_supported:
            self._warn_unsupported("push_variables_for")
            return

        self._set_variables(self._current_guard(), variables, prefix)

    def get_scope_variables(self) -> Optional[Mapping[str, Any]]:
        """Return the current scope's tracked variables, or None if no scope is open.

        Scopes inherited from a parent branch count as closed once the parent
        disposes them.
        """
        stack = self._get_stack()
        guard = stack.innermost_open() if stack is not None else None
        if guard is None:
            return None
        return guard.get_variables()

    def get_scope_depth(self) -> int:
        """Return the number of scopes open on this branch."""
        stack = self._get_stack()
        return stack.depth if stack is not None else 0

    def get_markers(self) -> Tuple[str, ...]:
        """Return the nested context markers, most recent first."""
        return self.nested.get_all()

    def get_ambient_variables(self) -> Mapping[str, Any]:
        """Return every ambient variable on this branch except the reserved key."""
        snapshot = self.variables.snapshot()
        if self.stack_key not in snapshot:
            return snapshot
        return {key: value for key, value in snapshot.items() if key != self.stack_key}

    def _get_stack(self) -> Optional[ScopeStack]:
        stack = self.variables.get(self.stack_key)
        return stack if isinstance(stack, ScopeStack) else None

    def _install_stack(self, stack: ScopeStack) -> None:
        # An unwound branch keeps no trace of the reserved key
        if stack.is_empty:
            self.variables.remove(self.stack_key)
        else:
            self.variables.set(self.stack_key, stack)

    def _current_guard(self) -> ScopeGuard:
        stack = self._get_stack()
        guard = stack.innermost_open() if stack is not None else None
        if guard is None:
            raise NoActiveScopeError(
                "No logging scope open on the current branch; call begin_scope() first"
            )
        return guard

    def _set_variables(self, guard: ScopeGuard, variables: Variables, prefix: Optional[str]) -> None:
        for key, value in _as_pairs(variables):
            full_key = prefix + key if prefix and isinstance(key, str) else key

            if full_key == self.stack_key:
                raise InvalidArgumentError(
                    f"Variable name '{full_key}' is reserved for the scope stack"
                )

            try:
                guard.set(full_key, value)
            except ScopeError:
                raise
            except Exception as e:
                if not self.swallow_internal_errors:
                    raise InvalidOperationError(
                        f"Failed to push logging scope variable '{full_key}': {e}"
                    ) from e
                logger.warning(
                    "Failed to push logging scope variable, ignoring",
                    exc_info=True,
                    extra={
                        "event": "scope.variable_push_failed",
                        "scope": guard.description,
                        "variable": full_key,
                    },
                )

    def _on_disposing(self, guard: ScopeGuard) -> bool:
        """Pop guard off the branch's stack; False aborts its restoration."""
        stack = self._get_stack()
        if stack is None:
            stack = ScopeStack.create()

        try:
            remaining = stack.pop_expected(guard)
        except UnbalancedStackError as e:
            if e.remaining is not None:
                self._install_stack(e.remaining)
            logger.warning(
                "Unbalanced logging scope stack, skipping restoration",
                extra={
                    "event": "scope.unbalanced",
                    "scope": guard.description,
                    "innermost_scope": e.actual.description if e.actual is not None else None,
                    "owner_branch_id": stack.owner_branch_id,
                    "branch_id": current_branch_id(),
                },
            )
            return False

        self._install_stack(remaining)

        if self.nested.has_items:
            self.nested.pop()
        else:
            logger.warning(
                "Nested context already empty while closing logging scope",
                extra={"event": "scope.nested_empty", "scope": guard.description},
            )

        logger.debug(
            "Logging scope closed",
            extra={"event": "scope.closed", "scope": guard.description, "depth": remaining.depth},
        )
        return True

    def _warn_unsupported(self, operation: str) -> None:
        logger.warning(
            "Ambient context not supported, scope variable ignored",
            extra={"event": "scope.unsupported_context", "operation": operation},
        )


def _as_pairs(variables: Variables) -> Tuple[Tuple[Any, Any], ...]:
    """Normalise a mapping or iterable of pairs, rejecting anything else before any write."""
    if isinstance(variables, Mapping):
        return tuple(variables.items())

    kind = type(variables).__name__
    if isinstance(variables, (str, bytes)) or not isinstance(variables, Iterable):
        raise InvalidArgumentError(f"Scope variables must be a mapping or (name, value) pairs, got {kind}")

    pairs = []
    for item in variables:
        if isinstance(item, (str, bytes)) or not isinstance(item, Iterable):
            raise InvalidArgumentError(f"Scope variable must be a (name, value) pair, got {item!r}")
        pair = tuple(item)
        if len(pair) != 2:
            raise InvalidArgumentError(f"Scope variable must be a (name, value) pair, got {item!r}")
        pairs.append(pair)
    return tuple(pairs)
