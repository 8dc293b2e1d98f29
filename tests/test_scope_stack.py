"""Tests for the immutable per-branch ScopeStack."""

import pytest

from logscope.context import ThreadVariablesContext
from logscope.exceptions import EmptyStackError, UnbalancedStackError
from logscope.scopes.guard import ScopeGuard
from logscope.scopes.stack import ScopeStack
from logscope.utils.threads import current_branch_id


@pytest.fixture
def guards():
    context = ThreadVariablesContext()
    return [ScopeGuard(context, description=name) for name in ("outer", "middle", "inner")]


def test_create_is_empty_and_owned_by_caller():
    stack = ScopeStack.create()

    assert stack.is_empty
    assert stack.depth == 0
    assert stack.peek() is None
    assert stack.owner_branch_id == current_branch_id()


def test_push_returns_new_stack(guards):
    empty = ScopeStack.create()
    one = empty.push(guards[0])

    assert empty.is_empty
    assert one.depth == 1
    assert one.peek() is guards[0]
    assert one.owner_branch_id == empty.owner_branch_id


def test_pop_returns_top_and_remaining(guards):
    stack = ScopeStack.create().push(guards[0]).push(guards[1])

    top, remaining = stack.pop()

    assert top is guards[1]
    assert remaining.peek() is guards[0]
    assert stack.depth == 2


def test_pop_empty_raises():
    with pytest.raises(EmptyStackError):
        ScopeStack.create().pop()


def test_innermost_open_skips_disposed_guards(guards):
    stack = ScopeStack.create()
    for guard in guards:
        stack = stack.push(guard)

    assert stack.innermost_open() is guards[2]

    guards[2].dispose()
    guards[1].dispose()

    assert stack.peek() is guards[2]
    assert stack.innermost_open() is guards[0]

    guards[0].dispose()

    assert stack.innermost_open() is None
    assert ScopeStack.create().innermost_open() is None


def test_pop_expected_matching_guard(guards):
    stack = ScopeStack.create().push(guards[0]).push(guards[1])

    remaining = stack.pop_expected(guards[1])

    assert remaining.frames == (guards[0],)


def test_pop_expected_mismatch_still_pops_top(guards):
    stack = ScopeStack.create()
    for guard in guards:
        stack = stack.push(guard)

    with pytest.raises(UnbalancedStackError) as exc_info:
        stack.pop_expected(guards[1])

    error = exc_info.value
    assert error.expected is guards[1]
    assert error.actual is guards[2]
    assert error.remaining.frames == (guards[0], guards[1])
    assert "middle" in str(error)
    assert "inner" in str(error)


def test_pop_expected_on_empty_stack(guards):
    with pytest.raises(UnbalancedStackError) as exc_info:
        ScopeStack.create().pop_expected(guards[0])

    assert exc_info.value.actual is None
    assert exc_info.value.remaining is None


def test_repr_is_short(guards):
    stack = ScopeStack.create().push(guards[0])
    assert repr(stack) == f"ScopeStack(depth=1, owner={stack.owner_branch_id})"
