"""Tests for the clear() fast path used when a scope restores its variables."""

import pytest

from logscope.context import ThreadVariablesContext
from logscope.scopes.guard import ScopeGuard
from logscope.scopes.optimizer import ABSENT, can_clear_context


class SpyContext(ThreadVariablesContext):
    """Thread context that counts clear() and remove() calls."""

    def __init__(self):
        super().__init__()
        self.clear_calls = 0
        self.remove_calls = 0

    def clear(self):
        self.clear_calls += 1
        super().clear()

    def remove(self, key):
        self.remove_calls += 1
        super().remove(key)


def make_context(**values):
    context = ThreadVariablesContext()
    for key, value in values.items():
        context.set(key, value)
    return context


def test_absent_is_singleton():
    assert type(ABSENT)() is ABSENT
    assert repr(ABSENT) == "ABSENT"


def test_empty_saved_entries_never_clear():
    assert can_clear_context({}, make_context()) is False


@pytest.mark.parametrize("count", [1, 2, 3])
def test_scope_owning_every_key_can_clear(count):
    keys = [f"k{i}" for i in range(count)]
    context = make_context(**{key: i for i, key in enumerate(keys)})
    saved = {key: ABSENT for key in keys}

    assert can_clear_context(saved, context) is True


@pytest.mark.parametrize("count", [1, 2, 3])
def test_extra_ambient_key_blocks_clear(count):
    keys = [f"k{i}" for i in range(count)]
    context = make_context(other="x", **{key: i for i, key in enumerate(keys)})
    saved = {key: ABSENT for key in keys}

    assert can_clear_context(saved, context) is False


def test_pre_existing_key_blocks_clear():
    """An overwritten key must be restored, not cleared."""
    context = make_context(A=2, B=1)
    saved = {"A": 1, "B": ABSENT}

    assert can_clear_context(saved, context) is False


def test_only_pre_existing_keys_block_clear():
    context = make_context(A=2)
    assert can_clear_context({"A": 1}, context) is False


def test_saved_key_missing_from_context_blocks_clear():
    """Counts match but one saved key was removed elsewhere."""
    context = make_context(A=1, stranger=2)
    saved = {"A": ABSENT, "B": ABSENT}

    assert can_clear_context(saved, context) is False


@pytest.mark.parametrize(
    "before, writes",
    [
        ({}, {"A": 1}),
        ({}, {"A": 1, "B": 2, "C": 3}),
        ({"A": 0}, {"A": 1}),
        ({"A": 0}, {"B": 1}),
        ({"A": 0, "B": 0}, {"A": 1, "C": 2}),
        ({"A": None}, {"A": 1}),
    ],
)
def test_fast_path_matches_per_key_restoration(before, writes):
    """Whichever path the guard takes, the result is the pre-scope state."""
    context = make_context(**before)
    guard = ScopeGuard(context)
    for key, value in writes.items():
        guard.set(key, value)

    guard.dispose()

    assert dict(context.snapshot()) == before


def test_guard_uses_clear_when_it_owns_everything():
    context = SpyContext()
    guard = ScopeGuard(context)
    guard.set("A", 1)
    guard.set("B", 2)

    guard.dispose()

    assert context.clear_calls == 1
    assert context.remove_calls == 0
    assert len(context) == 0


def test_guard_restores_per_key_otherwise():
    context = SpyContext()
    context.set("ambient", "x")
    guard = ScopeGuard(context)
    guard.set("A", 1)
    guard.set("B", 2)

    guard.dispose()

    assert context.clear_calls == 0
    assert context.remove_calls == 2
    assert dict(context.snapshot()) == {"ambient": "x"}
