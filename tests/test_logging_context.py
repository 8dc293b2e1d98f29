"""Tests for reading ambient scope state into log records."""

import pytest

from logscope.logging.context import get_log_context, get_scope_markers, log_context
from logscope.scopes import api


@pytest.fixture(autouse=True)
def clean_default(reset_default_manager):
    """Use a fresh default manager for each test."""
    yield


def test_empty_context(manager):
    """Test that context starts empty."""
    assert get_log_context(manager) == {}
    assert get_scope_markers(manager) == ()


def test_log_context_single_field(manager):
    """Test opening a scope with a single field."""
    with log_context("run", manager=manager, run_id="abc123"):
        assert get_log_context(manager) == {"run_id": "abc123"}
        assert get_scope_markers(manager) == ("run",)

    assert get_log_context(manager) == {}
    assert get_scope_markers(manager) == ()


def test_nested_context(manager):
    """Test nested scopes add and remove their fields in order."""
    with log_context("run", manager=manager, run_id="abc123"):
        with log_context("source", manager=manager, source_id="acme-corp"):
            with log_context("job", manager=manager, job_key="job-1"):
                assert get_log_context(manager) == {
                    "run_id": "abc123",
                    "source_id": "acme-corp",
                    "job_key": "job-1",
                }
                assert get_scope_markers(manager) == ("run", "source", "job")

            assert get_log_context(manager) == {"run_id": "abc123", "source_id": "acme-corp"}

        assert get_log_context(manager) == {"run_id": "abc123"}

    assert get_log_context(manager) == {}


def test_context_override(manager):
    """Test that an inner scope shadows a field and restores it on exit."""
    with log_context(manager=manager, run_id="abc123"):
        with log_context(manager=manager, run_id="xyz789"):
            assert get_log_context(manager) == {"run_id": "xyz789"}
        assert get_log_context(manager) == {"run_id": "abc123"}


def test_context_manager_with_exception(manager):
    """Test that fields are restored even when an exception occurs."""
    with pytest.raises(ValueError):
        with log_context(manager=manager, run_id="abc123"):
            raise ValueError("Test error")

    assert get_log_context(manager) == {}


def test_log_context_returns_itself(manager):
    with log_context("scope", manager=manager, a=1) as ctx:
        assert ctx.handle.instance.description == "scope"
        assert dict(ctx.handle.instance.get_variables()) == {"a": 1}


def test_get_log_context_returns_copy(manager):
    with log_context(manager=manager, run_id="abc123"):
        context = get_log_context(manager)
        context["run_id"] = "mutated"

        assert get_log_context(manager) == {"run_id": "abc123"}


def test_reserved_key_not_exposed(manager):
    with log_context(manager=manager, run_id="abc123"):
        assert manager.stack_key not in get_log_context(manager)


def test_default_manager_used_when_omitted():
    """Without an explicit manager the process default is used."""
    with log_context("request", request_id="r1"):
        assert get_log_context() == {"request_id": "r1"}
        assert get_scope_markers() == ("request",)
        assert api.get_scope_variables() == {"request_id": "r1"}

    assert get_log_context() == {}
