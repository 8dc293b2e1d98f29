"""Tests for the module-level facade and the default scope manager."""

import threading

import pytest

import logscope
from logscope.config import ConfigurationError, PropagationMode, ScopeSettings
from logscope.context import LogicalVariablesContext, ThreadVariablesContext
from logscope.scopes import api


@pytest.fixture(autouse=True)
def clean_default(reset_default_manager, monkeypatch, tmp_path):
    """Fresh default manager, built from an empty working directory."""
    monkeypatch.chdir(tmp_path)
    yield


def test_default_manager_created_lazily():
    assert api._default_manager is None

    manager = logscope.get_scope_manager()

    assert manager is logscope.get_scope_manager()
    assert isinstance(manager.variables, ThreadVariablesContext)


def test_default_manager_follows_environment(monkeypatch):
    monkeypatch.setenv("LOGSCOPE_PROPAGATION", "logical")

    assert isinstance(logscope.get_scope_manager().variables, LogicalVariablesContext)


def test_default_manager_follows_settings_file(tmp_path):
    (tmp_path / "logscope.yaml").write_text("stack_key: app.Scopes\n")

    assert logscope.get_scope_manager().stack_key == "app.Scopes"


def test_invalid_settings_surface_on_first_use(monkeypatch):
    monkeypatch.setenv("LOGSCOPE_PROPAGATION", "global")

    with pytest.raises(ConfigurationError):
        logscope.get_scope_manager()

    assert api._default_manager is None


def test_concurrent_first_use_creates_one_manager():
    barrier = threading.Barrier(4)
    managers = []

    def worker():
        barrier.wait(timeout=5)
        managers.append(logscope.get_scope_manager())

    threads = [threading.Thread(target=worker) for _ in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=5)

    assert len(managers) == 4
    assert all(manager is managers[0] for manager in managers)


def test_configure_scopes_replaces_default():
    before = logscope.get_scope_manager()

    after = logscope.configure_scopes(ScopeSettings(propagation=PropagationMode.LOGICAL))

    assert after is not before
    assert logscope.get_scope_manager() is after
    assert isinstance(after.variables, LogicalVariablesContext)


def test_configure_scopes_without_settings_loads_them(monkeypatch):
    monkeypatch.setenv("LOGSCOPE_SWALLOW_ERRORS", "false")

    manager = logscope.configure_scopes()

    assert manager.swallow_internal_errors is False
    assert logscope.get_scope_manager() is manager


def test_facade_round_trip():
    """begin_scope / push_variable / push_variables_for via the default manager."""
    with logscope.begin_scope("request", {"request_id": "r1"}):
        logscope.push_variable("user_id", 42)
        logscope.push_variables_for({"method": "GET"}, prefix="http.")

        assert dict(logscope.get_scope_variables()) == {
            "request_id": "r1",
            "user_id": 42,
            "http.method": "GET",
        }

    assert logscope.get_scope_variables() is None


def test_facade_preconditions():
    with pytest.raises(logscope.NoActiveScopeError):
        logscope.push_variable("user_id", 42)

    with pytest.raises(logscope.InvalidArgumentError):
        logscope.begin_scope(None)


def test_exception_hierarchy():
    """Scope errors share a base and keep the matching builtin semantics."""
    assert issubclass(logscope.InvalidArgumentError, ValueError)
    assert issubclass(logscope.InvalidStateError, RuntimeError)
    assert issubclass(logscope.EmptyStackError, IndexError)
    for error in (
        logscope.InvalidArgumentError,
        logscope.InvalidStateError,
        logscope.NoActiveScopeError,
        logscope.EmptyStackError,
        logscope.UnbalancedStackError,
        logscope.InvalidOperationError,
    ):
        assert issubclass(error, logscope.ScopeError)
