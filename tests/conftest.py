"""Shared fixtures for logscope tests."""

import pytest

from logscope.scopes import api
from logscope.scopes.manager import ScopeManager

PROPAGATION_MODES = ["thread", "logical"]


@pytest.fixture(params=PROPAGATION_MODES)
def propagation(request):
    """Run the test once per propagation mode."""
    return request.param


@pytest.fixture
def manager(propagation):
    """Scope manager with fresh contexts for the current propagation mode."""
    return ScopeManager(propagation=propagation)


@pytest.fixture
def thread_manager():
    """Scope manager with thread-confined contexts."""
    return ScopeManager(propagation="thread")


@pytest.fixture
def logical_manager():
    """Scope manager with logical (flowing) contexts."""
    return ScopeManager(propagation="logical")


@pytest.fixture
def reset_default_manager(monkeypatch):
    """Start and finish the test without a process default manager."""
    for name in ("LOGSCOPE_PROPAGATION", "LOGSCOPE_SWALLOW_ERRORS", "LOGSCOPE_STACK_KEY"):
        monkeypatch.delenv(name, raising=False)
    api._default_manager = None
    yield
    api._default_manager = None
