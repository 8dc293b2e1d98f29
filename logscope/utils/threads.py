"""Thread helpers for flowing (or deliberately not flowing) ambient context.

asyncio tasks copy the current contextvars context when they are created,
so logical scopes follow them automatically. Plain threads do not, so work
handed to another thread has to be wrapped explicitly:

    >>> spawn(worker, job)                        # child sees parent's scopes
    >>> executor.submit(flowing(worker), job)     # same, for thread pools
    >>> spawn_unflowed(worker, job)               # child starts empty

The context is captured when spawn()/flowing() is called, not when the
callable eventually runs.
"""

import asyncio
import contextvars
import functools
import threading
from typing import Any, Callable, Optional


def current_branch_id() -> str:
    """Describe the current execution branch for diagnostics.

    Returns:
        Thread identifier, suffixed with the asyncio task name when called
        from inside a running task (e.g. ``"140245:Task-3"``)
    """
    branch_id = str(threading.get_ident())
    try:
        task = asyncio.current_task()
    except RuntimeError:
        # No running event loop on this thread
        task = None
    if task is not None:
        branch_id = f"{branch_id}:{task.get_name()}"
    return branch_id


def flowing(fn: Callable[..., Any]) -> Callable[..., Any]:
    """Bind ``fn`` to a snapshot of the caller's current context.

    Each invocation runs in its own copy of that snapshot, so the wrapper
    may be called several times, even concurrently, and writes made by one
    run are invisible to the others and to the caller.

    Args:
        fn: Callable to bind

    Returns:
        Wrapped callable suitable for Thread(target=...) or executor.submit()
    """
    captured = contextvars.copy_context()

    @functools.wraps(fn)
    def run_in_captured_context(*args, **kwargs):
        return captured.copy().run(fn, *args, **kwargs)

    return run_in_captured_context


def spawn(
    target: Callable[..., Any],
    *args: Any,
    name: Optional[str] = None,
    daemon: Optional[bool] = None,
    **kwargs: Any,
) -> threading.Thread:
    """Start a thread that inherits the caller's logical context.

    Args:
        target: Callable run by the thread
        *args: Positional arguments for target
        name: Optional thread name
        daemon: Optional daemon flag
        **kwargs: Keyword arguments for target

    Returns:
        The started thread
    """
    thread = threading.Thread(
        target=flowing(target), args=args, kwargs=kwargs, name=name, daemon=daemon
    )
    thread.start()
    return thread


def spawn_unflowed(
    target: Callable[..., Any],
    *args: Any,
    name: Optional[str] = None,
    daemon: Optional[bool] = None,
    **kwargs: Any,
) -> threading.Thread:
    """Start a thread that runs in a fresh, empty context.

    Nothing the caller holds in its logical context is visible to the
    thread, whatever the interpreter's default for thread context
    inheritance is.

    Args:
        target: Callable run by the thread
        *args: Positional arguments for target
        name: Optional thread name
        daemon: Optional daemon flag
        **kwargs: Keyword arguments for target

    Returns:
        The started thread
    """

    def run_in_empty_context():
        return contextvars.Context().run(target, *args, **kwargs)

    thread = threading.Thread(target=run_in_empty_context, name=name, daemon=daemon)
    thread.start()
    return thread
