"""Tests for Disposable and the thread helpers."""

import asyncio
import contextvars
import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from logscope.utils import Disposable, current_branch_id, flowing, spawn, spawn_unflowed

request_id = contextvars.ContextVar("request_id", default=None)


class TestDisposable:
    """Single-fire disposal."""

    def test_action_runs_once(self):
        calls = []
        disposable = Disposable(lambda: calls.append("disposed"))

        assert disposable.dispose() is True
        assert disposable.dispose() is False
        assert calls == ["disposed"]
        assert disposable.disposed

    def test_using_passes_instance(self):
        received = []
        resource = object()

        disposable = Disposable.using(resource, received.append)
        disposable.dispose()

        assert received == [resource]
        assert disposable.instance is resource

    def test_noop(self):
        disposable = Disposable.noop()

        assert disposable.instance is None
        assert disposable.dispose() is True
        assert disposable.dispose() is False

    def test_context_manager_disposes_on_error(self):
        calls = []

        with pytest.raises(KeyError):
            with Disposable(lambda: calls.append(1)):
                raise KeyError("boom")

        assert calls == [1]

    def test_reentrant_dispose(self):
        results = []
        disposable = None

        def action():
            results.append(disposable.dispose())

        disposable = Disposable(action)
        assert disposable.dispose() is True
        assert results == [False]

    def test_concurrent_dispose_fires_once(self):
        calls = []
        disposable = Disposable(lambda: calls.append(1))
        barrier = threading.Barrier(8)

        def dispose():
            barrier.wait(timeout=5)
            disposable.dispose()

        threads = [threading.Thread(target=dispose) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=5)

        assert calls == [1]


class TestThreadHelpers:
    """spawn(), spawn_unflowed() and flowing()."""

    def test_spawn_flows_context(self):
        request_id.set("req-1")
        seen = []

        spawn(lambda: seen.append(request_id.get())).join(timeout=5)

        assert seen == ["req-1"]

    def test_spawn_passes_arguments(self):
        seen = []

        def target(a, b=None):
            seen.append((a, b))

        spawn(target, 1, b=2, name="worker").join(timeout=5)

        assert seen == [(1, 2)]

    def test_spawn_writes_stay_in_child(self):
        request_id.set("parent")
        spawn(request_id.set, "child").join(timeout=5)

        assert request_id.get() == "parent"

    def test_spawn_unflowed_starts_empty(self):
        request_id.set("req-1")
        seen = []

        spawn_unflowed(lambda: seen.append(request_id.get())).join(timeout=5)

        assert seen == [None]

    def test_spawn_returns_started_thread(self):
        event = threading.Event()
        thread = spawn(event.wait, 5, name="named", daemon=True)

        assert thread.name == "named"
        assert thread.daemon
        assert thread.is_alive()
        event.set()
        thread.join(timeout=5)

    def test_flowing_captures_at_wrap_time(self):
        request_id.set("at-wrap")
        wrapped = flowing(request_id.get)
        request_id.set("later")

        with ThreadPoolExecutor(max_workers=1) as executor:
            assert executor.submit(wrapped).result(timeout=5) == "at-wrap"

    def test_flowing_runs_are_isolated(self):
        request_id.set("base")

        def bump(value):
            before = request_id.get()
            request_id.set(value)
            return before

        wrapped = flowing(bump)

        assert wrapped("first") == "base"
        assert wrapped("second") == "base"
        assert request_id.get() == "base"

    def test_flowing_preserves_metadata(self):
        def worker():
            """Worker docstring."""

        wrapped = flowing(worker)

        assert wrapped.__name__ == "worker"
        assert wrapped.__doc__ == "Worker docstring."


class TestCurrentBranchId:
    """current_branch_id()."""

    def test_plain_thread(self):
        assert current_branch_id() == str(threading.get_ident())

    def test_differs_between_threads(self):
        seen = []
        spawn(lambda: seen.append(current_branch_id())).join(timeout=5)

        assert seen[0] != current_branch_id()

    def test_includes_task_name(self):
        async def named():
            return current_branch_id()

        async def main():
            return await asyncio.create_task(named(), name="fetch")

        branch_id = asyncio.run(main())

        assert branch_id == f"{threading.get_ident()}:fetch"
