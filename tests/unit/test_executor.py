"""
Unit tests for the per-connection executor.
"""

import threading

from minihttp.core.executor import DetachedExecutor


class TestDetachedExecutor:

    def test_runs_on_a_daemon_thread(self):
        executor = DetachedExecutor()
        seen = {}
        done = threading.Event()

        def task(value):
            seen["value"] = value
            seen["thread"] = threading.current_thread()
            done.set()

        thread = executor.submit(task, 42)

        assert done.wait(5.0)
        assert seen["value"] == 42
        assert seen["thread"] is thread
        assert thread.daemon
        assert thread.name.startswith("conn-")

    def test_submit_does_not_wait(self):
        executor = DetachedExecutor()
        release = threading.Event()

        thread = executor.submit(release.wait, 5.0)

        assert thread.is_alive()
        release.set()
        thread.join(5.0)

    def test_exception_is_isolated(self, caplog):
        executor = DetachedExecutor()

        def boom():
            raise ValueError("broken handler")

        executor.submit(boom).join(5.0)
        executor.submit(lambda: None).join(5.0)

        assert executor.stats["failed"] == 1
        assert executor.stats["completed"] == 1
        assert "broken handler" in caplog.text

    def test_active_count(self):
        executor = DetachedExecutor()
        started = threading.Barrier(3)
        release = threading.Event()

        def task():
            started.wait(5.0)
            release.wait(5.0)

        threads = [executor.submit(task) for _ in range(2)]
        started.wait(5.0)

        assert executor.active_count == 2

        release.set()
        for thread in threads:
            thread.join(5.0)
        assert executor.active_count == 0

    def test_max_connections_bounds_concurrency(self):
        executor = DetachedExecutor(max_connections=2)
        lock = threading.Lock()
        running = 0
        peak = 0
        release = threading.Event()

        def task():
            nonlocal running, peak
            with lock:
                running += 1
                peak = max(peak, running)
            release.wait(0.2)
            with lock:
                running -= 1

        threads = [executor.submit(task) for _ in range(6)]
        for thread in threads:
            thread.join(5.0)

        assert peak <= 2
        assert executor.stats["completed"] == 6
