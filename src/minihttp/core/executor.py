"""
=============================================================================
PER-CONNECTION THREADS
=============================================================================

Every accepted connection gets its own short-lived thread. Nobody joins
these threads: they run the connection to completion, close it, and exit.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   accept loop             executor                 conn-N thread    │
    │       │                      │                           │          │
    │       │  submit(fn, conn) ──►│                           │          │
    │       │                      │── Thread(daemon).start() ►│          │
    │       │◄─── returns at once ─│                           │ slot     │
    │       │                      │                           │ fn(conn) │
    │   accept() again             │                           │ release  │
    │                                                          │ exit     │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
WHY NOT A POOL
=============================================================================

A fixed pool queues connections behind busy workers. Here a slow client
only ties up its own thread, so other clients never wait on it. The price
is one thread per in-flight connection. If that needs a ceiling, pass
max_connections: the spawned thread waits for a free slot before running
its call, and the accept loop itself never waits.

Threads are daemons so a stuck client cannot keep the process alive after
shutdown.

=============================================================================
"""

import itertools
import logging
import threading
from typing import Any, Callable, Optional


logger = logging.getLogger(__name__)


class DetachedExecutor:
    """
    Runs each submitted call on a new daemon thread.

    Usage:
        executor = DetachedExecutor(max_connections=100)
        executor.submit(process_connection, conn)
        executor.active_count   # calls currently running
    """

    def __init__(self, max_connections: Optional[int] = None):
        self.max_connections = max_connections
        self._slots = (
            threading.BoundedSemaphore(max_connections) if max_connections else None
        )

        self._lock = threading.Lock()  # Protects the counters below
        self._active = 0
        self._completed = 0
        self._failed = 0
        self._ids = itertools.count(1)

    @property
    def active_count(self) -> int:
        """Calls currently running (not counting threads waiting for a slot)."""
        with self._lock:
            return self._active

    @property
    def stats(self) -> dict:
        with self._lock:
            return {
                "active": self._active,
                "completed": self._completed,
                "failed": self._failed,
                "max_connections": self.max_connections,
            }

    def submit(self, func: Callable[..., Any], *args: Any) -> threading.Thread:
        """
        Start func(*args) on a new thread and return without waiting.

        Raises:
            RuntimeError: If the OS refuses to start another thread.
        """
        thread = threading.Thread(
            target=self._run,
            args=(func, args),
            name=f"conn-{next(self._ids)}",
            daemon=True,
        )
        thread.start()
        return thread

    def _run(self, func: Callable[..., Any], args: tuple):
        if self._slots is not None:
            self._slots.acquire()

        with self._lock:
            self._active += 1

        failed = False
        try:
            func(*args)
        except Exception as e:
            # Nothing above this frame would report it
            failed = True
            logger.exception(f"{threading.current_thread().name} failed: {e}")
        finally:
            with self._lock:
                self._active -= 1
                if failed:
                    self._failed += 1
                else:
                    self._completed += 1
            if self._slots is not None:
                self._slots.release()
