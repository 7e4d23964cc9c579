"""Single-worker queue that runs submitted work one unit at a time.

Units run on one dedicated thread in the order they were submitted, each to
completion. There is no cancellation and no timeout: a future returned by
``submit()`` cannot be cancelled, and a unit that blocks holds up every unit
queued behind it.
"""

from __future__ import annotations

import logging
import queue
import threading
from collections.abc import Callable
from concurrent.futures import Future
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

_STOP = object()


class _UncancellableFuture(Future[T]):
    """A future whose work always runs once it has been queued."""

    def cancel(self) -> bool:
        return False


class SerialExecutor:
    """FIFO mailbox drained by a single daemon thread.

    The thread is started on the first submission. ``shutdown()`` lets every
    unit already queued finish before the thread exits.
    """

    def __init__(self, name: str = "boldsql-worker") -> None:
        """Initialize with the worker thread's name."""
        self._name = name
        self._mailbox: queue.SimpleQueue[Any] = queue.SimpleQueue()
        self._lock = threading.Lock()
        self._thread: threading.Thread | None = None
        self._shutdown = False

    @property
    def is_shutdown(self) -> bool:
        """True once ``shutdown()`` has been called."""
        return self._shutdown

    def in_worker_thread(self) -> bool:
        """True when called from the worker thread itself."""
        return self._thread is not None and threading.current_thread() is self._thread

    def submit(self, fn: Callable[..., T], *args: Any) -> Future[T]:
        """Queue ``fn(*args)`` and return a future for its result."""
        future: Future[T] = _UncancellableFuture()
        with self._lock:
            if self._shutdown:
                raise RuntimeError("cannot submit work after shutdown")
            if self._thread is None:
                self._thread = threading.Thread(target=self._run, name=self._name, daemon=True)
                self._thread.start()
            self._mailbox.put((future, fn, args))
        return future

    def shutdown(self, wait: bool = True) -> None:
        """Stop accepting work; optionally wait for queued units to finish."""
        with self._lock:
            if self._shutdown:
                return
            self._shutdown = True
            thread = self._thread
            if thread is not None:
                self._mailbox.put(_STOP)
        if wait and thread is not None and thread is not threading.current_thread():
            thread.join()

    def _run(self) -> None:
        while True:
            item = self._mailbox.get()
            if item is _STOP:
                break
            future, fn, args = item
            future.set_running_or_notify_cancel()
            try:
                result = fn(*args)
            except BaseException as exc:
                logger.debug("Queued unit %r raised %r", fn, exc)
                future.set_exception(exc)
            else:
                future.set_result(result)
        logger.debug("Worker %s stopped", self._name)
