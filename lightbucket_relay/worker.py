"""Background event loop for deliveries started from host callbacks.

Host events arrive on threads the relay does not own. The worker runs an
asyncio loop on a daemon thread so callbacks can hand coroutines over and
return immediately.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import logging
import threading
from typing import Any, Awaitable, Callable, Coroutine, List, Optional, Set

from .errors import WorkerError

LOGGER = logging.getLogger(__name__)

ShutdownHook = Callable[[], Awaitable[None]]


class DeliveryWorker:
    """Runs submitted coroutines concurrently on a private event loop.

    There is no queue and no concurrency limit: every submission becomes its
    own task. Work already started is never cancelled: after :meth:`stop`
    the loop keeps running until the last submission finishes, and only then
    runs the shutdown hooks and closes.
    """

    def __init__(self, *, name: str = "lightbucket-delivery") -> None:
        self._name = name
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._thread: Optional[threading.Thread] = None
        self._pending: Set[concurrent.futures.Future[Any]] = set()
        self._pending_lock = threading.Lock()
        self._shutdown_hooks: List[ShutdownHook] = []
        self._stopping = False
        self._shutdown_scheduled = False

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def in_flight(self) -> int:
        with self._pending_lock:
            return len(self._pending)

    def start(self) -> None:
        if self.running:
            LOGGER.warning("Delivery worker %s already started", self._name)
            return

        loop = asyncio.new_event_loop()
        ready = threading.Event()

        def _run() -> None:
            asyncio.set_event_loop(loop)
            loop.call_soon(ready.set)
            try:
                loop.run_forever()
            finally:
                loop.run_until_complete(loop.shutdown_asyncgens())
                loop.run_until_complete(loop.shutdown_default_executor())
                loop.close()
                LOGGER.debug("Delivery worker %s loop closed", self._name)

        with self._pending_lock:
            self._stopping = False
            self._shutdown_scheduled = False
        self._loop = loop
        self._thread = threading.Thread(target=_run, name=self._name, daemon=True)
        self._thread.start()
        ready.wait()
        LOGGER.debug("Delivery worker %s started", self._name)

    def add_shutdown_hook(self, hook: ShutdownHook) -> None:
        """Register a coroutine function awaited on the loop once work is done."""
        self._shutdown_hooks.append(hook)

    def submit(
        self, coro: Coroutine[Any, Any, Any]
    ) -> concurrent.futures.Future[Any]:
        """Schedule ``coro`` on the worker loop and return without waiting."""
        with self._pending_lock:
            if self._stopping or not self.running or self._loop is None:
                coro.close()
                raise WorkerError(f"Delivery worker {self._name} is not running")
            future = asyncio.run_coroutine_threadsafe(coro, self._loop)
            self._pending.add(future)
        future.add_done_callback(self._discard)
        return future

    def _discard(self, future: concurrent.futures.Future[Any]) -> None:
        with self._pending_lock:
            self._pending.discard(future)
            finished = self._stopping and not self._pending
        if finished:
            self._schedule_shutdown()

    def drain(self, timeout: Optional[float] = None) -> bool:
        """Wait for submitted work to finish. Returns False on timeout."""
        with self._pending_lock:
            pending = set(self._pending)
        if not pending:
            return True
        _, not_done = concurrent.futures.wait(pending, timeout=timeout)
        return not not_done

    def stop(self, timeout: Optional[float] = None) -> None:
        """Refuse new work and shut down once pending work has finished.

        Waits up to ``timeout`` seconds for the shutdown. When work is still
        in flight after that, it carries on in the background and the loop
        closes after it.
        """
        thread = self._thread
        if thread is None or self._loop is None:
            return

        with self._pending_lock:
            if self._stopping:
                return
            self._stopping = True
            idle = not self._pending
        if idle:
            self._schedule_shutdown()

        if threading.current_thread() is thread:
            return

        thread.join(timeout)
        if thread.is_alive():
            LOGGER.info(
                "Delivery worker %s will stop after %d deliveries in flight complete",
                self._name,
                self.in_flight,
            )
        else:
            LOGGER.debug("Delivery worker %s stopped", self._name)

    def _schedule_shutdown(self) -> None:
        loop = self._loop
        with self._pending_lock:
            if self._shutdown_scheduled or loop is None:
                return
            self._shutdown_scheduled = True
        hooks = list(self._shutdown_hooks)
        self._shutdown_hooks.clear()
        loop.call_soon_threadsafe(
            lambda: loop.create_task(_shutdown(loop, hooks))
        )


async def _shutdown(loop: asyncio.AbstractEventLoop, hooks: List[ShutdownHook]) -> None:
    for hook in hooks:
        try:
            await hook()
        except Exception as exc:
            LOGGER.debug("Error running shutdown hook %r: %s", hook, exc)
    loop.stop()
