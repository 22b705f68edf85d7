r"""Schedulers running deferred retry attempts.

The future-based entry points of ``Retryer`` never block and never
create threads: they hand each deferred attempt to a scheduler. This
module defines the scheduler interface and two implementations, one
backed by a thread pool and one backed by an asyncio event loop.

Example:
    ```pycon
    >>> from aretry import Delay, Retryer
    >>> from aretry.scheduler import ThreadScheduler
    >>> retryer = Retryer().with_policy(OSError, [Delay.of_millis(10)] * 3)
    >>> with ThreadScheduler() as scheduler:
    ...     future = retryer.retry(lambda: "done", scheduler)
    ...     future.result(timeout=5)
    ...
    'done'

    ```
"""

from __future__ import annotations

__all__ = ["AsyncioScheduler", "BaseScheduler", "Cancellable", "ThreadScheduler"]

import asyncio
import logging
import threading
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from collections.abc import Callable
    from types import TracebackType

logger: logging.Logger = logging.getLogger(__name__)


class Cancellable(Protocol):
    """Handle of a scheduled task."""

    def cancel(self) -> Any:
        """Cancel the task if it has not started yet."""


class BaseScheduler(ABC):
    """Abstract base class for schedulers.

    A scheduler runs tasks on behalf of the retry engine, without
    blocking the caller. Any object providing ``schedule_after`` and
    ``execute_now`` can be used as a scheduler; this base class only
    documents the contract.
    """

    @abstractmethod
    def schedule_after(self, task: Callable[[], None], delay: float) -> Cancellable:
        """Run ``task`` once, no earlier than ``delay`` seconds from now.

        Args:
            task: Zero-argument callable to run.
            delay: The delay in seconds.

        Returns:
            A handle that can cancel the task before it starts.
        """

    def execute_now(self, task: Callable[[], None]) -> Cancellable:
        """Run ``task`` once, as soon as possible but not on the calling
        stack.

        Args:
            task: Zero-argument callable to run.

        Returns:
            A handle that can cancel the task before it starts.
        """
        return self.schedule_after(task, 0.0)


class ThreadScheduler(BaseScheduler):
    """Scheduler backed by a thread pool.

    Delayed tasks are held by ``threading.Timer`` objects and handed to
    a ``ThreadPoolExecutor`` when they are due. The scheduler should be
    shut down when no longer needed, either explicitly or by using it
    as a context manager.

    Args:
        max_workers: The maximum number of worker threads. Defaults to
            the ``ThreadPoolExecutor`` default.
    """

    def __init__(self, max_workers: int | None = None) -> None:
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="aretry")
        self._lock = threading.Lock()
        self._timers: set[threading.Timer] = set()
        self._shutdown = False

    def execute_now(self, task: Callable[[], None]) -> Cancellable:
        return self._executor.submit(task)

    def schedule_after(self, task: Callable[[], None], delay: float) -> Cancellable:
        def fire() -> None:
            with self._lock:
                self._timers.discard(timer)
                if self._shutdown:
                    logger.debug("Dropping scheduled task because the scheduler is shut down")
                    return
                self._executor.submit(task)

        timer = threading.Timer(delay, fire)
        timer.daemon = True
        with self._lock:
            if self._shutdown:
                msg = "cannot schedule new tasks after shutdown"
                raise RuntimeError(msg)
            # cancelled timers never fire, so they are dropped here
            self._timers = {pending for pending in self._timers if pending.is_alive()}
            self._timers.add(timer)
        timer.start()
        return timer

    def shutdown(self, wait: bool = True) -> None:
        """Cancel the pending delayed tasks and stop the thread pool.

        Args:
            wait: Whether to wait for the running tasks to finish.
        """
        with self._lock:
            self._shutdown = True
            timers = list(self._timers)
            self._timers.clear()
        for timer in timers:
            timer.cancel()
        self._executor.shutdown(wait=wait)

    def __enter__(self) -> ThreadScheduler:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.shutdown()


class AsyncioScheduler(BaseScheduler):
    """Scheduler backed by an asyncio event loop.

    Tasks run as plain callbacks of the loop. When called from the
    loop's own thread the scheduler uses ``call_later`` and
    ``call_soon``; from any other thread the task is handed to the loop
    with ``run_coroutine_threadsafe``.

    Args:
        loop: The event loop. Defaults to the running loop.

    Raises:
        RuntimeError: If no loop is given and none is running.

    Example:
        ```pycon
        >>> import asyncio
        >>> from aretry import Delay, Retryer
        >>> from aretry.scheduler import AsyncioScheduler
        >>> async def main():
        ...     retryer = Retryer().with_policy(OSError, [Delay.of_millis(10)])
        ...     future = retryer.retry(lambda: "done", AsyncioScheduler())
        ...     return await asyncio.wrap_future(future)
        ...
        >>> asyncio.run(main())
        'done'

        ```
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self.loop = loop if loop is not None else asyncio.get_running_loop()

    def schedule_after(self, task: Callable[[], None], delay: float) -> Cancellable:
        if self._in_loop_thread():
            return self.loop.call_later(delay, task)
        return asyncio.run_coroutine_threadsafe(_run_later(task, delay), self.loop)

    def execute_now(self, task: Callable[[], None]) -> Cancellable:
        if self._in_loop_thread():
            return self.loop.call_soon(task)
        return self.loop.call_soon_threadsafe(task)

    def _in_loop_thread(self) -> bool:
        try:
            return asyncio.get_running_loop() is self.loop
        except RuntimeError:
            return False


async def _run_later(task: Callable[[], None], delay: float) -> None:
    await asyncio.sleep(delay)
    task()
