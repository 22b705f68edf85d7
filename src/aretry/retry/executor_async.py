r"""Future-based retry executor.

This module provides the AsyncRetryExecutor class that retries an
operation without blocking the caller. Each deferred attempt is handed
to a scheduler, and the outcome of the whole retry chain is delivered
through a single ``concurrent.futures.Future``.
"""

from __future__ import annotations

__all__ = ["AsyncRetryExecutor"]

import functools
import logging
from concurrent.futures import Future, InvalidStateError
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from aretry.retry.decider import RetryDecider
from aretry.retry.executor_core import run_hook

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from aretry.delay.base import Delay
    from aretry.retry.policy import Policy
    from aretry.scheduler import BaseScheduler, Cancellable

T = TypeVar("T")

logger: logging.Logger = logging.getLogger(__name__)


class AsyncRetryExecutor:
    """Executes an operation with automatic retries through a
    scheduler.

    The first attempt runs on the calling thread. If it fails and a
    delay applies, the ``before_delay`` hook runs on the calling thread
    too, and the rest of the chain (``after_delay``, the next attempt,
    and so on) runs on tasks of the scheduler. Attempts are strictly
    sequential. A zero delay goes through ``scheduler.execute_now``
    rather than a direct call, so long chains of immediate retries do
    not grow the stack.

    Cancelling the returned future cancels the pending scheduled task
    and the in-flight attempt, if any. A task that already started when
    the cancellation happens stops without invoking hooks or the
    operation again.

    Args:
        policies: The policy entries, in registration order.
        scheduler: The scheduler running the deferred attempts.

    Example:
        ```pycon
        >>> from aretry import Delay
        >>> from aretry.retry import AsyncRetryExecutor, Policy
        >>> from aretry.scheduler import ThreadScheduler
        >>> with ThreadScheduler() as scheduler:
        ...     executor = AsyncRetryExecutor([Policy(OSError, [Delay.of_millis(1)])], scheduler)
        ...     executor.execute(lambda: 42).result(timeout=5)
        ...
        42

        ```
    """

    def __init__(self, policies: Sequence[Policy], scheduler: BaseScheduler) -> None:
        self.policies = policies
        self.scheduler = scheduler

    def execute(self, operation: Callable[[], T]) -> Future[T]:
        """Invoke ``operation`` until it succeeds or a failure is
        terminal.

        Args:
            operation: Zero-argument callable to invoke.

        Returns:
            A future resolved with the value of the first successful
                invocation, or failed with the terminal failure.
        """
        return _RetryCall(operation, self.scheduler, RetryDecider(self.policies)).start()

    def execute_async(self, operation: Callable[[], Any]) -> Future[Any]:
        """Invoke an asynchronous ``operation`` until one of its futures
        succeeds or a failure is terminal.

        A failure is either an exception raised by ``operation`` itself
        or an exception set on the future it returned. Both are handled
        the same way. Cancelling the future of an attempt cancels the
        returned future.

        Args:
            operation: Zero-argument callable returning a
                ``concurrent.futures.Future`` or an ``asyncio.Future``.

        Returns:
            A future resolved with the result of the first successful
                attempt, or failed with the terminal failure.
        """
        return _RetryCall(
            operation, self.scheduler, RetryDecider(self.policies), asynchronous=True
        ).start()


class _RetryCall(Generic[T]):
    """State of one future-based retry call."""

    def __init__(
        self,
        operation: Callable[[], Any],
        scheduler: BaseScheduler,
        decider: RetryDecider,
        asynchronous: bool = False,
    ) -> None:
        self.future: Future[T] = Future()
        self._operation = operation
        self._scheduler = scheduler
        self._decider = decider
        self._asynchronous = asynchronous
        self._attempts = 0
        self._pending: Cancellable | None = None
        self._in_flight: Any = None
        self.future.add_done_callback(self._on_done)

    def start(self) -> Future[T]:
        self._invoke()
        return self.future

    def _invoke(self) -> None:
        if self.future.done():
            return
        self._attempts += 1
        try:
            value = self._operation()
        except Exception as exc:
            self._on_failure(exc)
            return
        except BaseException as exc:
            self._set_exception(exc)
            raise
        if not self._asynchronous:
            self._set_result(value)
            return
        if not callable(getattr(value, "add_done_callback", None)):
            msg = f"operation must return a future, got {type(value).__name__}"
            self._set_exception(TypeError(msg))
            return
        self._in_flight = value
        value.add_done_callback(self._on_attempt_done)

    def _on_attempt_done(self, attempt: Any) -> None:
        self._in_flight = None
        if self.future.done():
            return
        if attempt.cancelled():
            logger.debug(f"Attempt {self._attempts} was cancelled, cancelling the retry")
            self.future.cancel()
            return
        error = attempt.exception()
        if error is None:
            self._set_result(attempt.result())
        elif isinstance(error, Exception):
            self._on_failure(error)
        else:
            self._set_exception(error)

    def _on_failure(self, error: Exception) -> None:
        try:
            delay = self._decider.next_delay(error)
        except Exception as exc:
            self._set_exception(exc)
            return
        except BaseException as exc:
            self._set_exception(exc)
            raise
        if delay is None:
            logger.debug(f"Giving up after {self._attempts} attempts")
            self._set_exception(error)
            return
        try:
            run_hook(self._decider, delay.before_delay, error)
        except Exception as exc:
            self._set_exception(exc)
            return
        except BaseException as exc:
            self._set_exception(exc)
            raise
        self._schedule(delay, error)

    def _schedule(self, delay: Delay, error: Exception) -> None:
        task = functools.partial(self._resume, delay, error)
        seconds = delay.seconds
        try:
            if seconds > 0:
                self._pending = self._scheduler.schedule_after(task, seconds)
            else:
                self._pending = self._scheduler.execute_now(task)
        except Exception as exc:
            self._set_exception(exc)
            return
        if self.future.cancelled():
            self._cancel_pending()

    def _resume(self, delay: Delay, error: Exception) -> None:
        self._pending = None
        if self.future.done():
            logger.debug("Skipping retry because the result is already settled")
            return
        try:
            run_hook(self._decider, delay.after_delay, error)
        except Exception as exc:
            self._set_exception(exc)
            return
        except BaseException as exc:
            self._set_exception(exc)
            raise
        self._invoke()

    def _on_done(self, future: Future[T]) -> None:
        if not future.cancelled():
            return
        self._cancel_pending()
        in_flight = self._in_flight
        if in_flight is not None:
            in_flight.cancel()

    def _cancel_pending(self) -> None:
        pending = self._pending
        if pending is not None:
            pending.cancel()

    def _set_result(self, value: T) -> None:
        if self.future.done():
            logger.debug("Discarding retry result because the retry was cancelled")
            return
        try:
            self.future.set_result(value)
        except InvalidStateError:
            logger.debug("Discarding retry result because the retry was cancelled")
        else:
            if self._attempts > 1:
                logger.debug(f"Succeeded after {self._attempts} attempts")

    def _set_exception(self, error: BaseException) -> None:
        if self.future.done():
            logger.debug(f"Discarding {type(error).__name__} because the retry was cancelled")
            return
        try:
            self.future.set_exception(error)
        except InvalidStateError:
            logger.debug(f"Discarding {type(error).__name__} because the retry was cancelled")
