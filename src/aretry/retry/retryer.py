r"""Immutable retry policy and retry entry points."""

from __future__ import annotations

__all__ = ["Retryer"]

from typing import TYPE_CHECKING, Any, TypeVar

from aretry.retry.executor import RetryExecutor
from aretry.retry.executor_async import AsyncRetryExecutor
from aretry.retry.policy import Policy, capture_delays
from aretry.utils.validation import validate_callable, validate_not_none

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable
    from concurrent.futures import Future

    from aretry.delay.base import Delay
    from aretry.scheduler import BaseScheduler

T = TypeVar("T")


class Retryer:
    """Retries operations according to a policy keyed by failure type.

    The policy is an ordered list of entries, each mapping an exception
    class to the delays to wait before each retry. When an attempt
    fails, the first registered entry whose class matches the failure
    is selected; if there is none, or if its delays are exhausted, the
    failure is surfaced to the caller. Earlier failures of the same
    call are attached to the surfaced failure as suppressed causes (see
    ``aretry.get_suppressed``).

    A retryer is immutable: ``with_policy`` returns a new retryer and
    leaves the receiver unchanged. It can therefore be built once and
    shared by any number of concurrent calls. Every call iterates the
    delay sequences afresh, so time-limited and guarded sequences are
    evaluated per call.

    Args:
        policies: The initial policy entries, in registration order.

    Example:
        ```pycon
        >>> from aretry import Delay, Retryer, get_suppressed
        >>> retryer = Retryer().with_policy(OSError, Delay.of_millis(1).exponential_backoff(2, 2))
        >>> failures = iter([OSError("first"), OSError("second")])
        >>> def operation():
        ...     failure = next(failures, None)
        ...     if failure is not None:
        ...         raise failure
        ...     return "done"
        ...
        >>> retryer.retry_blocking(operation)
        'done'
        >>> def always_fails():
        ...     raise OSError("hopeless")
        ...
        >>> try:
        ...     retryer.retry_blocking(always_fails)
        ... except OSError as error:
        ...     len(get_suppressed(error))
        ...
        1

        ```
    """

    def __init__(self, policies: Iterable[Policy] = ()) -> None:
        self._policies: tuple[Policy, ...] = tuple(policies)

    @property
    def policies(self) -> tuple[Policy, ...]:
        r"""The policy entries, in registration order."""
        return self._policies

    def with_policy(
        self,
        error_type: type[BaseException],
        delays: Iterable[Delay],
        condition: Callable[[Any], bool] | None = None,
    ) -> Retryer:
        """Return a retryer that also retries failures of
        ``error_type``.

        The new entry is appended after the existing ones, so it only
        applies to failures that no earlier entry matches.

        Args:
            error_type: The exception class to retry. Subclasses match
                too.
            delays: The delays to wait before each retry. A list, a
                tuple or a one-shot iterator such as a generator is
                copied in full; other iterables, such as the lazy delay
                sequences, are kept as is and iterated afresh by every
                call.
            condition: Optional predicate further restricting the
                matching failures.

        Returns:
            A new retryer. The receiver is unchanged.

        Raises:
            TypeError: If error_type is not an exception class, delays
                is None, or condition is not callable.
        """
        validate_not_none(error_type, "error_type")
        policy = Policy(error_type, capture_delays(delays), condition)
        return Retryer((*self._policies, policy))

    def retry_blocking(self, operation: Callable[[], T]) -> T:
        """Invoke ``operation`` on the calling thread until it succeeds
        or a failure is terminal, sleeping between attempts.

        Args:
            operation: Zero-argument callable to invoke.

        Returns:
            The value returned by the first successful invocation.

        Raises:
            TypeError: If operation is None or not callable.
            Exception: The terminal failure.
        """
        validate_callable(operation, "operation")
        return RetryExecutor(self._policies).execute(operation)

    def retry(self, operation: Callable[[], T], scheduler: BaseScheduler) -> Future[T]:
        """Invoke ``operation`` until it succeeds or a failure is
        terminal, without blocking the caller.

        The first attempt runs on the calling thread; deferred attempts
        run on ``scheduler``.

        Args:
            operation: Zero-argument callable to invoke.
            scheduler: The scheduler running the deferred attempts.

        Returns:
            A future resolved with the value of the first successful
                invocation, or failed with the terminal failure.

        Raises:
            TypeError: If operation or scheduler is None.
        """
        validate_callable(operation, "operation")
        validate_not_none(scheduler, "scheduler")
        return AsyncRetryExecutor(self._policies, scheduler).execute(operation)

    def retry_async(
        self, operation: Callable[[], Any], scheduler: BaseScheduler
    ) -> Future[Any]:
        """Invoke an asynchronous ``operation`` until one of its futures
        succeeds or a failure is terminal.

        A failure is either an exception raised by ``operation`` or an
        exception set on the future it returned.

        Args:
            operation: Zero-argument callable returning a
                ``concurrent.futures.Future`` or an ``asyncio.Future``.
            scheduler: The scheduler running the deferred attempts.

        Returns:
            A future resolved with the result of the first successful
                attempt, or failed with the terminal failure.

        Raises:
            TypeError: If operation or scheduler is None.
        """
        validate_callable(operation, "operation")
        validate_not_none(scheduler, "scheduler")
        return AsyncRetryExecutor(self._policies, scheduler).execute_async(operation)

    def __repr__(self) -> str:
        return f"{type(self).__qualname__}(policies={self._policies!r})"
