r"""Blocking retry executor.

This module provides the RetryExecutor class that retries an operation
on the calling thread, sleeping between attempts.
"""

from __future__ import annotations

__all__ = ["RetryExecutor"]

import logging
import time
from typing import TYPE_CHECKING, TypeVar

from aretry.retry.decider import RetryDecider
from aretry.retry.executor_core import run_hook

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from aretry.delay.base import Delay
    from aretry.retry.policy import Policy

T = TypeVar("T")

logger: logging.Logger = logging.getLogger(__name__)


class RetryExecutor:
    """Executes an operation with automatic retries on the calling
    thread.

    The only suspension point is ``time.sleep`` between attempts, which
    cannot be interrupted once started.

    Args:
        policies: The policy entries, in registration order.

    Example:
        ```pycon
        >>> from aretry import Delay
        >>> from aretry.retry import Policy, RetryExecutor
        >>> executor = RetryExecutor([Policy(OSError, [Delay.of_seconds(0)])])
        >>> attempts = iter([OSError("flaky"), "done"])
        >>> def operation():
        ...     outcome = next(attempts)
        ...     if isinstance(outcome, Exception):
        ...         raise outcome
        ...     return outcome
        ...
        >>> executor.execute(operation)
        'done'

        ```
    """

    def __init__(self, policies: Sequence[Policy]) -> None:
        self.policies = policies

    def execute(self, operation: Callable[[], T]) -> T:
        """Invoke ``operation`` until it succeeds or a failure is
        terminal.

        Args:
            operation: Zero-argument callable to invoke.

        Returns:
            The value returned by the first successful invocation.

        Raises:
            Exception: The terminal failure: an unmatched failure, the
                last failure once its delays are exhausted, or the
                failure of a delay hook.
        """
        decider = RetryDecider(self.policies)
        attempt = 0
        while True:
            attempt += 1
            try:
                result = operation()
            except Exception as exc:
                delay = decider.next_delay(exc)
                if delay is None:
                    logger.debug(f"Giving up after {attempt} attempts")
                    raise
                error = exc
            else:
                if attempt > 1:
                    logger.debug(f"Succeeded after {attempt} attempts")
                return result
            self._wait(decider, delay, error)

    def _wait(self, decider: RetryDecider, delay: Delay, error: Exception) -> None:
        run_hook(decider, delay.before_delay, error)
        time.sleep(delay.seconds)
        run_hook(decider, delay.after_delay, error)
