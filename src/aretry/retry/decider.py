r"""Retry decision logic for a single retry call.

This module provides the RetryDecider class that selects the next delay
for an observed failure and builds the terminal failure, with its
suppressed causes, once no further retry will happen.
"""

from __future__ import annotations

__all__ = ["RetryDecider"]

import logging
from typing import TYPE_CHECKING

from aretry.utils.exceptions import attach_suppressed

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence

    from aretry.delay.base import Delay
    from aretry.retry.policy import Policy

logger: logging.Logger = logging.getLogger(__name__)


class RetryDecider:
    """Decides whether a failure should be retried, and after which
    delay.

    A decider holds the state of one retry call: one delay iterator per
    policy entry, created the first time the entry matches, and the
    failures observed so far. It must not be shared across calls.

    Args:
        policies: The policy entries, in registration order.
    """

    def __init__(self, policies: Sequence[Policy]) -> None:
        self.policies = policies
        self._iterators: dict[int, Iterator[Delay]] = {}
        self._failures: list[BaseException] = []

    @property
    def failures(self) -> tuple[BaseException, ...]:
        r"""The retried failures, in chronological order."""
        return tuple(self._failures)

    def next_delay(self, error: BaseException) -> Delay | None:
        """Return the delay to wait before retrying after ``error``.

        The first policy entry matching the error is selected. If none
        matches, or if the entry has no delay left, the error is
        terminal and the earlier failures of this call are attached to
        it as suppressed causes.

        Args:
            error: The failure just observed.

        Returns:
            The next delay, or ``None`` if ``error`` is terminal.
        """
        index = self._match(error)
        if index is None:
            logger.debug(f"No retry policy matches {type(error).__name__}: {error}")
            attach_suppressed(error, self._failures)
            return None
        iterator = self._iterators.get(index)
        if iterator is None:
            iterator = iter(self.policies[index].delays)
            self._iterators[index] = iterator
        delay = next(iterator, None)
        if delay is None:
            logger.debug(
                f"Retry policy for {type(error).__name__} exhausted after "
                f"{len(self._failures) + 1} attempts"
            )
            attach_suppressed(error, self._failures)
            return None
        self._failures.append(error)
        logger.debug(f"Will retry after {delay.seconds:.3f}s ({type(error).__name__}: {error})")
        return delay

    def hook_failed(self, error: BaseException) -> BaseException:
        """Build the terminal failure for a failing delay hook.

        Args:
            error: The failure raised by ``before_delay`` or
                ``after_delay``.

        Returns:
            ``error``, with every retried failure attached as a
                suppressed cause.
        """
        logger.debug(f"Delay hook failed with {type(error).__name__}: {error}")
        return attach_suppressed(error, self._failures)

    def _match(self, error: BaseException) -> int | None:
        for index, policy in enumerate(self.policies):
            if policy.matches(error):
                return index
        return None
