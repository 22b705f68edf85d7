r"""Lazy delay sequences for retry backoff schedules.

This module provides restartable sequences of delays: exponential
backoff, randomized delays, and two dynamic wrappers whose contents are
evaluated when they are iterated rather than when they are built. A
time-limited sequence stops yielding once a time budget is spent, and a
guarded sequence behaves as empty while its predicate is false.

Example:
    ```pycon
    >>> from aretry import Delay, guarded
    >>> enabled = True
    >>> delays = guarded(Delay.of_seconds(1).exponential_backoff(2, 2), lambda: enabled)
    >>> [delay.seconds for delay in delays]
    [1.0, 2.0]
    >>> enabled = False
    >>> list(delays)
    []

    ```
"""

from __future__ import annotations

__all__ = [
    "ExponentialBackoff",
    "GuardedSequence",
    "RandomizedDelays",
    "TimeLimitedDelays",
    "guarded",
    "randomized",
    "time_limited",
]

import logging
import time
from collections.abc import Iterable, Iterator, Sequence
from datetime import timedelta
from typing import TYPE_CHECKING, TypeVar, overload

from aretry.delay.base import Delay
from aretry.utils.validation import (
    validate_count,
    validate_multiplier,
    validate_not_none,
    validate_randomness,
)

if TYPE_CHECKING:
    from collections.abc import Callable
    from random import Random

T = TypeVar("T")

logger: logging.Logger = logging.getLogger(__name__)


def _as_sequence(items: Iterable[T]) -> Sequence[T]:
    if isinstance(items, Sequence):
        return items
    return tuple(items)


class ExponentialBackoff(Sequence[Delay]):
    """Exponentially growing delays.

    The delay at index ``i`` is ``initial`` scaled by
    ``multiplier ** i``. Delays are computed on access, so the sequence
    can be iterated any number of times.

    Args:
        initial: The first delay.
        multiplier: The growth factor between consecutive delays.
            Must be >= 1.
        count: The number of delays. Must be >= 0.

    Raises:
        ValueError: If multiplier is smaller than 1 or count is negative.
        OverflowError: If the last delay is too large to represent.
    """

    def __init__(self, initial: Delay, multiplier: float, count: int) -> None:
        validate_not_none(initial, "initial")
        validate_multiplier(multiplier)
        validate_count(count)
        self._initial = initial
        self._multiplier = multiplier
        self._count = count
        if count > 0:
            # delays grow with the index, so the last one bounds them all
            self[count - 1]

    @overload
    def __getitem__(self, index: int) -> Delay: ...

    @overload
    def __getitem__(self, index: slice) -> list[Delay]: ...

    def __getitem__(self, index: int | slice) -> Delay | list[Delay]:
        if isinstance(index, slice):
            return [self[i] for i in range(self._count)[index]]
        exponent = range(self._count)[index]
        return self._initial.scaled(float(self._multiplier) ** exponent)

    def __len__(self) -> int:
        return self._count

    def __repr__(self) -> str:
        return (
            f"{type(self).__qualname__}(initial={self._initial!r}, "
            f"multiplier={self._multiplier}, count={self._count})"
        )


class RandomizedDelays(Iterable[Delay]):
    """Delays whose durations are resampled on every iteration.

    Each element is replaced by ``delay.randomized(random, randomness)``
    when it is yielded, so two iterations of the same sequence produce
    independent samples.

    Args:
        delays: The delays to randomize.
        random: The source of randomness.
        randomness: The fraction of each duration that may be shaved
            off. Must be in ``[0, 1]``.
    """

    def __init__(self, delays: Iterable[Delay], random: Random, randomness: float) -> None:
        validate_not_none(delays, "delays")
        validate_not_none(random, "random")
        validate_randomness(randomness)
        self._delays = _as_sequence(delays)
        self._random = random
        self._randomness = randomness

    def __iter__(self) -> Iterator[Delay]:
        for delay in self._delays:
            yield delay.randomized(self._random, self._randomness)

    def __len__(self) -> int:
        return len(self._delays)


class TimeLimitedDelays(Iterable[Delay]):
    """Delays truncated to a total time budget.

    The budget is measured from the first element requested by an
    iteration. Once the time elapsed since then reaches the budget, the
    iteration stops. Each iteration has its own start time, so one
    instance can back any number of independent retry calls.

    Args:
        delays: The delays to truncate.
        budget: The total time budget.
        clock: Zero-argument callable returning the current time in
            seconds. Defaults to ``time.monotonic``.
    """

    def __init__(
        self,
        delays: Iterable[Delay],
        budget: Delay | timedelta | float,
        clock: Callable[[], float] | None = None,
    ) -> None:
        validate_not_none(delays, "delays")
        validate_not_none(budget, "budget")
        self._delays = _as_sequence(delays)
        self._budget = budget.seconds if isinstance(budget, Delay) else Delay(budget).seconds
        self._clock = clock if clock is not None else time.monotonic

    @property
    def budget(self) -> float:
        r"""The time budget in seconds."""
        return self._budget

    def __iter__(self) -> Iterator[Delay]:
        start = self._clock()
        for delay in self._delays:
            elapsed = self._clock() - start
            if elapsed >= self._budget:
                logger.debug(
                    f"Time budget of {self._budget:.3f}s exhausted after {elapsed:.3f}s"
                )
                return
            yield delay


class GuardedSequence(Sequence[T]):
    """A sequence that behaves as empty while a predicate is false.

    The predicate is evaluated every time the length, the truthiness or
    an element of the sequence is observed, and before each element of
    an iteration. Flipping the predicate back to true restores the
    original elements.

    Args:
        items: The guarded elements.
        predicate: Zero-argument callable enabling the elements.
    """

    def __init__(self, items: Iterable[T], predicate: Callable[[], bool]) -> None:
        validate_not_none(items, "items")
        validate_not_none(predicate, "predicate")
        self._items = _as_sequence(items)
        self._predicate = predicate

    @overload
    def __getitem__(self, index: int) -> T: ...

    @overload
    def __getitem__(self, index: slice) -> Sequence[T]: ...

    def __getitem__(self, index: int | slice) -> T | Sequence[T]:
        if not self._predicate():
            if isinstance(index, slice):
                return ()
            msg = "guarded sequence is disabled"
            raise IndexError(msg)
        return self._items[index]

    def __len__(self) -> int:
        return len(self._items) if self._predicate() else 0

    def __iter__(self) -> Iterator[T]:
        for item in self._items:
            if not self._predicate():
                return
            yield item


def randomized(delays: Iterable[Delay], random: Random, randomness: float) -> RandomizedDelays:
    """Return ``delays`` with every duration resampled on each iteration.

    Args:
        delays: The delays to randomize.
        random: The source of randomness.
        randomness: The fraction of each duration that may be shaved
            off. Must be in ``[0, 1]``.

    Returns:
        The randomized sequence.
    """
    return RandomizedDelays(delays, random, randomness)


def time_limited(
    delays: Iterable[Delay],
    budget: Delay | timedelta | float,
    clock: Callable[[], float] | None = None,
) -> TimeLimitedDelays:
    """Return ``delays`` truncated to a total time budget.

    Args:
        delays: The delays to truncate.
        budget: The total time budget, measured from the first element
            requested by each iteration.
        clock: Zero-argument callable returning the current time in
            seconds. Defaults to ``time.monotonic``.

    Returns:
        The time-limited sequence.

    Example:
        ```pycon
        >>> from aretry import Delay, time_limited
        >>> delays = time_limited([Delay.of_seconds(1)] * 100, Delay.of_seconds(3))
        >>> next(iter(delays))
        Delay(duration=datetime.timedelta(seconds=1))

        ```
    """
    return TimeLimitedDelays(delays, budget, clock)


def guarded(items: Iterable[T], predicate: Callable[[], bool]) -> GuardedSequence[T]:
    """Return ``items`` enabled only while ``predicate`` returns true.

    Args:
        items: The guarded elements.
        predicate: Zero-argument callable enabling the elements.

    Returns:
        The guarded sequence.
    """
    return GuardedSequence(items, predicate)
