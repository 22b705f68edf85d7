r"""Delay value type used as one step of a retry backoff schedule."""

from __future__ import annotations

__all__ = ["Delay"]

import functools
import math
from datetime import timedelta
from typing import TYPE_CHECKING, Any

from aretry.utils.validation import (
    validate_factor,
    validate_not_none,
    validate_randomness,
)

if TYPE_CHECKING:
    from random import Random

    from aretry.delay.sequences import ExponentialBackoff

_MICROSECOND = timedelta(microseconds=1)


def _to_timedelta(duration: timedelta | float) -> timedelta:
    validate_not_none(duration, "duration")
    if isinstance(duration, timedelta):
        value = duration
    elif isinstance(duration, (int, float)) and not isinstance(duration, bool):
        value = timedelta(seconds=duration)
    else:
        msg = f"duration must be a timedelta or a number of seconds, got {type(duration).__name__}"
        raise TypeError(msg)
    if value < timedelta(0):
        msg = f"duration must be >= 0, got {value}"
        raise ValueError(msg)
    return value


@functools.total_ordering
class Delay:
    """A wait duration with hooks invoked around the wait.

    A delay is one step of a retry schedule. Before the wait starts, the
    retry engine calls ``before_delay`` with the failure that triggered
    the retry; after the wait elapses and before the operation is
    invoked again, it calls ``after_delay``. Both hooks are no-ops by
    default and are meant to be overridden, for example to log or to
    record metrics. A hook that raises ends the retry chain.

    Delays are immutable; the combinators return new delays or new
    sequences. Two delays are equal when their durations are equal,
    regardless of their hooks.

    Args:
        duration: The wait duration, as a ``timedelta`` or a number of
            seconds. Must be >= 0.

    Raises:
        TypeError: If duration is None or not a duration.
        ValueError: If duration is negative.
        OverflowError: If duration is too large to represent.

    Example:
        ```pycon
        >>> from aretry import Delay
        >>> Delay.of_seconds(3).scaled(2)
        Delay(duration=datetime.timedelta(seconds=6))
        >>> [d.seconds for d in Delay.of_seconds(1).exponential_backoff(2, 3)]
        [1.0, 2.0, 4.0]

        ```
    """

    def __init__(self, duration: timedelta | float) -> None:
        self._duration = _to_timedelta(duration)

    @classmethod
    def of(cls, duration: timedelta | float) -> Delay:
        r"""Create a delay of ``duration``.

        Args:
            duration: The wait duration, as a ``timedelta`` or a number
                of seconds.

        Returns:
            The delay.
        """
        return cls(duration)

    @classmethod
    def of_millis(cls, millis: float) -> Delay:
        r"""Create a delay of ``millis`` milliseconds."""
        validate_not_none(millis, "millis")
        return cls(timedelta(milliseconds=millis))

    @classmethod
    def of_seconds(cls, seconds: float) -> Delay:
        r"""Create a delay of ``seconds`` seconds."""
        validate_not_none(seconds, "seconds")
        return cls(timedelta(seconds=seconds))

    @classmethod
    def of_days(cls, days: float) -> Delay:
        r"""Create a delay of ``days`` days."""
        validate_not_none(days, "days")
        return cls(timedelta(days=days))

    @property
    def duration(self) -> timedelta:
        r"""The wait duration."""
        return self._duration

    @property
    def seconds(self) -> float:
        r"""The wait duration in seconds."""
        return self.duration.total_seconds()

    def before_delay(self, error: Exception) -> None:
        """Invoked with the triggering failure before the wait starts.

        Args:
            error: The failure that triggered the retry.
        """

    def after_delay(self, error: Exception) -> None:
        """Invoked with the triggering failure after the wait elapsed.

        Args:
            error: The failure that triggered the retry.
        """

    def scaled(self, factor: float) -> Delay:
        """Return a delay whose duration is multiplied by ``factor``.

        The result is rounded up to the next microsecond, so a positive
        factor never turns a positive delay into a zero delay.

        Args:
            factor: The multiplier. Must be >= 0.

        Returns:
            The scaled delay.

        Raises:
            ValueError: If factor is negative.
            OverflowError: If the scaled duration is too large.

        Example:
            ```pycon
            >>> from aretry import Delay
            >>> Delay.of_days(3).scaled(2) == Delay.of_days(6)
            True
            >>> Delay.of_days(3).scaled(0) == Delay.of_days(0)
            True

            ```
        """
        validate_factor(factor)
        micros = self.duration // _MICROSECOND
        return Delay(timedelta(microseconds=math.ceil(micros * factor)))

    def exponential_backoff(self, multiplier: float, count: int) -> ExponentialBackoff:
        """Return ``count`` delays starting at this one, growing by
        ``multiplier``.

        Args:
            multiplier: The growth factor between consecutive delays.
                Must be >= 1.
            count: The number of delays. Must be >= 0.

        Returns:
            A lazy, restartable sequence of delays.

        Raises:
            ValueError: If multiplier is smaller than 1 or count is
                negative.
            OverflowError: If the last delay is too large to represent.

        Example:
            ```pycon
            >>> from aretry import Delay
            >>> backoff = Delay.of_days(1).exponential_backoff(2, 3)
            >>> [delay.duration.days for delay in backoff]
            [1, 2, 4]
            >>> len(Delay.of_days(1).exponential_backoff(1, 0))
            0

            ```
        """
        from aretry.delay.sequences import ExponentialBackoff

        return ExponentialBackoff(self, multiplier, count)

    def randomized(self, random: Random, randomness: float) -> Delay:
        """Return a delay whose duration is sampled uniformly in
        ``[duration * (1 - randomness), duration]``.

        Args:
            random: The source of randomness.
            randomness: The fraction of the duration that may be shaved
                off. Must be in ``[0, 1]``.

        Returns:
            The randomized delay.

        Raises:
            TypeError: If random is None.
            ValueError: If randomness is outside ``[0, 1]``.
        """
        validate_not_none(random, "random")
        validate_randomness(randomness)
        return self.scaled(1 - randomness * random.random())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Delay):
            return NotImplemented
        return self.duration == other.duration

    def __lt__(self, other: Any) -> bool:
        if not isinstance(other, Delay):
            return NotImplemented
        return self.duration < other.duration

    def __hash__(self) -> int:
        return hash(self.duration)

    def __repr__(self) -> str:
        return f"{type(self).__qualname__}(duration={self.duration!r})"
