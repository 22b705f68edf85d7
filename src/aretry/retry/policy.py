r"""Policy entries mapping failure types to delay sequences.

This module provides the ``Policy`` dataclass, one entry of the ordered
policy held by a ``Retryer``.
"""

from __future__ import annotations

__all__ = ["Policy", "capture_delays"]

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import TYPE_CHECKING

from aretry.utils.validation import validate_callable, validate_not_none

if TYPE_CHECKING:
    from collections.abc import Callable

    from aretry.delay.base import Delay


def capture_delays(delays: Iterable[Delay]) -> Iterable[Delay]:
    """Capture a delay sequence for use by a policy.

    One-shot iterators such as generators, and built-in lists and
    tuples, are copied into a tuple, so every retry call sees all of
    their elements and later changes to the caller's list have no
    effect. Other iterables, such as the lazy delay sequences, are kept
    by reference, so dynamic sequences (guarded or time-limited) are
    still evaluated when a retry call iterates them.

    Args:
        delays: The delays.

    Returns:
        A re-iterable sequence of delays.

    Raises:
        TypeError: If delays is None or not iterable.

    Example:
        ```pycon
        >>> from aretry import Delay
        >>> from aretry.retry.policy import capture_delays
        >>> capture_delays(Delay.of_seconds(s) for s in (1, 2))
        (Delay(duration=datetime.timedelta(seconds=1)), Delay(duration=datetime.timedelta(seconds=2)))

        ```
    """
    validate_not_none(delays, "delays")
    if not isinstance(delays, Iterable):
        msg = f"delays must be iterable, got {type(delays).__name__}"
        raise TypeError(msg)
    if isinstance(delays, (Iterator, list, tuple)):
        return tuple(delays)
    return delays


@dataclass(frozen=True)
class Policy:
    """One entry of a retry policy.

    A failure matches the entry when it is an instance of
    ``error_type`` and, if a condition is given, the condition returns
    true for it.

    Args:
        error_type: The exception class handled by this entry.
        delays: The delays to wait before each retry. Must be
            re-iterable; use ``capture_delays`` for one-shot iterators.
        condition: Optional predicate further restricting the matching
            failures.

    Raises:
        TypeError: If error_type is not an exception class, delays is
            None, or condition is not callable.
    """

    error_type: type[BaseException]
    delays: Iterable[Delay]
    condition: Callable[[BaseException], bool] | None = None

    def __post_init__(self) -> None:
        validate_not_none(self.error_type, "error_type")
        validate_not_none(self.delays, "delays")
        if not (isinstance(self.error_type, type) and issubclass(self.error_type, BaseException)):
            msg = f"error_type must be an exception class, got {self.error_type!r}"
            raise TypeError(msg)
        if self.condition is not None:
            validate_callable(self.condition, "condition")

    def matches(self, error: BaseException) -> bool:
        """Return whether this entry handles ``error``.

        Args:
            error: The observed failure.

        Returns:
            ``True`` if error is an instance of ``error_type`` and
                satisfies the condition, if any.
        """
        if not isinstance(error, self.error_type):
            return False
        return self.condition is None or bool(self.condition(error))
