r"""Delays and delay sequences for retry backoff schedules.

This package provides the ``Delay`` value type and lazy sequences of
delays, including exponential backoff, randomized, time-limited and
guarded sequences.
"""

from __future__ import annotations

__all__ = [
    "Delay",
    "ExponentialBackoff",
    "GuardedSequence",
    "RandomizedDelays",
    "TimeLimitedDelays",
    "guarded",
    "randomized",
    "time_limited",
]

from aretry.delay.base import Delay
from aretry.delay.sequences import (
    ExponentialBackoff,
    GuardedSequence,
    RandomizedDelays,
    TimeLimitedDelays,
    guarded,
    randomized,
    time_limited,
)
