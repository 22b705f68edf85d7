r"""Parameter validation utilities for delays and retry policies.

This module provides validation functions for the arguments of the
delay combinators and of the retry policy registration, so invalid
values are rejected when the offending value is built rather than in
the middle of a retry chain.
"""

from __future__ import annotations

__all__ = [
    "validate_callable",
    "validate_count",
    "validate_factor",
    "validate_multiplier",
    "validate_not_none",
    "validate_randomness",
]

from typing import Any


def validate_not_none(value: Any, name: str) -> None:
    """Validate that a required argument is present.

    Args:
        value: The argument value.
        name: The argument name, used in the error message.

    Raises:
        TypeError: If ``value`` is None.

    Example:
        ```pycon
        >>> from aretry.utils import validate_not_none
        >>> validate_not_none([], "delays")
        >>> validate_not_none(None, "delays")
        Traceback (most recent call last):
        ...
        TypeError: delays must not be None

        ```
    """
    if value is None:
        msg = f"{name} must not be None"
        raise TypeError(msg)


def validate_factor(factor: float) -> None:
    """Validate a scaling factor.

    Args:
        factor: The factor a delay is multiplied by. Must be >= 0.

    Raises:
        ValueError: If factor is negative or NaN.

    Example:
        ```pycon
        >>> from aretry.utils import validate_factor
        >>> validate_factor(0)
        >>> validate_factor(2.5)
        >>> validate_factor(-1)
        Traceback (most recent call last):
        ...
        ValueError: factor must be >= 0, got -1

        ```
    """
    if not factor >= 0:
        msg = f"factor must be >= 0, got {factor}"
        raise ValueError(msg)


def validate_multiplier(multiplier: float) -> None:
    """Validate an exponential backoff multiplier.

    Args:
        multiplier: The growth factor between consecutive delays.
            Must be >= 1.

    Raises:
        ValueError: If multiplier is smaller than 1 or NaN.
    """
    if not multiplier >= 1:
        msg = f"multiplier must be >= 1, got {multiplier}"
        raise ValueError(msg)


def validate_count(count: int) -> None:
    """Validate the number of delays in a sequence.

    Args:
        count: The number of delays. Must be >= 0.

    Raises:
        ValueError: If count is negative.
    """
    if count < 0:
        msg = f"count must be >= 0, got {count}"
        raise ValueError(msg)


def validate_randomness(randomness: float) -> None:
    """Validate the randomness of a randomized delay.

    Args:
        randomness: The fraction of the delay that may be shaved off.
            Must be in ``[0, 1]``.

    Raises:
        ValueError: If randomness is outside ``[0, 1]`` or NaN.

    Example:
        ```pycon
        >>> from aretry.utils import validate_randomness
        >>> validate_randomness(0.5)
        >>> validate_randomness(1.1)
        Traceback (most recent call last):
        ...
        ValueError: randomness must be in [0, 1], got 1.1

        ```
    """
    if not 0 <= randomness <= 1:
        msg = f"randomness must be in [0, 1], got {randomness}"
        raise ValueError(msg)


def validate_callable(value: Any, name: str) -> None:
    """Validate that a required argument is callable.

    Args:
        value: The argument value.
        name: The argument name, used in the error message.

    Raises:
        TypeError: If ``value`` is None or not callable.
    """
    validate_not_none(value, name)
    if not callable(value):
        msg = f"{name} must be callable, got {type(value).__name__}"
        raise TypeError(msg)
