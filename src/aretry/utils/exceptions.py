r"""Suppressed-cause utilities for retry failures.

When a retry chain gives up, the failure surfaced to the caller carries
the failures of the earlier attempts as an ordered list of suppressed
causes. Python has no built-in notion of suppressed exceptions, so the
list is stored as an attribute of the terminal exception.

Example:
    ```pycon
    >>> from aretry.utils.exceptions import add_suppressed, get_suppressed
    >>> first = OSError("first")
    >>> last = OSError("last")
    >>> add_suppressed(last, first)
    >>> get_suppressed(last)
    (OSError('first'),)

    ```
"""

from __future__ import annotations

__all__ = ["SUPPRESSED_ATTRIBUTE", "add_suppressed", "attach_suppressed", "get_suppressed"]

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

SUPPRESSED_ATTRIBUTE = "_aretry_suppressed"


def get_suppressed(error: BaseException) -> tuple[BaseException, ...]:
    """Return the suppressed causes of an exception.

    Args:
        error: The exception to inspect.

    Returns:
        The suppressed causes in the order they were added. Empty if
            none were ever added.
    """
    return tuple(getattr(error, SUPPRESSED_ATTRIBUTE, ()))


def add_suppressed(error: BaseException, suppressed: BaseException) -> None:
    """Record ``suppressed`` as a suppressed cause of ``error``.

    Adding an exception to itself, or adding the same exception object
    twice, has no effect.

    Args:
        error: The exception that is propagated.
        suppressed: The exception retained for diagnostics.
    """
    if suppressed is error:
        return
    causes: list[BaseException] | None = getattr(error, SUPPRESSED_ATTRIBUTE, None)
    if causes is None:
        causes = []
        setattr(error, SUPPRESSED_ATTRIBUTE, causes)
    if any(cause is suppressed for cause in causes):
        return
    causes.append(suppressed)


def attach_suppressed(error: BaseException, causes: Iterable[BaseException]) -> BaseException:
    """Record each of ``causes`` as a suppressed cause of ``error``.

    Args:
        error: The exception that is propagated.
        causes: The earlier exceptions, in chronological order.

    Returns:
        ``error`` itself, so the call can be used in a ``raise``
            statement.
    """
    for cause in causes:
        add_suppressed(error, cause)
    return error
