r"""Shared core logic for retry executors.

This module provides helper functions used by both the blocking and the
future-based retry executors.
"""

from __future__ import annotations

__all__ = ["run_hook"]

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable

    from aretry.retry.decider import RetryDecider


def run_hook(
    decider: RetryDecider,
    hook: Callable[[Exception], None],
    error: Exception,
) -> None:
    """Invoke a delay hook with the failure that triggered the retry.

    A failing hook ends the retry chain: its exception becomes the
    terminal failure, with the failures retried so far attached as
    suppressed causes.

    Args:
        decider: The decider of the current retry call.
        hook: The bound ``before_delay`` or ``after_delay`` method.
        error: The failure that triggered the retry.

    Raises:
        Exception: The exception raised by the hook, if any.
    """
    try:
        hook(error)
    except Exception as hook_error:
        decider.hook_failed(hook_error)
        raise
