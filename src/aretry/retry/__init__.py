r"""Retry package implementing the retry engine.

This package provides the immutable ``Retryer`` policy object and the
components it is built from.

Public API:
    - Retryer: Immutable policy object exposing the retry entry points
    - Policy: One entry of a retry policy
    - RetryDecider: Per-call logic selecting the next delay
    - RetryExecutor: Blocking retry executor
    - AsyncRetryExecutor: Future-based retry executor
"""

from __future__ import annotations

__all__ = [
    "AsyncRetryExecutor",
    "Policy",
    "RetryDecider",
    "RetryExecutor",
    "Retryer",
]

from aretry.retry.decider import RetryDecider
from aretry.retry.executor import RetryExecutor
from aretry.retry.executor_async import AsyncRetryExecutor
from aretry.retry.policy import Policy
from aretry.retry.retryer import Retryer
