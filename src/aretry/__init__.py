r"""aretry - Retry orchestration with declarative backoff policies.

This package retries fallible operations according to a policy mapping
exception types to backoff schedules. The same policy drives blocking
retries on the calling thread and non-blocking retries delivered through
a ``concurrent.futures.Future``, with deferred attempts run by a
scheduler.

Key Features:
    - Policies keyed by exception type, matched in registration order
    - Immutable, thread-safe ``Retryer`` objects
    - Delays with hooks invoked before and after each wait
    - Exponential, randomized, time-limited and guarded delay sequences
    - Blocking, future-based and future-returning operation support
    - Earlier failures attached to the surfaced failure as suppressed causes
    - Thread-pool and asyncio event-loop schedulers

Example:
    ```pycon
    >>> from aretry import Delay, Retryer
    >>> from aretry.scheduler import ThreadScheduler
    >>> retryer = Retryer().with_policy(
    ...     ConnectionError, Delay.of_millis(10).exponential_backoff(2, 3)
    ... )
    >>> retryer.retry_blocking(lambda: "done")
    'done'
    >>> with ThreadScheduler() as scheduler:
    ...     retryer.retry(lambda: "done", scheduler).result(timeout=5)
    ...
    'done'

    ```
"""

from __future__ import annotations

__all__ = [
    "AsyncioScheduler",
    "BaseScheduler",
    "Delay",
    "ExponentialBackoff",
    "Policy",
    "Retryer",
    "ThreadScheduler",
    "__version__",
    "get_suppressed",
    "guarded",
    "randomized",
    "time_limited",
]

from importlib.metadata import PackageNotFoundError, version

from aretry.delay import Delay, ExponentialBackoff, guarded, randomized, time_limited
from aretry.retry import Policy, Retryer
from aretry.scheduler import AsyncioScheduler, BaseScheduler, ThreadScheduler
from aretry.utils.exceptions import get_suppressed

try:
    __version__ = version(__name__)
except PackageNotFoundError:  # pragma: no cover
    # Package is not installed, fallback if needed
    __version__ = "0.0.0"
