r"""Unit tests for the retry decider."""

from __future__ import annotations

from aretry import Delay, Policy, get_suppressed, guarded
from aretry.retry import RetryDecider


def test_retry_decider_unmatched_failure_is_terminal() -> None:
    """Test that a failure matching no entry is returned unmodified."""
    decider = RetryDecider([Policy(OSError, [Delay.of_seconds(1)])])
    error = ValueError("bad")
    assert decider.next_delay(error) is None
    assert get_suppressed(error) == ()
    assert decider.failures == ()


def test_retry_decider_yields_delays_in_order() -> None:
    delays = [Delay.of_seconds(1), Delay.of_seconds(2)]
    decider = RetryDecider([Policy(OSError, delays)])
    first, second = OSError("first"), OSError("second")
    assert decider.next_delay(first) == Delay.of_seconds(1)
    assert decider.next_delay(second) == Delay.of_seconds(2)
    assert decider.failures == (first, second)


def test_retry_decider_exhausted_attaches_failures() -> None:
    """Test that the terminal failure carries the retried failures."""
    decider = RetryDecider([Policy(OSError, [Delay.of_seconds(1), Delay.of_seconds(1)])])
    failures = [OSError("first"), OSError("second"), OSError("third")]
    assert decider.next_delay(failures[0]) is not None
    assert decider.next_delay(failures[1]) is not None
    assert decider.next_delay(failures[2]) is None
    assert get_suppressed(failures[2]) == (failures[0], failures[1])


def test_retry_decider_empty_delays() -> None:
    decider = RetryDecider([Policy(OSError, [])])
    error = OSError("bad")
    assert decider.next_delay(error) is None
    assert get_suppressed(error) == ()


def test_retry_decider_first_matching_entry_wins() -> None:
    decider = RetryDecider(
        [
            Policy(ConnectionError, [Delay.of_seconds(1)]),
            Policy(OSError, [Delay.of_seconds(2), Delay.of_seconds(3)]),
        ]
    )
    assert decider.next_delay(OSError("a")) == Delay.of_seconds(2)
    assert decider.next_delay(ConnectionError("b")) == Delay.of_seconds(1)
    assert decider.next_delay(OSError("c")) == Delay.of_seconds(3)
    error = ConnectionError("d")
    assert decider.next_delay(error) is None
    assert len(get_suppressed(error)) == 3


def test_retry_decider_entries_keep_separate_iterators() -> None:
    decider = RetryDecider(
        [Policy(KeyError, [Delay.of_seconds(1)]), Policy(ValueError, [Delay.of_seconds(2)])]
    )
    assert decider.next_delay(KeyError("a")) == Delay.of_seconds(1)
    assert decider.next_delay(ValueError("b")) == Delay.of_seconds(2)
    assert decider.next_delay(KeyError("c")) is None


def test_retry_decider_iterates_lazily() -> None:
    """Test that dynamic sequences are evaluated when an entry first
    matches."""
    enabled = [False]
    decider = RetryDecider([Policy(OSError, guarded([Delay.of_seconds(1)], lambda: enabled[0]))])
    enabled[0] = True
    assert decider.next_delay(OSError("bad")) == Delay.of_seconds(1)


def test_retry_decider_calls_are_independent() -> None:
    policies = [Policy(OSError, [Delay.of_seconds(1)])]
    assert RetryDecider(policies).next_delay(OSError("a")) == Delay.of_seconds(1)
    assert RetryDecider(policies).next_delay(OSError("b")) == Delay.of_seconds(1)


def test_retry_decider_hook_failed() -> None:
    decider = RetryDecider([Policy(OSError, [Delay.of_seconds(1)] * 2)])
    first, second = OSError("first"), OSError("second")
    decider.next_delay(first)
    decider.next_delay(second)
    hook_error = RuntimeError("hook")
    assert decider.hook_failed(hook_error) is hook_error
    assert get_suppressed(hook_error) == (first, second)


def test_retry_decider_does_not_suppress_self() -> None:
    decider = RetryDecider([Policy(OSError, [Delay.of_seconds(1)])])
    error = OSError("same")
    decider.next_delay(error)
    assert decider.next_delay(error) is None
    assert get_suppressed(error) == ()


def test_retry_decider_unmatched_after_retry_attaches_failures() -> None:
    decider = RetryDecider([Policy(OSError, [Delay.of_seconds(1)] * 2)])
    first, second, error = OSError("first"), OSError("second"), ValueError("bad")
    decider.next_delay(first)
    decider.next_delay(second)
    assert decider.next_delay(error) is None
    assert get_suppressed(error) == (first, second)
