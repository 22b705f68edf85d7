r"""Unit tests for the blocking retry executor."""

from __future__ import annotations

from typing import TYPE_CHECKING
from unittest.mock import Mock, call

import pytest

from aretry import Delay, Policy, get_suppressed
from aretry.retry import RetryExecutor

if TYPE_CHECKING:
    from collections.abc import Callable


def test_retry_executor_success_on_first_attempt(mock_sleep: Mock) -> None:
    """Test that a successful operation is invoked once."""
    operation = Mock(return_value="ok")
    assert RetryExecutor([Policy(OSError, [Delay.of_seconds(1)])]).execute(operation) == "ok"
    operation.assert_called_once_with()
    mock_sleep.assert_not_called()


def test_retry_executor_retries_until_success(
    mock_sleep: Mock, spy_delay: Callable[[float], Delay]
) -> None:
    delays = [spy_delay(1), spy_delay(2)]
    first, second = OSError("first"), OSError("second")
    operation = Mock(side_effect=[first, second, "ok"])

    assert RetryExecutor([Policy(OSError, delays)]).execute(operation) == "ok"
    assert operation.call_count == 3
    assert mock_sleep.call_args_list == [call(1.0), call(2.0)]
    delays[0].before_delay.assert_called_once_with(first)
    delays[0].after_delay.assert_called_once_with(first)
    delays[1].before_delay.assert_called_once_with(second)
    delays[1].after_delay.assert_called_once_with(second)


def test_retry_executor_exhausted(mock_sleep: Mock) -> None:
    """Test that the last failure is raised once delays are
    exhausted."""
    failures = [OSError("first"), OSError("second"), OSError("third")]
    operation = Mock(side_effect=failures)
    executor = RetryExecutor([Policy(OSError, [Delay.of_millis(10)] * 2)])

    with pytest.raises(OSError, match=r"third") as exc_info:
        executor.execute(operation)
    assert exc_info.value is failures[2]
    assert get_suppressed(exc_info.value) == (failures[0], failures[1])
    assert mock_sleep.call_count == 2


def test_retry_executor_unmatched_failure(mock_sleep: Mock) -> None:
    error = ValueError("bad")
    operation = Mock(side_effect=error)

    with pytest.raises(ValueError, match=r"bad") as exc_info:
        RetryExecutor([Policy(OSError, [Delay.of_seconds(1)])]).execute(operation)
    assert exc_info.value is error
    assert get_suppressed(error) == ()
    operation.assert_called_once_with()
    mock_sleep.assert_not_called()


def test_retry_executor_unmatched_after_retry_keeps_causes(mock_sleep: Mock) -> None:
    """Test that an unmatched failure carries the earlier retried
    failures."""
    first, error = OSError("flaky"), ValueError("bad")
    operation = Mock(side_effect=[first, error])

    with pytest.raises(ValueError, match=r"bad"):
        RetryExecutor([Policy(OSError, [Delay.of_seconds(1)])]).execute(operation)
    assert get_suppressed(error) == (first,)


def test_retry_executor_before_delay_failure(
    mock_sleep: Mock, spy_delay: Callable[[float], Delay]
) -> None:
    """Test that a failing before_delay hook ends the retry chain."""
    delay = spy_delay(1)
    hook_error = RuntimeError("hook")
    delay.before_delay.side_effect = hook_error
    error = OSError("bad")
    operation = Mock(side_effect=error)

    with pytest.raises(RuntimeError, match=r"hook") as exc_info:
        RetryExecutor([Policy(OSError, [delay])]).execute(operation)
    assert exc_info.value is hook_error
    assert get_suppressed(hook_error) == (error,)
    delay.after_delay.assert_not_called()
    mock_sleep.assert_not_called()
    operation.assert_called_once_with()


def test_retry_executor_after_delay_failure(
    mock_sleep: Mock, spy_delay: Callable[[float], Delay]
) -> None:
    delay = spy_delay(1)
    hook_error = RuntimeError("hook")
    delay.after_delay.side_effect = hook_error
    error = OSError("bad")
    operation = Mock(side_effect=error)

    with pytest.raises(RuntimeError, match=r"hook"):
        RetryExecutor([Policy(OSError, [delay])]).execute(operation)
    assert get_suppressed(hook_error) == (error,)
    mock_sleep.assert_called_once_with(1.0)
    operation.assert_called_once_with()


def test_retry_executor_zero_delay(mock_sleep: Mock) -> None:
    operation = Mock(side_effect=[OSError("bad"), "ok"])
    assert RetryExecutor([Policy(OSError, [Delay.of_seconds(0)])]).execute(operation) == "ok"
    mock_sleep.assert_called_once_with(0.0)


def test_retry_executor_base_exception_propagates(mock_sleep: Mock) -> None:
    operation = Mock(side_effect=KeyboardInterrupt)
    with pytest.raises(KeyboardInterrupt):
        RetryExecutor([Policy(BaseException, [Delay.of_seconds(1)])]).execute(operation)
    operation.assert_called_once_with()
