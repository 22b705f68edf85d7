r"""Unit tests for policy entries."""

from __future__ import annotations

import dataclasses

import pytest

from aretry import Delay, Policy
from aretry.retry.policy import capture_delays

####################################
#     Tests for capture_delays     #
####################################


def test_capture_delays_materializes_iterator() -> None:
    """Test that one-shot iterators are captured in full."""
    captured = capture_delays(iter([Delay.of_seconds(1), Delay.of_seconds(2)]))
    assert captured == (Delay.of_seconds(1), Delay.of_seconds(2))
    assert list(captured) == list(captured)


def test_capture_delays_copies_list() -> None:
    """Test that later changes to a registered list have no effect."""
    delays = [Delay.of_seconds(1)]
    captured = capture_delays(delays)
    delays.append(Delay.of_seconds(2))
    assert captured == (Delay.of_seconds(1),)


def test_capture_delays_keeps_reiterable() -> None:
    delays = Delay.of_seconds(1).exponential_backoff(2, 3)
    assert capture_delays(delays) is delays


def test_capture_delays_rejects_none() -> None:
    with pytest.raises(TypeError, match=r"delays must not be None"):
        capture_delays(None)


def test_capture_delays_rejects_non_iterable() -> None:
    with pytest.raises(TypeError, match=r"delays must be iterable, got Delay"):
        capture_delays(Delay.of_seconds(1))


############################
#     Tests for Policy     #
############################


def test_policy_matches_subclasses() -> None:
    policy = Policy(OSError, [Delay.of_seconds(1)])
    assert policy.matches(OSError("bad"))
    assert policy.matches(ConnectionError("bad"))
    assert not policy.matches(ValueError("bad"))


def test_policy_matches_with_condition() -> None:
    """Test that the condition further restricts the matching
    failures."""
    policy = Policy(OSError, [], condition=lambda error: error.errno == 11)
    assert policy.matches(OSError(11, "again"))
    assert not policy.matches(OSError(2, "missing"))
    assert not policy.matches(ValueError("bad"))


def test_policy_condition_not_called_for_other_types() -> None:
    def condition(error: BaseException) -> bool:
        raise AssertionError

    assert not Policy(OSError, [], condition).matches(KeyError("key"))


def test_policy_is_frozen() -> None:
    policy = Policy(OSError, [])
    with pytest.raises(dataclasses.FrozenInstanceError):
        policy.error_type = ValueError


@pytest.mark.parametrize("error_type", [OSError("bad"), int, "OSError"])
def test_policy_rejects_non_exception_class(error_type: object) -> None:
    with pytest.raises(TypeError, match=r"error_type must be an exception class"):
        Policy(error_type, [])


def test_policy_rejects_none() -> None:
    with pytest.raises(TypeError, match=r"error_type must not be None"):
        Policy(None, [])
    with pytest.raises(TypeError, match=r"delays must not be None"):
        Policy(OSError, None)


def test_policy_rejects_non_callable_condition() -> None:
    with pytest.raises(TypeError, match=r"condition must be callable, got bool"):
        Policy(OSError, [], condition=True)
