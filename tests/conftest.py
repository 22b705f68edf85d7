from __future__ import annotations

from typing import TYPE_CHECKING
from unittest.mock import Mock, patch

import pytest

from aretry import Delay
from aretry.scheduler import BaseScheduler

if TYPE_CHECKING:
    from collections.abc import Callable, Generator


class FakeClock:
    """Manually advanced clock returning seconds."""

    def __init__(self, now: float = 123456.789) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeTask:
    def __init__(self, due: float, task: Callable[[], None]) -> None:
        self.due = due
        self.task = task
        self.cancelled = False

    def cancel(self) -> bool:
        self.cancelled = True
        return True


class FakeScheduler(BaseScheduler):
    """Scheduler running due tasks only when ``tick`` is called."""

    def __init__(self, clock: FakeClock) -> None:
        self.clock = clock
        self.tasks: list[FakeTask] = []

    def schedule_after(self, task: Callable[[], None], delay: float) -> FakeTask:
        scheduled = FakeTask(self.clock() + delay, task)
        self.tasks.append(scheduled)
        return scheduled

    @property
    def pending(self) -> list[FakeTask]:
        return [task for task in self.tasks if not task.cancelled]

    def tick(self) -> None:
        now = self.clock()
        ready = [task for task in self.pending if task.due <= now]
        # Running tasks may schedule new ones, so the pending list is
        # replaced before they run.
        self.tasks = [task for task in self.pending if task.due > now]
        for task in ready:
            task.task()

    def elapse(self, seconds: float) -> None:
        self.clock.advance(seconds)
        self.tick()


@pytest.fixture
def mock_sleep() -> Generator[Mock, None, None]:
    """Patch time.sleep to make tests run faster."""
    with patch("time.sleep", return_value=None) as mock:
        yield mock


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def scheduler(clock: FakeClock) -> FakeScheduler:
    return FakeScheduler(clock)


@pytest.fixture
def spy_delay() -> Callable[[float], Delay]:
    """Create delays whose hooks are mocks.

    Returns:
        A factory taking the delay in seconds.
    """

    def factory(seconds: float) -> Delay:
        delay = Delay.of_seconds(seconds)
        delay.before_delay = Mock()
        delay.after_delay = Mock()
        return delay

    return factory
