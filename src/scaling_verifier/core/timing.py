"""Clocks injected into the waiter, the sampler and the in-memory control plane.

Every polling loop reads time and sleeps through a Clock so tests can drive
minutes of waiting in microseconds with a ManualClock.

Examples:
    Driving a loop with a manual clock::

        clock = ManualClock()
        waiter = ConvergenceWaiter(clock=clock)
        outcome = waiter.await_until(lambda: 1, lambda v: v == 2, 0.1, 60)
        assert clock.now == 60.0

    Dry-running every scenario without a cluster::

        clock = ManualClock()
        controller = InMemoryScalingController(clock=clock, readiness_delay_seconds=5)
        run_scenarios(config, controller, probe, waiter=ConvergenceWaiter(clock=clock))
"""

import time
from typing import Protocol, runtime_checkable


@runtime_checkable
class Clock(Protocol):
    """Monotonic time source with a blocking sleep."""

    def monotonic(self) -> float:
        """Return monotonic time in seconds."""
        ...

    def sleep(self, seconds: float) -> None:
        """Block for the given number of seconds."""
        ...


class SystemClock:
    """Real time, backed by time.monotonic and time.sleep."""

    def monotonic(self) -> float:
        return time.monotonic()

    def sleep(self, seconds: float) -> None:
        if seconds > 0:
            time.sleep(seconds)


class ManualClock:
    """Clock whose sleep advances time instantly.

    Public for dry runs: paired with InMemoryScalingController it rehearses
    the scenarios, timeouts included, without a cluster or real waiting.

    Attributes:
        now: Current time in seconds.
        sleeps: Every sleep duration requested, in order.
    """

    def __init__(self, start: float = 0.0) -> None:
        self.now = start
        self.sleeps: list[float] = []

    def monotonic(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        if seconds > 0:
            self.now += seconds

    def advance(self, seconds: float) -> None:
        """Move time forward without recording a sleep."""
        self.now += seconds
