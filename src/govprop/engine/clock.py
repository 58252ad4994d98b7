# src/govprop/engine/clock.py
"""Clock abstraction for run and shrink timeouts.

Timeouts are polled between iterations (and between shrink candidates),
never preemptively. Injecting a clock lets tests drive those polls without
sleeping.
"""

from __future__ import annotations

import time
from typing import Protocol


class Clock(Protocol):
    """Monotonic time source used for elapsed-time checks."""

    def monotonic(self) -> float:
        """Return monotonic time in seconds."""
        ...


class SystemClock:
    """Production clock backed by time.monotonic()."""

    def monotonic(self) -> float:
        return time.monotonic()


class MockClock:
    """Manually advanced clock for deterministic timeout tests.

    Example:
        clock = MockClock()
        framework = PropertyTestingFramework(clock=clock)

        def check(value):
            clock.advance(2.0)  # every check "takes" two seconds
            return value >= 0
    """

    def __init__(self, start: float = 0.0) -> None:
        self._current = start

    def monotonic(self) -> float:
        return self._current

    def advance(self, seconds: float) -> None:
        """Advance time by seconds.

        Raises:
            ValueError: If seconds is negative.
        """
        if seconds < 0:
            raise ValueError(f"Cannot advance time by negative amount: {seconds}")
        self._current += seconds


DEFAULT_CLOCK: Clock = SystemClock()
