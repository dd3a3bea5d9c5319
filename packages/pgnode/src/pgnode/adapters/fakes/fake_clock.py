"""Fake clock for testing polling loops without real sleeping."""

from __future__ import annotations

from typing import Callable


class FakeClock:
    """Fake implementation of ClockPort.

    sleep() advances the clock instantly and records the requested delay.
    An optional hook runs on every sleep, e.g. to cancel a token mid-wait.
    """

    def __init__(
        self, start: float = 0.0, on_sleep: Callable[[int], None] | None = None
    ) -> None:
        """Initialize the clock.

        Args:
            start: Initial time in seconds.
            on_sleep: Called with the number of sleeps so far after each sleep.
        """
        self._now = start
        self._on_sleep = on_sleep
        self.sleeps: list[float] = []

    def get_time_seconds(self) -> float:
        return self._now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self._now += seconds
        if self._on_sleep is not None:
            self._on_sleep(len(self.sleeps))
