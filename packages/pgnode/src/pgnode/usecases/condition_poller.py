"""ConditionPoller use case for bounded, cancellable fixed-interval waits."""

from __future__ import annotations

from typing import Callable

from pgnode.adapters.ports import ClockPort
from pgnode.domain.exceptions import WaitCancelledError, WaitTimeoutError
from pgnode.domain.retry import CancellationToken, PollingPolicy


class ConditionPoller:
    """Polls a condition until it holds, a bound is hit, or the wait is cancelled.

    The cancellation token is checked before every poll, so a supervisor on
    another thread can abort a wait within one interval.
    """

    def __init__(self, clock: ClockPort) -> None:
        """Initialize the poller.

        Args:
            clock: Time source used for sleeping and duration bounds.
        """
        self.clock = clock

    def wait_until(
        self,
        condition: Callable[[], bool],
        policy: PollingPolicy,
        description: str,
        token: CancellationToken | None = None,
    ) -> int:
        """Block until ``condition()`` returns a truthy value.

        Args:
            condition: Zero-argument callable polled once per interval.
            policy: Interval and optional attempt/duration bounds.
            description: What is being waited for, used in errors.
            token: Optional cancellation token.

        Returns:
            Number of polls performed, including the successful one.

        Raises:
            WaitCancelledError: If the token was cancelled before a poll.
            WaitTimeoutError: If the attempt or duration bound was reached.
            Exception: Errors raised by ``condition`` propagate unchanged.
        """
        started = self.clock.get_time_seconds()
        attempts = 0

        while True:
            if token is not None and token.cancelled:
                raise WaitCancelledError(description)

            attempts += 1
            if condition():
                return attempts

            if policy.attempts_exhausted(attempts):
                raise WaitTimeoutError(description, attempts)

            elapsed = self.clock.get_time_seconds() - started
            if policy.duration_exceeded(elapsed + policy.interval):
                raise WaitTimeoutError(description, attempts)

            self.clock.sleep(policy.interval)
