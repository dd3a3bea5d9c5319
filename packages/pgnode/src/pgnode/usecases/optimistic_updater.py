"""OptimisticUpdater use case: compare-and-swap with refetch on conflict."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Generic, TypeVar

from pgnode.adapters.ports import ClockPort, LoggingPort
from pgnode.domain.retry import RetryPolicy

T = TypeVar("T")


class UpdateStatus(Enum):
    """How an optimistic update ended.

    Attributes:
        SUCCEEDED: A write was accepted.
        EXHAUSTED: Every attempt conflicted.
        FAILED: A non-conflict error ended the loop.
    """

    SUCCEEDED = "succeeded"
    EXHAUSTED = "exhausted"
    FAILED = "failed"


@dataclass(frozen=True)
class UpdateOutcome(Generic[T]):
    """Typed result of an optimistic update.

    Attributes:
        status: How the update ended.
        record: The accepted record, None unless SUCCEEDED.
        attempts: Number of write attempts performed.
        last_error: Last error observed, None on a first-try success.
    """

    status: UpdateStatus
    record: T | None
    attempts: int
    last_error: BaseException | None = None

    @property
    def succeeded(self) -> bool:
        return self.status is UpdateStatus.SUCCEEDED


class OptimisticUpdater:
    """Applies a mutation under optimistic concurrency.

    Each attempt mutates the latest known record and writes it. A write
    rejected by ``is_conflict`` triggers a refetch and another attempt with
    the fresh record, up to ``policy.max_attempts`` writes in total. Any
    other error stops the loop immediately.
    """

    def __init__(
        self,
        policy: RetryPolicy,
        clock: ClockPort,
        logger: LoggingPort,
        on_conflict: Callable[[], None] | None = None,
    ) -> None:
        """Initialize the updater.

        Args:
            policy: Retry budget and backoff between attempts.
            clock: Used to sleep between attempts.
            logger: Receives one line per conflict.
            on_conflict: Optional hook called on every conflict (e.g. metrics).
        """
        self.policy = policy
        self.clock = clock
        self.logger = logger
        self._on_conflict = on_conflict

    def apply(
        self,
        record: T,
        mutate: Callable[[T], T],
        write: Callable[[T], T],
        refetch: Callable[[], T],
        is_conflict: Callable[[BaseException], bool],
    ) -> UpdateOutcome[T]:
        """Run the compare-and-swap loop.

        Args:
            record: Last known version of the record.
            mutate: Returns the desired record given the current one.
            write: Persists a record, raising on rejection.
            refetch: Loads the latest record after a conflict.
            is_conflict: Classifies a write error as a version conflict.

        Returns:
            UpdateOutcome describing success, exhaustion or failure.
        """
        current = record
        last_error: BaseException | None = None

        for attempt in range(self.policy.max_attempts):
            try:
                accepted = write(mutate(current))
            except Exception as e:
                if not is_conflict(e):
                    return UpdateOutcome(UpdateStatus.FAILED, None, attempt + 1, e)
                last_error = e
            else:
                return UpdateOutcome(UpdateStatus.SUCCEEDED, accepted, attempt + 1, last_error)

            self.logger.warning(
                f"Conflict on attempt {attempt + 1}/{self.policy.max_attempts}: {last_error}"
            )
            if self._on_conflict is not None:
                self._on_conflict()

            if not self.policy.should_retry(attempt):
                break

            try:
                current = refetch()
            except Exception as e:
                return UpdateOutcome(UpdateStatus.FAILED, None, attempt + 1, e)

            self.clock.sleep(self.policy.calculate_backoff(attempt))

        return UpdateOutcome(
            UpdateStatus.EXHAUSTED, None, self.policy.max_attempts, last_error
        )
