"""Retry and polling policy domain value objects."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field

from pgnode.domain.exceptions import PgNodeConfigError

# Transient errno codes that indicate retryable network errors
# These are Linux errno values commonly seen in network operations
_TRANSIENT_ERRNOS = frozenset(
    {
        2,  # ENOENT - Unix socket not created yet
        104,  # ECONNRESET - Connection reset by peer
        110,  # ETIMEDOUT - Connection timed out
        111,  # ECONNREFUSED - Connection refused
        113,  # EHOSTUNREACH - No route to host
        115,  # EINPROGRESS - Operation now in progress
    }
)

# Largest 32-bit signed integer, used as a practically unbounded attempt budget
UNBOUNDED_ATTEMPTS = 2**31 - 1


@dataclass(frozen=True)
class RetryPolicy:
    """Retry policy for bounded retry loops.

    Value object encapsulating retry configuration including max retries,
    exponential backoff calculation, and transient failure detection.
    Used for the cluster status conflict loop and the startup probe.

    Attributes:
        max_retries: Maximum number of retry attempts after the first one.
                    0 means a single attempt. Must be non-negative.
        backoff_base: Base delay in seconds for exponential backoff.
                     Must be positive. Delay = backoff_base * 2^attempt.
        max_backoff: Maximum backoff delay in seconds. Must be positive.
    """

    max_retries: int = 4
    backoff_base: float = 0.01
    max_backoff: float = 0.01

    def __post_init__(self) -> None:
        """Validate retry policy configuration."""
        self._validate_max_retries()
        self._validate_backoff_base()
        self._validate_max_backoff()

    def _validate_max_retries(self) -> None:
        """Validate max_retries is non-negative."""
        if self.max_retries < 0:
            raise PgNodeConfigError("max_retries cannot be negative")

    def _validate_backoff_base(self) -> None:
        """Validate backoff_base is positive."""
        if self.backoff_base <= 0:
            raise PgNodeConfigError("backoff_base must be positive")

    def _validate_max_backoff(self) -> None:
        """Validate max_backoff is positive."""
        if self.max_backoff <= 0:
            raise PgNodeConfigError("max_backoff must be positive")

    @property
    def max_attempts(self) -> int:
        """Total number of attempts allowed (first try plus retries)."""
        return self.max_retries + 1

    def calculate_backoff(self, attempt: int) -> float:
        """Calculate exponential backoff delay for a given attempt.

        Args:
            attempt: The retry attempt number (0-indexed).

        Returns:
            Delay in seconds before the next retry attempt, capped at max_backoff.
        """
        delay = self.backoff_base * (2**attempt)
        return float(min(delay, self.max_backoff))

    def should_retry(self, attempt: int) -> bool:
        """Determine if another retry attempt should be made.

        Args:
            attempt: The current attempt number (0-indexed).

        Returns:
            True if attempt < max_retries, False otherwise.
        """
        return attempt < self.max_retries

    def is_transient_error(self, error: BaseException) -> bool:
        """Determine if an error is transient (retryable).

        Connection errors, timeouts and a few OS-level network errors
        mean the backend is still starting. Everything else is permanent.

        Args:
            error: The exception to classify.

        Returns:
            True if the error is transient and should be retried.
        """
        if isinstance(error, ConnectionError):
            return True

        if isinstance(error, TimeoutError):
            return True

        if isinstance(error, OSError) and error.errno is not None:
            return error.errno in _TRANSIENT_ERRNOS

        return False


@dataclass(frozen=True)
class PollingPolicy:
    """Fixed-interval polling policy with optional bounds.

    Attributes:
        interval: Seconds to sleep between two polls. Must be positive.
        max_attempts: Maximum number of polls, or None for no attempt bound.
        max_duration: Maximum seconds spent waiting, or None for no time bound.
    """

    interval: float = 1.0
    max_attempts: int | None = None
    max_duration: float | None = None

    def __post_init__(self) -> None:
        """Validate polling policy configuration."""
        if self.interval <= 0:
            raise PgNodeConfigError("interval must be positive")

        if self.max_attempts is not None and self.max_attempts < 1:
            raise PgNodeConfigError("max_attempts must be at least 1")

        if self.max_duration is not None and self.max_duration <= 0:
            raise PgNodeConfigError("max_duration must be positive")

    @property
    def is_bounded(self) -> bool:
        """True if either an attempt or a duration bound is configured."""
        return self.max_attempts is not None or self.max_duration is not None

    def attempts_exhausted(self, attempts: int) -> bool:
        """Check whether the attempt bound has been reached."""
        return self.max_attempts is not None and attempts >= self.max_attempts

    def duration_exceeded(self, elapsed: float) -> bool:
        """Check whether the duration bound has been reached."""
        return self.max_duration is not None and elapsed >= self.max_duration


@dataclass
class CancellationToken:
    """Thread-safe cancellation flag shared between a supervisor and waits.

    A supervisor running on another thread calls cancel(); waits check
    ``cancelled`` before every poll.
    """

    _event: threading.Event = field(default_factory=threading.Event, repr=False)

    def cancel(self) -> None:
        """Request cancellation. Idempotent."""
        self._event.set()

    @property
    def cancelled(self) -> bool:
        """Return True once cancel() has been called."""
        return self._event.is_set()
