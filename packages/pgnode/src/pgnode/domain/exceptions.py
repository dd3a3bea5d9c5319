"""Domain exceptions.

Exception hierarchy:
- PgNodeError: Base for every error raised by the reconciliation core.
  - PgNodeConfigError: Invalid instance manager settings.
  - EventDecodeError: Malformed event payload, missing field or bad base64.
    - CertificateDecodeError: A certificate or key field failed to decode.
  - StatusConflictError: Cluster status write presented a stale version token.
  - StatusUpdateExhaustedError: Conflict retry budget ran out.
  - EngineOperationError: promote/shutdown/reload/query against the local engine failed.
    - EngineUnreachableError: The engine does not accept connections (yet).
  - WaitTimeoutError / WaitCancelledError: A bounded wait ended unsatisfied.
  - FatalReconciliationError: Unrecoverable; the supervisor terminates the process.
"""

from __future__ import annotations


class PgNodeError(Exception):
    """Base exception for the instance reconciliation core.

    Use cases raise subclasses of this error. The event dispatcher returns
    them unmodified to its caller, which decides whether to log, redeliver
    or terminate.
    """

    pass


class PgNodeConfigError(PgNodeError):
    """Raised when instance manager configuration is invalid.

    Raised by domain entities (e.g., InstanceManagerSettings, PollingPolicy)
    and by the settings parser when validation fails.
    """

    pass


class EventDecodeError(PgNodeError):
    """Raised when an orchestration event payload cannot be decoded.

    Covers missing required fields, wrong field types and invalid
    base64 content. Never retried by the core.
    """

    pass


class CertificateDecodeError(EventDecodeError):
    """Raised when a certificate or private key field fails to decode.

    Attributes:
        field: The secret data key that failed (e.g., "tls.key").
        secret_name: Name of the secret being reconciled.
    """

    def __init__(self, message: str, field: str, secret_name: str) -> None:
        """Initialize CertificateDecodeError.

        Args:
            message: Human-readable error description.
            field: The secret data key that failed to decode.
            secret_name: Name of the secret being reconciled.
        """
        super().__init__(message)
        self.field = field
        self.secret_name = secret_name


class StatusConflictError(PgNodeError):
    """Raised when a cluster status write is rejected for a stale version token.

    Attributes:
        resource_version: The version token presented by the rejected write.
    """

    def __init__(self, message: str, resource_version: str | None = None) -> None:
        super().__init__(message)
        self.resource_version = resource_version


class StatusUpdateExhaustedError(PgNodeError):
    """Raised when every attempt of an optimistic status update conflicted.

    The last conflict is chained as ``__cause__``.

    Attributes:
        attempts: Number of write attempts performed.
    """

    def __init__(self, message: str, attempts: int) -> None:
        super().__init__(message)
        self.attempts = attempts


class EngineOperationError(PgNodeError):
    """Raised when an operation against the local database engine fails.

    Attributes:
        operation: Short name of the failing operation (e.g., "promote").
    """

    def __init__(self, message: str, operation: str) -> None:
        super().__init__(message)
        self.operation = operation


class EngineUnreachableError(EngineOperationError, ConnectionError):
    """Raised when the local engine does not accept connections.

    Subclasses ConnectionError so that RetryPolicy.is_transient_error
    classifies it as "still starting".
    """

    def __init__(self, message: str, operation: str = "connect") -> None:
        super().__init__(message, operation)


class WaitTimeoutError(PgNodeError):
    """Raised when a polling wait exceeds its attempt or duration bound.

    Attributes:
        description: What was being waited for.
        attempts: Number of polls performed.
    """

    def __init__(self, description: str, attempts: int) -> None:
        super().__init__(
            f"gave up waiting for {description} after {attempts} attempts"
        )
        self.description = description
        self.attempts = attempts


class WaitCancelledError(PgNodeError):
    """Raised when a polling wait is aborted through its cancellation token."""

    def __init__(self, description: str) -> None:
        super().__init__(f"wait for {description} was cancelled")
        self.description = description


class FatalReconciliationError(PgNodeError):
    """Raised when the node cannot continue and the process must terminate.

    The core never exits the process itself; InstanceSupervisor decides.
    """

    pass
