"""Port interfaces for the pgnode core package.

Ports define the contracts that adapters must implement.
These are Protocol classes (structural subtyping) for flexible testing.
"""

from __future__ import annotations

import os
import time
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from pgnode.domain.cluster import ClusterStatusRecord
    from pgnode.domain.instance import InstanceStatus
    from pgnode.domain.privileges import RoleStatement


@runtime_checkable
class AdminConnectionPort(Protocol):
    """Port interface for an administrative database connection.

    Contract:
        - ping() raises EngineUnreachableError while the engine is starting
        - fetch_one() runs a parameterized SELECT and returns the first row or None
        - execute() applies a RoleStatement with the role safely quoted
        - close() is idempotent
    """

    def ping(self) -> None:
        """Perform a trivial round-trip, connecting first if needed.

        Raises:
            EngineUnreachableError: If the engine does not accept connections.
        """
        ...

    def fetch_one(self, query: str, params: tuple[Any, ...] = ()) -> tuple[Any, ...] | None:
        """Run a parameterized query and return its first row."""
        ...

    def execute(self, statement: RoleStatement) -> None:
        """Apply a role statement."""
        ...

    def close(self) -> None:
        """Release the connection."""
        ...


@runtime_checkable
class PostgresInstancePort(Protocol):
    """Port interface for the local engine's administrative surface.

    Contract:
        - Query methods raise EngineOperationError on failure
        - promote_and_wait() blocks until promotion completes
        - shutdown() performs a fast, clean shutdown
        - reload() only requests a reload; there is no acknowledgment
    """

    def is_primary(self) -> bool:
        """Return True if the engine is not in recovery."""
        ...

    def is_wal_receiver_active(self) -> bool:
        """Return True while a WAL receiver streams from an upstream node."""
        ...

    def get_wal_apply_lag(self) -> int:
        """Return received-but-not-applied WAL in bytes."""
        ...

    def get_status(self) -> InstanceStatus:
        """Return role and pending-restart status."""
        ...

    def promote_and_wait(self) -> None:
        """Promote the engine and wait for completion."""
        ...

    def shutdown(self) -> None:
        """Shut the engine down so the process manager restarts it."""
        ...

    def reload(self) -> None:
        """Request a configuration and credential reload."""
        ...

    def connect_admin(self) -> AdminConnectionPort:
        """Return a private administrative connection handle."""
        ...


@runtime_checkable
class ClusterStatusStorePort(Protocol):
    """Port interface for the shared, externally stored cluster record.

    Contract:
        - get() returns the latest record including its version token
        - update_status() is a compare-and-swap on resource_version: a stale
          token raises StatusConflictError and nothing is written
    """

    def get(self, namespace: str, name: str) -> ClusterStatusRecord:
        """Fetch the current cluster record."""
        ...

    def update_status(self, record: ClusterStatusRecord) -> ClusterStatusRecord:
        """Write the record's status, returning the accepted record.

        Raises:
            StatusConflictError: If record.resource_version is stale.
        """
        ...


@runtime_checkable
class LoggingPort(Protocol):
    """Port interface for structured logging.

    Contract:
        - info/warning/error are fire-and-forget (no return value, no exceptions)
        - Implementations may format, filter, or route messages as needed
    """

    def info(self, message: str) -> None:
        ...

    def warning(self, message: str) -> None:
        ...

    def error(self, message: str) -> None:
        ...


@runtime_checkable
class ClockPort(Protocol):
    """Port interface for time and sleeping.

    Enables deterministic tests of polling loops through a fake clock.

    Contract:
        - get_time_seconds() is monotonic
        - sleep(seconds) blocks for the given duration
    """

    def get_time_seconds(self) -> float:
        ...

    def sleep(self, seconds: float) -> None:
        ...


class RealClock:
    """Default implementation: monotonic system time and real sleeping."""

    def get_time_seconds(self) -> float:
        """Return the monotonic clock in seconds."""
        return time.monotonic()

    def sleep(self, seconds: float) -> None:
        """Block the calling thread."""
        time.sleep(seconds)


class EnvironmentIdentityResolver:
    """Resolve the node identity from the environment.

    Reads POD_NAME, NAMESPACE, CLUSTER_NAME and PGDATA, the variables the
    hosting orchestrator injects into the instance container.
    """

    VARIABLES = {
        "pod_name": "POD_NAME",
        "namespace": "NAMESPACE",
        "cluster_name": "CLUSTER_NAME",
        "pgdata": "PGDATA",
    }

    def __init__(self, environ: dict[str, str] | None = None) -> None:
        self._environ = environ if environ is not None else dict(os.environ)

    def resolve(self) -> dict[str, str]:
        """Return the identity fields found in the environment.

        Missing variables are left out; values are stripped.

        Raises:
            ValueError: If a variable is set but empty or whitespace-only.
        """
        resolved: dict[str, str] = {}
        for field_name, variable in self.VARIABLES.items():
            if variable not in self._environ:
                continue
            value = self._environ[variable].strip()
            if not value:
                raise ValueError(f"{variable} cannot be empty or whitespace-only")
            resolved[field_name] = value
        return resolved
