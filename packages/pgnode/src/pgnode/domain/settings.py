"""Instance manager settings domain entity."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from pgnode.domain.certificates import CertificateLocations
from pgnode.domain.exceptions import PgNodeConfigError
from pgnode.domain.instance import LocalInstanceState
from pgnode.domain.retry import UNBOUNDED_ATTEMPTS, PollingPolicy, RetryPolicy


@dataclass(frozen=True)
class InstanceManagerSettings:
    """Configuration of the per-node instance manager.

    Domain entity with zero external dependencies. Validated on creation.
    """

    pod_name: str
    namespace: str
    cluster_name: str
    pgdata: str
    certificate_dir: str = "/controller/certificates"
    replication_user: str = "streaming_replica"
    superuser_conninfo: str = "host=/controller/run dbname=postgres user=postgres"
    pg_ctl_path: str = "pg_ctl"
    api_group: str = "postgresql.k8s.enterprisedb.io"
    api_version: str = "v1alpha1"
    wal_wait_interval: float = 1.0
    wal_wait_timeout: float | None = 600.0
    startup_probe_interval: float = 1.0
    startup_probe_max_attempts: int = UNBOUNDED_ATTEMPTS
    status_update_retries: int = 4
    status_update_backoff: float = 0.01

    def __post_init__(self) -> None:
        """Validate settings after initialization."""
        self._validate_identity()
        self._validate_paths()
        self._validate_timing()

    def _validate_identity(self) -> None:
        """Validate identity fields are non-empty and have no surrounding whitespace."""
        for field_name in ("pod_name", "namespace", "cluster_name", "replication_user"):
            value = getattr(self, field_name)
            if not value or not value.strip():
                raise PgNodeConfigError(
                    f"{field_name} cannot be empty or whitespace-only"
                )
            if value != value.strip():
                raise PgNodeConfigError(
                    f"{field_name} cannot have leading/trailing whitespace, got: {value!r}"
                )

    def _validate_paths(self) -> None:
        """Validate that paths are absolute and don't contain traversal."""
        for path_name, path_value in [
            ("pgdata", self.pgdata),
            ("certificate_dir", self.certificate_dir),
        ]:
            # Check for null bytes first (security issue)
            if "\x00" in path_value:
                raise PgNodeConfigError(
                    f"{path_name} contains null byte, got: {path_value!r}"
                )
            path = Path(path_value)
            if ".." in path.parts:
                raise PgNodeConfigError(
                    f"{path_name} contains path traversal, got: {path_value}"
                )
            if not path.is_absolute():
                raise PgNodeConfigError(
                    f"{path_name} must be an absolute path, got: {path_value}"
                )

    def _validate_timing(self) -> None:
        """Validate intervals, timeouts and retry budgets."""
        if self.wal_wait_interval <= 0:
            raise PgNodeConfigError("wal_wait_interval must be positive")
        if self.wal_wait_timeout is not None and self.wal_wait_timeout <= 0:
            raise PgNodeConfigError("wal_wait_timeout must be positive or None")
        if self.startup_probe_interval <= 0:
            raise PgNodeConfigError("startup_probe_interval must be positive")
        if self.startup_probe_max_attempts < 1:
            raise PgNodeConfigError("startup_probe_max_attempts must be at least 1")
        if self.status_update_retries < 0:
            raise PgNodeConfigError("status_update_retries cannot be negative")
        if self.status_update_backoff <= 0:
            raise PgNodeConfigError("status_update_backoff must be positive")

    @property
    def instance(self) -> LocalInstanceState:
        """Identity of the managed node."""
        return LocalInstanceState(
            pod_name=self.pod_name,
            namespace=self.namespace,
            cluster_name=self.cluster_name,
            pgdata=Path(self.pgdata),
        )

    @property
    def certificate_locations(self) -> CertificateLocations:
        """Destination layout for TLS material."""
        return CertificateLocations.in_directory(Path(self.certificate_dir))

    @property
    def configuration_file(self) -> Path:
        """File receiving the rendered engine parameters."""
        return Path(self.pgdata) / "custom.conf"

    @property
    def hba_file(self) -> Path:
        """File receiving host-based authentication rules."""
        return Path(self.pgdata) / "pg_hba.conf"

    @property
    def wal_wait_policy(self) -> PollingPolicy:
        """Polling policy for the WAL receiver and apply-lag waits."""
        return PollingPolicy(
            interval=self.wal_wait_interval, max_duration=self.wal_wait_timeout
        )

    @property
    def startup_probe_policy(self) -> PollingPolicy:
        """Polling policy for the startup liveness probe."""
        return PollingPolicy(
            interval=self.startup_probe_interval,
            max_attempts=self.startup_probe_max_attempts,
        )

    @property
    def status_update_policy(self) -> RetryPolicy:
        """Retry budget for optimistic cluster status writes."""
        return RetryPolicy(
            max_retries=self.status_update_retries,
            backoff_base=self.status_update_backoff,
            max_backoff=self.status_update_backoff,
        )
