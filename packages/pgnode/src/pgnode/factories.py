"""Factory functions wiring settings and adapters into a ready reconciler.

Provides factory methods to build the event dispatcher and supervisor from
InstanceManagerSettings. Handles optional dependency imports gracefully.
"""

from __future__ import annotations

from pgnode.adapters.httpx_cluster_store import HttpxClusterStatusStore
from pgnode.adapters.logging_adapter import StdlibLoggingAdapter
from pgnode.adapters.metrics_port import MetricsPort, NoOpMetricsAdapter
from pgnode.adapters.ports import (
    ClockPort,
    ClusterStatusStorePort,
    LoggingPort,
    PostgresInstancePort,
    RealClock,
)
from pgnode.adapters.postgres_instance import PostgresInstance
from pgnode.context import ReconcilerContext
from pgnode.domain.events import ResourceKind
from pgnode.domain.retry import CancellationToken
from pgnode.domain.settings import InstanceManagerSettings
from pgnode.usecases.cluster_reconciler import ClusterReconciler
from pgnode.usecases.config_materializer import ConfigMaterializer
from pgnode.usecases.demotion_handler import DemotionHandler
from pgnode.usecases.event_dispatcher import EventDispatcher
from pgnode.usecases.privilege_provisioner import PrivilegeProvisioner
from pgnode.usecases.promotion_coordinator import PromotionCoordinator
from pgnode.usecases.secret_materializer import SecretMaterializer
from pgnode.usecases.supervisor import InstanceSupervisor


class PrometheusNotInstalledError(ImportError):
    """Raised when Prometheus metrics are requested but not installed.

    Install with: pip install pgnode-py[metrics]
    """

    def __init__(self) -> None:
        super().__init__(
            "prometheus-client is not installed. "
            "Install with: pip install pgnode-py[metrics]"
        )


def create_prometheus_metrics(
    prefix: str = "pgnode", registry: object | None = None
) -> MetricsPort:
    """Create a PrometheusMetricsAdapter.

    Raises:
        PrometheusNotInstalledError: If prometheus-client is not installed.
    """
    try:
        from pgnode.adapters.prometheus_metrics import PrometheusMetricsAdapter

        return PrometheusMetricsAdapter(prefix=prefix, registry=registry)
    except ImportError as exc:
        raise PrometheusNotInstalledError() from exc


def create_context(
    settings: InstanceManagerSettings,
    api_server_url: str = "https://kubernetes.default.svc",
    *,
    token: str | None = None,
    verify: str | bool = True,
    engine: PostgresInstancePort | None = None,
    cluster_store: ClusterStatusStorePort | None = None,
    logger: LoggingPort | None = None,
    metrics: MetricsPort | None = None,
    clock: ClockPort | None = None,
    cancellation: CancellationToken | None = None,
) -> ReconcilerContext:
    """Build a ReconcilerContext, creating real adapters for missing ports.

    Args:
        settings: Instance manager settings.
        api_server_url: Orchestration API server URL.
        token: Bearer token for the API server.
        verify: CA bundle path or TLS verification flag.
        engine: Engine port, PostgresInstance by default.
        cluster_store: Status store, HttpxClusterStatusStore by default.
        logger: Logging port, StdlibLoggingAdapter by default.
        metrics: Metrics port, no-op by default.
        clock: Clock port, RealClock by default.
        cancellation: Shared cancellation token.
    """
    instance = settings.instance
    return ReconcilerContext(
        instance=instance,
        engine=engine
        or PostgresInstance(
            instance.pgdata, settings.superuser_conninfo, settings.pg_ctl_path
        ),
        cluster_store=cluster_store
        or HttpxClusterStatusStore(
            api_server_url,
            api_group=settings.api_group,
            api_version=settings.api_version,
            token=token,
            verify=verify,
        ),
        logger=logger or StdlibLoggingAdapter(pod_name=settings.pod_name),
        metrics=metrics or NoOpMetricsAdapter(),
        clock=clock or RealClock(),
        cancellation=cancellation or CancellationToken(),
    )


def create_event_dispatcher(
    settings: InstanceManagerSettings, context: ReconcilerContext
) -> EventDispatcher:
    """Create an EventDispatcher with the Cluster, ConfigMap and Secret handlers.

    Args:
        settings: Instance manager settings.
        context: Reconciler context shared by every handler.

    Returns:
        A dispatcher ready to receive OrchestrationEvents.

    Example:
        >>> settings = InstanceManagerSettings(
        ...     pod_name="cluster-example-1",
        ...     namespace="default",
        ...     cluster_name="cluster-example",
        ...     pgdata="/var/lib/postgresql/data/pgdata",
        ... )
        >>> dispatcher = create_event_dispatcher(settings, create_context(settings))
    """
    promotion = PromotionCoordinator(
        context,
        wal_wait_policy=settings.wal_wait_policy,
        status_update_policy=settings.status_update_policy,
    )
    provisioner = PrivilegeProvisioner(
        context,
        settings.replication_user,
        probe_policy=settings.startup_probe_policy,
    )
    cluster = ClusterReconciler(
        context, promotion, DemotionHandler(context), provisioner
    )
    config = ConfigMaterializer(context, settings.configuration_file, settings.hba_file)
    secrets = SecretMaterializer(context, settings.certificate_locations)

    return EventDispatcher(
        {
            ResourceKind.CLUSTER: cluster.handle,
            ResourceKind.CONFIG_MAP: config.handle,
            ResourceKind.SECRET: secrets.handle,
        },
        context.logger,
    )


def create_supervisor(
    settings: InstanceManagerSettings,
    context: ReconcilerContext | None = None,
    **adapters: object,
) -> InstanceSupervisor:
    """Create an InstanceSupervisor around a fully wired dispatcher.

    The supervisor shares the context's cancellation token, so stop()
    aborts in-progress waits.

    Args:
        settings: Instance manager settings.
        context: Reconciler context, built by create_context() if omitted.
        **adapters: Keyword arguments forwarded to create_context().
    """
    if context is None:
        context = create_context(settings, **adapters)  # type: ignore[arg-type]
    return InstanceSupervisor(
        create_event_dispatcher(settings, context),
        context.logger,
        cancellation=context.cancellation,
    )
