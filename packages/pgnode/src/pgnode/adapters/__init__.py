"""Interface adapters: ports plus engine, API server and logging adapters."""

from pgnode.adapters.ports import (
    AdminConnectionPort,
    ClockPort,
    ClusterStatusStorePort,
    EnvironmentIdentityResolver,
    LoggingPort,
    PostgresInstancePort,
    RealClock,
)
from pgnode.adapters.metrics_port import MetricsPort, NoOpMetricsAdapter
from pgnode.adapters.logging_adapter import StdlibLoggingAdapter
from pgnode.adapters.httpx_cluster_store import HttpxClusterStatusStore
from pgnode.adapters.postgres_instance import PostgresInstance
from pgnode.adapters.psycopg_admin_connection import PsycopgAdminConnection

__all__ = [
    "AdminConnectionPort",
    "ClockPort",
    "ClusterStatusStorePort",
    "EnvironmentIdentityResolver",
    "LoggingPort",
    "PostgresInstancePort",
    "RealClock",
    "MetricsPort",
    "NoOpMetricsAdapter",
    "StdlibLoggingAdapter",
    "HttpxClusterStatusStore",
    "PostgresInstance",
    "PsycopgAdminConnection",
]
