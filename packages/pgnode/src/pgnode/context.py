"""Reconciler context shared by every use case."""

from __future__ import annotations

from dataclasses import dataclass, field

from pgnode.adapters.metrics_port import MetricsPort, NoOpMetricsAdapter
from pgnode.adapters.ports import (
    ClockPort,
    ClusterStatusStorePort,
    LoggingPort,
    PostgresInstancePort,
    RealClock,
)
from pgnode.domain.instance import LocalInstanceState
from pgnode.domain.retry import CancellationToken


@dataclass(frozen=True)
class ReconcilerContext:
    """Everything a reconciliation component needs from the outside world.

    Passed explicitly to every use case constructor; nothing is looked up
    from module-level state.

    Attributes:
        instance: Identity and data directory of the managed node.
        engine: Administrative surface of the local engine.
        cluster_store: Shared cluster status record store.
        logger: Logging port.
        metrics: Metrics port, no-op by default.
        clock: Time source used by polling loops.
        cancellation: Token aborting in-progress waits.
    """

    instance: LocalInstanceState
    engine: PostgresInstancePort
    cluster_store: ClusterStatusStorePort
    logger: LoggingPort
    metrics: MetricsPort = field(default_factory=NoOpMetricsAdapter)
    clock: ClockPort = field(default_factory=RealClock)
    cancellation: CancellationToken = field(default_factory=CancellationToken)
