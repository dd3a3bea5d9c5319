"""Prometheus metrics adapter for pgnode.

Implements MetricsPort using prometheus-client library.
Gracefully handles missing prometheus-client (raises ImportError at init).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from prometheus_client import Counter, Gauge

    from pgnode.domain.configuration import RestartDecision


class PrometheusMetricsAdapter:
    """Prometheus implementation of MetricsPort.

    Creates gauges and counters with a configurable prefix (default 'pgnode_').
    Registration happens against the default registry unless one is given;
    exposing the registry over HTTP is left to the hosting process.

    This adapter requires prometheus-client to be installed:
        pip install pgnode-py[metrics]

    Raises:
        ImportError: If prometheus-client is not installed.
    """

    def __init__(self, prefix: str = "pgnode", registry: object | None = None) -> None:
        """Initialize Prometheus collectors.

        Args:
            prefix: Metric name prefix. Defaults to "pgnode".
            registry: Optional CollectorRegistry. Defaults to the global registry.
        """
        # Import here to make prometheus-client optional
        from prometheus_client import REGISTRY, Counter, Gauge

        target = registry if registry is not None else REGISTRY

        self._node_state: Gauge = Gauge(
            f"{prefix}_node_state",
            "Current node role: 1=PRIMARY, 0=REPLICA",
            registry=target,
        )
        self._promotions: Counter = Counter(
            f"{prefix}_promotions",
            "Number of completed promotions of the local instance",
            registry=target,
        )
        self._status_conflicts: Counter = Counter(
            f"{prefix}_status_conflicts",
            "Number of cluster status writes rejected for a stale version",
            registry=target,
        )
        self._restart_decisions: Counter = Counter(
            f"{prefix}_restart_decisions",
            "Restart decisions taken after a configuration reload",
            ["decision"],
            registry=target,
        )

    def set_node_state(self, is_primary: bool) -> None:
        """Set node state gauge (1 for primary, 0 for replica)."""
        self._node_state.set(1 if is_primary else 0)

    def record_promotion(self) -> None:
        self._promotions.inc()

    def record_status_conflict(self) -> None:
        self._status_conflicts.inc()

    def record_restart_decision(self, decision: RestartDecision) -> None:
        """Increment the counter labelled with the decision value."""
        self._restart_decisions.labels(decision=decision.value).inc()
