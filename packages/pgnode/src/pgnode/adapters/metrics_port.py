"""Port interface and no-op implementation for metrics collection.

Metrics ports follow fire-and-forget semantics: implementations may
buffer, sample, or drop metrics as needed. No exceptions should propagate.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from pgnode.domain.configuration import RestartDecision


@runtime_checkable
class MetricsPort(Protocol):
    """Port interface for metrics collection.

    Contract:
        - All methods are fire-and-forget (no return value, no exceptions)
        - set_* methods update gauges, record_* methods increment counters
        - Implementations may no-op if metrics are disabled
    """

    def set_node_state(self, is_primary: bool) -> None:
        """Set the node role gauge (1=primary, 0=replica)."""
        ...

    def record_promotion(self) -> None:
        """Count a completed promotion."""
        ...

    def record_status_conflict(self) -> None:
        """Count a rejected cluster status write."""
        ...

    def record_restart_decision(self, decision: RestartDecision) -> None:
        """Count a post-reload restart decision."""
        ...


class NoOpMetricsAdapter:
    """No-operation metrics adapter for when metrics are disabled.

    All methods are no-ops. This allows use cases to unconditionally
    call metrics methods without checking if metrics are enabled.
    """

    def set_node_state(self, is_primary: bool) -> None:
        """No-op."""
        pass

    def record_promotion(self) -> None:
        """No-op."""
        pass

    def record_status_conflict(self) -> None:
        """No-op."""
        pass

    def record_restart_decision(self, decision: RestartDecision) -> None:
        """No-op."""
        pass
