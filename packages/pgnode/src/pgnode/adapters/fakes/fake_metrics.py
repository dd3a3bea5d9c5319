"""Fake metrics adapter for testing.

Provides a test double for MetricsPort that records all metric updates
for assertion in tests.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pgnode.domain.configuration import RestartDecision


@dataclass(frozen=True)
class MetricCall:
    """Record of a single metric update.

    Attributes:
        metric_name: Name of the metric that was updated.
        value: Value that was set, or None for counter increments.
    """

    metric_name: str
    value: float | int | bool | str | None = None


class FakeMetricsAdapter:
    """Fake implementation of MetricsPort for testing.

    Example:
        >>> fake = FakeMetricsAdapter()
        >>> fake.set_node_state(True)
        >>> fake.current_node_state
        True
    """

    def __init__(self) -> None:
        """Initialize with no recorded state."""
        self._node_state: bool | None = None
        self.promotions = 0
        self.status_conflicts = 0
        self.restart_decisions: list[str] = []
        self._calls: list[MetricCall] = []

    @property
    def calls(self) -> list[MetricCall]:
        """Return a copy of all metric update calls in order."""
        return list(self._calls)

    @property
    def current_node_state(self) -> bool | None:
        """Return last set node state, or None if never set."""
        return self._node_state

    def set_node_state(self, is_primary: bool) -> None:
        self._node_state = is_primary
        self._calls.append(MetricCall("node_state", is_primary))

    def record_promotion(self) -> None:
        self.promotions += 1
        self._calls.append(MetricCall("promotions"))

    def record_status_conflict(self) -> None:
        self.status_conflicts += 1
        self._calls.append(MetricCall("status_conflicts"))

    def record_restart_decision(self, decision: RestartDecision) -> None:
        self.restart_decisions.append(decision.value)
        self._calls.append(MetricCall("restart_decisions", decision.value))

    def reset(self) -> None:
        """Reset all state and calls."""
        self._node_state = None
        self.promotions = 0
        self.status_conflicts = 0
        self.restart_decisions.clear()
        self._calls.clear()
