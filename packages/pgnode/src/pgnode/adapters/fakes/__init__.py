"""Fake adapters for testing.

This module provides test doubles for port interfaces, enabling
deterministic testing without a running database or API server.
"""

from pgnode.adapters.fakes.fake_clock import FakeClock
from pgnode.adapters.fakes.fake_cluster_store import FakeClusterStatusStore
from pgnode.adapters.fakes.fake_logging_adapter import FakeLoggingAdapter
from pgnode.adapters.fakes.fake_metrics import FakeMetricsAdapter, MetricCall
from pgnode.adapters.fakes.fake_postgres_instance import (
    FakeAdminConnection,
    FakePostgresInstance,
    unreachable,
)

__all__ = [
    "FakeClock",
    "FakeClusterStatusStore",
    "FakeLoggingAdapter",
    "FakeMetricsAdapter",
    "MetricCall",
    "FakeAdminConnection",
    "FakePostgresInstance",
    "unreachable",
]
