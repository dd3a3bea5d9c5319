"""Pytest configuration for pgnode core unit tests."""

from pathlib import Path
from typing import Any

import pytest

from pgnode.adapters.fakes import (
    FakeClock,
    FakeClusterStatusStore,
    FakeLoggingAdapter,
    FakeMetricsAdapter,
    FakePostgresInstance,
)
from pgnode.context import ReconcilerContext
from pgnode.domain.cluster import ClusterStatusRecord
from pgnode.domain.instance import LocalInstanceState
from tests.core.unit.fakes.resources import (
    CLUSTER_NAME,
    NAMESPACE,
    POD_NAME,
    cluster_object,
)


def pytest_configure(config: Any) -> None:
    """Register custom markers for unit tests."""
    config.addinivalue_line("markers", "unit: Unit tests (no external dependencies)")
    config.addinivalue_line("markers", "concurrency: Concurrency tests with threading")
    config.addinivalue_line(
        "markers", "property: Property-based tests using Hypothesis"
    )


@pytest.fixture
def instance(tmp_path: Path) -> LocalInstanceState:
    """Local node identity with a temporary data directory."""
    pgdata = tmp_path / "pgdata"
    pgdata.mkdir()
    return LocalInstanceState(
        pod_name=POD_NAME,
        namespace=NAMESPACE,
        cluster_name=CLUSTER_NAME,
        pgdata=pgdata,
    )


@pytest.fixture
def engine() -> FakePostgresInstance:
    return FakePostgresInstance()


@pytest.fixture
def store() -> FakeClusterStatusStore:
    return FakeClusterStatusStore(ClusterStatusRecord.from_object(cluster_object()))


@pytest.fixture
def logger() -> FakeLoggingAdapter:
    return FakeLoggingAdapter()


@pytest.fixture
def metrics() -> FakeMetricsAdapter:
    return FakeMetricsAdapter()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def context(
    instance: LocalInstanceState,
    engine: FakePostgresInstance,
    store: FakeClusterStatusStore,
    logger: FakeLoggingAdapter,
    metrics: FakeMetricsAdapter,
    clock: FakeClock,
) -> ReconcilerContext:
    """Reconciler context wired with fakes; override a fixture to customize."""
    return ReconcilerContext(
        instance=instance,
        engine=engine,
        cluster_store=store,
        logger=logger,
        metrics=metrics,
        clock=clock,
    )
