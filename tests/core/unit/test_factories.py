"""Unit tests for factory functions."""

from pathlib import Path
from unittest.mock import patch

import pytest

from pgnode.adapters.fakes import (
    FakeClock,
    FakeClusterStatusStore,
    FakeLoggingAdapter,
    FakePostgresInstance,
)
from pgnode.adapters.httpx_cluster_store import HttpxClusterStatusStore
from pgnode.adapters.logging_adapter import StdlibLoggingAdapter
from pgnode.adapters.metrics_port import NoOpMetricsAdapter
from pgnode.adapters.postgres_instance import PostgresInstance
from pgnode.context import ReconcilerContext
from pgnode.domain.cluster import ClusterStatusRecord
from pgnode.domain.events import ChangeType, ResourceKind
from pgnode.domain.settings import InstanceManagerSettings
from pgnode.factories import (
    PrometheusNotInstalledError,
    create_context,
    create_event_dispatcher,
    create_prometheus_metrics,
    create_supervisor,
)
from tests.core.unit.fakes.resources import (
    CLUSTER_NAME,
    NAMESPACE,
    OTHER_POD,
    POD_NAME,
    certificate_pair_data,
    cluster_object,
    config_map_object,
    event,
    secret_object,
)


def make_settings(tmp_path: Path) -> InstanceManagerSettings:
    """Helper to create settings rooted in a temporary directory."""
    pgdata = tmp_path / "pgdata"
    pgdata.mkdir(exist_ok=True)
    return InstanceManagerSettings(
        pod_name=POD_NAME,
        namespace=NAMESPACE,
        cluster_name=CLUSTER_NAME,
        pgdata=str(pgdata),
        certificate_dir=str(tmp_path / "certificates"),
    )


def fake_context(
    settings: InstanceManagerSettings, engine: FakePostgresInstance
) -> ReconcilerContext:
    return create_context(
        settings,
        engine=engine,
        cluster_store=FakeClusterStatusStore(
            ClusterStatusRecord.from_object(cluster_object())
        ),
        logger=FakeLoggingAdapter(),
        clock=FakeClock(),
    )


@pytest.mark.tier(1)
@pytest.mark.tra("UseCase.Factories")
class TestCreateContext:
    """Tests for create_context factory function."""

    def test_builds_real_adapters_by_default(self, tmp_path: Path) -> None:
        context = create_context(make_settings(tmp_path), token="t0ken")

        assert isinstance(context.engine, PostgresInstance)
        assert isinstance(context.cluster_store, HttpxClusterStatusStore)
        assert isinstance(context.logger, StdlibLoggingAdapter)
        assert isinstance(context.metrics, NoOpMetricsAdapter)
        assert context.instance.pod_name == POD_NAME

    def test_keeps_injected_adapters(self, tmp_path: Path) -> None:
        engine = FakePostgresInstance()
        context = fake_context(make_settings(tmp_path), engine)

        assert context.engine is engine
        assert isinstance(context.cluster_store, FakeClusterStatusStore)


@pytest.mark.tier(1)
@pytest.mark.tra("UseCase.Factories")
class TestCreateEventDispatcher:
    """Tests for create_event_dispatcher factory function."""

    def test_registers_three_kinds(self, tmp_path: Path) -> None:
        settings = make_settings(tmp_path)
        dispatcher = create_event_dispatcher(
            settings, fake_context(settings, FakePostgresInstance())
        )

        assert dispatcher.kinds == frozenset(
            {ResourceKind.CLUSTER, ResourceKind.CONFIG_MAP, ResourceKind.SECRET}
        )

    def test_secret_lands_in_certificate_dir(self, tmp_path: Path) -> None:
        settings = make_settings(tmp_path)
        engine = FakePostgresInstance()
        dispatcher = create_event_dispatcher(settings, fake_context(settings, engine))

        dispatcher.dispatch(
            event(
                ResourceKind.SECRET,
                ChangeType.MODIFIED,
                secret_object("cluster-example-server", certificate_pair_data()),
            )
        )

        assert (tmp_path / "certificates" / "server.crt").exists()
        assert engine.count("reload") == 1

    def test_config_lands_in_pgdata(self, tmp_path: Path) -> None:
        settings = make_settings(tmp_path)
        dispatcher = create_event_dispatcher(
            settings, fake_context(settings, FakePostgresInstance())
        )

        dispatcher.dispatch(
            event(ResourceKind.CONFIG_MAP, ChangeType.MODIFIED, config_map_object({"port": "5432"}))
        )

        assert (tmp_path / "pgdata" / "custom.conf").read_text() == "port = '5432'\n"


@pytest.mark.tier(1)
@pytest.mark.tra("UseCase.Factories")
class TestCreateSupervisor:
    """Tests for create_supervisor factory function."""

    def test_shares_cancellation_with_context(self, tmp_path: Path) -> None:
        settings = make_settings(tmp_path)
        context = fake_context(settings, FakePostgresInstance())

        supervisor = create_supervisor(settings, context)
        supervisor.stop()

        assert context.cancellation.cancelled is True

    def test_runs_cluster_events(self, tmp_path: Path) -> None:
        settings = make_settings(tmp_path)
        engine = FakePostgresInstance(is_primary=True)
        supervisor = create_supervisor(settings, fake_context(settings, engine))

        handled = supervisor.run(
            [
                event(
                    ResourceKind.CLUSTER,
                    ChangeType.MODIFIED,
                    cluster_object(target_primary=OTHER_POD),
                )
            ]
        )

        assert handled == 1
        assert engine.count("shutdown") == 1


@pytest.mark.tier(1)
@pytest.mark.tra("UseCase.Factories")
class TestPrometheusNotInstalledError:
    """Tests for PrometheusNotInstalledError."""

    def test_error_message_includes_install_instructions(self) -> None:
        error = PrometheusNotInstalledError()
        assert "prometheus-client is not installed" in str(error)
        assert "pip install pgnode-py[metrics]" in str(error)

    def test_is_import_error_subclass(self) -> None:
        assert isinstance(PrometheusNotInstalledError(), ImportError)

    def test_raised_when_prometheus_not_installed(self) -> None:
        """Factory raises PrometheusNotInstalledError when prometheus_client is missing."""
        with patch.dict(
            "sys.modules",
            {"prometheus_client": None, "pgnode.adapters.prometheus_metrics": None},
        ):
            with pytest.raises(PrometheusNotInstalledError):
                create_prometheus_metrics()
