"""Unit tests for DemotionHandler use case."""

import pytest

from pgnode.adapters.fakes import FakeMetricsAdapter, FakePostgresInstance
from pgnode.context import ReconcilerContext
from pgnode.domain.exceptions import EngineOperationError
from pgnode.usecases.demotion_handler import DemotionHandler
from tests.core.unit.fakes.resources import OTHER_POD


@pytest.mark.tier(1)
@pytest.mark.tra("UseCase.DemotionHandler")
class TestDemotionHandler:
    """Test DemotionHandler.execute()."""

    def test_replica_is_left_alone(
        self, context: ReconcilerContext, engine: FakePostgresInstance
    ) -> None:
        assert DemotionHandler(context).execute(OTHER_POD) is False
        assert engine.count("shutdown") == 0

    def test_stale_primary_is_shut_down(
        self,
        context: ReconcilerContext,
        engine: FakePostgresInstance,
        metrics: FakeMetricsAdapter,
    ) -> None:
        engine.primary = True

        assert DemotionHandler(context).execute(OTHER_POD) is True

        assert engine.calls == ["is_primary", "shutdown"]
        assert metrics.current_node_state is False

    def test_shutdown_error_propagates(self, context: ReconcilerContext) -> None:
        engine = FakePostgresInstance(
            is_primary=True,
            errors={"shutdown": EngineOperationError("pg_ctl stop failed", "stop")},
        )
        handler = DemotionHandler(
            ReconcilerContext(
                instance=context.instance,
                engine=engine,
                cluster_store=context.cluster_store,
                logger=context.logger,
            )
        )

        with pytest.raises(EngineOperationError, match="pg_ctl stop failed"):
            handler.execute(OTHER_POD)
