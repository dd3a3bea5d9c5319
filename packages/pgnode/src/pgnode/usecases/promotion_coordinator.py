"""PromotionCoordinator use case: drain replication, promote, claim primary."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from pgnode.context import ReconcilerContext
from pgnode.domain.cluster import ClusterStatusRecord
from pgnode.domain.exceptions import StatusConflictError, StatusUpdateExhaustedError
from pgnode.domain.retry import PollingPolicy, RetryPolicy
from pgnode.usecases.condition_poller import ConditionPoller
from pgnode.usecases.optimistic_updater import OptimisticUpdater, UpdateStatus


class PromotionStep(Enum):
    """States of the promotion state machine, in execution order.

    Attributes:
        CHECK_ROLE: Query the local role; a primary stops here.
        WAIT_WAL_RECEIVER_DOWN: Wait until no WAL is streamed from elsewhere.
        WAIT_APPLY_ZERO: Wait until every received WAL record is applied.
        PROMOTE: Promote the engine and block until done.
        CLAIM_PRIMARY: Record the local node as current primary.
    """

    CHECK_ROLE = "check_role"
    WAIT_WAL_RECEIVER_DOWN = "wait_wal_receiver_down"
    WAIT_APPLY_ZERO = "wait_apply_zero"
    PROMOTE = "promote"
    CLAIM_PRIMARY = "claim_primary"


@dataclass(frozen=True)
class PromotionResult:
    """Result of a promotion run.

    Attributes:
        promoted: False when the node already was primary.
        record: Cluster record accepted by the store, None when not promoted.
        claim_attempts: Status write attempts performed.
    """

    promoted: bool
    record: ClusterStatusRecord | None = None
    claim_attempts: int = 0


class PromotionCoordinator:
    """Promotes the local node to primary.

    Walks PromotionStep in order. Promotion never starts while the WAL
    receiver is active or apply lag is positive. Waits are bounded by
    ``wal_wait_policy`` and abort when the context's cancellation token is
    cancelled. Promote failures are not retried. The status claim runs
    under OptimisticUpdater: a conflict refetches the record and retries,
    any other error propagates.

    Dependencies:
        - PostgresInstancePort: role, WAL state and promote
        - ClusterStatusStorePort: refetch and status write
    """

    def __init__(
        self,
        context: ReconcilerContext,
        wal_wait_policy: PollingPolicy | None = None,
        status_update_policy: RetryPolicy | None = None,
    ) -> None:
        """Initialize the coordinator.

        Args:
            context: Reconciler context.
            wal_wait_policy: Polling policy for both WAL waits.
            status_update_policy: Retry budget for the status claim.
        """
        self.context = context
        self.wal_wait_policy = wal_wait_policy or PollingPolicy(interval=1.0)
        self.status_update_policy = status_update_policy or RetryPolicy()
        self._poller = ConditionPoller(context.clock)
        self._step = PromotionStep.CHECK_ROLE

    @property
    def step(self) -> PromotionStep:
        """Last step entered by the most recent run."""
        return self._step

    def execute(self, record: ClusterStatusRecord) -> PromotionResult:
        """Promote the local node and claim the current primary field.

        Args:
            record: Cluster record designating the local node as target.

        Returns:
            PromotionResult for this run.

        Raises:
            WaitTimeoutError: A WAL wait exceeded its bound.
            WaitCancelledError: A WAL wait was cancelled.
            EngineOperationError: A query or the promote operation failed.
            StatusUpdateExhaustedError: Every status write conflicted.
        """
        engine = self.context.engine
        logger = self.context.logger
        pod_name = self.context.instance.pod_name

        self._step = PromotionStep.CHECK_ROLE
        if engine.is_primary():
            logger.info(f"{pod_name} is already primary, nothing to promote")
            return PromotionResult(promoted=False)

        self._step = PromotionStep.WAIT_WAL_RECEIVER_DOWN
        logger.info("Waiting for the WAL receiver to be down")
        self._poller.wait_until(
            lambda: not engine.is_wal_receiver_active(),
            self.wal_wait_policy,
            "WAL receiver to stop",
            self.context.cancellation,
        )

        self._step = PromotionStep.WAIT_APPLY_ZERO
        logger.info("Waiting for all received WAL to be applied")
        self._poller.wait_until(
            lambda: engine.get_wal_apply_lag() <= 0,
            self.wal_wait_policy,
            "WAL apply lag to reach zero",
            self.context.cancellation,
        )

        self._step = PromotionStep.PROMOTE
        logger.info(f"Promoting {pod_name}")
        engine.promote_and_wait()
        self.context.metrics.record_promotion()
        self.context.metrics.set_node_state(True)

        self._step = PromotionStep.CLAIM_PRIMARY
        accepted, attempts = self._claim_primary(record)
        logger.info(f"{pod_name} recorded as current primary of {record.name}")
        return PromotionResult(promoted=True, record=accepted, claim_attempts=attempts)

    def _claim_primary(self, record: ClusterStatusRecord) -> tuple[ClusterStatusRecord, int]:
        store = self.context.cluster_store
        pod_name = self.context.instance.pod_name
        namespace = record.namespace or self.context.instance.namespace

        updater = OptimisticUpdater(
            self.status_update_policy,
            self.context.clock,
            self.context.logger,
            on_conflict=self.context.metrics.record_status_conflict,
        )
        outcome = updater.apply(
            record,
            mutate=lambda current: current.with_current_primary(pod_name),
            write=store.update_status,
            refetch=lambda: store.get(namespace, record.name),
            is_conflict=lambda e: isinstance(e, StatusConflictError),
        )

        if outcome.succeeded and outcome.record is not None:
            return outcome.record, outcome.attempts
        if outcome.status is UpdateStatus.FAILED and outcome.last_error is not None:
            raise outcome.last_error
        raise StatusUpdateExhaustedError(
            f"cannot record {pod_name} as current primary of {record.name} "
            f"after {outcome.attempts} attempts",
            outcome.attempts,
        ) from outcome.last_error
