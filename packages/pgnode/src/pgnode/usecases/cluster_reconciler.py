"""ClusterReconciler use case: react to the designated target primary."""

from __future__ import annotations

from pgnode.context import ReconcilerContext
from pgnode.domain.cluster import ClusterStatusRecord
from pgnode.domain.events import ChangeType, OrchestrationEvent
from pgnode.usecases.demotion_handler import DemotionHandler
from pgnode.usecases.privilege_provisioner import PrivilegeProvisioner
from pgnode.usecases.promotion_coordinator import PromotionCoordinator


class ClusterReconciler:
    """Promotes or demotes the local node according to the cluster record.

    If the local node is the target primary it is promoted. The first
    observation of the cluster (an Added event) also provisions the
    replication role; a promotion failure on that event is logged and
    dropped because this path cannot retry it. On any other change type
    errors propagate. A node that is not the target is demoted if needed.
    """

    def __init__(
        self,
        context: ReconcilerContext,
        promotion: PromotionCoordinator,
        demotion: DemotionHandler,
        provisioner: PrivilegeProvisioner,
    ) -> None:
        """Initialize the reconciler.

        Args:
            context: Reconciler context.
            promotion: Promotion coordinator.
            demotion: Demotion handler.
            provisioner: Privilege provisioner run on first activation.
        """
        self.context = context
        self.promotion = promotion
        self.demotion = demotion
        self.provisioner = provisioner

    def handle(self, event: OrchestrationEvent) -> None:
        """Reconcile one Cluster event.

        Raises:
            EventDecodeError: If the payload is not a valid cluster object.
            FatalReconciliationError: If provisioning cannot reach the engine.
            Exception: Promotion or demotion errors, except on Added events.
        """
        record = ClusterStatusRecord.from_object(event.payload)
        pod_name = self.context.instance.pod_name

        if not record.is_target(pod_name):
            self.demotion.execute(record.target_primary)
            return

        if event.change_type is not ChangeType.ADDED:
            self.promotion.execute(record)
            return

        try:
            self.promotion.execute(record)
        except Exception as e:
            self.context.logger.error(
                f"Error while promoting {pod_name} on cluster {record.name} creation: {e}"
            )
            return

        self.provisioner.execute()
