"""DemotionHandler use case."""

from __future__ import annotations

from pgnode.context import ReconcilerContext


class DemotionHandler:
    """Shuts down a primary that is no longer the designated target.

    The process manager restarts the engine, which comes back as a replica
    following the current target primary. A replica is left untouched.
    """

    def __init__(self, context: ReconcilerContext) -> None:
        self.context = context

    def execute(self, target_primary: str) -> bool:
        """Demote the local node if it is primary.

        Args:
            target_primary: Node the cluster record designates as primary.

        Returns:
            True if a shutdown was issued.

        Raises:
            EngineOperationError: If the role query or the shutdown fails.
        """
        if not self.context.engine.is_primary():
            return False

        self.context.logger.info(
            f"{self.context.instance.pod_name} is primary but the target is "
            f"{target_primary}, shutting down to restart as replica"
        )
        self.context.engine.shutdown()
        self.context.metrics.set_node_state(False)
        return True
