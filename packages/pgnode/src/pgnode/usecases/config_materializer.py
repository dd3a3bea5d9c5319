"""ConfigMaterializer use case: apply configuration and decide on restart."""

from __future__ import annotations

from pathlib import Path

from pgnode.context import ReconcilerContext
from pgnode.domain.configuration import (
    ConfigurationSnapshot,
    RestartDecision,
    decide_restart,
)
from pgnode.domain.events import ChangeType, OrchestrationEvent
from pgnode.usecases.file_writer import AtomicFileWriter


class ConfigMaterializer:
    """Renders a ConfigMap to the engine configuration and reloads it.

    After the reload the engine reports whether any changed parameter needs
    a restart. The restart happens now on a replica or on the sole member
    of the cluster. A primary with replicas defers it to a switchover.

    Added events are ignored: the configuration in place at start-up
    already reflects the initial ConfigMap.
    """

    def __init__(
        self,
        context: ReconcilerContext,
        configuration_file: Path,
        hba_file: Path,
        writer: AtomicFileWriter | None = None,
    ) -> None:
        """Initialize the materializer.

        Args:
            context: Reconciler context.
            configuration_file: Destination of rendered parameters.
            hba_file: Destination of host-based authentication rules.
            writer: File writer, AtomicFileWriter by default.
        """
        self.context = context
        self.configuration_file = Path(configuration_file)
        self.hba_file = Path(hba_file)
        self.writer = writer or AtomicFileWriter()

    def handle(self, event: OrchestrationEvent) -> RestartDecision | None:
        """Reconcile one ConfigMap event.

        Args:
            event: A ConfigMap-kind event.

        Returns:
            The restart decision, or None if the event was a no-op.

        Raises:
            EventDecodeError: If the ConfigMap data is malformed.
            EngineOperationError: If reload, status query or shutdown fails.
            OSError: If the files cannot be written.
        """
        if event.change_type is ChangeType.ADDED:
            return None

        snapshot = ConfigurationSnapshot.from_config_map(event.payload)
        files = [(self.configuration_file, snapshot.render().encode("utf-8"))]
        if snapshot.hba is not None:
            files.append((self.hba_file, snapshot.hba.encode("utf-8")))
        self.writer.write_all(files)

        engine = self.context.engine
        engine.reload()
        self.context.logger.info(
            f"Wrote {len(snapshot.parameters)} parameters to "
            f"{self.configuration_file}, reload requested"
        )

        status = engine.get_status()
        instance = self.context.instance
        cluster = self.context.cluster_store.get(instance.namespace, instance.cluster_name)

        decision = decide_restart(status.pending_restart, status.is_primary, cluster.instances)
        self.context.metrics.record_restart_decision(decision)

        if decision is RestartDecision.RESTART:
            self.context.logger.info("Configuration requires a restart, shutting down")
            engine.shutdown()
        elif decision is RestartDecision.DEFER:
            self.context.logger.info(
                "Configuration requires a restart, deferred to a switchover "
                f"({cluster.instances} instances)"
            )
        return decision
