"""SecretMaterializer use case: persist TLS material and reload the engine."""

from __future__ import annotations

from typing import Any, Mapping

from pgnode.context import ReconcilerContext
from pgnode.domain.certificates import (
    CertificateKind,
    CertificateLocations,
    CertificateMaterial,
)
from pgnode.domain.events import ChangeType, OrchestrationEvent
from pgnode.domain.exceptions import EventDecodeError
from pgnode.usecases.file_writer import AtomicFileWriter


class SecretMaterializer:
    """Writes certificate secrets to their well-known paths.

    The secret kind comes from the name suffix (-server, -replication, -ca).
    Every field is decoded before anything touches the disk, and the
    certificate and key of a pair are written together, so a corrupt field
    leaves all files as they were. A successful write is followed by a
    reload request.

    Added events are ignored: the instance manager applies secrets at
    start-up, before watching begins.
    """

    def __init__(
        self,
        context: ReconcilerContext,
        locations: CertificateLocations,
        writer: AtomicFileWriter | None = None,
    ) -> None:
        """Initialize the materializer.

        Args:
            context: Reconciler context.
            locations: Destination layout for certificate files.
            writer: File writer, AtomicFileWriter by default.
        """
        self.context = context
        self.locations = locations
        self.writer = writer or AtomicFileWriter()

    def handle(self, event: OrchestrationEvent) -> CertificateMaterial | None:
        """Reconcile one Secret event.

        Args:
            event: A Secret-kind event.

        Returns:
            The written material, or None if the event was a no-op.

        Raises:
            CertificateDecodeError: If a certificate or key field is invalid.
            EventDecodeError: If the secret has no name.
            EngineOperationError: If the reload request fails.
            OSError: If the files cannot be written.
        """
        if event.change_type is ChangeType.ADDED:
            return None

        name = event.name
        if name is None:
            raise EventDecodeError("secret has no metadata.name")

        kind = CertificateKind.classify(name)
        if kind is None:
            self.context.logger.info(f"Ignoring secret {name}: not a certificate secret")
            return None

        material = CertificateMaterial.from_secret_data(
            kind, name, _secret_data(event.payload), self.locations
        )

        files = [(material.certificate_path, material.certificate)]
        if material.private_key is not None and material.private_key_path is not None:
            files.append((material.private_key_path, material.private_key))
        self.writer.write_all(files)

        self.context.engine.reload()
        self.context.logger.info(
            f"Updated {kind.label} certificate from secret {name}, reload requested"
        )
        return material


def _secret_data(payload: Mapping[str, Any]) -> dict[str, object]:
    data = payload.get("data") or {}
    if not isinstance(data, Mapping):
        raise EventDecodeError("secret data is not a mapping")
    return dict(data)
