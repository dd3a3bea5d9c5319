"""TLS certificate material value objects."""

from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from pgnode.domain.exceptions import CertificateDecodeError

CERTIFICATE_KEY = "tls.crt"
PRIVATE_KEY_KEY = "tls.key"
CA_CERTIFICATE_KEY = "ca.crt"


class CertificateKind(Enum):
    """Kind of certificate secret, selected by the secret name suffix.

    The enum value is the suffix.
    """

    SERVER = "-server"
    STREAMING_REPLICATION = "-replication"
    CERTIFICATE_AUTHORITY = "-ca"

    @property
    def label(self) -> str:
        """Human-readable name used in log and error messages."""
        return self.name.lower().replace("_", "-")

    @classmethod
    def classify(cls, secret_name: str) -> CertificateKind | None:
        """Classify a secret by its name suffix, None if no suffix matches."""
        for kind in cls:
            if secret_name.endswith(kind.value):
                return kind
        return None


@dataclass(frozen=True)
class CertificateLocations:
    """Well-known destination paths for certificate material.

    Attributes:
        server_certificate: Server certificate file.
        server_key: Server private key file.
        replication_certificate: Streaming-replication client certificate file.
        replication_key: Streaming-replication client private key file.
        ca_certificate: Certificate authority file.
    """

    server_certificate: Path
    server_key: Path
    replication_certificate: Path
    replication_key: Path
    ca_certificate: Path

    @classmethod
    def in_directory(cls, directory: Path) -> CertificateLocations:
        """Build the standard file layout inside ``directory``."""
        return cls(
            server_certificate=directory / "server.crt",
            server_key=directory / "server.key",
            replication_certificate=directory / "streaming_replica.crt",
            replication_key=directory / "streaming_replica.key",
            ca_certificate=directory / "ca.crt",
        )

    def destinations(self, kind: CertificateKind) -> tuple[Path, Path | None]:
        """Return (certificate path, key path) for a kind; CA has no key."""
        if kind is CertificateKind.SERVER:
            return self.server_certificate, self.server_key
        if kind is CertificateKind.STREAMING_REPLICATION:
            return self.replication_certificate, self.replication_key
        return self.ca_certificate, None


@dataclass(frozen=True)
class CertificateMaterial:
    """Decoded certificate material ready to be written.

    Invariant: instances only exist once every required field decoded, so a
    partially decoded pair can never reach the filesystem.

    Attributes:
        kind: Which secret kind this material belongs to.
        certificate: Decoded certificate bytes.
        private_key: Decoded private key bytes, None for a CA secret.
        certificate_path: Destination of the certificate.
        private_key_path: Destination of the private key, None for a CA secret.
    """

    kind: CertificateKind
    certificate: bytes
    private_key: bytes | None
    certificate_path: Path
    private_key_path: Path | None

    @classmethod
    def from_secret_data(
        cls,
        kind: CertificateKind,
        secret_name: str,
        data: dict[str, object],
        locations: CertificateLocations,
    ) -> CertificateMaterial:
        """Decode base64 secret data into certificate material.

        Args:
            kind: Kind of the secret.
            secret_name: Secret name, used in error messages.
            data: The secret ``data`` mapping (base64 strings).
            locations: Destination layout.

        Returns:
            Fully decoded CertificateMaterial.

        Raises:
            CertificateDecodeError: If any required field is missing or invalid.
        """
        certificate_path, key_path = locations.destinations(kind)

        if kind is CertificateKind.CERTIFICATE_AUTHORITY:
            ca_certificate = _decode_field(data, CA_CERTIFICATE_KEY, kind, secret_name)
            return cls(kind, ca_certificate, None, certificate_path, None)

        certificate = _decode_field(data, CERTIFICATE_KEY, kind, secret_name)
        private_key = _decode_field(data, PRIVATE_KEY_KEY, kind, secret_name)
        return cls(kind, certificate, private_key, certificate_path, key_path)


def _decode_field(
    data: dict[str, object], key: str, kind: CertificateKind, secret_name: str
) -> bytes:
    """Decode one base64 field of a secret."""
    what = "private key" if key == PRIVATE_KEY_KEY else "certificate"
    value = data.get(key)
    if not isinstance(value, str):
        raise CertificateDecodeError(
            f"secret {secret_name} has no {kind.label} {what} ({key})",
            field=key,
            secret_name=secret_name,
        )
    try:
        return base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError) as e:
        raise CertificateDecodeError(
            f"while decoding {kind.label} {what} ({key}) of secret {secret_name}: {e}",
            field=key,
            secret_name=secret_name,
        ) from e
