"""Local instance identity and engine status value objects."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class LocalInstanceState:
    """Identity of the node this process manages.

    Created at process start and read-only for the reconciliation core.

    Attributes:
        pod_name: Node identity compared against the target primary.
        namespace: Namespace of the cluster resource.
        cluster_name: Name of the cluster resource.
        pgdata: Data directory of the local engine.
    """

    pod_name: str
    namespace: str
    cluster_name: str
    pgdata: Path


@dataclass(frozen=True)
class InstanceStatus:
    """Status read back from the local engine.

    Attributes:
        is_primary: True if the engine is not in recovery.
        pending_restart: True if a changed parameter needs a restart.
    """

    is_primary: bool
    pending_restart: bool
