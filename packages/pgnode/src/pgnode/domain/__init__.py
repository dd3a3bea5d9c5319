"""Domain layer: Entities with zero external dependencies."""

from pgnode.domain.certificates import (
    CertificateKind,
    CertificateLocations,
    CertificateMaterial,
)
from pgnode.domain.cluster import ClusterStatusRecord
from pgnode.domain.configuration import (
    ConfigurationSnapshot,
    RestartDecision,
    decide_restart,
)
from pgnode.domain.events import ChangeType, OrchestrationEvent, ResourceKind
from pgnode.domain.exceptions import PgNodeConfigError, PgNodeError
from pgnode.domain.instance import InstanceStatus, LocalInstanceState
from pgnode.domain.privileges import ReplicationPrivilegeSet, RoleStatement
from pgnode.domain.retry import CancellationToken, PollingPolicy, RetryPolicy
from pgnode.domain.settings import InstanceManagerSettings

__all__ = [
    "CertificateKind",
    "CertificateLocations",
    "CertificateMaterial",
    "ClusterStatusRecord",
    "ConfigurationSnapshot",
    "RestartDecision",
    "decide_restart",
    "ChangeType",
    "OrchestrationEvent",
    "ResourceKind",
    "PgNodeConfigError",
    "PgNodeError",
    "InstanceStatus",
    "LocalInstanceState",
    "ReplicationPrivilegeSet",
    "RoleStatement",
    "CancellationToken",
    "PollingPolicy",
    "RetryPolicy",
    "InstanceManagerSettings",
]
