"""Shared cluster status record."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field, replace
from typing import Any, Mapping

from pgnode.domain.exceptions import EventDecodeError


@dataclass(frozen=True)
class ClusterStatusRecord:
    """Snapshot of the cluster resource as seen by this node.

    The record is the single authority on which node should be primary.
    Writes are guarded by ``resource_version``: the store rejects a write
    whose token is not the latest one.

    Attributes:
        name: Cluster name.
        namespace: Cluster namespace.
        target_primary: Node that should hold the primary role.
        current_primary: Node that completed promotion, if any.
        instances: Number of cluster members.
        pending_restart: Whether the cluster reports a pending restart.
        resource_version: Opaque version token for optimistic concurrency.
        raw: Full resource object, kept so writes preserve unknown fields.
    """

    name: str
    namespace: str
    target_primary: str
    current_primary: str | None = None
    instances: int = 1
    pending_restart: bool = False
    resource_version: str | None = None
    raw: Mapping[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_object(cls, obj: Mapping[str, Any]) -> ClusterStatusRecord:
        """Decode a cluster resource object.

        Args:
            obj: Decoded cluster resource (metadata/spec/status mappings).

        Returns:
            The decoded record.

        Raises:
            EventDecodeError: If a required field is missing or has the wrong type.
        """
        metadata = _section(obj, "metadata")
        spec = _section(obj, "spec", required=False)
        status = _section(obj, "status", required=False)

        name = metadata.get("name")
        if not isinstance(name, str) or not name:
            raise EventDecodeError("cluster object has no metadata.name")

        target_primary = status.get("targetPrimary")
        if not isinstance(target_primary, str) or not target_primary:
            raise EventDecodeError(f"cluster {name} has no status.targetPrimary")

        instances = spec.get("instances", 1)
        if isinstance(instances, bool) or not isinstance(instances, int):
            raise EventDecodeError(
                f"cluster {name} has a non-integer spec.instances: {instances!r}"
            )

        current_primary = status.get("currentPrimary")
        resource_version = metadata.get("resourceVersion")

        return cls(
            name=name,
            namespace=str(metadata.get("namespace", "")),
            target_primary=target_primary,
            current_primary=current_primary if isinstance(current_primary, str) else None,
            instances=instances,
            pending_restart=bool(status.get("pendingRestart", False)),
            resource_version=str(resource_version) if resource_version is not None else None,
            raw=obj,
        )

    def with_current_primary(self, pod_name: str) -> ClusterStatusRecord:
        """Return a copy claiming ``pod_name`` as the current primary."""
        return replace(self, current_primary=pod_name)

    def is_target(self, pod_name: str) -> bool:
        """True if ``pod_name`` is the designated target primary."""
        return self.target_primary == pod_name

    def to_object(self) -> dict[str, Any]:
        """Encode the record back into a resource object for a status write.

        Unknown fields of the original object are preserved.
        """
        obj: dict[str, Any] = copy.deepcopy(dict(self.raw))
        metadata = obj.setdefault("metadata", {})
        metadata["name"] = self.name
        if self.namespace:
            metadata["namespace"] = self.namespace
        if self.resource_version is not None:
            metadata["resourceVersion"] = self.resource_version

        status = obj.setdefault("status", {})
        status["targetPrimary"] = self.target_primary
        if self.current_primary is not None:
            status["currentPrimary"] = self.current_primary
        return obj


def _section(
    obj: Mapping[str, Any], key: str, required: bool = True
) -> Mapping[str, Any]:
    """Return a nested mapping, or an empty one for optional sections."""
    value = obj.get(key)
    if value is None and not required:
        return {}
    if not isinstance(value, Mapping):
        raise EventDecodeError(f"cluster object has no {key} section")
    return value
