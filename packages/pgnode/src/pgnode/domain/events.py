"""Orchestration events delivered to the instance reconciler.

Events are immutable value objects consumed exactly once. They follow the
frozen dataclass pattern used throughout the domain layer.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping

from pgnode.domain.exceptions import EventDecodeError


class ResourceKind(Enum):
    """Closed set of resource kinds the reconciler distinguishes.

    Attributes:
        CLUSTER: The cluster resource carrying the shared status record.
        CONFIG_MAP: The generated engine configuration.
        SECRET: TLS certificate material.
        OTHER: Anything else; logged and ignored.
    """

    CLUSTER = "Cluster"
    CONFIG_MAP = "ConfigMap"
    SECRET = "Secret"
    OTHER = "Other"

    @classmethod
    def from_kind(cls, kind: str | None) -> ResourceKind:
        """Map a resource ``kind`` string to a ResourceKind, OTHER if unknown."""
        for member in cls:
            if member is not cls.OTHER and member.value == kind:
                return member
        return cls.OTHER


class ChangeType(Enum):
    """Type of change reported by the watch stream."""

    ADDED = "ADDED"
    MODIFIED = "MODIFIED"
    DELETED = "DELETED"


@dataclass(frozen=True)
class OrchestrationEvent:
    """A single watch event.

    Attributes:
        kind: Resource kind used for dispatching.
        change_type: Whether the resource was added, modified or deleted.
        payload: Opaque resource snapshot (decoded JSON object).
    """

    kind: ResourceKind
    change_type: ChangeType
    payload: Mapping[str, Any] = field(default_factory=dict, compare=False)

    @property
    def name(self) -> str | None:
        """Resource name from payload metadata, if present."""
        metadata = self.payload.get("metadata")
        if isinstance(metadata, Mapping):
            name = metadata.get("name")
            return name if isinstance(name, str) else None
        return None

    @classmethod
    def from_watch(cls, raw: Mapping[str, Any]) -> OrchestrationEvent:
        """Build an event from a watch stream object.

        Args:
            raw: Mapping shaped like ``{"type": "ADDED", "object": {...}}``.

        Returns:
            The decoded OrchestrationEvent.

        Raises:
            EventDecodeError: If the change type is unknown or the object is missing.
        """
        change = raw.get("type")
        try:
            change_type = ChangeType(change)
        except ValueError as e:
            raise EventDecodeError(f"unknown watch event type: {change!r}") from e

        payload = raw.get("object")
        if not isinstance(payload, Mapping):
            raise EventDecodeError("watch event has no object")

        return cls(
            kind=ResourceKind.from_kind(payload.get("kind")),
            change_type=change_type,
            payload=payload,
        )
