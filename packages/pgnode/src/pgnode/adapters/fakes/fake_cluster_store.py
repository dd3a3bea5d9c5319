"""Fake cluster status store for testing.

Provides a test double for ClusterStatusStorePort with real
compare-and-swap semantics on an integer version counter.
"""

from __future__ import annotations

from dataclasses import replace

from pgnode.domain.cluster import ClusterStatusRecord
from pgnode.domain.exceptions import StatusConflictError


class FakeClusterStatusStore:
    """In-memory ClusterStatusStorePort.

    Writes whose resource_version differs from the stored one are rejected
    with StatusConflictError. Accepted writes bump the version.

    Example:
        >>> store = FakeClusterStatusStore(record)
        >>> store.concurrent_write(target_primary="node-2")  # simulate another writer
    """

    def __init__(
        self,
        record: ClusterStatusRecord,
        get_errors: list[BaseException] | None = None,
        update_errors: list[BaseException] | None = None,
    ) -> None:
        """Initialize with the stored record.

        Args:
            record: Initial record. A missing resource_version starts at "1".
            get_errors: Errors raised by successive get() calls.
            update_errors: Errors raised by successive update_status() calls
                          before the version check.
        """
        self._record = (
            record if record.resource_version is not None else replace(record, resource_version="1")
        )
        self._get_errors = list(get_errors or [])
        self._update_errors = list(update_errors or [])
        self.get_calls = 0
        self.update_calls: list[ClusterStatusRecord] = []
        self.conflicts = 0

    @property
    def record(self) -> ClusterStatusRecord:
        """The currently stored record."""
        return self._record

    def _bump(self, record: ClusterStatusRecord) -> ClusterStatusRecord:
        version = int(self._record.resource_version or "0") + 1
        return replace(record, resource_version=str(version))

    def concurrent_write(self, **changes: object) -> None:
        """Simulate another writer modifying the record."""
        self._record = self._bump(replace(self._record, **changes))  # type: ignore[arg-type]

    def get(self, namespace: str, name: str) -> ClusterStatusRecord:
        self.get_calls += 1
        if self._get_errors:
            raise self._get_errors.pop(0)
        return self._record

    def update_status(self, record: ClusterStatusRecord) -> ClusterStatusRecord:
        self.update_calls.append(record)
        if self._update_errors:
            raise self._update_errors.pop(0)
        if record.resource_version != self._record.resource_version:
            self.conflicts += 1
            raise StatusConflictError(
                f"stale version {record.resource_version}, "
                f"current is {self._record.resource_version}",
                resource_version=record.resource_version,
            )
        self._record = self._bump(record)
        return self._record
