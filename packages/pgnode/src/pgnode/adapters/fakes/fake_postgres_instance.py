"""Fake local engine and admin connection for testing.

Provides test doubles for PostgresInstancePort and AdminConnectionPort that
replay scripted status sequences and record every operation.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any

from pgnode.domain.exceptions import EngineUnreachableError
from pgnode.domain.instance import InstanceStatus
from pgnode.domain.privileges import (
    REWIND_FUNCTIONS,
    ReplicationPrivilegeSet,
    RoleStatement,
)


class FakeAdminConnection:
    """Fake implementation of AdminConnectionPort.

    Simulates the replication role in the system catalogs. Role statements
    update the simulated role so a second provisioning run observes the
    privileges granted by the first one.

    Example:
        >>> conn = FakeAdminConnection(role=None)
        >>> conn.ping()
        >>> conn.fetch_one("SELECT rolcanlogin FROM pg_roles WHERE rolname = %s", ("r",))
    """

    def __init__(
        self,
        role: ReplicationPrivilegeSet | None = None,
        ping_errors: list[BaseException] | None = None,
    ) -> None:
        """Initialize the fake.

        Args:
            role: Privileges of the existing replication role, None if absent.
            ping_errors: Errors raised by successive ping() calls before success.
        """
        self.role = role
        self._granted: set[str] = (
            set(REWIND_FUNCTIONS) if role is not None and role.has_rewind_grants else set()
        )
        self._ping_errors = list(ping_errors or [])
        self.pings = 0
        self.queries: list[str] = []
        self.statements: list[RoleStatement] = []
        self.closed = False

    def ping(self) -> None:
        self.pings += 1
        if self._ping_errors:
            raise self._ping_errors.pop(0)

    def fetch_one(
        self, query: str, params: tuple[Any, ...] = ()
    ) -> tuple[Any, ...] | None:
        self.queries.append(query)
        if "has_function_privilege" in query:
            return (self._granted >= set(REWIND_FUNCTIONS),)
        if "pg_roles" in query:
            if self.role is None:
                return None
            return (self.role.can_login, self.role.can_replicate, self.role.is_superuser)
        return None

    def execute(self, statement: RoleStatement) -> None:
        self.statements.append(statement)
        current = self.role or ReplicationPrivilegeSet()
        template = statement.template
        if template.startswith("CREATE USER"):
            self.role = ReplicationPrivilegeSet(can_login=True, can_replicate=True)
        elif template.endswith("LOGIN REPLICATION"):
            self.role = replace(current, can_login=True, can_replicate=True)
        elif template.endswith("SUPERUSER"):
            self.role = replace(current, is_superuser=True)
        elif template.startswith("GRANT EXECUTE"):
            for function in REWIND_FUNCTIONS:
                if f" {function} " in template:
                    self._granted.add(function)

    def close(self) -> None:
        self.closed = True

    def statements_starting_with(self, prefix: str) -> list[str]:
        """Return rendered statements whose text starts with ``prefix``."""
        return [str(s) for s in self.statements if str(s).startswith(prefix)]


class FakePostgresInstance:
    """Fake implementation of PostgresInstancePort.

    Status sequences are replayed one value per call; the last value repeats.
    Every call is appended to ``calls`` in order.
    """

    def __init__(
        self,
        is_primary: bool = False,
        wal_receiver_active: list[bool] | None = None,
        apply_lag: list[int] | None = None,
        pending_restart: bool = False,
        admin_connection: FakeAdminConnection | None = None,
        errors: dict[str, BaseException] | None = None,
    ) -> None:
        """Initialize the fake.

        Args:
            is_primary: Initial role.
            wal_receiver_active: Values returned by is_wal_receiver_active().
            apply_lag: Values returned by get_wal_apply_lag().
            pending_restart: Value reported by get_status().
            admin_connection: Connection returned by connect_admin().
            errors: Operation name -> exception raised by that operation.
        """
        self.primary = is_primary
        self._wal_receiver = list(wal_receiver_active or [False])
        self._apply_lag = list(apply_lag or [0])
        self.pending_restart = pending_restart
        self.admin_connection = admin_connection or FakeAdminConnection()
        self._errors = dict(errors or {})
        self.calls: list[str] = []

    def _record(self, operation: str) -> None:
        self.calls.append(operation)
        if operation in self._errors:
            raise self._errors[operation]

    @staticmethod
    def _next(values: list[Any]) -> Any:
        return values.pop(0) if len(values) > 1 else values[0]

    def count(self, operation: str) -> int:
        """Number of times ``operation`` was called."""
        return self.calls.count(operation)

    def is_primary(self) -> bool:
        self._record("is_primary")
        return self.primary

    def is_wal_receiver_active(self) -> bool:
        self._record("is_wal_receiver_active")
        return bool(self._next(self._wal_receiver))

    def get_wal_apply_lag(self) -> int:
        self._record("get_wal_apply_lag")
        return int(self._next(self._apply_lag))

    def get_status(self) -> InstanceStatus:
        self._record("get_status")
        return InstanceStatus(is_primary=self.primary, pending_restart=self.pending_restart)

    def promote_and_wait(self) -> None:
        self._record("promote_and_wait")
        self.primary = True

    def shutdown(self) -> None:
        self._record("shutdown")

    def reload(self) -> None:
        self._record("reload")

    def connect_admin(self) -> FakeAdminConnection:
        self._record("connect_admin")
        return self.admin_connection


def unreachable(message: str = "connection refused") -> EngineUnreachableError:
    """Build the error a starting engine reports to a ping."""
    return EngineUnreachableError(message, "ping")
