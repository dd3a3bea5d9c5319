"""PrivilegeProvisioner use case: ensure replication role privileges."""

from __future__ import annotations

from pgnode.adapters.ports import AdminConnectionPort
from pgnode.context import ReconcilerContext
from pgnode.domain.exceptions import FatalReconciliationError, WaitTimeoutError
from pgnode.domain.privileges import (
    LAST_SUPERUSER_REWIND_VERSION,
    REWIND_FUNCTIONS,
    ReplicationPrivilegeSet,
    RoleStatement,
)
from pgnode.domain.retry import UNBOUNDED_ATTEMPTS, PollingPolicy, RetryPolicy
from pgnode.usecases.condition_poller import ConditionPoller
from pgnode.usecases.major_version_reader import MajorVersionReader

ROLE_QUERY = (
    "SELECT rolcanlogin, rolreplication, rolsuper "
    "FROM pg_catalog.pg_roles WHERE rolname = %s"
)

REWIND_PRIVILEGES_QUERY = "SELECT " + " AND ".join(
    f"has_function_privilege(%s, '{function}', 'execute')"
    for function in REWIND_FUNCTIONS
)


class PrivilegeProvisioner:
    """Gives the replication role what streaming and pg_rewind need.

    Runs on first activation of an instance. Waits for the engine to accept
    connections, then creates or fixes the replication role. Engines up to
    major version 10 need a superuser for pg_rewind; later ones need
    execute grants on four file access functions.

    Every step checks before it changes anything, so a second run against a
    fully provisioned role issues no statement.

    A probe error that does not mean "still starting", or an exhausted
    probe budget, raises FatalReconciliationError. Terminating the process
    is left to InstanceSupervisor.
    """

    def __init__(
        self,
        context: ReconcilerContext,
        replication_user: str,
        probe_policy: PollingPolicy | None = None,
        version_reader: MajorVersionReader | None = None,
    ) -> None:
        """Initialize the provisioner.

        Args:
            context: Reconciler context.
            replication_user: Name of the streaming replication role.
            probe_policy: Startup probe policy, 1s interval and a practically
                         unbounded attempt budget by default.
            version_reader: Source of the major version, read from the
                           context's data directory by default.
        """
        self.context = context
        self.replication_user = replication_user
        self.probe_policy = probe_policy or PollingPolicy(
            interval=1.0, max_attempts=UNBOUNDED_ATTEMPTS
        )
        self.version_reader = version_reader or MajorVersionReader(context.instance.pgdata)
        self._transient = RetryPolicy()
        self._poller = ConditionPoller(context.clock)

    def execute(self) -> list[RoleStatement]:
        """Provision the replication role.

        Returns:
            Statements applied, empty when nothing needed changing.

        Raises:
            EngineOperationError: If the version cannot be read or a query fails.
            FatalReconciliationError: If the startup probe failed for good.
            WaitCancelledError: If the probe was cancelled.
        """
        major_version = self.version_reader.read()
        connection = self.context.engine.connect_admin()
        try:
            self._wait_for_engine(connection)
            return self._provision(connection, major_version)
        finally:
            connection.close()

    def _wait_for_engine(self, connection: AdminConnectionPort) -> None:
        def accepts_connections() -> bool:
            try:
                connection.ping()
            except Exception as e:
                if self._transient.is_transient_error(e):
                    return False
                raise FatalReconciliationError(f"startup probe failed: {e}") from e
            return True

        try:
            self._poller.wait_until(
                accepts_connections,
                self.probe_policy,
                "the engine to accept connections",
                self.context.cancellation,
            )
        except WaitTimeoutError as e:
            raise FatalReconciliationError(f"startup probe failed: {e}") from e

    def _provision(
        self, connection: AdminConnectionPort, major_version: int
    ) -> list[RoleStatement]:
        role = self.replication_user
        applied: list[RoleStatement] = []

        def apply(statement: RoleStatement) -> None:
            self.context.logger.info(f"Applying: {statement}")
            connection.execute(statement)
            applied.append(statement)

        privileges = self._read_role(connection, major_version)
        if privileges is None:
            apply(RoleStatement.create_replication_user(role))
            # A new role holds no function grants.
            privileges = ReplicationPrivilegeSet(can_login=True, can_replicate=True)
        elif not privileges.can_stream:
            apply(RoleStatement.grant_login_replication(role))

        if major_version <= LAST_SUPERUSER_REWIND_VERSION:
            if not privileges.is_superuser:
                apply(RoleStatement.grant_superuser(role))
        elif not privileges.has_rewind_grants:
            for function in REWIND_FUNCTIONS:
                apply(RoleStatement.grant_execute(function, role))

        return applied

    def _read_role(
        self, connection: AdminConnectionPort, major_version: int
    ) -> ReplicationPrivilegeSet | None:
        """Observed privileges of the replication role, None if it does not exist.

        Rewind grants are only checked on versions where pg_rewind relies on them.
        """
        role = self.replication_user
        row = connection.fetch_one(ROLE_QUERY, (role,))
        if row is None:
            return None
        can_login, can_replicate, is_superuser = row

        has_rewind_grants = False
        if major_version > LAST_SUPERUSER_REWIND_VERSION:
            grants = connection.fetch_one(
                REWIND_PRIVILEGES_QUERY, (role,) * len(REWIND_FUNCTIONS)
            )
            has_rewind_grants = bool(grants and grants[0])

        return ReplicationPrivilegeSet(
            can_login=bool(can_login),
            can_replicate=bool(can_replicate),
            is_superuser=bool(is_superuser),
            has_rewind_grants=has_rewind_grants,
        )
