"""Local PostgreSQL instance adapter.

Status queries go through psycopg on a short-lived connection; process
control (promote, stop, reload) goes through ``pg_ctl``.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Any, Callable

import psycopg

from pgnode.adapters.ports import AdminConnectionPort, PostgresInstancePort
from pgnode.adapters.psycopg_admin_connection import PsycopgAdminConnection
from pgnode.domain.exceptions import EngineOperationError, EngineUnreachableError
from pgnode.domain.instance import InstanceStatus

logger = logging.getLogger(__name__)

IS_PRIMARY_QUERY = "SELECT NOT pg_is_in_recovery()"
WAL_RECEIVER_QUERY = "SELECT count(*) > 0 FROM pg_stat_wal_receiver"
APPLY_LAG_QUERY = (
    "SELECT COALESCE(pg_wal_lsn_diff(pg_last_wal_receive_lsn(), "
    "pg_last_wal_replay_lsn()), 0)"
)
# Before version 10 the WAL functions carried "xlog" names.
LEGACY_APPLY_LAG_QUERY = (
    "SELECT COALESCE(pg_xlog_location_diff(pg_last_xlog_receive_location(), "
    "pg_last_xlog_replay_location()), 0)"
)
# server_version_num of the first release with the renamed functions
WAL_FUNCTIONS_RENAMED_IN = 100000
STATUS_QUERY = (
    "SELECT NOT pg_is_in_recovery(), "
    "EXISTS (SELECT 1 FROM pg_settings WHERE pending_restart)"
)


def apply_lag_query(server_version: int) -> str:
    """Return the apply lag query understood by a server of this version."""
    if server_version < WAL_FUNCTIONS_RENAMED_IN:
        return LEGACY_APPLY_LAG_QUERY
    return APPLY_LAG_QUERY


class PostgresInstance:
    """PostgresInstancePort implementation for the engine on this node."""

    def __init__(
        self,
        pgdata: Path,
        conninfo: str,
        pg_ctl_path: str = "pg_ctl",
        timeout: float | None = None,
    ) -> None:
        """Initialize the adapter.

        Args:
            pgdata: Data directory of the instance.
            conninfo: libpq connection string of a superuser (local socket).
            pg_ctl_path: pg_ctl executable.
            timeout: Optional seconds before a pg_ctl invocation is abandoned.
        """
        self._pgdata = pgdata
        self._conninfo = conninfo
        self._pg_ctl_path = pg_ctl_path
        self._timeout = timeout

    def _query_one(
        self, query: str | Callable[[int], str], operation: str
    ) -> tuple[Any, ...]:
        """Run a single-row query. A callable query is resolved per server version."""
        try:
            with psycopg.connect(self._conninfo, autocommit=True) as conn:
                if callable(query):
                    query = query(conn.info.server_version)
                row = conn.execute(query).fetchone()
        except psycopg.OperationalError as e:
            raise EngineUnreachableError(f"while checking {operation}: {e}", operation) from e
        except psycopg.Error as e:
            raise EngineOperationError(f"while checking {operation}: {e}", operation) from e
        if row is None:
            raise EngineOperationError(f"{operation} query returned no rows", operation)
        return tuple(row)

    def _pg_ctl(self, operation: str, *args: str) -> None:
        command = [self._pg_ctl_path, operation, "-D", str(self._pgdata), *args]
        logger.info("running %s", " ".join(command))
        try:
            subprocess.run(
                command,
                check=True,
                capture_output=True,
                text=True,
                timeout=self._timeout,
            )
        except subprocess.CalledProcessError as e:
            raise EngineOperationError(
                f"pg_ctl {operation} exited with {e.returncode}: {e.stderr.strip()}",
                operation,
            ) from e
        except (OSError, subprocess.TimeoutExpired) as e:
            raise EngineOperationError(f"pg_ctl {operation} failed: {e}", operation) from e

    def is_primary(self) -> bool:
        return bool(self._query_one(IS_PRIMARY_QUERY, "role")[0])

    def is_wal_receiver_active(self) -> bool:
        return bool(self._query_one(WAL_RECEIVER_QUERY, "wal receiver")[0])

    def get_wal_apply_lag(self) -> int:
        return int(self._query_one(apply_lag_query, "apply lag")[0])

    def get_status(self) -> InstanceStatus:
        is_primary, pending_restart = self._query_one(STATUS_QUERY, "status")
        return InstanceStatus(
            is_primary=bool(is_primary), pending_restart=bool(pending_restart)
        )

    def promote_and_wait(self) -> None:
        self._pg_ctl("promote", "-w")

    def shutdown(self) -> None:
        """Fast shutdown; the process manager restarts the instance."""
        self._pg_ctl("stop", "-m", "fast", "-w")

    def reload(self) -> None:
        """Send SIGHUP through pg_ctl. Receipt is not confirmed."""
        self._pg_ctl("reload")

    def connect_admin(self) -> AdminConnectionPort:
        return PsycopgAdminConnection(self._conninfo)


# Runtime protocol check
assert isinstance(PostgresInstance(Path("/"), "dbname=postgres"), PostgresInstancePort)
