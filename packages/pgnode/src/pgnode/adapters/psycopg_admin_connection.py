"""psycopg-based implementation of the AdminConnectionPort."""

from __future__ import annotations

import logging
from typing import Any

import psycopg
from psycopg import sql

from pgnode.adapters.ports import AdminConnectionPort
from pgnode.domain.exceptions import EngineOperationError, EngineUnreachableError
from pgnode.domain.privileges import RoleStatement

logger = logging.getLogger(__name__)


class PsycopgAdminConnection:
    """Lazily connecting administrative connection.

    The handle can be created before the engine accepts connections: the
    first ping() (or query) opens the connection, and a failed attempt is
    reported as EngineUnreachableError so the caller can keep probing.
    Role names are composed with ``psycopg.sql.Identifier``.
    """

    def __init__(self, conninfo: str, connect_timeout: int = 5) -> None:
        """Initialize the handle without connecting.

        Args:
            conninfo: libpq connection string of a superuser.
            connect_timeout: Seconds before a connection attempt gives up.
        """
        self._conninfo = conninfo
        self._connect_timeout = connect_timeout
        self._conn: psycopg.Connection[Any] | None = None

    def _connection(self) -> psycopg.Connection[Any]:
        if self._conn is None or self._conn.closed:
            try:
                self._conn = psycopg.connect(
                    self._conninfo,
                    autocommit=True,
                    connect_timeout=self._connect_timeout,
                )
            except psycopg.OperationalError as e:
                raise EngineUnreachableError(f"cannot connect to the instance: {e}") from e
        return self._conn

    def ping(self) -> None:
        """Run ``SELECT 1``, opening the connection first if needed."""
        conn = self._connection()
        try:
            conn.execute("SELECT 1")
        except psycopg.OperationalError as e:
            self.close()
            raise EngineUnreachableError(f"instance stopped answering: {e}", "ping") from e

    def fetch_one(
        self, query: str, params: tuple[Any, ...] = ()
    ) -> tuple[Any, ...] | None:
        try:
            return self._connection().execute(query, params).fetchone()
        except psycopg.Error as e:
            raise EngineOperationError(f"while running query: {e}", "query") from e

    def execute(self, statement: RoleStatement) -> None:
        """Apply a role statement with the role quoted as an identifier."""
        query = sql.SQL(statement.template).format(role=sql.Identifier(statement.role))
        try:
            self._connection().execute(query)
        except psycopg.Error as e:
            raise EngineOperationError(f"{statement} failed: {e}", "execute") from e
        logger.debug("applied role statement: %s", statement)

    def close(self) -> None:
        if self._conn is not None and not self._conn.closed:
            self._conn.close()
        self._conn = None


# Runtime protocol check
assert isinstance(PsycopgAdminConnection("dbname=postgres"), AdminConnectionPort)
