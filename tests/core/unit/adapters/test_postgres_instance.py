"""Unit tests for PostgresInstance."""

import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

import psycopg
import pytest

from pgnode.adapters.ports import PostgresInstancePort
from pgnode.adapters.postgres_instance import (
    APPLY_LAG_QUERY,
    IS_PRIMARY_QUERY,
    LEGACY_APPLY_LAG_QUERY,
    PostgresInstance,
    apply_lag_query,
)
from pgnode.adapters.psycopg_admin_connection import PsycopgAdminConnection
from pgnode.domain.exceptions import EngineOperationError, EngineUnreachableError

PGDATA = Path("/var/lib/postgresql/data/pgdata")


def engine() -> PostgresInstance:
    return PostgresInstance(PGDATA, "host=/run dbname=postgres", pg_ctl_path="/usr/bin/pg_ctl")


def connect_returning(row: tuple | None, server_version: int = 160002) -> MagicMock:
    connect = MagicMock()
    conn = connect.return_value.__enter__.return_value
    conn.info.server_version = server_version
    conn.execute.return_value.fetchone.return_value = row
    return connect


@pytest.mark.tier(1)
@pytest.mark.tra("Adapter.PostgresInstance")
class TestPostgresInstanceQueries:
    """Status queries over psycopg."""

    def test_satisfies_port_protocol(self) -> None:
        assert isinstance(engine(), PostgresInstancePort)

    def test_is_primary(self) -> None:
        connect = connect_returning((True,))
        with patch("pgnode.adapters.postgres_instance.psycopg.connect", connect):
            assert engine().is_primary() is True

        conn = connect.return_value.__enter__.return_value
        conn.execute.assert_called_once_with(IS_PRIMARY_QUERY)
        assert connect.call_args.kwargs["autocommit"] is True

    def test_apply_lag_is_an_integer(self) -> None:
        connect = connect_returning((1024.0,))
        with patch("pgnode.adapters.postgres_instance.psycopg.connect", connect):
            assert engine().get_wal_apply_lag() == 1024

        conn = connect.return_value.__enter__.return_value
        conn.execute.assert_called_once_with(APPLY_LAG_QUERY)

    def test_apply_lag_on_pre_10_server_uses_xlog_functions(self) -> None:
        connect = connect_returning((0,), server_version=90624)
        with patch("pgnode.adapters.postgres_instance.psycopg.connect", connect):
            assert engine().get_wal_apply_lag() == 0

        conn = connect.return_value.__enter__.return_value
        conn.execute.assert_called_once_with(LEGACY_APPLY_LAG_QUERY)
        assert "pg_xlog_location_diff" in LEGACY_APPLY_LAG_QUERY
        assert "pg_last_xlog_replay_location" in LEGACY_APPLY_LAG_QUERY

    @pytest.mark.parametrize(
        ("server_version", "expected"),
        [
            (90624, LEGACY_APPLY_LAG_QUERY),
            (99999, LEGACY_APPLY_LAG_QUERY),
            (100000, APPLY_LAG_QUERY),
            (130004, APPLY_LAG_QUERY),
        ],
    )
    def test_apply_lag_query_by_server_version(
        self, server_version: int, expected: str
    ) -> None:
        assert apply_lag_query(server_version) == expected

    def test_get_status(self) -> None:
        connect = connect_returning((False, True))
        with patch("pgnode.adapters.postgres_instance.psycopg.connect", connect):
            status = engine().get_status()

        assert status.is_primary is False
        assert status.pending_restart is True

    def test_refused_connection_is_unreachable(self) -> None:
        connect = MagicMock(side_effect=psycopg.OperationalError("connection refused"))
        with patch("pgnode.adapters.postgres_instance.psycopg.connect", connect):
            with pytest.raises(EngineUnreachableError, match="connection refused"):
                engine().is_wal_receiver_active()

    def test_query_error_is_operation_error(self) -> None:
        connect = MagicMock()
        conn = connect.return_value.__enter__.return_value
        conn.execute.side_effect = psycopg.ProgrammingError("no such view")
        with patch("pgnode.adapters.postgres_instance.psycopg.connect", connect):
            with pytest.raises(EngineOperationError) as exc_info:
                engine().is_wal_receiver_active()

        assert not isinstance(exc_info.value, EngineUnreachableError)

    def test_empty_result_is_operation_error(self) -> None:
        with patch(
            "pgnode.adapters.postgres_instance.psycopg.connect", connect_returning(None)
        ):
            with pytest.raises(EngineOperationError, match="no rows"):
                engine().is_primary()

    def test_connect_admin_returns_lazy_handle(self) -> None:
        connect = MagicMock()
        with patch("pgnode.adapters.postgres_instance.psycopg.connect", connect):
            handle = engine().connect_admin()

        assert isinstance(handle, PsycopgAdminConnection)
        connect.assert_not_called()


@pytest.mark.tier(1)
@pytest.mark.tra("Adapter.PostgresInstance")
class TestPostgresInstanceProcessControl:
    """Process control through pg_ctl."""

    @pytest.mark.parametrize(
        "method,expected",
        [
            ("promote_and_wait", ["promote", "-D", str(PGDATA), "-w"]),
            ("shutdown", ["stop", "-D", str(PGDATA), "-m", "fast", "-w"]),
            ("reload", ["reload", "-D", str(PGDATA)]),
        ],
    )
    def test_pg_ctl_command_line(self, method: str, expected: list[str]) -> None:
        with patch("pgnode.adapters.postgres_instance.subprocess.run") as run:
            getattr(engine(), method)()

        assert run.call_args.args[0] == ["/usr/bin/pg_ctl", *expected]
        assert run.call_args.kwargs["check"] is True

    def test_non_zero_exit_raises(self) -> None:
        error = subprocess.CalledProcessError(
            1, ["pg_ctl"], stderr="pg_ctl: server is not in standby mode\n"
        )
        with patch("pgnode.adapters.postgres_instance.subprocess.run", side_effect=error):
            with pytest.raises(EngineOperationError) as exc_info:
                engine().promote_and_wait()

        assert exc_info.value.operation == "promote"
        assert str(exc_info.value) == (
            "pg_ctl promote exited with 1: pg_ctl: server is not in standby mode"
        )

    def test_missing_binary_raises(self) -> None:
        with patch(
            "pgnode.adapters.postgres_instance.subprocess.run",
            side_effect=FileNotFoundError(2, "No such file or directory"),
        ):
            with pytest.raises(EngineOperationError, match="pg_ctl stop failed"):
                engine().shutdown()
