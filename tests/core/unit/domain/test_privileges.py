"""Unit tests for replication role privileges and statements."""

import pytest

from pgnode.domain.privileges import (
    LAST_SUPERUSER_REWIND_VERSION,
    REWIND_FUNCTIONS,
    ReplicationPrivilegeSet,
    RoleStatement,
)


@pytest.mark.tier(1)
@pytest.mark.tra("Domain.Invariant.ReplicationPrivilegeSet")
class TestReplicationPrivilegeSet:
    """Test ReplicationPrivilegeSet."""

    def test_defaults_grant_nothing(self) -> None:
        privileges = ReplicationPrivilegeSet()
        assert privileges.can_stream is False
        assert privileges.is_superuser is False

    @pytest.mark.parametrize(
        "can_login,can_replicate,expected",
        [(True, True, True), (True, False, False), (False, True, False)],
    )
    def test_can_stream_needs_login_and_replication(
        self, can_login: bool, can_replicate: bool, expected: bool
    ) -> None:
        privileges = ReplicationPrivilegeSet(can_login=can_login, can_replicate=can_replicate)
        assert privileges.can_stream is expected

    def test_superuser_rewind_cutoff(self) -> None:
        assert LAST_SUPERUSER_REWIND_VERSION == 10

    def test_four_rewind_functions(self) -> None:
        assert len(REWIND_FUNCTIONS) == 4
        assert all(f.startswith("pg_catalog.") for f in REWIND_FUNCTIONS)


@pytest.mark.tier(1)
@pytest.mark.tra("Domain.Invariant.RoleStatement")
class TestRoleStatement:
    """Test statement templates."""

    def test_create_replication_user(self) -> None:
        statement = RoleStatement.create_replication_user("streaming_replica")
        assert statement.template == "CREATE USER {role} REPLICATION"
        assert str(statement) == "CREATE USER streaming_replica REPLICATION"

    def test_grant_login_replication(self) -> None:
        assert (
            str(RoleStatement.grant_login_replication("r"))
            == "ALTER USER r LOGIN REPLICATION"
        )

    def test_grant_superuser(self) -> None:
        assert str(RoleStatement.grant_superuser("r")) == "ALTER USER r SUPERUSER"

    def test_grant_execute_keeps_role_placeholder(self) -> None:
        statement = RoleStatement.grant_execute(REWIND_FUNCTIONS[0], "r")
        assert statement.template == (
            "GRANT EXECUTE ON FUNCTION "
            "pg_catalog.pg_ls_dir(text, boolean, boolean) TO {role}"
        )
        assert statement.role == "r"
