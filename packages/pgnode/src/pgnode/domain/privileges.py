"""Replication role privileges and the statements that grant them."""

from __future__ import annotations

from dataclasses import dataclass

# Last major version whose pg_rewind needs a superuser connection
LAST_SUPERUSER_REWIND_VERSION = 10

# Function signatures pg_rewind executes on the source server
REWIND_FUNCTIONS: tuple[str, ...] = (
    "pg_catalog.pg_ls_dir(text, boolean, boolean)",
    "pg_catalog.pg_stat_file(text, boolean)",
    "pg_catalog.pg_read_binary_file(text)",
    "pg_catalog.pg_read_binary_file(text, bigint, bigint, boolean)",
)


@dataclass(frozen=True)
class ReplicationPrivilegeSet:
    """Observed privileges of the replication role.

    Attributes:
        can_login: Role has LOGIN.
        can_replicate: Role has REPLICATION.
        is_superuser: Role has SUPERUSER.
        has_rewind_grants: Role may execute every function in REWIND_FUNCTIONS.
    """

    can_login: bool = False
    can_replicate: bool = False
    is_superuser: bool = False
    has_rewind_grants: bool = False

    @property
    def can_stream(self) -> bool:
        """True if the role can open a streaming replication connection."""
        return self.can_login and self.can_replicate


@dataclass(frozen=True)
class RoleStatement:
    """A DDL statement applied to a role.

    The template holds a single ``{role}`` placeholder; adapters substitute it
    with a properly quoted identifier, never by plain string formatting.

    Attributes:
        template: SQL text with a ``{role}`` placeholder.
        role: Unquoted role name.
    """

    template: str
    role: str

    @classmethod
    def create_replication_user(cls, role: str) -> RoleStatement:
        return cls("CREATE USER {role} REPLICATION", role)

    @classmethod
    def grant_login_replication(cls, role: str) -> RoleStatement:
        return cls("ALTER USER {role} LOGIN REPLICATION", role)

    @classmethod
    def grant_superuser(cls, role: str) -> RoleStatement:
        return cls("ALTER USER {role} SUPERUSER", role)

    @classmethod
    def grant_execute(cls, function: str, role: str) -> RoleStatement:
        return cls(f"GRANT EXECUTE ON FUNCTION {function} TO {{role}}", role)

    def __str__(self) -> str:
        return self.template.replace("{role}", self.role)
