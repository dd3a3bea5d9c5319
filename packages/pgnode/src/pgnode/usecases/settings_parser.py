"""Settings parser use case for the instance manager."""

from __future__ import annotations

import dataclasses
from typing import Any, Mapping

import yaml

from pgnode.domain.exceptions import PgNodeConfigError
from pgnode.domain.settings import InstanceManagerSettings

# Sections of the YAML document and the settings fields they map to
_SECTIONS: dict[str, dict[str, str]] = {
    "instance": {
        "pod_name": "pod_name",
        "namespace": "namespace",
        "cluster_name": "cluster_name",
        "pgdata": "pgdata",
    },
    "engine": {
        "conninfo": "superuser_conninfo",
        "pg_ctl": "pg_ctl_path",
    },
    "replication": {
        "user": "replication_user",
    },
    "certificates": {
        "dir": "certificate_dir",
    },
    "api": {
        "group": "api_group",
        "version": "api_version",
    },
    "timing": {
        "wal_wait_interval": "wal_wait_interval",
        "wal_wait_timeout": "wal_wait_timeout",
        "startup_probe_interval": "startup_probe_interval",
        "startup_probe_max_attempts": "startup_probe_max_attempts",
        "status_update_retries": "status_update_retries",
        "status_update_backoff": "status_update_backoff",
    },
}

_INT_FIELDS = frozenset({"startup_probe_max_attempts", "status_update_retries"})
_FLOAT_FIELDS = frozenset(
    {
        "wal_wait_interval",
        "wal_wait_timeout",
        "startup_probe_interval",
        "status_update_backoff",
    }
)
_NULLABLE_FIELDS = frozenset({"wal_wait_timeout"})


class SettingsParser:
    """Parses the instance manager YAML document into settings.

    Example document::

        instance:
          pod_name: cluster-example-1
          namespace: default
          cluster_name: cluster-example
          pgdata: /var/lib/postgresql/data/pgdata
        timing:
          wal_wait_timeout: 300

    Identity fields missing from the document are taken from
    ``environment`` (see EnvironmentIdentityResolver); the document wins
    when both provide a value.
    """

    def parse(
        self, yaml_str: str, environment: Mapping[str, str] | None = None
    ) -> InstanceManagerSettings:
        """Parse a YAML document to settings.

        Args:
            yaml_str: YAML document. An empty document is allowed when the
                     environment provides the identity.
            environment: Identity fields resolved from the environment.

        Returns:
            InstanceManagerSettings domain object

        Raises:
            PgNodeConfigError: If YAML is invalid, has unknown keys, wrong
                              types, or required fields are missing.
        """
        try:
            config = yaml.safe_load(yaml_str)
        except yaml.YAMLError as e:
            raise PgNodeConfigError(f"Invalid YAML: {e}") from e

        if config is None:
            config = {}
        if not isinstance(config, dict):
            raise PgNodeConfigError("Config must be a dictionary")

        values: dict[str, Any] = dict(environment or {})
        for section, value in config.items():
            values.update(self._parse_section(section, value))

        missing = [
            f.name
            for f in dataclasses.fields(InstanceManagerSettings)
            if f.default is dataclasses.MISSING and f.name not in values
        ]
        if missing:
            raise PgNodeConfigError(
                f"Missing required field in config: {', '.join(missing)}"
            )

        return InstanceManagerSettings(**values)

    def _parse_section(self, section: str, value: Any) -> dict[str, Any]:
        if section not in _SECTIONS:
            raise PgNodeConfigError(f"Unknown config section: {section!r}")
        if not isinstance(value, dict):
            raise PgNodeConfigError(f"Config section {section!r} must be a dictionary")

        keys = _SECTIONS[section]
        parsed: dict[str, Any] = {}
        for key, raw in value.items():
            if key not in keys:
                raise PgNodeConfigError(f"Unknown key {section}.{key}")
            field_name = keys[key]
            parsed[field_name] = self._coerce(f"{section}.{key}", field_name, raw)
        return parsed

    @staticmethod
    def _coerce(path: str, field_name: str, raw: Any) -> Any:
        if raw is None and field_name in _NULLABLE_FIELDS:
            return None
        # bool is an int subclass; reject it everywhere
        if isinstance(raw, bool):
            raise PgNodeConfigError(f"{path} must not be a boolean")
        if field_name in _INT_FIELDS:
            if not isinstance(raw, int):
                raise PgNodeConfigError(f"{path} must be an integer, got {raw!r}")
            return raw
        if field_name in _FLOAT_FIELDS:
            if not isinstance(raw, (int, float)):
                raise PgNodeConfigError(f"{path} must be a number, got {raw!r}")
            return float(raw)
        if not isinstance(raw, str):
            raise PgNodeConfigError(f"{path} must be a string, got {raw!r}")
        return raw
