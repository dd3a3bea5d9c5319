"""Engine configuration snapshot and restart decision."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping

from pgnode.domain.exceptions import EventDecodeError

# ConfigMap data key holding verbatim host-based authentication rules
HBA_KEY = "postgresHBA"


class RestartDecision(Enum):
    """Outcome of the post-reload restart decision.

    Attributes:
        NONE: Nothing requires a restart.
        RESTART: Restart now (replica, or sole member of the cluster).
        DEFER: Primary of a multi-member cluster; a switchover restarts it later.
    """

    NONE = "none"
    RESTART = "restart"
    DEFER = "defer"


def decide_restart(
    pending_restart: bool, is_primary: bool, instances: int
) -> RestartDecision:
    """Decide whether a configuration change restarts the local engine.

    Args:
        pending_restart: Engine reports parameters waiting for a restart.
        is_primary: Local engine is the primary.
        instances: Number of cluster members.

    Returns:
        The RestartDecision for this combination.
    """
    if not pending_restart:
        return RestartDecision.NONE
    if not is_primary or instances == 1:
        return RestartDecision.RESTART
    return RestartDecision.DEFER


@dataclass(frozen=True)
class ConfigurationSnapshot:
    """Ordered engine parameters plus optional HBA rules.

    Attributes:
        parameters: Parameter name/value pairs in payload order.
        hba: Verbatim pg_hba.conf content, None if the ConfigMap has none.
    """

    parameters: tuple[tuple[str, str], ...]
    hba: str | None = None

    @classmethod
    def from_config_map(cls, obj: Mapping[str, Any]) -> ConfigurationSnapshot:
        """Decode a ConfigMap object.

        Raises:
            EventDecodeError: If ``data`` is not a mapping of strings.
        """
        data = obj.get("data") or {}
        if not isinstance(data, Mapping):
            raise EventDecodeError("config map data is not a mapping")

        parameters: list[tuple[str, str]] = []
        hba: str | None = None
        for key, value in data.items():
            if not isinstance(value, str):
                raise EventDecodeError(
                    f"config map value for {key!r} is not a string: {value!r}"
                )
            if key == HBA_KEY:
                hba = value
            else:
                parameters.append((key, value))
        return cls(parameters=tuple(parameters), hba=hba)

    def render(self) -> str:
        """Render parameters in configuration file syntax.

        Values are single-quoted with embedded quotes and backslashes doubled.
        """
        return "".join(
            f"{name} = {_quote(value)}\n" for name, value in self.parameters
        )


def _quote(value: str) -> str:
    """Quote a parameter value for the configuration file."""
    escaped = value.replace("\\", "\\\\").replace("'", "''")
    return f"'{escaped}'"
