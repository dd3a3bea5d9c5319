"""pgnode-py: Per-node reconciliation core for replicated PostgreSQL clusters."""

__version__ = "0.1.0"

from pgnode.context import ReconcilerContext
from pgnode.domain.settings import InstanceManagerSettings
from pgnode.domain.events import OrchestrationEvent
from pgnode.domain.exceptions import PgNodeConfigError, PgNodeError
from pgnode.usecases.event_dispatcher import EventDispatcher
from pgnode.usecases.settings_parser import SettingsParser
from pgnode.usecases.supervisor import InstanceSupervisor

__all__ = [
    "ReconcilerContext",
    "InstanceManagerSettings",
    "OrchestrationEvent",
    "PgNodeConfigError",
    "PgNodeError",
    "EventDispatcher",
    "SettingsParser",
    "InstanceSupervisor",
]
