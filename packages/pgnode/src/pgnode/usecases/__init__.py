"""Use cases: Application logic layer."""

from pgnode.usecases.condition_poller import ConditionPoller
from pgnode.usecases.optimistic_updater import (
    OptimisticUpdater,
    UpdateOutcome,
    UpdateStatus,
)
from pgnode.usecases.major_version_reader import MajorVersionReader
from pgnode.usecases.settings_parser import SettingsParser
from pgnode.usecases.file_writer import AtomicFileWriter
from pgnode.usecases.promotion_coordinator import (
    PromotionCoordinator,
    PromotionResult,
    PromotionStep,
)
from pgnode.usecases.demotion_handler import DemotionHandler
from pgnode.usecases.secret_materializer import SecretMaterializer
from pgnode.usecases.config_materializer import ConfigMaterializer
from pgnode.usecases.privilege_provisioner import PrivilegeProvisioner
from pgnode.usecases.cluster_reconciler import ClusterReconciler
from pgnode.usecases.event_dispatcher import EventDispatcher
from pgnode.usecases.supervisor import InstanceSupervisor

__all__ = [
    "ConditionPoller",
    "OptimisticUpdater",
    "UpdateOutcome",
    "UpdateStatus",
    "MajorVersionReader",
    "SettingsParser",
    "AtomicFileWriter",
    "PromotionCoordinator",
    "PromotionResult",
    "PromotionStep",
    "DemotionHandler",
    "SecretMaterializer",
    "ConfigMaterializer",
    "PrivilegeProvisioner",
    "ClusterReconciler",
    "EventDispatcher",
    "InstanceSupervisor",
]
