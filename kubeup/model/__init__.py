"""Data models for kubeup."""

from .cluster import NodeRecord, NodeRole
from .deployment import KubernetesBaseOSConfiguration, MutationStep, UpgradeConfiguration
from .upgrade import (
    NodeVersionInfo,
    NodeVersionInfoUpdate,
    PlanOutcome,
    ResultStatus,
    UpgradePlan,
    UpgradeResult,
)
from .version import ClusterVersion

__all__ = [
    "NodeRecord",
    "NodeRole",
    "KubernetesBaseOSConfiguration",
    "MutationStep",
    "UpgradeConfiguration",
    "NodeVersionInfo",
    "NodeVersionInfoUpdate",
    "PlanOutcome",
    "ResultStatus",
    "UpgradePlan",
    "UpgradeResult",
    "ClusterVersion",
]
