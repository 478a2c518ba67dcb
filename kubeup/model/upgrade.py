"""Upgrade decision models."""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from .cluster import NodeRole
from .deployment import MutationStep
from .version import ClusterVersion


class NodeVersionInfo(BaseModel):
    """Component versions of a single node."""

    node_name: str
    role: NodeRole
    api_server_version: Optional[ClusterVersion] = None
    kubelet_version: ClusterVersion

    def is_control_plane(self) -> bool:
        return self.role == NodeRole.CONTROL_PLANE


class NodeVersionInfoUpdate(BaseModel):
    """Current and target versions of a node.

    ``control_plane`` holds the current versions of every control-plane node,
    read together with ``current`` so that all first-node decisions made from
    this object agree with each other.
    """

    current: NodeVersionInfo
    update: NodeVersionInfo
    control_plane: List[NodeVersionInfo] = Field(default_factory=list)

    def is_updated(self) -> bool:
        """Check whether every tracked version already matches its target."""
        if self.current.kubelet_version != self.update.kubelet_version:
            return False
        if self.current.is_control_plane():
            return self.current.api_server_version == self.update.api_server_version
        return True

    def is_first_control_plane_node_to_be_upgraded(self) -> bool:
        """Check whether this node would be the first to reach its target.

        True when the node is a control-plane member that still needs an
        upgrade and no control-plane node in the snapshot runs an API server
        at or beyond this node's target version.
        """
        if not self.current.is_control_plane() or self.is_updated():
            return False

        target = self.update.api_server_version
        for info in self.control_plane:
            if info.api_server_version is not None and info.api_server_version.at_least(target):
                return False
        return True


class PlanOutcome(str, Enum):
    """Upgrade path selected for a node."""

    UP_TO_DATE = "up-to-date"
    BLOCKED = "blocked"
    FIRST_CONTROL_PLANE = "first-control-plane"
    SUBSEQUENT_CONTROL_PLANE = "subsequent-control-plane"
    WORKER = "worker"


class UpgradePlan(BaseModel):
    """Outcome of path selection together with the steps to run."""

    node_name: str
    outcome: PlanOutcome
    steps: List[MutationStep] = Field(default_factory=list)
    reason: Optional[str] = None
    state: Optional[NodeVersionInfoUpdate] = None

    @property
    def requires_mutation(self) -> bool:
        return bool(self.steps)


class ResultStatus(str, Enum):
    """How an upgrade call ended."""

    UPGRADED = "upgraded"
    UP_TO_DATE = "up-to-date"
    DEFERRED = "deferred"


class UpgradeResult(BaseModel):
    """Result of upgrading one node."""

    node_name: str
    status: ResultStatus
    plan: Optional[UpgradePlan] = None
    current_cluster_version: ClusterVersion
    latest_version: ClusterVersion
    applied_steps: int = 0
