"""Cluster-related models."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel

from .version import ClusterVersion

CONTROL_PLANE_LABELS = (
    "node-role.kubernetes.io/control-plane",
    "node-role.kubernetes.io/master",
)


class NodeRole(str, Enum):
    """Role a node plays in the cluster."""

    CONTROL_PLANE = "control-plane"
    WORKER = "worker"


class NodeRecord(BaseModel):
    """A cluster node as seen through the API server."""

    name: str
    role: NodeRole
    machine_id: str = ""
    address: Optional[str] = None
    kubelet_version: ClusterVersion
    api_server_version: Optional[ClusterVersion] = None

    @property
    def is_control_plane(self) -> bool:
        """Check if node is a control-plane member."""
        return self.role == NodeRole.CONTROL_PLANE
