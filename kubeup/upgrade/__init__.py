"""Kubernetes node upgrade decisions."""

from .pipeline import MutationPipeline
from .planner import build_steps, plan_upgrade, select_path
from .status import compute_update_status, update_status
from .tolerance import all_worker_nodes_tolerate_version
from .versions import KUBERNETES_VERSIONS, latest_version, next_available_version

__all__ = [
    "MutationPipeline",
    "build_steps",
    "plan_upgrade",
    "select_path",
    "compute_update_status",
    "update_status",
    "all_worker_nodes_tolerate_version",
    "KUBERNETES_VERSIONS",
    "latest_version",
    "next_available_version",
]
