"""Upgrade path selection."""

from typing import Callable, Dict, List, Optional, Tuple

from ..k8s.inspector import ClusterInspector
from ..model.deployment import (
    INSTALL_BASE_PACKAGES,
    KUBEADM_UPGRADE_APPLY,
    KUBEADM_UPGRADE_NODE,
    RESTART_SERVICES,
    KubernetesBaseOSConfiguration,
    MutationStep,
    UpgradeConfiguration,
)
from ..model.upgrade import NodeVersionInfoUpdate, PlanOutcome, UpgradePlan
from ..model.version import ClusterVersion
from ..utils.logger import get_logger
from .tolerance import all_worker_nodes_tolerate_version

logger = get_logger(__name__)

# Version field driving the package installs and the kubeadm action for each path
PATH_SEQUENCES: Dict[PlanOutcome, Tuple[str, str]] = {
    PlanOutcome.FIRST_CONTROL_PLANE: ("api_server_version", KUBEADM_UPGRADE_APPLY),
    PlanOutcome.SUBSEQUENT_CONTROL_PLANE: ("kubelet_version", KUBEADM_UPGRADE_NODE),
    PlanOutcome.WORKER: ("kubelet_version", KUBEADM_UPGRADE_NODE),
}


def select_path(
    state: NodeVersionInfoUpdate,
    inspector: ClusterInspector,
    current_cluster_version: ClusterVersion,
) -> Tuple[PlanOutcome, Optional[str]]:
    """Pick the upgrade path for a node.

    Returns the outcome and, for blocked nodes, the reason.
    """
    if state.is_updated():
        return PlanOutcome.UP_TO_DATE, None

    if state.is_first_control_plane_node_to_be_upgraded():
        target = state.update.api_server_version
        if not all_worker_nodes_tolerate_version(inspector, target):
            return PlanOutcome.BLOCKED, f"Not all worker nodes tolerate API server {target}"
        return PlanOutcome.FIRST_CONTROL_PLANE, None

    if state.current.is_control_plane():
        # Checked against the version already running on the upgraded control
        # plane, not against this node's target
        if not all_worker_nodes_tolerate_version(inspector, current_cluster_version):
            return (
                PlanOutcome.BLOCKED,
                f"Not all worker nodes tolerate API server {current_cluster_version}",
            )
        return PlanOutcome.SUBSEQUENT_CONTROL_PLANE, None

    return PlanOutcome.WORKER, None


def build_steps(
    outcome: PlanOutcome,
    state: NodeVersionInfoUpdate,
    kubeadm_config: Optional[str] = None,
) -> List[MutationStep]:
    """Build the ordered mutation steps of an upgrade path."""
    if outcome not in PATH_SEQUENCES:
        return []

    field, upgrade_action = PATH_SEQUENCES[outcome]
    current = str(getattr(state.current, field))
    target = str(getattr(state.update, field))

    payload = None
    if upgrade_action == KUBEADM_UPGRADE_APPLY and kubeadm_config is not None:
        payload = UpgradeConfiguration(kubeadm_config_contents=kubeadm_config)

    return [
        MutationStep(
            action=INSTALL_BASE_PACKAGES,
            payload=KubernetesBaseOSConfiguration(kubeadm_version=target, kubernetes_version=current),
        ),
        MutationStep(action=upgrade_action, payload=payload),
        MutationStep(
            action=INSTALL_BASE_PACKAGES,
            payload=KubernetesBaseOSConfiguration(kubeadm_version=target, kubernetes_version=target),
        ),
        MutationStep(action=RESTART_SERVICES),
    ]


def plan_upgrade(
    state: NodeVersionInfoUpdate,
    inspector: ClusterInspector,
    current_cluster_version: ClusterVersion,
    render_config: Optional[Callable[[NodeVersionInfoUpdate], str]] = None,
) -> UpgradePlan:
    """Select the path for a node and build its steps.

    ``render_config`` produces the kubeadm configuration for the first
    control-plane path and is only called on that path. Without it the
    ``kubeadm.upgrade.apply`` step carries no payload, which is only suitable
    for display.
    """
    outcome, reason = select_path(state, inspector, current_cluster_version)
    logger.info(f"Node {state.current.node_name}: selected path {outcome.value}")

    kubeadm_config = None
    if outcome == PlanOutcome.FIRST_CONTROL_PLANE and render_config is not None:
        kubeadm_config = render_config(state)

    return UpgradePlan(
        node_name=state.current.node_name,
        outcome=outcome,
        steps=build_steps(outcome, state, kubeadm_config),
        reason=reason,
        state=state,
    )
