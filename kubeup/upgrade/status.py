"""Per-node upgrade status."""

from typing import List

from ..errors import NodeLookupError
from ..k8s.inspector import ClusterInspector
from ..model.cluster import NodeRecord
from ..model.upgrade import NodeVersionInfo, NodeVersionInfoUpdate
from ..model.version import ClusterVersion
from ..utils.logger import get_logger
from .versions import next_available_version

logger = get_logger(__name__)


def update_status(node_name: str, inspector: ClusterInspector) -> NodeVersionInfoUpdate:
    """Compute the current and target versions of a node from live cluster state."""
    cluster_version = inspector.get_current_cluster_version()
    nodes = inspector.get_nodes()
    return compute_update_status(node_name, nodes, cluster_version)


def compute_update_status(
    node_name: str, nodes: List[NodeRecord], cluster_version: ClusterVersion
) -> NodeVersionInfoUpdate:
    """Derive a node's upgrade targets from one snapshot of all nodes.

    Control-plane nodes behind the cluster version catch up to it. Once every
    control-plane node runs the cluster version with both its API server and
    its kubelet, control-plane nodes move on to the next available release. Workers follow the oldest API server so a kubelet never
    runs ahead of any control-plane node.
    """
    node = next((n for n in nodes if n.name == node_name), None)
    if node is None:
        raise NodeLookupError(f"Node {node_name} not found")

    control_plane = [_version_info(n) for n in nodes if n.is_control_plane]
    current = _version_info(node)

    if node.is_control_plane:
        target = _control_plane_target(node, nodes, cluster_version)
        update = NodeVersionInfo(
            node_name=node.name,
            role=node.role,
            api_server_version=target,
            kubelet_version=max(target, node.kubelet_version),
        )
    else:
        api_versions = [info.api_server_version for info in control_plane if info.api_server_version]
        target = min(api_versions) if api_versions else cluster_version
        update = NodeVersionInfo(
            node_name=node.name,
            role=node.role,
            kubelet_version=max(target, node.kubelet_version),
        )

    logger.debug(f"Node {node.name}: current {current}, update {update}")
    return NodeVersionInfoUpdate(current=current, update=update, control_plane=control_plane)


def _control_plane_target(
    node: NodeRecord, nodes: List[NodeRecord], cluster_version: ClusterVersion
) -> ClusterVersion:
    # The next release starts only once every control-plane node, this one
    # included, settled on the cluster version
    settled = all(
        n.api_server_version is not None
        and min(n.api_server_version, n.kubelet_version) >= cluster_version
        for n in nodes
        if n.is_control_plane
    )
    if not settled:
        return max(node.api_server_version, cluster_version)
    return next_available_version(node.api_server_version) or node.api_server_version


def _version_info(node: NodeRecord) -> NodeVersionInfo:
    return NodeVersionInfo(
        node_name=node.name,
        role=node.role,
        api_server_version=node.api_server_version,
        kubelet_version=node.kubelet_version,
    )
