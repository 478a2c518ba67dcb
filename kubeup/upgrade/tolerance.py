"""Worker version skew gate."""

from ..k8s.inspector import ClusterInspector
from ..model.version import ClusterVersion, kubelet_tolerates
from ..utils.logger import get_logger

logger = get_logger(__name__)


def all_worker_nodes_tolerate_version(
    inspector: ClusterInspector, api_server_version: ClusterVersion
) -> bool:
    """Check that every worker kubelet can run against the given API server."""
    intolerant = [
        node
        for node in inspector.get_nodes()
        if not node.is_control_plane and not kubelet_tolerates(node.kubelet_version, api_server_version)
    ]

    for node in intolerant:
        logger.warning(
            f"Worker {node.name} (kubelet {node.kubelet_version}) "
            f"does not tolerate API server {api_server_version}"
        )

    return not intolerant
