"""Read-side queries against the live cluster."""

from typing import Any, Dict, List, Optional

import yaml

from ..errors import NodeLookupError, ParseError, QueryError
from ..model.cluster import CONTROL_PLANE_LABELS, NodeRecord, NodeRole
from ..model.version import ClusterVersion
from ..utils.logger import get_logger
from .client import K8sClient

logger = get_logger(__name__)

KUBE_SYSTEM = "kube-system"
KUBEADM_CONFIG_MAP = "kubeadm-config"
API_SERVER_SELECTOR = "component=kube-apiserver"


class ClusterInspector:
    """Reads nodes, versions and kubeadm configuration from the cluster.

    Every call queries the API server again; nothing is cached between calls.
    """

    def __init__(self, client: K8sClient):
        self.client = client

    def get_nodes(self) -> List[NodeRecord]:
        """Return every node with its role and component versions."""
        nodes_data = self.client.get_json("nodes")
        api_servers = self._get_api_server_versions()

        nodes = []
        for item in nodes_data.get("items", []):
            nodes.append(self._parse_node(item, api_servers))

        logger.debug(f"Found {len(nodes)} nodes")
        return nodes

    def get_node_with_machine_id(self, machine_id: str) -> NodeRecord:
        """Return the node whose machine id matches."""
        for node in self.get_nodes():
            if node.machine_id == machine_id:
                return node
        raise NodeLookupError(f"No node found with machine id {machine_id}")

    def get_cluster_configuration(self) -> Dict[str, Any]:
        """Return the ClusterConfiguration stored by kubeadm."""
        config_map = self.client.get_json("configmap", KUBEADM_CONFIG_MAP, namespace=KUBE_SYSTEM)
        contents = config_map.get("data", {}).get("ClusterConfiguration")
        if not contents:
            raise QueryError(f"{KUBEADM_CONFIG_MAP} has no ClusterConfiguration")

        try:
            config = yaml.safe_load(contents)
        except yaml.YAMLError as e:
            raise QueryError(f"Failed to parse ClusterConfiguration: {e}") from e

        if not isinstance(config, dict):
            raise QueryError("ClusterConfiguration is not a mapping")
        return config

    def get_current_cluster_version(self) -> ClusterVersion:
        """Return the Kubernetes version recorded in the kubeadm configuration."""
        config = self.get_cluster_configuration()
        version = config.get("kubernetesVersion")
        if not version:
            raise QueryError("ClusterConfiguration has no kubernetesVersion")
        return ClusterVersion.parse_git_version(version)

    def _get_api_server_versions(self) -> Dict[str, ClusterVersion]:
        """Map node names to the version of their kube-apiserver static pod."""
        pods = self.client.get_json("pods", namespace=KUBE_SYSTEM, selector=API_SERVER_SELECTOR)

        versions = {}
        for pod in pods.get("items", []):
            node_name = pod.get("spec", {}).get("nodeName")
            version = self._image_version(pod)
            if node_name and version:
                versions[node_name] = version
        return versions

    def _image_version(self, pod: Dict[str, Any]) -> Optional[ClusterVersion]:
        """Extract a version from the kube-apiserver container image tag."""
        for container in pod.get("spec", {}).get("containers", []):
            if container.get("name") != "kube-apiserver":
                continue
            image = container.get("image", "")
            if ":" not in image:
                return None
            try:
                return ClusterVersion.parse_git_version(image.rsplit(":", 1)[1])
            except ParseError:
                logger.warning(f"Unrecognized kube-apiserver image tag: {image}")
                return None
        return None

    def _parse_node(self, node: Dict[str, Any], api_servers: Dict[str, ClusterVersion]) -> NodeRecord:
        """Parse node information."""
        metadata = node.get("metadata", {})
        status = node.get("status", {})
        node_info = status.get("nodeInfo", {})
        name = metadata.get("name", "")

        labels = metadata.get("labels", {}) or {}
        role = (
            NodeRole.CONTROL_PLANE
            if any(label in labels for label in CONTROL_PLANE_LABELS)
            else NodeRole.WORKER
        )

        address = None
        for entry in status.get("addresses", []):
            if entry.get("type") == "InternalIP":
                address = entry.get("address")
                break

        kubelet_version = ClusterVersion.parse_git_version(node_info.get("kubeletVersion", ""))

        api_server_version = None
        if role == NodeRole.CONTROL_PLANE:
            api_server_version = api_servers.get(name)
            if api_server_version is None:
                logger.warning(f"No kube-apiserver pod found on {name}, assuming kubelet version")
                api_server_version = kubelet_version

        return NodeRecord(
            name=name,
            role=role,
            machine_id=node_info.get("machineID", ""),
            address=address,
            kubelet_version=kubelet_version,
            api_server_version=api_server_version,
        )
