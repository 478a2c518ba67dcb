"""Test configuration and fixtures."""

import io
from typing import List, Optional
from unittest.mock import Mock

import pytest
from rich.console import Console

from kubeup.errors import NodeLookupError
from kubeup.k8s.inspector import ClusterInspector
from kubeup.model.cluster import NodeRecord, NodeRole
from kubeup.model.version import ClusterVersion


def v(text: str) -> ClusterVersion:
    """Shorthand for parsing a version in tests."""
    return ClusterVersion.parse(text)


def make_node(
    name: str,
    role: NodeRole = NodeRole.WORKER,
    kubelet: str = "1.30.14",
    api_server: Optional[str] = None,
    machine_id: Optional[str] = None,
    address: Optional[str] = None,
) -> NodeRecord:
    """Build a NodeRecord; control-plane nodes default their API server to the kubelet."""
    if role == NodeRole.CONTROL_PLANE and api_server is None:
        api_server = kubelet
    return NodeRecord(
        name=name,
        role=role,
        machine_id=machine_id or f"{name}-machine-id",
        address=address,
        kubelet_version=v(kubelet),
        api_server_version=v(api_server) if api_server else None,
    )


def make_control_plane(name: str, version: str, **kwargs) -> NodeRecord:
    return make_node(name, role=NodeRole.CONTROL_PLANE, kubelet=version, **kwargs)


@pytest.fixture
def node_factory():
    """Factory building worker or control-plane NodeRecords."""
    return make_node


@pytest.fixture
def control_plane_factory():
    """Factory building control-plane NodeRecords."""
    return make_control_plane


@pytest.fixture
def cluster_nodes() -> List[NodeRecord]:
    """A cluster at 1.30.14 with three control-plane nodes and two workers."""
    return [
        make_control_plane("master-0", "1.30.14", address="10.0.0.10"),
        make_control_plane("master-1", "1.30.14", address="10.0.0.11"),
        make_control_plane("master-2", "1.30.14", address="10.0.0.12"),
        make_node("worker-0", kubelet="1.30.14", address="10.0.0.20"),
        make_node("worker-1", kubelet="1.30.14", address="10.0.0.21"),
    ]


@pytest.fixture
def mock_inspector(cluster_nodes):
    """Mock cluster inspector backed by ``cluster_nodes``."""
    inspector = Mock(spec=ClusterInspector)
    inspector.get_nodes = Mock(return_value=cluster_nodes)
    inspector.get_current_cluster_version = Mock(return_value=v("1.30.14"))
    inspector.get_cluster_configuration = Mock(
        return_value={
            "apiVersion": "kubeadm.k8s.io/v1beta3",
            "kind": "ClusterConfiguration",
            "kubernetesVersion": "v1.30.14",
            "clusterName": "kubernetes",
            "controlPlaneEndpoint": "10.0.0.100:6443",
            "etcd": {"local": {"dataDir": "/var/lib/etcd"}},
            "networking": {"podSubnet": "10.244.0.0/16", "serviceSubnet": "10.96.0.0/12"},
        }
    )

    def by_machine_id(machine_id):
        for node in inspector.get_nodes():
            if node.machine_id == machine_id:
                return node
        raise NodeLookupError(f"No node found with machine id {machine_id}")

    inspector.get_node_with_machine_id = Mock(side_effect=by_machine_id)
    return inspector


@pytest.fixture
def quiet_console():
    """Console writing to a buffer instead of the terminal."""
    return Console(file=io.StringIO(), width=200)
