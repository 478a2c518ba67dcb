"""kubeadm init configuration handling."""

import copy
import ipaddress
from typing import Any, Dict

import yaml

from ..errors import EncodingError
from ..model.version import ClusterVersion
from ..upgrade.versions import component_versions
from ..utils.logger import get_logger

logger = get_logger(__name__)

SUPPORTED_API_VERSIONS = ("kubeadm.k8s.io/v1beta3", "kubeadm.k8s.io/v1beta4")

INIT_CONFIGURATION = "InitConfiguration"
CLUSTER_CONFIGURATION = "ClusterConfiguration"


def new_init_configuration(cluster_configuration: Dict[str, Any]) -> Dict[str, Dict[str, Any]]:
    """Wrap a stored ClusterConfiguration into an init configuration."""
    cluster = copy.deepcopy(cluster_configuration)
    cluster.pop("apiVersion", None)
    cluster.pop("kind", None)
    return {
        INIT_CONFIGURATION: {"nodeRegistration": {}, "localAPIEndpoint": {}},
        CLUSTER_CONFIGURATION: cluster,
    }


def add_target_information(target, init_config: Dict[str, Dict[str, Any]]) -> None:
    """Record the target's node name and advertise address."""
    init = init_config[INIT_CONFIGURATION]
    init.setdefault("nodeRegistration", {})["name"] = target.nodename

    try:
        ipaddress.ip_address(target.target)
    except ValueError:
        logger.debug(f"{target.target} is not an IP address, keeping default advertise address")
        return
    init.setdefault("localAPIEndpoint", {})["advertiseAddress"] = target.target


def set_container_images(
    init_config: Dict[str, Dict[str, Any]], version: ClusterVersion, image_repository: str
) -> None:
    """Point the control-plane images at the releases shipped with ``version``."""
    components = component_versions(version)
    cluster = init_config[CLUSTER_CONFIGURATION]

    cluster["kubernetesVersion"] = f"v{version}"
    cluster["imageRepository"] = image_repository

    etcd = cluster.setdefault("etcd", {})
    if "external" not in etcd:
        etcd.setdefault("local", {})["imageTag"] = components["etcd"]

    cluster.setdefault("dns", {})["imageTag"] = components["coredns"]


def marshal_init_configuration(init_config: Dict[str, Dict[str, Any]], api_version: str) -> bytes:
    """Serialize an init configuration as a multi-document kubeadm YAML."""
    if api_version not in SUPPORTED_API_VERSIONS:
        raise EncodingError(f"Unsupported kubeadm API version: {api_version}")

    documents = []
    for kind in (INIT_CONFIGURATION, CLUSTER_CONFIGURATION):
        document = {"apiVersion": api_version, "kind": kind}
        document.update(init_config.get(kind, {}))
        documents.append(document)

    try:
        contents = yaml.safe_dump_all(documents, default_flow_style=False, sort_keys=False)
    except yaml.YAMLError as e:
        raise EncodingError(f"Failed to marshal kubeadm configuration: {e}") from e

    return contents.encode("utf-8")
