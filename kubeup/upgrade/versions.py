"""Kubernetes release catalog."""

from typing import Dict, List, Optional

from ..errors import NodeLookupError
from ..model.version import ClusterVersion

# Latest patch release of each supported minor and the component images kubeadm
# deploys alongside it
KUBERNETES_VERSIONS: Dict[str, Dict[str, str]] = {
    "1.28": {
        "kubernetes": "1.28.15",
        "etcd": "3.5.15-0",
        "coredns": "v1.10.1",
        "pause": "3.9",
    },
    "1.29": {
        "kubernetes": "1.29.15",
        "etcd": "3.5.16-0",
        "coredns": "v1.11.1",
        "pause": "3.9",
    },
    "1.30": {
        "kubernetes": "1.30.14",
        "etcd": "3.5.15-0",
        "coredns": "v1.11.3",
        "pause": "3.9",
    },
    "1.31": {
        "kubernetes": "1.31.13",
        "etcd": "3.5.15-0",
        "coredns": "v1.11.3",
        "pause": "3.10",
    },
    "1.32": {
        "kubernetes": "1.32.9",
        "etcd": "3.5.16-0",
        "coredns": "v1.11.3",
        "pause": "3.10",
    },
    "1.33": {
        "kubernetes": "1.33.5",
        "etcd": "3.5.21-0",
        "coredns": "v1.12.0",
        "pause": "3.10",
    },
    "1.34": {
        "kubernetes": "1.34.1",
        "etcd": "3.6.4-0",
        "coredns": "v1.12.1",
        "pause": "3.10.1",
    },
}


def available_versions() -> List[ClusterVersion]:
    """Return every catalogued release, oldest first."""
    return sorted(ClusterVersion.parse(info["kubernetes"]) for info in KUBERNETES_VERSIONS.values())


def latest_version() -> ClusterVersion:
    """Return the newest catalogued release."""
    return available_versions()[-1]


def next_available_version(current: ClusterVersion) -> Optional[ClusterVersion]:
    """Return the release a cluster at ``current`` upgrades to next.

    A cluster behind the latest patch of its own minor moves to that patch
    first. Otherwise it moves to the following minor. Returns None when
    ``current`` is already the newest release.
    """
    for version in available_versions():
        if version > current:
            return version
    return None


def component_versions(version: ClusterVersion) -> Dict[str, str]:
    """Return the component image tags shipped with a release."""
    info = KUBERNETES_VERSIONS.get(version.minor_version())
    if info is None:
        raise NodeLookupError(f"Kubernetes {version} is not a supported release")
    return info
