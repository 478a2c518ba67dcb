"""Remote actions a target node can run."""

from typing import TYPE_CHECKING, Callable, Dict, List

from ..errors import MutationError, ParseError, TargetIOError
from ..model.deployment import (
    INSTALL_BASE_PACKAGES,
    KUBEADM_UPGRADE_APPLY,
    KUBEADM_UPGRADE_NODE,
    RESTART_SERVICES,
    KubernetesBaseOSConfiguration,
    MutationStep,
    UpgradeConfiguration,
)
from ..model.version import ClusterVersion
from ..utils.logger import get_logger

if TYPE_CHECKING:
    from .target import Target

KUBERNETES_APT_SOURCE = "/etc/apt/sources.list.d/kubernetes.list"
KUBEADM_UPGRADE_CONFIG = "/tmp/kubeadm-upgrade.conf"

logger = get_logger(__name__)


def _run(target: "Target", action: str, command: str) -> str:
    """Run one command for an action, raising MutationError on failure."""
    success, output = target.execute(command)
    if not success:
        raise MutationError(action, f"'{command}' failed on {target.target}", stderr=output)
    return output


def _package_spec(name: str, version: str) -> str:
    return f"{name}={version}-*"


def install_base_packages(target: "Target", step: MutationStep) -> None:
    """Install kubeadm and the kubelet/kubectl pair at the requested versions."""
    payload = step.payload
    if not isinstance(payload, KubernetesBaseOSConfiguration):
        raise MutationError(step.action, "missing package versions")

    try:
        repository_minor = ClusterVersion.parse(payload.kubeadm_version).minor_version()
    except ParseError as e:
        raise MutationError(step.action, str(e)) from e

    packages: List[str] = [
        _package_spec("kubeadm", payload.kubeadm_version),
        _package_spec("kubelet", payload.kubernetes_version),
        _package_spec("kubectl", payload.kubernetes_version),
    ]
    commands = [
        f"sed -i 's|/v[0-9]\\+\\.[0-9]\\+/deb/|/v{repository_minor}/deb/|' {KUBERNETES_APT_SOURCE}",
        "apt-get update -y",
        "apt-mark unhold kubeadm kubelet kubectl",
        "DEBIAN_FRONTEND=noninteractive apt-get install -y --allow-downgrades "
        + " ".join(packages),
        "apt-mark hold kubeadm kubelet kubectl",
    ]
    for command in commands:
        _run(target, step.action, command)


def kubeadm_upgrade_apply(target: "Target", step: MutationStep) -> None:
    """Upgrade the control plane with the supplied kubeadm configuration."""
    payload = step.payload
    if not isinstance(payload, UpgradeConfiguration):
        raise MutationError(step.action, "missing kubeadm configuration")

    try:
        target.upload_file_contents(KUBEADM_UPGRADE_CONFIG, payload.kubeadm_config_contents)
    except TargetIOError as e:
        raise MutationError(step.action, "failed to upload kubeadm configuration", stderr=str(e)) from e

    try:
        _run(target, step.action, f"kubeadm upgrade apply --yes --config {KUBEADM_UPGRADE_CONFIG}")
    finally:
        success, output = target.execute(f"rm -f {KUBEADM_UPGRADE_CONFIG}")
        if not success:
            logger.warning(f"[{target.target}] Could not remove {KUBEADM_UPGRADE_CONFIG}: {output.strip()}")


def kubeadm_upgrade_node(target: "Target", step: MutationStep) -> None:
    """Upgrade the local kubelet configuration and control-plane manifests."""
    _run(target, step.action, "kubeadm upgrade node")


def restart_services(target: "Target", step: MutationStep) -> None:
    """Restart the kubelet so it runs the newly installed binary."""
    _run(target, step.action, "systemctl daemon-reload")
    _run(target, step.action, "systemctl restart kubelet")


# Dictionary mapping action names to their handlers
ACTION_HANDLERS: Dict[str, Callable[["Target", MutationStep], None]] = {
    INSTALL_BASE_PACKAGES: install_base_packages,
    KUBEADM_UPGRADE_APPLY: kubeadm_upgrade_apply,
    KUBEADM_UPGRADE_NODE: kubeadm_upgrade_node,
    RESTART_SERVICES: restart_services,
}
