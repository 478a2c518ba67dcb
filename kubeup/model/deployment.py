"""Remote mutation step models."""

from typing import Optional, Union

from pydantic import BaseModel

INSTALL_BASE_PACKAGES = "kubernetes.install-base-packages"
KUBEADM_UPGRADE_APPLY = "kubeadm.upgrade.apply"
KUBEADM_UPGRADE_NODE = "kubeadm.upgrade.node"
RESTART_SERVICES = "kubernetes.restart-services"


class KubernetesBaseOSConfiguration(BaseModel):
    """Package versions to install on a node."""

    kubeadm_version: str
    kubernetes_version: str


class UpgradeConfiguration(BaseModel):
    """Marshaled kubeadm configuration for ``kubeadm upgrade apply``."""

    kubeadm_config_contents: str


StepPayload = Union[KubernetesBaseOSConfiguration, UpgradeConfiguration]


class MutationStep(BaseModel):
    """One named remote action with an optional payload."""

    action: str
    payload: Optional[StepPayload] = None

    class Config:
        frozen = True

    def __str__(self) -> str:
        if isinstance(self.payload, KubernetesBaseOSConfiguration):
            return (
                f"{self.action} (kubeadm {self.payload.kubeadm_version}, "
                f"kubernetes {self.payload.kubernetes_version})"
            )
        return self.action
