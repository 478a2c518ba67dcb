"""Test remote action handlers."""

from unittest.mock import Mock

import pytest

from kubeup.deployments.actions import (
    ACTION_HANDLERS,
    KUBEADM_UPGRADE_CONFIG,
    install_base_packages,
    kubeadm_upgrade_apply,
    restart_services,
)
from kubeup.deployments.target import Target
from kubeup.errors import MutationError, TargetIOError
from kubeup.model.deployment import (
    INSTALL_BASE_PACKAGES,
    KUBEADM_UPGRADE_APPLY,
    KUBEADM_UPGRADE_NODE,
    RESTART_SERVICES,
    KubernetesBaseOSConfiguration,
    MutationStep,
    UpgradeConfiguration,
)


@pytest.fixture
def target():
    node = Mock(spec=Target)
    node.target = "10.0.0.10"
    node.execute = Mock(return_value=(True, ""))
    return node


def commands(target):
    return [c.args[0] for c in target.execute.call_args_list]


class TestActionHandlers:
    def test_every_action_registered(self):
        """Test all pipeline actions have a handler."""
        assert set(ACTION_HANDLERS) == {
            INSTALL_BASE_PACKAGES,
            KUBEADM_UPGRADE_APPLY,
            KUBEADM_UPGRADE_NODE,
            RESTART_SERVICES,
        }

    def test_install_base_packages(self, target):
        """Test kubeadm and kubelet are pinned to their own versions."""
        step = MutationStep(
            action=INSTALL_BASE_PACKAGES,
            payload=KubernetesBaseOSConfiguration(kubeadm_version="1.31.13", kubernetes_version="1.30.14"),
        )

        install_base_packages(target, step)

        issued = commands(target)
        assert "/v1.31/deb/" in issued[0]
        install = next(c for c in issued if "apt-get install" in c)
        assert "kubeadm=1.31.13-*" in install
        assert "kubelet=1.30.14-*" in install
        assert "kubectl=1.30.14-*" in install
        assert issued[-1] == "apt-mark hold kubeadm kubelet kubectl"

    def test_install_base_packages_requires_payload(self, target):
        """Test a missing payload is rejected before anything runs."""
        with pytest.raises(MutationError, match="missing package versions"):
            install_base_packages(target, MutationStep(action=INSTALL_BASE_PACKAGES))

        target.execute.assert_not_called()

    def test_install_stops_on_failure(self, target):
        """Test a failing command stops the action."""
        target.execute.side_effect = [(True, ""), (False, "E: Unable to locate package")]
        step = MutationStep(
            action=INSTALL_BASE_PACKAGES,
            payload=KubernetesBaseOSConfiguration(kubeadm_version="1.31.13", kubernetes_version="1.31.13"),
        )

        with pytest.raises(MutationError) as exc_info:
            install_base_packages(target, step)

        assert exc_info.value.action == INSTALL_BASE_PACKAGES
        assert "Unable to locate package" in exc_info.value.stderr
        assert target.execute.call_count == 2

    def test_kubeadm_upgrade_apply_uploads_config(self, target):
        """Test the configuration is uploaded before kubeadm runs."""
        step = MutationStep(
            action=KUBEADM_UPGRADE_APPLY,
            payload=UpgradeConfiguration(kubeadm_config_contents="kind: InitConfiguration\n"),
        )

        kubeadm_upgrade_apply(target, step)

        target.upload_file_contents.assert_called_once_with(
            KUBEADM_UPGRADE_CONFIG, "kind: InitConfiguration\n"
        )
        assert commands(target) == [
            f"kubeadm upgrade apply --yes --config {KUBEADM_UPGRADE_CONFIG}",
            f"rm -f {KUBEADM_UPGRADE_CONFIG}",
        ]

    def test_kubeadm_upgrade_apply_upload_failure(self, target):
        """Test an upload failure surfaces as a MutationError before kubeadm runs."""
        target.upload_file_contents.side_effect = TargetIOError("Failed to write /tmp/x: disk full")
        step = MutationStep(
            action=KUBEADM_UPGRADE_APPLY,
            payload=UpgradeConfiguration(kubeadm_config_contents="kind: InitConfiguration\n"),
        )

        with pytest.raises(MutationError) as exc_info:
            kubeadm_upgrade_apply(target, step)

        assert exc_info.value.action == KUBEADM_UPGRADE_APPLY
        assert "disk full" in exc_info.value.stderr
        target.execute.assert_not_called()

    def test_kubeadm_upgrade_apply_cleans_up_on_failure(self, target):
        """Test the uploaded configuration is removed even when kubeadm fails."""
        target.execute.side_effect = [(False, "[ERROR] preflight"), (True, "")]
        step = MutationStep(
            action=KUBEADM_UPGRADE_APPLY,
            payload=UpgradeConfiguration(kubeadm_config_contents="kind: InitConfiguration\n"),
        )

        with pytest.raises(MutationError) as exc_info:
            kubeadm_upgrade_apply(target, step)

        assert "preflight" in exc_info.value.stderr
        assert commands(target)[-1] == f"rm -f {KUBEADM_UPGRADE_CONFIG}"

    def test_kubeadm_upgrade_apply_requires_config(self, target):
        """Test kubeadm upgrade apply without configuration fails."""
        with pytest.raises(MutationError, match="missing kubeadm configuration"):
            kubeadm_upgrade_apply(target, MutationStep(action=KUBEADM_UPGRADE_APPLY))

    def test_restart_services(self, target):
        """Test the kubelet is restarted after a daemon reload."""
        restart_services(target, MutationStep(action=RESTART_SERVICES))

        assert commands(target) == ["systemctl daemon-reload", "systemctl restart kubelet"]
