"""Test upgrade decision models."""

from kubeup.model.cluster import NodeRole
from kubeup.model.deployment import (
    INSTALL_BASE_PACKAGES,
    RESTART_SERVICES,
    KubernetesBaseOSConfiguration,
    MutationStep,
)
from kubeup.model.upgrade import NodeVersionInfo, NodeVersionInfoUpdate, PlanOutcome, UpgradePlan
from kubeup.model.version import ClusterVersion


def info(name, role, kubelet, api_server=None):
    return NodeVersionInfo(
        node_name=name,
        role=role,
        kubelet_version=ClusterVersion.parse(kubelet),
        api_server_version=ClusterVersion.parse(api_server) if api_server else None,
    )


def control_plane(name, current, target):
    return info(name, NodeRole.CONTROL_PLANE, current, current), info(
        name, NodeRole.CONTROL_PLANE, target, target
    )


class TestIsUpdated:
    def test_control_plane_up_to_date(self):
        """Test control-plane node whose versions match their targets."""
        current, update = control_plane("master-0", "1.30.14", "1.30.14")
        state = NodeVersionInfoUpdate(current=current, update=update, control_plane=[current])

        assert state.is_updated() is True

    def test_control_plane_api_server_behind(self):
        """Test API server behind its target."""
        current = info("master-0", NodeRole.CONTROL_PLANE, "1.31.13", "1.30.14")
        update = info("master-0", NodeRole.CONTROL_PLANE, "1.31.13", "1.31.13")
        state = NodeVersionInfoUpdate(current=current, update=update)

        assert state.is_updated() is False

    def test_worker_kubelet_behind(self):
        """Test worker kubelet behind its target."""
        state = NodeVersionInfoUpdate(
            current=info("worker-0", NodeRole.WORKER, "1.2.0"),
            update=info("worker-0", NodeRole.WORKER, "1.3.0"),
        )

        assert state.is_updated() is False

    def test_worker_ignores_api_server(self):
        """Test workers only track the kubelet."""
        state = NodeVersionInfoUpdate(
            current=info("worker-0", NodeRole.WORKER, "1.3.0"),
            update=info("worker-0", NodeRole.WORKER, "1.3.0", "1.4.0"),
        )

        assert state.is_updated() is True


class TestFirstControlPlaneNode:
    def test_single_node_behind_is_first(self):
        """Test the only control-plane node behind is the first and others are not."""
        behind_current, behind_update = control_plane("master-0", "1.2.0", "1.3.0")
        others = [control_plane(f"master-{i}", "1.2.0", "1.2.0") for i in (1, 2)]
        snapshot = [behind_current] + [current for current, _ in others]

        behind = NodeVersionInfoUpdate(current=behind_current, update=behind_update, control_plane=snapshot)
        assert behind.is_first_control_plane_node_to_be_upgraded() is True

        for current, update in others:
            state = NodeVersionInfoUpdate(current=current, update=update, control_plane=snapshot)
            assert state.is_first_control_plane_node_to_be_upgraded() is False

    def test_not_first_when_another_node_reached_target(self):
        """Test a node is not first once another control-plane node runs the target."""
        current, update = control_plane("master-1", "1.2.0", "1.3.0")
        upgraded = info("master-0", NodeRole.CONTROL_PLANE, "1.3.0", "1.3.0")
        state = NodeVersionInfoUpdate(current=current, update=update, control_plane=[upgraded, current])

        assert state.is_first_control_plane_node_to_be_upgraded() is False

    def test_not_first_when_another_node_is_ahead(self):
        """Test a node running beyond the target also counts as upgraded."""
        current, update = control_plane("master-1", "1.2.0", "1.3.0")
        ahead = info("master-0", NodeRole.CONTROL_PLANE, "1.3.1", "1.3.1")
        state = NodeVersionInfoUpdate(current=current, update=update, control_plane=[ahead, current])

        assert state.is_first_control_plane_node_to_be_upgraded() is False

    def test_worker_is_never_first(self):
        """Test workers are never first control-plane nodes."""
        state = NodeVersionInfoUpdate(
            current=info("worker-0", NodeRole.WORKER, "1.2.0"),
            update=info("worker-0", NodeRole.WORKER, "1.3.0"),
        )

        assert state.is_first_control_plane_node_to_be_upgraded() is False

    def test_all_nodes_behind_each_may_be_first(self):
        """Test with nobody upgraded yet, each node sees itself as first."""
        pairs = [control_plane(f"master-{i}", "1.2.0", "1.3.0") for i in range(3)]
        snapshot = [current for current, _ in pairs]

        for current, update in pairs:
            state = NodeVersionInfoUpdate(current=current, update=update, control_plane=snapshot)
            assert state.is_first_control_plane_node_to_be_upgraded() is True


class TestMutationStep:
    def test_str_with_packages(self):
        """Test package install steps render their versions."""
        step = MutationStep(
            action=INSTALL_BASE_PACKAGES,
            payload=KubernetesBaseOSConfiguration(kubeadm_version="1.31.13", kubernetes_version="1.30.14"),
        )

        assert str(step) == (
            "kubernetes.install-base-packages (kubeadm 1.31.13, kubernetes 1.30.14)"
        )

    def test_str_without_payload(self):
        """Test steps without payload render their action."""
        assert str(MutationStep(action=RESTART_SERVICES)) == RESTART_SERVICES


class TestUpgradePlan:
    def test_terminal_plans_require_no_mutation(self):
        """Test up-to-date and blocked plans carry no steps."""
        for outcome in (PlanOutcome.UP_TO_DATE, PlanOutcome.BLOCKED):
            plan = UpgradePlan(node_name="master-0", outcome=outcome)
            assert plan.requires_mutation is False
