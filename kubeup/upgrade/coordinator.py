"""Single-node upgrade coordination."""

from typing import Optional

from rich.console import Console

from ..config import Settings
from ..deployments.target import Target
from ..k8s.inspector import ClusterInspector
from ..kubeadm.config import (
    add_target_information,
    marshal_init_configuration,
    new_init_configuration,
    set_container_images,
)
from ..model.cluster import NodeRecord
from ..model.deployment import MutationStep
from ..model.upgrade import (
    NodeVersionInfoUpdate,
    PlanOutcome,
    ResultStatus,
    UpgradePlan,
    UpgradeResult,
)
from ..utils.logger import get_logger
from .pipeline import MutationPipeline
from .planner import plan_upgrade
from .status import compute_update_status
from .versions import latest_version

logger = get_logger(__name__)


class UpgradeCoordinator:
    """Decides whether and how a node is upgraded, then upgrades it.

    Callers must not run two coordinators against the same cluster at once:
    the first-node and worker-skew checks read cluster state without locking.
    """

    def __init__(
        self,
        inspector: ClusterInspector,
        settings: Optional[Settings] = None,
        console: Optional[Console] = None,
        pipeline: Optional[MutationPipeline] = None,
    ):
        self.inspector = inspector
        self.settings = settings or Settings()
        self.console = console or Console()
        self.pipeline = pipeline or MutationPipeline()

    def resolve_identity(self, target: Target) -> NodeRecord:
        """Find the cluster node running on ``target`` and record its name."""
        machine_id = target.download_file_contents(self.settings.machine_id_path).strip()
        node = self.inspector.get_node_with_machine_id(machine_id)
        target.nodename = node.name
        logger.debug(f"{target.target} is node {node.name}")
        return node

    def render_upgrade_configuration(self, target: Target, state: NodeVersionInfoUpdate) -> str:
        """Build the kubeadm configuration for the first control-plane upgrade."""
        self.console.print("Fetching the cluster configuration...")

        init_config = new_init_configuration(self.inspector.get_cluster_configuration())
        add_target_information(target, init_config)
        set_container_images(init_config, state.update.api_server_version, self.settings.image_repository)
        contents = marshal_init_configuration(init_config, self.settings.kubeadm_api_version)
        return contents.decode("utf-8")

    def plan_node(self, node_name: str) -> UpgradePlan:
        """Select the upgrade path of a node without touching it."""
        current_cluster_version = self.inspector.get_current_cluster_version()
        state = compute_update_status(node_name, self.inspector.get_nodes(), current_cluster_version)
        return plan_upgrade(state, self.inspector, current_cluster_version)

    def upgrade_node(self, target: Target) -> UpgradeResult:
        """Upgrade the node behind ``target`` if it needs it and it is safe to."""
        self.resolve_identity(target)

        current_cluster_version = self.inspector.get_current_cluster_version()
        latest = latest_version()
        self.console.print(f"Current Kubernetes cluster version: {current_cluster_version}")
        self.console.print(f"Latest Kubernetes version: {latest}")
        self.console.print()

        state = compute_update_status(
            target.nodename, self.inspector.get_nodes(), current_cluster_version
        )
        result = UpgradeResult(
            node_name=target.nodename,
            status=ResultStatus.UP_TO_DATE,
            current_cluster_version=current_cluster_version,
            latest_version=latest,
        )

        if state.is_updated():
            self.console.print(f"Node {target.nodename} is up to date")
            return result

        plan = plan_upgrade(
            state,
            self.inspector,
            current_cluster_version,
            render_config=lambda s: self.render_upgrade_configuration(target, s),
        )
        result.plan = plan

        if plan.outcome == PlanOutcome.BLOCKED:
            self.console.print(f"[yellow]Upgrade of node {target} deferred:[/yellow] {plan.reason}")
            result.status = ResultStatus.DEFERRED
            return result

        self.console.print(f"Performing node {target} upgrade, please wait...")
        result.applied_steps = self.pipeline.execute(
            target, plan.steps, on_step=self._report_step
        )
        result.status = ResultStatus.UPGRADED

        self.console.print(f"[green]✓[/green] Node {target} successfully upgraded")
        return result

    def _report_step(self, index: int, total: int, step: MutationStep) -> None:
        self.console.print(f"  [{index}/{total}] {step}")
