"""Main CLI interface using Typer."""

from pathlib import Path
from typing import Callable, Dict, Optional

import typer
from rich.console import Console
from rich.table import Table

from ..config import Settings, load_settings
from ..deployments import Target
from ..k8s import ClusterInspector, K8sClient
from ..model.upgrade import PlanOutcome, ResultStatus, UpgradePlan, UpgradeResult
from ..upgrade.coordinator import UpgradeCoordinator
from ..upgrade.versions import KUBERNETES_VERSIONS
from ..utils.logger import get_logger, set_log_level

# Create CLI app
app = typer.Typer(
    name="kubeup",
    help="Upgrade kubeadm-managed Kubernetes nodes one at a time",
    add_completion=True,
)

console = Console()
logger = get_logger(__name__)


def _format_outcome(outcome: PlanOutcome) -> str:
    """Colour an upgrade path for display."""
    colours = {
        PlanOutcome.UP_TO_DATE: "green",
        PlanOutcome.BLOCKED: "yellow",
    }
    colour = colours.get(outcome, "cyan")
    return f"[{colour}]{outcome.value}[/{colour}]"


def _print_deferred(result: UpgradeResult) -> None:
    console.print(
        f"[yellow]Node {result.node_name} was not upgraded.[/yellow] "
        "Upgrade the remaining worker nodes first, then run apply again."
    )


def _print_upgraded(result: UpgradeResult) -> None:
    console.print(f"Applied [green]{result.applied_steps}[/green] step(s) to {result.node_name}")


def _print_up_to_date(result: UpgradeResult) -> None:
    logger.debug(f"Nothing to do for {result.node_name}")


# Dictionary mapping result statuses to their summary printers
RESULT_PRINTERS: Dict[ResultStatus, Callable[[UpgradeResult], None]] = {
    ResultStatus.UPGRADED: _print_upgraded,
    ResultStatus.UP_TO_DATE: _print_up_to_date,
    ResultStatus.DEFERRED: _print_deferred,
}


def _load(config: Optional[Path], context: Optional[str]) -> Settings:
    settings = load_settings(config)
    if context:
        settings.context = context
    set_log_level(settings.log_level)
    return settings


def _print_plan(plan: UpgradePlan) -> None:
    table = Table(title=f"Upgrade plan for {plan.node_name}", show_header=True)
    table.add_column("Aspect", style="cyan", no_wrap=True)
    table.add_column("Details", style="white")

    if plan.state is not None:
        current, update = plan.state.current, plan.state.update
        table.add_row("Kubelet", f"{current.kubelet_version} -> {update.kubelet_version}")
        if current.is_control_plane():
            table.add_row(
                "API server", f"{current.api_server_version} -> {update.api_server_version}"
            )
    table.add_row("Path", _format_outcome(plan.outcome))
    if plan.reason:
        table.add_row("Reason", plan.reason)
    if plan.steps:
        steps = "\n".join(f"{i}. {step}" for i, step in enumerate(plan.steps, start=1))
        table.add_row("Steps", steps)

    console.print(table)


@app.command()
def apply(
    target: str = typer.Option(..., "--target", "-t", help="Address of the node to upgrade"),
    user: Optional[str] = typer.Option(None, "--user", "-u", help="SSH user"),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="SSH port"),
    sudo: Optional[bool] = typer.Option(
        None, "--sudo/--no-sudo", help="Run remote commands through sudo"
    ),
    context: Optional[str] = typer.Option(
        None, "--context", "-c", help="Kubernetes context to use"
    ),
    config: Optional[Path] = typer.Option(None, "--config", help="Path to a kubeup settings file"),
):
    """Upgrade one node, if it needs it and the cluster allows it."""
    try:
        settings = _load(config, context)

        node = Target(
            target,
            user=user or settings.ssh_user,
            port=port or settings.ssh_port,
            sudo=settings.use_sudo if sudo is None else sudo,
            identity_file=settings.ssh_identity_file,
            timeout=settings.command_timeout,
        )

        client = K8sClient(context=settings.context, timeout=settings.command_timeout)
        inspector = ClusterInspector(client)
        coordinator = UpgradeCoordinator(inspector, settings=settings, console=console)
        result = coordinator.upgrade_node(node)

        RESULT_PRINTERS[result.status](result)

    except Exception as e:
        console.print(f"[red]Error:[/red] {str(e)}")
        raise typer.Exit(1)


@app.command()
def plan(
    node_name: str = typer.Argument(..., help="Name of the node to plan for"),
    context: Optional[str] = typer.Option(
        None, "--context", "-c", help="Kubernetes context to use"
    ),
    config: Optional[Path] = typer.Option(None, "--config", help="Path to a kubeup settings file"),
):
    """Show the upgrade path a node would take, without changing it."""
    try:
        settings = _load(config, context)

        client = K8sClient(context=settings.context, timeout=settings.command_timeout)
        inspector = ClusterInspector(client)
        coordinator = UpgradeCoordinator(inspector, settings=settings, console=console)

        with console.status("[bold green]Reading cluster state..."):
            upgrade_plan = coordinator.plan_node(node_name)

        _print_plan(upgrade_plan)

    except Exception as e:
        console.print(f"[red]Error:[/red] {str(e)}")
        raise typer.Exit(1)


@app.command()
def versions():
    """List the Kubernetes releases kubeup can upgrade to."""
    table = Table(title="Supported Kubernetes Releases", show_header=True)
    table.add_column("Kubernetes", style="cyan", no_wrap=True)
    table.add_column("etcd", style="white")
    table.add_column("CoreDNS", style="white")
    table.add_column("pause", style="white")

    for info in KUBERNETES_VERSIONS.values():
        table.add_row(info["kubernetes"], info["etcd"], info["coredns"], info["pause"])

    console.print(table)


if __name__ == "__main__":
    app()
