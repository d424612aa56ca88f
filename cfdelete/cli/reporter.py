"""Deletion plan and result display."""

from __future__ import annotations

from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from cfdelete.models.binding import BindingType
from cfdelete.models.deletion_plan import DeletionPlan
from cfdelete.models.deletion_result import DeletionResult, DeletionStatus
from cfdelete.models.resource_usage import RiskLevel
from cfdelete.models.worker import WorkerInfo

RESOURCE_TYPE_LABELS = {
    BindingType.KV: "KV Namespace",
    BindingType.R2: "R2 Bucket",
    BindingType.D1: "D1 Database",
    BindingType.QUEUE: "Queue",
}

RISK_STYLES = {
    RiskLevel.SAFE: "[green]✓ Safe[/green]",
    RiskLevel.CAUTION: "[yellow]⚠ Caution[/yellow]",
    RiskLevel.DANGER: "[red]✗ Danger[/red]",
}


class DeletionReporter:
    """Format and display deletion plans and results."""

    def __init__(self, console: Optional[Console] = None):
        """Initialize deletion reporter.

        Args:
            console: Rich console instance (creates new one if not provided)
        """
        self.console = console or Console()

    def display_worker(self, worker: WorkerInfo) -> None:
        lines = [f"[bold]Worker:[/bold] {worker.name}"]
        if worker.created_on:
            lines.append(f"Created: {worker.created_on.strftime('%Y-%m-%d')}")
        if worker.modified_on:
            lines.append(f"Modified: {worker.modified_on.strftime('%Y-%m-%d')}")
        lines.append(f"Bindings: {len(worker.bindings)}")
        self.console.print(Panel("\n".join(lines), title="📦 Worker Details", style="cyan"))

    def display_plan(self, plan: DeletionPlan) -> None:
        """Display a deletion plan as a table of resources."""
        self.console.print()
        self.console.print(Panel(f"[bold]Deletion Plan[/bold]\nWorker: {plan.worker.name}", style="cyan"))

        if not plan.resources_to_delete:
            self.console.print("[dim]No resources to delete[/dim]")
            self.console.print()
            return

        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("Resource", style="white")
        table.add_column("Type", style="cyan", width=14)
        table.add_column("Also Used By", style="dim")
        table.add_column("Risk", width=12)
        table.add_column("Action", width=8)

        for resource in plan.resources_to_delete:
            others = resource.other_users(plan.worker.name)
            table.add_row(
                resource.resource_name,
                RESOURCE_TYPE_LABELS.get(resource.resource_type, resource.resource_type.value),
                ", ".join(others) if others else "-",
                RISK_STYLES[resource.risk_level],
                "delete" if plan.will_delete(resource) else "[yellow]keep[/yellow]",
            )

        self.console.print(table)

        if plan.has_shared_resources:
            self.console.print(
                f"[yellow]⚠ {len(plan.shared_resources)} resource(s) are used by other workers.[/yellow]"
            )
        if plan.exclusive_only:
            self.console.print("[dim]Exclusive-only mode: shared resources are not included.[/dim]")
        self.console.print()

    def display_result(self, result: DeletionResult) -> None:
        """Display the outcome of a deletion run."""
        if result.dry_run:
            title, style = "Dry Run", "yellow"
        elif result.success:
            title, style = "✓ Deletion Complete", "green"
        else:
            title, style = "✗ Deletion Finished With Errors", "red"

        lines = [f"Worker deleted: {'yes' if result.worker_deleted else 'no'}"]
        lines.append(f"Resources deleted: {len(result.resources_deleted)}")
        lines.append(f"Resources skipped: {len(result.resources_skipped)}")
        self.console.print(Panel("\n".join(lines), title=title, style=style))

        for record in result.records:
            if record.status == DeletionStatus.SUCCEEDED:
                self.console.print(f"  [green]✓[/green] {record.resource_name}")
            elif record.status == DeletionStatus.SKIPPED:
                self.console.print(f"  [yellow]-[/yellow] {record.resource_name} [dim]({record.skip_reason})[/dim]")
            else:
                self.console.print(f"  [red]✗[/red] {record.resource_name}")

        for error in result.errors:
            self.console.print(f"[red]Error:[/red] {escape(str(error))}")
