"""Main CLI entry point using Typer."""

import json
import logging
import signal
import threading
from contextlib import contextmanager
from typing import Iterator, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.progress import BarColumn, MofNCompleteColumn, Progress, SpinnerColumn, TextColumn

from .. import __version__
from ..cloudflare.client import create_client
from ..cloudflare.credentials import CredentialValidationError
from ..cloudflare.errors import CloudflareError, WorkerNotFoundError
from ..models.deletion_plan import DeletionPlan
from ..purge.audit import AuditStorage
from ..purge.index import ScanCancelledError
from ..purge.purger import WorkerPurger
from ..utils.logging import setup_logging
from .config import Config
from .reporter import DeletionReporter

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="cf-delete-worker",
    help="Safely delete Cloudflare Workers and their resources",
    add_completion=False,
)

# Create Rich console for output
console = Console()


def version_callback(value: bool) -> None:
    if value:
        console.print(f"cf-delete-worker version {__version__}")
        raise typer.Exit()


@contextmanager
def cancel_on_interrupt(cancel_event: threading.Event) -> Iterator[None]:
    """Turn Ctrl-C into a cancellation request while the block runs.

    In-flight API calls finish; no new ones are started.
    """
    if threading.current_thread() is not threading.main_thread():
        yield
        return

    def _handler(signum, frame):
        console.print("\n[yellow]Cancelling after in-flight requests finish...[/yellow]")
        cancel_event.set()

    previous = signal.signal(signal.SIGINT, _handler)
    try:
        yield
    finally:
        signal.signal(signal.SIGINT, previous)


def confirm_plan(plan: DeletionPlan) -> bool:
    """Ask the user to approve a plan; may enable deletion of shared resources."""
    count = len(plan.resources_to_delete)
    if not typer.confirm(f"Delete worker '{plan.worker.name}' and up to {count} resource(s)?"):
        return False

    if plan.has_shared_resources:
        shared = plan.shared_resources
        console.print(f"\n[yellow]⚠️  {len(shared)} resource(s) are also used by other workers:[/yellow]")
        for resource in shared:
            console.print(f"  {resource.resource_name}: {', '.join(resource.other_users(plan.worker.name))}")
        plan.delete_shared = typer.confirm("Delete shared resources too?", default=False)

    return True


@app.command()
def delete(
    worker_name: str = typer.Argument(..., help="Name of the worker to delete"),
    account_id: Optional[str] = typer.Option(None, "--account-id", help="Cloudflare account ID"),
    dry_run: bool = typer.Option(False, "--dry-run", "-d", help="Show deletion plan without executing"),
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation prompts (dangerous)"),
    exclusive_only: bool = typer.Option(
        False, "--exclusive-only", help="Only delete resources not shared with other workers"
    ),
    yes: bool = typer.Option(False, "--yes", "-y", help="Answer yes to all prompts"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Minimal output"),
    json_output: bool = typer.Option(False, "--json", help="Output the deletion plan in JSON format"),
    skip_dependency_check: bool = typer.Option(
        False, "--skip-dependency-check", help="Do not scan other workers for shared resources"
    ),
    max_workers: Optional[int] = typer.Option(None, "--max-workers", min=1, help="Parallel binding fetches"),
    no_audit: bool = typer.Option(False, "--no-audit", help="Do not write an audit log"),
    version: Optional[bool] = typer.Option(
        None, "--version", callback=version_callback, is_eager=True, help="Show version and exit"
    ),
):
    """Delete a worker and the resources it exclusively owns."""
    try:
        config = Config.load()
    except ValueError as e:
        console.print(f"✗ {escape(str(e))}", style="bold red")
        raise typer.Exit(code=2)

    if account_id:
        config.account_id = account_id
    if max_workers:
        config.max_workers = max_workers

    log_level = "ERROR" if quiet else ("DEBUG" if verbose else config.log_level)
    setup_logging(level=log_level, verbose=verbose)

    show_progress = not quiet and not json_output

    try:
        credentials = config.credentials()
    except CredentialValidationError as e:
        console.print(f"✗ Authentication failed: {escape(str(e))}", style="bold red")
        raise typer.Exit(code=2)

    audit_storage = None
    if config.audit_enabled and not no_audit:
        try:
            audit_storage = AuditStorage(config.audit_dir or None)
        except OSError as e:
            console.print(f"✗ Cannot use audit log directory: {escape(str(e))}", style="bold red")
            raise typer.Exit(code=2)

    client = create_client(credentials, account_id=config.account_id, api_base=config.api_base, timeout=config.timeout)

    purger = WorkerPurger(client, max_workers=config.max_workers, audit_storage=audit_storage)
    reporter = DeletionReporter(console)
    cancel_event = threading.Event()

    try:
        with cancel_on_interrupt(cancel_event):
            worker, index = _analyze(purger, worker_name, skip_dependency_check, show_progress, cancel_event)

        delete_shared = (force or yes) and not exclusive_only
        plan = purger.plan(worker, index, exclusive_only=exclusive_only, delete_shared=delete_shared)

        if json_output:
            typer.echo(json.dumps(plan.to_dict(), indent=2))
            return

        if not quiet:
            reporter.display_worker(worker)
            reporter.display_plan(plan)

        if dry_run:
            result = purger.execute(plan, dry_run=True)
            if not quiet:
                reporter.display_result(result)
                console.print("[yellow]DRY RUN - No changes were made[/yellow]")
            return

        if not (force or yes) and not confirm_plan(plan):
            console.print("Cancelled")
            raise typer.Exit(code=0)

        with cancel_on_interrupt(cancel_event):
            if show_progress:
                with console.status("Deleting worker and resources..."):
                    result = purger.execute(plan, cancel_event=cancel_event)
            else:
                result = purger.execute(plan, cancel_event=cancel_event)

        if not quiet:
            reporter.display_result(result)

        if not result.success:
            raise typer.Exit(code=1)

    except WorkerNotFoundError:
        console.print(f"✗ Worker '{worker_name}' not found", style="bold red")
        raise typer.Exit(code=2)
    except ScanCancelledError as e:
        console.print(f"✗ {e}. Nothing was deleted.", style="bold red")
        raise typer.Exit(code=130)
    except CloudflareError as e:
        console.print(f"✗ Cloudflare API error: {escape(str(e))}", style="bold red")
        raise typer.Exit(code=2)
    finally:
        client.close()


def _analyze(purger: WorkerPurger, worker_name: str, skip_dependency_check: bool, show_progress: bool, cancel_event):
    """Run the account scan, with a progress bar when output is interactive."""
    if not show_progress:
        return purger.analyze(worker_name, skip_dependency_check=skip_dependency_check, cancel_event=cancel_event)

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task(f"Analyzing worker: {worker_name}", total=None)

        def on_progress(current: int, total: int, name: str) -> None:
            progress.update(task, completed=current, total=total, description=f"Analyzing workers ({name})")

        worker, index = purger.analyze(
            worker_name,
            skip_dependency_check=skip_dependency_check,
            progress_callback=on_progress,
            cancel_event=cancel_event,
        )

    found = len(index) if index is not None else 0
    console.print(f"✓ Scanned account: {found} resource(s) in use", style="green")
    return worker, index


def cli_main():
    """Entry point for console script."""
    app()


if __name__ == "__main__":
    cli_main()
