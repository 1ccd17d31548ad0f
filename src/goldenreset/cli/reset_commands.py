#!/usr/bin/env python3
"""
VM, snapshot and reset commands for the goldenreset CLI.
"""

import questionary
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.table import Table

from goldenreset.cli.utils import (
    build_orchestrator,
    console,
    custom_style,
    human_size,
    is_interactive,
    resolve_vm,
    select_snapshot,
    snapshot_table,
)
from goldenreset.reset.discovery import format_vm_label
from goldenreset.reset.models import ProgressSample
from goldenreset.reset.progress import format_eta


def cmd_vms(args):
    """List VMs under the base path."""
    orch = build_orchestrator(args)
    vms = orch.find_vms()

    table = Table(title=f"VMs under {orch.settings.base_path}")
    table.add_column("#", style="dim", justify="right")
    table.add_column("Name", style="green")
    table.add_column("Definition", style="cyan")
    for index, vm in enumerate(vms, start=1):
        table.add_row(str(index), vm.display_name, str(vm.vmx_path))
    console.print(table)


def cmd_snapshots(args):
    """List snapshots of a VM."""
    orch = build_orchestrator(args)
    vm = resolve_vm(orch, args.vm)
    snapshots = orch.list_snapshots(vm)
    console.print(snapshot_table(vm, snapshots, orch.settings.golden_tag))

    recommended = orch.recommend(snapshots)
    if recommended:
        console.print(f"[cyan]Recommended: {recommended.name}[/]")
    else:
        console.print(f"[dim]No snapshot tagged '{orch.settings.golden_tag}'[/]")


class ProgressRenderer:
    """Render ProgressSample values on a rich progress bar."""

    def __init__(self, progress: Progress, task_id):
        self.progress = progress
        self.task_id = task_id

    def __call__(self, sample: ProgressSample) -> None:
        self.progress.update(
            self.task_id,
            completed=sample.percent,
            description=(
                f"Cloning {human_size(sample.current_bytes)} / {human_size(sample.total_bytes)}"
                f"  ETA {format_eta(sample.eta)}"
            ),
        )


def cmd_reset(args):
    """Reset a VM to a snapshot."""
    orch = build_orchestrator(args)
    vm = resolve_vm(orch, args.vm)
    snapshots = orch.list_snapshots(vm)
    recommended = orch.recommend(snapshots)

    if args.snapshot:
        matches = [s for s in snapshots if s.name == args.snapshot]
        if not matches:
            raise LookupError(f"Snapshot '{args.snapshot}' not found for {vm.vmx_path}")
        snapshot = matches[0]
    elif is_interactive():
        console.print(snapshot_table(vm, snapshots, orch.settings.golden_tag))
        snapshot = select_snapshot(snapshots, orch.settings.golden_tag, recommended)
    elif recommended:
        snapshot = recommended
    else:
        raise LookupError("No --snapshot given and no golden snapshot to default to")

    console.print(f"[bold]VM:[/] {format_vm_label(vm)}")
    console.print(f"[bold]Snapshot:[/] {snapshot.name}")
    console.print(
        "[yellow]The VM will be force-stopped and its directory moved to trash.[/]"
    )
    if not args.yes:
        if not is_interactive() or not questionary.confirm(
            "Proceed with reset?", default=False, style=custom_style
        ).ask():
            console.print("[dim]Cancelled.[/]")
            return

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TextColumn("[progress.percentage]{task.percentage:>3.0f}%"),
        TimeElapsedColumn(),
        console=console,
    ) as progress:
        task = progress.add_task("Measuring source...", total=100)
        outcome = orch.reset(vm, snapshot.name, on_progress=ProgressRenderer(progress, task))

    console.print(f"[green]✅ {vm.name} reset to '{outcome.snapshot_name}'[/]")
    console.print(f"[dim]Previous version kept in {outcome.trash.path}[/]")
